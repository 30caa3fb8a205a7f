"""Unit tests for gdocs_client.retry_logic module."""

import pytest
from unittest.mock import patch, MagicMock

from src.gdocs_client.retry_logic import retry_on_transient, as_decorator, _is_transient_error
from src.gdocs_client.errors import (
    APIAccessError,
    APIUnreachableError,
    DocumentNotFoundError,
    PermissionDeniedError,
    RateLimitError,
)


class TestIsTransientError:
    """Test cases for _is_transient_error function."""

    def test_typed_rate_limit_is_transient(self):
        """RateLimitError should always be retried."""
        assert _is_transient_error(RateLimitError("batch_update(1AbC)")) is True

    def test_typed_unreachable_is_transient(self):
        """APIUnreachableError should always be retried."""
        assert _is_transient_error(APIUnreachableError("https://docs.googleapis.com")) is True

    def test_permission_denied_is_not_transient(self):
        """PermissionDeniedError is handled by re-authentication, not retry."""
        assert _is_transient_error(PermissionDeniedError("get_document(1AbC)", 401)) is False

    def test_typed_error_with_429_in_id_is_not_transient(self):
        """A document id that happens to contain 429 must not look like a rate limit."""
        assert _is_transient_error(DocumentNotFoundError("doc429x")) is False

    def test_detects_429_in_message(self):
        """Raw exceptions mentioning 429 are retried."""
        assert _is_transient_error(Exception("HTTP 429 Too Many Requests")) is True

    def test_detects_quota_exceeded_in_message(self):
        assert _is_transient_error(Exception("Quota exceeded for quota metric")) is True

    def test_detects_5xx_response_status(self):
        """Raw exceptions carrying a 5xx response are retried."""
        error = Exception("Server error")
        error.response = MagicMock()
        error.response.status_code = 503
        assert _is_transient_error(error) is True

    def test_returns_false_for_400_status_code(self):
        error = Exception("Bad request")
        error.status_code = 400
        assert _is_transient_error(error) is False

    def test_returns_false_for_plain_error(self):
        assert _is_transient_error(Exception("Something went wrong")) is False


class TestRetryOnTransient:
    """Test cases for retry_on_transient function."""

    def test_success_on_first_attempt(self):
        """retry_on_transient should return result on first successful attempt."""
        mock_func = MagicMock(return_value="success")
        result = retry_on_transient(mock_func, "arg1", kwarg1="value1")

        assert result == "success"
        mock_func.assert_called_once_with("arg1", kwarg1="value1")

    @patch('time.sleep')
    def test_retries_with_exponential_backoff(self, mock_sleep):
        """Transient failures are retried after 1s and 2s."""
        error = RateLimitError("batch_update(1AbC)")
        mock_func = MagicMock(side_effect=[error, error, "success"])

        result = retry_on_transient(mock_func)

        assert result == "success"
        assert mock_func.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    @patch('time.sleep')
    def test_gives_up_after_three_retries(self, mock_sleep):
        """Four failed attempts raise APIAccessError chained to the last error."""
        error = APIUnreachableError("https://docs.googleapis.com")
        mock_func = MagicMock(side_effect=error)

        with pytest.raises(APIAccessError) as exc_info:
            retry_on_transient(mock_func)

        assert mock_func.call_count == 4
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2, 4]
        assert "after 3 retries" in str(exc_info.value)
        assert exc_info.value.__cause__ is error

    @patch('time.sleep')
    def test_non_transient_error_is_raised_immediately(self, mock_sleep):
        """Fatal errors pass through without sleeping."""
        mock_func = MagicMock(side_effect=DocumentNotFoundError("1AbC"))

        with pytest.raises(DocumentNotFoundError):
            retry_on_transient(mock_func)

        mock_func.assert_called_once()
        mock_sleep.assert_not_called()


class TestAsDecorator:
    """Test cases for as_decorator."""

    @patch('time.sleep')
    def test_decorated_function_is_retried(self, mock_sleep):
        calls = []

        @as_decorator
        def flaky(value):
            calls.append(value)
            if len(calls) < 2:
                raise RateLimitError("flaky")
            return value * 2

        assert flaky(21) == 42
        assert calls == [21, 21]
        mock_sleep.assert_called_once_with(1)

    def test_preserves_function_name(self):
        @as_decorator
        def fetch_document():
            return None

        assert fetch_document.__name__ == "fetch_document"
