"""Authentication module for Google Docs OAuth credentials.

The OAuth client id and secret are loaded from environment variables using
python-dotenv. User tokens obtained through the installed-app flow are stored
in a JSON token file and refreshed automatically when they expire.
"""

import logging
import os
from pathlib import Path
from typing import NamedTuple, Optional

from dotenv import load_dotenv
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from .errors import InvalidCredentialsError

logger = logging.getLogger(__name__)

SCOPES = ['https://www.googleapis.com/auth/documents']
DEFAULT_TOKEN_PATH = Path('.gdocs-sync') / 'google-tokens.json'


class ClientConfig(NamedTuple):
    """OAuth client settings for the installed-app flow."""
    client_id: str
    client_secret: str


class Authenticator:
    """Loads OAuth client settings and manages user tokens.

    Required environment variables:
        GOOGLE_CLIENT_ID: OAuth client id of a "Desktop app" client
        GOOGLE_CLIENT_SECRET: OAuth client secret

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
    """

    def __init__(self, token_path: Optional[Path] = None):
        """Initialize the authenticator by loading environment variables from .env file.

        Args:
            token_path: Where user tokens are persisted (default:
                .gdocs-sync/google-tokens.json)
        """
        load_dotenv()
        self.token_path = Path(token_path) if token_path else DEFAULT_TOKEN_PATH
        self._credentials: Optional[Credentials] = None

    def get_client_config(self) -> ClientConfig:
        """Get OAuth client settings from environment variables.

        Raises:
            InvalidCredentialsError: If any required setting is missing
        """
        client_id = os.getenv('GOOGLE_CLIENT_ID')
        client_secret = os.getenv('GOOGLE_CLIENT_SECRET')

        missing = []
        if not client_id:
            missing.append('GOOGLE_CLIENT_ID')
        if not client_secret:
            missing.append('GOOGLE_CLIENT_SECRET')

        if missing:
            raise InvalidCredentialsError(
                client_id=client_id if client_id else "unknown",
                reason=f"missing environment variables: {', '.join(missing)}"
            )

        return ClientConfig(client_id=client_id, client_secret=client_secret)  # type: ignore[arg-type]

    def get_credentials(self) -> Credentials:
        """Return valid user credentials, refreshing or re-authenticating as needed.

        Raises:
            InvalidCredentialsError: If client settings are missing or the
                OAuth flow fails
        """
        if self._credentials is not None and self._credentials.valid:
            return self._credentials

        creds = self._credentials
        if creds is None and self.token_path.exists():
            creds = Credentials.from_authorized_user_file(str(self.token_path), SCOPES)

        if creds is not None and not creds.valid and creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                self._save_tokens(creds)
            except RefreshError as e:
                logger.warning(f"Token refresh failed, re-authenticating: {e}")
                creds = None

        if creds is None or not creds.valid:
            return self.authenticate()

        self._credentials = creds
        return creds

    def authenticate(self) -> Credentials:
        """Run the installed-app OAuth flow and persist the resulting tokens.

        Raises:
            InvalidCredentialsError: If client settings are missing or the
                flow fails
        """
        client = self.get_client_config()
        client_config = {
            "installed": {
                "client_id": client.client_id,
                "client_secret": client.client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": ["http://localhost"],
            }
        }
        logger.info("Starting Google OAuth flow in the browser")
        try:
            flow = InstalledAppFlow.from_client_config(client_config, SCOPES)
            creds = flow.run_local_server(port=0)
        except Exception as e:
            raise InvalidCredentialsError(
                client_id=client.client_id, reason=f"OAuth flow failed: {e}"
            ) from e

        self._save_tokens(creds)
        self._credentials = creds
        return creds

    def clear_tokens(self) -> None:
        """Forget cached credentials and delete the token file."""
        self._credentials = None
        if self.token_path.exists():
            self.token_path.unlink()
            logger.info(f"Removed stored tokens at {self.token_path}")

    def _save_tokens(self, creds: Credentials) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(creds.to_json(), encoding='utf-8')
        logger.debug(f"Saved tokens to {self.token_path}")
