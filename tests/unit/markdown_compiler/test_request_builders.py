"""Unit tests for markdown_compiler.request_builders module."""

from src.markdown_compiler import request_builders as rb
from src.markdown_compiler.models import SpanStyle
from tests.helpers.fake_docs_service import FakeDocsService


class TestRequestShapes:
    """Requests are emitted in the exact batchUpdate wire shape."""

    def test_insert_text_at_end_of_segment(self):
        assert rb.insert_text("Hi\n") == {
            "insertText": {"text": "Hi\n", "endOfSegmentLocation": {"segmentId": ""}}
        }

    def test_insert_text_at_index(self):
        assert rb.insert_text("A", index=5) == {
            "insertText": {"text": "A", "location": {"index": 5}}
        }

    def test_insert_table(self):
        assert rb.insert_table(2, 3) == {
            "insertTable": {"rows": 2, "columns": 3, "endOfSegmentLocation": {"segmentId": ""}}
        }

    def test_delete_content_range(self):
        assert rb.delete_content_range(1, 9) == {
            "deleteContentRange": {"range": {"startIndex": 1, "endIndex": 9}}
        }

    def test_insert_inline_image(self):
        assert rb.insert_inline_image("https://x.io/a.png", 4) == {
            "insertInlineImage": {"uri": "https://x.io/a.png", "location": {"index": 4}}
        }

    def test_update_text_style_fields_follow_style_keys(self):
        request = rb.update_text_style(3, 8, {"bold": True, "italic": False})

        assert request["updateTextStyle"]["range"] == {"startIndex": 3, "endIndex": 8}
        assert request["updateTextStyle"]["fields"] == "bold,italic"

    def test_replace_all_text(self):
        assert rb.replace_all_text("[[[LINK_0]]]", "Docs") == {
            "replaceAllText": {
                "containsText": {"text": "[[[LINK_0]]]", "matchCase": True},
                "replaceText": "Docs",
            }
        }

    def test_replace_all_text_applied(self):
        service = FakeDocsService()
        service.batch_update("doc1", [rb.insert_text("[[[LINK_0]]] and [[[LINK_0]]]\n")])

        service.batch_update("doc1", [rb.replace_all_text("[[[LINK_0]]]", "Docs")])

        assert service.text() == "Docs and Docs\n\n"

    def test_span_styles(self):
        assert rb.span_style(SpanStyle.BOLD) == {"bold": True}
        assert rb.span_style(SpanStyle.ITALIC) == {"italic": True}
        assert rb.span_style(SpanStyle.CODE) == rb.inline_code_style()


class TestHelpers:
    """request_kind and inserted_text."""

    def test_request_kind(self):
        assert rb.request_kind(rb.insert_table(1, 1)) == "insertTable"

    def test_inserted_text_for_non_text_request(self):
        assert rb.inserted_text(rb.insert_table(1, 1)) == ""
        assert rb.inserted_text(rb.insert_text("abc")) == "abc"


class TestStylePalette:
    """Heading sizes and link styling."""

    def test_heading_sizes_by_level(self):
        assert rb.heading_style(1)["fontSize"] == {"magnitude": 20, "unit": "PT"}
        assert rb.heading_style(3)["fontSize"] == {"magnitude": 16, "unit": "PT"}
        assert rb.heading_style(9)["fontSize"] == {"magnitude": rb.BODY_FONT_SIZE, "unit": "PT"}
        assert rb.heading_style(2)["bold"] is True

    def test_link_style(self):
        style = rb.link_style("https://example.com")

        assert style["link"] == {"url": "https://example.com"}
        assert style["underline"] is True
        assert style["foregroundColor"]["color"]["rgbColor"]["blue"] == rb.LINK_BLUE[2]
