"""Constructors for Google Docs batchUpdate requests and the style palette.

Every request is a plain dict in the exact wire shape the Docs API expects, so
batches can be posted without further translation. Offsets are 1-based
positions in the document body; passing ``index=None`` addresses the end of
the body segment instead.
"""

from typing import Any, Dict, Optional

from .models import SpanStyle

HEADING_FONT_SIZES = {1: 20, 2: 18, 3: 16, 4: 14, 5: 12, 6: 11}
BODY_FONT_SIZE = 11
CODE_FONT_SIZE = 10
CODE_LABEL_FONT_SIZE = 9

LINK_BLUE = (0.06, 0.33, 0.8)


def rgb(red: float, green: float, blue: float) -> Dict[str, Any]:
    """Build an OptionalColor value."""
    return {"color": {"rgbColor": {"red": red, "green": green, "blue": blue}}}


def points(size: float) -> Dict[str, Any]:
    return {"magnitude": size, "unit": "PT"}


def _location(index: Optional[int]) -> Dict[str, Any]:
    if index is None:
        return {"endOfSegmentLocation": {"segmentId": ""}}
    return {"location": {"index": index}}


def insert_text(text: str, index: Optional[int] = None) -> Dict[str, Any]:
    payload = {"text": text}
    payload.update(_location(index))
    return {"insertText": payload}


def insert_table(rows: int, columns: int, index: Optional[int] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"rows": rows, "columns": columns}
    payload.update(_location(index))
    return {"insertTable": payload}


def insert_inline_image(uri: str, index: int) -> Dict[str, Any]:
    return {"insertInlineImage": {"uri": uri, "location": {"index": index}}}


def delete_content_range(start_index: int, end_index: int) -> Dict[str, Any]:
    return {
        "deleteContentRange": {
            "range": {"startIndex": start_index, "endIndex": end_index}
        }
    }


def update_text_style(start_index: int, end_index: int,
                      text_style: Dict[str, Any]) -> Dict[str, Any]:
    """Style a range; the fields mask is derived from the style keys."""
    return {
        "updateTextStyle": {
            "range": {"startIndex": start_index, "endIndex": end_index},
            "textStyle": text_style,
            "fields": ",".join(text_style.keys()),
        }
    }


def replace_all_text(find: str, replacement: str, match_case: bool = True) -> Dict[str, Any]:
    return {
        "replaceAllText": {
            "containsText": {"text": find, "matchCase": match_case},
            "replaceText": replacement,
        }
    }


def request_kind(request: Dict[str, Any]) -> str:
    """Name of the request type, e.g. 'insertText'."""
    return next(iter(request))


def inserted_text(request: Dict[str, Any]) -> str:
    """Text a request adds to the flattened body, '' for non-text requests."""
    if request_kind(request) == "insertText":
        return request["insertText"]["text"]
    return ""


# Style palette

def heading_style(level: int) -> Dict[str, Any]:
    return {
        "bold": True,
        "fontSize": points(HEADING_FONT_SIZES.get(level, BODY_FONT_SIZE)),
        "foregroundColor": rgb(0, 0, 0),
    }


def code_label_style() -> Dict[str, Any]:
    return {
        "bold": True,
        "fontSize": points(CODE_LABEL_FONT_SIZE),
        "foregroundColor": rgb(0.5, 0.5, 0.5),
        "backgroundColor": rgb(1, 1, 1),
    }


def code_content_style() -> Dict[str, Any]:
    return {
        "bold": False,
        "italic": False,
        "fontSize": points(CODE_FONT_SIZE),
        "foregroundColor": rgb(0.2, 0.2, 0.2),
        "backgroundColor": rgb(0.95, 0.95, 0.95),
    }


def paragraph_reset_style() -> Dict[str, Any]:
    return {
        "foregroundColor": rgb(0, 0, 0),
        "bold": False,
        "italic": False,
        "fontSize": points(BODY_FONT_SIZE),
    }


def inline_code_style() -> Dict[str, Any]:
    return {
        "backgroundColor": rgb(0.95, 0.95, 0.95),
        "foregroundColor": rgb(0.8, 0.1, 0.1),
    }


def link_style(url: str) -> Dict[str, Any]:
    return {
        "link": {"url": url},
        "underline": True,
        "foregroundColor": rgb(*LINK_BLUE),
    }


def span_style(style: SpanStyle) -> Dict[str, Any]:
    """Text style for an inline bold, italic or code span."""
    if style == SpanStyle.BOLD:
        return {"bold": True}
    if style == SpanStyle.ITALIC:
        return {"italic": True}
    return inline_code_style()
