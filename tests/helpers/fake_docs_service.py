"""In-memory stand-in for the Google Docs API used by coordinator tests.

The document body is kept as a flat list of units, one per index position:
text characters, table structure markers and inline images. Batches are
applied atomically to a copy and swapped in only when every request succeeds,
like the real batchUpdate endpoint.

Table layout follows the service: a newline paragraph precedes an inserted
table, the table, each row and each cell take one index, and every cell starts
with an empty paragraph.
"""

import copy
from typing import Any, Callable, Dict, List, Optional, Tuple
from unittest.mock import Mock

from src.gdocs_client.errors import APIAccessError, DocumentNotFoundError
from src.reconciliation.snapshot import utf16_length

TABLE_START = ("table",)
ROW_START = ("row",)
CELL_START = ("cell",)
TABLE_END = ("table_end",)


def _width(unit) -> int:
    if isinstance(unit, str):
        return utf16_length(unit)
    return 1


class FakeDocsService:
    """Implements the APIWrapper surface the sync engine uses.

    Attributes:
        batches: Every successfully applied batch, in order
        styled: (covered_text, textStyle) for every updateTextStyle applied
        images: URIs of inline images inserted
        fail_next: Exceptions raised (and consumed) by upcoming batch_update calls
        reject: Optional predicate; a batch for which it returns True is
            rejected with APIAccessError
    """

    def __init__(self, document_id: str = "doc1", title: str = "Docs"):
        self.authenticator = Mock()
        self.documents: Dict[str, List[Any]] = {}
        self.titles: Dict[str, str] = {}
        self.batches: List[List[Dict[str, Any]]] = []
        self.styled: List[Tuple[str, Dict[str, Any]]] = []
        self.images: List[str] = []
        self.fail_next: List[Exception] = []
        self.fail_get: List[Exception] = []
        self.reject: Optional[Callable[[List[Dict[str, Any]]], bool]] = None
        self.reset_count = 0
        self.created: List[str] = []
        self._next_id = 1
        self.add_document(document_id, title)

    # Setup helpers

    def add_document(self, document_id: str, title: str = "Docs", text: str = "") -> None:
        self.documents[document_id] = list(text) + ["\n"]
        self.titles[document_id] = title

    def text(self, document_id: str = "doc1") -> str:
        """Visible text: characters only, tables contribute their cell text."""
        return "".join(u for u in self.documents[document_id] if isinstance(u, str))

    # APIWrapper surface

    def reset(self) -> None:
        self.reset_count += 1

    def get_document(self, document_id: str) -> Dict[str, Any]:
        if self.fail_get:
            raise self.fail_get.pop(0)
        if document_id not in self.documents:
            raise DocumentNotFoundError(document_id)
        return self._to_json(document_id)

    def create_document(self, title: str) -> Dict[str, Any]:
        document_id = f"created{self._next_id}"
        self._next_id += 1
        self.add_document(document_id, title)
        self.created.append(document_id)
        return self._to_json(document_id)

    def batch_update(self, document_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not requests:
            return {"documentId": document_id, "replies": []}
        if self.fail_next:
            raise self.fail_next.pop(0)
        if self.reject is not None and self.reject(requests):
            raise APIAccessError("Google Docs API failure during batch_update: rejected")
        if document_id not in self.documents:
            raise DocumentNotFoundError(document_id)

        units = list(self.documents[document_id])
        styled = list(self.styled)
        images = list(self.images)
        for request in requests:
            kind = next(iter(request))
            body = request[kind]
            if kind == "insertText":
                position = self._insert_position(units, body)
                units[position:position] = list(body["text"])
            elif kind == "insertTable":
                position = self._insert_position(units, body)
                units[position:position] = self._table_units(body["rows"], body["columns"])
            elif kind == "insertInlineImage":
                position = self._insert_position(units, body)
                units[position:position] = [("image", body["uri"])]
                images.append(body["uri"])
            elif kind == "deleteContentRange":
                start, end = self._range(units, body["range"])
                del units[start:end]
            elif kind == "updateTextStyle":
                start, end = self._range(units, body["range"])
                covered = "".join(u for u in units[start:end] if isinstance(u, str))
                styled.append((covered, copy.deepcopy(body["textStyle"])))
            elif kind == "replaceAllText":
                units = self._replace_all(units, body["containsText"], body["replaceText"])
            else:
                raise APIAccessError(f"Unsupported request {kind}")

        self.documents[document_id] = units
        self.styled = styled
        self.images = images
        self.batches.append(copy.deepcopy(requests))
        return {"documentId": document_id, "replies": [{} for _ in requests]}

    # Internals

    @staticmethod
    def _table_units(rows: int, columns: int) -> List[Any]:
        units: List[Any] = ["\n", TABLE_START]
        for _ in range(rows):
            units.append(ROW_START)
            for _ in range(columns):
                units.extend([CELL_START, "\n"])
        units.append(TABLE_END)
        return units

    @staticmethod
    def _replace_all(units: List[Any], contains: Dict[str, Any], replacement: str) -> List[Any]:
        find = contains["text"]
        match_case = contains.get("matchCase", False)

        def same(window: List[Any]) -> bool:
            if not all(isinstance(u, str) for u in window):
                return False
            text = "".join(window)
            return text == find if match_case else text.lower() == find.lower()

        result: List[Any] = []
        i = 0
        while i < len(units):
            if find and same(units[i:i + len(find)]):
                result.extend(replacement)
                i += len(find)
            else:
                result.append(units[i])
                i += 1
        return result

    @staticmethod
    def _starts(units: List[Any]) -> List[int]:
        starts = []
        index = 1
        for unit in units:
            starts.append(index)
            index += _width(unit)
        starts.append(index)
        return starts

    def _position_for(self, units: List[Any], index: int) -> int:
        starts = self._starts(units)
        if index in starts:
            return starts.index(index)
        raise APIAccessError(f"Index {index} does not fall on a character boundary")

    def _insert_position(self, units: List[Any], body: Dict[str, Any]) -> int:
        if "endOfSegmentLocation" in body:
            return len(units) - 1
        index = body["location"]["index"]
        if not 1 <= index <= self._starts(units)[-1] - 1:
            raise APIAccessError(f"Index {index} must be less than the end index of the segment")
        return self._position_for(units, index)

    def _range(self, units: List[Any], rng: Dict[str, int]) -> Tuple[int, int]:
        start_index, end_index = rng["startIndex"], rng["endIndex"]
        end_of_body = self._starts(units)[-1]
        if not 1 <= start_index < end_index <= end_of_body:
            raise APIAccessError(
                f"Invalid range [{start_index}, {end_index}) for body ending at {end_of_body}"
            )
        return self._position_for(units, start_index), self._position_for(units, end_index)

    def _to_json(self, document_id: str) -> Dict[str, Any]:
        units = self.documents[document_id]
        starts = self._starts(units)
        content: List[Dict[str, Any]] = [
            {"startIndex": 0, "endIndex": 1, "sectionBreak": {}}
        ]
        position = 0
        while position < len(units):
            if units[position] == TABLE_START:
                element, position = self._table_json(units, starts, position)
            else:
                element, position = self._paragraph_json(units, starts, position)
            content.append(element)
        return {
            "documentId": document_id,
            "title": self.titles[document_id],
            "body": {"content": content},
        }

    def _paragraph_json(self, units, starts, position):
        start = position
        elements = []
        run_start = None
        run_text: List[str] = []

        def flush(end_position):
            if run_start is not None:
                elements.append({
                    "startIndex": starts[run_start],
                    "endIndex": starts[end_position],
                    "textRun": {"content": "".join(run_text), "textStyle": {}},
                })

        while position < len(units):
            unit = units[position]
            if isinstance(unit, str):
                if run_start is None:
                    run_start = position
                run_text.append(unit)
                position += 1
                if unit == "\n":
                    break
            elif unit[0] == "image":
                flush(position)
                run_start, run_text = None, []
                elements.append({
                    "startIndex": starts[position],
                    "endIndex": starts[position] + 1,
                    "inlineObjectElement": {"inlineObjectId": unit[1]},
                })
                position += 1
            else:
                break
        flush(position)
        return {
            "startIndex": starts[start],
            "endIndex": starts[position],
            "paragraph": {"elements": elements},
        }, position

    def _table_json(self, units, starts, position):
        start = position
        position += 1
        rows = []
        while units[position] != TABLE_END:
            row_start = position
            position += 1
            cells = []
            while units[position] == CELL_START:
                cell_start = position
                position += 1
                cell_content = []
                while isinstance(units[position], str) or units[position][0] == "image":
                    paragraph, position = self._paragraph_json(units, starts, position)
                    cell_content.append(paragraph)
                cells.append({
                    "startIndex": starts[cell_start],
                    "endIndex": starts[position],
                    "content": cell_content,
                })
            rows.append({
                "startIndex": starts[row_start],
                "endIndex": starts[position],
                "tableCells": cells,
            })
        position += 1
        return {
            "startIndex": starts[start],
            "endIndex": starts[position],
            "table": {
                "rows": len(rows),
                "columns": len(rows[0]["tableCells"]) if rows else 0,
                "tableRows": rows,
            },
        }, position
