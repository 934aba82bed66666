"""Flat source records and the wire format they are parsed from.

The published document is a JSON array of rows:

    ["FOLDER", depth, title]
    ["LINK", depth, url, title]
    ["HR", depth]

Row order is a pre-order walk of the tree; depth is the only other
encoding of the hierarchy.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from ..operations.errors import ParseError, ValidationError

logger = logging.getLogger(__name__)

SENTINEL = ["FOLDER", 0, "Bookmarks Toolbar"]
_SENTINEL_JSON = json.dumps(SENTINEL, separators=(",", ":"))


class RecordType(str, Enum):
    FOLDER = "FOLDER"
    LINK = "LINK"
    HR = "HR"


@dataclass(frozen=True)
class SourceRecord:
    type: RecordType
    depth: int
    title: str = ""
    url: str = ""

    @classmethod
    def folder(cls, depth: int, title: str) -> "SourceRecord":
        return cls(RecordType.FOLDER, depth, title=title)

    @classmethod
    def link(cls, depth: int, url: str, title: str) -> "SourceRecord":
        return cls(RecordType.LINK, depth, title=title, url=url)

    @classmethod
    def separator(cls, depth: int) -> "SourceRecord":
        return cls(RecordType.HR, depth)


def _coerce_depth(value: Any, index: int) -> int:
    """Accept an int or a stringified int, the way the exporter emits both."""
    if isinstance(value, bool):
        raise ParseError(f"Row {index}: depth must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ParseError(f"Row {index}: depth must be an integer, got {value!r}")


def _string_field(row: list, position: int, index: int) -> str:
    value = row[position]
    if not isinstance(value, str):
        raise ParseError(f"Row {index}: field {position} must be a string, got {value!r}")
    return value


def parse_record(row: Any, index: int = 0) -> Optional[SourceRecord]:
    """Parse a single wire row into a SourceRecord.

    Rows with a record type this client does not know are logged and
    skipped (None) so newer exports keep importing.
    """
    if not isinstance(row, list) or len(row) < 2:
        raise ParseError(f"Row {index}: expected a list of at least two items, got {row!r}")

    try:
        record_type = RecordType(row[0])
    except ValueError:
        logger.warning("Skipping row %d with unknown record type %r", index, row[0])
        return None

    depth = _coerce_depth(row[1], index)

    if record_type == RecordType.FOLDER:
        if len(row) < 3:
            raise ParseError(f"Row {index}: FOLDER needs a title")
        return SourceRecord.folder(depth, _string_field(row, 2, index))

    if record_type == RecordType.LINK:
        if len(row) < 4:
            raise ParseError(f"Row {index}: LINK needs a url and a title")
        return SourceRecord.link(depth, _string_field(row, 2, index), _string_field(row, 3, index))

    return SourceRecord.separator(depth)


def parse_document(text: str) -> list:
    """Parse the raw document into a list of rows."""
    try:
        rows = json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise ParseError(f"Document is not valid JSON: {e}") from e

    if not isinstance(rows, list):
        raise ParseError(f"Document must be a JSON array, got {type(rows).__name__}")
    return rows


def is_sentinel(row: Any) -> bool:
    """Check that a row is exactly the canonical toolbar root record."""
    try:
        return json.dumps(row, separators=(",", ":")) == _SENTINEL_JSON
    except (TypeError, ValueError):
        return False


def validate_document(rows: list) -> List[SourceRecord]:
    """Check the sentinel, drop it, and parse the remaining rows.

    Raises:
        ValidationError: The first row is missing or is not the sentinel.
        ParseError: A later row of a known type is malformed.
    """
    if not rows:
        raise ValidationError("Document is empty")
    if not is_sentinel(rows[0]):
        raise ValidationError(f"Unexpected first record {rows[0]!r}, expected {SENTINEL!r}")

    records = (parse_record(row, index) for index, row in enumerate(rows[1:], start=1))
    return [record for record in records if record is not None]
