"""Serialization of record trees into exchange-format text."""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, List, Sequence

from pydantic import BaseModel

from clientbank.codec.constants import LINE_BREAK
from clientbank.codec.registry import ExchangeDocument
from clientbank.codec.schema import marker_key, record_shape
from clientbank.errors import UnsupportedTypeError

logger = logging.getLogger(__name__)


def marshal(value: Any, section_start: str = "", section_end: str = "") -> str:
    """
    Render a value in exchange format.

    Args:
        value: Scalar, record or list to render
        section_start: Marker written before a record or each list element
        section_end: Marker written after it

    Returns:
        Exchange text; encoding to a code page is the caller's step
    """
    if value is None:
        return ""
    if hasattr(value, "to_exchange"):
        return value.to_exchange()
    if isinstance(value, date):
        return format_date(value)
    if isinstance(value, BaseModel):
        content = marshal_record(value)
        if not section_start and not section_end:
            return content
        return _open_marker(value, section_start) + content + section_end
    if isinstance(value, (list, tuple)):
        return marshal_list(value, section_start, section_end)
    if isinstance(value, bool):
        raise UnsupportedTypeError("unsupported type: bool")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (Decimal, float)):
        return f"{value:.2f}"
    if isinstance(value, str):
        return value
    raise UnsupportedTypeError(f"unsupported type: {type(value).__name__}")


def format_date(value: date) -> str:
    # strftime does not zero-pad years below 1000 everywhere
    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"


def marshal_list(values: Sequence[Any], section_start: str = "", section_end: str = "") -> str:
    """Render every element wrapped in the section markers, in list order."""
    parts = []
    for item in values:
        content = marshal(item)
        parts.append(_open_marker(item, section_start) + content + section_end)
    return "".join(parts)


def _open_marker(item: Any, section_start: str) -> str:
    # Document variants carry their type label on the opening line
    if section_start and isinstance(item, ExchangeDocument):
        label = item.document_type().to_exchange()
        return f"{marker_key(section_start)}={label}{LINE_BREAK}"
    return section_start


def marshal_record(record: BaseModel) -> str:
    """Render the record's exchange fields in declaration order."""
    logger.debug("Marshalling %s", type(record).__name__)
    parts: List[str] = []
    for d in record_shape(type(record)):
        if d.combined and hasattr(record, "combined_label"):
            text = record.combined_label()
        else:
            text = marshal(getattr(record, d.name), d.section_start, d.section_end)

        if d.lines is None or not text:
            parts.append(marshal_field(d.key, text))
        else:
            parts.extend(marshal_multiline(d.key, text, d.lines))
    return "".join(parts)


def marshal_field(key: str, text: str) -> str:
    """Render one ``key=value`` line; keyless content passes through as is."""
    if not key:
        return text
    return f"{key}={text}{LINE_BREAK}"


def marshal_multiline(key: str, text: str, limit: int) -> List[str]:
    """
    Render a multiline value.

    The flattened value comes first under ``key``. Source lines follow under
    ``key1``..``key{limit-1}``; every line from the ``limit``-th on is
    appended, space-prefixed, to a single ``key{limit}`` line.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    out = [marshal_field(key, " ".join(lines))]
    tail = ""
    for number, line in enumerate(lines, start=1):
        if number >= limit:
            tail += " " + line
            continue
        out.append(marshal_field(f"{key}{number}", line))
    if tail:
        out.append(marshal_field(f"{key}{limit}", tail))
    return out
