"""
Parsing of exchange-format input into record trees.

The parser is a recursive descent over the line sequence. Every nesting
level consumes lines from one shared ``LineCursor``, so a parent resumes
exactly after the end marker that finished its child.
"""
import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from clientbank.codec.charset import EncodingType, decode
from clientbank.codec.constants import DATE_FORMAT, ENCODING_LINE, FOOTER, HEADER
from clientbank.codec.registry import DocumentRegistry, ExchangeDocument
from clientbank.codec.schema import FieldDescriptor, FieldKind, record_shape
from clientbank.errors import (
    EncodingNotDeclaredError,
    FieldValueError,
    InvalidDateError,
    InvalidDecimalError,
    InvalidFormatError,
    InvalidIntegerError,
    UnknownEnumValueError,
    UnsupportedTypeError,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

_DATE_RE = re.compile(r"\d{2}\.\d{2}\.\d{4}")
_INTEGER_RE = re.compile(r"[+-]?\d+")
_DECIMAL_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


class FieldRole(Enum):
    """How a line key matched a field descriptor."""
    FIELD = "field"
    SECTION_START = "section_start"
    SECTION_END = "section_end"


class LineCursor:
    """Read position in the line sequence, shared by all nesting levels."""

    def __init__(self, lines: List[str]):
        self.lines = lines
        self.position = 0

    def at_end(self) -> bool:
        return self.position >= len(self.lines)

    def next_line(self) -> str:
        line = self.lines[self.position]
        self.position += 1
        return line

    @property
    def line_number(self) -> int:
        """1-based number of the line consumed last."""
        return self.position


def split_lines(text: str) -> List[str]:
    return text.replace("\r\n", "\n").split("\n")


def detect_encoding(line: str) -> EncodingType:
    """Resolve the encoding selector from a ``Кодировка=<label>`` line."""
    _, sep, value = line.partition("=")
    if not sep:
        raise EncodingNotDeclaredError("encoding not defined")
    try:
        return EncodingType.from_exchange(value)
    except UnknownEnumValueError as e:
        raise EncodingNotDeclaredError(f"encoding not defined: {value!r}") from e


def unmarshal_envelope(
    data: bytes,
    envelope_cls: Type[RecordT],
    registry: Optional[DocumentRegistry] = None,
    encoding: Optional[EncodingType] = None,
) -> RecordT:
    """
    Parse a complete exchange file.

    Args:
        data: Raw file content
        envelope_cls: Root record class
        registry: Document registry for polymorphic document sections
        encoding: Pre-selected encoding; detected from line 3 when None

    Returns:
        Populated envelope instance
    """
    # latin-1 maps every byte, the header and encoding literal are ASCII
    raw_lines = split_lines(data.decode("latin-1"))
    if len(raw_lines) <= ENCODING_LINE:
        raise InvalidFormatError(f"invalid file format: {len(raw_lines)} line(s)")
    if raw_lines[0] != HEADER:
        raise InvalidFormatError(f"file header not found: {raw_lines[0][:40]!r} != {HEADER!r}")

    resolved = encoding if encoding is not None else detect_encoding(raw_lines[ENCODING_LINE])
    logger.debug("Using encoding %s", resolved.value)

    cursor = LineCursor(split_lines(decode(resolved, data)))
    envelope = envelope_cls.model_construct()
    _pin_encoding(envelope, resolved, warn=False)
    unmarshal_into(cursor, envelope, FOOTER, registry)
    _pin_encoding(envelope, resolved, warn=True)
    return envelope


def _pin_encoding(envelope: BaseModel, resolved: EncodingType, warn: bool) -> None:
    # The selector resolved before parsing stays in force for the whole call
    for d in record_shape(type(envelope)):
        if d.kind is FieldKind.ENUM and d.value_type is EncodingType:
            current = getattr(envelope, d.name, None)
            if warn and current is not None and current is not resolved:
                logger.warning(
                    "Stream declares encoding %s, keeping %s", current.value, resolved.value
                )
            setattr(envelope, d.name, resolved)


def unmarshal_into(
    cursor: LineCursor,
    target: BaseModel,
    section_end: str,
    registry: Optional[DocumentRegistry] = None,
) -> None:
    """
    Fill ``target`` from the cursor until ``section_end`` or end of input.

    Unknown keys are skipped. Reaching the end of input before the
    sentinel is accepted; the parse stops with what it has read.
    """
    shape = record_shape(type(target))
    while not cursor.at_end():
        line = cursor.next_line()
        if not line:
            continue

        key, _, value = line.partition("=")
        if section_end and key == section_end:
            return

        match = find_field(shape, key)
        if match is None:
            logger.debug("Skipping unknown key %r at line %d", key, cursor.line_number)
            continue

        descriptor, role = match
        if role is FieldRole.SECTION_START:
            _enter_section(cursor, target, descriptor, value, registry)
        elif role is FieldRole.SECTION_END:
            logger.debug("Skipping stray end marker %r at line %d", key, cursor.line_number)
        else:
            logger.debug("%s=%s", key, value)
            set_field_value(target, descriptor, value, cursor.line_number)

    if section_end:
        logger.warning(
            "End of input reached before %r in %s", section_end, type(target).__name__
        )


def find_field(
    shape: Tuple[FieldDescriptor, ...], key: str
) -> Optional[Tuple[FieldDescriptor, FieldRole]]:
    """Match a line key as field key, section start or section end."""
    if not key:
        return None
    for d in shape:
        if d.key and key == d.key:
            return d, FieldRole.FIELD
        if d.start_key and key == d.start_key:
            return d, FieldRole.SECTION_START
        if d.end_key and key == d.end_key:
            return d, FieldRole.SECTION_END
    return None


def _enter_section(
    cursor: LineCursor,
    target: BaseModel,
    d: FieldDescriptor,
    value: str,
    registry: Optional[DocumentRegistry],
) -> None:
    logger.debug("Entering section %r of %s", d.start_key, type(target).__name__)
    if d.kind is FieldKind.RECORD:
        child = getattr(target, d.name, None)
        if child is None:
            child = d.value_type.model_construct()
            setattr(target, d.name, child)
        unmarshal_into(cursor, child, d.end_key, registry)
        return

    element = _new_element(d, value, registry)
    unmarshal_into(cursor, element, d.end_key, registry)
    items = getattr(target, d.name, None)
    if items is None:
        items = []
        setattr(target, d.name, items)
    items.append(element)


def _new_element(d: FieldDescriptor, label: str, registry: Optional[DocumentRegistry]) -> BaseModel:
    item_type = d.value_type
    if item_type is ExchangeDocument or (registry is not None and registry.is_polymorphic(item_type)):
        if registry is None:
            raise UnsupportedTypeError(f"section {d.start_key!r} needs a document registry")
        return registry.shape_for_label(label).model_construct()
    if isinstance(item_type, type) and issubclass(item_type, BaseModel):
        return item_type.model_construct()
    raise UnsupportedTypeError(f"section {d.start_key!r} must hold records")


def set_field_value(target: BaseModel, d: FieldDescriptor, raw: str, line: Optional[int] = None) -> None:
    """Parse ``raw`` per the field kind and assign it; empty text is a no-op."""
    if raw == "":
        return
    try:
        value = parse_scalar(d.kind, d.value_type, raw)
    except FieldValueError as e:
        e.locate(d.key, line)
        raise
    setattr(target, d.name, value)


def parse_scalar(kind: FieldKind, value_type: Any, raw: str) -> Any:
    if kind is FieldKind.TEXT:
        return raw
    if kind is FieldKind.DATE:
        return parse_date(raw, value_type)
    if kind is FieldKind.INTEGER:
        return parse_integer(raw)
    if kind is FieldKind.DECIMAL:
        number = parse_decimal(raw)
        return float(number) if value_type is float else number
    if kind is FieldKind.ENUM:
        return value_type.from_exchange(raw)
    raise UnsupportedTypeError(f"cannot assign text to a {kind.value} field")


def parse_date(raw: str, value_type: Any = date) -> date:
    """Parse strict ``DD.MM.YYYY``."""
    if not _DATE_RE.fullmatch(raw):
        raise InvalidDateError(raw)
    try:
        parsed = datetime.strptime(raw, DATE_FORMAT)
    except ValueError as e:
        raise InvalidDateError(raw) from e
    if isinstance(value_type, type) and issubclass(value_type, datetime):
        return parsed
    return parsed.date()


def parse_integer(raw: str) -> int:
    if not _INTEGER_RE.fullmatch(raw):
        raise InvalidIntegerError(raw)
    return int(raw)


def parse_decimal(raw: str) -> Decimal:
    if not _DECIMAL_RE.fullmatch(raw):
        raise InvalidDecimalError(raw)
    try:
        return Decimal(raw)
    except InvalidOperation as e:
        raise InvalidDecimalError(raw) from e
