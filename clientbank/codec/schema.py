"""
Declarative exchange metadata for record fields.

Records are pydantic models. Each field that takes part in the exchange
format is declared with ``exchange_field()``; ``record_shape()`` turns the
model's fields into an ordered tuple of ``FieldDescriptor`` that both
engines walk.
"""
import types
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel, Field

from clientbank.errors import SchemaError, UnknownEnumValueError

EXCHANGE_EXTRA = "exchange"


class FieldKind(str, Enum):
    """Semantic type of a field's value."""
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    ENUM = "enum"
    RECORD = "record"
    LIST = "list"


SCALAR_KINDS = (FieldKind.TEXT, FieldKind.INTEGER, FieldKind.DECIMAL, FieldKind.DATE, FieldKind.ENUM)


class ExchangeEnum(Enum):
    """Enumeration whose values are the literals written to the stream."""

    def to_exchange(self) -> str:
        return self.value

    @classmethod
    def from_exchange(cls, text: str) -> "ExchangeEnum":
        for member in cls:
            if member.value == text:
                return member
        raise UnknownEnumValueError(text)


def exchange_field(
    key: str = "",
    *,
    default: Any = None,
    default_factory: Any = None,
    section_start: str = "",
    section_end: str = "",
    lines: Optional[int] = None,
    combined: bool = False,
    description: Optional[str] = None,
) -> Any:
    """
    Declare a model field that is read from and written to the stream.

    Args:
        key: Exchange key of the field's ``key=value`` line, empty if the
            field has no line of its own
        default: Default value
        default_factory: Factory for mutable defaults (lists)
        section_start: Marker written before a nested record or each list element
        section_end: Marker written after it; also the sentinel on import
        lines: Split multiline text over at most this many numbered keys
        combined: Render the field with the record's ``combined_label()``
        description: Human-readable label of the field

    Returns:
        pydantic FieldInfo carrying the metadata in ``json_schema_extra``
    """
    extra = {
        EXCHANGE_EXTRA: {
            "key": key,
            "section_start": section_start,
            "section_end": section_end,
            "lines": lines,
            "combined": combined,
        }
    }
    if default_factory is not None:
        return Field(default_factory=default_factory, description=description, json_schema_extra=extra)
    return Field(default=default, description=description, json_schema_extra=extra)


def marker_key(marker: str) -> str:
    """Key a section marker matches on import: trailing line breaks removed."""
    return marker.rstrip("\r\n")


@dataclass(frozen=True)
class FieldDescriptor:
    """Static exchange metadata of one model field."""
    name: str
    key: str
    kind: FieldKind
    value_type: Any
    section_start: str = ""
    section_end: str = ""
    lines: Optional[int] = None
    combined: bool = False

    @property
    def start_key(self) -> str:
        return marker_key(self.section_start)

    @property
    def end_key(self) -> str:
        return marker_key(self.section_end)

    @property
    def is_section(self) -> bool:
        return bool(self.section_start)


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, getattr(types, "UnionType", Union)):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def is_exchange_enum(tp: Any) -> bool:
    """True for classes exposing the to_exchange/from_exchange hook pair."""
    return isinstance(tp, type) and hasattr(tp, "to_exchange") and hasattr(tp, "from_exchange")


def classify(annotation: Any) -> Tuple[FieldKind, Any]:
    """
    Map a field annotation to its semantic kind.

    Returns:
        (kind, value type); for lists the value type is the element type
    """
    annotation = _unwrap_optional(annotation)
    if get_origin(annotation) is list:
        args = get_args(annotation)
        item = _unwrap_optional(args[0]) if args else Any
        return FieldKind.LIST, item
    if not isinstance(annotation, type):
        raise SchemaError(f"unsupported field annotation {annotation!r}")
    if issubclass(annotation, BaseModel):
        return FieldKind.RECORD, annotation
    if is_exchange_enum(annotation):
        return FieldKind.ENUM, annotation
    if issubclass(annotation, bool):
        raise SchemaError("boolean fields have no exchange representation")
    if issubclass(annotation, (Decimal, float)):
        return FieldKind.DECIMAL, annotation
    if issubclass(annotation, int):
        return FieldKind.INTEGER, annotation
    if issubclass(annotation, date):
        return FieldKind.DATE, annotation
    if issubclass(annotation, str):
        return FieldKind.TEXT, annotation
    raise SchemaError(f"unsupported field type {annotation.__name__}")


@lru_cache(maxsize=None)
def record_shape(model_cls: Type[BaseModel]) -> Tuple[FieldDescriptor, ...]:
    """
    Build the ordered field descriptors of a record class.

    Fields declared without ``exchange_field()`` are not part of the shape.
    The result is cached per class and never mutated.
    """
    descriptors = []
    for name, info in model_cls.model_fields.items():
        extra = info.json_schema_extra
        if not isinstance(extra, dict) or EXCHANGE_EXTRA not in extra:
            continue
        meta = extra[EXCHANGE_EXTRA]
        try:
            kind, value_type = classify(info.annotation)
        except SchemaError as e:
            raise SchemaError(f"{model_cls.__name__}.{name}: {e}") from e

        descriptor = FieldDescriptor(
            name=name,
            key=meta.get("key", ""),
            kind=kind,
            value_type=value_type,
            section_start=meta.get("section_start", ""),
            section_end=meta.get("section_end", ""),
            lines=meta.get("lines"),
            combined=bool(meta.get("combined", False)),
        )
        _check_descriptor(model_cls, descriptor)
        descriptors.append(descriptor)
    return tuple(descriptors)


def _check_descriptor(model_cls: Type[BaseModel], d: FieldDescriptor) -> None:
    where = f"{model_cls.__name__}.{d.name}"
    structural = d.kind in (FieldKind.RECORD, FieldKind.LIST)
    if d.section_start and not structural:
        raise SchemaError(f"{where}: section markers need a record or list field")
    if structural and d.key:
        raise SchemaError(f"{where}: a record or list field cannot have an exchange key")
    if d.lines is not None:
        if structural:
            raise SchemaError(f"{where}: multiline split applies to scalar fields only")
        if not isinstance(d.lines, int) or d.lines < 1:
            raise SchemaError(f"{where}: line limit must be a positive integer")
