"""Schema-driven codec for the 1C client-bank exchange format."""
from .charset import EncodingType, decode, encode
from .constants import FOOTER, HEADER, LINE_BREAK
from .marshaller import marshal, marshal_list, marshal_record
from .registry import DocumentRegistry, ExchangeDocument
from .schema import ExchangeEnum, FieldDescriptor, FieldKind, exchange_field, record_shape
from .unmarshaller import LineCursor, unmarshal_envelope, unmarshal_into

__all__ = [
    "EncodingType",
    "decode",
    "encode",
    "FOOTER",
    "HEADER",
    "LINE_BREAK",
    "marshal",
    "marshal_list",
    "marshal_record",
    "DocumentRegistry",
    "ExchangeDocument",
    "ExchangeEnum",
    "FieldDescriptor",
    "FieldKind",
    "exchange_field",
    "record_shape",
    "LineCursor",
    "unmarshal_envelope",
    "unmarshal_into",
]
