"""Error types raised by the exchange codec."""
from typing import Optional


class ExchangeError(Exception):
    """Base class for every failure of a marshal or unmarshal call."""


class SchemaError(ExchangeError):
    """A record class declares its exchange fields inconsistently."""


class InvalidFormatError(ExchangeError):
    """Input is too short or does not start with the exchange header."""


class EncodingNotDeclaredError(ExchangeError):
    """No recognised encoding selector was given or found in the stream."""


class EncodingError(ExchangeError):
    """Bytes could not be transcoded with the selected code page."""


class UnknownDocumentTypeError(ExchangeError):
    """A document section carries a label that is not registered."""

    def __init__(self, label: str):
        super().__init__(f"document type not found by label {label!r}")
        self.label = label


class UnsupportedTypeError(ExchangeError):
    """A value has no serialization path."""


class EmptyDocumentSetError(ExchangeError):
    """Export was attempted without any documents."""


class FieldValueError(ExchangeError):
    """A scalar field value could not be parsed."""

    kind = "value"

    def __init__(self, value: str, key: str = "", line: Optional[int] = None):
        self.value = value
        self.key = key
        self.line = line
        super().__init__(self._message())

    def _message(self) -> str:
        message = f"invalid {self.kind} {self.value!r}"
        if self.key:
            message += f" for field {self.key!r}"
        if self.line is not None:
            message += f" at line {self.line}"
        return message

    def locate(self, key: str, line: int) -> "FieldValueError":
        """Attach the field key and line number once they are known."""
        self.key = self.key or key
        self.line = line
        self.args = (self._message(),)
        return self


class InvalidDateError(FieldValueError):
    kind = "date"


class InvalidIntegerError(FieldValueError):
    kind = "integer"


class InvalidDecimalError(FieldValueError):
    kind = "decimal"


class UnknownEnumValueError(FieldValueError):
    kind = "enumeration value"
