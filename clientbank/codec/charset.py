"""
Transcoding between the legacy code pages of the exchange format and text.

Two single-byte encodings exist in the format: ``Windows`` (cp1251) and
``DOS`` (cp866).
"""
from clientbank.codec.schema import ExchangeEnum
from clientbank.errors import EncodingError


class EncodingType(ExchangeEnum):
    """Encoding selector as written in the ``Кодировка`` line."""
    WINDOWS = "Windows"
    DOS = "DOS"

    @property
    def code_page(self) -> str:
        return _CODE_PAGES[self]

    def decode(self, data: bytes) -> str:
        return decode(self, data)

    def encode(self, text: str) -> bytes:
        return encode(self, text)


_CODE_PAGES = {
    EncodingType.WINDOWS: "cp1251",
    EncodingType.DOS: "cp866",
}


def decode(encoding: EncodingType, data: bytes) -> str:
    """Decode raw bytes with the selected code page."""
    try:
        return data.decode(_CODE_PAGES[encoding])
    except UnicodeDecodeError as e:
        raise EncodingError(
            f"cannot decode byte 0x{data[e.start]:02x} at offset {e.start} as {encoding.value}"
        ) from e


def encode(encoding: EncodingType, text: str) -> bytes:
    """Encode text with the selected code page."""
    try:
        return text.encode(_CODE_PAGES[encoding])
    except UnicodeEncodeError as e:
        raise EncodingError(
            f"character {text[e.start]!r} at position {e.start} has no {encoding.value} representation"
        ) from e
