"""Import and export of 1C client-bank exchange files."""
from typing import List, Optional

from clientbank.codec.charset import EncodingType
from clientbank.codec.registry import ExchangeDocument
from clientbank.errors import ExchangeError
from clientbank.models import ExportEnvelope, ImportEnvelope

__version__ = "0.1.0"


def export_documents(
    documents: List[ExchangeDocument], encoding: Optional[EncodingType] = None
) -> bytes:
    """Build an export envelope around ``documents`` and render it."""
    envelope = ExportEnvelope(documents=documents)
    if encoding is not None:
        envelope.encoding = encoding
    return envelope.marshal()


def import_documents(data: bytes, encoding: Optional[EncodingType] = None) -> ImportEnvelope:
    """Parse an exchange file received from the bank."""
    return ImportEnvelope.unmarshal(data, encoding)


__all__ = [
    "EncodingType",
    "ExchangeDocument",
    "ExchangeError",
    "ExportEnvelope",
    "ImportEnvelope",
    "export_documents",
    "import_documents",
]
