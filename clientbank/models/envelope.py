"""Root records of exchange files: what goes to the bank and what comes back."""
import logging
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from clientbank.codec.charset import EncodingType
from clientbank.codec.constants import FOOTER, HEADER, LINE_BREAK, TIME_FORMAT
from clientbank.codec.marshaller import marshal
from clientbank.codec.registry import DocumentRegistry, ExchangeDocument
from clientbank.codec.schema import exchange_field
from clientbank.codec.unmarshaller import unmarshal_envelope
from clientbank.config import config
from clientbank.errors import EmptyDocumentSetError
from clientbank.models.schemas import AccountStatement, DocumentType, document_registry

logger = logging.getLogger(__name__)


def _configured_encoding() -> EncodingType:
    return EncodingType.from_exchange(config.encoding)


class ExchangeEnvelope(BaseModel):
    """Header fields shared by both directions."""
    version: str = exchange_field("ВерсияФормата", default="")
    encoding: Optional[EncodingType] = exchange_field("Кодировка")
    sender: str = exchange_field("Отправитель", default="")
    create_date: Optional[date] = exchange_field("ДатаСоздания")
    create_time: str = exchange_field("ВремяСоздания", default="")
    date_from: Optional[date] = exchange_field("ДатаНачала")
    date_to: Optional[date] = exchange_field("ДатаКонца")


class ExportEnvelope(ExchangeEnvelope):
    """Exchange file with payment documents for the bank."""
    version: str = exchange_field("ВерсияФормата", default_factory=lambda: config.exchange_version)
    encoding: Optional[EncodingType] = exchange_field("Кодировка", default_factory=_configured_encoding)
    sender: str = exchange_field("Отправитель", default_factory=lambda: config.sender)
    create_date: Optional[date] = exchange_field("ДатаСоздания", default_factory=date.today)
    create_time: str = exchange_field(
        "ВремяСоздания", default_factory=lambda: datetime.now().strftime(TIME_FORMAT)
    )
    document_types: List[DocumentType] = exchange_field(
        default_factory=list, section_start="Документ=", section_end=LINE_BREAK
    )
    documents: List[ExchangeDocument] = exchange_field(
        default_factory=list, section_start="СекцияДокумент", section_end="КонецДокумента" + LINE_BREAK
    )

    def before_marshal(self, registry: DocumentRegistry = document_registry) -> None:
        """Fill the document-type manifest and the validity date range."""
        self.document_types = registry.manifest(self.documents)
        dates = [d for d in (doc.business_date() for doc in self.documents) if d is not None]
        if dates:
            self.date_from = min(dates)
            self.date_to = max(dates)

    def marshal(self, registry: DocumentRegistry = document_registry) -> bytes:
        """
        Export all documents.

        Returns:
            File content in the envelope's encoding

        Raises:
            EmptyDocumentSetError: No documents to export
        """
        if not self.documents:
            raise EmptyDocumentSetError("no documents")
        self.before_marshal(registry)

        encoding = self.encoding or _configured_encoding()
        self.encoding = encoding
        body = marshal(self)
        logger.info(
            "Exporting %d document(s) in %s encoding", len(self.documents), encoding.value
        )
        return (
            encoding.encode(HEADER + LINE_BREAK)
            + encoding.encode(body)
            + encoding.encode(FOOTER + LINE_BREAK)
        )


class ImportEnvelope(ExchangeEnvelope):
    """Exchange file received from the bank."""
    account: str = exchange_field("РасчСчет", default="")
    account_sections: List[AccountStatement] = exchange_field(
        default_factory=list,
        section_start="СекцияРасчСчет" + LINE_BREAK,
        section_end="КонецРасчСчет" + LINE_BREAK,
    )
    documents: List[ExchangeDocument] = exchange_field(
        default_factory=list, section_start="СекцияДокумент", section_end="КонецДокумента" + LINE_BREAK
    )

    @classmethod
    def unmarshal(
        cls,
        data: bytes,
        encoding: Optional[EncodingType] = None,
        registry: DocumentRegistry = document_registry,
    ) -> "ImportEnvelope":
        """
        Parse an exchange file.

        Args:
            data: Raw file content
            encoding: Pre-selected encoding; read from the file when None
            registry: Document types allowed in document sections

        Returns:
            Populated import envelope
        """
        envelope = unmarshal_envelope(data, cls, registry, encoding)
        logger.info(
            "Imported %d document(s), %d account section(s)",
            len(envelope.documents), len(envelope.account_sections),
        )
        return envelope
