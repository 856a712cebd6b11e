"""Document catalogue and exchange envelopes."""
from .envelope import ExchangeEnvelope, ExportEnvelope, ImportEnvelope
from .schemas import (
    AccountStatement,
    BankOrder,
    DocumentType,
    PaymentOrder,
    PayType,
    document_registry,
)

__all__ = [
    "ExchangeEnvelope",
    "ExportEnvelope",
    "ImportEnvelope",
    "AccountStatement",
    "BankOrder",
    "DocumentType",
    "PaymentOrder",
    "PayType",
    "document_registry",
]
