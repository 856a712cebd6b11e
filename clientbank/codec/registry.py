"""
Document-type registry.

Maps the human-readable labels written after ``СекцияДокумент=`` to the
concrete record classes they denote. Built once at import time and read-only
afterwards.
"""
from datetime import date
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Type

from pydantic import BaseModel

from clientbank.codec.schema import ExchangeEnum
from clientbank.errors import UnknownDocumentTypeError


class ExchangeDocument(BaseModel):
    """Capability shared by every payment-document variant."""

    def document_type(self) -> ExchangeEnum:
        """Registry kind of this document."""
        raise NotImplementedError

    def business_date(self) -> Optional[date]:
        """Date the document counts for when exported."""
        raise NotImplementedError


class DocumentRegistry:
    """Closed set of document variants keyed by their type enumeration."""

    def __init__(
        self,
        shapes: Mapping[ExchangeEnum, Type[ExchangeDocument]],
        base: Type[ExchangeDocument] = ExchangeDocument,
    ):
        """Initialize registry.

        Args:
            shapes: Document kind -> concrete record class
            base: Polymorphic element type that triggers label dispatch
        """
        self.base = base
        self._shapes = MappingProxyType(dict(shapes))
        self._by_label = MappingProxyType({kind.to_exchange(): kind for kind in self._shapes})

    @property
    def kinds(self) -> List[ExchangeEnum]:
        return list(self._shapes)

    def label_for(self, kind: ExchangeEnum) -> str:
        if kind not in self._shapes:
            raise UnknownDocumentTypeError(str(getattr(kind, "value", kind)))
        return kind.to_exchange()

    def resolve(self, label: str) -> ExchangeEnum:
        """Find the kind registered under an exact, case-sensitive label."""
        try:
            return self._by_label[label]
        except KeyError:
            raise UnknownDocumentTypeError(label) from None

    def shape_for(self, kind: ExchangeEnum) -> Type[ExchangeDocument]:
        return self._shapes[kind]

    def shape_for_label(self, label: str) -> Type[ExchangeDocument]:
        return self._shapes[self.resolve(label)]

    def is_polymorphic(self, item_type: type) -> bool:
        return item_type is self.base

    def manifest(self, documents: Iterable[ExchangeDocument]) -> List[ExchangeEnum]:
        """Distinct kinds present in ``documents``, in first-seen order."""
        seen: Dict[ExchangeEnum, None] = {}
        for doc in documents:
            kind = doc.document_type()
            self.label_for(kind)
            seen.setdefault(kind, None)
        return list(seen)
