"""Pydantic models for the client-bank document catalogue."""
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from clientbank.codec.registry import DocumentRegistry, ExchangeDocument
from clientbank.codec.schema import ExchangeEnum, exchange_field


class DocumentType(ExchangeEnum):
    """Document labels as they appear after ``СекцияДокумент=``."""
    PAYMENT_ORDER = "Платежное поручение"
    BANK_ORDER = "Банковский ордер"


class PayType(ExchangeEnum):
    """Payment method (``ВидПлатежа``)."""
    ELECTRONIC = "Электронно"
    MAIL = "Почтой"
    TELEGRAPH = "Телеграфом"
    URGENT = "Срочно"


class AccountStatement(BaseModel):
    """Per-account totals of an import file (``СекцияРасчСчет``)."""
    date_from: Optional[date] = exchange_field("ДатаНачала")
    date_to: Optional[date] = exchange_field("ДатаКонца")
    account: str = exchange_field("РасчСчет", default="")
    opening_balance: Decimal = exchange_field("НачальныйОстаток", default=Decimal("0"))
    closing_balance: Decimal = exchange_field("КонечныйОстаток", default=Decimal("0"))
    total_received: Decimal = exchange_field("ВсегоПоступило", default=Decimal("0"))
    total_debited: Decimal = exchange_field("ВсегоСписано", default=Decimal("0"))


class PaymentOrder(ExchangeDocument):
    """Payment order sent to the bank."""
    number: int = exchange_field("Номер", default=0)
    doc_date: Optional[date] = exchange_field("Дата")
    amount: Decimal = exchange_field("Сумма", default=Decimal("0"))

    # Written as "ИНН <inn> <name>", see combined_label()
    payer: str = exchange_field("Плательщик", default="", combined=True)
    payer_inn: str = exchange_field("ПлательщикИНН", default="")
    payer_name: str = exchange_field("Плательщик1", default="")
    payer2: str = exchange_field("Плательщик2", default="")
    payer3: str = exchange_field("Плательщик3", default="")
    payer4: str = exchange_field("Плательщик4", default="")
    payer_account: str = exchange_field("ПлательщикРасчСчет", default="")
    payer_bank_name: str = exchange_field("ПлательщикБанк1", default="")
    payer_bank_place: str = exchange_field("ПлательщикБанк2", default="")
    payer_bank_bik: str = exchange_field("ПлательщикБИК", default="")
    payer_bank_account: str = exchange_field("ПлательщикКорсчет", default="")

    receiver: str = exchange_field("Получатель", default="")
    receiver_inn: str = exchange_field("ПолучательИНН", default="")
    receiver_name: str = exchange_field("Получатель1", default="")
    receiver2: str = exchange_field("Получатель2", default="")
    receiver3: str = exchange_field("Получатель3", default="")
    receiver4: str = exchange_field("Получатель4", default="")
    receiver_account: str = exchange_field("ПолучательСчет", default="")
    receiver_bank_name: str = exchange_field("ПолучательБанк1", default="")
    receiver_bank_place: str = exchange_field("ПолучательБанк2", default="")
    receiver_bank_bik: str = exchange_field("ПолучательБИК", default="")
    receiver_bank_account: str = exchange_field("ПолучательКорсчет", default="")

    pay_type: Optional[PayType] = exchange_field("ВидПлатежа", default=PayType.ELECTRONIC)
    payment_kind: str = exchange_field("ВидОплаты", default="01")
    priority: int = exchange_field("Очередность", default=5)
    purpose: str = exchange_field("НазначениеПлатежа", default="", lines=6)

    def document_type(self) -> DocumentType:
        return DocumentType.PAYMENT_ORDER

    def business_date(self) -> Optional[date]:
        return self.doc_date

    def combined_label(self) -> str:
        # Without INN and name the caller's own text is kept, empty by default
        if not self.payer_inn and not self.payer_name:
            return self.payer
        return f"ИНН {self.payer_inn} {self.payer_name}"


class BankOrder(ExchangeDocument):
    """Bank order received from the bank."""
    number: int = exchange_field("Номер", default=0)
    doc_date: Optional[date] = exchange_field("Дата")
    amount: Decimal = exchange_field("Сумма", default=Decimal("0"))
    receipt_date: Optional[date] = exchange_field("КвитанцияДата")
    receipt_time: str = exchange_field("КвитанцияВремя", default="")
    receipt_content: str = exchange_field("КвитанцияСодержание", default="")

    payer: str = exchange_field("Плательщик", default="")
    payer_inn: str = exchange_field("ПлательщикИНН", default="")
    payer_name: str = exchange_field("Плательщик1", default="")
    payer2: str = exchange_field("Плательщик2", default="")
    payer3: str = exchange_field("Плательщик3", default="")
    payer4: str = exchange_field("Плательщик4", default="")
    payer_account: str = exchange_field("ПлательщикРасчСчет", default="")
    payer_bank_name: str = exchange_field("ПлательщикБанк1", default="")
    payer_bank_place: str = exchange_field("ПлательщикБанк2", default="")
    payer_bank_bik: str = exchange_field("ПлательщикБИК", default="")
    payer_bank_account: str = exchange_field("ПлательщикКорсчет", default="")

    receiver: str = exchange_field("Получатель", default="")
    receiver_inn: str = exchange_field("ПолучательИНН", default="")
    receiver2: str = exchange_field("Получатель2", default="")
    receiver3: str = exchange_field("Получатель3", default="")
    receiver4: str = exchange_field("Получатель4", default="")
    receiver_account: str = exchange_field("ПолучательСчет", default="")
    receiver_bank_name: str = exchange_field("ПолучательБанк1", default="")
    receiver_bank_place: str = exchange_field("ПолучательБанк2", default="")
    receiver_bank_bik: str = exchange_field("ПолучательБИК", default="")
    receiver_bank_account: str = exchange_field("ПолучательКорсчет", default="")

    debited_date: Optional[date] = exchange_field("ДатаСписано")
    received_date: Optional[date] = exchange_field("ДатаПоступило")
    pay_type: Optional[PayType] = exchange_field("ВидПлатежа")
    code: str = exchange_field("Код", default="")
    purpose_code: str = exchange_field("КодНазПлатежа", default="")

    purpose: str = exchange_field("НазначениеПлатежа", default="")

    # Budget payment indicators
    kbk: str = exchange_field("ПоказательКБК", default="")
    okato: str = exchange_field("ОКАТО", default="")
    basis: str = exchange_field("ПоказательОснования", default="")
    period: str = exchange_field("ПоказательПериода", default="")
    tax_doc_number: str = exchange_field("ПоказательНомера", default="")
    tax_doc_date: str = exchange_field("ПоказательДаты", default="")
    tax_payment_type: str = exchange_field("ПоказательТипа", default="")

    priority: int = exchange_field("Очередность", default=0)
    accept_term: str = exchange_field("СрокАкцепта", default="")
    letter_of_credit_type: str = exchange_field("ВидАккредитива", default="")
    payment_term: str = exchange_field("СрокПлатежа", default="")
    payment_condition1: str = exchange_field("УсловиеОплаты1", default="")
    payment_condition2: str = exchange_field("УсловиеОплаты2", default="")
    payment_condition3: str = exchange_field("УсловиеОплаты3", default="")
    supplier_invoice_number: str = exchange_field("НомерСчетаПоставщика", default="")

    def document_type(self) -> DocumentType:
        return DocumentType.BANK_ORDER

    def business_date(self) -> Optional[date]:
        return self.doc_date


document_registry = DocumentRegistry({
    DocumentType.PAYMENT_ORDER: PaymentOrder,
    DocumentType.BANK_ORDER: BankOrder,
})
