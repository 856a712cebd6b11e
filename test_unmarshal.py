from datetime import date
from decimal import Decimal
from typing import List, Optional

import pytest
from pydantic import BaseModel

from clientbank.codec.marshaller import marshal
from clientbank.codec.registry import ExchangeDocument
from clientbank.codec.schema import exchange_field
from clientbank.codec.unmarshaller import (
    LineCursor,
    parse_date,
    parse_decimal,
    parse_integer,
    split_lines,
    unmarshal_into,
)
from clientbank.errors import (
    InvalidDateError,
    InvalidDecimalError,
    InvalidIntegerError,
    UnknownDocumentTypeError,
    UnknownEnumValueError,
    UnsupportedTypeError,
)
from clientbank.models import BankOrder, ImportEnvelope, PaymentOrder, PayType, document_registry


class Line(BaseModel):
    code: str = exchange_field("Код", default="")
    quantity: int = exchange_field("Количество", default=0)
    price: Decimal = exchange_field("Цена", default=Decimal("0"))
    shipped: Optional[date] = exchange_field("Отгружено")


class Batch(BaseModel):
    title: str = exchange_field("Название", default="")
    total: Optional[Line] = exchange_field(section_start="СекцияИтог", section_end="КонецИтог")
    lines: List[Line] = exchange_field(
        default_factory=list, section_start="СекцияСтрока\r\n", section_end="КонецСтроки\r\n"
    )


class Folder(BaseModel):
    documents: List[ExchangeDocument] = exchange_field(
        default_factory=list, section_start="СекцияДокумент", section_end="КонецДокумента"
    )


class Archive(BaseModel):
    documents: List[ExchangeDocument] = exchange_field(
        default_factory=list, section_start="СекцияДокумент\r\n", section_end="КонецДокумента\r\n"
    )


class Tags(BaseModel):
    tags: List[str] = exchange_field(default_factory=list, section_start="Тег", section_end="КонецТега")


def parse(lines, target, sentinel="Конец", registry=None):
    cursor = LineCursor(lines)
    unmarshal_into(cursor, target, sentinel, registry)
    return cursor


def test_split_lines_normalises_crlf():
    assert split_lines("a=1\r\nb=2\nc") == ["a=1", "b=2", "c"]


def test_nested_sections_share_cursor():
    lines = [
        "Название=Партия",
        "СекцияСтрока",
        "Код=A",
        "Количество=2",
        "КонецСтроки",
        "",
        "СекцияСтрока",
        "Код=B",
        "Цена=10.50",
        "КонецСтроки",
        "СекцияИтог",
        "Код=Итого",
        "Отгружено=05.01.2024",
        "КонецИтог",
        "Конец",
        "Название=после конца",
    ]
    batch = Batch.model_construct()
    cursor = parse(lines, batch)

    assert cursor.position == len(lines) - 1
    assert batch.title == "Партия"
    assert [(l.code, l.quantity, l.price) for l in batch.lines] == [
        ("A", 2, Decimal("0")),
        ("B", 0, Decimal("10.50")),
    ]
    assert batch.total.code == "Итого"
    assert batch.total.shipped == date(2024, 1, 5)


def test_unknown_keys_are_skipped_inside_sections():
    lines = [
        "СекцияСтрока",
        "Код=A",
        "НовоеПоле=что-то",
        "Без равенства",
        "=пустой ключ",
        "КонецСтроки",
        "Название=после",
        "Конец",
    ]
    batch = Batch.model_construct()
    parse(lines, batch)
    assert len(batch.lines) == 1
    assert batch.lines[0].code == "A"
    assert batch.title == "после"


def test_empty_value_keeps_default():
    batch = Batch.model_construct()
    parse(["СекцияСтрока", "Количество=", "Отгружено=", "КонецСтроки"], batch)
    assert batch.lines[0].quantity == 0
    assert batch.lines[0].shipped is None


def test_missing_sentinel_is_accepted():
    batch = Batch.model_construct()
    cursor = parse(["Название=Партия", "СекцияСтрока", "Код=A"], batch)
    assert cursor.at_end()
    assert batch.title == "Партия"
    assert batch.lines[0].code == "A"


def test_stray_end_marker_is_ignored():
    batch = Batch.model_construct()
    parse(["КонецСтроки", "Название=Партия", "Конец"], batch)
    assert batch.title == "Партия"
    assert batch.lines == []


def test_scalar_errors_carry_key_and_line():
    batch = Batch.model_construct()
    with pytest.raises(InvalidIntegerError) as exc:
        parse(["Название=Партия", "СекцияСтрока", "Количество=два", "КонецСтроки"], batch)
    assert exc.value.key == "Количество"
    assert exc.value.value == "два"
    assert exc.value.line == 3
    assert "line 3" in str(exc.value)


@pytest.mark.parametrize("raw,error", [
    ("Отгружено=5.1.2024", InvalidDateError),
    ("Отгружено=31.02.2024", InvalidDateError),
    ("Отгружено=2024-01-05", InvalidDateError),
    ("Цена=1,5", InvalidDecimalError),
    ("Цена=abc", InvalidDecimalError),
    ("Количество=1.0", InvalidIntegerError),
    ("Количество= 1", InvalidIntegerError),
])
def test_scalar_errors(raw, error):
    with pytest.raises(error):
        parse(["СекцияСтрока", raw, "КонецСтроки"], Batch.model_construct())


def test_enum_error():
    order = PaymentOrder.model_construct()
    with pytest.raises(UnknownEnumValueError):
        parse(["ВидПлатежа=Голубиной почтой"], order)


def test_enum_value():
    order = PaymentOrder.model_construct()
    parse(["ВидПлатежа=Срочно", "Конец"], order)
    assert order.pay_type is PayType.URGENT


def test_scalar_parsers():
    assert parse_date("29.02.2024") == date(2024, 2, 29)
    assert parse_integer("-15") == -15
    assert parse_integer("+7") == 7
    assert parse_decimal("6936.0") == Decimal("6936.0")
    assert parse_decimal("-0.5") == Decimal("-0.5")
    with pytest.raises(InvalidDecimalError):
        parse_decimal("NaN")


def test_polymorphic_dispatch():
    lines = [
        "СекцияДокумент=Банковский ордер",
        "Номер=7",
        "КвитанцияДата=06.01.2024",
        "КонецДокумента",
        "СекцияДокумент=Платежное поручение",
        "Номер=8",
        "НазначениеПлатежа=Оплата",
        "КонецДокумента",
    ]
    folder = Folder.model_construct()
    parse(lines, folder, registry=document_registry)

    first, second = folder.documents
    assert type(first) is BankOrder
    assert first.number == 7
    assert first.receipt_date == date(2024, 1, 6)
    assert type(second) is PaymentOrder
    assert second.purpose == "Оплата"


def test_unregistered_label_fails():
    folder = Folder.model_construct()
    with pytest.raises(UnknownDocumentTypeError):
        parse(["СекцияДокумент=Аккредитив", "КонецДокумента"], folder, registry=document_registry)


def test_section_without_label_fails():
    folder = Folder.model_construct()
    with pytest.raises(UnknownDocumentTypeError):
        parse(["СекцияДокумент", "КонецДокумента"], folder, registry=document_registry)


def test_markers_with_line_breaks_round_trip():
    archive = Archive(documents=[
        BankOrder(number=4, doc_date=date(2024, 1, 9), amount=Decimal("6936.00")),
        PaymentOrder(number=5, purpose="Оплата"),
    ])
    text = marshal(archive)
    assert text.startswith("СекцияДокумент=Банковский ордер\r\nНомер=4\r\n")

    parsed = Archive.model_construct()
    parse(split_lines(text), parsed, registry=document_registry)

    first, second = parsed.documents
    assert type(first) is BankOrder
    assert first.number == 4
    assert first.doc_date == date(2024, 1, 9)
    assert first.amount == Decimal("6936.00")
    assert type(second) is PaymentOrder
    assert second.purpose == "Оплата"


def test_polymorphic_section_needs_registry():
    with pytest.raises(UnsupportedTypeError):
        parse(["СекцияДокумент=Банковский ордер"], Folder.model_construct())


def test_list_of_scalars_cannot_be_a_section():
    with pytest.raises(UnsupportedTypeError):
        parse(["Тег", "КонецТега"], Tags.model_construct())


def test_import_envelope_accounts():
    lines = [
        "РасчСчет=40702810000000074935",
        "СекцияРасчСчет",
        "ДатаНачала=01.01.2024",
        "НачальныйОстаток=1000.00",
        "ВсегоПоступило=250.50",
        "КонецРасчСчет",
        "КонецФайла",
    ]
    envelope = ImportEnvelope.model_construct()
    parse(lines, envelope, sentinel="КонецФайла", registry=document_registry)
    assert envelope.account == "40702810000000074935"
    section = envelope.account_sections[0]
    assert section.date_from == date(2024, 1, 1)
    assert section.opening_balance == Decimal("1000.00")
    assert section.total_received == Decimal("250.50")
