from datetime import date
from decimal import Decimal
from typing import List, Optional

import pytest
from pydantic import BaseModel

from clientbank.codec.registry import ExchangeDocument
from clientbank.codec.schema import FieldKind, exchange_field, marker_key, record_shape
from clientbank.errors import SchemaError
from clientbank.models import ImportEnvelope, PaymentOrder, PayType


def test_payment_order_shape_keeps_declaration_order():
    shape = record_shape(PaymentOrder)
    keys = [d.key for d in shape]
    assert keys[:4] == ["Номер", "Дата", "Сумма", "Плательщик"]
    assert keys[-1] == "НазначениеПлатежа"


def test_kinds_follow_annotations():
    by_name = {d.name: d for d in record_shape(PaymentOrder)}
    assert by_name["number"].kind is FieldKind.INTEGER
    assert by_name["doc_date"].kind is FieldKind.DATE
    assert by_name["doc_date"].value_type is date
    assert by_name["amount"].kind is FieldKind.DECIMAL
    assert by_name["amount"].value_type is Decimal
    assert by_name["pay_type"].kind is FieldKind.ENUM
    assert by_name["pay_type"].value_type is PayType
    assert by_name["purpose"].kind is FieldKind.TEXT
    assert by_name["purpose"].lines == 6
    assert by_name["payer"].combined
    assert not by_name["payer_inn"].combined


def test_section_fields():
    by_name = {d.name: d for d in record_shape(ImportEnvelope)}
    documents = by_name["documents"]
    assert documents.kind is FieldKind.LIST
    assert documents.value_type is ExchangeDocument
    assert documents.key == ""
    assert documents.start_key == "СекцияДокумент"
    assert documents.end_key == "КонецДокумента"
    assert by_name["account_sections"].start_key == "СекцияРасчСчет"


def test_marker_key_strips_line_breaks_only():
    assert marker_key("КонецРасчСчет\r\n") == "КонецРасчСчет"
    assert marker_key("Документ=") == "Документ="
    assert marker_key("\r\n") == ""


def test_shape_is_cached():
    assert record_shape(PaymentOrder) is record_shape(PaymentOrder)


def test_plain_fields_are_not_part_of_shape():
    class Note(BaseModel):
        text: str = exchange_field("Текст", default="")
        internal: int = 0

    assert [d.name for d in record_shape(Note)] == ["text"]


def test_metadata_survives_json_schema():
    schema = PaymentOrder.model_json_schema()
    assert schema["properties"]["purpose"]["exchange"]["lines"] == 6


def test_section_on_scalar_is_rejected():
    class Broken(BaseModel):
        name: str = exchange_field(default="", section_start="Секция", section_end="Конец")

    with pytest.raises(SchemaError):
        record_shape(Broken)


def test_key_on_list_is_rejected():
    class Item(BaseModel):
        code: str = exchange_field("Код", default="")

    class Broken(BaseModel):
        items: List[Item] = exchange_field("Строки", default_factory=list)

    with pytest.raises(SchemaError):
        record_shape(Broken)


def test_invalid_line_limit_is_rejected():
    class Broken(BaseModel):
        comment: str = exchange_field("Комментарий", default="", lines=0)

    with pytest.raises(SchemaError):
        record_shape(Broken)


def test_unsupported_annotation_is_rejected():
    class Broken(BaseModel):
        flag: Optional[bool] = exchange_field("Флаг")

    with pytest.raises(SchemaError):
        record_shape(Broken)
