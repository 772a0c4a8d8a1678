from datetime import date
from decimal import Decimal

import pytest

from storelib.records import (
    DEFAULT_NAME,
    ERROR_NAME,
    PerishableRecord,
    RecordKind,
    StandardRecord,
    decode_record,
    encode_record,
)


def test_amounts_are_rounded_half_up_to_cents():
    record = StandardRecord("Widget", 1.005, 3, 0.125)
    assert record.unit_price == Decimal("1.01")
    assert record.discount_rate == Decimal("0.13")


def test_sub_percent_discount_rounds_away():
    record = StandardRecord("Widget", Decimal("2.00"), 1, Decimal("0.004"))
    assert record.discount_rate == Decimal("0.00")


@pytest.mark.parametrize(
    "price, quantity, discount",
    [(-1, 1, 0), (1, -1, 0), (1, 1, Decimal("1.5")), (1, 1, -0.1)],
)
def test_invalid_values_are_rejected(price, quantity, discount):
    with pytest.raises(ValueError):
        StandardRecord("Widget", price, quantity, discount)


@pytest.mark.parametrize("name", ["", "   "])
def test_blank_names_are_rejected(name):
    with pytest.raises(ValueError):
        StandardRecord(name, Decimal("1.00"), 1)
    with pytest.raises(ValueError):
        PerishableRecord(name, Decimal("1.00"), 1, date(2026, 1, 31))


def test_encode_rejects_non_records():
    with pytest.raises(TypeError):
        encode_record({"name": "Widget"})


def test_perishable_accepts_iso_string_date():
    record = PerishableRecord("Milk", "3.00", 4, "2026-01-31")
    assert record.expiration_date == date(2026, 1, 31)
    assert record.kind is RecordKind.PERISHABLE


def test_encode_perishable_includes_expiration_date():
    record = PerishableRecord("Milk", Decimal("3.00"), 4, date(2026, 1, 31), Decimal("0.10"))
    assert encode_record(record) == {
        "type": "perishable",
        "name": "Milk",
        "price": 3.0,
        "quantity": 4,
        "discount": 0.1,
        "expirationDate": "2026-01-31",
    }


def test_encode_standard_has_no_expiration_date():
    payload = encode_record(StandardRecord("Rice", Decimal("3.99"), 30))
    assert payload["type"] == "non-perishable"
    assert "expirationDate" not in payload


def test_decode_fills_missing_fields_with_defaults():
    record = decode_record({"type": "non-perishable"})
    assert record == StandardRecord(DEFAULT_NAME, Decimal("0"), 0, Decimal("0"))


def test_decode_unknown_type_falls_back_to_standard(caplog):
    record = decode_record({"type": "product", "name": "Rice", "price": 3.99, "quantity": 30, "discount": 0})
    assert isinstance(record, StandardRecord)
    assert record.name == "Rice"
    assert "unknown type" in caplog.text


def test_decode_perishable_without_date_becomes_standard():
    record = decode_record({"type": "perishable", "name": "Milk", "price": 3, "quantity": 4, "discount": 0})
    assert isinstance(record, StandardRecord)


def test_decode_invalid_field_values_use_defaults():
    record = decode_record({"type": "non-perishable", "name": 12, "price": "abc", "quantity": "lots", "discount": None})
    assert record.name == DEFAULT_NAME
    assert record.unit_price == Decimal("0.00")
    assert record.quantity == 0
    assert record.discount_rate == Decimal("0.00")


@pytest.mark.parametrize(
    "raw",
    [
        "not-an-object",
        {"type": "non-perishable", "name": "Bad", "price": -5, "quantity": 1, "discount": 0},
        {"type": "perishable", "name": "Bad", "price": 1, "quantity": 1, "discount": 0, "expirationDate": "soon"},
    ],
)
def test_decode_unbuildable_entry_degrades_to_placeholder(raw):
    record = decode_record(raw)
    assert record == StandardRecord(ERROR_NAME, 0, 0, 0)


def test_describe_lists_fields():
    record = PerishableRecord("Milk", "3.00", 4, "2026-01-31", "0.10")
    assert str(record) == "Product: Milk, Price: $3.00, Quantity: 4, Discount: 10%, Expires: 2026-01-31"
