"""Product records and their on-disk representation.

A record is one of two frozen dataclasses, :class:`StandardRecord` or
:class:`PerishableRecord`, told apart by their ``kind`` discriminator. Money
and discount rates are :class:`~decimal.Decimal` values kept at two decimal
places (half-up), so a discount below one percent rounds away. That loss is
part of the stored format and is kept as is.

Decoding is defensive: a bad field falls back to a documented default and a
record that still cannot be built becomes an ``"Error Product"`` placeholder,
so one malformed entry never aborts a whole load.
"""
from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Union

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
ONE = Decimal("1")

DEFAULT_NAME = "Unnamed Product"
ERROR_NAME = "Error Product"


class RecordKind(str, Enum):
    """Serialized discriminator values."""

    STANDARD = "non-perishable"
    PERISHABLE = "perishable"

    @classmethod
    def parse(cls, value: Any) -> "RecordKind | None":
        for kind in cls:
            if value == kind.value:
                return kind
        return None


def to_money(value: Any) -> Decimal:
    """Quantize ``value`` to two decimal places, rounding half-up."""
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"not a number: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _normalise_common(record: "Record") -> None:
    if not isinstance(record.name, str):
        raise TypeError("name must be a string")
    if not record.name.strip():
        raise ValueError("name must not be blank")
    price = to_money(record.unit_price)
    if price < 0:
        raise ValueError(f"price must not be negative: {price}")
    if isinstance(record.quantity, bool) or not isinstance(record.quantity, int):
        raise TypeError("quantity must be an integer")
    if record.quantity < 0:
        raise ValueError(f"quantity must not be negative: {record.quantity}")
    discount = to_money(record.discount_rate)
    if not ZERO <= discount <= ONE:
        raise ValueError(f"discount must be between 0 and 1: {discount}")
    object.__setattr__(record, "unit_price", price)
    object.__setattr__(record, "discount_rate", discount)


def _describe(record: "Record") -> str:
    percent = (record.discount_rate * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return (
        f"Product: {record.name}, Price: ${record.unit_price}, "
        f"Quantity: {record.quantity}, Discount: {percent}%"
    )


@dataclass(frozen=True)
class StandardRecord:
    name: str
    unit_price: Decimal
    quantity: int
    discount_rate: Decimal = ZERO

    kind: ClassVar[RecordKind] = RecordKind.STANDARD

    def __post_init__(self) -> None:
        _normalise_common(self)

    def __str__(self) -> str:
        return _describe(self)


@dataclass(frozen=True)
class PerishableRecord:
    name: str
    unit_price: Decimal
    quantity: int
    expiration_date: _dt.date
    discount_rate: Decimal = ZERO

    kind: ClassVar[RecordKind] = RecordKind.PERISHABLE

    def __post_init__(self) -> None:
        _normalise_common(self)
        if isinstance(self.expiration_date, str):
            object.__setattr__(self, "expiration_date", _dt.date.fromisoformat(self.expiration_date))
        elif isinstance(self.expiration_date, _dt.datetime):
            object.__setattr__(self, "expiration_date", self.expiration_date.date())
        elif not isinstance(self.expiration_date, _dt.date):
            raise TypeError("expiration_date must be a date")

    def __str__(self) -> str:
        return f"{_describe(self)}, Expires: {self.expiration_date.isoformat()}"


Record = Union[StandardRecord, PerishableRecord]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------
def is_record(value: Any) -> bool:
    return isinstance(value, (StandardRecord, PerishableRecord))


def _json_amount(value: Decimal) -> Union[float, str]:
    """Write ``value`` as a JSON number unless a float would change it.

    Amounts beyond float precision are written as strings; the decoder reads
    both forms.
    """
    number = float(value)
    if to_money(number) == value:
        return number
    return str(value)


def encode_record(record: Record) -> Dict[str, Any]:
    if not is_record(record):
        raise TypeError(f"unsupported record type: {type(record).__name__}")
    payload: Dict[str, Any] = {
        "type": record.kind.value,
        "name": record.name,
        "price": _json_amount(record.unit_price),
        "quantity": record.quantity,
        "discount": _json_amount(record.discount_rate),
    }
    if isinstance(record, PerishableRecord):
        payload["expirationDate"] = record.expiration_date.isoformat()
    return payload


def encode_records(records: Iterable[Record]) -> List[Dict[str, Any]]:
    return [encode_record(record) for record in records]


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------
def error_placeholder() -> StandardRecord:
    return StandardRecord(ERROR_NAME, ZERO, 0, ZERO)


def _decode_kind(raw: Dict[str, Any]) -> RecordKind:
    if "type" not in raw:
        logger.warning("Product %r has no type; treating it as %s", raw.get("name"), RecordKind.STANDARD.value)
        return RecordKind.STANDARD
    kind = RecordKind.parse(raw["type"])
    if kind is None:
        logger.warning("Product %r has unknown type %r; treating it as %s", raw.get("name"), raw["type"], RecordKind.STANDARD.value)
        return RecordKind.STANDARD
    return kind


def _decode_name(raw: Dict[str, Any]) -> str:
    value = raw.get("name")
    if isinstance(value, str) and value.strip():
        return value
    logger.warning("Product name missing or invalid (%r); using %r", value, DEFAULT_NAME)
    return DEFAULT_NAME


def _decode_amount(raw: Dict[str, Any], field: str) -> Decimal:
    value = raw.get(field)
    try:
        return to_money(value)
    except (TypeError, ValueError):
        logger.warning("Product %r field %r missing or invalid (%r); using 0", raw.get("name"), field, value)
        return ZERO


def _decode_quantity(raw: Dict[str, Any]) -> int:
    value = raw.get("quantity")
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    logger.warning("Product %r quantity missing or invalid (%r); using 0", raw.get("name"), value)
    return 0


def decode_record(raw: Any) -> Record:
    """Build a record from one decoded JSON entry, never raising."""
    if not isinstance(raw, dict):
        logger.warning("Skipping malformed product entry %r; using placeholder", raw)
        return error_placeholder()

    kind = _decode_kind(raw)
    name = _decode_name(raw)
    price = _decode_amount(raw, "price")
    quantity = _decode_quantity(raw)
    discount = _decode_amount(raw, "discount")

    try:
        if kind is RecordKind.PERISHABLE:
            expiry = raw.get("expirationDate")
            if not isinstance(expiry, str) or not expiry.strip():
                logger.warning("Perishable product %r has no expiration date; treating it as %s", name, RecordKind.STANDARD.value)
                return StandardRecord(name, price, quantity, discount)
            return PerishableRecord(name, price, quantity, _dt.date.fromisoformat(expiry.strip()), discount)
        return StandardRecord(name, price, quantity, discount)
    except (TypeError, ValueError) as exc:
        logger.warning("Error processing product %r: %s; using placeholder", name, exc)
        return error_placeholder()


def decode_records(items: Iterable[Any]) -> List[Record]:
    return [decode_record(item) for item in items]
