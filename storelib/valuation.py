"""Valuation of product records and whole catalogs.

All amounts are ``Decimal`` values rounded half-up to cents. Perishable goods
get a second, multiplicative discount on top of their own discount rate that
grows as the expiration date approaches; catalog totals then apply a flat
store-wide 15% discount.
"""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable

from .records import ONE, TWO_PLACES, PerishableRecord, Record, StandardRecord

EXPIRED_MULTIPLIER = Decimal("0.2")
IMMINENT_MULTIPLIER = Decimal("0.5")
SOON_MULTIPLIER = Decimal("0.7")
FRESH_MULTIPLIER = Decimal("1.0")
STORE_DISCOUNT_FACTOR = Decimal("0.85")


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def unit_total(record: Record) -> Decimal:
    return record.unit_price * record.quantity


def discounted_total(record: Record) -> Decimal:
    return round_money(unit_total(record) * (ONE - record.discount_rate))


def days_until_expiration(record: PerishableRecord, today: _dt.date | None = None) -> int:
    today = today or _dt.date.today()
    return (record.expiration_date - today).days


def proximity_multiplier(days: int) -> Decimal:
    """Extra price factor for a perishable expiring in ``days`` days."""
    if days < 0:
        return EXPIRED_MULTIPLIER
    if days <= 2:
        return IMMINENT_MULTIPLIER
    if days <= 7:
        return SOON_MULTIPLIER
    return FRESH_MULTIPLIER


def total_value(record: Record, today: _dt.date | None = None) -> Decimal:
    """Value of a record after its own discount and any expiry discount."""
    if isinstance(record, PerishableRecord):
        multiplier = proximity_multiplier(days_until_expiration(record, today))
        return round_money(discounted_total(record) * multiplier)
    if isinstance(record, StandardRecord):
        return discounted_total(record)
    raise TypeError(f"unsupported record type: {type(record).__name__}")


@dataclass(frozen=True)
class CatalogTotals:
    total_quantity: int
    total_gross: Decimal
    total_with_discount: Decimal
    total_net: Decimal

    def as_dict(self) -> Dict[str, str | int]:
        return {
            "total_quantity": self.total_quantity,
            "total_gross": str(self.total_gross),
            "total_with_discount": str(self.total_with_discount),
            "total_net": str(self.total_net),
        }


def aggregate(records: Iterable[Record], today: _dt.date | None = None) -> CatalogTotals:
    today = today or _dt.date.today()
    quantity = 0
    gross = Decimal("0")
    with_discount = Decimal("0")
    for record in records:
        quantity += record.quantity
        gross += unit_total(record)
        with_discount += total_value(record, today)
    with_discount = round_money(with_discount)
    return CatalogTotals(
        total_quantity=quantity,
        total_gross=round_money(gross),
        total_with_discount=with_discount,
        total_net=round_money(with_discount * STORE_DISCOUNT_FACTOR),
    )
