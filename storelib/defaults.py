"""Seed data used when an inventory has to be created or rebuilt."""

from __future__ import annotations

import datetime as _dt
from decimal import Decimal
from typing import Any, Dict, List

from .records import PerishableRecord, Record, StandardRecord, encode_records

TEMPLATE_MIN_RECORDS = 10


def _perishable(name: str, price: str, quantity: int, expires: str, discount: str) -> PerishableRecord:
    return PerishableRecord(name, Decimal(price), quantity, _dt.date.fromisoformat(expires), Decimal(discount))


def _standard(name: str, price: str, quantity: int, discount: str) -> StandardRecord:
    return StandardRecord(name, Decimal(price), quantity, Decimal(discount))


def default_records() -> List[Record]:
    """The 10 products written to a brand new inventory."""
    return [
        _perishable("Apples", "1.99", 50, "2025-04-25", "0.05"),
        _perishable("Bananas", "0.89", 40, "2025-04-20", "0.00"),
        _perishable("Strawberries", "3.49", 20, "2025-04-19", "0.10"),
        _perishable("Broccoli", "2.49", 18, "2025-04-21", "0.05"),
        _perishable("Grapes", "4.99", 15, "2025-04-18", "0.05"),
        _perishable("Cucumbers", "0.99", 25, "2025-04-23", "0.00"),
        _perishable("Tomatoes", "2.29", 30, "2025-04-24", "0.00"),
        _perishable("Lettuce", "1.79", 12, "2025-04-19", "0.10"),
        _standard("Potatoes", "0.79", 60, "0.00"),
        _standard("Onions", "0.89", 45, "0.05"),
    ]


def template_records() -> List[Record]:
    """Known-good sample data used to reset an inventory."""
    return [
        _perishable("Apples", "1.99", 50, "2025-04-25", "0.05"),
        _perishable("Bananas", "0.89", 40, "2025-04-20", "0.00"),
        _perishable("Strawberries", "3.49", 20, "2025-04-19", "0.10"),
        _perishable("Tomatoes", "2.29", 30, "2025-04-24", "0.00"),
        _perishable("Lettuce", "1.79", 15, "2025-04-18", "0.05"),
        _perishable("Cucumbers", "0.99", 25, "2025-04-23", "0.00"),
        _perishable("Broccoli", "2.49", 18, "2025-04-21", "0.05"),
        _perishable("Grapes", "4.99", 12, "2025-04-19", "0.10"),
        _standard("Potatoes", "0.79", 60, "0.00"),
        _standard("Onions", "0.89", 45, "0.05"),
    ]


def template_payload() -> List[Dict[str, Any]]:
    return encode_records(template_records())


def placeholder_records() -> List[Record]:
    """Last-resort in-memory catalog when nothing can be written to disk."""
    return [_standard("Sample Product", "9.99", 10, "0.00")]
