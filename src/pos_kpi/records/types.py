"""Typed sale event variants.

Raw store records come in five shapes. Each shape is a frozen dataclass here,
and ``RecordKind`` names them so classification can be matched exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Union


class RecordKind(str, Enum):
    """The five sale event variants, valued by their store discriminator."""

    UNIT_SALE = "unitaria"
    REFUND = "abono"
    TURN_CLOSE = "cierre"
    ADJUSTMENT = "ajuste"
    LEGACY_TOTAL = "total"


@dataclass(frozen=True)
class UnitSale:
    """One completed transaction (one ticket)."""

    id: str
    employee: str
    day: date
    time: Optional[str]
    item_count: int
    amount: float


@dataclass(frozen=True)
class Refund:
    """A return; reduces net revenue."""

    id: str
    employee: str
    day: date
    time: Optional[str]
    amount: float


@dataclass(frozen=True)
class TurnClose:
    """End-of-shift snapshot supplying the visitor and hours denominators."""

    id: str
    employee: str
    day: date
    visitor_count: int
    hours_worked: float


@dataclass(frozen=True)
class Adjustment:
    """Manual correction applied on top of computed totals."""

    id: str
    employee: str
    day: date
    sales_delta: float
    refund_delta: float
    reason: str


@dataclass(frozen=True)
class LegacyTotal:
    """Pre-aggregated full-day record from the older recording format.

    Attributes:
        gross_sales: The stored sales figure (``venta``). It is already net of
            the record's own ``refunds``.
        reported_gross: Optional pre-refund figure (``ventaBruta``) some rows
            carry; only used for display.
    """

    id: str
    employee: str
    day: date
    visitor_count: int
    operation_count: int
    unit_count: int
    gross_sales: float
    refunds: float
    hours_worked: float
    reported_gross: Optional[float] = None


SaleEvent = Union[UnitSale, Refund, TurnClose, Adjustment, LegacyTotal]

EVENT_TYPES: dict[RecordKind, type] = {
    RecordKind.UNIT_SALE: UnitSale,
    RecordKind.REFUND: Refund,
    RecordKind.TURN_CLOSE: TurnClose,
    RecordKind.ADJUSTMENT: Adjustment,
    RecordKind.LEGACY_TOTAL: LegacyTotal,
}


def kind_of(event: SaleEvent) -> RecordKind:
    """Return the RecordKind of a typed event."""
    for kind, event_type in EVENT_TYPES.items():
        if isinstance(event, event_type):
            return kind
    raise TypeError(f"not a sale event: {event!r}")
