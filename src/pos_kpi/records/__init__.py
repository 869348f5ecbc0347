"""Sale event records.

This module turns raw store records into typed sale events:

- **UnitSale** (``tipo="unitaria"``): one ticket
- **Refund** (``tipo="abono"``): a return
- **TurnClose** (``tipo="cierre"``): end-of-shift visitors and hours
- **Adjustment** (``tipo="ajuste"``): manual correction
- **LegacyTotal** (no ``tipo``, or ``"total"``): older full-day record

Example:
    >>> from pos_kpi.records import parse_record
    >>> parse_record({"id": "s1", "tipo": "unitaria", "empleada": "Ingrid",
    ...               "fecha": "2024-03-01", "articulos": 2, "venta": 20})
    UnitSale(id='s1', employee='Ingrid', day=datetime.date(2024, 3, 1), time=None, item_count=2, amount=20.0)
"""

from pos_kpi.records.classify import classify_record, parse_record, parse_records
from pos_kpi.records.types import (
    Adjustment,
    LegacyTotal,
    RecordKind,
    Refund,
    SaleEvent,
    TurnClose,
    UnitSale,
    kind_of,
)

__all__ = [
    "Adjustment",
    "LegacyTotal",
    "RecordKind",
    "Refund",
    "SaleEvent",
    "TurnClose",
    "UnitSale",
    "classify_record",
    "kind_of",
    "parse_record",
    "parse_records",
]
