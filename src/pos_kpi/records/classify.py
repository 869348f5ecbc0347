"""Record classification: raw store mappings to typed sale events.

The ``tipo`` field is the discriminator. Records written by the older
one-row-per-day format carry no ``tipo`` (or ``"total"``) and are recognised
by their visitor and operation fields instead. Anything else is a
ClassificationError: malformed data is surfaced, never dropped.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Any

from pos_kpi.config import LEGACY_KINDS, EngineConfig, resolve_config
from pos_kpi.exceptions import ClassificationError
from pos_kpi.records.types import (
    Adjustment,
    LegacyTotal,
    RecordKind,
    Refund,
    SaleEvent,
    TurnClose,
    UnitSale,
)
from pos_kpi.utils import to_calendar_day

logger = logging.getLogger(__name__)

# Fields whose presence marks a discriminator-less record as a legacy total
LEGACY_REQUIRED_FIELDS = ("clientes", "operaciones")

_KINDS_BY_TIPO = {kind.value: kind for kind in RecordKind if kind is not RecordKind.LEGACY_TOTAL}


def _record_id(raw: Mapping[str, Any]) -> str | None:
    value = raw.get("id")
    if value is None or value == "":
        return None
    return str(value)


def classify_record(raw: Mapping[str, Any]) -> RecordKind:
    """Return which sale event variant a raw record represents.

    Args:
        raw: A record as returned by the record store.

    Returns:
        The RecordKind of the record.

    Raises:
        ClassificationError: If the discriminator is unknown, or the record
            has no discriminator and lacks the legacy total fields.

    Examples:
        >>> classify_record({"id": "a1", "tipo": "abono"})
        <RecordKind.REFUND: 'abono'>
        >>> classify_record({"id": "a2", "clientes": 30, "operaciones": 4})
        <RecordKind.LEGACY_TOTAL: 'total'>

    """
    tipo = raw.get("tipo")
    if tipo in LEGACY_KINDS:
        missing = [f for f in LEGACY_REQUIRED_FIELDS if raw.get(f) is None]
        if missing:
            raise ClassificationError(
                f"Record {_record_id(raw)!r} has no recognised 'tipo' and is missing "
                f"legacy total fields {missing}",
                record_id=_record_id(raw),
            )
        return RecordKind.LEGACY_TOTAL

    kind = _KINDS_BY_TIPO.get(tipo) if isinstance(tipo, str) else None
    if kind is None:
        raise ClassificationError(
            f"Record {_record_id(raw)!r} has unknown tipo {tipo!r}. "
            f"Expected one of {sorted(_KINDS_BY_TIPO)} or a legacy total.",
            record_id=_record_id(raw),
        )
    return kind


def _number(raw: Mapping[str, Any], key: str, record_id: str) -> float:
    """Read a numeric field; missing, empty and NaN count as 0."""
    value = raw.get(key)
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise ClassificationError(
            f"Record {record_id!r}: field {key!r} must be numeric, got {value!r}",
            record_id=record_id,
        )
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ClassificationError(
            f"Record {record_id!r}: field {key!r} must be numeric, got {value!r}",
            record_id=record_id,
        ) from e
    if math.isnan(number):
        return 0.0
    return number


def _count(raw: Mapping[str, Any], key: str, record_id: str) -> int:
    """Read a whole-number field (items, visitors, operations)."""
    number = _number(raw, key, record_id)
    if not number.is_integer():
        raise ClassificationError(
            f"Record {record_id!r}: field {key!r} must be a whole number, got {number!r}",
            record_id=record_id,
        )
    return int(number)


def _optional_number(raw: Mapping[str, Any], key: str, record_id: str) -> float | None:
    if raw.get(key) is None or raw.get(key) == "":
        return None
    return _number(raw, key, record_id) or None


def parse_record(raw: Mapping[str, Any], config: EngineConfig | None = None) -> SaleEvent:
    """Classify a raw record and build its typed event.

    Args:
        raw: A record as returned by the record store.
        config: Engine configuration (employee roster). Defaults to
            ``DEFAULT_CONFIG``.

    Returns:
        One of UnitSale, Refund, TurnClose, Adjustment or LegacyTotal.

    Raises:
        ClassificationError: If the record cannot be classified, has no id,
            names an unknown employee, has an unparseable date, or holds a
            non-numeric value in a numeric field.

    """
    config = resolve_config(config)
    kind = classify_record(raw)

    record_id = _record_id(raw)
    if record_id is None:
        raise ClassificationError(f"Record of kind {kind.value!r} has no id")

    employee = raw.get("empleada")
    if employee not in config.employees:
        raise ClassificationError(
            f"Record {record_id!r}: unknown employee {employee!r}. "
            f"Expected one of {list(config.employees)}",
            record_id=record_id,
        )

    try:
        day = to_calendar_day(raw.get("fecha"))
    except ValueError as e:
        raise ClassificationError(f"Record {record_id!r}: {e}", record_id=record_id) from e

    time = raw.get("hora") or None

    if kind is RecordKind.UNIT_SALE:
        return UnitSale(
            id=record_id,
            employee=employee,
            day=day,
            time=time,
            item_count=_count(raw, "articulos", record_id),
            amount=_number(raw, "venta", record_id),
        )
    if kind is RecordKind.REFUND:
        return Refund(
            id=record_id,
            employee=employee,
            day=day,
            time=time,
            amount=_number(raw, "abono", record_id),
        )
    if kind is RecordKind.TURN_CLOSE:
        return TurnClose(
            id=record_id,
            employee=employee,
            day=day,
            visitor_count=_count(raw, "clientes", record_id),
            hours_worked=_number(raw, "horasTrabajadas", record_id),
        )
    if kind is RecordKind.ADJUSTMENT:
        return Adjustment(
            id=record_id,
            employee=employee,
            day=day,
            sales_delta=_number(raw, "ventaAjuste", record_id),
            refund_delta=_number(raw, "abonoAjuste", record_id),
            reason=str(raw.get("motivo") or ""),
        )
    if kind is RecordKind.LEGACY_TOTAL:
        return LegacyTotal(
            id=record_id,
            employee=employee,
            day=day,
            visitor_count=_count(raw, "clientes", record_id),
            operation_count=_count(raw, "operaciones", record_id),
            unit_count=_count(raw, "unidades", record_id),
            gross_sales=_number(raw, "venta", record_id),
            refunds=_number(raw, "abonos", record_id),
            hours_worked=_number(raw, "horasTrabajadas", record_id),
            reported_gross=_optional_number(raw, "ventaBruta", record_id),
        )
    raise ClassificationError(f"Unhandled record kind {kind!r}", record_id=record_id)


def parse_records(
    raws: Iterable[Mapping[str, Any]],
    config: EngineConfig | None = None,
) -> list[SaleEvent]:
    """Parse every raw record; the first malformed one raises.

    Args:
        raws: Raw records, already filtered through the deletion mask.
        config: Engine configuration.

    Returns:
        Typed events in input order.

    Raises:
        ClassificationError: On the first record that cannot be parsed.

    """
    config = resolve_config(config)
    events = [parse_record(raw, config) for raw in raws]
    logger.debug("Parsed %d record(s)", len(events))
    return events
