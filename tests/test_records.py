"""Tests for record classification into typed sale events."""

from datetime import date, datetime

import pytest

from pos_kpi.config import EngineConfig
from pos_kpi.exceptions import ClassificationError, ConfigError
from pos_kpi.records import (
    Adjustment,
    LegacyTotal,
    RecordKind,
    Refund,
    TurnClose,
    UnitSale,
    classify_record,
    kind_of,
    parse_record,
    parse_records,
)
from tests.test_utils import adjustment, legacy_total, refund, turn_close, unit_sale


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        (unit_sale("1"), RecordKind.UNIT_SALE),
        (refund("2"), RecordKind.REFUND),
        (turn_close("3"), RecordKind.TURN_CLOSE),
        (adjustment("4"), RecordKind.ADJUSTMENT),
        (legacy_total("5"), RecordKind.LEGACY_TOTAL),
        ({**legacy_total("6"), "tipo": "total"}, RecordKind.LEGACY_TOTAL),
    ],
)
def test_classify_record_by_discriminator(record: dict, expected: RecordKind) -> None:
    """Each discriminator maps to its variant; no tipo means legacy total."""
    assert classify_record(record) is expected


def test_classify_unknown_tipo_raises() -> None:
    """An unrecognised discriminator is surfaced, not ignored."""
    with pytest.raises(ClassificationError) as excinfo:
        classify_record({"id": "x1", "tipo": "devolucion", "empleada": "Ingrid"})
    assert excinfo.value.record_id == "x1"
    assert "devolucion" in str(excinfo.value)


def test_classify_discriminatorless_record_without_legacy_fields_raises() -> None:
    """A record with no tipo must carry visitors and operations to be a legacy total."""
    with pytest.raises(ClassificationError):
        classify_record({"id": "x2", "empleada": "Marta", "fecha": "2024-03-01", "venta": 100})


def test_parse_unit_sale() -> None:
    """Unit sale fields are read from their store names."""
    event = parse_record(unit_sale("s1", items=2, amount=19.5, time="11:30"))
    assert event == UnitSale(
        id="s1",
        employee="Ingrid",
        day=date(2024, 3, 1),
        time="11:30",
        item_count=2,
        amount=19.5,
    )
    assert kind_of(event) is RecordKind.UNIT_SALE


def test_parse_all_variants() -> None:
    """Every variant is built with its typed fields."""
    events = parse_records(
        [
            refund("r1", amount=7),
            turn_close("c1", visitors=33, hours=6.5),
            adjustment("j1", sales_delta=12, refund_delta=2, reason="till count"),
            legacy_total("l1", gross=530),
        ]
    )
    assert isinstance(events[0], Refund) and events[0].amount == 7.0
    assert isinstance(events[1], TurnClose)
    assert (events[1].visitor_count, events[1].hours_worked) == (33, 6.5)
    assert isinstance(events[2], Adjustment)
    assert (events[2].sales_delta, events[2].refund_delta, events[2].reason) == (12.0, 2.0, "till count")
    assert isinstance(events[3], LegacyTotal)
    assert events[3].gross_sales == 480.0
    assert events[3].reported_gross == 530.0
    assert events[3].refunds == 50.0


def test_missing_numeric_fields_default_to_zero() -> None:
    """Absent optional numbers count as zero."""
    event = parse_record({"id": "j2", "tipo": "ajuste", "empleada": "Marta", "fecha": "2024-03-01"})
    assert isinstance(event, Adjustment)
    assert event.sales_delta == 0.0
    assert event.refund_delta == 0.0
    assert event.reason == ""


def test_numeric_strings_are_accepted() -> None:
    """Numbers stored as strings are converted."""
    event = parse_record({**unit_sale("s2"), "venta": "12.50", "articulos": "3"})
    assert isinstance(event, UnitSale)
    assert event.amount == 12.5
    assert event.item_count == 3


@pytest.mark.parametrize(
    "record",
    [
        {**unit_sale("bad1"), "venta": "doce"},
        {**unit_sale("bad2"), "articulos": 1.5},
        {**unit_sale("bad3"), "venta": True},
    ],
)
def test_non_numeric_fields_raise(record: dict) -> None:
    """Malformed numbers make the record unclassifiable."""
    with pytest.raises(ClassificationError) as excinfo:
        parse_record(record)
    assert excinfo.value.record_id == record["id"]


def test_unknown_employee_raises() -> None:
    """Only the two roster employees are accepted."""
    with pytest.raises(ClassificationError):
        parse_record(unit_sale("s3", employee="Laura"))


def test_missing_id_raises() -> None:
    """Every record needs an id."""
    record = unit_sale("s4")
    del record["id"]
    with pytest.raises(ClassificationError):
        parse_record(record)


def test_unparseable_date_raises() -> None:
    """A date that cannot be read is a classification error, not today's date."""
    with pytest.raises(ClassificationError):
        parse_record({**unit_sale("s5"), "fecha": "not a date"})
    with pytest.raises(ClassificationError):
        parse_record({**unit_sale("s6"), "fecha": None})


@pytest.mark.parametrize("fecha", [10**20, -(10**20), 10**400, {"seconds": 10**18}, float("nan")])
def test_out_of_range_timestamp_raises(fecha: object) -> None:
    """Timestamps the platform cannot represent are classification errors."""
    with pytest.raises(ClassificationError) as excinfo:
        parse_record({**unit_sale("s7"), "fecha": fecha})
    assert excinfo.value.record_id == "s7"


@pytest.mark.parametrize(
    "fecha",
    [
        date(2024, 3, 1),
        datetime(2024, 3, 1, 18, 45),
        "2024-03-01",
        "2024-03-01T23:59:00",
        {"seconds": datetime(2024, 3, 1, 12, 0).timestamp()},
        datetime(2024, 3, 1, 12, 0).timestamp() * 1000,
    ],
)
def test_dates_normalise_to_calendar_day(fecha: object) -> None:
    """Every stored date shape resolves to the local calendar day."""
    event = parse_record({**unit_sale("d1"), "fecha": fecha})
    assert event.day == date(2024, 3, 1)


def test_custom_roster() -> None:
    """The employee roster comes from the config."""
    config = EngineConfig(employees=("Ana", "Bea"))
    event = parse_record(unit_sale("s7", employee="Bea"), config)
    assert event.employee == "Bea"
    with pytest.raises(ClassificationError):
        parse_record(unit_sale("s8", employee="Ingrid"), config)


@pytest.mark.parametrize(
    "config",
    [
        EngineConfig(employees=("Ana", "Ana")),
        EngineConfig(employees=("Ana",)),  # type: ignore[arg-type]
        EngineConfig(decimals=-1),
        EngineConfig(cross_check_tolerance=-0.5),
    ],
)
def test_invalid_config_raises(config: EngineConfig) -> None:
    """Invalid settings are rejected before any record is parsed."""
    with pytest.raises(ConfigError):
        parse_record(unit_sale("s9"), config)
