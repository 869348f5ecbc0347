"""Smoke tests for the command-line wrapper."""

import json
from pathlib import Path

import pytest

from pos_kpi.cli import main
from tests.test_utils import scenario_a_records, scenario_b_records


@pytest.fixture
def records_file(tmp_path: Path) -> Path:
    path = tmp_path / "records.json"
    path.write_text(json.dumps(scenario_a_records() + scenario_b_records()), encoding="utf-8")
    return path


def test_cli_prints_history(records_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--file", str(records_file)])
    out = capsys.readouterr().out
    assert "[OK] Loaded 7 record(s) covering 1 day(s)" in out
    assert "Net sales: 500.00" in out
    assert "Conversion: 25.00%" in out


def test_cli_masks_deleted_ids(records_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--file", str(records_file), "--deleted", "b1", "b2"])
    out = capsys.readouterr().out
    assert "Net sales: 40.00" in out


def test_cli_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        main(["--file", str(tmp_path / "missing.json")])
