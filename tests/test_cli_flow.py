import json
from pathlib import Path

import pandas as pd
from typer.testing import CliRunner

from wealth_core.cli import app


runner = CliRunner()


def _ledger_copy(tmp_path: Path) -> Path:
    ledger_path = tmp_path / "ledger.json"
    fixture = Path(__file__).parent / "data" / "ledger.json"
    ledger_path.write_text(fixture.read_text())
    return ledger_path


def test_cli_summary_and_returns(tmp_path: Path):
    ledger_path = _ledger_copy(tmp_path)

    result = runner.invoke(app, ["--data", str(ledger_path), "summary", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["label"] == "2024-03"
    assert payload["total"] == 6500
    assert payload["savings"] == 1200
    assert payload["return_pct"] == 8.33

    result = runner.invoke(app, ["--data", str(ledger_path), "returns", "--month", "2024-02"])
    assert result.exit_code == 0, result.output
    assert "9.09%" in result.output


def test_cli_upsert_select_and_targets_persist(tmp_path: Path):
    ledger_path = _ledger_copy(tmp_path)

    result = runner.invoke(
        app,
        [
            "--data",
            str(ledger_path),
            "upsert",
            "--month",
            "2024-04",
            "--income",
            "3200",
            "--cash",
            "2000",
            "--index-funds",
            "5000",
            "--wallet",
            "coinbase=250",
            "--select",
        ],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(
        app,
        [
            "--data",
            str(ledger_path),
            "set-targets",
            "--cash",
            "20",
            "--interest-bearing",
            "20",
            "--crypto",
            "5",
            "--index-funds",
            "55",
        ],
    )
    assert result.exit_code == 0, result.output

    saved = json.loads(ledger_path.read_text())
    assert [m["month"] for m in saved["history"]][-1] == "2024-04"
    assert saved["history"][-1]["cryptoHoldings"]["coinbase"] == 250
    assert saved["history"][-1]["cryptoHoldings"]["ledger"] == 0
    assert saved["selectedMonth"] == "2024-04"
    assert saved["targets"]["indexFunds"] == 55

    result = runner.invoke(app, ["--data", str(ledger_path), "targets"])
    assert result.exit_code == 0, result.output
    assert "On target" in result.output


def test_cli_evolution_export_and_compare(tmp_path: Path):
    ledger_path = _ledger_copy(tmp_path)

    result = runner.invoke(app, ["--data", str(ledger_path), "evolution", "--window", "2", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == [["2024-02", 6000.0], ["2024-03", 6500.0]]

    csv_path = tmp_path / "out" / "history.csv"
    result = runner.invoke(app, ["--data", str(ledger_path), "export", "--out", str(csv_path)])
    assert result.exit_code == 0, result.output
    frame = pd.read_csv(csv_path)
    assert frame["change"].tolist() == [0, 500, 500]

    result = runner.invoke(app, ["--data", str(ledger_path), "compare", "2024-01", "2024-03"])
    assert result.exit_code == 0, result.output
    assert "+18.18%" in result.output

    result = runner.invoke(app, ["--data", str(ledger_path), "compare", "2024-01", "2030-01"])
    assert result.exit_code == 1


def test_cli_unknown_selection_and_bad_document(tmp_path: Path):
    ledger_path = _ledger_copy(tmp_path)
    result = runner.invoke(app, ["--data", str(ledger_path), "select", "December"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["--data", str(ledger_path), "summary", "--json"])
    payload = json.loads(result.output)
    assert payload["total"] == 0 and payload["return_pct"] == 0

    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({"history": []}))
    result = runner.invoke(app, ["--data", str(broken), "summary"])
    assert result.exit_code != 0
