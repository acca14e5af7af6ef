import json

import pytest
from click.testing import CliRunner

import core.logging
from cli import cli


@pytest.fixture(autouse=True)
def no_global_logging(monkeypatch):
    monkeypatch.setattr(core.logging, "configure_logging", lambda settings: None)


def test_market_data_prints_snapshots():
    result = CliRunner().invoke(cli, ["market-data", "btc", "eth", "--provider", "synthetic"])

    assert result.exit_code == 0, result.output
    snapshots = json.loads(result.output)
    assert [s["symbol"] for s in snapshots] == ["BTC", "ETH"]
    assert all(s["price"] > 0 for s in snapshots)


def test_market_data_defaults_to_configured_symbols():
    result = CliRunner().invoke(cli, ["market-data", "--provider", "synthetic"])

    assert result.exit_code == 0, result.output
    symbols = [s["symbol"] for s in json.loads(result.output)]
    assert symbols == ["BTC", "ETH", "BNB", "SOL", "XRP", "ADA", "DOGE"]


def test_market_data_rejects_blank_symbol():
    result = CliRunner().invoke(cli, ["market-data", "BTC", " ", "--provider", "synthetic"])

    assert result.exit_code == 1
    assert "symbols must not be blank" in result.output


def test_collaborate_rejects_malformed_file(tmp_path):
    task_file = tmp_path / "task.json"
    task_file.write_text("{not json", encoding="utf-8")

    result = CliRunner().invoke(cli, ["collaborate", str(task_file)])

    assert result.exit_code == 1
    assert "Invalid task file" in result.output


def test_collaborate_reports_missing_agents(tmp_path):
    task_file = tmp_path / "task.json"
    task_file.write_text(json.dumps({"symbol": "BTC", "question": "Why?", "agents": []}), encoding="utf-8")

    result = CliRunner().invoke(cli, ["collaborate", str(task_file)])

    assert result.exit_code == 1
    assert "No enabled agents" in result.output
