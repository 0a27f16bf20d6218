# tests/test_cli.py
import json

import pytest
from typer.testing import CliRunner

import propreport.entrypoints.cli as cli

runner = CliRunner()


@pytest.fixture
def report_file(tmp_path, sample_report):
    p = tmp_path / "report.json"
    p.write_text(json.dumps(sample_report), encoding="utf-8")
    return p


def test_metrics_prints_text_report(report_file):
    result = runner.invoke(cli.app, ["metrics", str(report_file)])

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("Investment Report — 111 Cultural Park Blvd S")
    assert "Max price at 8% cap: $302,549" in result.stdout


def test_metrics_json(report_file):
    result = runner.invoke(cli.app, ["metrics", str(report_file), "--json"])

    assert result.exit_code == 0, result.output
    view = json.loads(result.stdout)
    assert view["metrics"]["netOperatingIncomeAnnual"] == pytest.approx(24930)
    assert view["warnings"] == []


def test_metrics_invalid_json_exits_2(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{nope", encoding="utf-8")

    result = runner.invoke(cli.app, ["metrics", str(p)])

    assert result.exit_code == 2
    assert "invalid JSON" in result.output


def test_generate_without_api_key_fails(monkeypatch, settings):
    monkeypatch.setattr(cli, "config", settings.model_copy(update={"OPENAI_API_KEY": None}))

    result = runner.invoke(cli.app, ["generate", "--address", "12 Main St"])

    assert result.exit_code == 1
    assert "Missing OPENAI_API_KEY" in result.output


def test_generate_saves_and_prints(monkeypatch, tmp_path, settings, sample_report):
    seen = {}

    def fake_generate(address, purchase_price, overrides, *, settings):
        seen.update(address=address, price=purchase_price, overrides=overrides)
        return sample_report

    monkeypatch.setattr(cli, "config", settings)
    monkeypatch.setattr(cli, "generate_report", fake_generate)
    out = tmp_path / "saved.json"

    result = runner.invoke(
        cli.app,
        ["generate", "--address", "12 Main St", "--price", "$500,000", "--overrides", "down 25%", "--save", str(out), "--json"],
    )

    assert result.exit_code == 0, result.output
    assert seen == {"address": "12 Main St", "price": 500000.0, "overrides": "down 25%"}
    assert json.loads(out.read_text(encoding="utf-8")) == sample_report
    assert json.loads(result.stdout)["address"] == sample_report["subject"]["address"]
