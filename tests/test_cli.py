from datetime import date

import pytest

import diamond_ledger.cli as cli
import diamond_ledger.periods as periods


@pytest.fixture
def run(tmp_path, monkeypatch, capsys):
    """Run the CLI against a temporary configuration and database."""
    config_path = tmp_path / "diamond_ledger_config.toml"
    config_path.write_text(
        '[storage]\npath = "ledger.sqlite"\n\n[insights]\napi_key_env = "DL_TEST_KEY"\n',
        encoding="utf-8",
    )
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 3, 18))
    monkeypatch.delenv("DL_TEST_KEY", raising=False)

    def _run(*argv: str) -> str:
        cli.main(["--config", str(config_path), *argv])
        return capsys.readouterr().out

    return _run


def test_version(capsys) -> None:
    cli.main(["--version"])
    assert "diamond_ledger version" in capsys.readouterr().out


def test_add_sale_then_list(run) -> None:
    out = run("sales", "add", "--date", "2025-03-10", "--quantity", "4")
    assert "Sale recorded" in out

    out = run("sales", "list")
    assert "Period: Mar 2025" in out
    assert "2025-03-10" in out


def test_invalid_quantity_is_rejected(run) -> None:
    with pytest.raises(SystemExit):
        run("sales", "add", "--quantity", "0")


def test_invalid_date_is_rejected(run) -> None:
    with pytest.raises(SystemExit):
        run("sales", "add", "--date", "18/03/2025", "--quantity", "1")


def test_future_sale_only_warns(run) -> None:
    out = run("sales", "add", "--date", "2025-04-01", "--quantity", "1")
    assert "Warning" in out
    assert "Sale recorded" in out


def test_dashboard_and_reports(run) -> None:
    out = run("--month", "Mar", "--year", "2025", "dashboard")
    assert "Period: Mar 2025" in out
    assert "net_profit" in out
    assert "Annual growth" in out

    assert "Sócio A" in run("reconciliation")
    assert "balance" in run("summary")
    assert "Daily net profit" in run("series", "--all")


def test_settings_split_is_linked(run) -> None:
    out = run("settings", "split", "--partner-a", "45")
    assert "Sócio A: 45%" in out
    assert "Sócio B: 55%" in out

    assert "Sócio B: 55%" in run("settings", "show")


def test_delete_unknown_id_exits(run) -> None:
    with pytest.raises(SystemExit):
        run("expenses", "delete", "missing")


def test_export_and_backup(run, tmp_path) -> None:
    out = run(
        "--from-date", "2025-03-01", "--to-date", "2025-03-31",
        "export", "--output", str(tmp_path / "ledger.csv"),
    )
    assert "5 ledger lines" in out
    assert (tmp_path / "ledger.csv").is_file()

    backup = tmp_path / "backup.json"
    run("backup", "export", str(backup))
    out = run("backup", "restore", str(backup))
    assert "Backup restored: 2 sales, 2 commissions, 1 expenses." in out


def test_insights_without_key(run) -> None:
    assert "API Key is missing" in run("insights")


@pytest.mark.parametrize("value", ["nan", "inf", "-inf", "-5"])
def test_non_finite_amounts_are_rejected(run, value) -> None:
    with pytest.raises(SystemExit):
        run(
            "expenses", "add", "--description", "Táxi",
            "--category", "Transporte", "--value", value,
        )
    with pytest.raises(SystemExit):
        run(
            "commissions", "add", "--for-month", "Mar", "--for-year", "2025",
            "--value", value,
        )


def test_dashboard_monthly_growth_uses_the_current_year(run) -> None:
    out = run("--month", "Mar", "--year", "2023", "dashboard")

    assert "Period: Mar 2023" in out
    assert "Monthly growth (2025):" in out


def test_price_defaults_drive_the_reports(run) -> None:
    out = run("settings", "defaults", "--repayment-rate", "40", "--quantity", "3")
    assert "repayment rate per unit:  40" in out
    assert "default quantity:         3" in out

    out = run("sales", "add", "--date", "2025-03-10")
    assert "qty 3" in out

    # 3 units: debt 3 * 40, net profit 3 * (75 - 40)
    out = run("sales", "list", "--all")
    assert "120.0" in out
    assert "105.0" in out


def test_settings_defaults_reject_bad_prices(run) -> None:
    with pytest.raises(SystemExit):
        run("settings", "defaults", "--sale-price", "nan")
