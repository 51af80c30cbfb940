"""Smoke tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from autosplit.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the CLI at a throwaway database."""
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "cli.db"))
    monkeypatch.chdir(tmp_path)


def invoke(*args: str):
    result = runner.invoke(app, list(args))
    assert result.exit_code == 0, result.output
    return result


@pytest.fixture
def trip_with_dinner():
    invoke("trip", "create", "Goa")
    invoke("member", "add", "a", "Asha")
    invoke("member", "add", "b", "Bala")
    invoke("member", "add", "c", "Chetan")
    invoke("expense", "add", "Dinner", "30", "--paid-by", "a")


def test_show_settlement(trip_with_dinner):
    result = invoke("settle", "show")

    assert "Balances" in result.output
    assert "Suggested Transfers" in result.output
    assert "Bala" in result.output
    assert "₹10.00" in result.output


def test_record_and_confirm(trip_with_dinner):
    invoke("settle", "record", "--from", "b", "--to", "a", "--amount", "10", "--yes")
    result = invoke("settle", "confirm", "1", "--as", "b")

    assert "Payment completed" in result.output

    shown = invoke("settle", "show")
    assert "Still Outstanding" in shown.output


def test_confirm_by_wrong_member_fails(trip_with_dinner):
    invoke("settle", "record", "--from", "b", "--to", "a", "--amount", "10", "--yes")

    result = runner.invoke(app, ["settle", "confirm", "1", "--as", "a"])

    assert result.exit_code == 1
    assert "Only the person who owes" in result.output


def test_custom_split_mismatch_fails(trip_with_dinner):
    result = runner.invoke(
        app,
        ["expense", "add", "Cab", "9", "-p", "b", "--mode", "custom", "-s", "a=5"],
    )

    assert result.exit_code == 1
    assert "must equal" in result.output


def test_split_preview():
    result = invoke("settle", "split", "1", "3")

    assert "₹0.34" in result.output
    assert "₹0.33" in result.output


def test_no_trip_selected():
    result = runner.invoke(app, ["settle", "show"])

    assert result.exit_code == 1
    assert "No trip selected" in result.output


def test_equal_split_with_typo_fails(trip_with_dinner):
    result = runner.invoke(
        app,
        ["expense", "add", "Cab", "9", "-p", "a", "--among", "b", "--among", "bal"],
    )

    assert result.exit_code == 1
    assert "Not members" in result.output


def test_amount_too_large_fails(trip_with_dinner):
    result = runner.invoke(app, ["expense", "add", "Yacht", "1e30", "-p", "a"])

    assert result.exit_code == 1
    assert "out of range" in result.output


def test_pairwise_across_trips(trip_with_dinner):
    invoke("trip", "create", "Manali")
    invoke("member", "add", "a", "Asha")
    invoke("member", "add", "b", "Bala")
    invoke("expense", "add", "Hotel", "40", "--paid-by", "b")

    result = invoke("settle", "show", "--all-trips")

    assert "Pairwise Debts" in result.output
    assert "Balances" not in result.output
    assert "Chetan" in result.output
    # Bala owed Asha 10 in Goa; Asha owes Bala 20 in Manali
    assert "₹10.00" in result.output
    assert "₹20.00" not in result.output
