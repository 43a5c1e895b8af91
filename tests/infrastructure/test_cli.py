"""End-to-end tests for the click command-line interface."""

import pytest
from click.testing import CliRunner

from orderflow.infrastructure.cli.main import cli


@pytest.fixture
def run(tmp_path, monkeypatch):
    monkeypatch.setenv("ORDERFLOW_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("ORDERFLOW_DEFAULT_USER", "clerk")
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(cli, ["order", *args])

    return invoke


def _create(run):
    result = run(
        "create",
        "--customer", "Acme Castings",
        "--items", "P1:Flange:FL-100:100:4.00,P2:Gasket:GK-020:40",
        "--delivery-date", "2026-04-01",
    )
    assert result.exit_code == 0, result.output
    return result


class TestOrderCli:

    def test_create_and_show(self, run):
        created = _create(run)
        assert "Order SO-00001 created" in created.output

        shown = run("show", "--id", "SO-00001")
        assert shown.exit_code == 0
        assert "Acme Castings" in shown.output
        assert "FL-100" in shown.output
        assert "pending_approval" in shown.output

    def test_fulfillment_commands(self, run):
        _create(run)
        assert run("approve", "--id", "SO-00001").exit_code == 0

        result = run("allocate", "--id", "SO-00001", "--product", "P1", "--qty", "40")
        assert result.exit_code == 0, result.output
        assert "product=partially_ready" in result.output
        assert "order=partial_fulfillment" in result.output

        run("allocate", "--id", "SO-00001", "--product", "P1", "--qty", "60")
        result = run("dispatch", "--id", "SO-00001", "--product", "P1", "--qty", "100")
        assert "product=dispatched" in result.output

        result = run("deliver", "--id", "SO-00001", "--product", "P1", "--qty", "100")
        assert "product=delivered" in result.output

    def test_history_shows_acting_user(self, run):
        _create(run)
        run("approve", "--id", "SO-00001", "--user", "manager")

        result = run("history", "--id", "SO-00001")
        assert "Order created" in result.output
        assert "Order approved" in result.output
        assert "manager" in result.output
        assert "clerk" in result.output

    def test_list_with_status_filter(self, run):
        _create(run)
        _create(run)
        run("reject", "--id", "SO-00002")

        result = run("list", "--status", "cancelled")
        assert "SO-00002" in result.output
        assert "SO-00001" not in result.output

    def test_domain_error_reported(self, run):
        _create(run)
        result = run("dispatch", "--id", "SO-00001", "--product", "P1", "--qty", "5")
        assert result.exit_code == 1
        assert "Product must be ready or partially ready to dispatch" in result.output

    def test_unknown_order_reported(self, run):
        result = run("show", "--id", "SO-00077")
        assert result.exit_code == 1
        assert "Order SO-00077 not found" in result.output

    def test_cancel_with_reason(self, run):
        _create(run)
        result = run("cancel", "--id", "SO-00001", "--reason", "duplicate")
        assert result.exit_code == 0
        assert "status=cancelled" in result.output

    @pytest.mark.parametrize("price", ["nan", "inf"])
    def test_non_finite_price_reported(self, run, price):
        result = run("create", "--customer", "Acme", "--items", f"P1:Flange:FL-100:1:{price}")
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Price of Flange must be a finite number" in result.output

    def test_invalid_log_level_reported(self, run, monkeypatch):
        monkeypatch.setenv("ORDERFLOW_LOG_LEVEL", "verbose")
        result = run("list")
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "log_level" in result.output

    def test_bad_item_format(self, run):
        result = run("create", "--customer", "Acme", "--items", "Flange:10")
        assert result.exit_code == 2
        assert "Expected 'ID:Name:SKU:Quantity[:Price]'" in result.output
