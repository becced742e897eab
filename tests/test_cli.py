from unittest import mock

import pytest
from typer.testing import CliRunner

from apps.simulator.src import main
from libs.models.orders import OrderStatus, SynthesisResult

runner = CliRunner()


@pytest.fixture
def service(monkeypatch):
    service = mock.Mock()
    monkeypatch.setattr(main, "init_observability", mock.Mock())
    monkeypatch.setattr(main, "bootstrap", mock.Mock(return_value=service))
    return service


def test_generate_reports_created_order(service):
    service.generate_now.return_value = SynthesisResult(ok=True, order_id=101, status=OrderStatus.COMPLETED)

    result = runner.invoke(main.app, ["generate"])

    assert result.exit_code == 0
    assert "Simulated order 101 has been created successfully" in result.output


def test_generate_failure_exits_non_zero(service):
    service.generate_now.return_value = SynthesisResult(
        ok=False, error="NoProductsAvailable", message="No products found to create an order."
    )

    result = runner.invoke(main.app, ["generate"])

    assert result.exit_code == 1
    assert "NoProductsAvailable" in result.output


def test_install_passes_generation_options(service):
    service.install.return_value = 1_700_000_500

    result = runner.invoke(main.app, ["install", "--generate", "25", "--seed", "4"])

    assert result.exit_code == 0
    service.install.assert_called_once_with(generate=25, seed=4)
    assert "1700000500" in result.output


def test_install_with_zero_rate(service):
    service.install.return_value = None

    result = runner.invoke(main.app, ["install"])

    assert result.exit_code == 0
    assert "nothing scheduled" in result.output


def test_run_forwards_max_runs(service):
    result = runner.invoke(main.app, ["run", "--max-runs", "3"])

    assert result.exit_code == 0
    service.run.assert_called_once_with(max_runs=3)


def test_uninstall(service):
    result = runner.invoke(main.app, ["uninstall"])

    assert result.exit_code == 0
    service.uninstall.assert_called_once_with()


def test_settings_prints_effective_values(monkeypatch):
    monkeypatch.delenv("SIMULATOR__SETTINGS_FILE", raising=False)
    monkeypatch.setenv("SIMULATOR__ORDERS_PER_PERIOD", "12")

    result = runner.invoke(main.app, ["settings"])

    assert result.exit_code == 0
    assert '"orders_per_period": 12' in result.output
