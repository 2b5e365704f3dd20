"""
Unit tests for the gamerewards CLI
"""

import json
from unittest.mock import MagicMock, patch

import click
import pytest
import requests
from click.testing import CliRunner

from gamerewards.cli import main as cli_main
from gamerewards.cli.main import _api_request, cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def api():
    """Patch the API helper and record its calls"""
    with patch.object(cli_main, "_api_request") as mocked:
        yield mocked


class TestApiRequest:
    def test_success_returns_json(self):
        response = MagicMock(status_code=200)
        response.json.return_value = {"success": True}
        with patch("gamerewards.cli.main.requests.request", return_value=response) as req:
            assert _api_request("http://api/", "GET", "/staking/stats") == {"success": True}
        assert req.call_args[0][1] == "http://api/staking/stats"

    def test_error_body_becomes_click_exception(self):
        response = MagicMock(status_code=409)
        response.json.return_value = {"success": False, "error": "Stake is locked", "code": "LOCK_PERIOD_ACTIVE"}
        with patch("gamerewards.cli.main.requests.request", return_value=response):
            with pytest.raises(click.ClickException) as exc_info:
                _api_request("http://api", "POST", "/staking/unstake")
        assert "LOCK_PERIOD_ACTIVE" in exc_info.value.message

    def test_connection_error(self):
        with patch(
            "gamerewards.cli.main.requests.request",
            side_effect=requests.exceptions.ConnectionError("refused"),
        ):
            with pytest.raises(click.ClickException):
                _api_request("http://api", "GET", "/economics/status")


class TestCommands:
    def test_distribute_table(self, runner, api):
        api.return_value = {
            "success": True, "gross_amount": 100, "instant_claim": 30, "staking_incentive": 20,
            "protocol_operations": 50,
            "operations_breakdown": {"hosting": 20, "security": 15, "development": 10, "reserve": 5},
        }
        result = runner.invoke(cli, ["distribute", "100"])
        assert result.exit_code == 0
        assert "Instant claim" in result.output
        assert api.call_args[1]["json"] == {"amount": 100}

    def test_json_output(self, runner, api):
        api.return_value = {"success": True, "stats": {"total_staked": 5}}
        result = runner.invoke(cli, ["--json", "stats"])
        assert result.exit_code == 0
        assert json.loads(result.output)["stats"]["total_staked"] == 5

    def test_stake(self, runner, api):
        api.return_value = {
            "success": True, "stake_id": "stake_1", "principal": 1000,
            "unlock_at": 123, "estimated_yield": 6.18,
        }
        result = runner.invoke(cli, ["--api-url", "http://engine:9000", "stake", "alice", "1000"])
        assert result.exit_code == 0
        assert "stake_1" in result.output
        assert api.call_args[0] == ("http://engine:9000", "POST", "/staking/stake")

    def test_unstake_error(self, runner, api):
        api.side_effect = click.ClickException("Stake is locked for 3 more days (LOCK_PERIOD_ACTIVE)")
        result = runner.invoke(cli, ["unstake", "alice", "stake_1"])
        assert result.exit_code == 1
        assert "LOCK_PERIOD_ACTIVE" in result.output

    def test_book_empty(self, runner, api):
        api.return_value = {"success": True, "user": "bob", "total_staked": 0, "stakes": []}
        result = runner.invoke(cli, ["book", "bob"])
        assert "No active stakes" in result.output

    def test_status(self, runner, api):
        api.return_value = {
            "success": True, "total_rewards_ever": 100, "user_pool_ever": 50, "protocol_pool_ever": 50,
            "sustainability": {"monthly_revenue": 180, "monthly_expenses": 100, "sustainability_ratio": 1.8,
                               "runway_months": 12, "is_self_sustaining": True},
        }
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "Self-sustaining" in result.output

    def test_classify_reads_file(self, runner, api, tmp_path, cleared_signals):
        signals_file = tmp_path / "signals.json"
        signals_file.write_text(json.dumps(cleared_signals))
        api.return_value = {"success": True, "verdict": {"is_valid": True, "standing": "CLEARED",
                                                         "reason": "VALID", "message": "ok"}}
        result = runner.invoke(cli, ["classify", str(signals_file)])
        assert result.exit_code == 0
        assert "CLEARED" in result.output
        assert api.call_args[1]["json"] == {"signals": cleared_signals}

    def test_classify_bad_json(self, runner, api, tmp_path):
        signals_file = tmp_path / "signals.json"
        signals_file.write_text("{broken")
        result = runner.invoke(cli, ["classify", str(signals_file)])
        assert result.exit_code == 1
        assert not api.called
