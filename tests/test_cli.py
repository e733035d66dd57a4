"""Tests for the tickdown command line."""

from __future__ import annotations

import click.testing
import pytest

from tickdown.__main__ import cli
from tickdown.timer.clock import SystemClock
from tickdown.timer.store import PersistedSnapshot, SnapshotStore


@pytest.fixture()
def runner() -> click.testing.CliRunner:
    return click.testing.CliRunner()


class TestStatusCommand:

    def test_nothing_stored(self, runner):
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "No stored countdown" in result.output

    def test_running_snapshot(self, runner):
        SnapshotStore(SystemClock()).save(125_000)
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "02:05 left (running" in result.output

    def test_stopped_snapshot(self, runner):
        SnapshotStore(SystemClock()).save(60_000, stopped=True)
        result = runner.invoke(cli, ["status"])
        assert "01:00 left (stopped" in result.output


class TestClearCommand:

    def test_clear(self, runner):
        store = SnapshotStore(SystemClock())
        store.save(60_000)
        result = runner.invoke(cli, ["clear"])
        assert result.exit_code == 0
        assert store.load() == PersistedSnapshot()


class TestRunCommand:

    @pytest.mark.parametrize("minutes", ["0", "100", "abc"])
    def test_invalid_minutes_rejected(self, runner, minutes):
        result = runner.invoke(cli, ["run", "--minutes", minutes])
        assert result.exit_code != 0
        assert "--minutes" in result.output


class TestMisc:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "tickdown" in result.output

    def test_config_lists_settings(self, runner, data_home):
        result = runner.invoke(cli, ["config"])
        assert result.exit_code == 0
        assert str(data_home / "settings.json") in result.output
        assert "persist_policy = 'every_tick'" in result.output
