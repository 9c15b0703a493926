"""Tests for the local CLI entry point."""

from types import SimpleNamespace

import pytest

from pizza_skill import main as cli
from pizza_skill.responses import DRY_RUN_SPEECH, ORDER_FAILED_SPEECH, PLACED_SPEECH


@pytest.fixture
def wired(monkeypatch, settings, vault, client):
    """Point the CLI at the in-memory fakes."""
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "SecretVault", lambda region_name=None: vault)
    monkeypatch.setattr(cli, "DominosClient", SimpleNamespace(from_settings=lambda s: client))
    return client


def test_defaults_to_dry_run(wired, capsys):
    assert cli.main([]) == 0
    assert DRY_RUN_SPEECH in capsys.readouterr().out
    assert "place_order" not in wired.calls


def test_live_flag_places_order(wired, capsys):
    assert cli.main(["--live"]) == 0
    assert PLACED_SPEECH in capsys.readouterr().out
    assert "place_order" in wired.calls


def test_failure_exit_code(monkeypatch, wired, failing_vault, capsys):
    monkeypatch.setattr(cli, "SecretVault", lambda region_name=None: failing_vault)
    assert cli.main(["--dry-run"]) == 1
    assert ORDER_FAILED_SPEECH in capsys.readouterr().out


def test_live_and_dry_run_are_exclusive(wired):
    with pytest.raises(SystemExit):
        cli.main(["--live", "--dry-run"])
