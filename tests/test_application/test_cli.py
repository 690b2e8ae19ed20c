"""
Tests for the command line entry point
"""
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cityvizor_migrate import main as cli
from cityvizor_migrate.config import get_settings
from cityvizor_migrate.domain.errors import UnresolvedReference


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    monkeypatch.delenv("DRY", raising=False)
    monkeypatch.setenv("DATA_PATH", "/tmp/cityvizor-data")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def collaborators():
    with patch.object(cli, "MongoSourceStore") as source_cls, \
            patch.object(cli, "check_db_connection") as check_db, \
            patch.object(cli, "get_session_factory") as session_factory, \
            patch.object(cli, "dispose_engine") as dispose, \
            patch.object(cli, "run_migration") as run:
        yield {
            "source": source_cls.return_value,
            "session": session_factory.return_value.return_value,
            "check_db": check_db,
            "dispose": dispose,
            "run": run,
        }


def test_main_runs_migration(collaborators):
    assert cli.main([]) == 0

    args, kwargs = collaborators["run"].call_args
    assert args == (collaborators["source"], collaborators["session"], Path("/tmp/cityvizor-data"))
    assert kwargs == {"dry_run": False, "batch_size": 200}
    collaborators["source"].close.assert_called_once()
    collaborators["session"].close.assert_called_once()
    collaborators["dispose"].assert_called_once()


def test_dry_run_flag(collaborators):
    cli.main(["--dry-run", "--data-path", "out", "--batch-size", "50"])

    args, kwargs = collaborators["run"].call_args
    assert args[2] == Path("out")
    assert kwargs == {"dry_run": True, "batch_size": 50}


def test_dry_run_from_environment(collaborators, monkeypatch):
    monkeypatch.setenv("DRY", "true")
    get_settings.cache_clear()

    cli.main([])

    assert collaborators["run"].call_args.kwargs["dry_run"] is True


def test_failure_returns_error_and_disconnects(collaborators):
    collaborators["run"].side_effect = UnresolvedReference("profile", "p9")

    assert cli.main([]) == 1

    collaborators["source"].close.assert_called_once()
    collaborators["session"].close.assert_called_once()


def test_unreachable_database_returns_error(collaborators):
    collaborators["check_db"].side_effect = OSError("connection refused")

    assert cli.main([]) == 1

    collaborators["run"].assert_not_called()
    collaborators["source"].close.assert_called_once()


def test_parser_defaults():
    parsed = cli.create_cli().parse_args([])

    assert parsed.dry_run is None
    assert parsed.data_path is None
    assert parsed.verbose is False
