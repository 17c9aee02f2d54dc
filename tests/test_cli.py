"""
Unit tests for the CLI module (pipboy_server/cli.py).

Tests cover:
- Command parsing
- init-db command
- create-admin command (with env vars, interactive and non-interactive)
- run command wiring
"""

import argparse
from unittest.mock import patch

import pytest

from pipboy_server import cli
from pipboy_server.db import accounts_repo, catalog_repo
from pipboy_server.errors import StorageFailure
from tests.constants import TEST_PASSWORD

# ============================================================================
# ENVIRONMENT VARIABLE TESTS
# ============================================================================


@pytest.mark.unit
def test_get_admin_credentials_from_env_both_set():
    with patch.dict(
        "os.environ", {"PIPBOY_ADMIN_USER": "overseer", "PIPBOY_ADMIN_PASSWORD": "secret123"}
    ):
        assert cli.get_admin_credentials_from_env() == ("overseer", "secret123")


@pytest.mark.unit
@pytest.mark.parametrize(
    "env",
    [
        {"PIPBOY_ADMIN_PASSWORD": "secret123"},
        {"PIPBOY_ADMIN_USER": "overseer"},
        {},
    ],
)
def test_get_admin_credentials_from_env_incomplete(env):
    with patch.dict("os.environ", env, clear=True):
        assert cli.get_admin_credentials_from_env() is None


# ============================================================================
# INIT-DB COMMAND TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.db
def test_cmd_init_db_seeds_catalog(temp_db_path, capsys):
    result = cli.cmd_init_db(argparse.Namespace())

    assert result == 0
    assert "Database initialized successfully" in capsys.readouterr().out
    assert catalog_repo.get_item("stimpak") is not None


@pytest.mark.unit
@pytest.mark.db
def test_cmd_init_db_creates_admin_from_env(temp_db_path, monkeypatch):
    monkeypatch.setenv("PIPBOY_ADMIN_USER", "overseer")
    monkeypatch.setenv("PIPBOY_ADMIN_PASSWORD", TEST_PASSWORD)

    assert cli.cmd_init_db(argparse.Namespace()) == 0

    assert accounts_repo.get_account_by_username("overseer").is_admin is True


@pytest.mark.unit
def test_cmd_init_db_reports_storage_failure(capsys):
    with patch(
        "pipboy_server.db.schema.init_database", side_effect=StorageFailure("disk full")
    ):
        result = cli.cmd_init_db(argparse.Namespace())

    assert result == 1
    assert "Error initializing database" in capsys.readouterr().err


# ============================================================================
# CREATE-ADMIN COMMAND TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.db
def test_cmd_create_admin_with_env(temp_db_path, monkeypatch, capsys):
    monkeypatch.setenv("PIPBOY_ADMIN_USER", "overseer")
    monkeypatch.setenv("PIPBOY_ADMIN_PASSWORD", TEST_PASSWORD)

    result = cli.cmd_create_admin(argparse.Namespace())

    assert result == 0
    assert "Admin 'overseer' is ready." in capsys.readouterr().out
    assert accounts_repo.get_account_by_username("overseer").is_admin is True


@pytest.mark.unit
@pytest.mark.db
def test_cmd_create_admin_promotes_existing_player(temp_db_path, monkeypatch):
    from pipboy_server.auth.provider import AuthProvider
    from pipboy_server.db.schema import init_database

    init_database(skip_admin=True, seed=False)
    AuthProvider().resolve_or_create("nate", TEST_PASSWORD)
    monkeypatch.setenv("PIPBOY_ADMIN_USER", "nate")
    monkeypatch.setenv("PIPBOY_ADMIN_PASSWORD", "whatever")

    assert cli.cmd_create_admin(argparse.Namespace()) == 0

    assert accounts_repo.get_account_by_username("nate").is_admin is True


@pytest.mark.unit
@pytest.mark.db
def test_cmd_create_admin_interactive(temp_db_path):
    with (
        patch("sys.stdin.isatty", return_value=True),
        patch.object(cli, "prompt_for_credentials", return_value=("overseer", TEST_PASSWORD)),
    ):
        result = cli.cmd_create_admin(argparse.Namespace())

    assert result == 0
    assert accounts_repo.get_account_by_username("overseer") is not None


@pytest.mark.unit
@pytest.mark.db
def test_cmd_create_admin_non_interactive_without_env(temp_db_path, capsys):
    with patch("sys.stdin.isatty", return_value=False):
        result = cli.cmd_create_admin(argparse.Namespace())

    assert result == 1
    assert "No credentials provided" in capsys.readouterr().err
    assert accounts_repo.count_accounts() == 0


@pytest.mark.unit
@pytest.mark.db
def test_cmd_create_admin_rejects_bad_username(temp_db_path, monkeypatch, capsys):
    monkeypatch.setenv("PIPBOY_ADMIN_USER", "x")
    monkeypatch.setenv("PIPBOY_ADMIN_PASSWORD", TEST_PASSWORD)

    result = cli.cmd_create_admin(argparse.Namespace())

    assert result == 1
    assert "Username must be" in capsys.readouterr().err


@pytest.mark.unit
def test_prompt_for_credentials_retries(capsys):
    with (
        patch("builtins.input", side_effect=["x", "overseer"]),
        patch("getpass.getpass", side_effect=["a", "b", TEST_PASSWORD, TEST_PASSWORD]),
    ):
        assert cli.prompt_for_credentials() == ("overseer", TEST_PASSWORD)

    out = capsys.readouterr().out
    assert "Username must be 2-20 characters." in out
    assert "Passwords do not match" in out


@pytest.mark.unit
def test_prompt_for_credentials_cancel():
    with patch("builtins.input", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as excinfo:
            cli.prompt_for_credentials()

    assert excinfo.value.code == 1


# ============================================================================
# RUN COMMAND / PARSER TESTS
# ============================================================================


@pytest.mark.unit
def test_cmd_run_passes_host_and_port():
    with patch("pipboy_server.api.server.start_server") as start:
        result = cli.main(["run", "--port", "8123", "--host", "127.0.0.1"])

    assert result == 0
    start.assert_called_once_with(host="127.0.0.1", port=8123)


@pytest.mark.unit
def test_cmd_run_handles_ctrl_c(capsys):
    with patch("pipboy_server.api.server.start_server", side_effect=KeyboardInterrupt):
        assert cli.main(["run"]) == 0

    assert "Shutting down" in capsys.readouterr().out


@pytest.mark.unit
def test_main_without_command_prints_help(capsys):
    assert cli.main([]) == 0

    assert "pipboy-server" in capsys.readouterr().out


@pytest.mark.unit
def test_parser_short_port_flag():
    args = cli.build_parser().parse_args(["run", "-p", "9000"])

    assert args.port == 9000
    assert args.host is None
    assert args.func is cli.cmd_run
