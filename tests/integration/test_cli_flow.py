import json
from pathlib import Path

import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

# Import the app instance from main
from vaultcache.main import app
from vaultcache.infrastructure.crypto.key_manager import KeyManager

# These fixtures are defined in tests/conftest.py:
# runner: CliRunner
# mock_console_display: MagicMock (patches ConsoleDisplay)
# quiet_logging: MagicMock (patches setup_logging)
# isolated_config: autouse, clears CACHE_* variables

@pytest.fixture
def cli_cache_dir(tmp_path: Path, monkeypatch) -> Path:
    """Cache directory plus a configured encryption key for CLI runs."""
    monkeypatch.setenv("CACHE_ENCRYPTION_KEY", KeyManager.generate_key())
    return tmp_path / "cli-cache"

def invoke(runner: CliRunner, cache_dir: Path, *args: str):
    return runner.invoke(app, ["--path", str(cache_dir), *args])

def test_set_then_get_flow(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    result = invoke(runner, cli_cache_dir, "set", "greeting", "hello", "--ttl", "120")
    assert result.exit_code == 0, f"CLI command failed: {result.output}"
    mock_console_display.display_info.assert_called_once_with("Cached 'greeting' for 120 seconds.")

    result = invoke(runner, cli_cache_dir, "get", "greeting")
    assert result.exit_code == 0, f"CLI command failed: {result.output}"
    mock_console_display.display_output.assert_called_once_with("hello")
    mock_console_display.display_error.assert_not_called()

    # The value is encrypted at rest
    files = list(cli_cache_dir.glob("*.cache"))
    assert len(files) == 1
    record = json.loads(files[0].read_text(encoding="utf-8"))
    assert record["encrypted"] is True
    assert "hello" not in record["data"]

def test_get_miss_exits_with_error_code(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    result = invoke(runner, cli_cache_dir, "get", "missing")
    assert result.exit_code == 1
    mock_console_display.display_warning.assert_called_once_with("No cached value for 'missing'.")

def test_set_without_override_keeps_existing(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    invoke(runner, cli_cache_dir, "set", "k", "first")
    result = invoke(runner, cli_cache_dir, "set", "k", "second")
    assert result.exit_code == 1

    result = invoke(runner, cli_cache_dir, "set", "k", "third", "--override")
    assert result.exit_code == 0

    invoke(runner, cli_cache_dir, "get", "k")
    mock_console_display.display_output.assert_called_once_with("third")

def test_delete_flow(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    invoke(runner, cli_cache_dir, "set", "k", "v")
    result = invoke(runner, cli_cache_dir, "delete", "k")
    assert result.exit_code == 0
    mock_console_display.display_info.assert_any_call("Deleted 'k'.")

    assert invoke(runner, cli_cache_dir, "get", "k").exit_code == 1

def test_flush_respects_prefix(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    runner.invoke(app, ["--path", str(cli_cache_dir), "--prefix", "a_", "set", "k", "from a"])
    runner.invoke(app, ["--path", str(cli_cache_dir), "--prefix", "b_", "set", "k", "from b"])

    result = runner.invoke(app, ["--path", str(cli_cache_dir), "--prefix", "a_", "flush"])
    assert result.exit_code == 0
    mock_console_display.display_info.assert_any_call("Flushed cache entries for prefix 'a_'.")

    assert runner.invoke(app, ["--path", str(cli_cache_dir), "--prefix", "a_", "get", "k"]).exit_code == 1
    assert runner.invoke(app, ["--path", str(cli_cache_dir), "--prefix", "b_", "get", "k"]).exit_code == 0
    mock_console_display.display_output.assert_called_once_with("from b")

def test_ttl_and_inspect_flow(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    invoke(runner, cli_cache_dir, "set", "k", "v", "--ttl", "30")

    result = invoke(runner, cli_cache_dir, "ttl", "k", "600")
    assert result.exit_code == 0
    mock_console_display.display_info.assert_any_call("TTL of 'k' set to 600 seconds.")

    result = invoke(runner, cli_cache_dir, "inspect", "k")
    assert result.exit_code == 0
    title, details = mock_console_display.display_details.call_args.args
    assert title == "Cache entry 'k'"
    assert details["ttl"] == 600
    assert details["expires"] == details["created_at"] + 600
    assert details["encrypted"] is True
    assert details["algorithm"] == "aes-256-cbc"

def test_invalid_key_is_reported(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    result = invoke(runner, cli_cache_dir, "get", "x" * 300)
    assert result.exit_code == 1
    mock_console_display.display_error.assert_called_once()
    assert "maximum length" in mock_console_display.display_error.call_args.args[0]

def test_unusable_cache_path_fails_cleanly(runner, tmp_path: Path, mock_console_display: MagicMock, quiet_logging):
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("x")

    result = runner.invoke(app, ["--path", str(not_a_dir), "get", "k"])

    assert result.exit_code == 1
    message = mock_console_display.display_error.call_args.args[0]
    assert message.startswith("Cache initialization failed:")

def test_prefix_outside_cache_dir_fails_cleanly(runner, cli_cache_dir, mock_console_display: MagicMock, quiet_logging):
    result = runner.invoke(app, ["--path", str(cli_cache_dir), "--prefix", "../escaped", "set", "k", "v"])

    assert result.exit_code == 1
    message = mock_console_display.display_error.call_args.args[0]
    assert message.startswith("Cache initialization failed:")
    assert "Invalid cache prefix" in message
    assert not (cli_cache_dir.parent / "escaped").exists()
    assert list(cli_cache_dir.parent.glob("*.cache")) == []

def test_generate_key(runner, mock_console_display: MagicMock):
    result = runner.invoke(app, ["generate-key"])
    assert result.exit_code == 0
    key = mock_console_display.display_output.call_args.args[0]
    assert KeyManager.is_valid_key(key)

def test_cache_path_from_environment(runner, tmp_path: Path, monkeypatch, mock_console_display: MagicMock, quiet_logging):
    cache_dir = tmp_path / "env-cache"
    monkeypatch.setenv("CACHE_PATH", str(cache_dir))
    monkeypatch.setenv("CACHE_PREFIX", "env_")

    result = runner.invoke(app, ["set", "k", "v"])

    assert result.exit_code == 0
    assert [p.name.startswith("env_") for p in cache_dir.glob("*.cache")] == [True]

def test_without_key_values_are_stored_in_plaintext(runner, tmp_path: Path, mock_console_display: MagicMock, quiet_logging):
    cache_dir = tmp_path / "plain"
    result = runner.invoke(app, ["--path", str(cache_dir), "set", "k", "v"])
    assert result.exit_code == 0

    record = json.loads(next(cache_dir.glob("*.cache")).read_text(encoding="utf-8"))
    assert record["encrypted"] is False
