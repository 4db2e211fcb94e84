"""
Tests for environment configuration and the CLI helpers.
"""
from pathlib import Path

import pytest

from falbot.config import load_config, reset_config_cache, validate_required_env
from falbot.core.cli import parse_arguments, redact, validate_configuration_only
from falbot.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config_cache()
    yield
    reset_config_cache()


def test_defaults(monkeypatch):
    for var in ("FAL_BASE_URL", "BILLING_ENABLED", "RATE_CACHE_TTL_S", "COMMAND_PREFIX", "BALANCE_STORE_PATH"):
        monkeypatch.delenv(var, raising=False)
    config = load_config()
    assert config["FAL_BASE_URL"] == "https://queue.fal.run/fal-ai"
    assert config["BILLING_ENABLED"] is True
    assert config["RATE_CACHE_TTL_S"] == 600.0
    assert config["COMMAND_PREFIX"] == "!"
    assert config["BALANCE_STORE_PATH"] == Path("data/balances.json")


def test_values_are_cleaned(monkeypatch):
    monkeypatch.setenv("FAL_POLL_INTERVAL_S", "2  # seconds")
    monkeypatch.setenv("RATE_TIMEOUT_S", "soon")
    monkeypatch.setenv("BILLING_ENABLED", "off")
    config = load_config()
    assert config["FAL_POLL_INTERVAL_S"] == 2.0
    assert config["RATE_TIMEOUT_S"] == 10.0
    assert config["BILLING_ENABLED"] is False


def test_config_is_cached_until_reset(monkeypatch):
    monkeypatch.setenv("COMMAND_PREFIX", "?")
    assert load_config()["COMMAND_PREFIX"] == "?"
    monkeypatch.setenv("COMMAND_PREFIX", "$")
    assert load_config()["COMMAND_PREFIX"] == "?"
    reset_config_cache()
    assert load_config()["COMMAND_PREFIX"] == "$"


def test_required_env(monkeypatch):
    monkeypatch.setenv("DISCORD_TOKEN", "token")
    monkeypatch.delenv("FAL_API_KEY", raising=False)
    with pytest.raises(ConfigurationError) as exc:
        validate_required_env()
    assert "FAL_API_KEY" in str(exc.value)

    monkeypatch.setenv("FAL_API_KEY", "key")
    validate_required_env()


def test_config_check(monkeypatch):
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    assert validate_configuration_only() is False

    monkeypatch.setenv("DISCORD_TOKEN", "token")
    monkeypatch.setenv("FAL_API_KEY", "key")
    assert validate_configuration_only() is True


def test_redact():
    assert redact("DISCORD_TOKEN", "abc") == "********"
    assert redact("FAL_API_KEY", "abc") == "********"
    assert redact("FAL_API_KEY", None) is None
    assert redact("COMMAND_PREFIX", "!") == "!"


def test_parse_arguments():
    args = parse_arguments(["--debug", "--config-check"])
    assert args.debug and args.config_check and not args.version


def test_package_readme_is_the_project_readme():
    root = Path(__file__).resolve().parent.parent
    pyproject = (root / "pyproject.toml").read_text(encoding="utf-8")
    assert 'readme = "README.md"' in pyproject
    assert (root / "README.md").is_file()
