"""Tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from factorio_bridge.config import Settings, load_settings, split_address

REQUIRED_ENV = {
    "TELEGRAM_TOKEN": "123:abc",
    "TELEGRAM_CHAT_ID": "-100200300",
    "RCON_PASSWORD": "secret",
    "FACTORIO_LOG_FILE": "/opt/factorio/factorio-current.log",
}


@pytest.fixture
def env(monkeypatch):
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


class TestSettings:
    """Test Settings sources and validation."""

    def test_defaults_from_env(self, env):
        settings = Settings(_env_file=None)

        assert settings.telegram_chat_id == -100200300
        assert settings.factorio_log_file == Path("/opt/factorio/factorio-current.log")
        assert settings.rcon_host == "127.0.0.1:27015"
        assert settings.channel_capacity == 16
        assert settings.command_prefix == "/"
        assert settings.logs_dir is None

    def test_missing_required_value(self, monkeypatch):
        for key in REQUIRED_ENV:
            monkeypatch.delenv(key, raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_settings_are_frozen(self, env):
        settings = Settings(_env_file=None)

        with pytest.raises(ValidationError):
            settings.rcon_password = "other"

    def test_invalid_rcon_host(self, env):
        env.setenv("RCON_HOST", "no-port-here")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_invalid_capacity(self, env):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, channel_capacity=0)

    def test_dotenv_file(self, tmp_path, monkeypatch):
        for key in REQUIRED_ENV:
            monkeypatch.delenv(key, raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text("\n".join(f"{k}={v}" for k, v in REQUIRED_ENV.items()))

        settings = Settings(_env_file=dotenv)

        assert settings.rcon_password == "secret"

    def test_cli_overrides_env(self, env):
        settings = load_settings(["--rcon_host", "10.0.0.5:34198", "--channel_capacity", "4"])

        assert settings.rcon_host == "10.0.0.5:34198"
        assert settings.channel_capacity == 4
        assert settings.telegram_token == "123:abc"


class TestSplitAddress:
    @pytest.mark.parametrize(
        "address, expected",
        [
            ("127.0.0.1:27015", ("127.0.0.1", 27015)),
            ("factorio.example.org:34198", ("factorio.example.org", 34198)),
            ("[::1]:27015", ("::1", 27015)),
        ],
    )
    def test_valid(self, address, expected):
        assert split_address(address) == expected

    @pytest.mark.parametrize("address", ["localhost", ":27015", "host:", "host:port"])
    def test_invalid(self, address):
        with pytest.raises(ValueError):
            split_address(address)
