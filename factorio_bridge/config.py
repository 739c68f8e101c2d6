import os
from pathlib import Path
from typing import Optional, Sequence

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

_CONFIG_PATH = os.getenv("FACTORIO_BRIDGE_CONFIG", "config.toml")
_ENV_PATH = os.getenv("FACTORIO_BRIDGE_ENV", ".env")


class Settings(BaseSettings):
    """Process configuration, built once at startup and handed to each component."""

    model_config = SettingsConfigDict(
        frozen=True,
        toml_file=_CONFIG_PATH,
        env_file=_ENV_PATH,
        extra="ignore",
        cli_prog_name="factorio-bridge",
    )

    telegram_token: str
    telegram_chat_id: int
    telegram_api_url: str = "https://api.telegram.org"
    telegram_poll_timeout: int = Field(default=30, ge=0)

    rcon_host: str = "127.0.0.1:27015"
    rcon_password: str
    rcon_timeout: float = Field(default=10.0, gt=0)

    factorio_log_file: Path

    command_prefix: str = Field(default="/", min_length=1)
    channel_capacity: int = Field(default=16, ge=1)

    log_level: str = "INFO"
    logs_dir: Optional[Path] = None

    @field_validator("rcon_host")
    @classmethod
    def _check_rcon_host(cls, value: str) -> str:
        split_address(value)
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Source order: init args (incl. CLI) > OS env > .env > config.toml > secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def split_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` address, raising ValueError when malformed."""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"expected host:port, got {address!r}")
    return host.strip("[]"), int(port)


def load_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """Load settings from CLI args, environment, .env and config.toml.

    Args:
        argv: Command line arguments, defaults to ``sys.argv[1:]``
    """
    cli_args = list(argv) if argv is not None else True
    return Settings(_cli_parse_args=cli_args)  # type: ignore[call-arg]
