"""Game configuration loaded from an optional JSON file."""

from __future__ import annotations

from pathlib import Path

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .commitment import KEY_BYTES
from .dice import MIN_DICE
from .probability import DEFAULT_BASELINE

DEFAULT_CONFIG_PATH = Path("config/fairdice.json")


class ConfigError(ValueError):
    """Raised when the configuration file cannot be read or validated."""


class GameConfig(BaseModel):
    """Tunable tokens and limits for a game session."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_dice: int = Field(MIN_DICE, ge=MIN_DICE)
    exit_token: str = Field("X", min_length=1)
    help_token: str = Field("?", min_length=1)
    key_bytes: int = Field(KEY_BYTES, ge=KEY_BYTES)
    win_baseline: int = Field(DEFAULT_BASELINE, ge=1)

    @field_validator("exit_token", "help_token")
    @classmethod
    def _strip_token(cls, value: str) -> str:
        token = value.strip()
        if not token:
            raise ValueError("token must not be blank")
        try:
            int(token)
        except ValueError:
            return token
        raise ValueError(f"token {token!r} collides with a numeric answer")

    @field_validator("help_token")
    @classmethod
    def _tokens_differ(cls, value: str, info) -> str:
        exit_token = info.data.get("exit_token")
        if exit_token is not None and value.strip().upper() == exit_token.strip().upper():
            raise ValueError("help_token must differ from exit_token")
        return value

    def is_exit(self, answer: str) -> bool:
        return answer.strip().upper() == self.exit_token.upper()

    def is_help(self, answer: str) -> bool:
        return answer.strip() == self.help_token


def load_game_config(path: Path = DEFAULT_CONFIG_PATH) -> GameConfig:
    """Load game configuration from disk, falling back to defaults."""

    if not path.exists():
        return GameConfig()

    try:
        data = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")

    try:
        return GameConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc.errors()}") from exc
