"""Relay configuration loaded from .env, env vars, or programmatic input."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from neurelay.history import DEFAULT_CAPACITY
from neurelay.relay import DEFAULT_WELCOME_MESSAGE

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_REPLAY_DELAY_MS = 100
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_int(raw: str | None, default: int) -> tuple[int, str | None]:
    """Parse an integer env value into (value, raw_if_invalid)."""
    if raw is None or raw.strip() == "":
        return default, None
    try:
        return int(raw), None
    except ValueError:
        return default, raw


@dataclass
class Config:
    """Relay configuration. Can be built from env, CLI args, or programmatic input."""

    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    history_size: int = DEFAULT_CAPACITY
    replay_delay_ms: int = DEFAULT_REPLAY_DELAY_MS
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    log_level: str = "INFO"
    # Env values that were present but not integers, by variable name.
    invalid_env: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def replay_delay(self) -> float:
        """Replay delay in seconds."""
        return self.replay_delay_ms / 1000

    @classmethod
    def from_env(cls) -> Config:
        """Load config from environment variables and .env file."""
        load_dotenv()
        invalid: dict[str, str] = {}
        ints: dict[str, int] = {}
        for var, default in (
            ("PORT", DEFAULT_PORT),
            ("HISTORY_SIZE", DEFAULT_CAPACITY),
            ("REPLAY_DELAY_MS", DEFAULT_REPLAY_DELAY_MS),
        ):
            value, bad = _parse_int(os.getenv(var), default)
            ints[var] = value
            if bad is not None:
                invalid[var] = bad
        return cls(
            port=ints["PORT"],
            host=os.getenv("HOST") or DEFAULT_HOST,
            history_size=ints["HISTORY_SIZE"],
            replay_delay_ms=ints["REPLAY_DELAY_MS"],
            welcome_message=os.getenv("WELCOME_MESSAGE") or DEFAULT_WELCOME_MESSAGE,
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
            invalid_env=invalid,
        )

    @classmethod
    def from_args(
        cls,
        port: int | None = None,
        host: str | None = None,
        history_size: int | None = None,
        replay_delay_ms: int | None = None,
    ) -> Config:
        """Build config from explicit arguments, falling back to env."""
        env = cls.from_env()
        return cls(
            port=port if port is not None else env.port,
            host=host or env.host,
            history_size=history_size if history_size is not None else env.history_size,
            replay_delay_ms=(
                replay_delay_ms if replay_delay_ms is not None else env.replay_delay_ms
            ),
            welcome_message=env.welcome_message,
            log_level=env.log_level,
            invalid_env=env.invalid_env,
        )

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if config is valid."""
        errors = []
        for var, raw in self.invalid_env.items():
            errors.append(f"{var} must be an integer, got {raw!r}.")
        if not 1 <= self.port <= 65535:
            errors.append(f"PORT must be between 1 and 65535, got {self.port}.")
        if self.history_size < 1:
            errors.append(f"HISTORY_SIZE must be at least 1, got {self.history_size}.")
        if self.replay_delay_ms < 0:
            errors.append(
                f"REPLAY_DELAY_MS must not be negative, got {self.replay_delay_ms}."
            )
        if self.log_level not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}.")
        return errors
