"""Runtime settings for the extraction pipeline.

Values come from environment variables (optionally via a `.env` file that
the CLI loads with python-dotenv). Every setting has a default, so the
library works with an empty environment.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

ENV_PREFIX = "SERP_PIPELINE_"


class ConfigError(RuntimeError):
    """Raised when a setting is present but unusable."""


@dataclass(frozen=True)
class Settings:
    # Context window sizes (characters before/after an anchor)
    context_before: int = 200
    context_after: int = 1500

    # Business listing limits
    default_limit: int = 20
    max_limit: int = 100

    # Organic results kept per SERP page
    organic_limit: int = 10

    # Per-rule debug traces
    verbose: bool = False

    # DocumentFetcher collaborator
    timeout: float = 45.0
    retries: int = 2


def _env(name: str) -> Optional[str]:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{ENV_PREFIX}{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{ENV_PREFIX}{name} must be positive, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Build settings from the current environment."""
    settings = Settings(
        context_before=_env_int("CONTEXT_BEFORE", Settings.context_before),
        context_after=_env_int("CONTEXT_AFTER", Settings.context_after, minimum=1),
        default_limit=_env_int("DEFAULT_LIMIT", Settings.default_limit, minimum=1),
        max_limit=_env_int("MAX_LIMIT", Settings.max_limit, minimum=1),
        organic_limit=_env_int("ORGANIC_LIMIT", Settings.organic_limit, minimum=1),
        verbose=_env_bool("VERBOSE", Settings.verbose),
        timeout=_env_float("TIMEOUT", Settings.timeout),
        retries=_env_int("RETRIES", Settings.retries),
    )
    if settings.default_limit > settings.max_limit:
        raise ConfigError(
            f"{ENV_PREFIX}DEFAULT_LIMIT ({settings.default_limit}) exceeds "
            f"{ENV_PREFIX}MAX_LIMIT ({settings.max_limit})"
        )
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings to avoid repeated env lookups."""
    return load_settings()
