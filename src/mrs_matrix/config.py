"""Runtime configuration for mrs-matrix."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Mapping, Optional

from mrs_matrix.charsets import BUILTIN_CHARSETS, CharacterSet, get_charset
from mrs_matrix.color_algorithms import COLOR_PRESETS, ColorAlgorithm

logger = logging.getLogger(__name__)

ENV_PREFIX = "MRS_MATRIX_"

DEFAULT_CHARSET = "ascii_and_symbols"
DEFAULT_COLOR_MODE = "green"
DEFAULT_FRAMERATE = 25

SYNC_ADVANCE_CHANCE = 1.0
ASYNC_ADVANCE_CHANCE = 0.75

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Invalid configuration detected before the terminal is touched."""


@dataclass(frozen=True)
class RainConfig:
    """User-facing choices, before they are turned into objects."""

    charset: str = DEFAULT_CHARSET
    color_mode: str = DEFAULT_COLOR_MODE
    sync_scrolling: bool = False
    framerate: int = DEFAULT_FRAMERATE
    seed: Optional[int] = None


@dataclass(frozen=True)
class ResolvedConfig:
    """What the render loop consumes."""

    charset: CharacterSet
    color_algorithm: ColorAlgorithm
    advance_chance: float
    framerate: int
    seed: Optional[int] = None


def _get_bool(raw: Mapping[str, str], key: str, default: bool) -> bool:
    """Fetch a boolean value with fallback for unparseable strings."""
    value = raw.get(key)
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    logger.warning("Ignoring invalid %s=%r", key, value)
    return default


def _get_int(
    raw: Mapping[str, str],
    key: str,
    default: int,
    *,
    min_value: int | None = None,
) -> int:
    """Fetch an integer value, falling back on bad or too-small input."""
    value = raw.get(key)
    if value is None:
        return default
    try:
        number = int(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r", key, value)
        return default
    if min_value is not None and number < min_value:
        logger.warning("Ignoring out of range %s=%r", key, value)
        return default
    return number


def _get_choice(
    raw: Mapping[str, str],
    key: str,
    default: str,
    choices: set[str],
) -> str:
    value = raw.get(key)
    if value is None:
        return default
    normalized = value.strip().lower().replace("-", "_")
    if normalized not in choices:
        logger.warning("Ignoring invalid %s=%r", key, value)
        return default
    return normalized


def config_from_env(environ: Mapping[str, str] | None = None) -> RainConfig:
    """Build defaults, honoring ``MRS_MATRIX_*`` environment overrides."""
    env = os.environ if environ is None else environ
    return RainConfig(
        charset=_get_choice(
            env, ENV_PREFIX + "CHARSET", DEFAULT_CHARSET, set(BUILTIN_CHARSETS)
        ),
        color_mode=_get_choice(
            env, ENV_PREFIX + "COLOR_MODE", DEFAULT_COLOR_MODE, set(COLOR_PRESETS)
        ),
        sync_scrolling=_get_bool(env, ENV_PREFIX + "SYNC_SCROLLING", False),
        framerate=_get_int(
            env, ENV_PREFIX + "FRAMERATE", DEFAULT_FRAMERATE, min_value=1
        ),
    )


def resolve(cfg: RainConfig) -> ResolvedConfig:
    """Turn a :class:`RainConfig` into ready objects or raise ``ConfigError``."""
    if cfg.framerate <= 0:
        raise ConfigError(f"framerate must be positive, got {cfg.framerate}")
    try:
        charset = get_charset(cfg.charset)
    except KeyError:
        raise ConfigError(f"unknown character set: {cfg.charset!r}") from None
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    algorithm = COLOR_PRESETS.get(cfg.color_mode)
    if algorithm is None:
        raise ConfigError(f"unknown color mode: {cfg.color_mode!r}")
    try:
        algorithm.color_for(0.0)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    advance_chance = SYNC_ADVANCE_CHANCE if cfg.sync_scrolling else ASYNC_ADVANCE_CHANCE
    return ResolvedConfig(
        charset=charset,
        color_algorithm=algorithm,
        advance_chance=advance_chance,
        framerate=cfg.framerate,
        seed=cfg.seed,
    )
