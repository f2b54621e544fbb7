# core/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from player.mpv_ipc import MpvBackendConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "COVERDECK_"

ASSETS_DIR = Path(__file__).resolve().parent.parent / "ui" / "assets"

COVER_CANDIDATES = ("folder.jpg", "cover.jpg", "folder.png", "cover.png")
DEFAULT_BACKGROUND = (216, 191, 216)


@dataclass(frozen=True)
class RefreshConfig:
    steady_ms: int = 3000       # slow poll while nothing happens locally
    accelerated_ms: int = 100   # follow-up poll after a local action


@dataclass(frozen=True)
class CoverConfig:
    candidates: tuple[str, ...] = COVER_CANDIDATES
    fallback_asset: str = str(ASSETS_DIR / "blank_cd.svg")


@dataclass(frozen=True)
class ThemeConfig:
    default_background: tuple[int, int, int] = DEFAULT_BACKGROUND
    highlight_factor: float = 0.7


@dataclass(frozen=True)
class AppConfig:
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    cover: CoverConfig = field(default_factory=CoverConfig)
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    mpv: MpvBackendConfig = field(default_factory=MpvBackendConfig)
    log_level: str = "INFO"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r (not an integer)", ENV_PREFIX, name, raw)
        return default
    if value < 0:
        logger.warning("Ignoring %s%s=%r (negative)", ENV_PREFIX, name, raw)
        return default
    return value


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    """
    Build the app config from COVERDECK_* environment variables.

      COVERDECK_POLL_MS       steady poll cadence (default 3000)
      COVERDECK_FAST_POLL_MS  cadence after a local action (default 100)
      COVERDECK_MPV_PATH      explicit mpv binary
      COVERDECK_IPC_ENDPOINT  explicit IPC socket / pipe path
      COVERDECK_LOG_LEVEL     logging level name (default INFO)
    """
    env = os.environ if env is None else env

    refresh = RefreshConfig(
        steady_ms=_env_int(env, "POLL_MS", RefreshConfig.steady_ms),
        accelerated_ms=_env_int(env, "FAST_POLL_MS", RefreshConfig.accelerated_ms),
    )

    mpv = MpvBackendConfig(
        mpv_path=(env.get(ENV_PREFIX + "MPV_PATH") or None),
        ipc_endpoint=(env.get(ENV_PREFIX + "IPC_ENDPOINT") or None),
        start_paused=True,
    )

    level = (env.get(ENV_PREFIX + "LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Unknown log level %r, using INFO", level)
        level = "INFO"

    return AppConfig(refresh=refresh, mpv=mpv, log_level=level)


def get_app_data_dir() -> str:
    from PySide6.QtCore import QStandardPaths

    base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    if not base:
        base = str(Path.home() / ".coverdeck")
    os.makedirs(base, exist_ok=True)
    return base
