"""
Process-wide configuration for the Calibration Report Visualizer.

``AppConfig`` is built once at startup from the defaults in
``constants`` overridden by ``CALVIZ_*`` environment variables, and is
read-only afterwards.  The theme toggle in the GUI does not mutate the
config; it lives in ``ViewState``.
"""

import logging
import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional, Tuple

from .constants import (
    DEFAULT_MAX_VARS, DEFAULT_TOP_N, DEFAULT_THEME,
    EXPORT_RESOLUTION, EXPORT_DPI,
)
from .errors import InvalidArgument

logger = logging.getLogger(__name__)


class Theme(str, Enum):
    """Colour theme for GUI and rendered plots."""
    DARK = "dark"
    LIGHT = "light"

    def toggled(self) -> "Theme":
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


@dataclass(frozen=True)
class AppConfig:
    """Startup configuration.

    Parameters
    ----------
    theme : Theme
        Initial theme.
    max_vars : int
        Default cap for the filter engine.
    top_n : int
        Number of entries in the summary ranking.
    export_resolution : (int, int)
        Pixel size of exported images.
    export_dpi : int
        DPI used to convert the pixel size to figure inches.
    """
    theme: Theme = Theme(DEFAULT_THEME)
    max_vars: int = DEFAULT_MAX_VARS
    top_n: int = DEFAULT_TOP_N
    export_resolution: Tuple[int, int] = EXPORT_RESOLUTION
    export_dpi: int = EXPORT_DPI

    def __post_init__(self):
        if self.max_vars <= 0:
            raise InvalidArgument(f"max_vars must be >= 1, got {self.max_vars}")
        if self.top_n <= 0:
            raise InvalidArgument(f"top_n must be >= 1, got {self.top_n}")
        width, height = self.export_resolution
        if width <= 0 or height <= 0:
            raise InvalidArgument(
                f"export resolution must be positive, got {width}x{height}"
            )
        if self.export_dpi <= 0:
            raise InvalidArgument(
                f"export dpi must be positive, got {self.export_dpi}"
            )


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidArgument(
            f"Environment variable {key} must be an integer, got {raw!r}"
        ) from None


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build an ``AppConfig`` from defaults and ``CALVIZ_*`` variables.

    Recognised variables: ``CALVIZ_THEME`` (``dark``/``light``),
    ``CALVIZ_MAX_VARS``, ``CALVIZ_TOP_N``, ``CALVIZ_EXPORT_WIDTH``,
    ``CALVIZ_EXPORT_HEIGHT``, ``CALVIZ_EXPORT_DPI``.
    """
    if env is None:
        env = os.environ

    theme_raw = env.get("CALVIZ_THEME", DEFAULT_THEME).strip().lower()
    try:
        theme = Theme(theme_raw)
    except ValueError:
        raise InvalidArgument(
            f"CALVIZ_THEME must be 'dark' or 'light', got {theme_raw!r}"
        ) from None

    config = AppConfig(
        theme=theme,
        max_vars=_env_int(env, "CALVIZ_MAX_VARS", DEFAULT_MAX_VARS),
        top_n=_env_int(env, "CALVIZ_TOP_N", DEFAULT_TOP_N),
        export_resolution=(
            _env_int(env, "CALVIZ_EXPORT_WIDTH", EXPORT_RESOLUTION[0]),
            _env_int(env, "CALVIZ_EXPORT_HEIGHT", EXPORT_RESOLUTION[1]),
        ),
        export_dpi=_env_int(env, "CALVIZ_EXPORT_DPI", EXPORT_DPI),
    )
    logger.debug("Loaded configuration: %s", config)
    return config


_CONFIG: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the process-wide config, loading it on first use."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config()
    return _CONFIG


def set_config(config: AppConfig) -> None:
    """Install *config* as the process-wide config (startup / tests)."""
    global _CONFIG
    _CONFIG = config


def with_overrides(config: AppConfig, **changes) -> AppConfig:
    """Return a copy of *config* with *changes* applied and validated."""
    return replace(config, **changes)
