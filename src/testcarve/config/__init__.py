"""Config module exports."""

from testcarve.config.loader import load_config
from testcarve.config.models import (
    CarveConfig,
    CompilerConfig,
    LayoutConfig,
    LoggingConfig,
)

__all__ = [
    "load_config",
    "CarveConfig",
    "CompilerConfig",
    "LayoutConfig",
    "LoggingConfig",
]
