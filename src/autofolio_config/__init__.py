"""Application configuration management for AutoFolio."""

from .models import (
    AppConfig,
    SimulationConfig,
    MonitorConfig,
    PriceConfig,
    SolanaConfig,
    NotificationConfig,
    LoggingConfig,
    DEFAULT_DISPLAY_CHECKPOINTS,
)
from .loader import load_config, get_config, reset_config

__all__ = [
    "AppConfig",
    "SimulationConfig",
    "MonitorConfig",
    "PriceConfig",
    "SolanaConfig",
    "NotificationConfig",
    "LoggingConfig",
    "DEFAULT_DISPLAY_CHECKPOINTS",
    "load_config",
    "get_config",
    "reset_config",
]
