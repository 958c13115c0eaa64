"""YAML configuration loading and the process-wide config instance."""

import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from .models import AppConfig

logger = logging.getLogger(__name__)

_config: Optional[AppConfig] = None


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, 'r') as f:
        raw = yaml.safe_load(f)

    # An empty file means "all defaults"
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid configuration: expected a mapping, got {type(raw).__name__}")
    return raw


def _log_summary(config: AppConfig):
    sim = config.simulation
    monitor = config.monitor
    logger.info("Configuration loaded successfully:")
    logger.info(f"  Fee rate: {sim.fee_rate * 100}% (allocation tolerance ±{sim.allocation_tolerance})")
    logger.info(f"  Default threshold: {sim.default_threshold_percent}% on ${sim.default_initial_investment:,.0f}")
    logger.info(f"  Monitor: every {monitor.interval_seconds}s, portfolios from {monitor.portfolios_file_path}")
    logger.info(
        f"  Price cache TTLs: {config.prices.price_cache_ttl_seconds}s current, "
        f"{config.prices.history_cache_ttl_seconds}s history"
    )
    logger.info(f"  Solana RPC: {config.solana.rpc_url}")
    logger.info(f"  Notifications: {'enabled' if config.notifications.enabled else 'disabled'}")


def load_config(config_path: str | Path) -> AppConfig:
    """
    Read config.yaml, validate it and make it the current configuration.

    A failed load leaves the previously loaded configuration in place.

    Raises:
        FileNotFoundError: config_path does not exist
        ValueError: the file is not a mapping or fails validation
        yaml.YAMLError: the file is not valid YAML
    """
    global _config

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from: {config_path}")
    raw_config = _read_yaml(config_path)

    try:
        config = AppConfig(**raw_config)
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise ValueError(f"Invalid configuration: {e}") from e

    _config = config
    _log_summary(config)
    return config


def get_config() -> AppConfig:
    """
    Current configuration, for components constructed without explicit settings.

    Raises:
        RuntimeError: load_config() has not succeeded yet
    """
    if _config is None:
        raise RuntimeError("Configuration not loaded. Call load_config() first.")
    return _config


def reset_config():
    """Forget the loaded configuration"""
    global _config
    _config = None
