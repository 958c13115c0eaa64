"""AutoFolio portfolio monitor: live drift alerts and backtests around the drift calculator."""

__version__ = "1.0.0"
