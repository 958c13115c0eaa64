from .allocation import normalize_allocation, validate_allocation, validate_threshold
from .detector import DriftDetector, evaluate
from .simulator import BacktestSimulator, run, DEFAULT_FEE_RATE
from .models import (
    RebalanceChange,
    RebalanceEvent,
    SimulationPoint,
    SimulationSummary,
    SimulationResult,
)
from autofolio_core import AllocationItem, AssetDrift, DriftReport

__version__ = "1.0.0"

__all__ = [
    "DriftDetector",
    "BacktestSimulator",
    "evaluate",
    "run",
    "DEFAULT_FEE_RATE",
    "normalize_allocation",
    "validate_allocation",
    "validate_threshold",
    "RebalanceChange",
    "RebalanceEvent",
    "SimulationPoint",
    "SimulationSummary",
    "SimulationResult",
    "AllocationItem",
    "AssetDrift",
    "DriftReport",
    "__version__",
]
