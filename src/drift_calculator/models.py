from typing import List, Literal, Optional, Sequence
from pydantic import BaseModel, ConfigDict
from autofolio_core import DriftReport, InvalidInput

class RebalanceChange(BaseModel):
    """Per-asset move made by a simulated rebalance"""
    model_config = ConfigDict(frozen=True)

    asset: str
    from_percent: float
    to_percent: float
    action: Literal['BUY', 'SELL', 'HOLD']
    old_holdings: float
    new_holdings: float

class RebalanceEvent(BaseModel):
    """A rebalance fired by the simulator"""
    model_config = ConfigDict(frozen=True)

    day: int
    total_value_before_fee: float
    fee: float
    total_value_after_fee: float
    report: DriftReport
    changes: List[RebalanceChange]

class SimulationPoint(BaseModel):
    """Strategy values on a given day"""
    model_config = ConfigDict(frozen=True)

    day: int
    rebalanced: float
    buy_and_hold: float

class SimulationSummary(BaseModel):
    """Headline numbers of a simulation run"""
    model_config = ConfigDict(frozen=True)

    initial_investment: float
    final_rebalanced: float
    final_buy_and_hold: float
    rebalanced_return_percent: float
    buy_and_hold_return_percent: float
    outperformance_percent: float
    rebalance_count: int
    total_fees: float

class SimulationResult(BaseModel):
    """Rebalanced and buy-and-hold value series plus the rebalance log"""
    model_config = ConfigDict(frozen=True)

    days: int
    initial_investment: float
    fee_rate: float
    threshold_percent: float
    rebalanced: List[float]
    buy_and_hold: List[float]
    rebalance_events: List[RebalanceEvent]

    def points(self, checkpoints: Optional[Sequence[int]] = None) -> List[SimulationPoint]:
        """
        Series at daily resolution, or at the given day checkpoints.
        Checkpoints past the simulated range are dropped.
        """
        if checkpoints is None:
            days = range(self.days)
        else:
            days = []
            for day in checkpoints:
                if day < 0:
                    raise InvalidInput(f"Checkpoint day must be non-negative, got {day}")
                if day < self.days:
                    days.append(day)

        return [
            SimulationPoint(day=day, rebalanced=self.rebalanced[day], buy_and_hold=self.buy_and_hold[day])
            for day in days
        ]

    def summary(self) -> SimulationSummary:
        final_rebalanced = self.rebalanced[-1]
        final_buy_and_hold = self.buy_and_hold[-1]
        rebalanced_return = (final_rebalanced / self.initial_investment - 1) * 100
        buy_and_hold_return = (final_buy_and_hold / self.initial_investment - 1) * 100

        return SimulationSummary(
            initial_investment=self.initial_investment,
            final_rebalanced=final_rebalanced,
            final_buy_and_hold=final_buy_and_hold,
            rebalanced_return_percent=rebalanced_return,
            buy_and_hold_return_percent=buy_and_hold_return,
            outperformance_percent=rebalanced_return - buy_and_hold_return,
            rebalance_count=len(self.rebalance_events),
            total_fees=sum(event.fee for event in self.rebalance_events)
        )
