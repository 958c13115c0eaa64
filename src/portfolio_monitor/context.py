"""
Portfolio context management using ContextVar for async-safe context propagation.
"""

from contextvars import ContextVar
from typing import Optional

# Id of the portfolio currently being checked, attached to every log record
current_portfolio_id: ContextVar[Optional[str]] = ContextVar('current_portfolio_id', default=None)


def set_current_portfolio(portfolio_id: str) -> None:
    """Set the current portfolio in the context."""
    current_portfolio_id.set(portfolio_id)


def get_current_portfolio() -> Optional[str]:
    """Get the current portfolio id from the context."""
    return current_portfolio_id.get()


def clear_current_portfolio() -> None:
    """Clear the current portfolio from the context."""
    current_portfolio_id.set(None)
