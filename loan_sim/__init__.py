"""Annuity loan simulator with monthly overpayments and rate step-downs.

Common imports:
    from loan_sim import LoanParameters, simulate, compare
"""

from .data_models import (
    InstallmentRecord,
    LoanParameters,
    RateChange,
    SimulationComparison,
    SimulationResult,
)
from .engine import calculate_annuity_payment, compare, simulate
from .exceptions import (
    DegenerateScheduleError,
    InvalidConfigurationError,
    InvalidRangeError,
    LoanSimulationError,
)

__all__ = [
    "InstallmentRecord",
    "LoanParameters",
    "RateChange",
    "SimulationComparison",
    "SimulationResult",
    "calculate_annuity_payment",
    "compare",
    "simulate",
    "DegenerateScheduleError",
    "InvalidConfigurationError",
    "InvalidRangeError",
    "LoanSimulationError",
]
