"""Exceptions raised by the loan simulator.

All errors derive from :class:`LoanSimulationError`, which carries an optional
context dictionary describing the offending inputs. The command-line interface
catches the base class and reports it as a ``click`` error.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LoanSimulationError(Exception):
    """Base exception for all simulator errors.

    Attributes
    ----------
    message: str
        Human-readable error description.
    context: dict
        Additional information about the error, such as the parameter name
        and the rejected value.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class InvalidConfigurationError(LoanSimulationError):
    """Raised when the parameters cannot describe a schedule at all.

    Example: a step-down frequency of zero installments.
    """


class InvalidRangeError(LoanSimulationError):
    """Raised when a numeric input is outside its valid range.

    This covers non-positive principal or installment counts, negative
    rates, overpayments or step sizes, and non-finite values.
    """


class DegenerateScheduleError(LoanSimulationError):
    """Raised when a period fails to reduce the outstanding balance.

    The simulation stops immediately instead of producing a ledger whose
    balance never decreases.
    """
