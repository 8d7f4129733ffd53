"""Data models for the loan simulator.

This module defines dataclasses representing the entities used by the
simulator: the loan parameters of a single run, individual ledger entries,
interest-rate step-downs and the results of a simulation or of a
with/without overpayment comparison. All of them are frozen; a run builds them
once and hands them to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Tuple


@dataclass(frozen=True)
class LoanParameters:
    """Inputs of one simulation run.

    Attributes
    ----------
    principal: float
        The amount borrowed.
    annual_rate: float
        Nominal annual interest rate in percent (``6.2`` means 6.2 %).
    installment_count: int
        Number of scheduled monthly installments.
    start_date: date
        Date of the first installment.
    overpayment: float
        Extra amount applied to the principal every month.
    rate_decrease: float
        Percentage points subtracted from the rate at each step-down. ``0``
        disables step-downs.
    decrease_frequency: int
        Number of installments between step-downs. A step-down fires on every
        installment whose number is a multiple of this value.
    minimum_rate: float
        Floor in percent below which step-downs never take the rate.
    """

    principal: float
    annual_rate: float
    installment_count: int
    start_date: date
    overpayment: float = 0.0
    rate_decrease: float = 0.0
    decrease_frequency: int = 12
    minimum_rate: float = 0.0

    def with_overpayment(self, amount: float) -> "LoanParameters":
        """Return a copy of the parameters with a different overpayment."""
        return replace(self, overpayment=amount)


@dataclass(frozen=True)
class InstallmentRecord:
    """A single entry of the repayment ledger.

    ``amount`` is the annuity payment in effect for the period. Overpayments
    are not part of it; they are reported separately in ``overpayment``. The
    interest and principal portions add up to ``amount`` except for the final
    installment, whose principal is capped by the remaining balance.
    """

    number: int
    amount: float
    interest: float
    principal: float
    interest_rate: float  # annual percent in effect for the period
    overpayment: float
    remaining_balance: float
    date: date


@dataclass(frozen=True)
class RateChange:
    """An interest-rate step-down and the payment recomputed for it."""

    installment: int
    old_rate: float
    new_rate: float
    new_amount: float
    remaining_balance: float
    remaining_installments: int


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one simulation run.

    ``installments`` is chronological and may end before the requested
    installment count when overpayments pay the loan off early. Durations are
    expressed as whole years plus remaining months of ``actual_installment_count``.
    """

    installments: Tuple[InstallmentRecord, ...]
    total_interest: float
    actual_installment_count: int
    duration_years: int
    duration_months: int
    loan_amount: float
    initial_rate: float
    final_rate: float
    monthly_overpayment: float
    start_date: date
    end_date: date
    total_principal: float
    total_overpayment_applied: float
    written_off_balance: float = 0.0
    rate_changes: Tuple[RateChange, ...] = field(default_factory=tuple)

    @property
    def total_paid(self) -> float:
        """Everything paid over the life of the loan, overpayments included."""
        return self.total_principal + self.total_interest + self.total_overpayment_applied

    def first_installments(self, count: int) -> List[InstallmentRecord]:
        return list(self.installments[:count])

    def last_installments(self, count: int) -> List[InstallmentRecord]:
        if count <= 0:
            return []
        return list(self.installments[-count:])


@dataclass(frozen=True)
class SimulationComparison:
    """Two runs of the same loan, with and without the monthly overpayment."""

    with_overpayments: SimulationResult
    without_overpayments: SimulationResult
    interest_savings: float
    reduction_years: int
    reduction_months: int
    total_overpayment: float

    @property
    def reduction_installments(self) -> int:
        return self.reduction_years * 12 + self.reduction_months
