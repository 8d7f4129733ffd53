"""Core calculation engine for the loan simulator.

This module implements the amortization recurrence for annuity (equal
installment) loans with a constant monthly overpayment and optional periodic
interest-rate step-downs. :func:`simulate` produces the full ledger of a single
run; :func:`compare` runs the same loan with and without the overpayment and
derives the interest savings and the term reduction.
"""

from __future__ import annotations

import math
from typing import List

from .data_models import (
    InstallmentRecord,
    LoanParameters,
    RateChange,
    SimulationComparison,
    SimulationResult,
)
from .exceptions import DegenerateScheduleError, InvalidConfigurationError, InvalidRangeError
from .logging_config import get_logger
from .utils import add_months, split_months

logger = get_logger(__name__)

# Balances below half a cent count as repaid. Float residues such as 1e-10
# would otherwise add phantom installments.
PAID_OFF_TOLERANCE = 0.005


def monthly_rate(annual_rate: float) -> float:
    """Convert a nominal annual rate in percent to a monthly decimal rate."""
    return annual_rate / 100.0 / 12.0


def calculate_annuity_payment(principal: float, rate_per_month: float, term: int) -> float:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``. ``(1 + i)^n`` is evaluated through
    ``log1p``/``expm1`` so that rates left near zero by repeated step-downs do
    not divide by zero.
    """
    if term <= 0:
        raise InvalidRangeError("Term must be positive", context={"term": term})
    if rate_per_month == 0:
        return principal / term
    # (1 + i)^n - 1, exact even when 1 + i rounds to 1
    growth = math.expm1(term * math.log1p(rate_per_month))
    return principal * (rate_per_month * (growth + 1)) / growth


def validate_parameters(params: LoanParameters) -> None:
    """Reject parameters the recurrence cannot simulate meaningfully.

    Raises
    ------
    InvalidConfigurationError
        If ``decrease_frequency`` is not a positive integer.
    InvalidRangeError
        If any amount, rate or count is outside its valid range.
    """
    for name in ("principal", "annual_rate", "overpayment", "rate_decrease", "minimum_rate"):
        value = getattr(params, name)
        if not math.isfinite(value):
            raise InvalidRangeError(f"{name} must be a finite number", context={name: value})

    if not isinstance(params.decrease_frequency, int) or params.decrease_frequency <= 0:
        raise InvalidConfigurationError(
            "Rate decrease frequency must be a positive number of installments",
            context={"decrease_frequency": params.decrease_frequency},
        )
    if not isinstance(params.installment_count, int) or params.installment_count <= 0:
        raise InvalidRangeError(
            "Installment count must be a positive integer",
            context={"installment_count": params.installment_count},
        )
    if params.principal <= 0:
        raise InvalidRangeError("Principal must be positive", context={"principal": params.principal})
    if params.overpayment < 0:
        raise InvalidRangeError(
            "Overpayment cannot be negative", context={"overpayment": params.overpayment}
        )
    if params.annual_rate < 0:
        raise InvalidRangeError(
            "Interest rate cannot be negative", context={"annual_rate": params.annual_rate}
        )
    if params.minimum_rate < 0:
        raise InvalidRangeError(
            "Minimum interest rate cannot be negative",
            context={"minimum_rate": params.minimum_rate},
        )
    if params.rate_decrease < 0:
        raise InvalidRangeError(
            "Rate decrease cannot be negative", context={"rate_decrease": params.rate_decrease}
        )


def simulate(params: LoanParameters) -> SimulationResult:
    """Simulate the repayment of a loan installment by installment.

    Parameters
    ----------
    params: LoanParameters
        The loan terms, overpayment and step-down configuration.

    Returns
    -------
    SimulationResult
        The ledger and summary figures. The ledger stops at the installment
        that pays the loan off, which may precede ``installment_count`` when
        overpayments are made.

    Raises
    ------
    InvalidConfigurationError, InvalidRangeError
        If the parameters are rejected by :func:`validate_parameters`.
    DegenerateScheduleError
        If an installment fails to reduce the outstanding balance.
    """
    validate_parameters(params)

    current_rate = params.annual_rate
    rate_per_month = monthly_rate(current_rate)
    payment = calculate_annuity_payment(params.principal, rate_per_month, params.installment_count)
    balance = params.principal

    installments: List[InstallmentRecord] = []
    rate_changes: List[RateChange] = []
    total_interest = 0.0
    total_principal = 0.0
    total_overpayment = 0.0
    written_off = 0.0
    actual_count = 0

    logger.debug(
        "Starting simulation",
        extra={
            "principal": params.principal,
            "annual_rate": params.annual_rate,
            "installment_count": params.installment_count,
            "overpayment": params.overpayment,
            "initial_payment": payment,
        },
    )

    for number in range(1, params.installment_count + 1):
        # Step-downs take effect for the installment that triggers them
        if (
            number % params.decrease_frequency == 0
            and params.rate_decrease != 0
            and current_rate > params.minimum_rate
        ):
            old_rate = current_rate
            current_rate = max(params.minimum_rate, current_rate - params.rate_decrease)
            rate_per_month = monthly_rate(current_rate)
            remaining = params.installment_count - number + 1
            payment = calculate_annuity_payment(balance, rate_per_month, remaining)
            rate_changes.append(
                RateChange(
                    installment=number,
                    old_rate=old_rate,
                    new_rate=current_rate,
                    new_amount=payment,
                    remaining_balance=balance,
                    remaining_installments=remaining,
                )
            )
            logger.debug(
                "Interest rate stepped down from %.2f%% to %.2f%% at installment %d",
                old_rate,
                current_rate,
                number,
            )

        starting_balance = balance
        interest = balance * rate_per_month
        principal = min(payment - interest, balance)
        balance -= principal
        overpayment = min(params.overpayment, balance)
        balance -= overpayment

        if balance < PAID_OFF_TOLERANCE:
            written_off += balance
            balance = 0.0
        elif balance >= starting_balance:
            raise DegenerateScheduleError(
                "Installment does not reduce the outstanding balance",
                context={
                    "installment": number,
                    "balance": starting_balance,
                    "payment": payment,
                    "interest": interest,
                },
            )

        installments.append(
            InstallmentRecord(
                number=number,
                amount=payment,
                interest=interest,
                principal=principal,
                interest_rate=current_rate,
                overpayment=overpayment,
                remaining_balance=balance,
                date=add_months(params.start_date, number - 1),
            )
        )
        total_interest += interest
        total_principal += principal
        total_overpayment += overpayment
        actual_count = number

        if balance == 0.0:
            break

    if balance > 0.0:
        logger.warning(
            "Schedule ended with an outstanding balance of %.2f", balance, extra={"balance": balance}
        )

    years, months = split_months(actual_count)
    result = SimulationResult(
        installments=tuple(installments),
        total_interest=total_interest,
        actual_installment_count=actual_count,
        duration_years=years,
        duration_months=months,
        loan_amount=params.principal,
        initial_rate=params.annual_rate,
        final_rate=current_rate,
        monthly_overpayment=params.overpayment,
        start_date=params.start_date,
        end_date=add_months(params.start_date, actual_count - 1),
        total_principal=total_principal,
        total_overpayment_applied=total_overpayment,
        written_off_balance=written_off,
        rate_changes=tuple(rate_changes),
    )
    logger.debug(
        "Simulation finished after %d installments, total interest %.2f",
        actual_count,
        total_interest,
    )
    return result


def compare(params: LoanParameters) -> SimulationComparison:
    """Compare a loan with and without its monthly overpayment.

    Both runs share every parameter except the overpayment, which is held at
    ``params.overpayment`` for the first run and at zero for the second.
    """
    with_overpayments = simulate(params)
    without_overpayments = simulate(params.with_overpayment(0.0))

    interest_savings = without_overpayments.total_interest - with_overpayments.total_interest
    reduction = (
        without_overpayments.actual_installment_count - with_overpayments.actual_installment_count
    )
    if reduction < 0:
        logger.warning(
            "Overpayments lengthened the loan by %d installments; reporting no reduction",
            -reduction,
        )
        reduction = 0
    reduction_years, reduction_months = split_months(reduction)

    return SimulationComparison(
        with_overpayments=with_overpayments,
        without_overpayments=without_overpayments,
        interest_savings=interest_savings,
        reduction_years=reduction_years,
        reduction_months=reduction_months,
        total_overpayment=params.overpayment * with_overpayments.actual_installment_count,
    )
