"""Output helpers for the loan simulator.

This module renders simulation results and comparisons as plain text. Amounts
are formatted by :func:`format_currency`, which groups thousands with spaces
and uses a comma as the decimal separator regardless of the process locale.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from .data_models import InstallmentRecord, SimulationComparison, SimulationResult

DATE_FORMAT = "%d.%m.%Y"
CURRENCY_SUFFIX = " zł"


def format_currency(value: float) -> str:
    """Format ``value`` with two decimals, e.g. ``1076000`` -> ``"1 076 000,00"``."""
    formatted = f"{abs(value):.2f}"
    integer_part, fractional_part = formatted.split(".")
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    sign = "-" if value < 0 and formatted != "0.00" else ""
    return f"{sign}{' '.join(groups)},{fractional_part}"


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def _money(value: float) -> str:
    return f"{format_currency(value)}{CURRENCY_SUFFIX}"


def _print_installments(installments: Iterable[InstallmentRecord]) -> None:
    for entry in installments:
        print(
            f"  Installment {entry.number:>3}: {_money(entry.amount)} "
            f"(interest: {_money(entry.interest)}, principal: {_money(entry.principal)})"
        )


def print_simulation_result(result: SimulationResult, title: str, rows: int = 3) -> None:
    """Print the summary of one run followed by its first and last installments.

    Parameters
    ----------
    result: SimulationResult
        The run to print.
    title: str
        Heading printed above the summary.
    rows: int
        How many installments to show at each end of the ledger. ``0`` hides
        the ledger.
    """
    print(f"=== {title} ===")
    print(f"Loan amount: {_money(result.loan_amount)}")
    print(f"Monthly overpayment: {_money(result.monthly_overpayment)}")
    print(f"Actual number of installments: {result.actual_installment_count}")
    print(f"Loan duration: {result.duration_years} years {result.duration_months} months")
    print(f"End date: {format_date(result.end_date)}")
    print(f"Initial interest rate: {result.initial_rate:.2f}%")
    print(f"Final interest rate: {result.final_rate:.2f}%")
    print(f"Total interest: {_money(result.total_interest)}")
    if rows <= 0:
        return

    print(f"\nFirst {rows} installments:")
    _print_installments(result.first_installments(rows))
    print(f"Last {rows} installments:")
    _print_installments(result.last_installments(rows))


def print_rate_changes(result: SimulationResult) -> None:
    """Print the interest-rate step-downs of a run, if any."""
    if not result.rate_changes:
        return
    print("Interest rate changes:")
    for change in result.rate_changes:
        print(
            f"  Installment {change.installment:>3}: {change.old_rate:.2f}% -> {change.new_rate:.2f}%, "
            f"new installment {_money(change.new_amount)} "
            f"({change.remaining_installments} left, balance {_money(change.remaining_balance)})"
        )


def print_comparison(comparison: SimulationComparison, rows: int = 3) -> None:
    """Print both runs of a comparison and the benefits of overpaying."""
    without = comparison.without_overpayments
    with_op = comparison.with_overpayments

    print_simulation_result(without, "LOAN WITHOUT OVERPAYMENTS", rows)
    print("\n")
    print_simulation_result(
        with_op,
        f"LOAN WITH {format_currency(with_op.monthly_overpayment)}{CURRENCY_SUFFIX.upper()}/MONTH OVERPAYMENT",
        rows,
    )

    days_difference = (without.end_date - with_op.end_date).days
    print("\n=== COMPARISON AND BENEFITS ===")
    print(f"Start date: {format_date(with_op.start_date)}")
    print(f"End date without overpayments: {format_date(without.end_date)}")
    print(f"End date with overpayments: {format_date(with_op.end_date)}")
    print(f"Finished earlier by: {days_difference} days (~{days_difference / 365.25:.1f} years)")
    print(f"Total overpayment: {_money(comparison.total_overpayment)}")
    print(f"Interest savings: {_money(comparison.interest_savings)}")
    print(
        f"Loan term reduction: {comparison.reduction_years} years "
        f"{comparison.reduction_months} months"
    )
