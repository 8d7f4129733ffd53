"""Command‑line interface for the loan simulator.

This module uses the ``click`` library to implement a multi‑command interface.
Users can simulate a single loan or compare the same loan with and without a
monthly overpayment. Results can be printed to the terminal or exported to
JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import click

from . import config
from .data_models import LoanParameters, SimulationComparison, SimulationResult
from .engine import compare as compare_simulations
from .engine import simulate as simulate_loan
from .exceptions import LoanSimulationError
from .formatter import format_currency, print_comparison, print_rate_changes, print_simulation_result
from .logging_config import configure_logging, get_logger
from .utils import parse_date

logger = get_logger(__name__)


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "").replace("_", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def build_parameters(
    principal: str,
    rate: float,
    term: int,
    start_date: str,
    overpayment: str,
    rate_decrease: float,
    decrease_frequency: int,
    minimum_rate: float,
) -> LoanParameters:
    try:
        start = parse_date(start_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--start-date")
    return LoanParameters(
        principal=parse_amount(principal),
        annual_rate=rate,
        installment_count=term,
        start_date=start,
        overpayment=parse_amount(overpayment),
        rate_decrease=rate_decrease,
        decrease_frequency=decrease_frequency,
        minimum_rate=minimum_rate,
    )


def result_to_dict(result: SimulationResult) -> Dict[str, Any]:
    """Convert a result into JSON-serializable primitives."""
    data = asdict(result)
    data["start_date"] = result.start_date.isoformat()
    data["end_date"] = result.end_date.isoformat()
    data["total_paid"] = result.total_paid
    for entry in data["installments"]:
        entry["date"] = entry["date"].isoformat()
    return data


def comparison_to_dict(comparison: SimulationComparison) -> Dict[str, Any]:
    return {
        "interest_savings": comparison.interest_savings,
        "reduction_years": comparison.reduction_years,
        "reduction_months": comparison.reduction_months,
        "total_overpayment": comparison.total_overpayment,
        "with_overpayments": result_to_dict(comparison.with_overpayments),
        "without_overpayments": result_to_dict(comparison.without_overpayments),
    }


def export_to_json(path: Path, data: Dict[str, Any]) -> None:
    """Export a result or comparison dictionary to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: SimulationResult) -> None:
    """Export the installment ledger of a result to a CSV file."""
    header = [
        "Installment",
        "Date",
        "Amount",
        "Interest",
        "Principal",
        "Overpayment",
        "Interest_Rate",
        "Remaining_Balance",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in result.installments:
            writer.writerow(
                [
                    e.number,
                    e.date.isoformat(),
                    round(e.amount, 2),
                    round(e.interest, 2),
                    round(e.principal, 2),
                    round(e.overpayment, 2),
                    e.interest_rate,
                    round(e.remaining_balance, 2),
                ]
            )


def loan_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the loan parameter options shared by every command."""
    options = [
        click.option(
            "--principal", "-p", "principal", default=str(config.DEFAULT_PRINCIPAL),
            show_default=True, help="Loan amount (accepts 500k, 1.2m)",
        ),
        click.option(
            "--rate", "-r", "rate", type=float, default=config.DEFAULT_RATE,
            show_default=True, help="Annual interest rate (percent)",
        ),
        click.option(
            "--term", "-t", "term", type=int, default=config.DEFAULT_TERM,
            show_default=True, help="Number of monthly installments",
        ),
        click.option(
            "--start-date", "-s", "start_date", default=config.DEFAULT_START_DATE,
            show_default=True, help="First installment date (YYYY-MM-DD or YYYY-MM)",
        ),
        click.option(
            "--rate-decrease", "rate_decrease", type=float, default=config.DEFAULT_RATE_DECREASE,
            show_default=True, help="Percentage points removed from the rate at each step-down (0 disables)",
        ),
        click.option(
            "--decrease-frequency", "decrease_frequency", type=int,
            default=config.DEFAULT_DECREASE_FREQUENCY, show_default=True,
            help="Installments between rate step-downs",
        ),
        click.option(
            "--minimum-rate", "minimum_rate", type=float, default=config.DEFAULT_MINIMUM_RATE,
            show_default=True, help="Rate floor for step-downs (percent)",
        ),
        click.option(
            "--rows", "rows", type=int, default=None,
            help="Installments shown at each end of the ledger",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--log-level", "log_level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str]) -> None:
    """A command‑line simulator for annuity loans with overpayments."""
    try:
        settings = config.Settings.from_env()
    except ValueError as exc:
        raise click.ClickException(str(exc))
    configure_logging(
        level=log_level or settings.log_level,
        log_file=settings.log_file,
        structured=settings.structured_logs,
    )
    ctx.obj = settings


def _run(action: Callable[[], Any]) -> Any:
    try:
        return action()
    except LoanSimulationError as exc:
        logger.error("Simulation failed: %s", exc, extra={"context": exc.context})
        raise click.ClickException(str(exc))


@cli.command()
@loan_options
@click.option("--overpayment", "-o", "overpayment", default="0", show_default=True, help="Monthly overpayment")
@click.option("--show-rate-changes", is_flag=True, help="List the interest rate step-downs")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def simulate(
    settings: config.Settings,
    principal: str,
    rate: float,
    term: int,
    start_date: str,
    rate_decrease: float,
    decrease_frequency: int,
    minimum_rate: float,
    rows: Optional[int],
    overpayment: str,
    show_rate_changes: bool,
    output: Optional[str],
) -> None:
    """Simulate a single loan and print its summary."""
    params = build_parameters(
        principal, rate, term, start_date, overpayment, rate_decrease, decrease_frequency, minimum_rate
    )
    result = _run(lambda: simulate_loan(params))
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result_to_dict(result))
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return

    title = "LOAN SIMULATION"
    if params.overpayment:
        title = f"LOAN WITH {format_currency(params.overpayment)} ZŁ/MONTH OVERPAYMENT"
    print_simulation_result(result, title, settings.summary_rows if rows is None else rows)
    if show_rate_changes:
        print_rate_changes(result)


@cli.command()
@loan_options
@click.option(
    "--overpayment", "-o", "overpayment", default=str(config.DEFAULT_OVERPAYMENT),
    show_default=True, help="Monthly overpayment",
)
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def compare(
    settings: config.Settings,
    principal: str,
    rate: float,
    term: int,
    start_date: str,
    rate_decrease: float,
    decrease_frequency: int,
    minimum_rate: float,
    rows: Optional[int],
    overpayment: str,
    output: Optional[str],
) -> None:
    """Compare the loan with and without the monthly overpayment."""
    params = build_parameters(
        principal, rate, term, start_date, overpayment, rate_decrease, decrease_frequency, minimum_rate
    )
    comparison = _run(lambda: compare_simulations(params))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Comparison export must use .json extension", param_hint="--output")
        export_to_json(path, comparison_to_dict(comparison))
        click.echo(f"Comparison exported to {path}")
        return
    print_comparison(comparison, settings.summary_rows if rows is None else rows)


if __name__ == "__main__":
    cli()
