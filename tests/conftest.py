"""Shared fixtures for loan_sim tests."""

import logging
from datetime import date

import pytest

from loan_sim import LoanParameters
from loan_sim import config
from loan_sim.logging_config import PACKAGE_LOGGER


@pytest.fixture
def start_date() -> date:
    return date(2025, 10, 1)


@pytest.fixture
def simple_params(start_date: date) -> LoanParameters:
    """A two-year loan with no overpayment and no step-downs."""
    return LoanParameters(
        principal=120_000.0,
        annual_rate=6.0,
        installment_count=24,
        start_date=start_date,
    )


@pytest.fixture
def default_scenario(start_date: date) -> LoanParameters:
    """The scenario the command-line tool runs by default."""
    return LoanParameters(
        principal=config.DEFAULT_PRINCIPAL,
        annual_rate=config.DEFAULT_RATE,
        installment_count=config.DEFAULT_TERM,
        start_date=start_date,
        overpayment=config.DEFAULT_OVERPAYMENT,
        rate_decrease=config.DEFAULT_RATE_DECREASE,
        decrease_frequency=config.DEFAULT_DECREASE_FREQUENCY,
        minimum_rate=config.DEFAULT_MINIMUM_RATE,
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers installed by configure_logging or the CLI."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
