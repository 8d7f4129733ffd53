"""Default scenario and runtime settings.

The defaults describe the loan the command-line tool simulates when no
options are given. :class:`Settings` collects values that may be overridden
through environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .logging_config import ENV_LOG_FILE, ENV_LOG_LEVEL, ENV_STRUCTURED_LOGS

DEFAULT_PRINCIPAL = 1_076_000.0
DEFAULT_RATE = 6.20
DEFAULT_TERM = 12 * 30
DEFAULT_OVERPAYMENT = 5_000.0
DEFAULT_START_DATE = "2025-10-01"
DEFAULT_RATE_DECREASE = 1.0
DEFAULT_DECREASE_FREQUENCY = 24
DEFAULT_MINIMUM_RATE = 3.5

DEFAULT_SUMMARY_ROWS = 3

ENV_SUMMARY_ROWS = "LOAN_SIM_SUMMARY_ROWS"


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment."""

    summary_rows: int = DEFAULT_SUMMARY_ROWS
    log_level: Optional[str] = None
    log_file: Optional[str] = None
    structured_logs: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        rows_raw = env.get(ENV_SUMMARY_ROWS)
        try:
            summary_rows = int(rows_raw) if rows_raw else DEFAULT_SUMMARY_ROWS
        except ValueError as exc:
            raise ValueError(f"{ENV_SUMMARY_ROWS} must be an integer; got {rows_raw!r}") from exc
        return cls(
            summary_rows=max(summary_rows, 0),
            log_level=env.get(ENV_LOG_LEVEL) or None,
            log_file=env.get(ENV_LOG_FILE) or None,
            structured_logs=env.get(ENV_STRUCTURED_LOGS, "").lower() in ("true", "1", "yes"),
        )
