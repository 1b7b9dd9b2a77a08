"""Run-level types for csv-exec.

- ``RunOptions`` is the user-provided configuration for one run (raw strings,
  validated by the engine before any record is read).
- ``RunResult`` summarizes the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

DEFAULT_ARG_REGEX = r"\$([0-9]+)"
DEFAULT_NEW_COLUMN_NAME = "Result"


class RunStatus(str, Enum):
    """Overall run outcome."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RunOptions:
    """Inputs and options for a single run."""

    command: str

    # ``None`` means stdin / stdout.
    input_path: Path | None = None
    output_path: Path | None = None

    has_header: bool = True
    delimiter: str = ","
    quote: str = '"'
    # Output dialect defaults to the input dialect when left unset.
    output_delimiter: str | None = None
    output_quote: str | None = None

    arg_regex: str = DEFAULT_ARG_REGEX
    new_column_name: str = DEFAULT_NEW_COLUMN_NAME

    strict_placeholders: bool = False
    fail_on_exit_status: bool = False


@dataclass(frozen=True)
class RunResult:
    """Outcome summary for a run."""

    status: RunStatus
    records_processed: int
    started_at: datetime | None = None
    completed_at: datetime | None = None


__all__ = ["DEFAULT_ARG_REGEX", "DEFAULT_NEW_COLUMN_NAME", "RunOptions", "RunResult", "RunStatus"]
