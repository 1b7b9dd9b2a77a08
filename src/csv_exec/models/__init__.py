"""Shared types for :mod:`csv_exec`."""

from csv_exec.models.errors import (
    CommandFailed,
    ConfigurationError,
    CsvExecError,
    EmptyCommand,
    InputError,
    InvalidOutputEncoding,
    OutputError,
    ProcessLaunchFailed,
    StreamError,
    UnresolvedPlaceholder,
)
from csv_exec.models.run import RunOptions, RunResult, RunStatus

__all__ = [
    "CommandFailed",
    "ConfigurationError",
    "CsvExecError",
    "EmptyCommand",
    "InputError",
    "InvalidOutputEncoding",
    "OutputError",
    "ProcessLaunchFailed",
    "RunOptions",
    "RunResult",
    "RunStatus",
    "StreamError",
    "UnresolvedPlaceholder",
]
