"""csv-exec error hierarchy."""

from __future__ import annotations

from typing import Sequence


class CsvExecError(Exception):
    """Base class for csv-exec specific exceptions."""


class ConfigurationError(CsvExecError):
    """Raised when a delimiter, quote, pattern or command template is invalid."""

    def __init__(self, message: str, *, option: str | None = None) -> None:
        super().__init__(message)
        self.option = option


class EmptyCommand(ConfigurationError):
    """Raised when the command template has no program name."""

    def __init__(self, message: str = "No command to execute") -> None:
        super().__init__(message, option="command")


class UnresolvedPlaceholder(CsvExecError):
    """Raised in strict mode when a placeholder cannot be resolved."""

    def __init__(self, message: str, *, placeholder: str) -> None:
        super().__init__(message)
        self.placeholder = placeholder


class ProcessLaunchFailed(CsvExecError):
    """Raised when the external program could not be started."""

    def __init__(self, program: str, args: Sequence[str], reason: str) -> None:
        super().__init__(f"Failed to execute command {program} with args {list(args)!r}: {reason}")
        self.program = program
        self.args_list = list(args)


class InvalidOutputEncoding(CsvExecError):
    """Raised when captured stdout is not valid UTF-8."""


class CommandFailed(CsvExecError):
    """Raised when a command exits non-zero and exit statuses are enforced."""

    def __init__(self, program: str, returncode: int) -> None:
        super().__init__(f"Command {program} exited with status {returncode}")
        self.program = program
        self.returncode = returncode


class StreamError(CsvExecError):
    """Raised for read, write or open failures on the input or output streams."""


class InputError(StreamError):
    """Raised when the input stream is missing, unreadable or malformed."""


class OutputError(StreamError):
    """Raised when the output stream cannot be opened or written."""


__all__ = [
    "CsvExecError",
    "ConfigurationError",
    "EmptyCommand",
    "UnresolvedPlaceholder",
    "ProcessLaunchFailed",
    "InvalidOutputEncoding",
    "CommandFailed",
    "StreamError",
    "InputError",
    "OutputError",
]
