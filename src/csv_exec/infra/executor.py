"""Process execution for record commands."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from csv_exec.models.errors import ProcessLaunchFailed


@dataclass(frozen=True)
class ProcessOutput:
    """Captured result of one command invocation."""

    stdout: bytes
    stderr: bytes = b""
    returncode: int = 0


class Executor(Protocol):
    def invoke(self, program: str, args: Sequence[str]) -> ProcessOutput: ...


class SubprocessExecutor:
    """Run each command synchronously via :func:`subprocess.run`.

    The child gets a closed stdin; stdout and stderr are captured in full.
    There is no timeout: a hung command hangs the run.
    """

    def invoke(self, program: str, args: Sequence[str]) -> ProcessOutput:
        try:
            completed = subprocess.run(
                [program, *args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
            )
        except OSError as exc:
            raise ProcessLaunchFailed(program, args, exc.strerror or str(exc)) from exc
        except ValueError as exc:
            # e.g. an embedded NUL byte in an argument
            raise ProcessLaunchFailed(program, args, str(exc)) from exc

        return ProcessOutput(
            stdout=completed.stdout,
            stderr=completed.stderr,
            returncode=completed.returncode,
        )


__all__ = ["Executor", "ProcessOutput", "SubprocessExecutor"]
