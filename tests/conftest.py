"""Shared fixtures for csv-exec tests."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Sequence

import pytest

from csv_exec.infra.executor import ProcessOutput
from csv_exec.settings import ENV_PREFIX


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch) -> None:
    """Keep settings.toml/.env/CSV_EXEC_* from the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@dataclass
class RecordingExecutor:
    """Executor double that echoes its arguments joined by spaces."""

    returncode: int = 0
    stdout: bytes | None = None
    stderr: bytes = b""
    calls: list[tuple[str, list[str]]] = field(default_factory=list)

    def invoke(self, program: str, args: Sequence[str]) -> ProcessOutput:
        self.calls.append((program, list(args)))
        out = self.stdout if self.stdout is not None else (" ".join(args) + "\n").encode("utf-8")
        return ProcessOutput(stdout=out, stderr=self.stderr, returncode=self.returncode)


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()
