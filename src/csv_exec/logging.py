"""Run-scoped structured logging for csv-exec.

Every line on stderr is one event carrying the run id, an event name under the
``csv_exec.`` namespace, a message and an optional ``data`` payload. Domain
events (``run.started``, ``record.processed``...) are declared in
``EVENT_SCHEMAS``; a pydantic model there validates the payload strictly.

stdout is never touched: it carries the CSV output.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

NAMESPACE = "csv_exec"
DEFAULT_EVENT = f"{NAMESPACE}.log"


class StrictPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RunStartedPayload(StrictPayload):
    program: str
    argument_count: int
    input: str
    output: str
    has_header: bool


class RunCompletedPayload(StrictPayload):
    status: str
    records_processed: int
    started_at: str
    completed_at: str
    error: dict[str, Any] | None = None


class RecordProcessedPayload(StrictPayload):
    record_index: int
    program: str
    args: list[str]
    returncode: int


class NonzeroExitPayload(StrictPayload):
    record_index: int
    program: str
    returncode: int
    stderr: str


# None: known event with a freeform payload.
EVENT_SCHEMAS: dict[str, type[StrictPayload] | None] = {
    "log": None,
    "settings.effective": None,
    "run.started": RunStartedPayload,
    "run.completed": RunCompletedPayload,
    "run.failed": RunCompletedPayload,
    "record.processed": RecordProcessedPayload,
    "command.nonzero_exit": NonzeroExitPayload,
}


def _payload(name: str, payload: dict[str, Any]) -> dict[str, Any]:
    if name not in EVENT_SCHEMAS:
        raise ValueError(f"Unknown event '{name}' (add to EVENT_SCHEMAS)")
    schema = EVENT_SCHEMAS[name]
    if schema is None:
        return payload
    try:
        model = schema.model_validate(payload, strict=True)
    except ValidationError as e:
        raise ValueError(f"Invalid payload for event '{name}': {e}") from e
    return model.model_dump(mode="python", exclude_none=True)


def _timestamp(created: float) -> str:
    return (
        datetime.fromtimestamp(created, tz=timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _event_record(formatter: logging.Formatter, record: logging.LogRecord) -> dict[str, Any]:
    out: dict[str, Any] = {
        "run_id": getattr(record, "run_id", ""),
        "event_id": getattr(record, "event_id", ""),
        "timestamp": _timestamp(record.created),
        "level": record.levelname.lower(),
        "event": getattr(record, "event", DEFAULT_EVENT),
        "message": record.getMessage(),
    }
    data = getattr(record, "data", None)
    if data:
        out["data"] = dict(data)
    if record.exc_info:
        exc_type, exc, _tb = record.exc_info
        out["error"] = {
            "type": exc_type.__name__ if exc_type else "",
            "message": str(exc),
            "stack_trace": formatter.formatException(record.exc_info),
        }
    return out


class NdjsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        return json.dumps(_event_record(self, record), ensure_ascii=False, default=str, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """``[timestamp] LEVEL event: message (key=value, ...)``"""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        event = _event_record(self, record)
        line = f"[{event['timestamp']}] {event['level'].upper()} {event['event']}"
        if event["message"] != event["event"]:
            line += f": {event['message']}"
        if "data" in event:
            line += " (" + ", ".join(f"{key}={value}" for key, value in sorted(event["data"].items())) + ")"
        if "error" in event:
            line += "\n" + event["error"]["stack_trace"]
        return line


class RunLogger(logging.LoggerAdapter):
    """Stamps records with the run id and an event name; ``.event()`` logs domain events."""

    def __init__(self, logger: logging.Logger, *, run_id: str | None = None) -> None:
        self.run_id = run_id or uuid.uuid4().hex
        super().__init__(logger, {"run_id": self.run_id})

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        extra = {"event": DEFAULT_EVENT, **(kwargs.pop("extra", None) or {})}
        extra["run_id"] = self.run_id
        extra["event_id"] = uuid.uuid4().hex
        kwargs["extra"] = extra
        return msg, kwargs

    def event(
        self,
        name: str,
        *,
        message: str | None = None,
        level: int = logging.INFO,
        data: Mapping[str, Any] | None = None,
        exc: BaseException | None = None,
        **fields: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return

        payload = _payload(name, {**(data or {}), **fields})
        full_name = f"{NAMESPACE}.{name}"
        extra: dict[str, Any] = {"event": full_name, "data": payload}
        exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
        self.log(level, message or full_name, extra=extra, exc_info=exc_info)


class NullLogger(RunLogger):
    """Discards everything; used when the engine runs without a CLI."""

    def __init__(self) -> None:
        base = logging.Logger("csv_exec.null")
        base.disabled = True
        super().__init__(base, run_id="null")

    def __bool__(self) -> bool:
        return False


@contextmanager
def run_logger(*, log_format: str = "text", log_level: int = logging.WARNING) -> Iterator[RunLogger]:
    """Yield a logger writing ``log_format`` events to stderr; handlers are removed on exit."""
    if log_format not in {"text", "ndjson"}:
        raise ValueError("log_format must be 'text' or 'ndjson'")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(NdjsonFormatter() if log_format == "ndjson" else TextFormatter())

    run_id = uuid.uuid4().hex
    base = logging.getLogger(f"csv_exec.run.{run_id}")
    base.setLevel(log_level)
    base.propagate = False
    base.addHandler(handler)
    try:
        yield RunLogger(base, run_id=run_id)
    finally:
        base.removeHandler(handler)
        handler.close()


__all__ = [
    "DEFAULT_EVENT",
    "EVENT_SCHEMAS",
    "NAMESPACE",
    "NdjsonFormatter",
    "NullLogger",
    "RunLogger",
    "TextFormatter",
    "run_logger",
]
