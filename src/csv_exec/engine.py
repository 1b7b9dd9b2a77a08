"""Run orchestration: validate configuration, then stream records through the pipeline."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from csv_exec.core.pipeline import RecordPipeline
from csv_exec.core.template import CommandTemplate, compile_placeholder_pattern, parse_command
from csv_exec.infra.executor import Executor, SubprocessExecutor
from csv_exec.infra.io import CsvDialect, RecordWriter, iter_records, open_input, open_output
from csv_exec.logging import NullLogger, RunLogger
from csv_exec.models.errors import CsvExecError
from csv_exec.models.run import RunOptions, RunResult, RunStatus


@dataclass(frozen=True)
class RunPlan:
    """Validated, immutable configuration for one run."""

    options: RunOptions
    template: CommandTemplate
    pattern: re.Pattern[str]
    input_dialect: CsvDialect
    output_dialect: CsvDialect


def plan_run(options: RunOptions) -> RunPlan:
    """Validate every configuration value; raises before any stream is touched."""
    input_dialect = CsvDialect.parse(options.delimiter, options.quote)
    output_dialect = CsvDialect.parse(
        options.output_delimiter if options.output_delimiter is not None else options.delimiter,
        options.output_quote if options.output_quote is not None else options.quote,
        prefix="output_",
    )
    pattern = compile_placeholder_pattern(options.arg_regex)
    template = parse_command(options.command)
    return RunPlan(
        options=options,
        template=template,
        pattern=pattern,
        input_dialect=input_dialect,
        output_dialect=output_dialect,
    )


def _iso(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def run(
    options: RunOptions,
    *,
    executor: Executor | None = None,
    logger: RunLogger | None = None,
) -> RunResult:
    """Execute one run. Errors are logged and re-raised; written rows stay written."""
    logger = logger or NullLogger()
    started_at = datetime.now(timezone.utc)
    processed = 0

    try:
        plan = plan_run(options)
        logger.event(
            "run.started",
            program=plan.template.program,
            argument_count=len(plan.template.arguments),
            input=str(options.input_path or "<stdin>"),
            output=str(options.output_path or "<stdout>"),
            has_header=options.has_header,
        )

        pipeline = RecordPipeline(
            plan.template,
            plan.pattern,
            executor or SubprocessExecutor(),
            strict_placeholders=options.strict_placeholders,
            fail_on_exit_status=options.fail_on_exit_status,
            logger=logger,
        )

        with open_input(options.input_path) as source, open_output(options.output_path) as sink:
            header, records = iter_records(source, plan.input_dialect, has_header=options.has_header)
            writer = RecordWriter(sink, plan.output_dialect)
            if header is not None:
                writer.write_header(header, options.new_column_name)

            for record in records:
                writer.write(pipeline.process(record, record_index=processed))
                processed += 1
    except CsvExecError as exc:
        completed_at = datetime.now(timezone.utc)
        logger.event(
            "run.failed",
            level=logging.ERROR,
            message=str(exc),
            status=RunStatus.FAILED.value,
            records_processed=processed,
            started_at=_iso(started_at),
            completed_at=_iso(completed_at),
            error={"type": type(exc).__name__, "message": str(exc)},
        )
        raise

    completed_at = datetime.now(timezone.utc)
    logger.event(
        "run.completed",
        status=RunStatus.SUCCEEDED.value,
        records_processed=processed,
        started_at=_iso(started_at),
        completed_at=_iso(completed_at),
    )
    return RunResult(
        status=RunStatus.SUCCEEDED,
        records_processed=processed,
        started_at=started_at,
        completed_at=completed_at,
    )


__all__ = ["RunPlan", "plan_run", "run"]
