"""Per-record pipeline: materialize, execute, capture, append."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from csv_exec.core.template import CommandTemplate, materialize
from csv_exec.infra.executor import Executor
from csv_exec.logging import NullLogger, RunLogger
from csv_exec.models.errors import CommandFailed, InvalidOutputEncoding

# Unicode White_Space. str.strip() would also drop the U+001C-U+001F separators.
WHITESPACE = "\t\n\x0b\x0c\r \x85\xa0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000"


class RecordPipeline:
    """Turn one input record into its augmented output record.

    Holds only the immutable command template, placeholder pattern and policy
    flags; every call to :meth:`process` is independent of the previous one.
    """

    def __init__(
        self,
        template: CommandTemplate,
        pattern: re.Pattern[str],
        executor: Executor,
        *,
        strict_placeholders: bool = False,
        fail_on_exit_status: bool = False,
        logger: RunLogger | None = None,
    ) -> None:
        self.template = template
        self.pattern = pattern
        self.executor = executor
        self.strict_placeholders = strict_placeholders
        self.fail_on_exit_status = fail_on_exit_status
        self.logger = logger or NullLogger()

    def process(self, record: Sequence[str], *, record_index: int = 0) -> list[str]:
        """Run the command for ``record`` and return it with the result appended."""
        program, args = materialize(self.template, record, self.pattern, strict=self.strict_placeholders)
        output = self.executor.invoke(program, args)

        if output.returncode != 0:
            self.logger.event(
                "command.nonzero_exit",
                level=logging.WARNING,
                message=f"{program} exited with status {output.returncode}",
                record_index=record_index,
                program=program,
                returncode=output.returncode,
                stderr=output.stderr.decode("utf-8", errors="replace").strip(),
            )
            if self.fail_on_exit_status:
                raise CommandFailed(program, output.returncode)

        try:
            text = output.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidOutputEncoding(
                f"Output of command {program} with args {args!r} is not valid UTF-8: {exc}"
            ) from exc

        self.logger.event(
            "record.processed",
            level=logging.DEBUG,
            record_index=record_index,
            program=program,
            args=args,
            returncode=output.returncode,
        )
        return [*record, text.strip(WHITESPACE)]


__all__ = ["RecordPipeline"]
