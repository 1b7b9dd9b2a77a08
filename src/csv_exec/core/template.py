"""Command templates and placeholder substitution.

A command template is the shell-tokenized ``--exec`` string: a program name
followed by argument templates. Argument templates may contain placeholders
(``$0``, ``$1``... with the default pattern) that reference fields of the
current record by 0-based position.

Resolution policy
-----------------
- A placeholder whose capture is missing or is not a non-negative integer
  resolves to ``""``.
- A placeholder whose index is past the end of the record resolves to ``""``.
- Everything outside a match is copied verbatim.

``strict=True`` turns both elisions into :class:`UnresolvedPlaceholder`.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from typing import Sequence

from csv_exec.models.errors import ConfigurationError, EmptyCommand, UnresolvedPlaceholder

Record = Sequence[str]

# Leading "+" is accepted, sign "-" and non-ASCII digits are not.
_INDEX_RE = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class CommandTemplate:
    """Program name plus argument templates, parsed once per run."""

    program: str
    arguments: tuple[str, ...] = ()

    def __iter__(self):
        yield self.program
        yield from self.arguments

    def __len__(self) -> int:
        return 1 + len(self.arguments)


def compile_placeholder_pattern(source: str) -> re.Pattern[str]:
    """Compile ``source`` and check it defines a capture for the field index."""
    try:
        pattern = re.compile(source)
    except re.error as exc:
        raise ConfigurationError(f"Invalid placeholder pattern {source!r}: {exc}", option="arg_regex") from exc

    if pattern.groups < 1:
        raise ConfigurationError(
            f"Placeholder pattern {source!r} must define a capturing group for the column position",
            option="arg_regex",
        )
    return pattern


def parse_command(command: str) -> CommandTemplate:
    """Split ``command`` with POSIX shell word rules into a :class:`CommandTemplate`."""
    try:
        words = shlex.split(command)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid command {command!r}: {exc}", option="command") from exc

    if not words:
        raise EmptyCommand()
    return CommandTemplate(program=words[0], arguments=tuple(words[1:]))


def _parse_index(capture: str | None) -> int | None:
    if capture is None or not _INDEX_RE.fullmatch(capture):
        return None
    try:
        return int(capture)
    except ValueError:
        # longer than sys.int_info.str_digits_check_threshold allows
        return None


def resolve(
    argument_template: str,
    record: Record,
    pattern: re.Pattern[str],
    *,
    strict: bool = False,
) -> str:
    """Replace every placeholder in ``argument_template`` with its record field."""

    def _substitute(match: re.Match[str]) -> str:
        capture = match.group(1)
        index = _parse_index(capture)
        if index is None:
            if strict:
                raise UnresolvedPlaceholder(
                    f"Placeholder {match.group(0)!r} does not reference a column position",
                    placeholder=match.group(0),
                )
            return ""
        if index >= len(record):
            if strict:
                raise UnresolvedPlaceholder(
                    f"Placeholder {match.group(0)!r} references column {index} "
                    f"but the record has {len(record)} fields",
                    placeholder=match.group(0),
                )
            return ""
        return record[index]

    return pattern.sub(_substitute, argument_template)


def materialize(
    command_template: Sequence[str],
    record: Record,
    pattern: re.Pattern[str],
    *,
    strict: bool = False,
) -> tuple[str, list[str]]:
    """Build the concrete ``(program, args)`` for one record.

    The program name is passed through untouched; each argument is resolved
    independently and order is preserved.
    """
    words = list(command_template)
    if not words:
        raise EmptyCommand()

    program, *templates = words
    args = [resolve(template, record, pattern, strict=strict) for template in templates]
    return program, args


__all__ = [
    "CommandTemplate",
    "Record",
    "compile_placeholder_pattern",
    "materialize",
    "parse_command",
    "resolve",
]
