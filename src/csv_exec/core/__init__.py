"""Templating and per-record pipeline."""

from csv_exec.core.pipeline import RecordPipeline
from csv_exec.core.template import (
    CommandTemplate,
    compile_placeholder_pattern,
    materialize,
    parse_command,
    resolve,
)

__all__ = [
    "CommandTemplate",
    "RecordPipeline",
    "compile_placeholder_pattern",
    "materialize",
    "parse_command",
    "resolve",
]
