import shutil
import sys

import pytest

from csv_exec.infra.executor import ProcessOutput, SubprocessExecutor
from csv_exec.models.errors import ProcessLaunchFailed


def test_invoke_captures_stdout_bytes() -> None:
    output = SubprocessExecutor().invoke(sys.executable, ["-c", "import sys; sys.stdout.buffer.write(b'h\\xc3\\xa9llo\\n')"])

    assert isinstance(output, ProcessOutput)
    assert output.stdout == "héllo\n".encode("utf-8")
    assert output.returncode == 0


def test_invoke_passes_arguments_verbatim() -> None:
    args = ["-c", "import sys; print('|'.join(sys.argv[1:]))", "a b", "$0", "", "'quoted'"]

    output = SubprocessExecutor().invoke(sys.executable, args)

    assert output.stdout.decode().rstrip("\n") == "a b|$0||'quoted'"


def test_invoke_reports_nonzero_exit_and_stderr() -> None:
    script = "import sys; sys.stderr.write('bad'); sys.exit(4)"

    output = SubprocessExecutor().invoke(sys.executable, ["-c", script])

    assert output.returncode == 4
    assert output.stderr == b"bad"
    assert output.stdout == b""


def test_invoke_child_stdin_is_closed() -> None:
    output = SubprocessExecutor().invoke(sys.executable, ["-c", "import sys; print(repr(sys.stdin.read()))"])

    assert output.stdout.strip() == b"''"


def test_invoke_missing_program_raises_launch_failed() -> None:
    program = "csv-exec-no-such-program"
    assert shutil.which(program) is None

    with pytest.raises(ProcessLaunchFailed) as excinfo:
        SubprocessExecutor().invoke(program, ["x"])

    assert excinfo.value.program == program
    assert program in str(excinfo.value)


def test_invoke_nul_byte_in_argument_raises_launch_failed() -> None:
    with pytest.raises(ProcessLaunchFailed) as excinfo:
        SubprocessExecutor().invoke("echo", ["a\0b"])

    assert excinfo.value.program == "echo"
    assert "null byte" in str(excinfo.value)
