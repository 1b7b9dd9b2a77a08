from pathlib import Path

from typer.testing import CliRunner

from csv_exec import __version__
from csv_exec.main import app

runner = CliRunner()

INPUT = "Id,Dir\n24,example.com/a\n68,example.com/b\n"
EXPECTED = "Id,Dir,Result\n24,example.com/a,example.com/a/24\n68,example.com/b,example.com/b/68\n"


def test_simple_substitution() -> None:
    result = runner.invoke(app, ["echo $1/$0"], input=INPUT)

    assert result.exit_code == 0, result.output
    assert result.stdout == EXPECTED


def test_exec_option_is_equivalent_to_argument() -> None:
    result = runner.invoke(app, ["--exec", "echo $1/$0"], input=INPUT)

    assert result.exit_code == 0, result.output
    assert result.stdout == EXPECTED


def test_arg_regex() -> None:
    result = runner.invoke(app, ["echo €1/€0", "--arg-regex", "€([0-9]+)"], input=INPUT)

    assert result.exit_code == 0, result.output
    assert result.stdout == EXPECTED


def test_delimiter_semicolon() -> None:
    result = runner.invoke(app, ["echo $1/$0", "-d", ";"], input=INPUT.replace(",", ";"))

    assert result.exit_code == 0, result.output
    assert result.stdout == EXPECTED.replace(",", ";")


def test_delimiter_tab() -> None:
    tab_input = INPUT.replace(",", "\t")
    tab_expected = EXPECTED.replace(",", "\t")

    escaped = runner.invoke(app, ["echo $1/$0", "-d", "\\t"], input=tab_input)
    literal = runner.invoke(app, ["echo $1/$0", "-d", "\t"], input=tab_input)

    assert escaped.exit_code == 0, escaped.output
    assert escaped.stdout == tab_expected
    assert literal.exit_code == 0, literal.output
    assert literal.stdout == tab_expected


def test_no_headers() -> None:
    data = "24,example.com/a\n68,example.com/b\n"
    expected = "24,example.com/a,example.com/a/24\n68,example.com/b,example.com/b/68\n"

    for flag in ("--no-headers", "--no-header", "-n"):
        result = runner.invoke(app, ["echo $1/$0", flag], input=data)
        assert result.exit_code == 0, result.output
        assert result.stdout == expected


def test_new_column_name() -> None:
    result = runner.invoke(app, ["echo $1/$0", "--new-column-name", "A Result"], input=INPUT)

    assert result.exit_code == 0, result.output
    assert result.stdout == EXPECTED.replace("Result", "A Result")


def test_input_and_output_files(tmp_path: Path) -> None:
    input_path = tmp_path / "in.csv"
    output_path = tmp_path / "out.csv"
    input_path.write_text(INPUT, encoding="utf-8")

    result = runner.invoke(app, ["echo $1/$0", "-i", str(input_path), "-o", str(output_path)])

    assert result.exit_code == 0, result.output
    assert result.stdout == ""
    assert output_path.read_text(encoding="utf-8") == EXPECTED


def test_output_delimiter(tmp_path: Path) -> None:
    result = runner.invoke(app, ["echo $0", "-d", ";", "--output-delimiter", "|"], input="a;b\n1;2\n")

    assert result.exit_code == 0, result.output
    assert result.stdout == "a|b|Result\n1|2|1\n"


def test_settings_file_provides_defaults(tmp_path: Path) -> None:
    # conftest chdirs into tmp_path, where Settings looks for settings.toml
    (tmp_path / "settings.toml").write_text('delimiter = ";"\nnew_column_name = "Out"\n', encoding="utf-8")

    result = runner.invoke(app, ["echo $1/$0"], input=INPUT.replace(",", ";"))

    assert result.exit_code == 0, result.output
    assert result.stdout == EXPECTED.replace(",", ";").replace("Result", "Out")


def test_env_var_overridden_by_flag(monkeypatch) -> None:
    monkeypatch.setenv("CSV_EXEC_NEW_COLUMN_NAME", "FromEnv")

    from_env = runner.invoke(app, ["echo $0"], input="a\n1\n")
    from_flag = runner.invoke(app, ["echo $0", "--new-column-name", "FromFlag"], input="a\n1\n")

    assert from_env.stdout == "a,FromEnv\n1,1\n"
    assert from_flag.stdout == "a,FromFlag\n1,1\n"


def test_invalid_delimiter_exits_with_config_error() -> None:
    result = runner.invoke(app, ["echo $0", "-d", ";;"], input=INPUT)

    assert result.exit_code == 2
    assert "must be 1 ASCII character" in result.output


def test_invalid_arg_regex_exits_with_config_error() -> None:
    result = runner.invoke(app, ["echo $0", "--arg-regex", "(["], input=INPUT)

    assert result.exit_code == 2
    assert "Invalid placeholder pattern" in result.output


def test_empty_command_exits_with_config_error() -> None:
    result = runner.invoke(app, ["  "], input=INPUT)

    assert result.exit_code == 2
    assert "No command to execute" in result.output


def test_missing_command_is_usage_error() -> None:
    result = runner.invoke(app, ["--quote", "'"], input=INPUT)

    assert result.exit_code == 2
    assert "Missing command" in result.output


def test_missing_program_aborts_run() -> None:
    result = runner.invoke(app, ["csv-exec-no-such-program $0"], input=INPUT)

    assert result.exit_code == 1
    assert "Failed to execute command csv-exec-no-such-program" in result.output


def test_invalid_output_encoding_aborts_run() -> None:
    result = runner.invoke(app, ["printf '\\377'"], input=INPUT)

    assert result.exit_code == 1
    assert "not valid UTF-8" in result.output


def test_nonzero_exit_is_tolerated_unless_enforced() -> None:
    tolerated = runner.invoke(app, ["false", "--log-level", "error"], input="a\n1\n")
    enforced = runner.invoke(app, ["false", "--fail-on-exit-status"], input="a\n1\n")

    assert tolerated.exit_code == 0
    assert tolerated.stdout == "a,Result\n1,\n"
    assert enforced.exit_code == 1
    assert "exited with status 1" in enforced.output


def test_strict_placeholders() -> None:
    lenient = runner.invoke(app, ["echo [$9]"], input="a\n1\n")
    strict = runner.invoke(app, ["echo [$9]", "--strict-placeholders"], input="a\n1\n")

    assert lenient.exit_code == 0
    assert lenient.stdout == "a,Result\n1,[]\n"
    assert strict.exit_code == 1
    assert "references column 9" in strict.output


def test_debug_logging_goes_to_stderr_as_ndjson(tmp_path: Path) -> None:
    output_path = tmp_path / "out.csv"

    result = runner.invoke(
        app,
        ["echo $0", "-o", str(output_path), "--debug", "--log-format", "ndjson"],
        input="a\n1\n",
    )

    assert result.exit_code == 0, result.output
    assert '"event":"csv_exec.run.started"' in result.output
    assert '"event":"csv_exec.record.processed"' in result.output
    assert '"event":"csv_exec.run.completed"' in result.output
    assert output_path.read_text(encoding="utf-8") == "a,Result\n1,1\n"


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.stdout.strip() == f"csv-exec {__version__}"
