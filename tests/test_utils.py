"""Tests for the subprocess-backed command runner and build-arg helpers."""

from __future__ import annotations

import shlex
import sys

import pytest

from cantrips.utils import (
    COMMAND_NOT_FOUND_EXIT_CODE,
    CommandError,
    DryRunCommandRunner,
    ShellCommandRunner,
    build_arg_pairs,
    parse_build_args,
)

PYTHON = shlex.quote(sys.executable)


def test_successful_command_returns_output(tmp_path) -> None:
    output = ShellCommandRunner(cwd=tmp_path).run(f"{PYTHON} -c 'print(\"hi\")'", "打印")

    assert output.return_code == 0
    assert output.stdout.strip() == "hi"


def test_input_is_written_to_stdin() -> None:
    command = f"{PYTHON} -c 'import sys; print(sys.stdin.read().upper())'"

    output = ShellCommandRunner().run(command, "读取标准输入", input="secret")

    assert output.stdout.strip() == "SECRET"


def test_non_zero_exit_raises_command_error() -> None:
    command = f"{PYTHON} -c 'import sys; sys.stderr.write(\"bad\"); sys.exit(3)'"

    with pytest.raises(CommandError) as exc_info:
        ShellCommandRunner().run(command, "失败的命令")

    assert exc_info.value.return_code == 3
    assert exc_info.value.stderr == "bad"
    assert exc_info.value.command == command


def test_missing_executable_raises_command_error(tmp_path) -> None:
    command = f"{tmp_path / 'no-such-binary'} --version"

    with pytest.raises(CommandError) as exc_info:
        ShellCommandRunner().run(command, "不存在的命令")

    assert exc_info.value.return_code == COMMAND_NOT_FOUND_EXIT_CODE
    assert exc_info.value.command == command


def test_dry_run_records_commands() -> None:
    runner = DryRunCommandRunner()

    assert runner.run("docker push a:latest", "推送").return_code == 0
    assert runner.commands == ["docker push a:latest"]


def test_parse_build_args_skips_invalid_entries() -> None:
    assert parse_build_args(["A=1", "B = two=2", "broken"]) == {"A": "1", "B": "two=2"}


def test_build_arg_pairs() -> None:
    assert build_arg_pairs(None) == []
    assert build_arg_pairs({"A": 1}) == [("A", "1")]
    assert build_arg_pairs([("A", "1"), ("B", "2")]) == [("A", "1"), ("B", "2")]
