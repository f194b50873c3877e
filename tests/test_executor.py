import io
import os
import stat
import sys

import pytest

from minish.builtins import ShellExit
from minish.environment import Environment
from minish.executor import (
    command_arguments,
    execute,
    find_executable,
    has_arguments,
    lookup_env,
    run_external,
    welcome_banner,
)
from minish.lexer import Token, TokenType


def _make_tool(directory, name="tool"):
    path = directory / name
    path.write_text("#!/bin/sh\nexit 0\n")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


def _python(*args):
    return [Token(sys.executable), *(Token(a) for a in args)]


def test_banner_shape():
    banner = welcome_banner()
    assert banner.count("\n") == 5
    assert banner.endswith("\033[0m")
    assert banner.count("\033[34m") == 4


def test_lookup_env_exact_name():
    env = ["PATHX=nope", "PATH=/bin:/usr/bin", "HOME=/home"]
    assert lookup_env("PATH", env) == "/bin:/usr/bin"
    assert lookup_env("HOME", {"HOME": "/h"}) == "/h"
    assert lookup_env("MISSING", env) is None


def test_find_executable_in_path(tmp_path):
    tool = _make_tool(tmp_path)
    out = io.StringIO()
    found = find_executable("tool", [f"PATH=/nonexistent:{tmp_path}"], out)
    assert found == f"{tmp_path}/tool"
    assert out.getvalue() == ""
    assert os.path.samefile(found, tool)


def test_find_executable_absolute(tmp_path):
    tool = _make_tool(tmp_path)
    assert find_executable(str(tool), [], io.StringIO()) == str(tool)


def test_find_executable_not_found(tmp_path):
    out = io.StringIO()
    assert find_executable("nope", [f"PATH={tmp_path}"], out) is None
    assert out.getvalue() == "nope: command not found\n"


def test_find_executable_without_path():
    out = io.StringIO()
    assert find_executable("ls", ["HOME=/"], out) is None
    assert out.getvalue() == "No such file or directory\n"


def test_has_arguments():
    assert has_arguments([Token("ls"), Token("-l")]) is True
    assert has_arguments([Token("ls")]) is False
    assert has_arguments([Token("ls"), Token("f", TokenType.REDIRECT_OUT)]) is False


def test_command_arguments_keeps_words():
    tokens = [Token("cat"), Token("in", TokenType.REDIRECT_IN), Token("-e")]
    assert command_arguments(tokens) == ["cat", "-e"]


def test_run_external_captures_output():
    out = io.StringIO()
    status = run_external(_python("-c", "print('hi')"), Environment(["A=1"]), out)
    assert status == 0
    assert out.getvalue() == "hi\n"


def test_run_external_exit_status():
    status = run_external(_python("-c", "raise SystemExit(3)"), Environment(), io.StringIO())
    assert status == 3


def test_run_external_passes_environment():
    out = io.StringIO()
    code = "import os; print(os.environ['GREETING'])"
    run_external(_python("-c", code), Environment(["GREETING=hello"]), out)
    assert out.getvalue() == "hello\n"


def test_run_external_missing_command(tmp_path):
    out = io.StringIO()
    assert run_external([Token("nope")], [f"PATH={tmp_path}"], out) == 127
    assert "command not found" in out.getvalue()


def test_execute_builtin_changes_environment():
    env = Environment(["A=1"])
    status = execute([Token("export"), Token("B=2")], env, 0, io.StringIO())
    assert status == 0
    assert env.get("B") == "2"


def test_execute_external():
    out = io.StringIO()
    status = execute(_python("-c", "print('x')"), Environment(), 0, out)
    assert (status, out.getvalue()) == (0, "x\n")


def test_execute_exit_raises():
    with pytest.raises(ShellExit) as info:
        execute([Token("exit"), Token("7")], Environment(), 0, io.StringIO())
    assert info.value.code == 7