"""Running a parsed command: builtins in-process, everything else as a child."""

from __future__ import annotations

import os
import signal
import subprocess
import sys
from collections.abc import Iterable, Mapping, Sequence
from typing import TextIO, Union

from .builtins import run_builtin
from .environment import Environment
from .lexer import Token, TokenType

EnvLike = Union[Environment, Mapping[str, str], Iterable[str]]

_BLUE = "\033[34m"
_RESET = "\033[0m"
_BANNER_LINES = (
    " __  __ ___ _   _ ___ ____  _   _ _____ _     _     ",
    "|  \\/  |_ _| \\ | |_ _/ ___|| | | | ____| |   | |    ",
    "| |\\/| || ||  \\| || |\\___ \\| |_| |  _| | |   | |    ",
    "| |  | || || |\\  || | ___) |  _  | |___| |___| |___ ",
    "|_|  |_|___|_| \\_|___|____/|_| |_|_____|_____|_____|",
)


def _entries(env: EnvLike) -> list[str]:
    if isinstance(env, Mapping):
        return [f"{name}={value}" for name, value in env.items()]
    return list(env)


def _child_env(env: EnvLike) -> dict[str, str]:
    result: dict[str, str] = {}
    for entry in _entries(env):
        name, _, value = entry.partition("=")
        result.setdefault(name, value)
    return result


def _out(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def welcome_banner() -> str:
    """Return the coloured banner shown when the shell starts."""
    colours = [_BLUE] * (len(_BANNER_LINES) - 1) + [_RESET]
    return "".join(f"{line}\n{colour}" for line, colour in zip(_BANNER_LINES, colours))


def lookup_env(name: str, env: EnvLike) -> str | None:
    """Return the value of the variable called exactly ``name``, or None."""
    for entry in _entries(env):
        key, _, value = entry.partition("=")
        if key == name:
            return value
    return None


def _is_executable(path: str) -> bool:
    return os.access(path, os.F_OK | os.X_OK)


def find_executable(command: str, env: EnvLike, out: TextIO | None = None) -> str | None:
    """Locate ``command`` through ``PATH``; report and return None on failure."""
    stream = _out(out)
    if command.startswith(("/", "./")) and _is_executable(command):
        return command
    path = lookup_env("PATH", env)
    if path is None:
        print("No such file or directory", file=stream)
        return None
    names = [part for part in command.split(" ") if part]
    if names:
        for directory in (part for part in path.split(":") if part):
            candidate = f"{directory}/{names[0]}"
            if _is_executable(candidate):
                return candidate
    print(f"{command}: command not found", file=stream)
    return None


def has_arguments(tokens: Sequence[Token]) -> bool:
    """Tell whether the command is a word followed by another plain word."""
    return (
        len(tokens) >= 2
        and tokens[0].kind == TokenType.WORD
        and tokens[1].kind == TokenType.WORD
    )


def command_arguments(tokens: Iterable[Token]) -> list[str]:
    """Return the plain words of a command, leaving out operators and targets."""
    return [token.word for token in tokens if token.kind == TokenType.WORD]


def _exit_status(returncode: int) -> int:
    # A child killed by a signal is reported as 127, as the shell does.
    return 127 if returncode < 0 else returncode & 0xFF


def run_external(tokens: Sequence[Token], env: EnvLike, out: TextIO | None = None) -> int:
    """Run the command as a child process and return its exit status."""
    args = command_arguments(tokens)
    if not args:
        return 0
    program = find_executable(args[0], env, out)
    if program is None:
        return 127
    child_env = _child_env(env)
    try:
        if out is None:
            completed = subprocess.run(args, executable=program, env=child_env)
        else:
            completed = subprocess.run(
                args, executable=program, env=child_env, stdout=subprocess.PIPE
            )
            out.write(completed.stdout.decode(errors="replace"))
    except OSError:
        return 127
    if completed.returncode == -signal.SIGQUIT:
        print("Quit (core dumped)", file=_out(out))
    return _exit_status(completed.returncode)


def execute(
    tokens: Sequence[Token],
    env: Environment,
    status: int,
    out: TextIO | None = None,
) -> int:
    """Run a builtin or an external command; return the new exit status.

    ``exit`` raises ShellExit through this function.
    """
    result = run_builtin(tokens, env, status, out)
    if result is not None:
        return result
    return run_external(tokens, env, out)