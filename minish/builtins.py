"""Commands the shell runs itself: cd, env, export, unset and exit."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO, Union

from .environment import Environment
from .lexer import Token, TokenType

Arg = Union[Token, str]


class ShellExit(Exception):
    """Raised by ``exit`` to end the shell with ``code``."""

    def __init__(self, code: int) -> None:
        self.code = code & 0xFF
        super().__init__(f"exit {self.code}")


def _word(arg: Arg) -> str:
    return arg.word if isinstance(arg, Token) else arg


def _kind(arg: Arg) -> TokenType:
    return arg.kind if isinstance(arg, Token) else TokenType.WORD


def _out(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def parse_exit_code(text: str) -> int:
    """Read a leading signed decimal number, as a 32-bit int; 0 if none."""
    stripped = text.lstrip(" \n\t\v\f\r")
    sign = 1
    if stripped[:1] in ("-", "+"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = ""
    for ch in stripped:
        if not ("0" <= ch <= "9"):
            break
        digits += ch
    value = sign * int(digits) if digits else 0
    return (value + 2**31) % 2**32 - 2**31


def is_only_letters(text: str) -> bool:
    """Tell whether every character is an ASCII letter (true for '')."""
    return all(ch.isascii() and ch.isalpha() for ch in text)


def builtin_cd(args: Sequence[Arg], env: Environment, out: TextIO | None = None) -> int:
    """Change directory to the first argument, or to ``$HOME``; return the status."""
    if not args:
        home = os.environ.get("HOME")
        if home is not None:
            try:
                os.chdir(home)
            except OSError:
                pass
        env.update_pwd(os.getcwd())
        return 0
    target = _word(args[0])
    try:
        os.chdir(target)
    except OSError:
        print(f"cd: {target}: No such file or directory", file=_out(out))
        return 127
    env.update_pwd(os.getcwd())
    return 0


def builtin_env(env: Environment, out: TextIO | None = None) -> int:
    """Print every environment entry."""
    stream = _out(out)
    for entry in env:
        print(entry, file=stream)
    return 0


def builtin_export(args: Sequence[Arg], env: Environment, out: TextIO | None = None) -> int:
    """Print declarations, or set the variable named by the first argument."""
    if not args:
        stream = _out(out)
        for line in env.declarations():
            print(line, file=stream)
        return 0
    env.export(_word(args[0]))
    return 0


def builtin_unset(args: Sequence[Arg], env: Environment) -> int:
    """Remove the variable named by the first argument."""
    if args:
        env.unset(_word(args[0]))
    return 0


def builtin_exit(args: Sequence[Arg], status: int, out: TextIO | None = None) -> int:
    """Raise ShellExit, or return a status when the arguments are rejected."""
    stream = _out(out)
    if len(args) == 1 and is_only_letters(_word(args[0])):
        print(f"bash: exit: {_word(args[0])}: numeric argument required", file=stream)
        return 2
    if len(args) > 1:
        print("bash: exit: too many arguments", file=stream)
        return 1
    if args and _kind(args[0]) == TokenType.WORD:
        status = parse_exit_code(_word(args[0]))
    raise ShellExit(status)


def run_builtin(
    tokens: Sequence[Token],
    env: Environment,
    status: int,
    out: TextIO | None = None,
) -> int | None:
    """Run the command if it is a builtin and return its status, else None."""
    if not tokens:
        return None
    name = tokens[0].word
    args = list(tokens[1:])
    if name == "cd":
        return builtin_cd(args, env, out)
    if name == "export":
        return builtin_export(args, env, out)
    if name == "env" and not args:
        return builtin_env(env, out)
    if name == "unset":
        return builtin_unset(args, env)
    if name == "exit":
        return builtin_exit(args, status, out)
    return None