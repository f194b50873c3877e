"""Expansion of ``$NAME`` and ``$?`` references in a command line."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Union

EnvLike = Union[Iterable[str], Mapping[str, str]]


def _entries(env: EnvLike) -> list[str]:
    """Return the environment as a list of ``NAME=value`` strings."""
    if isinstance(env, Mapping):
        return [f"{name}={value}" for name, value in env.items()]
    return list(env)


def _is_name_char(ch: str) -> bool:
    return ch == "_" or (ch.isascii() and ch.isalnum())


def get_env_value(name: str, env: EnvLike) -> str | None:
    """Return the value of the first ``name=`` entry in ``env``, or None."""
    prefix = f"{name}="
    for entry in _entries(env):
        if entry.startswith(prefix):
            return entry[len(prefix):]
    return None


def in_single_quote(text: str, index: int) -> bool:
    """Tell whether the ``$`` at ``index`` lies between single quotes."""
    length = len(text)
    i = 0
    while i < length:
        if text[i] == "'":
            i += 1
            while i < length and text[i] != "'":
                if text[i] == "$" and i == index:
                    return True
                i += 1
        if i < length and text[i] == '"':
            i += 1
            while i < length and text[i] != '"':
                i += 1
        i += 1
    return False


def expand(text: str, env: EnvLike, status: int) -> str:
    """Replace variable references in ``text``.

    ``$?`` becomes ``status`` everywhere; ``$NAME`` becomes the variable's
    value unless it sits inside single quotes.  Unknown names are kept as
    written, with their dollar sign.
    """
    entries = _entries(env)
    parts: list[str] = []
    length = len(text)
    i = 0
    while i < length:
        ch = text[i]
        if ch == "$" and text[i + 1:i + 2] == "?":
            parts.append(str(status))
            i += 2
        elif ch == "$" and not in_single_quote(text, i):
            start = i + 1
            i = start
            while i < length and _is_name_char(text[i]):
                i += 1
            name = text[start:i]
            value = get_env_value(name, entries)
            parts.append(f"${name}" if value is None else value)
        else:
            parts.append(ch)
            i += 1
    return "".join(parts)