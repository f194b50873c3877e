"""Here-documents: reading lines up to a limiter into a temporary file."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

HEREDOC_MARKER = "here_doc"
HEREDOC_PROGRAM = "./pipex_bonus"


def is_heredoc(argv: Sequence[str]) -> bool:
    """Tell whether the first argument asks for a here-document."""
    return len(argv) > 1 and argv[1] == HEREDOC_MARKER


def read_heredoc(limiter: str, stream: TextIO | None = None, prompt: TextIO | None = None) -> str:
    """Read lines from ``stream`` until one equals ``limiter``.

    The limiter line is not kept; end of input also ends the document.
    When ``prompt`` is given, ``"> "`` is written to it before each line.
    """
    source = sys.stdin if stream is None else stream
    end = f"{limiter}\n"
    lines: list[str] = []
    while True:
        if prompt is not None:
            prompt.write("> ")
            prompt.flush()
        line = source.readline()
        if not line or line == end:
            break
        lines.append(line)
    return "".join(lines)


def write_heredoc(
    path: str,
    limiter: str,
    stream: TextIO | None = None,
    prompt: TextIO | None = None,
) -> str:
    """Read a here-document and store it at ``path``, replacing its content."""
    body = read_heredoc(limiter, stream, prompt)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(body)
    return body


def rewrite_heredoc_argv(argv: Sequence[str]) -> list[str]:
    """Drop the limiter from a here-document argument list.

    ``prog here_doc LIMITER cmd... out`` becomes
    ``./pipex_bonus here_doc cmd... out``; other lists are returned unchanged.
    """
    if not is_heredoc(argv):
        return list(argv)
    return [HEREDOC_PROGRAM, HEREDOC_MARKER, *argv[3:]]