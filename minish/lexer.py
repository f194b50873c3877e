"""Checking and splitting a command line into tokens."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass

from .expand import EnvLike, expand

SPACES = " \t\n"
SPECIAL = "><|"
QUOTES = "'\""

# Characters inside quotes are moved into a private-use range so that the
# splitter and the syntax checker treat them as plain word characters.
_MASKED_CHARS = " \t\n<>|'\""
_MASK = {ord(ch): 0xE000 + ord(ch) for ch in _MASKED_CHARS}
_UNMASK = {masked: original for original, masked in _MASK.items()}
_QUOTE_TO_SPACE = str.maketrans({"'": " ", '"': " "})
_WORD = re.compile(r"[<>]+|\||[^<> |]+")


class TokenType(enum.IntEnum):
    """Kind of a token in a parsed command line."""

    WORD = 0
    PIPE = 1
    REDIRECT_OUT = 2
    APPEND = 3
    REDIRECT_IN = 4
    HEREDOC = 5


_REDIRECTIONS = {
    ">": TokenType.REDIRECT_OUT,
    ">>": TokenType.APPEND,
    "<": TokenType.REDIRECT_IN,
    "<<": TokenType.HEREDOC,
}


@dataclass(frozen=True)
class Token:
    """One word of a command line and its kind."""

    word: str
    kind: TokenType = TokenType.WORD


class ParseError(ValueError):
    """A command line could not be parsed."""


class QuoteError(ParseError):
    """A quote is left open."""

    def __init__(self, message: str = "you are not handling quotes correctly"):
        super().__init__(message)


class ShellSyntaxError(ParseError):
    """Operators are misplaced."""

    def __init__(self, message: str = "Syntax error"):
        super().__init__(message)


def is_blank(line: str) -> bool:
    """Tell whether the line holds only spaces and tabs."""
    return all(ch in " \t" for ch in line)


def has_unclosed_quote(line: str) -> bool:
    """Tell whether a single or double quote is never closed."""
    length = len(line)
    i = 0
    while i < length:
        quote = line[i]
        if quote in QUOTES:
            i += 1
            while i < length and line[i] != quote:
                i += 1
            if i >= length:
                return True
        i += 1
    return False


def mask_quoted(line: str) -> str:
    """Hide the special meaning of characters between quotes."""
    parts: list[str] = []
    length = len(line)
    i = 0
    while i < length:
        quote = line[i]
        parts.append(quote)
        i += 1
        if quote in QUOTES:
            start = i
            while i < length and line[i] != quote:
                i += 1
            parts.append(line[start:i].translate(_MASK))
            if i < length:
                parts.append(line[i])
                i += 1
    return "".join(parts)


def unmask(line: str) -> str:
    """Undo :func:`mask_quoted`."""
    return line.translate(_UNMASK)


def _check_blank_run(line: str, index: int) -> int:
    """Check the operators around the blanks at ``index``; return the last blank."""
    previous = line[index - 1] if index > 0 else ""
    after_operator = previous != "" and previous in SPECIAL
    end = index
    while end < len(line) and line[end] in SPACES:
        end += 1
    if after_operator and (end >= len(line) or line[end] in SPECIAL):
        raise ShellSyntaxError()
    return end - 1


def check_syntax(line: str) -> None:
    """Raise ShellSyntaxError if pipes or redirections are misplaced."""
    if not line:
        return
    if line[0] == "|" or line[-1] in SPECIAL:
        raise ShellSyntaxError()
    length = len(line)
    i = 0
    while i < length:
        ch = line[i]
        following = line[i + 1] if i + 1 < length else ""
        if ch == "|" and following == "|":
            raise ShellSyntaxError()
        if ch == ">" and following in ("|", "<"):
            raise ShellSyntaxError()
        if ch == "<" and following in ("|", ">"):
            raise ShellSyntaxError()
        if ch in SPACES:
            i = _check_blank_run(line, i)
        i += 1


def _count_step(line: str, index: int, count: int) -> tuple[int, int]:
    def at(k: int) -> str:
        return line[k] if 0 <= k < len(line) else ""

    j = index
    # An empty string is "in" every set here, as an end of line is.
    if at(j) in SPACES:
        while at(j) and at(j) in SPACES:
            j += 1
        if not at(j) or at(j) in SPECIAL or at(j) in QUOTES:
            return index, count
    elif at(j) in SPECIAL:
        if at(j + 1) in (">", "<"):
            j += 1
        count += 1
        j += 1
    else:
        while at(j) and at(j) not in SPACES + SPECIAL + QUOTES:
            j += 1
        count += 1
    return j - 1, count


def count_words(line: str) -> int:
    """Count the words and operators of a masked line."""
    count = 0
    length = len(line)
    i = 0
    while i < length:
        quote = line[i]
        if quote in QUOTES:
            i += 1
            while i < length and line[i] != quote:
                i += 1
            if i < length:
                count += 1
            i += 1
        i, count = _count_step(line, i, count)
        i += 1
    return count


def split_words(line: str) -> list[str]:
    """Split a masked line into raw words, with quote marks turned into spaces."""
    words: list[str] = []
    length = len(line)
    i = 0
    while i < length:
        while i < length and line[i] in SPACES:
            i += 1
        if i >= length:
            break
        match = _WORD.match(line, i)
        piece = match.group() if match else line[i]
        words.append(piece.translate(_QUOTE_TO_SPACE))
        i += len(piece)
    return words


def _make_token(raw: str, pending: TokenType | None) -> Token:
    if pending is not None:
        kind = pending
    elif "|" in raw:
        kind = TokenType.PIPE
    else:
        kind = TokenType.WORD
    return Token(unmask(raw.replace(" ", "")), kind)


def build_tokens(words: Iterable[str]) -> list[Token]:
    """Turn raw words into tokens; a redirection sets the kind of the next word."""
    words = list(words)
    if not words:
        return []
    pending = _REDIRECTIONS.get(words[0])
    start = 1 if pending is not None else 0
    tokens: list[Token] = []
    if start < len(words):
        tokens.append(_make_token(words[start], pending))
        pending = None
    for raw in words[start + 1:]:
        redirection = _REDIRECTIONS.get(raw)
        if redirection is not None:
            pending = redirection
            continue
        tokens.append(_make_token(raw, pending))
        pending = None
    return tokens


def parse(line: str, env: EnvLike, status: int) -> list[Token]:
    """Expand, check and tokenise a command line.

    Returns an empty list when there is nothing to run.  Raises QuoteError
    for an open quote and ShellSyntaxError for misplaced operators.
    """
    if is_blank(line):
        return []
    if has_unclosed_quote(line):
        raise QuoteError()
    masked = mask_quoted(expand(line, env, status))
    if not masked:
        return []
    check_syntax(masked)
    if len(masked) == 2 and masked[0] in QUOTES and masked[1] in QUOTES:
        return []
    return build_tokens(split_words(masked))