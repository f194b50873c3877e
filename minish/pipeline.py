"""Running a chain of commands between an input file and an output file."""

from __future__ import annotations

import contextlib
import os
import subprocess
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import IO, TextIO, Union

from .executor import EnvLike, lookup_env
from .heredoc import HEREDOC_MARKER, is_heredoc, rewrite_heredoc_argv, write_heredoc

NO_INPUT = "NoIn"
NO_OUTPUT = "NoOut"

_Stream = Union[int, IO[bytes], None]


class PipelineError(Exception):
    """The pipeline could not be set up."""


@dataclass(frozen=True)
class PipelineSpec:
    """What a pipeline reads, runs and writes.

    ``infile`` None means the first command gets no input; ``outfile`` None
    means the last command writes to standard output.  ``append`` opens the
    output file for appending, as a here-document pipeline does.
    """

    commands: tuple[str, ...]
    infile: str | None = None
    outfile: str | None = None
    append: bool = False
    limiter: str | None = None


def parse_pipeline_args(argv: Sequence[str]) -> PipelineSpec:
    """Read ``prog infile cmd... outfile`` or ``prog here_doc LIMITER cmd... outfile``."""
    argv = list(argv)
    heredoc = is_heredoc(argv)
    if heredoc:
        if len(argv) < 5:
            raise PipelineError("usage: prog here_doc LIMITER cmd... outfile")
        limiter: str | None = argv[2]
        args = rewrite_heredoc_argv(argv)
    else:
        if len(argv) < 4:
            raise PipelineError("usage: prog infile cmd... outfile")
        limiter = None
        args = argv
    infile = None if args[1] == NO_INPUT else args[1]
    outfile = None if args[-1] == NO_OUTPUT else args[-1]
    return PipelineSpec(tuple(args[2:-1]), infile, outfile, heredoc, limiter)


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


def _is_executable(path: str) -> bool:
    return os.access(path, os.F_OK | os.X_OK)


def find_in_path(command: str, env: EnvLike) -> str | None:
    """Return the program that runs ``command``, or None if there is none."""
    if command.startswith("/") and _is_executable(command):
        return command
    path = lookup_env("PATH", env)
    if path is None:
        return None
    names = [part for part in command.split(" ") if part]
    if not names:
        return None
    for directory in (part for part in path.split(":") if part):
        candidate = f"{directory}/{names[0]}"
        if _is_executable(candidate):
            return candidate
    return None


def join_command(command: str, word: str) -> str:
    """Append ``word`` to ``command`` as one more argument."""
    return f"{command} {word}"


def _spawn(
    command: str,
    env: EnvLike,
    child_env: dict[str, str],
    stdin: _Stream,
    stdout: _Stream,
) -> subprocess.Popen | None:
    program = find_in_path(command, env)
    if program is None:
        return None
    args = [part for part in command.split(" ") if part]
    try:
        return subprocess.Popen(
            args, executable=program, env=child_env, stdin=stdin, stdout=stdout
        )
    except OSError:
        return None


def run_pipeline(spec: PipelineSpec, env: EnvLike) -> list[int]:
    """Run every command, each reading what the one before wrote.

    Returns the exit status of each command; a command that cannot be
    found counts as 0 and writes nothing.  Raises PipelineError when the
    input file cannot be opened; the output file is created before that.
    """
    if not spec.commands:
        raise PipelineError("no command to run")
    child_env = _child_env(env)
    with contextlib.ExitStack() as stack:
        sink: _Stream = None
        if spec.outfile is not None:
            try:
                sink = stack.enter_context(
                    open(spec.outfile, "ab" if spec.append else "wb")
                )
            except OSError:
                sink = subprocess.DEVNULL
        source: _Stream = subprocess.DEVNULL
        if spec.infile is not None:
            try:
                source = stack.enter_context(open(spec.infile, "rb"))
            except OSError as exc:
                raise PipelineError("No such file or directory") from exc
        if sink is None:
            sys.stdout.flush()
        processes: list[subprocess.Popen | None] = []
        upstream: _Stream = source
        last = len(spec.commands) - 1
        for index, command in enumerate(spec.commands):
            target = sink if index == last else subprocess.PIPE
            process = _spawn(command, env, child_env, upstream, target)
            if upstream is not source and upstream is not subprocess.DEVNULL:
                upstream.close()
            processes.append(process)
            if process is not None and process.stdout is not None:
                upstream = process.stdout
            else:
                upstream = subprocess.DEVNULL
        return [0 if process is None else process.wait() for process in processes]


def pipex_main(
    argv: Sequence[str],
    env: EnvLike | None = None,
    stdin: TextIO | None = None,
) -> int:
    """Run a pipeline from command-line style arguments; return 0."""
    environment: EnvLike = dict(os.environ) if env is None else env
    try:
        spec = parse_pipeline_args(argv)
    except PipelineError as exc:
        print(exc)
        return 1
    heredoc = spec.limiter is not None
    try:
        if heredoc:
            prompt = sys.stdout if stdin is None else None
            write_heredoc(HEREDOC_MARKER, spec.limiter, stdin, prompt)
        run_pipeline(spec, environment)
    except PipelineError as exc:
        print(exc)
    finally:
        if heredoc:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(HEREDOC_MARKER)
    return 0