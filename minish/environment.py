"""The shell's own copy of the environment, kept as ``NAME=value`` entries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .expand import get_env_value


class Environment:
    """An ordered list of ``NAME=value`` entries that builtins can change."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Environment({self._entries!r})"

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None if it is not set."""
        return get_env_value(name, self._entries)

    def export(self, assignment: str) -> bool:
        """Set a variable from ``NAME=value``.

        The first entry that begins with ``NAME`` is replaced; when there is
        none, or the assignment has no ``=``, the text is appended as is.
        Returns True when an existing entry was replaced.
        """
        name, sep, _ = assignment.partition("=")
        if sep:
            for index, entry in enumerate(self._entries):
                if entry.startswith(name):
                    self._entries[index] = assignment
                    return True
        self._entries.append(assignment)
        return False

    def unset(self, name: str) -> bool:
        """Remove every ``name=`` entry; return True if one was removed."""
        prefix = f"{name}="
        kept = [entry for entry in self._entries if not entry.startswith(prefix)]
        removed = len(kept) != len(self._entries)
        self._entries = kept
        return removed

    def _find(self, prefix: str) -> int:
        return next(
            (i for i, entry in enumerate(self._entries) if entry.startswith(prefix)),
            0,
        )

    def update_pwd(self, cwd: str) -> None:
        """Set ``PWD`` to ``cwd`` and move its former value into ``OLDPWD``.

        As in the shell this mirrors, a missing ``PWD`` or ``OLDPWD`` entry
        makes the first entry take its place.
        """
        if not self._entries:
            self._entries.append(f"PWD={cwd}")
            return
        index = self._find("PWD")
        previous_entry = "OLD" + self._entries[index]
        self._entries[index] = f"PWD={cwd}"
        self._entries[self._find("OLD")] = previous_entry

    def declarations(self) -> list[str]:
        """Return the lines printed by ``export`` without arguments."""
        return [f"declare -x {entry}" for entry in self._entries]

    def as_dict(self) -> dict[str, str]:
        """Return the entries as a mapping suitable for a child process."""
        result: dict[str, str] = {}
        for entry in self._entries:
            name, _, value = entry.partition("=")
            result.setdefault(name, value)
        return result