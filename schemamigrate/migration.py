"""Migration records, an ordered in-memory index of them, and file name parsing."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from enum import Enum

_MAX_VERSION = 2**64 - 1


class Direction(str, Enum):
    """Direction of a migration."""

    DOWN = "down"
    UP = "up"


@dataclass(frozen=True)
class Migration:
    """One migration as found in a source."""

    version: int
    identifier: str
    direction: Direction
    raw: str = ""


class Migrations:
    """Migrations keyed by version and direction, kept in version order."""

    def __init__(self) -> None:
        self._index: list[int] = []
        self._migrations: dict[int, dict[Direction, Migration]] = {}

    def append(self, m: Migration | None) -> bool:
        """Add ``m``; return False if it is None or its version and direction exist."""
        if m is None:
            return False
        by_direction = self._migrations.setdefault(m.version, {})
        if m.direction in by_direction:
            return False
        by_direction[m.direction] = m
        if len(by_direction) == 1:
            bisect.insort(self._index, m.version)
        return True

    def first(self) -> int | None:
        """Return the lowest version, or None if there is none."""
        return self._index[0] if self._index else None

    def prev(self, version: int) -> int | None:
        """Return the version before ``version``, or None."""
        pos = self._find_pos(version)
        if pos >= 1:
            return self._index[pos - 1]
        return None

    def next(self, version: int) -> int | None:
        """Return the version after ``version``, or None."""
        pos = self._find_pos(version)
        if pos >= 0 and pos + 1 < len(self._index):
            return self._index[pos + 1]
        return None

    def up(self, version: int) -> Migration | None:
        """Return the up migration for ``version``, or None."""
        return self._migrations.get(version, {}).get(Direction.UP)

    def down(self, version: int) -> Migration | None:
        """Return the down migration for ``version``, or None."""
        return self._migrations.get(version, {}).get(Direction.DOWN)

    def _find_pos(self, version: int) -> int:
        ix = bisect.bisect_left(self._index, version)
        if ix < len(self._index) and self._index[ix] == version:
            return ix
        return -1


class ParseError(ValueError):
    """Raised when a name does not look like a migration file."""

    def __init__(self, message: str = "no match") -> None:
        super().__init__(message)


class DuplicateMigrationError(Exception):
    """Raised when two migration files share a version and direction."""

    def __init__(self, migration: Migration, name: str) -> None:
        self.migration = migration
        self.name = name
        super().__init__(f"duplicate migration file: {name}")


# Matches names like 123_name.up.ext and 123_name.down.ext.
REGEX = re.compile(
    r"([0-9]+)_(.*)\.(" + Direction.DOWN.value + "|" + Direction.UP.value + r")\.(.*)"
)


def parse(raw: str) -> Migration:
    """Parse a migration file name into a Migration."""
    match = REGEX.fullmatch(raw)
    if match is None:
        raise ParseError()
    version = int(match.group(1))
    if version > _MAX_VERSION:
        raise ValueError(f"version {match.group(1)!r} out of range")
    return Migration(
        version=version,
        identifier=match.group(2),
        direction=Direction(match.group(3)),
        raw=raw,
    )