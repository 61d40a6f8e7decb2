"""An in-memory source driver whose migrations are filled in by the caller."""

from __future__ import annotations

import errno
import io
import os
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from schemamigrate.driver import Driver, register
from schemamigrate.migration import Direction, Migration, Migrations


class _IndexedDriver(Driver):
    """Helpers for drivers navigating a Migrations index held in ``migrations``."""

    migrations: Migrations
    _read_op = "read {direction} version {version}"

    @property
    def _location(self) -> str:
        return ""

    def _missing(self, op: str) -> FileNotFoundError:
        return FileNotFoundError(errno.ENOENT, f"{op}: {os.strerror(errno.ENOENT)}", self._location)

    @abstractmethod
    def _body(self, m: Migration) -> tuple[BinaryIO, str]:
        """Return the body of ``m`` and its identifier."""

    def _found(self, version: int | None, op: str) -> int:
        if version is None:
            raise self._missing(op)
        return version

    def _first(self) -> int:
        return self._found(self.migrations.first(), "first")

    def _prev(self, version: int) -> int:
        return self._found(self.migrations.prev(version), f"prev for version {version}")

    def _next(self, version: int) -> int:
        return self._found(self.migrations.next(version), f"next for version {version}")

    def _read(self, version: int, direction: Direction) -> tuple[BinaryIO, str]:
        lookup = self.migrations.up if direction is Direction.UP else self.migrations.down
        m = lookup(version)
        if m is None:
            raise self._missing(self._read_op.format(direction=direction.value, version=version))
        return self._body(m)


@dataclass
class StubConfig:
    """Configuration of a stub driver; it has no settings."""


@dataclass(eq=False)
class Stub(_IndexedDriver):
    """A driver serving whatever is placed in ``migrations``.

    The body of each migration is its identifier.
    """

    url: str = ""
    instance: Any = None
    migrations: Migrations = field(default_factory=Migrations)
    config: StubConfig | None = field(default_factory=StubConfig)
    closed: bool = field(default=False, init=False, repr=False)

    @property
    def _location(self) -> str:
        return self.url

    def open(self, url: str) -> Stub:
        return Stub(url=url, migrations=Migrations(), config=StubConfig())

    def close(self) -> None:
        """Mark the driver as closed; there is nothing else to release."""
        self.closed = True

    def first(self) -> int:
        return self._first()

    def prev(self, version: int) -> int:
        return self._prev(version)

    def next(self, version: int) -> int:
        return self._next(version)

    def read_up(self, version: int) -> tuple[BinaryIO, str]:
        return self._read(version, Direction.UP)

    def read_down(self, version: int) -> tuple[BinaryIO, str]:
        return self._read(version, Direction.DOWN)

    def _body(self, m: Migration) -> tuple[BinaryIO, str]:
        return io.BytesIO(m.identifier.encode()), f"{m.version}.{m.direction.value}.stub"


def with_instance(instance: Any, config: StubConfig | None) -> Stub:
    """Return an empty stub driver holding ``instance`` and ``config``."""
    return Stub(instance=instance, migrations=Migrations(), config=config)


register("stub", Stub())