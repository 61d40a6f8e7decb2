"""A source driver reading migrations from named in-memory assets."""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, BinaryIO

from schemamigrate.driver import Driver, register
from schemamigrate.migration import Direction, Migration, Migrations, ParseError, parse
from schemamigrate.stub import _IndexedDriver

AssetFunc = Callable[[str], bytes]


@dataclass
class AssetSource:
    """Asset names together with a function returning an asset's bytes."""

    names: list[str]
    asset_func: AssetFunc


def resource(names: Sequence[str], asset_func: AssetFunc) -> AssetSource:
    """Wrap asset names and a loader function into an AssetSource."""
    return AssetSource(names=list(names), asset_func=asset_func)


class Bindata(_IndexedDriver):
    """A driver over an AssetSource; create it with :func:`with_instance`."""

    path = "<go-bindata>"
    _read_op = "read version {version}"

    def __init__(self, asset_source: AssetSource | None = None) -> None:
        self.asset_source = asset_source
        self.migrations = Migrations()

    @property
    def _location(self) -> str:
        return self.path

    def open(self, url: str) -> Driver:
        raise ValueError("go-bindata driver cannot be opened from a URL; use with_instance")

    def close(self) -> None:
        """Nothing to release."""

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
        if self.asset_source is None:
            raise self._missing(f"read version {m.version}")
        return io.BytesIO(self.asset_source.asset_func(m.raw)), m.identifier


def with_instance(instance: Any) -> Bindata:
    """Return a driver indexing the migrations named in an AssetSource."""
    if not isinstance(instance, AssetSource):
        raise TypeError("expects AssetSource")
    driver = Bindata(instance)
    for name in instance.names:
        try:
            m = parse(name)
        except (ParseError, ValueError):
            continue
        if not driver.migrations.append(m):
            raise ValueError(f"unable to parse file {name}")
    return driver


register("go-bindata", Bindata())