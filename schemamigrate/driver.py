"""The source driver interface and the global driver registry."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import BinaryIO
from urllib.parse import urlsplit


class Driver(ABC):
    """A source of migrations.

    Methods that find no matching version or migration raise FileNotFoundError.
    """

    @abstractmethod
    def open(self, url: str) -> Driver:
        """Return a new driver instance configured from ``url``."""

    @abstractmethod
    def close(self) -> None:
        """Release the resources held by the driver."""

    @abstractmethod
    def first(self) -> int:
        """Return the first available version."""

    @abstractmethod
    def prev(self, version: int) -> int:
        """Return the version before ``version``."""

    @abstractmethod
    def next(self, version: int) -> int:
        """Return the version after ``version``."""

    @abstractmethod
    def read_up(self, version: int) -> tuple[BinaryIO, str]:
        """Return an unread body of the up migration and its identifier."""

    @abstractmethod
    def read_down(self, version: int) -> tuple[BinaryIO, str]:
        """Return an unread body of the down migration and its identifier."""

    def __enter__(self) -> Driver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


_lock = threading.RLock()
_drivers: dict[str, Driver] = {}


def open_driver(url: str) -> Driver:
    """Open a driver instance chosen by the scheme of ``url``."""
    scheme = urlsplit(url).scheme
    if not scheme:
        raise ValueError("source driver: invalid URL scheme")
    with _lock:
        driver = _drivers.get(scheme)
    if driver is None:
        raise ValueError(f"source driver: unknown driver '{scheme}' (forgotten import?)")
    return driver.open(url)


def register(name: str, driver: Driver) -> None:
    """Register ``driver`` globally under ``name``."""
    if driver is None:
        raise ValueError("Register driver is nil")
    with _lock:
        if name in _drivers:
            raise ValueError(f"Register called twice for driver {name}")
        _drivers[name] = driver


def list_drivers() -> list[str]:
    """Return the names of the registered drivers."""
    with _lock:
        return list(_drivers)