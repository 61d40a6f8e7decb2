"""Source drivers that read migrations from a directory tree.

Any object that behaves like ``importlib.resources.abc.Traversable`` can
serve as a root: ``pathlib.Path``, ``zipfile.Path``, the result of
``importlib.resources.files`` and so on.  Plain strings and path-likes are
turned into ``pathlib.Path``.
"""

from __future__ import annotations

import errno
import os
import posixpath
from pathlib import Path
from typing import Any, BinaryIO
from urllib.parse import unquote, urlsplit

from schemamigrate.driver import Driver, register
from schemamigrate.migration import (
    DuplicateMigrationError,
    Migration,
    Migrations,
    ParseError,
    parse,
)


def _not_exist(op: str, path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, f"{op}: {os.strerror(errno.ENOENT)}", path)


def _as_traversable(root: Any) -> Any:
    if isinstance(root, (str, os.PathLike)):
        return Path(root)
    return root


def _subdir(root: Any, path: str) -> Any:
    rel = path.strip("/")
    if rel in ("", "."):
        return root
    return root.joinpath(rel)


class PartialDriver(Driver):
    """Everything a directory-backed driver needs except ``open``.

    Call :meth:`init` before using any of the reading methods.
    """

    def __init__(self) -> None:
        self._migrations = Migrations()
        self._root: Any = None
        self._dir: Any = None
        self._path = ""

    def init(self, root: Any, path: str) -> None:
        """Index the migration files found in ``path`` under ``root``."""
        root = _as_traversable(root)
        directory = _subdir(root, path)
        if directory.is_file():
            raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)
        if not directory.is_dir():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)

        migrations = Migrations()
        for entry in sorted(directory.iterdir(), key=lambda e: e.name):
            if entry.is_dir():
                continue
            try:
                m = parse(entry.name)
            except (ParseError, ValueError):
                continue
            if not migrations.append(m):
                raise DuplicateMigrationError(m, entry.name)

        self._root = root
        self._dir = directory
        self._path = path
        self._migrations = migrations

    def close(self) -> None:
        """Close the underlying file system if it can be closed."""
        closer = getattr(self._root, "close", None)
        if callable(closer):
            closer()

    def first(self) -> int:
        version = self._migrations.first()
        if version is None:
            raise _not_exist("first", self._path)
        return version

    def prev(self, version: int) -> int:
        found = self._migrations.prev(version)
        if found is None:
            raise _not_exist(f"prev for version {version}", self._path)
        return found

    def next(self, version: int) -> int:
        found = self._migrations.next(version)
        if found is None:
            raise _not_exist(f"next for version {version}", self._path)
        return found

    def read_up(self, version: int) -> tuple[BinaryIO, str]:
        m = self._migrations.up(version)
        if m is None:
            raise _not_exist(f"read up for version {version}", self._path)
        return self._open(m), m.identifier

    def read_down(self, version: int) -> tuple[BinaryIO, str]:
        m = self._migrations.down(version)
        if m is None:
            raise _not_exist(f"read down for version {version}", self._path)
        return self._open(m), m.identifier

    def _open(self, m: Migration) -> BinaryIO:
        full = posixpath.join(self._path, m.raw)
        try:
            return self._dir.joinpath(m.raw).open("rb")
        except OSError as exc:
            if exc.filename is not None:
                raise
            # Some file systems omit the path, which makes errors hard to trace.
            raise OSError(exc.errno, f"open: {exc.strerror or exc}", full) from exc


class FsDriver(PartialDriver):
    """A passthrough driver over an existing file system object."""

    def open(self, url: str) -> Driver:
        raise ValueError("open() cannot be called on the passthrough file system driver")


def new(root: Any, path: str) -> FsDriver:
    """Return a driver reading migrations from ``path`` under ``root``."""
    driver = FsDriver()
    driver.init(root, path)
    return driver


class FileDriver(PartialDriver):
    """A driver for ``file://`` URLs pointing at a local directory."""

    def __init__(self) -> None:
        super().__init__()
        self.url = ""
        self.path = ""

    def open(self, url: str) -> FileDriver:
        directory = parse_url(url)
        driver = FileDriver()
        driver.url = url
        driver.path = directory
        driver.init(Path(directory), ".")
        return driver


def parse_url(url: str) -> str:
    """Return the absolute directory named by a ``file://`` URL.

    An empty location means the current working directory.
    """
    parts = urlsplit(url)
    location = unquote(parts.netloc) + unquote(parts.path)
    if not location:
        return os.getcwd()
    if not location.startswith("/"):
        return os.path.abspath(location)
    return location


register("file", FileDriver())