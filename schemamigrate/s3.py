"""A source driver reading migrations from an S3 bucket.

The driver talks to any client offering ``list_objects`` and ``get_object``
with the keyword arguments of the common S3 client API.
"""

from __future__ import annotations

import errno
import os
import posixpath
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, BinaryIO
from urllib.parse import unquote, urlsplit

from schemamigrate.driver import register
from schemamigrate.migration import Direction, Migration, Migrations, ParseError, parse
from schemamigrate.stub import _IndexedDriver


@dataclass
class S3Config:
    """Bucket and key prefix holding the migrations."""

    bucket: str
    prefix: str = ""


class S3Driver(_IndexedDriver):
    """A driver over objects stored under a prefix in one bucket."""

    def __init__(
        self,
        client: Any = None,
        config: S3Config | None = None,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.client_factory = client_factory
        self.migrations = Migrations()

    def open(self, url: str) -> S3Driver:
        config = parse_uri(url)
        if self.client_factory is None:
            raise ValueError("s3 driver: no client factory configured")
        return with_instance(self.client_factory(), config)

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

    def _missing(self, op: str) -> FileNotFoundError:
        return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT))

    def _load_migrations(self) -> None:
        if self.config is None:
            raise ValueError("s3 driver: no configuration")
        output = self.client.list_objects(
            Bucket=self.config.bucket,
            Prefix=self.config.prefix,
            Delimiter="/",
        )
        for obj in output.get("Contents") or []:
            key = obj.get("Key", "")
            try:
                m = parse(key.rsplit("/", 1)[-1])
            except (ParseError, ValueError):
                continue
            if not self.migrations.append(m):
                raise ValueError(f"unable to parse file {key}")

    def _body(self, m: Migration) -> tuple[BinaryIO, str]:
        if self.config is None:
            raise ValueError("s3 driver: no configuration")
        key = posixpath.normpath(posixpath.join(self.config.prefix, m.raw))
        obj = self.client.get_object(Bucket=self.config.bucket, Key=key)
        return obj["Body"], m.identifier


def with_instance(client: Any, config: S3Config) -> S3Driver:
    """Return a driver that lists the migrations through ``client``."""
    driver = S3Driver(client=client, config=config)
    driver._load_migrations()
    return driver


def parse_uri(uri: str) -> S3Config:
    """Turn ``s3://bucket/prefix`` into an S3Config; the prefix ends in ``/``."""
    parts = urlsplit(uri)
    prefix = unquote(parts.path).strip("/")
    if prefix:
        prefix += "/"
    bucket = parts.netloc.rpartition("@")[2]
    return S3Config(bucket=bucket, prefix=prefix)


register("s3", S3Driver())