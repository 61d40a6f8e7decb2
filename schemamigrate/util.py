"""Small helpers shared across the package."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


class MultiError(Exception):
    """An error that holds several errors; ``None`` entries are dropped."""

    def __init__(self, *errs: BaseException | None) -> None:
        self.errs: list[BaseException] = [e for e in errs if e is not None]
        super().__init__(*self.errs)

    def __str__(self) -> str:
        return " and ".join(msg for msg in map(str, self.errs) if msg)


def suint(n: int) -> int:
    """Return ``n`` as an unsigned value, refusing negative input."""
    if n < 0:
        raise ValueError(f"suint({n}) expects input >= 0")
    return n


def filter_custom_query(url: str) -> str:
    """Return ``url`` with every query parameter whose key starts with ``x-`` removed.

    The remaining parameters are re-encoded sorted by key.
    """
    parts = urlsplit(url)
    kept = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if len(key) <= 1 or not key.startswith("x-")
    ]
    kept.sort(key=lambda item: item[0])
    return urlunsplit(parts._replace(query=urlencode(kept)))