from urllib.parse import parse_qs, urlsplit

import pytest

from schemamigrate.util import MultiError, filter_custom_query, suint


def test_suint_rejects_negative_input():
    with pytest.raises(ValueError):
        suint(-1)


def test_suint_zero():
    assert suint(0) == 0


def test_suint_positive():
    assert suint(42) == 42


def test_filter_custom_query():
    filtered = filter_custom_query("foo://host?a=b&x-custom=foo&c=d&ok=y")
    query = parse_qs(urlsplit(filtered).query)
    assert "x-custom" not in query
    assert query["ok"] == ["y"]
    assert query["a"] == ["b"]
    assert query["c"] == ["d"]


def test_filter_custom_query_sorts_and_keeps_rest_of_url():
    assert filter_custom_query("foo://host/path?z=1&x-a=2&a=3") == "foo://host/path?a=3&z=1"


def test_filter_custom_query_keeps_single_char_key():
    query = parse_qs(urlsplit(filter_custom_query("foo://host?x=1&x-=2")).query)
    assert query == {"x": ["1"]}


def test_multi_error_joins_messages():
    err = MultiError(ValueError("first"), None, KeyError("second"), ValueError(""))
    assert len(err.errs) == 3
    assert str(err) == "first and 'second'"


def test_multi_error_empty():
    assert str(MultiError()) == ""
    assert MultiError(None).errs == []