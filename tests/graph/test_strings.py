"""Tests for the string table."""

from __future__ import annotations

import pytest

from symgraph.graph.strings import StringTable


def test_intern_returns_same_id_for_equal_strings() -> None:
    table = StringTable()

    first = table.intern("libfoo_so")
    table.intern("bar")
    again = table.intern("libfoo_so")

    assert first == again
    assert len(table) == 2


def test_resolve_inverts_intern() -> None:
    table = StringTable()
    names = ["a", "b", "c", "a"]

    ids = [table.intern(n) for n in names]

    assert [table.resolve(i) for i in ids] == names
    assert ids == [0, 1, 2, 0]


def test_resolve_unknown_id_raises() -> None:
    table = StringTable()
    table.intern("x")

    with pytest.raises(KeyError):
        table.resolve(1)
    with pytest.raises(KeyError):
        table.resolve(-1)


def test_get_does_not_intern() -> None:
    table = StringTable()

    assert table.get("missing") is None
    assert "missing" not in table
    assert len(table) == 0
