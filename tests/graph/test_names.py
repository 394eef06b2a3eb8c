"""Tests for name sanitization."""

from __future__ import annotations

import pytest

from symgraph.graph.names import NameSanitizer, sanitize_name, to_identifier


@pytest.mark.parametrize(
    "name",
    ["", "_GLOBAL_OFFSET_TABLE_", ".LC0", ".LC12", "_init", "__libc_start_main"],
)
def test_noise_names_are_rejected(name: str) -> None:
    """Link-time artifacts and reserved names never produce identifiers."""
    assert sanitize_name(name) is None


def test_path_and_object_suffix_are_stripped() -> None:
    """A full object path sanitizes like its bare stem."""
    assert sanitize_name("/usr/lib/libfoo.o") == sanitize_name("libfoo") == "libfoo"


def test_dashes_and_dots_become_underscores() -> None:
    assert sanitize_name("a-b.c") == "a_b_c"
    assert sanitize_name("/opt/lib/libssl-1.1.so.3") == "libssl_1_1_so_3"


def test_only_trailing_object_suffix_is_dropped() -> None:
    """``.o`` in the middle of a name is translated, not removed."""
    assert sanitize_name("foo.o.bar") == "foo_o_bar"
    assert sanitize_name("foo.oo") == "foo_oo"


def test_rules_apply_to_raw_name_before_basename() -> None:
    """Rejection looks at the raw name, so a path hides a reserved basename."""
    assert sanitize_name("_private.so") is None
    assert sanitize_name("dir/_private.so") == "_private_so"


def test_double_underscore_policy_keeps_single_underscore_names() -> None:
    sanitizer = NameSanitizer(reserved_underscores=2)

    assert sanitizer.sanitize("_start") == "_start"
    assert sanitizer.sanitize("__cxa_finalize") is None
    assert sanitizer.sanitize("_GLOBAL_OFFSET_TABLE_") is None


def test_reserved_rule_can_be_disabled() -> None:
    sanitizer = NameSanitizer(reserved_underscores=0)

    assert sanitizer.sanitize("__cxa_finalize") == "__cxa_finalize"
    assert sanitizer.sanitize(".LC3") is None
    assert sanitizer.sanitize("") is None


def test_extra_ignored_names() -> None:
    sanitizer = NameSanitizer(extra_ignored_names=["main", "abort"])

    assert sanitizer.sanitize("main") is None
    assert sanitizer.sanitize("abort") is None
    assert sanitizer.sanitize("exit") == "exit"


def test_negative_reserved_length_is_invalid() -> None:
    with pytest.raises(ValueError):
        NameSanitizer(reserved_underscores=-1)


def test_sanitize_is_deterministic() -> None:
    sanitizer = NameSanitizer()
    names = ["libc.so.6", "foo-bar", "_x", ".LC1", "a/b/c.o"]

    first = [sanitizer.sanitize(n) for n in names]
    second = [NameSanitizer().sanitize(n) for n in names]

    assert first == second


def test_to_identifier_never_rejects() -> None:
    assert to_identifier("_build-dir") == "_build_dir"
