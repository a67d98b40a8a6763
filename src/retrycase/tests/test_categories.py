"""Tests for failure categories and classification."""

from __future__ import annotations

import pytest

from retrycase import (
    ANY,
    NETWORK,
    PERMANENT,
    RATE_LIMITED,
    TIMEOUT,
    TRANSIENT,
    UNCATEGORIZED,
    CategorizedError,
    CategoryRegistry,
    FailureCategory,
    category_by_name,
    category_of,
    register_category,
)
from retrycase.foundation.categories import matches_any


# ═════════════════════════════════════════════════════════════════════════════
# Subsumption
# ═════════════════════════════════════════════════════════════════════════════


def test_category_subsumes_itself() -> None:
    assert TIMEOUT.subsumes(TIMEOUT)
    assert PERMANENT.subsumes(PERMANENT)


def test_parent_subsumes_child_transitively() -> None:
    """A category covers every more specific descendant."""
    dns = NETWORK.child("dns")

    assert NETWORK.subsumes(dns)
    assert TRANSIENT.subsumes(dns)
    assert not dns.subsumes(NETWORK)
    assert dns.is_a(TRANSIENT)


def test_unrelated_categories_do_not_match() -> None:
    assert not PERMANENT.subsumes(TIMEOUT)
    assert not TIMEOUT.subsumes(NETWORK)
    assert not TRANSIENT.subsumes(UNCATEGORIZED)


def test_any_subsumes_everything() -> None:
    custom = FailureCategory("custom")
    for cat in (TIMEOUT, PERMANENT, UNCATEGORIZED, custom, ANY):
        assert ANY.subsumes(cat)
    assert not custom.subsumes(ANY)


def test_multiple_parents() -> None:
    """A category with two parents is covered by both."""
    throttled = RATE_LIMITED.child("throttled_timeout", TIMEOUT)

    assert RATE_LIMITED.subsumes(throttled)
    assert TIMEOUT.subsumes(throttled)
    assert list(throttled.lineage()).count(TRANSIENT) == 1


def test_matches_any_fail_closed() -> None:
    """None or empty sets match nothing, even ANY-descendants."""
    assert not matches_any(None, TIMEOUT)
    assert not matches_any(frozenset(), TIMEOUT)
    assert matches_any({PERMANENT, TRANSIENT}, TIMEOUT)


# ═════════════════════════════════════════════════════════════════════════════
# Classification
# ═════════════════════════════════════════════════════════════════════════════


def test_builtin_registrations() -> None:
    assert category_of(TimeoutError()) == TIMEOUT
    assert category_of(ConnectionResetError()) == NETWORK  # subclass of ConnectionError
    assert category_of(ValueError("bad")) == UNCATEGORIZED


def test_declared_category_wins() -> None:
    """A failure_category attribute takes precedence over type registration."""

    class SlowConnection(ConnectionError):
        failure_category = TIMEOUT

    assert category_of(SlowConnection()) == TIMEOUT
    assert category_of(CategorizedError("503", RATE_LIMITED)) == RATE_LIMITED
    assert category_of(CategorizedError("no category")) == UNCATEGORIZED


def test_register_category_covers_subclasses() -> None:
    register_category(LookupError, PERMANENT)

    assert category_of(KeyError("k")) == PERMANENT
    assert category_of(IndexError()) == PERMANENT


def test_nearest_registration_wins() -> None:
    reg = CategoryRegistry()
    reg.register(OSError, PERMANENT)
    reg.register(ConnectionError, NETWORK)

    assert reg.categorize(ConnectionRefusedError()) == NETWORK
    assert reg.categorize(FileNotFoundError()) == PERMANENT


def test_category_by_name() -> None:
    assert category_by_name("transient") == TRANSIENT
    assert category_by_name(" Rate_Limited ") == RATE_LIMITED
    with pytest.raises(KeyError, match="Unknown failure category"):
        category_by_name("nope")


def test_registered_category_resolvable_by_name() -> None:
    dns = NETWORK.child("DNS")
    register_category(LookupError, dns)

    assert category_by_name("dns") == dns
