"""Failure categories with explicit subsumption.

A FailureCategory is a named tag that declares its parents. A category
subsumes another when it appears in that category's lineage (itself plus
all transitive parents). ANY is the root and subsumes every category.

Failures are mapped to categories by ``category_of``:
    1. a ``failure_category`` attribute on the failure (see CategorizedError)
    2. the category registered for the failure's type or nearest registered base
    3. UNCATEGORIZED

Example:
    >>> DNS = NETWORK.child("dns")
    >>> TRANSIENT.subsumes(DNS)
    True
    >>> PERMANENT.subsumes(DNS)
    False
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class FailureCategory:
    """Named failure kind. Hashable, compared by name and parents."""

    name: str
    parents: tuple[FailureCategory, ...] = ()
    root: bool = field(default=False, repr=False)

    def lineage(self) -> Iterator[FailureCategory]:
        """Yield self then every ancestor once, breadth first."""
        seen: set[FailureCategory] = set()
        queue = [self]
        while queue:
            cat = queue.pop(0)
            if cat in seen:
                continue
            seen.add(cat)
            yield cat
            queue.extend(cat.parents)

    def subsumes(self, other: FailureCategory) -> bool:
        """True if ``other`` is this category or a more specific form of it."""
        return self.root or any(c == self for c in other.lineage())

    def is_a(self, other: FailureCategory) -> bool:
        return other.subsumes(self)

    def child(self, name: str, *others: FailureCategory) -> FailureCategory:
        """New category whose parents are this one plus ``others``."""
        return FailureCategory(name, (self, *others))

    def __str__(self) -> str:
        return self.name


ANY = FailureCategory("any", root=True)
TRANSIENT = FailureCategory("transient")
TIMEOUT = TRANSIENT.child("timeout")
NETWORK = TRANSIENT.child("network")
RATE_LIMITED = TRANSIENT.child("rate_limited")
PERMANENT = FailureCategory("permanent")
UNCATEGORIZED = FailureCategory("uncategorized")

BUILTIN_CATEGORIES: tuple[FailureCategory, ...] = (
    ANY, TRANSIENT, TIMEOUT, NETWORK, RATE_LIMITED, PERMANENT, UNCATEGORIZED,
)


def matches_any(categories: Iterable[FailureCategory] | None, category: FailureCategory) -> bool:
    """Whether any of ``categories`` subsumes ``category``. None or empty matches nothing."""
    if not categories:
        return False
    return any(c.subsumes(category) for c in categories)


# ─────────────────────────────────────────────────────────────────────────────
# Classification
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class Categorized(Protocol):
    """Failure that declares its own category."""

    failure_category: FailureCategory


class CategorizedError(Exception):
    """Exception carrying an explicit failure category.

    Example:
        >>> raise CategorizedError("upstream 503", TRANSIENT)
    """

    def __init__(self, message: str, category: FailureCategory = UNCATEGORIZED) -> None:
        super().__init__(message)
        self.failure_category = category


class CategoryRegistry:
    """Thread-safe map of exception types and names to categories.

    Type lookups walk the failure type's bases so a category registered for
    ``OSError`` covers ``FileNotFoundError`` unless a closer one exists.
    """

    __slots__ = ("_by_type", "_by_name", "_lock")

    def __init__(self, categories: Iterable[FailureCategory] = BUILTIN_CATEGORIES) -> None:
        self._by_type: dict[type[BaseException], FailureCategory] = {}
        self._by_name: dict[str, FailureCategory] = {c.name.lower(): c for c in categories}
        self._lock = threading.Lock()

    def register(self, exc_type: type[BaseException], category: FailureCategory) -> None:
        with self._lock:
            self._by_type[exc_type] = category
            self._by_name.setdefault(category.name.lower(), category)

    def lookup(self, exc_type: type[BaseException]) -> FailureCategory | None:
        with self._lock:
            by_type = dict(self._by_type)
        for base in exc_type.__mro__:
            if (cat := by_type.get(base)) is not None:
                return cat
        return None

    def by_name(self, name: str) -> FailureCategory:
        """Resolve a category name. Raises KeyError for unknown names."""
        with self._lock:
            try:
                return self._by_name[name.strip().lower()]
            except KeyError:
                raise KeyError(f"Unknown failure category: {name!r}") from None

    def categorize(self, failure: BaseException) -> FailureCategory:
        if isinstance(cat := getattr(failure, "failure_category", None), FailureCategory):
            return cat
        return self.lookup(type(failure)) or UNCATEGORIZED


def _default_registry() -> CategoryRegistry:
    reg = CategoryRegistry()
    reg.register(TimeoutError, TIMEOUT)
    reg.register(ConnectionError, NETWORK)
    return reg


_registry = _default_registry()


def get_category_registry() -> CategoryRegistry:
    return _registry


def reset_category_registry() -> None:
    """Restore default registrations (useful for testing)."""
    global _registry
    _registry = _default_registry()


def register_category(exc_type: type[BaseException], category: FailureCategory) -> None:
    """Map an exception type (and its subclasses) to ``category`` in the default registry."""
    _registry.register(exc_type, category)


def category_of(failure: BaseException) -> FailureCategory:
    """Classify ``failure`` using the default registry."""
    return _registry.categorize(failure)


def category_by_name(name: str) -> FailureCategory:
    return _registry.by_name(name)
