"""Validated configuration for the fixed-delay retry policy.

Frozen pydantic model shared by the policy constructor, ``from_config`` and
settings-driven construction. Tunable writes reuse the same constraints
through TypeAdapters.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import timedelta
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
)

from retrycase.foundation.categories import ANY, FailureCategory, category_by_name
from retrycase.foundation.errors import InvalidPolicyError

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACK_OFF_PERIOD = 1.0  # seconds
DEFAULT_RETRYABLE: frozenset[FailureCategory] = frozenset({ANY})

# Strict: a bool is not a count. Periods must be finite.
AttemptCount = Annotated[int, Strict(), Field(gt=0)]
BackOffSeconds = Annotated[float, Field(ge=0, allow_inf_nan=False)]

_MAX_ATTEMPTS = TypeAdapter(AttemptCount)
_BACK_OFF_PERIOD = TypeAdapter(BackOffSeconds)


def to_seconds(v: object) -> object:
    """Accept timedelta for durations; everything else passes through to validation."""
    return v.total_seconds() if isinstance(v, timedelta) else v


def to_categories(v: object) -> frozenset[FailureCategory] | None:
    """Normalize a retryable option: None, a single category/name, or an iterable of them."""
    if v is None:
        return None
    if not isinstance(v, (FailureCategory, str, Iterable)):
        raise ValueError(f"Expected categories, got {type(v).__name__}")
    items: Iterable[object] = (v,) if isinstance(v, (FailureCategory, str)) else v  # type: ignore[assignment]
    out: set[FailureCategory] = set()
    for item in items:
        if isinstance(item, FailureCategory):
            out.add(item)
        elif isinstance(item, str):
            try:
                out.add(category_by_name(item))
            except KeyError as e:
                raise ValueError(str(e.args[0])) from None
        else:
            raise ValueError(f"Expected FailureCategory or category name, got {type(item).__name__}")
    return frozenset(out)


def check_max_attempts(v: int) -> int:
    try:
        return _MAX_ATTEMPTS.validate_python(v)
    except ValidationError as e:
        raise InvalidPolicyError.from_validation(e) from None


def check_back_off_period(v: float | timedelta) -> float:
    try:
        return _BACK_OFF_PERIOD.validate_python(to_seconds(v))
    except ValidationError as e:
        raise InvalidPolicyError.from_validation(e) from None


class RetryPolicyConfig(BaseModel):
    """Construction options for SimpleRetryPolicy.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        back_off_period: Finite seconds to wait between attempts (>= 0); timedelta accepted
        retryable: Categories that permit a retry. None or empty = never retry
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # FailureCategory is a plain dataclass
        validate_default=True,
        extra="forbid",
        json_schema_extra={
            "title": "Retry Policy",
            "description": "Fixed-delay retry policy configuration",
            "examples": [{"max_attempts": 3, "back_off_period": 1.0, "retryable": ["any"]}],
        },
    )

    max_attempts: AttemptCount = DEFAULT_MAX_ATTEMPTS
    back_off_period: BackOffSeconds = DEFAULT_BACK_OFF_PERIOD
    retryable: frozenset[FailureCategory] | None = DEFAULT_RETRYABLE

    @field_validator("back_off_period", mode="before")
    @classmethod
    def _accept_timedelta(cls, v: object) -> object:
        return to_seconds(v)

    @field_validator("retryable", mode="before")
    @classmethod
    def _normalize_categories(cls, v: object) -> frozenset[FailureCategory] | None:
        return to_categories(v)

    @field_serializer("retryable")
    def _serialize_categories(self, v: frozenset[FailureCategory] | None) -> list[str] | None:
        return None if v is None else sorted(c.name for c in v)

    @property
    def fail_closed(self) -> bool:
        """Whether no failure can ever be retried."""
        return not self.retryable

    @classmethod
    def build(cls, **kw: object) -> RetryPolicyConfig:
        """Validate ``kw``, raising InvalidPolicyError instead of ValidationError."""
        try:
            return cls(**kw)
        except ValidationError as e:
            raise InvalidPolicyError.from_validation(e) from None
