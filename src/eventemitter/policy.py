"""Error policy applied when a listener raises or its awaitable fails."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Union

from eventemitter.errors import InvalidOption


class OnError(Enum):
    RAISE = "raise"
    IGNORE = "ignore"
    RESULT = "result"


ErrorHandler = Callable[[Exception], Any]
ErrorPolicy = Union[OnError, str, ErrorHandler, None]

# Marks an async result slot the policy discarded; compacted out before return.
DROPPED = object()


def resolve_policy(on_error: ErrorPolicy) -> OnError | ErrorHandler:
    """Normalize an ``on_error`` selector, rejecting unknown values."""
    if on_error is None:
        return OnError.RAISE
    if isinstance(on_error, OnError):
        return on_error
    if isinstance(on_error, str):
        try:
            return OnError(on_error.lower())
        except ValueError:
            valid = ", ".join(p.value for p in OnError)
            raise InvalidOption(
                f"Unknown error policy {on_error!r} (valid: {valid})", {"on_error": on_error}
            ) from None
    if callable(on_error):
        return on_error
    raise InvalidOption("Invalid error policy", {"on_error": on_error})


def handle_error(
    results: list[Any],
    error: Exception,
    policy: OnError | ErrorHandler,
    index: int | None = None,
) -> bool:
    """Apply *policy* to a listener failure.

    Without *index* (synchronous emission) a kept value is appended to
    *results*; with *index* (async aggregation) it overwrites that slot,
    and a dropped slot is set to ``DROPPED``.

    Re-raises *error* under ``OnError.RAISE``.  Returns ``True`` when a
    value was kept and ``False`` when the slot was dropped.
    """
    if policy is OnError.RAISE:
        raise error
    if policy is OnError.RESULT:
        value: Any = error
    elif policy is OnError.IGNORE:
        value = None
    else:
        value = policy(error)

    if value is None:
        if index is not None:
            results[index] = DROPPED
        return False
    if index is None:
        results.append(value)
    else:
        results[index] = value
    return True
