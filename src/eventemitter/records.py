"""Listener records and normalization of listener input."""

from __future__ import annotations

import inspect
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Union

from eventemitter.errors import InvalidListener, InvalidOption

Callback = Callable[..., Any]


@dataclass(eq=False)
class ListenerRecord:
    """A callback plus the number of invocations it has left.

    Records compare by identity: two records wrapping the same callback
    are still distinct entries in an event's sequence.
    """

    callback: Callback
    remaining: float = math.inf


# A bare callable, a prebuilt record, or an ordered sequence of either.
ListenerInput = Union[Callback, ListenerRecord, Sequence[Union[Callback, ListenerRecord]]]


def _callback_of(item: Any, index: int) -> Callback:
    if isinstance(item, ListenerRecord):
        item = item.callback
    if not callable(item):
        raise InvalidListener(f"Invalid function #{index}", {"listener": item})
    return item


def normalize_listeners(listener: ListenerInput) -> list[Callback]:
    """Flatten *listener* into an ordered list of callbacks.

    Lists and tuples are taken element by element; anything else is a
    single listener.  The result is always a fresh list, so passing an
    event's own record sequence (as ``remove_all_listeners`` does) is safe
    while that sequence is being mutated.
    """
    items = list(listener) if isinstance(listener, (list, tuple)) else [listener]
    return [_callback_of(item, index) for index, item in enumerate(items)]


def check_count(count: Any) -> float:
    """Validate a listener invocation count; ``None`` means unbounded."""
    if count is None:
        return math.inf
    if isinstance(count, bool) or not isinstance(count, (int, float)):
        raise InvalidOption("Invalid count", {"count": count})
    if count == math.inf:
        return count
    if not math.isfinite(count) or count != int(count) or count < 1:
        raise InvalidOption("Invalid count", {"count": count})
    return int(count)


def same_callback(a: Callback, b: Callback) -> bool:
    """Identity match; a re-fetched bound method matches its original."""
    if a is b:
        return True
    if inspect.ismethod(a) and inspect.ismethod(b):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    return False
