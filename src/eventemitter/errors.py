"""Exception types raised by the emitter.

Only misuse of the emitter itself raises these.  Exceptions thrown by
listener code are never wrapped: they propagate (or are handled) exactly
as raised, according to the ``on_error`` policy of the emission.
"""

from __future__ import annotations

from typing import Any


class EventEmitterError(Exception):
    """Base class for emitter errors.

    ``data`` describes the offending input, e.g. ``{"event": "bogus"}``.
    """

    def __init__(self, message: str, data: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.data = data or {}


class InvalidEventName(EventEmitterError):
    """Event name outside the emitter's vocabulary, or duplicated in it."""


class InvalidListener(EventEmitterError):
    """A non-callable was given where a listener was required."""


class InvalidOption(EventEmitterError):
    """Bad option value: max-listener count, listener count, policy, events map."""


class ConfigError(EventEmitterError):
    """Raised when an eventemitter config file cannot be parsed."""


class MaxListenersExceededWarning(RuntimeWarning):
    """Issued by :class:`~eventemitter.diagnostics.WarningsSink`."""
