"""Diagnostics sinks notified when an event collects too many listeners."""

from __future__ import annotations

import sys
import warnings
from typing import Protocol, runtime_checkable

from eventemitter.errors import MaxListenersExceededWarning
from eventemitter.logging import get_logger

_log = get_logger("diagnostics")
_PACKAGE = __name__.partition(".")[0]


def _caller_stacklevel() -> int:
    """``warnings.warn`` stacklevel, from its caller, of the first frame
    outside this package."""
    level = 1
    frame = sys._getframe(1)
    while frame is not None and frame.f_globals.get("__name__", "").startswith(_PACKAGE + "."):
        frame = frame.f_back
        level += 1
    return level


@runtime_checkable
class DiagnosticsSink(Protocol):
    def warn(self, message: str) -> None: ...


class LoggingSink:
    """Default sink: a WARNING record on ``eventemitter.diagnostics``."""

    def warn(self, message: str) -> None:
        _log.warning("%s", message)


class WarningsSink:
    """Route diagnostics through the :mod:`warnings` machinery.

    Lets applications promote the leak warning to an error with the usual
    ``-W error::eventemitter.MaxListenersExceededWarning`` filter.
    """

    def warn(self, message: str) -> None:
        warnings.warn(message, MaxListenersExceededWarning, stacklevel=_caller_stacklevel())


def get_sink(kind: str) -> DiagnosticsSink:
    """Factory: return a sink by config name (``log`` or ``warnings``).

    Raises ``ValueError`` for unknown names.
    """
    if kind == "log":
        return LoggingSink()
    if kind == "warnings":
        return WarningsSink()
    raise ValueError(f"Unknown diagnostics sink {kind!r} (valid: log, warnings)")
