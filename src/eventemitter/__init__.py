"""eventemitter — in-process publish/subscribe with sync and async emission."""

from __future__ import annotations

from eventemitter.diagnostics import DiagnosticsSink, LoggingSink, WarningsSink
from eventemitter.emitter import (
    NEW_LISTENER,
    REMOVE_LISTENER,
    EmitContext,
    EventEmitter,
    EventsMap,
    current_context,
)
from eventemitter.errors import (
    ConfigError,
    EventEmitterError,
    InvalidEventName,
    InvalidListener,
    InvalidOption,
    MaxListenersExceededWarning,
)
from eventemitter.policy import OnError
from eventemitter.records import ListenerRecord

__all__ = [
    "NEW_LISTENER",
    "REMOVE_LISTENER",
    "ConfigError",
    "DiagnosticsSink",
    "EmitContext",
    "EventEmitter",
    "EventEmitterError",
    "EventsMap",
    "InvalidEventName",
    "InvalidListener",
    "InvalidOption",
    "ListenerRecord",
    "LoggingSink",
    "MaxListenersExceededWarning",
    "OnError",
    "WarningsSink",
    "current_context",
]
