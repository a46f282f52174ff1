"""EventEmitter — named events bound to ordered lists of listener callbacks."""

from __future__ import annotations

import asyncio
import contextvars
import inspect
import math
from collections.abc import Awaitable, Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from eventemitter.diagnostics import DiagnosticsSink, LoggingSink, get_sink
from eventemitter.errors import InvalidEventName, InvalidOption
from eventemitter.logging import get_logger, setup_logging
from eventemitter.policy import (
    DROPPED,
    ErrorHandler,
    ErrorPolicy,
    OnError,
    handle_error,
    resolve_policy,
)
from eventemitter.records import (
    ListenerInput,
    ListenerRecord,
    check_count,
    normalize_listeners,
    same_callback,
)

if TYPE_CHECKING:
    from eventemitter.config import EmitterConfig

_log = get_logger("emitter")

# Lifecycle notifications, emitted on the emitter itself.
NEW_LISTENER = "newListener"
REMOVE_LISTENER = "removeListener"

DEFAULT_MAX_LISTENERS = 10


class EventsMap(dict):
    """Event name -> ordered list of :class:`ListenerRecord`."""


@dataclass
class EmitContext:
    """State of the emission a listener is being called from."""

    emitter: EventEmitter
    results: list[Any]
    args: list[Any]


_current: contextvars.ContextVar[EmitContext | None] = contextvars.ContextVar(
    "eventemitter_context", default=None
)


def current_context() -> EmitContext | None:
    """Return the context of the running emission, or ``None``.

    Only set while a listener executes synchronously inside ``emit``.  The
    body of an ``async def`` listener runs later, when ``emit2`` awaits it,
    and sees ``None``.
    """
    return _current.get()


def _resolve_args(args: Any) -> list[Any]:
    if args is None:
        return []
    if isinstance(args, (list, tuple)):
        return list(args)
    return [args]


def _close_coroutines(results: list[Any]) -> None:
    # Results of an aborted emission are never awaited.
    for result in results:
        if inspect.iscoroutine(result):
            result.close()


class EventEmitter:
    """Stores listener callbacks and emits events to them.

    Usage::

        emitter = EventEmitter("message", "close")
        emitter.on("message", lambda text: text.upper())
        emitter.emit("message", "hi")        # -> ["HI"]

    Passing event names restricts the emitter to that vocabulary (plus the
    ``newListener`` and ``removeListener`` lifecycle events); adding,
    removing, listing or emitting any other name raises
    :class:`InvalidEventName`.  With no names every event is allowed.

    ``newListener`` is emitted with ``[event, callback, options]`` before a
    listener is inserted; ``removeListener`` with ``[event, callback]``
    after one is removed.
    """

    def __init__(
        self,
        *events: Hashable,
        max_listeners: float = DEFAULT_MAX_LISTENERS,
        diagnostics: DiagnosticsSink | None = None,
    ) -> None:
        self._events = EventsMap()
        self._valid_events: set[Hashable] = set()
        self._warned: set[Hashable] = set()
        self._diagnostics = diagnostics or LoggingSink()

        if events:
            self._valid_events.update((NEW_LISTENER, REMOVE_LISTENER))
            for index, event in enumerate(events):
                if event in self._valid_events:
                    raise InvalidEventName(
                        f"Event #{index} is already on the list", {"event": event}
                    )
                self._valid_events.add(event)

        self._max_listeners = DEFAULT_MAX_LISTENERS
        self.set_max_listeners(max_listeners)

    @classmethod
    def from_config(
        cls, config: EmitterConfig, configure_logging: bool = True
    ) -> EventEmitter:
        """Build an emitter from a loaded :class:`EmitterConfig`.

        Unless *configure_logging* is false, the config's ``log_level`` and
        ``log_file`` are applied to the ``eventemitter`` logger as well.
        """
        if configure_logging:
            setup_logging(level=config.log_level, log_file=config.log_file)
        return cls(
            *config.events,
            max_listeners=config.max_listeners,
            diagnostics=get_sink(config.diagnostics),
        )

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def events(self) -> EventsMap:
        """The live event map."""
        return self._events

    @events.setter
    def events(self, events: EventsMap) -> None:
        if not isinstance(events, EventsMap):
            raise InvalidOption("Invalid events object", {"events": events})
        self._events = events

    @property
    def max_listeners(self) -> float:
        return self._max_listeners

    @property
    def valid_events(self) -> frozenset[Hashable]:
        """Allowed event names; empty when unrestricted."""
        return frozenset(self._valid_events)

    def set_max_listeners(self, count: float) -> EventEmitter:
        """Set the listener count above which an event triggers a diagnostic.

        *count* must be a positive number; ``math.inf`` disables the check.
        """
        if (
            isinstance(count, bool)
            or not isinstance(count, (int, float))
            or math.isnan(count)
            or count < 1
        ):
            raise InvalidOption("Invalid count", {"count": count})
        self._max_listeners = count
        return self

    def _bucket(self, event: Hashable) -> list[ListenerRecord]:
        if self._valid_events and event not in self._valid_events:
            raise InvalidEventName("Invalid event name", {"event": event})
        listeners = self._events.get(event)
        if listeners is None:
            listeners = self._events[event] = []
        return listeners

    def listeners(self, event: Hashable) -> list[ListenerRecord]:
        """Return the records of *event* in invocation order.

        The list is a copy; the records in it are the registry's own.
        """
        return list(self._bucket(event))

    def listener_count(self, event: Hashable) -> int:
        return len(self._bucket(event))

    def event_names(self) -> list[Hashable]:
        """Names of events that currently have at least one listener."""
        return [name for name, listeners in self._events.items() if listeners]

    def add_listener(
        self,
        event: Hashable,
        listener: ListenerInput,
        count: float | None = None,
        prepend: bool = False,
    ) -> EventEmitter:
        """Add one or more listeners to *event*.

        *listener* may be a callable, a :class:`ListenerRecord` or a
        list/tuple of either.  Each listener may run *count* times before
        it is removed (unbounded by default).  With *prepend* listeners are
        inserted at the front, one at a time, so a prepended list ends up
        reversed.
        """
        listeners = self._bucket(event)
        remaining = check_count(count)
        callbacks = normalize_listeners(listener)
        options = {"count": remaining, "prepend": prepend}

        for callback in callbacks:
            self.emit(NEW_LISTENER, [event, callback, options])
            record = ListenerRecord(callback, remaining)
            if prepend:
                listeners.insert(0, record)
            else:
                listeners.append(record)

        if len(listeners) > self._max_listeners and event not in self._warned:
            self._warned.add(event)
            self._diagnostics.warn(
                f"Possible memory leak detected: {len(listeners)} listeners added to {event}"
            )
        return self

    def remove_listener(self, event: Hashable, listener: ListenerInput) -> EventEmitter:
        """Remove the first record of *event* holding each given callback.

        Callbacks match by identity; bound methods match when they wrap the
        same function on the same object.

        Callbacks that are not registered are skipped silently.
        """
        listeners = self._bucket(event)
        for callback in normalize_listeners(listener):
            for pos, record in enumerate(listeners):
                if same_callback(record.callback, callback):
                    del listeners[pos]
                    self.emit(REMOVE_LISTENER, [event, callback])
                    break
        return self

    def remove_all_listeners(self, event: Hashable | None = None) -> EventEmitter:
        """Remove every listener of *event*, or of all events when ``None``.

        A full reset clears ``removeListener`` last so its observers see
        every other removal, and forgets which events were already warned
        about.
        """
        if event is not None:
            return self.remove_listener(event, self._bucket(event))
        for name, listeners in list(self._events.items()):
            if name != REMOVE_LISTENER:
                self.remove_listener(name, listeners)
        self._warned.clear()
        return self.remove_all_listeners(REMOVE_LISTENER)

    # ------------------------------------------------------------------
    # Subscription shortcuts
    # ------------------------------------------------------------------

    def on(self, event: Hashable, listener: ListenerInput, prepend: bool = False) -> EventEmitter:
        """Add a persistent listener."""
        return self.add_listener(event, listener, count=math.inf, prepend=prepend)

    def once(
        self, event: Hashable, listener: ListenerInput, prepend: bool = False
    ) -> EventEmitter:
        """Add a listener that is removed before its first invocation runs."""
        return self.add_listener(event, listener, count=1, prepend=prepend)

    def off(self, event: Hashable, listener: ListenerInput) -> EventEmitter:
        return self.remove_listener(event, listener)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def emit(
        self, event: Hashable, args: Any = None, on_error: ErrorPolicy = None
    ) -> list[Any] | None:
        """Call each listener of *event* synchronously, in insertion order.

        *args* is the positional argument list: ``None`` for no arguments,
        a list or tuple as-is, any other value as a single argument.

        *on_error* decides what happens when a listener raises:

        - ``None`` / ``OnError.RAISE`` — propagate; later listeners don't run.
        - ``OnError.IGNORE`` — the listener contributes no result.
        - ``OnError.RESULT`` — the exception is the listener's result.
        - a callable — called with the exception; a non-``None`` return is
          the result, ``None`` behaves like ``IGNORE``.

        Returns the list of results, or ``None`` if *event* has no
        listeners.  Listeners added or removed while emitting take effect
        on the next emission.  When an error propagates, coroutines already
        returned by earlier listeners are closed without running.
        """
        policy = resolve_policy(on_error)
        listeners = self._bucket(event)
        if not listeners:
            return None

        ctx = EmitContext(self, [], _resolve_args(args))
        try:
            for record in listeners[:]:
                record.remaining -= 1
                if record.remaining < 1 and record in listeners:
                    listeners.remove(record)
                    _log.debug("listener %r for event %r expired", record.callback, event)
                token = _current.set(ctx)
                try:
                    ctx.results.append(record.callback(*ctx.args))
                except Exception as error:
                    self._listener_failed(event, ctx.results, error, policy)
                finally:
                    _current.reset(token)
        except BaseException:
            _close_coroutines(ctx.results)
            raise
        return ctx.results

    def emit2(
        self, event: Hashable, args: Any = None, on_error: ErrorPolicy = None
    ) -> Awaitable[list[Any]] | None:
        """Like :meth:`emit`, but also waits for awaitable results.

        Returns ``None`` straight away if *event* has no listeners,
        otherwise a coroutine resolving to the results list with every
        awaitable replaced by its outcome.  Failures of awaitables go
        through *on_error* like synchronous ones; slots the policy drops are
        compacted out, so the list may be shorter than the listener count.

        If a listener raises synchronously and the policy propagates it,
        the error is raised here and coroutines from earlier listeners are
        closed unrun.  Futures and tasks are left to finish on their own.
        """
        results = self.emit(event, args, on_error)
        if results is None:
            return None
        return self._settle(event, results, resolve_policy(on_error))

    async def _settle(
        self, event: Hashable, results: list[Any], policy: OnError | ErrorHandler
    ) -> list[Any]:
        async def _resolve(index: int, awaitable: Awaitable[Any]) -> None:
            try:
                results[index] = await awaitable
            except Exception as error:
                self._listener_failed(event, results, error, policy, index)

        pending = [
            _resolve(index, result)
            for index, result in enumerate(results)
            if inspect.isawaitable(result)
        ]
        await asyncio.gather(*pending)
        return [result for result in results if result is not DROPPED]

    def _listener_failed(
        self,
        event: Hashable,
        results: list[Any],
        error: Exception,
        policy: OnError | ErrorHandler,
        index: int | None = None,
    ) -> None:
        if not handle_error(results, error, policy, index):
            _log.debug("listener for event %r failed, result dropped: %r", event, error)
