"""Debounced autosave with serialized, coalescing persist calls.

One engine instance owns the "is the draft persisted?" state for a single open
document. The editing surface reports every draft mutation through
``notify_changed``; after ``delay`` seconds without further changes the engine
calls the injected ``on_save`` coroutine. At most one ``on_save`` call is in
flight at a time: values arriving while a save runs are coalesced into a
single pending value, which is persisted as soon as the running save settles
unless it equals what was just written.

The engine is driven by the running asyncio event loop, so ``notify_changed``
must be called from inside that loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import copy
import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar, cast

from querino.autosave.equality import deep_equal

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DELAY = 2.0


class AutosaveStatus(StrEnum):
    SAVED = "saved"
    UNSAVED = "unsaved"
    SAVING = "saving"
    ERROR = "error"

    @property
    def label(self) -> str:
        """Indicator text shown next to the editor."""
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    AutosaveStatus.SAVED: "Saved",
    AutosaveStatus.UNSAVED: "Unsaved changes",
    AutosaveStatus.SAVING: "Saving…",
    AutosaveStatus.ERROR: "Save failed",
}


def _mark_retrieved(future: asyncio.Future[None]) -> None:
    # Timer-driven saves have no awaiting caller; failures surface through status.
    if not future.cancelled():
        future.exception()


def _new_waiter(loop: asyncio.AbstractEventLoop) -> asyncio.Future[None]:
    waiter: asyncio.Future[None] = loop.create_future()
    waiter.add_done_callback(_mark_retrieved)
    return waiter


def _settle(waiters: list[asyncio.Future[None]], error: Exception | None) -> None:
    for waiter in waiters:
        if waiter.done():
            continue
        if error is None:
            waiter.set_result(None)
        else:
            waiter.set_exception(error)


class AutosaveEngine(Generic[T]):
    """Keep an in-memory draft persisted through a caller-supplied coroutine."""

    def __init__(
        self,
        initial_value: T,
        on_save: Callable[[T], Awaitable[None]],
        *,
        delay: float = DEFAULT_DELAY,
        enabled: bool = True,
    ) -> None:
        self._on_save = on_save
        self._delay = delay
        self._enabled = enabled
        self._baseline: T = copy.deepcopy(initial_value)
        self._draft: T = initial_value
        self._status = AutosaveStatus.SAVED
        self._listeners: list[Callable[[AutosaveStatus], None]] = []
        self._timer: asyncio.TimerHandle | None = None
        self._saving = False
        self._save_task: asyncio.Task[None] | None = None
        self._has_pending = False
        self._generation = 0
        self._pending: T | None = None
        self._pending_waiter: asyncio.Future[None] | None = None

    @property
    def status(self) -> AutosaveStatus:
        return self._status

    @property
    def last_saved(self) -> T:
        """The persisted snapshot: the last value known to be written."""
        return self._baseline

    @property
    def draft(self) -> T:
        return self._draft

    @property
    def has_changes(self) -> bool:
        return not deep_equal(self._draft, self._baseline)

    @property
    def is_saving(self) -> bool:
        return self._saving

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value
        if not value:
            self._cancel_timer()

    def subscribe(self, listener: Callable[[AutosaveStatus], None]) -> Callable[[], None]:
        """Register a status listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return unsubscribe

    def notify_changed(self, value: T) -> None:
        """Record a draft mutation and (re)start the debounce timer.

        Never raises because of a save failure; failures only show up in
        ``status``.
        """
        self._draft = value
        if not self._enabled:
            return

        if not self._saving and deep_equal(value, self._baseline):
            self._cancel_timer()
            if self._status in (AutosaveStatus.UNSAVED, AutosaveStatus.ERROR):
                self._set_status(AutosaveStatus.SAVED)
            return

        if not self._saving:
            self._set_status(AutosaveStatus.UNSAVED)
        self._schedule()

    async def force_save(self, value: T) -> None:
        """Persist ``value`` now, bypassing the debounce delay.

        Raises whatever ``on_save`` raised for the save that carried ``value``.
        """
        self._cancel_timer()
        self._draft = value
        await self._request_save(value)

    async def flush(self) -> None:
        """Persist the draft if it has unsaved changes, e.g. before navigating away."""
        if self._timer is not None or self.has_changes:
            await self.force_save(self._draft)
        elif self._save_task is not None and not self._save_task.done():
            await self._save_task

    def reset_baseline(self, value: T) -> None:
        """Adopt ``value`` as persisted without calling ``on_save``.

        A save already in flight still finishes but no longer moves the
        baseline; a coalesced value waiting behind it is dropped.
        """
        self._cancel_timer()
        self._generation += 1
        if self._has_pending:
            _, waiters = self._take_pending()
            _settle(waiters, None)
        self._baseline = copy.deepcopy(value)
        self._draft = value
        self._set_status(AutosaveStatus.SAVED)

    async def close(self) -> None:
        """Drop the pending timer and wait for an in-flight save to settle."""
        self._cancel_timer()
        if self._save_task is not None and not self._save_task.done():
            await self._save_task

    def _set_status(self, status: AutosaveStatus) -> None:
        if status is self._status:
            return
        logger.debug("Autosave status %s -> %s", self._status, status)
        self._status = status
        for listener in list(self._listeners):
            listener(status)

    def _schedule(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if not self._saving and deep_equal(self._draft, self._baseline):
            if self._status is AutosaveStatus.UNSAVED:
                self._set_status(AutosaveStatus.SAVED)
            return
        self._request_save(self._draft)

    def _request_save(self, value: T) -> asyncio.Future[None]:
        loop = asyncio.get_running_loop()
        snapshot = copy.deepcopy(value)

        if self._saving:
            self._pending = snapshot
            self._has_pending = True
            if self._pending_waiter is None:
                self._pending_waiter = _new_waiter(loop)
            logger.debug("Save in flight, coalescing newer draft")
            return self._pending_waiter

        waiter = _new_waiter(loop)
        self._saving = True
        self._set_status(AutosaveStatus.SAVING)
        self._save_task = loop.create_task(self._drain(snapshot, waiter))
        return waiter

    def _take_pending(self) -> tuple[T, list[asyncio.Future[None]]]:
        pending = cast("T", self._pending)
        waiters = [self._pending_waiter] if self._pending_waiter is not None else []
        self._pending = None
        self._has_pending = False
        self._pending_waiter = None
        return pending, waiters

    async def _persist(self, value: T, generation: int) -> Exception | None:
        try:
            await self._on_save(value)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Autosave failed", exc_info=True)
            return exc
        if generation == self._generation:
            self._baseline = value
        else:
            logger.debug("Baseline was reset during save, keeping the new baseline")
        return None

    async def _drain(self, value: T, waiter: asyncio.Future[None]) -> None:
        """Run one save, then keep saving the newest coalesced value until none is left."""
        waiters = [waiter]
        error: Exception | None = None
        generation = self._generation
        try:
            while True:
                error = await self._persist(value, generation)
                _settle(waiters, error)
                waiters = []
                if not self._has_pending:
                    break

                pending, waiters = self._take_pending()
                current = generation == self._generation
                if error is None and current and deep_equal(pending, value):
                    _settle(waiters, None)
                    waiters = []
                    break
                value = pending
                generation = self._generation
        finally:
            self._saving = False
            if self._pending_waiter is not None:
                waiters.append(self._pending_waiter)
                self._pending_waiter = None
                self._has_pending = False
                self._pending = None
            for leftover in waiters:
                if not leftover.done():
                    leftover.cancel()

        unsaved = self._timer is not None and not deep_equal(self._draft, self._baseline)
        if generation != self._generation:
            # reset_baseline already reported the state of the new baseline.
            if unsaved:
                self._set_status(AutosaveStatus.UNSAVED)
        elif error is not None:
            self._set_status(AutosaveStatus.ERROR)
        elif unsaved:
            self._set_status(AutosaveStatus.UNSAVED)
        else:
            self._set_status(AutosaveStatus.SAVED)
