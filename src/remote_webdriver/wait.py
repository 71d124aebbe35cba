"""Polling primitive used to synchronise with asynchronous page state."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from .errors import NO_SUCH_ELEMENT, CommandError, WaitTimeoutError
from .models import By

if TYPE_CHECKING:
    from .session import Session

LOGGER = logging.getLogger(__name__)

DEFAULT_WAIT_TIMEOUT = 60.0
DEFAULT_WAIT_INTERVAL = 0.1

Condition = Callable[["Session"], bool]


def wait_until(
    predicate: Callable[[], bool],
    timeout: float = DEFAULT_WAIT_TIMEOUT,
    interval: float = DEFAULT_WAIT_INTERVAL,
    *,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Evaluate *predicate* until it returns true or *timeout* seconds pass.

    Exceptions raised by the predicate propagate immediately. A predicate that
    succeeds on its first evaluation returns without sleeping.
    """

    started = clock()
    attempts = 0
    while True:
        attempts += 1
        if predicate():
            return
        elapsed = clock() - started
        if elapsed >= timeout:
            LOGGER.debug("Condition still false after %d attempts", attempts)
            raise WaitTimeoutError(f"timeout after {elapsed:.3f}s")
        sleep(interval)


def element_present(by: By | str, value: str) -> Condition:
    """Condition satisfied once the locator matches an element."""

    def _condition(session: "Session") -> bool:
        try:
            session.find_element(by, value)
        except CommandError as exc:
            if exc.short_message == NO_SUCH_ELEMENT:
                return False
            raise
        return True

    return _condition


def title_is(title: str) -> Condition:
    def _condition(session: "Session") -> bool:
        return session.title() == title

    return _condition


def url_contains(fragment: str) -> Condition:
    def _condition(session: "Session") -> bool:
        return fragment in session.current_url()

    return _condition
