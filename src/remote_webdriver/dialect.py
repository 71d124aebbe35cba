"""Protocol dialect strategies.

The legacy JSON Wire Protocol and the W3C WebDriver protocol agree on most
endpoints. The handful of operations that differ live here, one strategy per
dialect, selected once when the session is opened.
"""

from __future__ import annotations

import enum
import json
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional, Union

from . import commands
from .commands import Command
from .element import WebElement
from .errors import CommandError, WebDriverError
from .models import By, Cookie, Point, Size
from .reply import parse_value

if TYPE_CHECKING:
    from .session import Session

DEFAULT_KEYBOARD = "default keyboard"

_SUBMIT_SCRIPT = (
    "var form = arguments[0];"
    "while (form.nodeName != 'FORM' && form.parentNode) { form = form.parentNode; }"
    "if (!form || form.nodeName != 'FORM') { throw Error('element is not in a form'); }"
    "var e = form.ownerDocument.createEvent('Event');"
    "e.initEvent('submit', true, true);"
    "if (form.dispatchEvent(e)) { HTMLFormElement.prototype.submit.call(form); }"
)
_SCROLL_INTO_VIEW_SCRIPT = "arguments[0].scrollIntoView(true);"


class DialectKind(str, enum.Enum):
    """Protocol generation spoken by the remote end."""

    LEGACY = "legacy"
    W3C = "w3c"


class TimeoutKind(str, enum.Enum):
    SCRIPT = "script"
    IMPLICIT = "implicit"
    PAGE_LOAD = "pageLoad"


FrameTarget = Union[None, int, str, WebElement]


class Dialect(ABC):
    """Operations whose wire form depends on the protocol generation."""

    kind: DialectKind

    @abstractmethod
    def current_window_handle(self, session: "Session") -> str:
        """Return the handle of the window that currently has focus."""

    @abstractmethod
    def window_handles(self, session: "Session") -> list[str]:
        """Return the handles of every open window."""

    @abstractmethod
    def switch_window_params(self, name: str) -> dict[str, Any]:
        """Return the payload that switches focus to *name*."""

    @abstractmethod
    def close_window(self, session: "Session", name: str) -> None:
        """Close the window called *name*."""

    @abstractmethod
    def maximize_window(self, session: "Session", name: str) -> None:
        """Maximize *name*, or the current window when empty."""

    @abstractmethod
    def minimize_window(self, session: "Session", name: str) -> None:
        """Minimize *name*, or the current window when empty."""

    @abstractmethod
    def resize_window(self, session: "Session", name: str, width: int, height: int) -> None:
        """Resize *name*, or the current window when empty."""

    @abstractmethod
    def key_down(self, session: "Session", keys: str) -> None:
        """Press every key in *keys* without releasing them."""

    @abstractmethod
    def key_up(self, session: "Session", keys: str) -> None:
        """Release every key in *keys*."""

    @abstractmethod
    def send_keys(self, session: "Session", keys: str) -> None:
        """Type *keys* into the focused element."""

    @abstractmethod
    def script_command(self, asynchronous: bool) -> Command:
        """Return the script execution endpoint."""

    @abstractmethod
    def alert_command(self, action: str) -> Command:
        """Return the endpoint for ``dismiss``, ``accept``, ``get_text`` or ``set_text``."""

    @abstractmethod
    def locator(self, by: str, value: str) -> tuple[str, str]:
        """Translate a locator into one the remote end understands."""

    @abstractmethod
    def timeout_request(self, kind: TimeoutKind, millis: int) -> tuple[Command, dict[str, Any]]:
        """Return the endpoint and payload that sets a timeout."""

    @abstractmethod
    def active_element_command(self) -> Command:
        """Return the endpoint reporting the focused element."""

    @abstractmethod
    def frame_id(self, session: "Session", frame: str) -> Any:
        """Return the ``id`` payload selecting the frame named *frame*."""

    @abstractmethod
    def element_location(self, session: "Session", element: WebElement) -> Point:
        """Return the element's position on the page."""

    @abstractmethod
    def element_location_in_view(self, session: "Session", element: WebElement) -> Point:
        """Scroll the element into view and return its position."""

    @abstractmethod
    def element_size(self, session: "Session", element: WebElement) -> Size:
        """Return the element's rendered size."""

    @abstractmethod
    def submit(self, session: "Session", element: WebElement) -> None:
        """Submit the form that contains *element*."""

    @abstractmethod
    def get_cookie(self, session: "Session", name: str) -> Cookie:
        """Return the cookie called *name*."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class LegacyDialect(Dialect):
    """JSON Wire Protocol: numeric statuses, windows addressed by name."""

    kind = DialectKind.LEGACY

    _ALERTS = {
        "dismiss": commands.LEGACY_DISMISS_ALERT,
        "accept": commands.LEGACY_ACCEPT_ALERT,
        "get_text": commands.LEGACY_GET_ALERT_TEXT,
        "set_text": commands.LEGACY_SET_ALERT_TEXT,
    }

    def current_window_handle(self, session: "Session") -> str:
        return session.string_command(commands.LEGACY_WINDOW_HANDLE)

    def window_handles(self, session: "Session") -> list[str]:
        return session.strings_command(commands.LEGACY_WINDOW_HANDLES)

    def switch_window_params(self, name: str) -> dict[str, Any]:
        return {"name": name}

    def close_window(self, session: "Session", name: str) -> None:
        session.void_command(commands.CLOSE_WINDOW, {"name": name})

    def maximize_window(self, session: "Session", name: str) -> None:
        session.void_command(commands.LEGACY_MAXIMIZE_WINDOW, name=name or "current")

    def minimize_window(self, session: "Session", name: str) -> None:
        raise WebDriverError("minimizing windows is not supported by the legacy protocol")

    def resize_window(self, session: "Session", name: str, width: int, height: int) -> None:
        session.void_command(
            commands.LEGACY_RESIZE_WINDOW,
            {"width": width, "height": height},
            name=name or "current",
        )

    def key_down(self, session: "Session", keys: str) -> None:
        # Modifier keys toggle on the legacy /keys endpoint.
        self.send_keys(session, keys)

    def key_up(self, session: "Session", keys: str) -> None:
        self.send_keys(session, keys)

    def send_keys(self, session: "Session", keys: str) -> None:
        session.void_command(commands.LEGACY_KEYS, {"value": list(keys)})

    def script_command(self, asynchronous: bool) -> Command:
        return commands.LEGACY_EXECUTE_ASYNC if asynchronous else commands.LEGACY_EXECUTE

    def alert_command(self, action: str) -> Command:
        return self._ALERTS[action]

    def locator(self, by: str, value: str) -> tuple[str, str]:
        return by, value

    def timeout_request(self, kind: TimeoutKind, millis: int) -> tuple[Command, dict[str, Any]]:
        if kind is TimeoutKind.SCRIPT:
            return commands.SET_ASYNC_SCRIPT_TIMEOUT, {"ms": millis}
        if kind is TimeoutKind.IMPLICIT:
            return commands.SET_IMPLICIT_WAIT, {"ms": millis}
        return commands.SET_TIMEOUTS, {"type": "page load", "ms": millis}

    def active_element_command(self) -> Command:
        return commands.ACTIVE_ELEMENT_POST

    def frame_id(self, session: "Session", frame: str) -> Any:
        return frame

    def element_location(self, session: "Session", element: WebElement) -> Point:
        value = session.value_command(commands.ELEMENT_LOCATION, element_id=element.id)
        return parse_value(Point, value)

    def element_location_in_view(self, session: "Session", element: WebElement) -> Point:
        value = session.value_command(commands.ELEMENT_LOCATION_IN_VIEW, element_id=element.id)
        return parse_value(Point, value)

    def element_size(self, session: "Session", element: WebElement) -> Size:
        value = session.value_command(commands.ELEMENT_SIZE, element_id=element.id)
        return parse_value(Size, value)

    def submit(self, session: "Session", element: WebElement) -> None:
        session.void_command(commands.ELEMENT_SUBMIT, element_id=element.id)

    def get_cookie(self, session: "Session", name: str) -> Cookie:
        for cookie in session.get_cookies():
            if cookie.name == name:
                return cookie
        raise CommandError("no such cookie", f"cookie {name!r} not found")


class W3CDialect(Dialect):
    """W3C WebDriver: structured errors, operations act on the current window."""

    kind = DialectKind.W3C

    _ALERTS = {
        "dismiss": commands.W3C_DISMISS_ALERT,
        "accept": commands.W3C_ACCEPT_ALERT,
        "get_text": commands.W3C_GET_ALERT_TEXT,
        "set_text": commands.W3C_SET_ALERT_TEXT,
    }

    def current_window_handle(self, session: "Session") -> str:
        return session.string_command(commands.W3C_WINDOW_HANDLE)

    def window_handles(self, session: "Session") -> list[str]:
        return session.strings_command(commands.W3C_WINDOW_HANDLES)

    def switch_window_params(self, name: str) -> dict[str, Any]:
        return {"handle": name}

    def close_window(self, session: "Session", name: str) -> None:
        with self._targeting(session, name):
            session.void_command(commands.CLOSE_WINDOW)

    def maximize_window(self, session: "Session", name: str) -> None:
        with self._targeting(session, name):
            session.void_command(commands.W3C_MAXIMIZE_WINDOW)

    def minimize_window(self, session: "Session", name: str) -> None:
        with self._targeting(session, name):
            session.void_command(commands.W3C_MINIMIZE_WINDOW)

    def resize_window(self, session: "Session", name: str, width: int, height: int) -> None:
        with self._targeting(session, name):
            session.void_command(commands.W3C_WINDOW_RECT, {"width": width, "height": height})

    def key_down(self, session: "Session", keys: str) -> None:
        self._perform_keys(session, [("keyDown", key) for key in keys])

    def key_up(self, session: "Session", keys: str) -> None:
        self._perform_keys(session, [("keyUp", key) for key in keys])

    def send_keys(self, session: "Session", keys: str) -> None:
        steps: list[tuple[str, str]] = []
        for key in keys:
            steps.append(("keyDown", key))
            steps.append(("keyUp", key))
        self._perform_keys(session, steps)

    def script_command(self, asynchronous: bool) -> Command:
        return commands.W3C_EXECUTE_ASYNC if asynchronous else commands.W3C_EXECUTE

    def alert_command(self, action: str) -> Command:
        return self._ALERTS[action]

    def locator(self, by: str, value: str) -> tuple[str, str]:
        # Only CSS, link text, tag name and XPath strategies exist in W3C.
        if by == By.ID.value:
            return By.CSS_SELECTOR.value, f"#{value}"
        if by == By.NAME.value:
            return By.CSS_SELECTOR.value, f"input[name={json.dumps(value)}]"
        return by, value

    def timeout_request(self, kind: TimeoutKind, millis: int) -> tuple[Command, dict[str, Any]]:
        return commands.SET_TIMEOUTS, {kind.value: millis}

    def active_element_command(self) -> Command:
        return commands.ACTIVE_ELEMENT_GET

    def frame_id(self, session: "Session", frame: str) -> Any:
        return session.find_element(By.ID, frame).encode()

    def element_location(self, session: "Session", element: WebElement) -> Point:
        return element.rect().location

    def element_location_in_view(self, session: "Session", element: WebElement) -> Point:
        session.execute_script(_SCROLL_INTO_VIEW_SCRIPT, element)
        return element.rect().location

    def element_size(self, session: "Session", element: WebElement) -> Size:
        return element.rect().size

    def submit(self, session: "Session", element: WebElement) -> None:
        session.execute_script(_SUBMIT_SCRIPT, element)

    def get_cookie(self, session: "Session", name: str) -> Cookie:
        value = session.value_command(commands.GET_COOKIE, name=name)
        return parse_value(Cookie, value)

    @staticmethod
    def _perform_keys(session: "Session", steps: list[tuple[str, str]]) -> None:
        actions = [{"type": kind, "value": key} for kind, key in steps]
        session.void_command(
            commands.W3C_ACTIONS,
            {"actions": [{"type": "key", "id": DEFAULT_KEYBOARD, "actions": actions}]},
        )

    @staticmethod
    @contextmanager
    def _targeting(session: "Session", name: str) -> Iterator[None]:
        """Give *name* focus for the duration of the block, then restore focus."""

        if not name:
            yield
            return
        current = session.current_window_handle()
        if name == current:
            yield
            return
        session.switch_window(name)
        try:
            yield
        finally:
            session.switch_window(current)


_DIALECTS: dict[DialectKind, Dialect] = {
    DialectKind.LEGACY: LegacyDialect(),
    DialectKind.W3C: W3CDialect(),
}


def dialect_for(kind: Optional[DialectKind]) -> Dialect:
    return _DIALECTS[kind or DialectKind.LEGACY]
