"""Stateful remote WebDriver session and its command dispatcher."""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from . import commands
from .capabilities import Capabilities, negotiate
from .commands import Command
from .dialect import Dialect, DialectKind, FrameTarget, TimeoutKind, dialect_for
from .element import (
    WebElement,
    decode_element,
    decode_elements,
    decode_result,
    encode_arguments,
)
from .errors import ProtocolError, WebDriverError
from .models import By, Cookie, LogMessage, LogType, ServerStatus
from .reply import ReplyEnvelope, decode_reply, parse_value
from .transport import Transport
from .version import BrowserVersion
from .wait import DEFAULT_WAIT_INTERVAL, DEFAULT_WAIT_TIMEOUT, Condition, wait_until

LOGGER = logging.getLogger(__name__)

DEFAULT_URL_PREFIX = "http://127.0.0.1:4444/wd/hub"


class Session:
    """A remote automation session.

    The session id is set once by :meth:`open` and cleared by :meth:`quit`; the
    dialect never changes after negotiation. A session is meant for one caller
    issuing commands sequentially.
    """

    def __init__(
        self,
        transport: Transport,
        url_prefix: str = DEFAULT_URL_PREFIX,
        *,
        session_id: str = "",
        capabilities: Optional[Mapping[str, Any]] = None,
        dialect: DialectKind = DialectKind.LEGACY,
        browser_name: str = "",
        browser_version: Optional[BrowserVersion] = None,
        wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
        wait_interval: float = DEFAULT_WAIT_INTERVAL,
        owns_transport: bool = False,
    ) -> None:
        self._transport = transport
        self._owns_transport = owns_transport
        self._url_prefix = url_prefix.rstrip("/")
        self._id = session_id
        self._capabilities: Capabilities = dict(capabilities or {})
        self._dialect = dialect
        self._protocol: Dialect = dialect_for(dialect)
        self._browser_name = browser_name
        self._browser_version = browser_version
        self._wait_timeout = wait_timeout
        self._wait_interval = wait_interval

    @classmethod
    def open(
        cls,
        capabilities: Optional[Mapping[str, Any]] = None,
        url_prefix: str = DEFAULT_URL_PREFIX,
        *,
        transport: Optional[Transport] = None,
        wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
        wait_interval: float = DEFAULT_WAIT_INTERVAL,
    ) -> "Session":
        """Negotiate a new session with the remote end at *url_prefix*."""

        owns_transport = transport is None
        if transport is None:
            transport = Transport()
        requested: Capabilities = dict(capabilities or {})
        try:
            negotiated = negotiate(transport, url_prefix, requested)
        except Exception:
            if owns_transport:
                transport.close()
            raise
        LOGGER.info(
            "Opened %s session %s (%s %s)",
            negotiated.dialect.value,
            negotiated.session_id,
            negotiated.browser_name or "unknown browser",
            negotiated.browser_version or "",
        )
        return cls(
            transport,
            url_prefix,
            session_id=negotiated.session_id,
            capabilities=requested,
            dialect=negotiated.dialect,
            browser_name=negotiated.browser_name,
            browser_version=negotiated.browser_version,
            wait_timeout=wait_timeout,
            wait_interval=wait_interval,
            owns_transport=owns_transport,
        )

    # Attributes ---------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def url_prefix(self) -> str:
        return self._url_prefix

    @property
    def capabilities(self) -> Capabilities:
        """Capabilities as requested by the caller."""

        return self._capabilities

    @property
    def dialect(self) -> DialectKind:
        return self._dialect

    @property
    def protocol(self) -> Dialect:
        return self._protocol

    @property
    def w3c(self) -> bool:
        return self._dialect is DialectKind.W3C

    @property
    def browser_name(self) -> str:
        return self._browser_name

    @property
    def browser_version(self) -> Optional[BrowserVersion]:
        return self._browser_version

    def __repr__(self) -> str:
        return f"Session(id={self._id!r}, dialect={self._dialect.value!r}, url_prefix={self._url_prefix!r})"

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.quit()

    # Dispatcher ---------------------------------------------------------

    def execute(
        self,
        command: Command,
        params: Optional[Mapping[str, Any]] = None,
        **path: str,
    ) -> ReplyEnvelope:
        """Send *command* and return the decoded reply envelope."""

        if command.needs_session:
            if not self._id:
                raise WebDriverError(f"no active session for {command.method} {command.template}")
            path = {"session_id": self._id, **path}
        url = self._url_prefix + command.path(**path)
        body: Optional[bytes] = None
        if params is not None:
            body = json.dumps(params).encode("utf-8")
        elif command.method == commands.POST:
            body = b"{}"
        reply = self._transport.execute(command.method, url, body)
        return decode_reply(reply.content, reply.status_code)

    def value_command(
        self,
        command: Command,
        params: Optional[Mapping[str, Any]] = None,
        **path: str,
    ) -> Any:
        return self.execute(command, params, **path).value

    def void_command(
        self,
        command: Command,
        params: Optional[Mapping[str, Any]] = None,
        **path: str,
    ) -> None:
        self.execute(command, params, **path)

    def string_command(self, command: Command, **path: str) -> str:
        value = self.value_command(command, **path)
        if not isinstance(value, str):
            raise ProtocolError(f"expected a string from {command.template}, got {value!r}")
        return value

    def strings_command(self, command: Command, **path: str) -> list[str]:
        value = self.value_command(command, **path)
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ProtocolError(f"expected a list of strings from {command.template}, got {value!r}")
        return value

    def bool_command(self, command: Command, **path: str) -> bool:
        value = self.value_command(command, **path)
        if not isinstance(value, bool):
            raise ProtocolError(f"expected a boolean from {command.template}, got {value!r}")
        return value

    def find(self, command: Command, by: Union[By, str], value: str, **path: str) -> WebElement:
        using, query = self._protocol.locator(_by_name(by), value)
        reply = self.value_command(command, {"using": using, "value": query}, **path)
        return decode_element(self, reply)

    def find_all(
        self, command: Command, by: Union[By, str], value: str, **path: str
    ) -> list[WebElement]:
        using, query = self._protocol.locator(_by_name(by), value)
        reply = self.value_command(command, {"using": using, "value": query}, **path)
        return decode_elements(self, reply)

    # Session lifecycle --------------------------------------------------

    def status(self) -> ServerStatus:
        return parse_value(ServerStatus, self.value_command(commands.STATUS) or {})

    def fetch_capabilities(self) -> Capabilities:
        """Return the capabilities the remote end reports for this session."""

        value = self.value_command(commands.GET_SESSION)
        if not isinstance(value, dict):
            raise ProtocolError(f"expected capabilities object, got {value!r}")
        nested = value.get("capabilities")
        return dict(nested) if isinstance(nested, dict) else dict(value)

    def switch_session(self, session_id: str) -> None:
        """Point this handle at another existing session of the same dialect."""

        self._id = session_id

    def quit(self) -> None:
        """Delete the remote session and close a transport created by :meth:`open`."""

        try:
            if self._id:
                self.void_command(commands.DELETE_SESSION)
                LOGGER.info("Closed session %s", self._id)
                self._id = ""
        finally:
            if self._owns_transport:
                self._transport.close()

    def set_async_script_timeout(self, seconds: float) -> None:
        self._set_timeout(TimeoutKind.SCRIPT, seconds)

    def set_implicit_wait_timeout(self, seconds: float) -> None:
        self._set_timeout(TimeoutKind.IMPLICIT, seconds)

    def set_page_load_timeout(self, seconds: float) -> None:
        self._set_timeout(TimeoutKind.PAGE_LOAD, seconds)

    def _set_timeout(self, kind: TimeoutKind, seconds: float) -> None:
        command, params = self._protocol.timeout_request(kind, int(seconds * 1000))
        self.void_command(command, params)

    # Navigation ---------------------------------------------------------

    def get(self, url: str) -> None:
        self.void_command(commands.NAVIGATE, {"url": url})

    def current_url(self) -> str:
        return self.string_command(commands.GET_URL)

    def forward(self) -> None:
        self.void_command(commands.FORWARD)

    def back(self) -> None:
        self.void_command(commands.BACK)

    def refresh(self) -> None:
        self.void_command(commands.REFRESH)

    def title(self) -> str:
        return self.string_command(commands.TITLE)

    def page_source(self) -> str:
        return self.string_command(commands.PAGE_SOURCE)

    # Elements -----------------------------------------------------------

    def find_element(self, by: Union[By, str], value: str) -> WebElement:
        return self.find(commands.FIND_ELEMENT, by, value)

    def find_elements(self, by: Union[By, str], value: str) -> list[WebElement]:
        return self.find_all(commands.FIND_ELEMENTS, by, value)

    def active_element(self) -> WebElement:
        return decode_element(self, self.value_command(self._protocol.active_element_command()))

    # Windows and frames -------------------------------------------------

    def current_window_handle(self) -> str:
        return self._protocol.current_window_handle(self)

    def window_handles(self) -> list[str]:
        return self._protocol.window_handles(self)

    def switch_window(self, name: str) -> None:
        self.void_command(commands.SWITCH_WINDOW, self._protocol.switch_window_params(name))

    def close(self) -> None:
        """Close the current window."""

        self.void_command(commands.CLOSE_WINDOW)

    def close_window(self, name: str) -> None:
        self._protocol.close_window(self, name)

    def maximize_window(self, name: str = "") -> None:
        self._protocol.maximize_window(self, name)

    def minimize_window(self, name: str = "") -> None:
        self._protocol.minimize_window(self, name)

    def resize_window(self, name: str, width: int, height: int) -> None:
        self._protocol.resize_window(self, name, width, height)

    def switch_frame(self, frame: FrameTarget) -> None:
        """Switch to a frame by element, index or id; ``None`` selects the top document."""

        if isinstance(frame, WebElement):
            frame_id: Any = frame.encode()
        elif isinstance(frame, str) and frame:
            frame_id = self._protocol.frame_id(self, frame)
        elif isinstance(frame, int) and not isinstance(frame, bool):
            frame_id = frame
        else:
            frame_id = None
        self.void_command(commands.SWITCH_FRAME, {"id": frame_id})

    def switch_to_parent_frame(self) -> None:
        self.void_command(commands.SWITCH_PARENT_FRAME)

    # Cookies ------------------------------------------------------------

    def get_cookies(self) -> list[Cookie]:
        value = self.value_command(commands.GET_COOKIES)
        if value is None:
            return []
        if not isinstance(value, list):
            raise ProtocolError(f"expected a list of cookies, got {value!r}")
        return [parse_value(Cookie, item) for item in value]

    def get_cookie(self, name: str) -> Cookie:
        return self._protocol.get_cookie(self, name)

    def add_cookie(self, cookie: Cookie) -> None:
        self.void_command(commands.ADD_COOKIE, {"cookie": cookie.to_wire()})

    def delete_cookie(self, name: str) -> None:
        self.void_command(commands.DELETE_COOKIE, name=name)

    def delete_all_cookies(self) -> None:
        self.void_command(commands.DELETE_COOKIES)

    # Keyboard -----------------------------------------------------------

    def key_down(self, keys: str) -> None:
        self._protocol.key_down(self, keys)

    def key_up(self, keys: str) -> None:
        self._protocol.key_up(self, keys)

    def send_keys(self, keys: str) -> None:
        """Type *keys* into whichever element has focus."""

        self._protocol.send_keys(self, keys)

    # Alerts -------------------------------------------------------------

    def dismiss_alert(self) -> None:
        self.void_command(self._protocol.alert_command("dismiss"))

    def accept_alert(self) -> None:
        self.void_command(self._protocol.alert_command("accept"))

    def alert_text(self) -> str:
        return self.string_command(self._protocol.alert_command("get_text"))

    def set_alert_text(self, text: str) -> None:
        self.void_command(self._protocol.alert_command("set_text"), {"text": text})

    # Scripts ------------------------------------------------------------

    def execute_script_raw(self, script: str, *args: Any) -> Any:
        """Run *script* synchronously and return the undecoded result."""

        return self._run_script(False, script, args)

    def execute_script(self, script: str, *args: Any) -> Any:
        return decode_result(self, self._run_script(False, script, args))

    def execute_script_async_raw(self, script: str, *args: Any) -> Any:
        return self._run_script(True, script, args)

    def execute_script_async(self, script: str, *args: Any) -> Any:
        return decode_result(self, self._run_script(True, script, args))

    def _run_script(self, asynchronous: bool, script: str, args: tuple[Any, ...]) -> Any:
        command = self._protocol.script_command(asynchronous)
        return self.value_command(command, {"script": script, "args": encode_arguments(list(args))})

    # Diagnostics --------------------------------------------------------

    def screenshot(self) -> bytes:
        return base64.b64decode(self.string_command(commands.SCREENSHOT))

    def log(self, log_type: Union[LogType, str]) -> list[LogMessage]:
        kind = log_type.value if isinstance(log_type, LogType) else log_type
        value = self.value_command(commands.LOG, {"type": kind})
        if not isinstance(value, list):
            raise ProtocolError(f"expected a list of log entries, got {value!r}")
        return [parse_value(LogMessage, item) for item in value]

    # Waiting ------------------------------------------------------------

    def wait(
        self,
        condition: Condition,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
    ) -> None:
        """Poll *condition* against this session until it holds."""

        wait_until(
            lambda: condition(self),
            self._wait_timeout if timeout is None else timeout,
            self._wait_interval if interval is None else interval,
        )


def _by_name(by: Union[By, str]) -> str:
    return by.value if isinstance(by, By) else by
