"""Exception hierarchy for the remote WebDriver client."""

from __future__ import annotations

from typing import Optional

NO_SUCH_ELEMENT = "no such element"
NO_SUCH_FRAME = "no such frame"
NO_SUCH_WINDOW = "no such window"
NO_SUCH_ALERT = "no such alert"
STALE_ELEMENT_REFERENCE = "stale element reference"
INVALID_SELECTOR = "invalid selector"
TIMEOUT = "timeout"
SCRIPT_TIMEOUT = "script timeout"
UNKNOWN_COMMAND = "unknown command"
INVALID_SESSION_ID = "invalid session id"


class WebDriverError(RuntimeError):
    """Base class for every failure raised by this package."""


class TransportError(WebDriverError):
    """Raised when the HTTP exchange itself fails."""


class ProtocolError(WebDriverError):
    """Raised when a reply cannot be interpreted as a protocol envelope."""


class WaitTimeoutError(WebDriverError):
    """Raised when a polled condition is not satisfied in time."""


class CommandError(WebDriverError):
    """A command rejected by the remote end.

    Both protocol dialects report failures through subclasses of this type, so
    callers can catch it once and inspect :attr:`short_message`.
    """

    def __init__(
        self,
        short_message: str,
        detail: str = "",
        *,
        http_status: Optional[int] = None,
    ) -> None:
        self.short_message = short_message
        self.detail = detail
        self.http_status = http_status
        super().__init__(self._render())

    def _render(self) -> str:
        if self.detail:
            return f"{self.short_message}: {self.detail}"
        return self.short_message

    def __str__(self) -> str:
        return self._render()


class LegacyError(CommandError):
    """Error reported through a numeric JSON Wire Protocol status."""

    def __init__(
        self,
        short_message: str,
        detail: str = "",
        *,
        legacy_code: int,
        http_status: Optional[int] = None,
    ) -> None:
        self.legacy_code = legacy_code
        super().__init__(short_message, detail, http_status=http_status)


class StructuredError(CommandError):
    """Error reported with the W3C ``error``/``message``/``stacktrace`` fields."""

    def __init__(
        self,
        error: str,
        message: str = "",
        *,
        stacktrace: str = "",
        http_status: Optional[int] = None,
    ) -> None:
        self.error = error
        self.stacktrace = stacktrace
        super().__init__(error, message, http_status=http_status)

    @property
    def message(self) -> str:
        return self.detail
