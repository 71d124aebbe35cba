"""HTTP transport used to exchange JSON envelopes with the remote end."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .errors import ProtocolError, TransportError

LOGGER = logging.getLogger(__name__)

JSON_TYPE = "application/json"
_REDIRECT_CODES = {301, 302, 303, 307, 308}


@dataclass
class RawReply:
    """Undecoded reply body together with its HTTP status."""

    content: bytes
    status_code: int
    status_line: str


class Transport:
    """Issue JSON requests against a WebDriver endpoint.

    Redirects are followed by hand so that the ``Accept`` header is sent on
    every hop, including the GET that replaces a redirected POST.
    """

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        debug: bool = False,
        max_redirects: int = 10,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._timeout = timeout
        self._debug = debug
        self._max_redirects = max_redirects

    @property
    def debug(self) -> bool:
        return self._debug

    def execute(self, method: str, url: str, body: Optional[bytes] = None) -> RawReply:
        """Send a request and return the raw JSON reply."""

        if self._debug:
            LOGGER.debug("-> %s %s\n%s", method, redact_url(url), _pretty(body))
        response = self._send(method, url, body)
        for _ in range(self._max_redirects):
            if response.status_code not in _REDIRECT_CODES:
                break
            method, url, body = _redirect_target(response, method, body)
            if self._debug:
                LOGGER.debug("-> redirected %s %s", method, redact_url(url))
            response = self._send(method, url, body)
        else:
            if response.status_code in _REDIRECT_CODES:
                raise TransportError(f"stopped after {self._max_redirects} redirects")

        status_line = _status_line(response)
        content = response.content.replace(b"\x00", b" ")
        if self._debug:
            LOGGER.debug("<- %s [%s]\n%s", status_line, response.headers.get("content-type"), _pretty(content))

        content_type = response.headers.get("content-type")
        if not content_type or _media_type(content_type) != JSON_TYPE:
            raise ProtocolError(
                f"unexpected reply content type {content_type!r} ({status_line})"
            )
        return RawReply(content=content, status_code=response.status_code, status_line=status_line)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(self, method: str, url: str, body: Optional[bytes]) -> httpx.Response:
        headers = {"Accept": JSON_TYPE}
        if body is not None:
            headers["Content-Type"] = f"{JSON_TYPE};charset=utf-8"
        try:
            return self._client.request(
                method,
                url,
                content=body,
                headers=headers,
                follow_redirects=False,
                timeout=self._timeout,
            )
        except httpx.TransportError as exc:
            raise TransportError(f"{method} {redact_url(url)} failed: {exc}") from exc


def redact_url(url: str) -> str:
    """Replace any password embedded in *url* with a placeholder."""

    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return ""
    if parsed.password:
        username = parsed.userinfo.split(b":", 1)[0]
        parsed = parsed.copy_with(userinfo=username + b":__password__")
    return str(parsed)


def _redirect_target(
    response: httpx.Response, method: str, body: Optional[bytes]
) -> tuple[str, str, Optional[bytes]]:
    location = response.headers.get("location")
    if not location:
        raise TransportError(f"redirect without location ({_status_line(response)})")
    url = str(response.url.join(location))
    if response.status_code in (307, 308):
        return method, url, body
    if response.status_code == 303 or method == "POST":
        return "GET", url, None
    return method, url, body


def _status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _pretty(payload: Optional[bytes]) -> str:
    if not payload:
        return ""
    try:
        return json.dumps(json.loads(payload), indent=2)
    except ValueError:
        return payload.decode("utf-8", errors="replace")
