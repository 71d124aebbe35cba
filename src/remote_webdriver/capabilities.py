"""Session creation and protocol dialect negotiation."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from . import commands
from .dialect import DialectKind
from .errors import CommandError, ProtocolError
from .reply import decode_reply
from .transport import Transport
from .version import BrowserVersion, parse_version

LOGGER = logging.getLogger(__name__)

Capabilities = dict[str, Any]

W3C_CAPABILITY_NAMES = frozenset(
    {
        "acceptInsecureCerts",
        "browserName",
        "browserVersion",
        "platformName",
        "pageLoadStrategy",
        "proxy",
        "setWindowRect",
        "timeouts",
        "unhandledPromptBehavior",
        "strictFileInteractability",
    }
)
LEGACY_FIREFOX_PROFILE = "firefox_profile"
FIREFOX_OPTIONS = "moz:firefoxOptions"


@dataclass
class NegotiatedSession:
    """Outcome of a successful session-open exchange."""

    session_id: str
    dialect: DialectKind
    capabilities: Capabilities = field(default_factory=dict)
    browser_name: str = ""
    browser_version: Optional[BrowserVersion] = None


def w3c_capabilities(caps: Mapping[str, Any]) -> dict[str, Any]:
    """Build the nested ``alwaysMatch`` structure from flat capabilities.

    Only standard names and ``vendor:name`` extensions survive. A legacy Firefox
    profile string moves into the Firefox options object.
    """

    always_match: dict[str, Any] = {}
    for name, value in caps.items():
        if name in W3C_CAPABILITY_NAMES or ":" in name:
            always_match[name] = copy.deepcopy(value)

    profile = caps.get(LEGACY_FIREFOX_PROFILE)
    if isinstance(profile, str) and profile:
        options = dict(always_match.get(FIREFOX_OPTIONS) or {})
        options["profile"] = profile
        always_match[FIREFOX_OPTIONS] = options
    return {"alwaysMatch": always_match}


def session_request_bodies(caps: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Return the request shapes to try, most standards-compliant first."""

    legacy = dict(caps)
    nested = w3c_capabilities(caps)
    return [
        {"capabilities": nested, "desiredCapabilities": legacy},
        {"capabilities": nested},
        {"desiredCapabilities": legacy},
    ]


def negotiate(
    transport: Transport,
    url_prefix: str,
    caps: Mapping[str, Any],
) -> NegotiatedSession:
    """Open a session, trying each request shape until one is accepted.

    Rejected or malformed replies move on to the next shape; transport failures
    are raised straight away.
    """

    url = url_prefix.rstrip("/") + commands.NEW_SESSION.path()
    bodies = session_request_bodies(caps)
    last_error: Exception = ProtocolError("no session request shapes to try")
    for attempt, body in enumerate(bodies, start=1):
        LOGGER.debug("Requesting new session (shape %d of %d)", attempt, len(bodies))
        reply = transport.execute(
            commands.NEW_SESSION.method, url, json.dumps(body).encode("utf-8")
        )
        try:
            envelope = decode_reply(reply.content, reply.status_code)
            return _interpret(envelope.session_id, envelope.value, caps)
        except (CommandError, ProtocolError) as exc:
            LOGGER.debug("Session shape %d rejected: %s", attempt, exc)
            last_error = exc
    raise last_error


def _interpret(
    top_level_id: Optional[str],
    value: Any,
    requested: Mapping[str, Any],
) -> NegotiatedSession:
    payload = value if isinstance(value, dict) else {}
    nested = payload.get("capabilities")
    if isinstance(nested, dict):
        dialect = DialectKind.W3C
        returned: dict[str, Any] = nested
    else:
        dialect = DialectKind.LEGACY
        returned = payload

    session_id = payload.get("sessionId") or top_level_id
    if not isinstance(session_id, str) or not session_id:
        raise ProtocolError(f"new session reply carries no session id: {value!r}")

    version_text = returned.get("browserVersion") or returned.get("version")
    browser_version: Optional[BrowserVersion] = None
    if isinstance(version_text, str) and version_text:
        try:
            browser_version = parse_version(version_text)
        except ValueError:
            LOGGER.warning("Unable to parse browser version %r", version_text)

    browser_name = returned.get("browserName") or requested.get("browserName") or ""
    return NegotiatedSession(
        session_id=session_id,
        dialect=dialect,
        capabilities=dict(returned),
        browser_name=str(browser_name),
        browser_version=browser_version,
    )
