"""Catalogue of protocol commands as (HTTP verb, URL template) descriptors."""

from __future__ import annotations

import string
from dataclasses import dataclass
from urllib.parse import quote

GET = "GET"
POST = "POST"
DELETE = "DELETE"


@dataclass(frozen=True)
class Command:
    """Stateless description of one protocol endpoint."""

    method: str
    template: str

    @property
    def placeholders(self) -> frozenset[str]:
        return frozenset(
            name for _, name, _, _ in string.Formatter().parse(self.template) if name
        )

    @property
    def needs_session(self) -> bool:
        return "session_id" in self.placeholders

    def path(self, **params: str) -> str:
        """Render the template, percent-quoting every substituted value."""

        missing = self.placeholders - params.keys()
        if missing:
            raise KeyError(f"missing URL parameters for {self.template}: {sorted(missing)}")
        quoted = {key: quote(str(value), safe="") for key, value in params.items()}
        return self.template.format(**quoted)


STATUS = Command(GET, "/status")
NEW_SESSION = Command(POST, "/session")
GET_SESSION = Command(GET, "/session/{session_id}")
DELETE_SESSION = Command(DELETE, "/session/{session_id}")

SET_TIMEOUTS = Command(POST, "/session/{session_id}/timeouts")
SET_ASYNC_SCRIPT_TIMEOUT = Command(POST, "/session/{session_id}/timeouts/async_script")
SET_IMPLICIT_WAIT = Command(POST, "/session/{session_id}/timeouts/implicit_wait")

GET_URL = Command(GET, "/session/{session_id}/url")
NAVIGATE = Command(POST, "/session/{session_id}/url")
FORWARD = Command(POST, "/session/{session_id}/forward")
BACK = Command(POST, "/session/{session_id}/back")
REFRESH = Command(POST, "/session/{session_id}/refresh")
TITLE = Command(GET, "/session/{session_id}/title")
PAGE_SOURCE = Command(GET, "/session/{session_id}/source")
SCREENSHOT = Command(GET, "/session/{session_id}/screenshot")
LOG = Command(POST, "/session/{session_id}/log")

FIND_ELEMENT = Command(POST, "/session/{session_id}/element")
FIND_ELEMENTS = Command(POST, "/session/{session_id}/elements")
ACTIVE_ELEMENT_GET = Command(GET, "/session/{session_id}/element/active")
ACTIVE_ELEMENT_POST = Command(POST, "/session/{session_id}/element/active")
FIND_CHILD_ELEMENT = Command(POST, "/session/{session_id}/element/{element_id}/element")
FIND_CHILD_ELEMENTS = Command(POST, "/session/{session_id}/element/{element_id}/elements")

ELEMENT_CLICK = Command(POST, "/session/{session_id}/element/{element_id}/click")
ELEMENT_CLEAR = Command(POST, "/session/{session_id}/element/{element_id}/clear")
ELEMENT_SUBMIT = Command(POST, "/session/{session_id}/element/{element_id}/submit")
ELEMENT_TEXT = Command(GET, "/session/{session_id}/element/{element_id}/text")
ELEMENT_TAG_NAME = Command(GET, "/session/{session_id}/element/{element_id}/name")
ELEMENT_SEND_KEYS = Command(POST, "/session/{session_id}/element/{element_id}/value")
ELEMENT_ATTRIBUTE = Command(GET, "/session/{session_id}/element/{element_id}/attribute/{name}")
ELEMENT_PROPERTY = Command(GET, "/session/{session_id}/element/{element_id}/property/{name}")
ELEMENT_CSS = Command(GET, "/session/{session_id}/element/{element_id}/css/{name}")
ELEMENT_SELECTED = Command(GET, "/session/{session_id}/element/{element_id}/selected")
ELEMENT_ENABLED = Command(GET, "/session/{session_id}/element/{element_id}/enabled")
ELEMENT_DISPLAYED = Command(GET, "/session/{session_id}/element/{element_id}/displayed")
ELEMENT_RECT = Command(GET, "/session/{session_id}/element/{element_id}/rect")
ELEMENT_LOCATION = Command(GET, "/session/{session_id}/element/{element_id}/location")
ELEMENT_LOCATION_IN_VIEW = Command(
    GET, "/session/{session_id}/element/{element_id}/location_in_view"
)
ELEMENT_SIZE = Command(GET, "/session/{session_id}/element/{element_id}/size")
ELEMENT_SCREENSHOT = Command(GET, "/session/{session_id}/element/{element_id}/screenshot")

GET_COOKIES = Command(GET, "/session/{session_id}/cookie")
GET_COOKIE = Command(GET, "/session/{session_id}/cookie/{name}")
ADD_COOKIE = Command(POST, "/session/{session_id}/cookie")
DELETE_COOKIES = Command(DELETE, "/session/{session_id}/cookie")
DELETE_COOKIE = Command(DELETE, "/session/{session_id}/cookie/{name}")

LEGACY_EXECUTE = Command(POST, "/session/{session_id}/execute")
LEGACY_EXECUTE_ASYNC = Command(POST, "/session/{session_id}/execute_async")
W3C_EXECUTE = Command(POST, "/session/{session_id}/execute/sync")
W3C_EXECUTE_ASYNC = Command(POST, "/session/{session_id}/execute/async")

LEGACY_DISMISS_ALERT = Command(POST, "/session/{session_id}/dismiss_alert")
LEGACY_ACCEPT_ALERT = Command(POST, "/session/{session_id}/accept_alert")
LEGACY_GET_ALERT_TEXT = Command(GET, "/session/{session_id}/alert_text")
LEGACY_SET_ALERT_TEXT = Command(POST, "/session/{session_id}/alert_text")
W3C_DISMISS_ALERT = Command(POST, "/session/{session_id}/alert/dismiss")
W3C_ACCEPT_ALERT = Command(POST, "/session/{session_id}/alert/accept")
W3C_GET_ALERT_TEXT = Command(GET, "/session/{session_id}/alert/text")
W3C_SET_ALERT_TEXT = Command(POST, "/session/{session_id}/alert/text")

LEGACY_WINDOW_HANDLE = Command(GET, "/session/{session_id}/window_handle")
LEGACY_WINDOW_HANDLES = Command(GET, "/session/{session_id}/window_handles")
LEGACY_MAXIMIZE_WINDOW = Command(POST, "/session/{session_id}/window/{name}/maximize")
LEGACY_RESIZE_WINDOW = Command(POST, "/session/{session_id}/window/{name}/size")
W3C_WINDOW_HANDLE = Command(GET, "/session/{session_id}/window")
W3C_WINDOW_HANDLES = Command(GET, "/session/{session_id}/window/handles")
W3C_MAXIMIZE_WINDOW = Command(POST, "/session/{session_id}/window/maximize")
W3C_MINIMIZE_WINDOW = Command(POST, "/session/{session_id}/window/minimize")
W3C_WINDOW_RECT = Command(POST, "/session/{session_id}/window/rect")
SWITCH_WINDOW = Command(POST, "/session/{session_id}/window")
CLOSE_WINDOW = Command(DELETE, "/session/{session_id}/window")
SWITCH_FRAME = Command(POST, "/session/{session_id}/frame")
SWITCH_PARENT_FRAME = Command(POST, "/session/{session_id}/frame/parent")

LEGACY_KEYS = Command(POST, "/session/{session_id}/keys")
W3C_ACTIONS = Command(POST, "/session/{session_id}/actions")
