from __future__ import annotations

import itertools
import json
import re
from typing import Any, Callable, Optional

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from remote_webdriver.dialect import DialectKind
from remote_webdriver.element import LEGACY_ELEMENT_KEY, W3C_ELEMENT_KEY
from remote_webdriver.session import Session
from remote_webdriver.transport import Transport

REMOTE_URL = "http://testserver"
HOME_URL = "http://example.test/"
OTHER_URL = "http://example.test/other"

PAGES: dict[str, dict[str, Any]] = {
    HOME_URL: {
        "title": "Example Domain",
        "elements": [
            {"id": "heading", "name": "", "tag": "h1", "text": "Example Domain"},
            {"id": "greeting", "name": "greeting", "tag": "input", "text": "Hello from the example page"},
            {"id": "frame", "name": "frame", "tag": "iframe", "text": ""},
        ],
    },
    OTHER_URL: {"title": "Other page", "elements": []},
}

# error -> (legacy status code, W3C HTTP status)
ERROR_CODES = {
    "no such element": (7, 404),
    "no such window": (23, 404),
    "stale element reference": (10, 404),
    "invalid session id": (6, 404),
    "unknown command": (9, 404),
    "invalid argument": (13, 400),
    "session not created": (33, 500),
    "no such cookie": (13, 404),
}


class Rejected(Exception):
    def __init__(self, error: str, message: str) -> None:
        super().__init__(message)
        self.error = error
        self.message = message


class FakeRemoteEnd:
    """In-process remote end speaking one protocol dialect."""

    def __init__(self, dialect: DialectKind, *, browser_version: str = "75.0.3770.90") -> None:
        self.dialect = dialect
        self.browser_version = browser_version
        self.requests: list[tuple[str, str, Any]] = []
        self.session_bodies: list[dict[str, Any]] = []
        self.sessions: dict[str, dict[str, Any]] = {}
        self._ids = itertools.count(1)
        self.app = self._build_app()

    @property
    def w3c(self) -> bool:
        return self.dialect is DialectKind.W3C

    def client(self) -> TestClient:
        return TestClient(self.app)

    def calls(self, method: str, suffix: str) -> list[Any]:
        return [body for m, path, body in self.requests if m == method and path.endswith(suffix)]

    # Reply helpers ------------------------------------------------------

    def ok(self, value: Any, sid: Optional[str] = None) -> JSONResponse:
        if self.w3c:
            return JSONResponse({"value": value})
        return JSONResponse({"sessionId": sid, "status": 0, "value": value})

    def fail(self, error: str, message: str) -> JSONResponse:
        code, http_status = ERROR_CODES.get(error, (13, 500))
        if self.w3c:
            return JSONResponse(
                {"value": {"error": error, "message": message, "stacktrace": "at fake"}},
                status_code=http_status,
            )
        return JSONResponse({"status": code, "value": {"message": message}}, status_code=500)

    def element_ref(self, state: dict[str, Any], element: dict[str, Any]) -> dict[str, str]:
        element_id = f"el-{element['id']}"
        state["elements"][element_id] = element
        key = W3C_ELEMENT_KEY if self.w3c else LEGACY_ELEMENT_KEY
        return {key: element_id}

    async def read(self, request: Request) -> Any:
        raw = await request.body()
        body = json.loads(raw) if raw else None
        self.requests.append((request.method, request.url.path, body))
        return body

    def state(self, sid: str) -> dict[str, Any]:
        if sid not in self.sessions:
            raise Rejected("invalid session id", f"no session {sid}")
        return self.sessions[sid]

    def element(self, sid: str, eid: str) -> dict[str, Any]:
        state = self.state(sid)
        if eid not in state["elements"]:
            raise Rejected("stale element reference", f"unknown element {eid}")
        return state["elements"][eid]

    def match(self, using: str, value: str, elements: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if using == "css selector":
            if value.startswith("#"):
                return [e for e in elements if e["id"] == value[1:]]
            named = re.fullmatch(r'input\[name="(.*)"\]', value)
            if named:
                return [e for e in elements if e["tag"] == "input" and e["name"] == named.group(1)]
            return [e for e in elements if e["tag"] == value]
        if using == "tag name":
            return [e for e in elements if e["tag"] == value]
        if not self.w3c and using == "id":
            return [e for e in elements if e["id"] == value]
        if not self.w3c and using == "name":
            return [e for e in elements if e["name"] == value]
        raise Rejected("invalid argument", f"unsupported locator strategy {using!r}")

    # Application --------------------------------------------------------

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        remote = self

        @app.exception_handler(Rejected)
        async def _rejected(request: Request, exc: Rejected) -> JSONResponse:
            return remote.fail(exc.error, exc.message)

        @app.exception_handler(StarletteHTTPException)
        async def _unknown(request: Request, exc: StarletteHTTPException) -> JSONResponse:
            return remote.fail("unknown command", f"{request.method} {request.url.path}")

        @app.get("/status")
        async def status(request: Request) -> JSONResponse:
            await remote.read(request)
            if remote.w3c:
                return remote.ok({"ready": True, "message": "ready to create sessions"})
            return remote.ok({"build": {"version": "3.141.59"}, "os": {"name": "Linux"}})

        @app.post("/session")
        async def new_session(request: Request) -> JSONResponse:
            body = await remote.read(request) or {}
            remote.session_bodies.append(body)
            if remote.w3c:
                caps = body.get("capabilities")
                if not isinstance(caps, dict):
                    raise Rejected("session not created", "missing capabilities")
                requested = caps.get("alwaysMatch", {})
            else:
                if "capabilities" in body:
                    raise Rejected("unknown error", "unrecognised field 'capabilities'")
                requested = body.get("desiredCapabilities") or {}
            sid = f"session-{next(remote._ids)}"
            remote.sessions[sid] = {
                "url": "about:blank",
                "cookies": [],
                "elements": {},
                "windows": ["window-1", "window-2"],
                "current": "window-1",
                "maximized": [],
                "requested": requested,
            }
            name = requested.get("browserName", "chrome")
            if remote.w3c:
                return JSONResponse(
                    {
                        "value": {
                            "sessionId": sid,
                            "capabilities": {"browserName": name, "browserVersion": remote.browser_version},
                        }
                    }
                )
            return JSONResponse(
                {"sessionId": sid, "status": 0, "value": {"browserName": name, "version": remote.browser_version}}
            )

        @app.delete("/session/{sid}")
        async def delete_session(sid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            remote.state(sid)
            del remote.sessions[sid]
            return remote.ok(None, sid)

        @app.post("/session/{sid}/url")
        async def navigate(sid: str, request: Request) -> JSONResponse:
            body = await remote.read(request)
            state = remote.state(sid)
            state["url"] = body["url"]
            state["elements"] = {}
            return remote.ok(None, sid)

        @app.get("/session/{sid}/url")
        async def current_url(sid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            return remote.ok(remote.state(sid)["url"], sid)

        @app.get("/session/{sid}/title")
        async def title(sid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            page = PAGES.get(remote.state(sid)["url"], {"title": ""})
            return remote.ok(page["title"], sid)

        @app.post("/session/{sid}/element")
        async def find_element(sid: str, request: Request) -> JSONResponse:
            body = await remote.read(request)
            state = remote.state(sid)
            elements = PAGES.get(state["url"], {"elements": []})["elements"]
            found = remote.match(body["using"], body["value"], elements)
            if not found:
                raise Rejected("no such element", f"no element matches {body['value']!r}")
            return remote.ok(remote.element_ref(state, found[0]), sid)

        @app.post("/session/{sid}/elements")
        async def find_elements(sid: str, request: Request) -> JSONResponse:
            body = await remote.read(request)
            state = remote.state(sid)
            elements = PAGES.get(state["url"], {"elements": []})["elements"]
            found = remote.match(body["using"], body["value"], elements)
            return remote.ok([remote.element_ref(state, e) for e in found], sid)

        @app.get("/session/{sid}/element/{eid}/text")
        async def element_text(sid: str, eid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            return remote.ok(remote.element(sid, eid)["text"], sid)

        @app.get("/session/{sid}/element/{eid}/name")
        async def element_tag(sid: str, eid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            return remote.ok(remote.element(sid, eid)["tag"], sid)

        @app.post("/session/{sid}/element/{eid}/click")
        async def element_click(sid: str, eid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            remote.element(sid, eid)
            return remote.ok(None, sid)

        @app.post("/session/{sid}/element/{eid}/value")
        async def element_send_keys(sid: str, eid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            remote.element(sid, eid)
            return remote.ok(None, sid)

        @app.get("/session/{sid}/element/{eid}/rect")
        async def element_rect(sid: str, eid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            remote.element(sid, eid)
            return remote.ok({"x": 8, "y": 21.5, "width": 300, "height": 40}, sid)

        @app.get("/session/{sid}/element/{eid}/location")
        async def element_location(sid: str, eid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            remote.element(sid, eid)
            return remote.ok({"x": 8, "y": 21.5}, sid)

        @app.get("/session/{sid}/element/{eid}/size")
        async def element_size(sid: str, eid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            remote.element(sid, eid)
            return remote.ok({"width": 300, "height": 40}, sid)

        @app.get("/session/{sid}/cookie")
        async def get_cookies(sid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            return remote.ok(remote.state(sid)["cookies"], sid)

        @app.get("/session/{sid}/cookie/{name}")
        async def get_cookie(sid: str, name: str, request: Request) -> JSONResponse:
            await remote.read(request)
            if not remote.w3c:
                raise Rejected("unknown command", "single cookie lookup is a W3C command")
            for cookie in remote.state(sid)["cookies"]:
                if cookie["name"] == name:
                    return remote.ok(cookie, sid)
            raise Rejected("no such cookie", f"no cookie named {name}")

        @app.post("/session/{sid}/cookie")
        async def add_cookie(sid: str, request: Request) -> JSONResponse:
            body = await remote.read(request)
            cookie = dict(body["cookie"])
            cookie.setdefault("domain", "example.test")
            cookie.setdefault("path", "/")
            if "expiry" in cookie and not remote.w3c:
                cookie["expiry"] = float(cookie["expiry"])
            state = remote.state(sid)
            state["cookies"] = [c for c in state["cookies"] if c["name"] != cookie["name"]]
            state["cookies"].append(cookie)
            return remote.ok(None, sid)

        @app.delete("/session/{sid}/cookie/{name}")
        async def delete_cookie(sid: str, name: str, request: Request) -> JSONResponse:
            await remote.read(request)
            state = remote.state(sid)
            state["cookies"] = [c for c in state["cookies"] if c["name"] != name]
            return remote.ok(None, sid)

        @app.delete("/session/{sid}/cookie")
        async def delete_cookies(sid: str, request: Request) -> JSONResponse:
            await remote.read(request)
            remote.state(sid)["cookies"] = []
            return remote.ok(None, sid)

        def _switch(sid: str, handle: Optional[str]) -> JSONResponse:
            state = remote.state(sid)
            if handle not in state["windows"]:
                raise Rejected("no such window", f"no window {handle}")
            state["current"] = handle
            return remote.ok(None, sid)

        @app.post("/session/{sid}/window")
        async def switch_window(sid: str, request: Request) -> JSONResponse:
            body = await remote.read(request) or {}
            return _switch(sid, body.get("handle") if remote.w3c else body.get("name"))

        if remote.w3c:

            @app.get("/session/{sid}/window")
            async def window_handle(sid: str, request: Request) -> JSONResponse:
                await remote.read(request)
                return remote.ok(remote.state(sid)["current"], sid)

            @app.get("/session/{sid}/window/handles")
            async def window_handles(sid: str, request: Request) -> JSONResponse:
                await remote.read(request)
                return remote.ok(remote.state(sid)["windows"], sid)

            @app.post("/session/{sid}/window/maximize")
            async def maximize(sid: str, request: Request) -> JSONResponse:
                await remote.read(request)
                state = remote.state(sid)
                state["maximized"].append(state["current"])
                return remote.ok({"x": 0, "y": 0, "width": 1920, "height": 1080}, sid)

            @app.post("/session/{sid}/execute/sync")
            async def execute(sid: str, request: Request) -> JSONResponse:
                body = await remote.read(request)
                remote.state(sid)
                return remote.ok(_run_script(body), sid)

            @app.post("/session/{sid}/actions")
            async def actions(sid: str, request: Request) -> JSONResponse:
                await remote.read(request)
                return remote.ok(None, sid)

        else:

            @app.get("/session/{sid}/window_handle")
            async def legacy_window_handle(sid: str, request: Request) -> JSONResponse:
                await remote.read(request)
                return remote.ok(remote.state(sid)["current"], sid)

            @app.get("/session/{sid}/window_handles")
            async def legacy_window_handles(sid: str, request: Request) -> JSONResponse:
                await remote.read(request)
                return remote.ok(remote.state(sid)["windows"], sid)

            @app.post("/session/{sid}/window/{name}/maximize")
            async def legacy_maximize(sid: str, name: str, request: Request) -> JSONResponse:
                await remote.read(request)
                state = remote.state(sid)
                state["maximized"].append(state["current"] if name == "current" else name)
                return remote.ok(None, sid)

            @app.post("/session/{sid}/execute")
            async def legacy_execute(sid: str, request: Request) -> JSONResponse:
                body = await remote.read(request)
                remote.state(sid)
                return remote.ok(_run_script(body), sid)

            @app.post("/session/{sid}/keys")
            async def legacy_keys(sid: str, request: Request) -> JSONResponse:
                await remote.read(request)
                return remote.ok(None, sid)

        return app


def _run_script(body: dict[str, Any]) -> Any:
    args = body.get("args") or []
    if body["script"] == "return arguments[0]":
        return args[0]
    if body["script"] == "return arguments.length":
        return len(args)
    if body["script"] == "return document.title":
        return "Example Domain"
    return None


class Recorder:
    """Records requests and answers each one from a table of canned values."""

    def __init__(self, dialect: DialectKind, session_id: str = "s1") -> None:
        self.dialect = dialect
        self.session_id = session_id
        self.requests: list[tuple[str, str, Any]] = []
        self.replies: dict[tuple[str, str], Any] = {}

    def reply(self, method: str, path: str, value: Any) -> None:
        """Answer *method* on *path* (relative to the session) with *value*.

        A callable value is called with the decoded request body.
        """

        self.replies[(method, path)] = value

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        path = request.url.path.removeprefix(f"/session/{self.session_id}")
        self.requests.append((request.method, path, body))
        value = self.replies.get((request.method, path))
        if callable(value):
            value = value(body)
        if self.dialect is DialectKind.W3C:
            return httpx.Response(200, json={"value": value})
        return httpx.Response(200, json={"sessionId": self.session_id, "status": 0, "value": value})

    def session(self, session_id: Optional[str] = None) -> Session:
        transport = Transport(client=httpx.Client(transport=httpx.MockTransport(self.handler)))
        return Session(
            transport,
            REMOTE_URL,
            session_id=self.session_id if session_id is None else session_id,
            dialect=self.dialect,
        )

    @property
    def last(self) -> tuple[str, str, Any]:
        return self.requests[-1]


def connect(remote: FakeRemoteEnd, capabilities: Optional[dict[str, Any]] = None) -> Session:
    transport = Transport(client=remote.client())
    return Session.open(capabilities or {"browserName": "chrome"}, REMOTE_URL, transport=transport)


@pytest.fixture
def w3c_remote() -> FakeRemoteEnd:
    return FakeRemoteEnd(DialectKind.W3C)


@pytest.fixture
def legacy_remote() -> FakeRemoteEnd:
    return FakeRemoteEnd(DialectKind.LEGACY)


@pytest.fixture(params=[DialectKind.LEGACY, DialectKind.W3C], ids=["legacy", "w3c"])
def remote(request: pytest.FixtureRequest) -> FakeRemoteEnd:
    return FakeRemoteEnd(request.param)


@pytest.fixture
def connect_to() -> Callable[..., Session]:
    return connect


@pytest.fixture
def w3c_recorder() -> Recorder:
    return Recorder(DialectKind.W3C)


@pytest.fixture
def legacy_recorder() -> Recorder:
    return Recorder(DialectKind.LEGACY)
