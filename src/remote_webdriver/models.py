"""Shared wire models used across the remote WebDriver client."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOGGING_PREFS_KEY = "goog:loggingPrefs"


class By(str, enum.Enum):
    """Locator strategies accepted by the find-element commands."""

    ID = "id"
    XPATH = "xpath"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    NAME = "name"
    TAG_NAME = "tag name"
    CLASS_NAME = "class name"
    CSS_SELECTOR = "css selector"


class LogType(str, enum.Enum):
    """Components capable of producing remote logs."""

    SERVER = "server"
    BROWSER = "browser"
    CLIENT = "client"
    DRIVER = "driver"
    PERFORMANCE = "performance"
    PROFILER = "profiler"


class LogLevel(str, enum.Enum):
    OFF = "OFF"
    SEVERE = "SEVERE"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    ALL = "ALL"


class Keys:
    """Special keys, encoded as Unicode private-use code points."""

    NULL = "\ue000"
    CANCEL = "\ue001"
    HELP = "\ue002"
    BACKSPACE = "\ue003"
    TAB = "\ue004"
    CLEAR = "\ue005"
    RETURN = "\ue006"
    ENTER = "\ue007"
    SHIFT = "\ue008"
    CONTROL = "\ue009"
    ALT = "\ue00a"
    PAUSE = "\ue00b"
    ESCAPE = "\ue00c"
    SPACE = "\ue00d"
    PAGE_UP = "\ue00e"
    PAGE_DOWN = "\ue00f"
    END = "\ue010"
    HOME = "\ue011"
    LEFT = "\ue012"
    UP = "\ue013"
    RIGHT = "\ue014"
    DOWN = "\ue015"
    INSERT = "\ue016"
    DELETE = "\ue017"
    SEMICOLON = "\ue018"
    EQUALS = "\ue019"
    F1 = "\ue031"
    F2 = "\ue032"
    F3 = "\ue033"
    F4 = "\ue034"
    F5 = "\ue035"
    F6 = "\ue036"
    F7 = "\ue037"
    F8 = "\ue038"
    F9 = "\ue039"
    F10 = "\ue03a"
    F11 = "\ue03b"
    F12 = "\ue03c"
    META = "\ue03d"


class Cookie(BaseModel):
    """A browser cookie as exchanged with the remote end."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    value: str
    path: str = ""
    domain: str = ""
    secure: bool = False
    http_only: Optional[bool] = Field(default=None, alias="httpOnly")
    expiry: Optional[int] = Field(
        default=None,
        description="Seconds since the epoch; absent for session cookies.",
    )
    same_site: Optional[str] = Field(default=None, alias="sameSite")

    @field_validator("expiry", mode="before")
    @classmethod
    def _normalise_expiry(cls, value: Any) -> Optional[int]:
        # Servers report either integers or floats.
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            expiry = int(value)
            return expiry if expiry > 0 else None
        return value

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not data.get("path"):
            data.pop("path", None)
        if not data.get("domain"):
            data.pop("domain", None)
        return data


class LogMessage(BaseModel):
    """Entry returned by the log command."""

    timestamp: datetime
    level: str
    message: str

    @field_validator("timestamp", mode="before")
    @classmethod
    def _from_millis(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        return value


class Point(BaseModel):
    x: float
    y: float


class Size(BaseModel):
    width: float
    height: float


class Rect(BaseModel):
    x: float
    y: float
    width: float
    height: float

    @property
    def location(self) -> Point:
        return Point(x=self.x, y=self.y)

    @property
    def size(self) -> Size:
        return Size(width=self.width, height=self.height)


class ServerStatus(BaseModel):
    """Payload of the ``/status`` endpoint.

    W3C servers report ``ready`` and ``message``; legacy servers report build and
    OS details. Unknown fields are kept as extras.
    """

    model_config = ConfigDict(extra="allow")

    ready: Optional[bool] = None
    message: Optional[str] = None
    build: dict[str, Any] = Field(default_factory=dict)
    os: dict[str, Any] = Field(default_factory=dict)
