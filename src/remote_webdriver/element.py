"""Element references bound to a live session."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any, Optional, Union

from . import commands
from .errors import ProtocolError
from .models import By, Point, Rect, Size
from .reply import parse_value

if TYPE_CHECKING:
    from .session import Session

W3C_ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"
LEGACY_ELEMENT_KEY = "ELEMENT"


class WebElement:
    """Opaque handle to a remote DOM node, valid only within its session."""

    def __init__(self, session: "Session", element_id: str) -> None:
        self._session = session
        self._session_id = session.id
        self._id = element_id

    @property
    def id(self) -> str:
        return self._id

    @property
    def session(self) -> "Session":
        return self._session

    def encode(self) -> dict[str, str]:
        """Return the wire form, carrying both reference keys."""

        return {W3C_ELEMENT_KEY: self._id, LEGACY_ELEMENT_KEY: self._id}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WebElement):
            return NotImplemented
        return self._id == other._id and self._session_id == other._session_id

    def __hash__(self) -> int:
        return hash((self._session_id, self._id))

    def __repr__(self) -> str:
        return f"WebElement(session={self._session_id!r}, id={self._id!r})"

    # Queries -------------------------------------------------------------

    def find_element(self, by: Union[By, str], value: str) -> "WebElement":
        return self._session.find(commands.FIND_CHILD_ELEMENT, by, value, element_id=self._id)

    def find_elements(self, by: Union[By, str], value: str) -> list["WebElement"]:
        return self._session.find_all(
            commands.FIND_CHILD_ELEMENTS, by, value, element_id=self._id
        )

    def tag_name(self) -> str:
        return self._session.string_command(commands.ELEMENT_TAG_NAME, element_id=self._id)

    def text(self) -> str:
        return self._session.string_command(commands.ELEMENT_TEXT, element_id=self._id)

    def is_selected(self) -> bool:
        return self._session.bool_command(commands.ELEMENT_SELECTED, element_id=self._id)

    def is_enabled(self) -> bool:
        return self._session.bool_command(commands.ELEMENT_ENABLED, element_id=self._id)

    def is_displayed(self) -> bool:
        return self._session.bool_command(commands.ELEMENT_DISPLAYED, element_id=self._id)

    def get_attribute(self, name: str) -> Optional[str]:
        """Return the attribute value, or ``None`` when the attribute is absent."""

        value = self._session.value_command(
            commands.ELEMENT_ATTRIBUTE, element_id=self._id, name=name
        )
        return None if value is None else str(value)

    def get_property(self, name: str) -> Any:
        return self._session.value_command(
            commands.ELEMENT_PROPERTY, element_id=self._id, name=name
        )

    def css_property(self, name: str) -> str:
        return self._session.string_command(commands.ELEMENT_CSS, element_id=self._id, name=name)

    def rect(self) -> Rect:
        value = self._session.value_command(commands.ELEMENT_RECT, element_id=self._id)
        return parse_value(Rect, value)

    def location(self) -> Point:
        return self._session.protocol.element_location(self._session, self)

    def location_in_view(self) -> Point:
        return self._session.protocol.element_location_in_view(self._session, self)

    def size(self) -> Size:
        return self._session.protocol.element_size(self._session, self)

    def screenshot(self) -> bytes:
        data = self._session.string_command(commands.ELEMENT_SCREENSHOT, element_id=self._id)
        return base64.b64decode(data)

    # Interaction ---------------------------------------------------------

    def click(self) -> None:
        self._session.void_command(commands.ELEMENT_CLICK, element_id=self._id)

    def clear(self) -> None:
        self._session.void_command(commands.ELEMENT_CLEAR, element_id=self._id)

    def submit(self) -> None:
        self._session.protocol.submit(self._session, self)

    def send_keys(self, keys: str) -> None:
        self._session.void_command(
            commands.ELEMENT_SEND_KEYS,
            {"value": list(keys), "text": keys},
            element_id=self._id,
        )


def element_id_from(value: Any) -> Optional[str]:
    """Return the element id carried by a wire object, if any."""

    if not isinstance(value, dict):
        return None
    for key in (W3C_ELEMENT_KEY, LEGACY_ELEMENT_KEY):
        element_id = value.get(key)
        if isinstance(element_id, str) and element_id:
            return element_id
    return None


def decode_element(session: "Session", value: Any) -> WebElement:
    element_id = element_id_from(value)
    if element_id is None:
        raise ProtocolError(f"malformed element reference: {value!r}")
    return WebElement(session, element_id)


def decode_elements(session: "Session", value: Any) -> list[WebElement]:
    if not isinstance(value, list):
        raise ProtocolError(f"expected a list of element references, got {value!r}")
    return [decode_element(session, item) for item in value]


def encode_arguments(value: Any) -> Any:
    """Recursively replace elements with their wire form."""

    if isinstance(value, WebElement):
        return value.encode()
    if isinstance(value, dict):
        return {key: encode_arguments(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_arguments(item) for item in value]
    return value


def decode_result(session: "Session", value: Any) -> Any:
    """Recursively turn element-shaped objects in a script result into elements."""

    if isinstance(value, dict):
        element_id = element_id_from(value)
        if element_id is not None:
            return WebElement(session, element_id)
        return {key: decode_result(session, item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_result(session, item) for item in value]
    return value
