"""Decoding of protocol reply envelopes in both dialects."""

from __future__ import annotations

import json
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import LegacyError, ProtocolError, StructuredError

LEGACY_ERRORS: dict[int, str] = {
    6: "invalid session id",
    7: "no such element",
    8: "no such frame",
    9: "unknown command",
    10: "stale element reference",
    11: "element not visible",
    12: "invalid element state",
    13: "unknown error",
    15: "element is not selectable",
    17: "javascript error",
    19: "xpath lookup error",
    21: "timeout",
    23: "no such window",
    24: "invalid cookie domain",
    25: "unable to set cookie",
    26: "unexpected alert open",
    27: "no alert open",
    28: "script timeout",
    29: "invalid element coordinates",
    32: "invalid selector",
}

_SUCCESS = 0

ModelT = TypeVar("ModelT", bound=BaseModel)


class ReplyEnvelope(BaseModel):
    """Top-level JSON object wrapping every protocol reply."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    value: Any = None
    status: Optional[int] = None
    state: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None
    stacktrace: Optional[str] = None


def parse_value(model: type[ModelT], value: Any) -> ModelT:
    """Validate a reply ``value`` into *model*, reporting mismatches as protocol errors."""

    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise ProtocolError(f"malformed {model.__name__} in server reply: {value!r}") from exc


def legacy_message(code: int) -> str:
    """Return the short message for a legacy numeric status code."""

    return LEGACY_ERRORS.get(code, f"unknown error - {code}")


def decode_reply(content: bytes, http_status: int) -> ReplyEnvelope:
    """Interpret *content* as success, structured error or legacy error.

    The structured interpretation always wins over a legacy ``status`` field,
    since some servers emit both for compatibility.
    """

    try:
        data = json.loads(content)
        envelope = ReplyEnvelope.model_validate(data)
    except (ValueError, ValidationError) as exc:
        if http_status != 200:
            raise ProtocolError(f"bad server reply status: {http_status}") from exc
        raise ProtocolError(f"malformed server reply: {exc}") from exc

    if envelope.error:
        raise StructuredError(
            envelope.error,
            envelope.message or "",
            stacktrace=envelope.stacktrace or "",
            http_status=http_status,
        )

    nested = _nested_error(envelope.value)
    if nested is not None:
        raise StructuredError(
            nested["error"],
            _as_text(nested.get("message")),
            stacktrace=_as_text(nested.get("stacktrace")),
            http_status=http_status,
        )

    if envelope.status is not None and envelope.status != _SUCCESS:
        detail = ""
        if isinstance(envelope.value, dict):
            detail = _as_text(envelope.value.get("message"))
        raise LegacyError(
            legacy_message(envelope.status),
            detail,
            legacy_code=envelope.status,
            http_status=http_status,
        )

    return envelope


def _nested_error(value: Any) -> Optional[dict[str, Any]]:
    if isinstance(value, dict):
        error = value.get("error")
        if isinstance(error, str) and error:
            return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
