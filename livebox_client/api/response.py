"""
Decoding of ``/ws`` responses.

The router always answers 200 and reports failures in the body, either as a
single error object or as an ``errors`` list.  Event polls sometimes append
a literal ``null`` after the JSON document; it is removed before decoding.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..errors import ApiError, ApiErrors, ProtocolError

_TRAILING_NULL = b"null"


def decode_body(body: bytes) -> Any:
    """
    Parse a response body and raise the error envelope it carries, if any.

    Returns the decoded JSON document when the body holds no error.
    """
    body = body.rstrip()
    if body.endswith(_TRAILING_NULL) and body != _TRAILING_NULL:
        body = body[: -len(_TRAILING_NULL)]

    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ProtocolError(f"could not decode response body: {exc}") from exc

    raise_for_error(data)
    return data


def raise_for_error(data: Any) -> None:
    """Raise ApiError / ApiErrors when *data* is an error envelope."""
    if not isinstance(data, dict):
        return

    # Single error object
    if "error" in data:
        err = ApiError.from_dict(data)
        if err.code or err.description or err.info:
            raise err

    # List of errors
    entries = data.get("errors")
    if isinstance(entries, list):
        errors = [ApiError.from_dict(e) for e in entries if isinstance(e, dict)]
        if errors:
            raise ApiErrors(errors)


@dataclass
class LoginData:
    context_id: str = ""
    username: str = ""
    groups: str = ""


@dataclass
class LoginResponse:
    """Answer to ``createContext``; ``status`` is 0 on success, 1 on failure."""

    status: int = 0
    data: LoginData = field(default_factory=LoginData)

    @classmethod
    def from_dict(cls, raw: Any) -> "LoginResponse":
        if not isinstance(raw, dict):
            raise ProtocolError("login response is not a JSON object")
        try:
            data = raw.get("data") or {}
            return cls(
                status=int(raw.get("status") or 0),
                data=LoginData(
                    context_id=str(data.get("contextID") or ""),
                    username=str(data.get("username") or ""),
                    groups=str(data.get("groups") or ""),
                ),
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ProtocolError(f"malformed login response: {exc}") from exc


@dataclass
class EventObject:
    reason: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class Event:
    """A single event pushed by the router."""

    handler: str = ""
    object: EventObject = field(default_factory=EventObject)

    @classmethod
    def from_dict(cls, raw: dict) -> "Event":
        obj = raw.get("object") or {}
        return cls(
            handler=str(raw.get("handler") or ""),
            object=EventObject(
                reason=str(obj.get("reason") or ""),
                attributes=dict(obj.get("attributes") or {}),
            ),
        )


@dataclass
class EventsResponse:
    """Answer to an event poll: the channel to reuse and the new events."""

    channel_id: int = 0
    events: list[Event] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "EventsResponse":
        if not isinstance(raw, dict):
            raise ProtocolError("event response is not a JSON object")
        try:
            return cls(
                channel_id=int(raw.get("channelid") or 0),
                events=[
                    Event.from_dict(entry.get("data") or {})
                    for entry in raw.get("events") or []
                ],
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise ProtocolError(f"malformed event response: {exc}") from exc


@dataclass
class EventItem:
    """What an event stream yields: either an event or an error."""

    event: Event | None = None
    error: Exception | None = None
