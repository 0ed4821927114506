"""Request and response shapes of the Livebox ``/ws`` API."""

from livebox_client.api.request import Request, new_login
from livebox_client.api.response import (
    Event,
    EventItem,
    EventObject,
    EventsResponse,
    LoginData,
    LoginResponse,
    decode_body,
    raise_for_error,
)

__all__ = [
    "Request",
    "new_login",
    "Event",
    "EventItem",
    "EventObject",
    "EventsResponse",
    "LoginData",
    "LoginResponse",
    "decode_body",
    "raise_for_error",
]
