"""
livebox_client.errors
=====================
Exceptions raised by the Livebox API client.

Hierarchy
---------
LiveboxError
├── TransportError        – the router could not be reached
├── StatusError           – HTTP status other than 200
│   └── InvalidCredentials  – login rejected with 401
├── ProtocolError         – response is missing something we need
│   ├── EmptyContextID
│   └── EmptySessidCookie
└── ApiError              – error envelope returned in the response body
    └── ApiErrors         – envelope holding several errors
"""

from __future__ import annotations

from .config import (
    CHANNEL_STALE_DESCRIPTION,
    CHANNEL_STALE_INFO,
    PERMISSION_DENIED_CODE,
)


class LiveboxError(Exception):
    """Base class of every error raised by this package."""


class TransportError(LiveboxError):
    """Network or I/O failure while talking to the router."""


class StatusError(LiveboxError):
    """The router answered with a status code other than 200."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"status error: got {status_code}, expected 200")


class InvalidCredentials(StatusError):
    """Login was refused because the username or password is wrong."""

    def __init__(self, status_code: int = 401) -> None:
        super().__init__(status_code, "invalid login or password")


class ProtocolError(LiveboxError):
    """The response is well-formed HTTP but not what the API should send."""


class EmptyContextID(ProtocolError):
    def __init__(self) -> None:
        super().__init__("received empty contextID")


class EmptySessidCookie(ProtocolError):
    def __init__(self) -> None:
        super().__init__("did not receive sessid cookie")


class ApiError(LiveboxError):
    """A single error decoded from a response body."""

    def __init__(self, code: int = 0, description: str = "", info: str = "") -> None:
        self.code = code
        self.description = description
        self.info = info
        super().__init__(
            f"Error: {code}, Description: {description}, Info: {info}"
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ApiError":
        try:
            code = int(data.get("error") or 0)
        except (TypeError, ValueError) as exc:
            raise ProtocolError(f"error code is not an integer: {data.get('error')!r}") from exc
        return cls(
            code=code,
            description=str(data.get("description") or ""),
            info=str(data.get("info") or ""),
        )

    @property
    def entries(self) -> list["ApiError"]:
        return [self]


class ApiErrors(ApiError):
    """
    Several errors returned at once.  ``code``, ``description`` and ``info``
    mirror the first entry, which is the one the client acts upon.
    """

    def __init__(self, errors: list[ApiError]) -> None:
        if not errors:
            raise ValueError("ApiErrors needs at least one error")
        self.errors = list(errors)
        first = self.errors[0]
        super().__init__(first.code, first.description, first.info)
        self.args = ("; ".join(str(e) for e in self.errors),)

    @property
    def entries(self) -> list[ApiError]:
        return self.errors


def is_permission_denied(exc: BaseException) -> bool:
    """True when *exc* reports an expired or invalid session (code 13)."""
    return isinstance(exc, ApiError) and exc.code == PERMISSION_DENIED_CODE


def is_channel_stale(exc: BaseException) -> bool:
    """True when *exc* says the event channel no longer exists on the router."""
    if not isinstance(exc, ApiError):
        return False
    return any(
        e.description == CHANNEL_STALE_DESCRIPTION or e.info == CHANNEL_STALE_INFO
        for e in exc.entries
    )
