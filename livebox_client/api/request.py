"""Request envelopes sent to the ``/ws`` endpoint."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..config import LOGIN_APPLICATION_NAME, LOGIN_METHOD, LOGIN_SERVICE


@dataclass
class Request:
    """
    One API call.  Serialised as
    ``{"service": ..., "method": ..., "parameters": {...}}``.
    """

    service: str
    method: str
    parameters: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "service": self.service,
            "method": self.method,
            "parameters": self.parameters,
        }

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict()).encode("utf-8")


def new_login(username: str, password: str) -> Request:
    """Build the ``createContext`` request that opens a session."""
    return Request(
        LOGIN_SERVICE,
        LOGIN_METHOD,
        {
            "applicationName": LOGIN_APPLICATION_NAME,
            "username": username,
            "password": password,
        },
    )
