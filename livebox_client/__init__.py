"""
livebox_client
==============
Python client for the JSON API of Livebox home routers (``http://<router>/ws``).

Authentication is handled by the client: give it the admin password and send
requests.  Expired sessions are renewed transparently, and router events can
be watched through a background listener.

Package structure
-----------------
livebox_client/
├── __init__.py       – package init and public API
├── config.py         – configuration constants
├── errors.py         – exception hierarchy
├── logging_setup.py  – package logger
├── client.py         – Client: authenticated requests with one retry
├── events.py         – event listener, event stream, session keepalive
├── cli.py            – argparse CLI (``python -m livebox_client``)
├── api/              – request envelopes and response decoding
├── auth/             – login exchange and thread-safe session store
└── network/          – requests.Session factory and POST helper

Quick start
-----------
    from livebox_client import Client, Request

    client = Client("http://192.168.1.1", password="your_password")
    info = client.request(Request("DeviceInfo", "get"))

    with client.events(["Devices.Device"]) as stream:
        for item in stream:
            print(item.error or item.event)
"""

from .api import Event, EventItem, EventsResponse, Request
from .client import Client
from .errors import (
    ApiError,
    ApiErrors,
    EmptyContextID,
    EmptySessidCookie,
    InvalidCredentials,
    LiveboxError,
    ProtocolError,
    StatusError,
    TransportError,
    is_channel_stale,
    is_permission_denied,
)

__all__ = [
    "Client",
    "Request",
    "Event",
    "EventItem",
    "EventsResponse",
    "LiveboxError",
    "TransportError",
    "StatusError",
    "InvalidCredentials",
    "ProtocolError",
    "EmptyContextID",
    "EmptySessidCookie",
    "ApiError",
    "ApiErrors",
    "is_permission_denied",
    "is_channel_stale",
]
