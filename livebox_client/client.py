"""
livebox_client.client
=====================
Authenticated access to the Livebox ``/ws`` API.

Every call goes through :meth:`Client.request`, which

* logs in on first use,
* sends the call with the current contextID and sessid cookie,
* on a "permission denied" answer (error 13) renews the session once and
  resends the same payload.

Concurrent callers share one :class:`SessionStore`; when several of them hit
an expired session at the same time only the first performs the login, the
others see the bumped version and simply resend.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Callable, Iterable, TypeVar

import requests

from .api.request import Request
from .auth.login import login
from .auth.session import (
    RenewCondition,
    SessidCookie,
    SessionStore,
    renew_if_not_initialized,
    renew_if_version_is,
)
from .config import (
    CONTENT_TYPE_WS,
    DEFAULT_ADDRESS,
    DEFAULT_USER,
    EVENT_QUEUE_SIZE,
    EVENT_RETRY_INTERVAL,
    KEEPALIVE_INTERVAL,
    REQUEST_TIMEOUT,
)
from .errors import ApiError, is_permission_denied
from .events import EventListener, EventStream, KeepAlive
from .logging_setup import log
from .network.client import api_url, build_session, post

T = TypeVar("T")

# One original attempt plus one retry after renewing the session
MAX_ATTEMPTS = 2


class Client:
    """
    Livebox API client.  Safe to share between threads.
    """

    def __init__(
        self,
        address: str = DEFAULT_ADDRESS,
        username: str = DEFAULT_USER,
        password: str = "",
        http: requests.Session | None = None,
        verify_ssl: bool = True,
        timeout: float | None = REQUEST_TIMEOUT,
        keepalive_interval: float = KEEPALIVE_INTERVAL,
    ) -> None:
        self.url = api_url(address)
        self.username = username
        self.password = password
        self.timeout = timeout
        self.http = http if http is not None else build_session(verify_ssl=verify_ssl)
        self.session = SessionStore()
        self._keepalive = KeepAlive(self, interval=keepalive_interval)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Number of successful logins so far."""
        return self.session.version

    @property
    def keepalive(self) -> KeepAlive:
        return self._keepalive

    def request(
        self,
        req: Request | dict,
        content_type: str = CONTENT_TYPE_WS,
        decoder: Callable[[Any], T] | None = None,
    ) -> T | Any:
        """
        Send *req* and return the decoded answer.

        *req* is a :class:`Request` or any JSON-serialisable mapping (event
        polls are not service calls).  The decoded JSON is passed through
        *decoder* when one is given.

        Raises TransportError or StatusError straight away; ApiError is
        raised unless it is the first "permission denied" of this call.
        """
        if self.session.get_credentials().version == 0:
            self._authenticate(renew_if_not_initialized)

        payload = req.to_json() if isinstance(req, Request) else json.dumps(req).encode("utf-8")

        attempt = 0
        while True:
            attempt += 1
            creds = self.session.get_credentials()
            headers = {
                "Content-Type": content_type,
                "Authorization": creds.authorization,
                "X-Context": creds.token,
                # Added raw: the cookie name contains "/"
                "Cookie": creds.cookie,
            }

            try:
                _, data = post(self.http, self.url, payload, headers, timeout=self.timeout)
            except ApiError as exc:
                if attempt < MAX_ATTEMPTS and is_permission_denied(exc):
                    log.debug(
                        "Permission denied with session version %d, renewing",
                        creds.version,
                    )
                    self._authenticate(renew_if_version_is(creds.version))
                    continue
                raise

            return decoder(data) if decoder is not None else data

    def events(
        self,
        names: Iterable[str],
        cancel: threading.Event | None = None,
        retry_interval: float = EVENT_RETRY_INTERVAL,
        queue_size: int = EVENT_QUEUE_SIZE,
    ) -> EventStream:
        """
        Watch the router events listed in *names* until *cancel* is set or
        the returned stream is closed.
        """
        cancel = cancel if cancel is not None else threading.Event()
        stream = EventStream(cancel, maxsize=queue_size)
        listener = EventListener(
            self, list(names), stream, retry_interval=retry_interval
        )
        self._keepalive.acquire()
        listener.start()
        return stream

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _authenticate(self, condition: RenewCondition) -> bool:
        return self.session.renew(self._login, condition)

    def _login(self) -> tuple[str, SessidCookie]:
        return login(self.http, self.url, self.username, self.password,
                     timeout=self.timeout)
