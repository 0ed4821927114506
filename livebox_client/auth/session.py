"""
Thread-safe store for the session credentials.

A session is the contextID returned by the login call, the ``/sessid``
cookie set alongside it, and a version counter bumped on every successful
renewal.  Readers take a snapshot of all three at once; renewals are
serialised behind an exclusive lock that stays held for the duration of the
login call, so at most one login is in flight for a given store.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, NamedTuple

from ..config import AUTHORIZATION_PREFIX
from ..logging_setup import log


class SessidCookie(NamedTuple):
    name: str
    value: str

    def header(self) -> str:
        """Raw ``Cookie`` header value, the name is not RFC compliant."""
        return f"{self.name}={self.value}"


class Credentials(NamedTuple):
    """Immutable snapshot of the session, as sent with a request."""

    authorization: str
    cookie: str
    version: int

    @property
    def token(self) -> str:
        return self.authorization.partition(" ")[2]


LoginFunc = Callable[[], tuple[str, SessidCookie]]
RenewCondition = Callable[[int], bool]


def renew_if_not_initialized(version: int) -> bool:
    """Renew only if the session has never been renewed."""
    return version == 0


def renew_if_version_is(expected: int) -> RenewCondition:
    """Renew only if nobody renewed the session since *expected* was read."""
    def condition(version: int) -> bool:
        return version == expected
    return condition


class _RWLock:
    """
    Reader/writer lock.  Writers are preferred: once a writer waits, new
    readers block until it is done.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SessionStore:
    """Holds the current credentials and their version."""

    def __init__(self) -> None:
        self._lock = _RWLock()
        self._token = ""
        self._cookie: SessidCookie | None = None
        self._version = 0

    @property
    def version(self) -> int:
        with self._lock.read_locked():
            return self._version

    def get_credentials(self) -> Credentials:
        """
        Return the authorization header, cookie header and version.
        Empty strings and version 0 if the session was never renewed.
        """
        with self._lock.read_locked():
            if self._version == 0 or self._cookie is None:
                return Credentials("", "", 0)
            return Credentials(
                f"{AUTHORIZATION_PREFIX} {self._token}",
                self._cookie.header(),
                self._version,
            )

    def renew(self, login: LoginFunc, should_renew: RenewCondition) -> bool:
        """
        Renew the session by calling *login* if *should_renew* accepts the
        current version.

        Returns False when the condition rejected the renewal (somebody else
        already renewed), True once new credentials are stored.  Errors
        raised by *login* propagate and leave the session untouched.
        """
        with self._lock.write_locked():
            if not should_renew(self._version):
                log.debug("Session renewal skipped, already at version %d", self._version)
                return False

            token, cookie = login()

            self._token = token
            self._cookie = cookie
            self._version += 1
            log.debug("Session renewed, now at version %d", self._version)
            return True
