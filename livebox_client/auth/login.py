"""Login exchange and sessid cookie extraction."""

from __future__ import annotations

from http.cookies import CookieError, SimpleCookie

import requests

from ..api.request import new_login
from ..api.response import LoginResponse
from ..config import (
    AUTHORIZATION_LOGIN,
    CONTENT_TYPE_WS,
    PATCHED_SESSID_COOKIE_SUFFIX,
    SESSID_COOKIE_SUFFIX,
)
from ..errors import (
    EmptyContextID,
    EmptySessidCookie,
    InvalidCredentials,
    StatusError,
)
from ..logging_setup import log
from ..network.client import post
from .session import SessidCookie


def login(
    http: requests.Session,
    url: str,
    username: str,
    password: str,
    timeout: float | None = None,
) -> tuple[str, SessidCookie]:
    """
    Open a session with ``sah.Device.Information.createContext``.

    The login request is authorised with the ``X-Sah-Login`` sentinel
    instead of a contextID.  A wrong password is the one case where the
    router answers with a non-200 status (401).

    Returns the contextID and the sessid cookie.
    """
    headers = {
        "Content-Type": CONTENT_TYPE_WS,
        "Authorization": AUTHORIZATION_LOGIN,
    }

    log.debug("Logging in to %s as %r", url, username)
    try:
        resp, data = post(http, url, new_login(username, password).to_json(),
                          headers, timeout=timeout)
    except StatusError as exc:
        if exc.status_code == 401:
            raise InvalidCredentials() from exc
        raise

    context_id = LoginResponse.from_dict(data).data.context_id
    if not context_id:
        raise EmptyContextID()

    cookie = find_sessid_cookie(_set_cookie_values(resp))
    if cookie is None:
        raise EmptySessidCookie()

    log.debug("Login successful, sessid cookie %r", cookie.name)
    return context_id, cookie


def find_sessid_cookie(set_cookie_values: list[str]) -> SessidCookie | None:
    """
    Find the ``<prefix>/sessid`` cookie among raw ``Set-Cookie`` values.

    SimpleCookie refuses "/" in cookie names, so the suffix is swapped for
    "_sessid" before parsing and swapped back on the cookie found.
    """
    patched = list(set_cookie_values)
    for i, value in enumerate(patched):
        if SESSID_COOKIE_SUFFIX in value:
            patched[i] = value.replace(SESSID_COOKIE_SUFFIX, PATCHED_SESSID_COOKIE_SUFFIX, 1)
            break

    for value in patched:
        jar = SimpleCookie()
        try:
            jar.load(value)
        except CookieError:
            continue
        for name, morsel in jar.items():
            if name.endswith(PATCHED_SESSID_COOKIE_SUFFIX):
                original = name.replace(PATCHED_SESSID_COOKIE_SUFFIX, SESSID_COOKIE_SUFFIX, 1)
                return SessidCookie(original, morsel.value)

    return None


def _set_cookie_values(resp: requests.Response) -> list[str]:
    """Every ``Set-Cookie`` header of *resp*, unmerged when urllib3 kept them apart."""
    raw_headers = getattr(resp.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return list(raw_headers.getlist("Set-Cookie"))
    value = resp.headers.get("Set-Cookie")
    return [value] if value else []
