"""Authentication submodule – login exchange and session store."""

from livebox_client.auth.login import find_sessid_cookie, login
from livebox_client.auth.session import (
    Credentials,
    SessidCookie,
    SessionStore,
    renew_if_not_initialized,
    renew_if_version_is,
)

__all__ = [
    "login",
    "find_sessid_cookie",
    "Credentials",
    "SessidCookie",
    "SessionStore",
    "renew_if_not_initialized",
    "renew_if_version_is",
]
