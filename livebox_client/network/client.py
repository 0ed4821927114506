"""
HTTP transport for router communication.

Provides session setup with retry logic and keep-alive configuration, and a
single POST helper that maps transport and status failures onto the
package's exceptions.
"""

from __future__ import annotations

import urllib.parse
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..api.response import decode_body
from ..config import API_ENDPOINT
from ..errors import StatusError, TransportError


def build_session(verify_ssl: bool = True) -> requests.Session:
    """
    Return a requests.Session with retry logic and keep-alive pre-configured.

    urllib3 does not retry POST on read errors or status codes, so only
    connection failures are retried here.

    Args:
        verify_ssl: Whether to verify SSL certificates

    Returns:
        Configured requests.Session instance
    """
    session = requests.Session()
    retry = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=[500, 502, 503, 504],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_ssl
    session.headers.update({
        "Accept": "*/*",
        "Connection": "keep-alive",
    })
    return session


def api_url(address: str) -> str:
    """
    Build the ``/ws`` endpoint URL from the router address.

    Args:
        address: Router base address, scheme included
            (e.g. 'http://192.168.1.1')

    Returns:
        Endpoint URL string (e.g. 'http://192.168.1.1/ws')
    """
    parts = urllib.parse.urlsplit(address)
    if not parts.scheme:
        raise ValueError("scheme is missing in livebox address")
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, API_ENDPOINT, "", ""))


def post(
    http: requests.Session,
    url: str,
    payload: bytes,
    headers: dict[str, str],
    timeout: float | None = None,
) -> tuple[requests.Response, Any]:
    """
    POST *payload* and decode the answer.

    Returns the response (for its headers) and the decoded JSON body.
    Raises TransportError, StatusError, ProtocolError or ApiError.
    """
    try:
        resp = http.post(url, data=payload, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise TransportError(str(exc)) from exc

    if resp.status_code != 200:
        raise StatusError(resp.status_code)

    return resp, decode_body(resp.content)
