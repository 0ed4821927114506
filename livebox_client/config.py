"""Configuration constants for the Livebox API client."""

import os

# Address and credentials can also be supplied via environment variables
DEFAULT_ADDRESS = os.environ.get("LIVEBOX_ADDRESS", "http://192.168.1.1")
DEFAULT_USER = os.environ.get("LIVEBOX_USER", "admin")
DEFAULT_PASSWORD = os.environ.get(
    "LIVEBOX_PASSWORD", os.environ.get("ADMIN_PASSWORD", "")
)

API_ENDPOINT = "/ws"   # every call is a POST to this path

CONTENT_TYPE_WS    = "application/x-sah-ws-4-call+json"
CONTENT_TYPE_EVENT = "application/x-sah-event-4-call+json"

# Authorization header value of the login request, and prefix of the
# authorization header carrying the contextID afterwards.
AUTHORIZATION_LOGIN  = "X-Sah-Login"
AUTHORIZATION_PREFIX = "X-Sah"

LOGIN_SERVICE          = "sah.Device.Information"
LOGIN_METHOD           = "createContext"
LOGIN_APPLICATION_NAME = "webui"

# The router names its session cookie "<prefix>/sessid".  "/" is not a legal
# cookie-name character, so the name is patched before parsing.
SESSID_COOKIE_SUFFIX         = "/sessid"
PATCHED_SESSID_COOKIE_SUFFIX = "_sessid"

PERMISSION_DENIED_CODE = 13

# Errors meaning the event channel is gone on the router side
CHANNEL_STALE_DESCRIPTION = "Function execution failed"
CHANNEL_STALE_INFO        = "channel does not exist"

# No internal deadline by default; event polls are long-polls.
REQUEST_TIMEOUT      = None
KEEPALIVE_INTERVAL   = 30    # seconds between keepalive calls
EVENT_RETRY_INTERVAL = 1     # seconds to wait after a failed event poll
EVENT_QUEUE_SIZE     = 128   # events buffered per listener

# Harmless authenticated call used by the keepalive task
KEEPALIVE_SERVICE = "IoTService"
KEEPALIVE_METHOD  = "getStatus"
