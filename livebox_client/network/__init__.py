"""
Network operations module for HTTP client setup and request handling.
"""

from livebox_client.network.client import api_url, build_session, post

__all__ = ["api_url", "build_session", "post"]
