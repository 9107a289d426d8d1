"""
Unit Tests for Rate Limit Keys

The limiter counts requests per client address; forwarded headers only
count when the deployment says a proxy sets them.
"""

import pytest
from starlette.requests import Request

from config.settings import settings
from utils.rate_limit import get_client_ip


def _request(forwarded: str = None) -> Request:
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({
        "type": "http",
        "method": "POST",
        "path": "/forms/upload",
        "headers": headers,
        "client": ("10.0.0.7", 52000),
    })


class TestClientKey:
    """Tests for get_client_ip."""

    def test_forwarded_header_ignored_by_default(self, monkeypatch):
        """A caller cannot pick its own bucket by sending the header."""
        monkeypatch.setattr(settings, "TRUST_PROXY_HEADERS", False)
        assert get_client_ip(_request("203.0.113.9")) == "10.0.0.7"

    def test_forwarded_header_behind_proxy(self, monkeypatch):
        monkeypatch.setattr(settings, "TRUST_PROXY_HEADERS", True)
        assert get_client_ip(_request("203.0.113.9, 10.0.0.1")) == "203.0.113.9"

    @pytest.mark.parametrize("forwarded", [None, " , 10.0.0.1"])
    def test_falls_back_to_peer_address(self, monkeypatch, forwarded):
        monkeypatch.setattr(settings, "TRUST_PROXY_HEADERS", True)
        assert get_client_ip(_request(forwarded)) == "10.0.0.7"
