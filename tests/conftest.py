"""Shared fixtures: an in-memory transport and provider settings."""
import pytest

from iptv_ingest.config import ProviderSettings
from iptv_ingest.utils.http_transport import HttpResult


class FakeTransport:
    """Transport returning canned responses keyed by URL substring."""

    def __init__(self, routes=None, default=None):
        self.routes = list((routes or {}).items())
        self.default = default or HttpResult(ok=False, protocol="")
        self.calls = []

    def add(self, fragment, body, protocol="HTTP/1.1 200 OK", ok=True):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes.append((fragment, HttpResult(ok=ok, protocol=protocol, body=body)))

    def get(self, url, user_agent="", timeout_seconds=0):
        self.calls.append((url, user_agent, timeout_seconds))
        # Most specific fragment wins.
        for fragment, result in sorted(self.routes, key=lambda item: -len(item[0])):
            if fragment in url:
                return result
        return self.default


@pytest.fixture
def provider():
    return ProviderSettings(
        server="provider.example",
        port=8080,
        username="user",
        password="secret",
        timeout_seconds=15,
    )


@pytest.fixture
def transport():
    return FakeTransport()
