# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the spam-protection test suite.
# =============================================================================

import json

import pytest

from spam_protection import SpamProtection
from spam_protection.core import TransportError


class FakeTransport:
    """
    In-memory Transport that records requested URLs.

    Responses are either bytes (returned) or exceptions (raised), consumed
    in order; the last one is reused once the queue runs dry.
    """

    def __init__(self, *responses: bytes | Exception) -> None:
        self.responses = list(responses) or [b""]
        self.urls: list[str] = []
        self.timeouts: list[float | None] = []
        self.closed = False

    def send(self, url: str, timeout: float | None = None) -> bytes:
        self.urls.append(url)
        self.timeouts.append(timeout)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def lookup_body(subject: str = "ip", success: int = 1, **record) -> bytes:
    """Build a lookup response body as the service would send it."""
    data: dict = {"success": success}
    if success:
        data[subject] = {"appears": 1, "frequency": 0, **record}
    else:
        data["error"] = record.get("error", "")
    return json.dumps(data).encode()


@pytest.fixture
def fake_transport():
    """A FakeTransport answering with a clean IP record."""
    return FakeTransport(lookup_body("ip", appears=0, frequency=0))


@pytest.fixture
def make_client():
    """Factory for a SpamProtection client backed by a FakeTransport."""

    def _make(*responses: bytes | Exception, **kwargs) -> tuple[SpamProtection, FakeTransport]:
        transport = FakeTransport(*responses)
        return SpamProtection(transport=transport, **kwargs), transport

    return _make


@pytest.fixture
def spammy_ip_body():
    """A heavily reported IP address with a high confidence score."""
    return json.dumps({
        "success": 1,
        "ip": {
            "value": "192.0.2.10",
            "appears": 1,
            "frequency": 255,
            "lastseen": "2024-01-15 10:30:00",
            "confidence": 99.95,
            "country": "us",
            "asn": 64496,
            "torexit": 0,
        },
    }).encode()


@pytest.fixture
def transport_down():
    """A TransportError as raised on a connection failure."""
    return TransportError("Request failed: connection refused")


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path / "spam-protection"


@pytest.fixture
def fake_keyring(monkeypatch):
    """Replace the system keyring with a dict."""
    store: dict[tuple[str, str], str] = {}

    monkeypatch.setattr(
        "keyring.get_password",
        lambda service, user: store.get((service, user)),
    )
    monkeypatch.setattr(
        "keyring.set_password",
        lambda service, user, password: store.__setitem__((service, user), password),
    )
    return store
