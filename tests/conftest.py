"""Shared test fixtures for tumblrkit.

Provides an isolated config environment (applied to every test so nothing
touches the real home directory), fake transport/decoder collaborators
that record their calls, a controllable clock for TTL tests, and a client
factory wired to those fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from tumblrkit.client import Tumblr
from tumblrkit.models import HTTPMethod, OutputFormat, TransportResponse
from tumblrkit.output import reset_output

HOSTNAME = "example.tumblr.com"
EMAIL = "me@example.com"
PASSWORD = "s3cret"


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeTransport:
    """Transport that replays canned responses and records every send."""

    def __init__(self, *responses: TransportResponse) -> None:
        self.responses = list(responses) or [TransportResponse(status_code=200, body=b"{}")]
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def send(self, url: str, method: HTTPMethod, body: str, user_agent: str) -> TransportResponse:
        self.calls.append({"url": url, "method": method, "body": body, "user_agent": user_agent})
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FakeDecoder:
    """Decoder that returns a fixed value and records its inputs."""

    def __init__(self, value: Any = None) -> None:
        self.value = {"decoded": True} if value is None else value
        self.calls: list[tuple[bytes, OutputFormat]] = []

    def decode(self, data: bytes, output: OutputFormat) -> Any:
        self.calls.append((data, output))
        return self.value


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG directories at tmp_path and clear TUMBLR_* variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("tumblrkit.config._is_xdg_platform", lambda: True)
    for var in ("TUMBLR_HOSTNAME", "TUMBLR_EMAIL", "TUMBLR_PASSWORD"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def _reset_output_between_tests():
    """Drop the global OutputManager so stale CliRunner streams are not reused."""
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    path = tmp_path / "cache"
    path.mkdir()
    return path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(clock: FakeClock) -> Callable[..., Tumblr]:
    """Factory for clients with full credentials and fake collaborators."""

    def _make(
        transport: Optional[FakeTransport] = None,
        decoder: Optional[FakeDecoder] = None,
        **kwargs: Any,
    ) -> Tumblr:
        return Tumblr(
            kwargs.pop("hostname", HOSTNAME),
            kwargs.pop("email", EMAIL),
            kwargs.pop("password", PASSWORD),
            transport=transport or FakeTransport(),
            decoder=decoder,
            clock=clock,
            **kwargs,
        )

    return _make


@pytest.fixture
def client(make_client: Callable[..., Tumblr]) -> Tumblr:
    return make_client()
