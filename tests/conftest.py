"""Pytest configuration for reana_client tests.

Every test runs against an in-process fake of the REANA server: the
:func:`server` fixture replaces :meth:`requests.Session.request` so that the
real transport code runs end to end without any network access.
"""

import json as jsonlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlsplit

import pytest
import requests
from click.testing import CliRunner

from reana_client.cli import main

SERVER_URL = "https://reana.test"
TOKEN = "secret-token"


# ---------------------------------------------------------------------------
# Fake server
# ---------------------------------------------------------------------------

def make_response(
    status: int = 200,
    json: Any = None,
    content: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """Build a :class:`requests.Response` with a canned body.

    Args:
        status: HTTP status code.
        json: JSON-serialisable body; takes precedence over *content*.
        content: Raw body bytes.
        headers: Extra response headers.

    Returns:
        A response object the transport can decode like a real one.
    """
    resp = requests.Response()
    resp.status_code = status
    if json is not None:
        resp._content = jsonlib.dumps(json).encode()
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = content or b""
    resp.headers.update(headers or {})
    return resp


@dataclass
class Call:
    """One request received by :class:`FakeServer`."""

    method: str
    path: str
    params: Dict[str, Any]
    json: Any = None
    data: Any = None
    verify: Any = None


@dataclass
class FakeServer:
    """Route table answering requests by ``(method, path)``.

    Several responses registered for the same route are served in order; the
    last one repeats once the queue is exhausted.
    """

    routes: Dict[Tuple[str, str], List[requests.Response]] = field(default_factory=dict)
    calls: List[Call] = field(default_factory=list)

    def add(self, method: str, path: str, status: int = 200, json: Any = None, **kwargs) -> None:
        self.routes.setdefault((method, path), []).append(
            make_response(status, json=json, **kwargs)
        )

    def handle(self, session: requests.Session, method: str, url: str, **kwargs) -> requests.Response:
        path = unquote(urlsplit(url).path)
        self.calls.append(
            Call(
                method=method,
                path=path,
                params=dict(kwargs.get("params") or {}),
                json=kwargs.get("json"),
                data=kwargs.get("data"),
                verify=session.verify,
            )
        )
        queue = self.routes.get((method, path))
        if not queue:
            raise AssertionError(f"unexpected request {method} {path}")
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]


@pytest.fixture(autouse=True)
def reana_env(monkeypatch):
    """Point every command at the fake server with a valid token."""
    monkeypatch.setenv("REANA_SERVER_URL", SERVER_URL)
    monkeypatch.setenv("REANA_ACCESS_TOKEN", TOKEN)
    for name in ("REANA_WORKON", "REANA_VERIFY_TLS", "REANA_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def server(monkeypatch) -> FakeServer:
    fake = FakeServer()

    def request(session, method, url, **kwargs):
        return fake.handle(session, method, url, **kwargs)

    monkeypatch.setattr(requests.Session, "request", request)
    return fake


@pytest.fixture
def run_cli():
    """Return a helper invoking the root command with the given arguments."""
    runner = CliRunner()

    def _run(*args: str, **kwargs):
        return runner.invoke(main, list(args), **kwargs)

    return _run


@pytest.fixture
def no_sleep(monkeypatch):
    """Make polling loops run without waiting; return the recorded delays."""
    delays: List[float] = []
    monkeypatch.setattr("time.sleep", lambda seconds: delays.append(seconds))
    return delays
