"""Pytest configuration and fixtures for the cdptargets test suite.

Provides fake CDP clients (``MagicMock`` with ``AsyncMock`` commands) shaped
like ``cdp_use.CDPClient``, factories for ``/json/list`` payloads and an
``httpx.MockTransport`` standing in for the browser's HTTP endpoints.

Path Setup:
    The src directory is added to sys.path so tests run without an install:
    ``from cdptargets.targets.matching import is_matching_url``
"""

import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Keep the test output free of the package's console handler
os.environ.setdefault("CDPTARGETS_SETUP_LOGGING", "false")

src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from cdptargets.config import ConnectionConfig  # noqa: E402
from cdptargets.targets.registry import TargetRegistry  # noqa: E402
from cdptargets.targets.state import TargetSessionState  # noqa: E402


# ---------------------------------------------------------------------------
# Shared mock helpers
# ---------------------------------------------------------------------------


def make_target(target_id, url="about:blank", title="", type="page", **extra):
    """Build a target dict the way /json/list reports it."""
    target = {
        "id": target_id,
        "url": url,
        "title": title,
        "type": type,
        "webSocketDebuggerUrl": f"ws://127.0.0.1:9222/devtools/page/{target_id}",
    }
    target.update(extra)
    return target


def make_cdp_client(browser_context_id="CTX-DEFAULT"):
    """Create a CDPClient-like mock with the Target domain commands used here."""
    client = MagicMock()
    client.start = AsyncMock()
    client.stop = AsyncMock()
    client.send.Target.getTargetInfo = AsyncMock(
        side_effect=lambda params=None, session_id=None: {
            "targetInfo": {
                "targetId": params["targetId"],
                "type": "page",
                "title": "",
                "url": "about:blank",
                "attached": True,
                "canAccessOpener": False,
                "browserContextId": browser_context_id,
            }
        }
    )
    client.send.Target.setDiscoverTargets = AsyncMock(return_value={})
    client.send.Target.createBrowserContext = AsyncMock(return_value={"browserContextId": "CTX-NEW"})
    client.send.Target.createTarget = AsyncMock(return_value={"targetId": "TARGET-NEW"})
    client.send.Target.disposeBrowserContext = AsyncMock(return_value={})
    client.send.Target.activateTarget = AsyncMock(return_value={})
    client.register.Target.targetCreated = MagicMock()
    return client


class FakeBrowserEndpoints:
    """Serves /json/list and /json/version from in-memory data.

    ``target_lists`` is consumed one entry per /json/list request; the last
    entry keeps being served once the others are used up.
    """

    def __init__(self, target_lists=None, browser_ws_url="ws://127.0.0.1:9222/devtools/browser/BROWSER"):
        self.target_lists = list(target_lists or [[]])
        self.browser_ws_url = browser_ws_url
        self.list_requests = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/json/list":
            index = min(self.list_requests, len(self.target_lists) - 1)
            self.list_requests += 1
            return httpx.Response(200, json=self.target_lists[index])
        if request.url.path == "/json/version":
            return httpx.Response(200, json={"Browser": "Chrome/120.0", "webSocketDebuggerUrl": self.browser_ws_url})
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def connection_config():
    return ConnectionConfig(host="127.0.0.1", port=9222, max_attempts=3)


@pytest.fixture()
def registry():
    return TargetRegistry()


@pytest.fixture()
def page_client():
    return make_cdp_client()


@pytest.fixture()
def browser_client():
    return make_cdp_client()


@pytest.fixture()
def session_state(page_client, browser_client):
    """Session state as it looks after a successful bootstrap."""
    return TargetSessionState(
        target_client=page_client,
        browser_client=browser_client,
        active_browser_context_id="CTX-DEFAULT",
        active_target_id="TARGET-1",
    )
