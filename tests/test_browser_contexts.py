"""Tests for BrowserContextManager.

Covers:
    - Creating a context and opening its first page
    - Retrying in the default context when the active one is gone
    - Disposing and switching contexts
    - Errors when no session has been established
"""

import pytest
from bubus import EventBus

from cdptargets.targets.contexts import BrowserContextManager
from cdptargets.targets.events import BrowserContextClosedEvent, BrowserContextCreatedEvent
from cdptargets.targets.state import TargetSessionState
from cdptargets.targets.views import SessionNotReadyError

from conftest import make_cdp_client


class TestCreateBrowserContext:
    """Tests for create_browser_context and create_target."""

    @pytest.mark.asyncio
    async def test_creates_context_and_opens_url_in_it(self, session_state, browser_client):
        contexts = BrowserContextManager(state=session_state)

        target_id = await contexts.create_browser_context("https://example.com")

        assert target_id == "TARGET-NEW"
        assert session_state.active_browser_context_id == "CTX-NEW"
        browser_client.send.Target.createBrowserContext.assert_awaited_once()
        browser_client.send.Target.createTarget.assert_awaited_once_with(
            params={"url": "https://example.com", "browserContextId": "CTX-NEW"}
        )

    @pytest.mark.asyncio
    async def test_create_target_without_active_context(self, session_state, browser_client):
        session_state.active_browser_context_id = None
        contexts = BrowserContextManager(state=session_state)

        await contexts.create_target("https://example.com")

        browser_client.send.Target.createTarget.assert_awaited_once_with(params={"url": "https://example.com"})

    @pytest.mark.asyncio
    async def test_stale_context_falls_back_to_default_context(self, session_state, browser_client):
        browser_client.send.Target.createTarget.side_effect = [
            RuntimeError("Failed to find browser context with id CTX-DEFAULT"),
            {"targetId": "TARGET-FALLBACK"},
        ]
        contexts = BrowserContextManager(state=session_state)

        target_id = await contexts.create_target("https://example.com")

        assert target_id == "TARGET-FALLBACK"
        calls = browser_client.send.Target.createTarget.await_args_list
        assert len(calls) == 2
        assert calls[0].kwargs["params"] == {"url": "https://example.com", "browserContextId": "CTX-DEFAULT"}
        assert calls[1].kwargs["params"] == {"url": "https://example.com"}

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, session_state, browser_client):
        browser_client.send.Target.createTarget.side_effect = RuntimeError("Target closed")
        contexts = BrowserContextManager(state=session_state)

        with pytest.raises(RuntimeError, match="Target closed"):
            await contexts.create_target("https://example.com")
        browser_client.send.Target.createTarget.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_created_event_is_dispatched(self, session_state):
        bus = EventBus()
        seen = []
        bus.on(BrowserContextCreatedEvent, lambda event: seen.append(event))
        contexts = BrowserContextManager(state=session_state, event_bus=bus)

        await contexts.create_browser_context("https://example.com")
        await bus.wait_until_idle()

        assert len(seen) == 1
        assert seen[0].browser_context_id == "CTX-NEW"
        assert seen[0].target_id == "TARGET-NEW"
        assert seen[0].url == "https://example.com"
        await bus.stop(clear=True)


class TestCloseAndSwitch:
    """Tests for close_browser_context and switch_browser_context."""

    @pytest.mark.asyncio
    async def test_close_active_context(self, session_state, browser_client):
        contexts = BrowserContextManager(state=session_state)

        was_active = await contexts.close_browser_context("TARGET-1")

        assert was_active is True
        browser_client.send.Target.disposeBrowserContext.assert_awaited_once_with(
            params={"browserContextId": "CTX-DEFAULT"}
        )
        # Clearing the active context is left to the caller
        assert session_state.active_browser_context_id == "CTX-DEFAULT"

    @pytest.mark.asyncio
    async def test_close_inactive_context(self, browser_client):
        state = TargetSessionState(
            target_client=make_cdp_client(browser_context_id="CTX-OTHER"),
            browser_client=browser_client,
            active_browser_context_id="CTX-DEFAULT",
            active_target_id="TARGET-1",
        )
        contexts = BrowserContextManager(state=state)

        assert await contexts.close_browser_context("TARGET-2") is False
        browser_client.send.Target.disposeBrowserContext.assert_awaited_once_with(
            params={"browserContextId": "CTX-OTHER"}
        )

    @pytest.mark.asyncio
    async def test_closed_event_is_dispatched(self, session_state):
        bus = EventBus()
        seen = []
        bus.on(BrowserContextClosedEvent, lambda event: seen.append(event))
        contexts = BrowserContextManager(state=session_state, event_bus=bus)

        await contexts.close_browser_context("TARGET-1")
        await bus.wait_until_idle()

        assert [(event.browser_context_id, event.was_active) for event in seen] == [("CTX-DEFAULT", True)]
        await bus.stop(clear=True)

    @pytest.mark.asyncio
    async def test_switch_adopts_context_and_activates_target(self, browser_client):
        state = TargetSessionState(
            target_client=make_cdp_client(browser_context_id="CTX-OTHER"),
            browser_client=browser_client,
            active_browser_context_id="CTX-DEFAULT",
            active_target_id="TARGET-1",
        )
        contexts = BrowserContextManager(state=state)

        await contexts.switch_browser_context("TARGET-2")

        assert state.active_browser_context_id == "CTX-OTHER"
        browser_client.send.Target.activateTarget.assert_awaited_once_with(params={"targetId": "TARGET-2"})

    @pytest.mark.asyncio
    async def test_get_browser_context_id_for_target(self, session_state, page_client):
        contexts = BrowserContextManager(state=session_state)

        assert await contexts.get_browser_context_id_for_target("TARGET-1") == "CTX-DEFAULT"
        page_client.send.Target.getTargetInfo.assert_awaited_once_with(params={"targetId": "TARGET-1"})


class TestWithoutSession:
    """Context operations before any session bootstrap."""

    @pytest.mark.asyncio
    async def test_create_requires_browser_client(self):
        contexts = BrowserContextManager(state=TargetSessionState())
        with pytest.raises(SessionNotReadyError):
            await contexts.create_browser_context("https://example.com")

    @pytest.mark.asyncio
    async def test_context_lookup_requires_target_client(self):
        contexts = BrowserContextManager(state=TargetSessionState())
        with pytest.raises(SessionNotReadyError):
            await contexts.get_browser_context_id_for_target("TARGET-1")
