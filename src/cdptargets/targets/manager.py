"""Target manager: one entry point for target resolution and context management.

The manager owns the session state, the registry and the event bus, wires the
components together and exposes the operations callers use.

Example:
    >>> manager = TargetManager(config=ConnectionConfig(port=9222))
    >>> await manager.start()
    >>> partition = await manager.get_cri_targets('example.com')
    >>> manager.register('docs', partition.matching[0].id)
    >>> await manager.get_cri_targets(TargetReference(name='docs'))
    >>> await manager.stop()
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx
from bubus import EventBus
from cdp_use import CDPClient
from cdp_use.cdp.target import TargetID

from cdptargets.config import ConnectionConfig
from cdptargets.targets.bootstrap import SessionBootstrap
from cdptargets.targets.contexts import BrowserContextManager
from cdptargets.targets.discovery import TargetDiscovery
from cdptargets.targets.events import SessionCreatedEvent
from cdptargets.targets.matching import is_matching_regex, is_matching_target, is_matching_url
from cdptargets.targets.registry import TargetRegistry
from cdptargets.targets.state import TargetSessionState
from cdptargets.targets.views import Identifier, TargetError, TargetInfo, TargetPartition

logger = logging.getLogger(__name__)


class TargetManager:
    """Resolves identifiers to live page targets and manages browser contexts."""

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        event_bus: EventBus | None = None,
        client_factory: Callable[[str], Any] = CDPClient,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the manager and attach the session bootstrap to the bus.

        Args:
            config: Browser connection settings. Defaults to the environment.
            event_bus: Bus for session and target events. A new one is created if omitted.
            client_factory: Builds a CDP client from a websocket URL.
            transport: Optional httpx transport for the HTTP debugging endpoints.
        """
        self.config = config or ConnectionConfig.from_env()
        self.event_bus = event_bus or EventBus()
        self.state = TargetSessionState()
        self.registry = TargetRegistry()
        self._client_factory = client_factory
        self._page_client: Any = None

        self.contexts = BrowserContextManager(state=self.state, event_bus=self.event_bus)
        self.discovery = TargetDiscovery(
            config=self.config, state=self.state, registry=self.registry, transport=transport
        )
        self.bootstrap = SessionBootstrap(
            event_bus=self.event_bus,
            state=self.state,
            config=self.config,
            contexts=self.contexts,
            discovery=self.discovery,
            browser_client_factory=client_factory,
        )
        self.bootstrap.attach_to_session()

    async def start(self) -> TargetID:
        """Connect to the first page target and bootstrap a session on it.

        Returns:
            Id of the target the session was opened on.

        Raises:
            NoTargetsYetError: If the browser never listed a page target.
            TargetError: If the page target has no websocket URL to connect to.
        """
        target = await self.discovery.wait_for_target_to_be_created(self.config.max_attempts)
        if not target.web_socket_debugger_url:
            raise TargetError(
                'Page target has no websocket URL, is another debugger attached?',
                details={'target_id': target.id},
            )

        previous_client = self._page_client
        if previous_client is not None:
            try:
                await previous_client.stop()
            except Exception as e:
                logger.debug(f'Failed to stop page client of the previous session: {type(e).__name__}: {e}')
            self._page_client = None

        page_client = self._client_factory(target.web_socket_debugger_url)
        await page_client.start()
        self._page_client = page_client

        event = self.event_bus.dispatch(SessionCreatedEvent(cdp_client=page_client, target_id=target.id))
        await event
        await event.event_result(raise_if_any=True, raise_if_none=False)
        await self.state.wait_until_ready()
        logger.info(f'Connected to target {target.id} ({target.url})')
        return target.id

    async def stop(self) -> None:
        """Close the CDP connections this manager opened and stop the event bus."""
        for client in (self.state.browser_client, self._page_client):
            if client is None:
                continue
            try:
                await client.stop()
            except Exception as e:
                logger.debug(f'Failed to stop CDP client: {type(e).__name__}: {e}')
        self.state.browser_client = None
        self._page_client = None
        await self.event_bus.stop(clear=True, timeout=5)

    async def wait_until_ready(self, timeout: float | None = None) -> None:
        await self.state.wait_until_ready(timeout=timeout)

    # Discovery

    async def get_cri_targets(self, identifier: Identifier | None = None) -> TargetPartition:
        return await self.discovery.get_cri_targets(identifier)

    async def wait_for_target_to_be_created(self, max_attempts: int | None = None) -> TargetInfo:
        return await self.discovery.wait_for_target_to_be_created(max_attempts or self.config.max_attempts)

    # Matching

    def is_matching_url(self, target: TargetInfo, identifier: Identifier | None) -> bool:
        return is_matching_url(target, identifier)

    def is_matching_regex(self, target: TargetInfo, identifier: Identifier | None) -> bool:
        return is_matching_regex(target, identifier)

    def is_matching_target(self, target: TargetInfo, identifier: Identifier | None) -> bool:
        return is_matching_target(target, identifier, self.registry)

    # Registry

    def register(self, name: str, target_id: TargetID) -> None:
        self.registry.set_mapping(name, target_id)

    def lookup(self, name: str) -> TargetID | None:
        return self.registry.get_mapping(name)

    def unregister(self, name: str) -> None:
        self.registry.unregister(name)

    def clear_register(self) -> None:
        self.registry.clear()

    # Browser contexts

    async def create_browser_context(self, url: str) -> TargetID:
        return await self.contexts.create_browser_context(url)

    async def create_target(self, url: str) -> TargetID:
        return await self.contexts.create_target(url)

    async def close_browser_context(self, target_id: TargetID) -> bool:
        return await self.contexts.close_browser_context(target_id)

    async def switch_browser_context(self, target_id: TargetID) -> None:
        await self.contexts.switch_browser_context(target_id)

    async def get_browser_context_id_for_target(self, target_id: TargetID) -> str | None:
        return await self.contexts.get_browser_context_id_for_target(target_id)
