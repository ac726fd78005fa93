"""Session bootstrap watchdog.

Reacts to every new CDP session: adopts its client and initial target as the
active ones, opens a browser-level connection for context management and
arms `Target.targetCreated` so new pages get surfaced on the event bus.

Classes:
    SessionBootstrap: Listens to SessionCreatedEvent and emits TargetCreatedEvent.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from bubus import BaseEvent, EventBus
from cdp_use import CDPClient
from cdp_use.cdp.target import SessionID, TargetID
from pydantic import BaseModel, ConfigDict, Field

from cdptargets.config import ConnectionConfig
from cdptargets.targets.contexts import BrowserContextManager
from cdptargets.targets.discovery import TargetDiscovery
from cdptargets.targets.events import SessionCreatedEvent, TargetCreatedEvent
from cdptargets.targets.state import TargetSessionState
from cdptargets.targets.views import TargetError

logger = logging.getLogger(__name__)


def _target_id_of(current_target: Any) -> TargetID:
    """Accept a target id or anything carrying one (`id` / `targetId`)."""
    if isinstance(current_target, str):
        target_id = current_target
    elif isinstance(current_target, Mapping):
        target_id = current_target.get('id') or current_target.get('targetId')
    else:
        target_id = getattr(current_target, 'id', None)
    if not target_id:
        raise TargetError(
            'Session target carries no target id', details={'target': repr(current_target)}
        )
    return target_id


class SessionBootstrap(BaseModel):
    """Prepares the session state whenever a new CDP session is created.

    Callers that must not race ahead of the setup wait on
    ``state.wait_until_ready()``, which is released at the end of
    :meth:`handle_new_session`.

    Listens to:
        SessionCreatedEvent: Runs the bootstrap for the new session.

    Emits:
        TargetCreatedEvent: For pages opened by another page (or any page on Firefox).
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra='forbid',
        validate_assignment=False,
        revalidate_instances='never',
    )

    LISTENS_TO: ClassVar[list[type[BaseEvent[Any]]]] = [SessionCreatedEvent]
    EMITS: ClassVar[list[type[BaseEvent[Any]]]] = [TargetCreatedEvent]

    event_bus: EventBus = Field()
    state: TargetSessionState
    config: ConnectionConfig
    contexts: BrowserContextManager
    discovery: TargetDiscovery
    browser_client_factory: Callable[[str], Any] = Field(default=CDPClient)

    def attach_to_session(self) -> None:
        """Register event handlers."""
        self.event_bus.on(SessionCreatedEvent, self.on_SessionCreatedEvent)

    async def on_SessionCreatedEvent(self, event: SessionCreatedEvent) -> None:
        await self.handle_new_session(event.cdp_client, event.target_id)

    async def handle_new_session(self, client: Any, current_target: Any) -> None:
        """Adopt a freshly established session.

        Args:
            client: Page-level CDP client of the new session.
            current_target: The session's initial target, or its id.

        Raises:
            Exception: Any CDP or HTTP error hit during the setup. Waiters on
                the readiness barrier receive the same error.
        """
        self.state.begin_bootstrap()
        try:
            self.state.target_client = client
            self.state.active_target_id = _target_id_of(current_target)
            self.state.active_browser_context_id = await self.contexts.get_browser_context_id_for_target(
                self.state.active_target_id
            )

            await self._connect_browser_client()

            await client.send.Target.setDiscoverTargets(params={'discover': True})
            client.register.Target.targetCreated(self._on_target_created)
        except Exception as e:
            self.state.fail_bootstrap(e)
            raise

        logger.debug(
            f'Session ready: target={self.state.active_target_id} '
            f'context={self.state.active_browser_context_id}'
        )
        self.state.finish_bootstrap()

    async def _connect_browser_client(self) -> None:
        browser_debug_url = await self.discovery.get_browser_debug_url()

        previous_client = self.state.browser_client
        if previous_client is not None:
            try:
                await previous_client.stop()
            except Exception as e:
                logger.debug(f'Failed to stop browser client of the previous session: {e}')
            self.state.browser_client = None

        browser_client = self.browser_client_factory(browser_debug_url)
        await browser_client.start()
        self.state.browser_client = browser_client

    def _on_target_created(self, event: dict[str, Any], session_id: SessionID | None = None) -> None:
        target_info = event['targetInfo']
        if target_info.get('type') != 'page':
            return
        if not (target_info.get('openerId') or self.config.firefox):
            return

        logger.info(f'Target Created: Target id: {target_info["targetId"]}')
        self.event_bus.dispatch(
            TargetCreatedEvent(
                target_id=target_info['targetId'],
                url=target_info.get('url', ''),
                title=target_info.get('title', ''),
                type=target_info.get('type', 'page'),
                opener_id=target_info.get('openerId') or None,
                browser_context_id=target_info.get('browserContextId'),
                target_info=dict(target_info),
            )
        )
