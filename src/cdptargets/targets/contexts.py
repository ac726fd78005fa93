"""Browser context management over CDP.

Creates, activates and disposes isolated browser contexts (separate cookie
and storage jars) and opens targets inside them. All calls go through the
browser-level CDP client held by :class:`TargetSessionState`, except the
target info query which uses the page-level client.

Example:
    >>> contexts = BrowserContextManager(state=state, event_bus=bus)
    >>> target_id = await contexts.create_browser_context('https://example.com')
    >>> was_active = await contexts.close_browser_context(target_id)
"""

import logging
from typing import Any

from bubus import EventBus
from cdp_use.cdp.target import TargetID
from cdp_use.cdp.target.commands import CreateTargetParameters
from pydantic import BaseModel, ConfigDict, Field

from cdptargets.targets.events import BrowserContextClosedEvent, BrowserContextCreatedEvent
from cdptargets.targets.state import TargetSessionState
from cdptargets.targets.views import is_stale_browser_context_error

logger = logging.getLogger(__name__)


class BrowserContextManager(BaseModel):
    """Opens, switches and closes browser contexts for the current session."""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra='forbid',
        revalidate_instances='never',
    )

    state: TargetSessionState
    event_bus: EventBus | None = Field(default=None)

    async def create_browser_context(self, url: str) -> TargetID:
        """Create a fresh browser context, make it active and open `url` in it.

        Args:
            url: Address of the first page of the new context.

        Returns:
            Target id of the page opened in the new context.
        """
        browser_client = self.state.require_browser_client()
        result = await browser_client.send.Target.createBrowserContext()
        browser_context_id = result['browserContextId']
        self.state.active_browser_context_id = browser_context_id
        logger.debug(f'Created browser context {browser_context_id}')

        target_id = await self.create_target(url)

        if self.event_bus is not None:
            self.event_bus.dispatch(
                BrowserContextCreatedEvent(browser_context_id=browser_context_id, target_id=target_id, url=url)
            )
        return target_id

    async def create_target(self, url: str) -> TargetID:
        """Open `url` in a new target inside the active browser context.

        When the browser no longer knows the active context, the target is
        created once more in the default context instead.

        Raises:
            Exception: Any CDP error other than an unknown browser context.
        """
        browser_client = self.state.require_browser_client()
        params: CreateTargetParameters = {'url': url}
        if self.state.active_browser_context_id:
            params['browserContextId'] = self.state.active_browser_context_id

        try:
            result = await browser_client.send.Target.createTarget(params=params)
        except Exception as e:
            if not is_stale_browser_context_error(e):
                raise
            logger.warning(
                f'Browser context {self.state.active_browser_context_id} is gone, '
                f'opening {url} in the default context: {e}'
            )
            result = await browser_client.send.Target.createTarget(params={'url': url})

        target_id = result['targetId']
        logger.debug(f'Created target {target_id} for {url}')
        return target_id

    async def close_browser_context(self, target_id: TargetID) -> bool:
        """Dispose the browser context that owns `target_id`.

        Returns:
            True if the disposed context was the active one. The caller decides
            whether to clear or reassign the active context.
        """
        browser_context_id = await self.get_browser_context_id_for_target(target_id)
        browser_client = self.state.require_browser_client()
        await browser_client.send.Target.disposeBrowserContext(params={'browserContextId': browser_context_id})
        was_active = browser_context_id == self.state.active_browser_context_id
        logger.debug(f'Disposed browser context {browser_context_id} (active={was_active})')

        if self.event_bus is not None:
            self.event_bus.dispatch(
                BrowserContextClosedEvent(browser_context_id=browser_context_id, was_active=was_active)
            )
        return was_active

    async def switch_browser_context(self, target_id: TargetID) -> None:
        """Adopt the context of `target_id` as active and bring the target to the front."""
        self.state.active_browser_context_id = await self.get_browser_context_id_for_target(target_id)
        browser_client = self.state.require_browser_client()
        await browser_client.send.Target.activateTarget(params={'targetId': str(target_id)})
        logger.debug(f'Switched to browser context {self.state.active_browser_context_id} via target {target_id}')

    async def get_browser_context_id_for_target(self, target_id: TargetID) -> str | None:
        target_client = self.state.require_target_client()
        result: dict[str, Any] = await target_client.send.Target.getTargetInfo(params={'targetId': target_id})
        return result['targetInfo'].get('browserContextId')
