"""Target discovery through the browser's HTTP debugging endpoints."""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from cdptargets.config import ConnectionConfig
from cdptargets.targets.matching import matches
from cdptargets.targets.registry import TargetRegistry
from cdptargets.targets.state import TargetSessionState
from cdptargets.targets.views import Identifier, NoTargetsYetError, TargetInfo, TargetPartition

logger = logging.getLogger(__name__)

TARGET_POLL_INTERVAL = 0.1


class TargetDiscovery(BaseModel):
    """Lists live targets and finds the ones an identifier points at.

    Right after a context or page is created the browser may not list it
    yet, so `wait_for_target_to_be_created` polls a bounded number of times.

    Attributes:
        config: Host and port of the browser's debugging endpoint.
        state: Session state, read for the active target id.
        registry: Named targets used for name matching.
        poll_interval: Seconds between two polls of the target list.
        transport: Optional httpx transport, used to talk to something other than a real browser.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra='forbid',
        revalidate_instances='never',
    )

    config: ConnectionConfig
    state: TargetSessionState
    registry: TargetRegistry
    poll_interval: float = Field(default=TARGET_POLL_INTERVAL, ge=0)
    transport: httpx.AsyncBaseTransport | None = None

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.config.http_url, transport=self.transport)

    async def _get_json(self, path: str) -> Any:
        async with self._http_client() as client:
            response = await client.get(path)
            response.raise_for_status()
            return response.json()

    async def list_targets(self) -> list[TargetInfo]:
        """Fetch every target the browser currently exposes (`/json/list`)."""
        raw_targets = await self._get_json('/json/list')
        return [TargetInfo.model_validate(raw_target) for raw_target in raw_targets or []]

    async def list_page_targets(self) -> list[TargetInfo]:
        return [target for target in await self.list_targets() if target.is_page]

    async def get_browser_debug_url(self) -> str:
        """Browser-level websocket URL, from config or from `/json/version`."""
        if self.config.browser_debug_url:
            return self.config.browser_debug_url
        version_info = await self._get_json('/json/version')
        return version_info['webSocketDebuggerUrl']

    async def wait_for_target_to_be_created(self, max_attempts: int) -> TargetInfo:
        """Return the first page target, polling while the browser lists none.

        Args:
            max_attempts: Total number of list queries before giving up.

        Returns:
            The first target of type "page".

        Raises:
            NoTargetsYetError: If no page target showed up in time.
            httpx.HTTPError: If the endpoint stayed unreachable for every attempt.
        """
        remaining = max_attempts
        while True:
            try:
                targets = await self.list_targets()
                if not targets:
                    raise NoTargetsYetError('No targets created yet!')
                page = next((target for target in targets if target.is_page), None)
                if page is None:
                    raise NoTargetsYetError('No targets created yet!', details={'target_count': len(targets)})
                return page
            except (NoTargetsYetError, httpx.HTTPError) as e:
                logger.debug(f'Waiting for a page target ({remaining} attempt(s) left): {e}')
                if remaining < 2:
                    raise
            remaining -= 1
            await asyncio.sleep(self.poll_interval)

    async def get_cri_targets(self, identifier: Identifier | None = None) -> TargetPartition:
        """Split the live page targets by whether they match `identifier`.

        Without an identifier the active target is the only match.
        """
        pages = await self.list_page_targets()

        if not identifier:
            active_target_id = self.state.active_target_id
            return TargetPartition(
                matching=[target for target in pages if target.id == active_target_id],
                others=[target for target in pages if target.id != active_target_id],
            )

        partition = TargetPartition()
        for target in pages:
            if matches(target, identifier, self.registry):
                partition.matching.append(target)
            else:
                partition.others.append(target)
        return partition
