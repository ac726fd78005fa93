"""Session identity state shared by the target components."""

import asyncio
import logging
from typing import Any

from cdp_use import CDPClient
from cdp_use.cdp.target import TargetID
from pydantic import BaseModel, ConfigDict, PrivateAttr

from cdptargets.targets.views import SessionNotReadyError

logger = logging.getLogger(__name__)


class TargetSessionState(BaseModel):
    """Identity state of the current CDP session.

    Holds the two CDP connections (page-level and browser-level) and the ids
    of the active target and browser context. A new session bootstrap
    overwrites every field; nothing else tears the state down.

    The readiness barrier lets callers wait until the bootstrap of the latest
    session has finished before they issue target calls:

        >>> state.begin_bootstrap()
        >>> ...  # bootstrap work
        >>> state.finish_bootstrap()
        >>> await state.wait_until_ready()
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=False,
        revalidate_instances='never',
    )

    target_client: Any = None  # CDPClient of the page session
    browser_client: Any = None  # CDPClient on the browser debug URL
    active_browser_context_id: str | None = None
    active_target_id: TargetID | None = None

    _ready: asyncio.Event = PrivateAttr(default_factory=asyncio.Event)
    _bootstrap_error: BaseException | None = PrivateAttr(default=None)
    _bootstrapping: bool = PrivateAttr(default=False)

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set() and self._bootstrap_error is None

    @property
    def is_bootstrapping(self) -> bool:
        return self._bootstrapping

    def require_target_client(self) -> CDPClient:
        if self.target_client is None:
            raise SessionNotReadyError('No CDP session has been established for target queries')
        return self.target_client

    def require_browser_client(self) -> CDPClient:
        if self.browser_client is None:
            raise SessionNotReadyError('No browser-level CDP connection has been established')
        return self.browser_client

    def begin_bootstrap(self) -> None:
        """Close the barrier until the current session is fully set up."""
        self._bootstrapping = True
        self._bootstrap_error = None
        self._ready.clear()

    def finish_bootstrap(self) -> None:
        self._bootstrapping = False
        self._ready.set()

    def fail_bootstrap(self, error: BaseException) -> None:
        """Release waiters with the error that stopped the bootstrap."""
        logger.error(f'Session bootstrap failed: {type(error).__name__}: {error}')
        self._bootstrapping = False
        self._bootstrap_error = error
        self._ready.set()

    async def wait_until_ready(self, timeout: float | None = None) -> None:
        """Block until the latest session bootstrap has completed.

        Args:
            timeout: Seconds to wait before raising TimeoutError. None waits forever.

        Raises:
            TimeoutError: If the bootstrap did not finish in time.
            Exception: The error the bootstrap failed with, if it failed.
        """
        if timeout is None:
            await self._ready.wait()
        else:
            await asyncio.wait_for(self._ready.wait(), timeout=timeout)
        if self._bootstrap_error is not None:
            raise self._bootstrap_error
