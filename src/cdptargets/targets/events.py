"""Event definitions for target lifecycle communication."""

import os
from typing import Any

from bubus import BaseEvent
from cdp_use.cdp.target import TargetID
from pydantic import Field


def _get_timeout(env_var: str, default: float) -> float | None:
    """Safely parse environment variable timeout values with robust error handling.

    Args:
        env_var: Environment variable name (e.g. 'TIMEOUT_SessionCreatedEvent')
        default: Default timeout value as float (e.g. 30.0)

    Returns:
        Parsed float value or the default if parsing fails
    """
    env_value = os.getenv(env_var)
    if env_value:
        try:
            parsed = float(env_value)
            if parsed < 0:
                return default
            return parsed
        except (ValueError, TypeError):
            pass

    return default


# ============================================================================
# Session Events
# ============================================================================


class SessionCreatedEvent(BaseEvent[None]):
    """A new CDP session to a page target has been established."""

    cdp_client: Any = Field(description='Page-level CDP client of the new session')
    target_id: TargetID

    event_timeout: float | None = _get_timeout('TIMEOUT_SessionCreatedEvent', 30.0)


# ============================================================================
# Target Events
# ============================================================================


class TargetCreatedEvent(BaseEvent[None]):
    """The browser opened a new page that callers may want to follow."""

    target_id: TargetID
    url: str = ''
    title: str = ''
    type: str = 'page'
    opener_id: TargetID | None = None
    browser_context_id: str | None = None
    target_info: dict[str, Any] = Field(default_factory=dict)

    event_timeout: float | None = _get_timeout('TIMEOUT_TargetCreatedEvent', 10.0)


# ============================================================================
# Browser Context Events
# ============================================================================


class BrowserContextCreatedEvent(BaseEvent[None]):
    """An isolated browser context was created and a page opened in it."""

    browser_context_id: str
    target_id: TargetID
    url: str

    event_timeout: float | None = _get_timeout('TIMEOUT_BrowserContextCreatedEvent', 10.0)


class BrowserContextClosedEvent(BaseEvent[None]):
    """A browser context was disposed."""

    browser_context_id: str | None
    was_active: bool = False

    event_timeout: float | None = _get_timeout('TIMEOUT_BrowserContextClosedEvent', 10.0)
