"""Target view models and errors."""

import re
from collections.abc import Mapping
from typing import Any, TypeAlias

from cdp_use.cdp.target import TargetID
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TargetInfo(BaseModel):
    """A live debuggee as reported by the browser.

    Accepts both the `/json/list` shape (`id`, `webSocketDebuggerUrl`) and the
    CDP `TargetInfo` shape (`targetId`, `browserContextId`, `openerId`).
    """

    model_config = ConfigDict(
        extra='allow',
        populate_by_name=True,
    )

    id: TargetID = Field(validation_alias=AliasChoices('id', 'targetId'))
    url: str = ''
    title: str = ''
    type: str = 'page'
    browser_context_id: str | None = Field(
        default=None, validation_alias=AliasChoices('browser_context_id', 'browserContextId')
    )
    opener_id: TargetID | None = Field(default=None, validation_alias=AliasChoices('opener_id', 'openerId'))
    web_socket_debugger_url: str | None = Field(
        default=None, validation_alias=AliasChoices('web_socket_debugger_url', 'webSocketDebuggerUrl')
    )

    @property
    def is_page(self) -> bool:
        return self.type == 'page'


class TargetReference(BaseModel):
    """Identifies a target by the name it was registered under."""

    name: str


# Mappings with a "name" key are accepted like TargetReference
Identifier: TypeAlias = str | re.Pattern | TargetReference | Mapping[str, Any]


class TargetPartition(BaseModel):
    """Page targets split by whether they satisfy an identifier."""

    matching: list[TargetInfo] = Field(default_factory=list)
    others: list[TargetInfo] = Field(default_factory=list)


class TargetError(Exception):
    """Base error for target resolution and browser context management."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f'{self.message} ({self.details})'
        return self.message


class NoTargetsYetError(TargetError):
    """The browser has not reported any page target yet."""
    pass


class SessionNotReadyError(TargetError):
    """No CDP session has been bootstrapped for the requested operation."""
    pass


# CDP reports a disposed or unknown context only through the error text.
STALE_BROWSER_CONTEXT_MARKERS = (
    'Failed to find browser context with id',
    'browserContextId',
)


def is_stale_browser_context_error(error: BaseException) -> bool:
    """Check whether a CDP error says the addressed browser context is gone."""
    texts = [str(error)]
    message = getattr(error, 'message', None)
    if isinstance(message, str):
        texts.append(message)
    for arg in getattr(error, 'args', ()):
        if isinstance(arg, dict) and isinstance(arg.get('message'), str):
            texts.append(arg['message'])
    return any(marker in text for text in texts for marker in STALE_BROWSER_CONTEXT_MARKERS)
