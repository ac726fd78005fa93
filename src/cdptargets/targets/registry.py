"""Name to target id registry."""

import logging

from cdp_use.cdp.target import TargetID

logger = logging.getLogger(__name__)


class TargetRegistry:
    """Remembers targets under caller-chosen names.

    Entries never expire, so a name can outlive the target it points to.
    Lookups of such stale names are a plain miss at match time.
    """

    def __init__(self):
        self._targets: dict[str, TargetID] = {}

    def set_mapping(self, name: str, target_id: TargetID) -> None:
        """Store `target_id` under `name`, replacing any previous entry."""
        if not name or not target_id:
            raise ValueError('Both a name and a target id are required to register a target')
        previous = self._targets.get(name)
        self._targets[name] = target_id
        if previous and previous != target_id:
            logger.debug(f'Re-registered {name!r}: {previous[-4:]} -> {target_id[-4:]}')

    def get_mapping(self, name: str | None) -> TargetID | None:
        if not name:
            return None
        return self._targets.get(name)

    def unregister(self, name: str) -> None:
        self._targets.pop(name, None)

    def clear(self) -> None:
        self._targets.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __len__(self) -> int:
        return len(self._targets)
