"""Target resolution and browser context management over CDP."""

from cdptargets.targets.bootstrap import SessionBootstrap
from cdptargets.targets.contexts import BrowserContextManager
from cdptargets.targets.discovery import TargetDiscovery
from cdptargets.targets.manager import TargetManager
from cdptargets.targets.matching import is_matching_regex, is_matching_target, is_matching_url, matches
from cdptargets.targets.registry import TargetRegistry
from cdptargets.targets.state import TargetSessionState
from cdptargets.targets.views import (
    Identifier,
    NoTargetsYetError,
    SessionNotReadyError,
    TargetError,
    TargetInfo,
    TargetPartition,
    TargetReference,
)

__all__ = [
    "BrowserContextManager",
    "Identifier",
    "NoTargetsYetError",
    "SessionBootstrap",
    "SessionNotReadyError",
    "TargetDiscovery",
    "TargetError",
    "TargetInfo",
    "TargetManager",
    "TargetPartition",
    "TargetReference",
    "TargetRegistry",
    "TargetSessionState",
    "is_matching_regex",
    "is_matching_target",
    "is_matching_url",
    "matches",
]
