"""cdptargets - resolve and manage Chrome DevTools Protocol targets and browser contexts."""

from typing import TYPE_CHECKING

__version__ = "0.1.0"

from cdptargets.config import CONFIG, ConnectionConfig

if CONFIG.SETUP_LOGGING:
    from cdptargets.logging_config import setup_logging

    setup_logging(debug_log_file=CONFIG.DEBUG_LOG_FILE, info_log_file=CONFIG.INFO_LOG_FILE)

if TYPE_CHECKING:
    from cdptargets.targets import (
        NoTargetsYetError,
        SessionNotReadyError,
        TargetError,
        TargetInfo,
        TargetManager,
        TargetPartition,
        TargetReference,
        TargetRegistry,
    )

_LAZY_IMPORTS = {
    'TargetManager': ('cdptargets.targets.manager', 'TargetManager'),
    'TargetRegistry': ('cdptargets.targets.registry', 'TargetRegistry'),
    'TargetInfo': ('cdptargets.targets.views', 'TargetInfo'),
    'TargetPartition': ('cdptargets.targets.views', 'TargetPartition'),
    'TargetReference': ('cdptargets.targets.views', 'TargetReference'),
    'TargetError': ('cdptargets.targets.views', 'TargetError'),
    'NoTargetsYetError': ('cdptargets.targets.views', 'NoTargetsYetError'),
    'SessionNotReadyError': ('cdptargets.targets.views', 'SessionNotReadyError'),
}


def __getattr__(name: str):
    """Lazy import mechanism for the CDP-backed modules.

    Keeps `import cdptargets` cheap for code that only needs the config.
    """
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        import importlib
        module = importlib.import_module(module_path)
        return getattr(module, attr_name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "CONFIG",
    "ConnectionConfig",
    "TargetManager",
    "TargetRegistry",
    "TargetInfo",
    "TargetPartition",
    "TargetReference",
    "TargetError",
    "NoTargetsYetError",
    "SessionNotReadyError",
]
