import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from cdptargets.config import CONFIG


class TargetsFormatter(logging.Formatter):
    """Shortens `cdptargets.*` logger names outside of debug mode."""

    def __init__(self, fmt: str, log_level: int):
        super().__init__(fmt)
        self.log_level = log_level

    def format(self, record: logging.LogRecord) -> str:
        if self.log_level > logging.DEBUG and isinstance(record.name, str) and record.name.startswith('cdptargets.'):
            record.name = record.name.split('.')[-1]
        return super().format(record)


def setup_logging(stream=None, log_level=None, force_setup=False, debug_log_file=None, info_log_file=None):
    """Setup logging configuration for cdptargets.

    Args:
        stream: Output stream for logs (default: sys.stdout). Can be sys.stderr when stdout is reserved.
        log_level: Override log level (default: uses CONFIG.LOGGING_LEVEL)
        force_setup: Force reconfiguration even if handlers already exist
        debug_log_file: Path to log file for debug level logs only
        info_log_file: Path to log file for info level logs only
    """
    level_name = (log_level or CONFIG.LOGGING_LEVEL).lower()

    # Check if handlers are already set up
    if logging.getLogger().hasHandlers() and not force_setup:
        return logging.getLogger('cdptargets')

    root = logging.getLogger()
    root.handlers = []

    if level_name == 'debug':
        effective_level = logging.DEBUG
    elif level_name in ('warning', 'error', 'critical'):
        effective_level = getattr(logging, level_name.upper())
    else:
        effective_level = logging.INFO

    console = logging.StreamHandler(stream or sys.stdout)
    console.setLevel(effective_level)
    console.setFormatter(TargetsFormatter('%(levelname)-8s [%(name)s] %(message)s', effective_level))
    root.addHandler(console)

    file_handlers = []

    if debug_log_file:
        debug_handler = logging.FileHandler(debug_log_file, encoding='utf-8')
        debug_handler.setLevel(logging.DEBUG)
        debug_handler.setFormatter(
            TargetsFormatter('%(asctime)s - %(levelname)-8s [%(name)s] %(message)s', logging.DEBUG)
        )
        file_handlers.append(debug_handler)
        root.addHandler(debug_handler)

    if info_log_file:
        info_handler = logging.FileHandler(info_log_file, encoding='utf-8')
        info_handler.setLevel(logging.INFO)
        info_handler.setFormatter(
            TargetsFormatter('%(asctime)s - %(levelname)-8s [%(name)s] %(message)s', logging.INFO)
        )
        file_handlers.append(info_handler)
        root.addHandler(info_handler)

    # Debug file logging needs DEBUG records to reach the handlers
    final_level = logging.DEBUG if debug_log_file else effective_level
    root.setLevel(final_level)

    package_logger = logging.getLogger('cdptargets')
    package_logger.handlers = []
    package_logger.propagate = False
    package_logger.addHandler(console)
    for handler in file_handlers:
        package_logger.addHandler(handler)
    package_logger.setLevel(final_level)

    bubus_logger = logging.getLogger('bubus')
    bubus_logger.handlers = []
    bubus_logger.propagate = False
    bubus_logger.addHandler(console)
    for handler in file_handlers:
        bubus_logger.addHandler(handler)
    bubus_logger.setLevel(final_level)

    cdp_level = getattr(logging, CONFIG.CDP_LOGGING_LEVEL.upper(), logging.WARNING)
    for cdp_logger_name in ('websockets.client', 'cdp_use', 'cdp_use.client', 'cdp_use.cdp', 'cdp_use.cdp.registry'):
        cdp_logger = logging.getLogger(cdp_logger_name)
        cdp_logger.handlers = []
        cdp_logger.setLevel(cdp_level)
        cdp_logger.addHandler(console)
        cdp_logger.propagate = False

    # Silence third-party loggers
    for third_party in ('httpx', 'httpcore', 'asyncio', 'websockets', 'urllib3'):
        third_party_logger = logging.getLogger(third_party)
        third_party_logger.setLevel(logging.ERROR)
        third_party_logger.propagate = False

    return package_logger
