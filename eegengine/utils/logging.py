"""
Logging Utilities
=================

Central logging configuration for the EEG engine.

Every module obtains its logger through ``get_logger(__name__)``; nothing
in the library configures handlers on import. Applications (or tests)
call ``setup_logging`` once, optionally driven by the ``logging`` section
of the engine configuration.

Conventions used across the engine:
----------------------------------
- DEBUG: per-channel decode details, filter designs, window counts
- INFO: recording loaded/saved, montage applied
- WARNING: recoverable anomalies (corrupted calibration, skipped CSV rows,
  invalid filter parameters)
- ERROR: decode/encode failures right before they propagate

Example Usage:
    ```python
    from eegengine.utils.logging import get_logger, setup_logging

    setup_logging(level='DEBUG', log_file='logs/eegengine.log')
    logger = get_logger(__name__)
    logger.info("Decoding started")
    ```
"""

import logging
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DETAILED_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

ROOT_LOGGER_NAME = 'eegengine'

COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
    'RESET': '\033[0m'
}

ProgressCallback = Callable[[int, int], None]


# =============================================================================
# FORMATTER
# =============================================================================

class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal."""

    def __init__(self, fmt: str = DEFAULT_FORMAT, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        original_levelname = record.levelname

        if self.use_colors:
            color = COLORS.get(record.levelname, '')
            record.levelname = f"{color}{record.levelname}{COLORS['RESET']}"

        result = super().format(record)
        record.levelname = original_levelname
        return result


# =============================================================================
# SETUP
# =============================================================================

def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(
    level: Union[str, int] = 'INFO',
    log_file: Optional[str] = None,
    console: bool = True,
    use_colors: bool = True,
    detailed: bool = False
) -> logging.Logger:
    """
    Configure the ``eegengine`` logger hierarchy.

    Handlers are attached to the package logger rather than the root
    logger so that host applications keep control of their own output.

    Args:
        level: Log level name or number
        log_file: Optional file to also write logs to
        console: Whether to log to stdout
        use_colors: Color level names on a TTY
        detailed: Include file and line number in each record

    Returns:
        logging.Logger: The configured package logger
    """
    level = _to_level(level)
    format_string = DETAILED_FORMAT if detailed else DEFAULT_FORMAT

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(ColoredFormatter(format_string, use_colors))
        package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(format_string))
        package_logger.addHandler(file_handler)

    package_logger.debug(f"Logging configured: level={logging.getLevelName(level)}")
    return package_logger


def setup_logging_from_config(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of the engine config.

    Args:
        config: Section dict; defaults to ``get_config().get_section('logging')``
    """
    if config is None:
        from eegengine.core.config import get_config
        config = get_config().get_section('logging')

    return setup_logging(
        level=config.get('level', 'INFO'),
        log_file=config.get('file'),
        console=config.get('console', True),
        use_colors=config.get('colors', True),
        detailed=config.get('detailed', False)
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module (typically ``__name__``).
    """
    return logging.getLogger(name)


def set_level(level: Union[str, int], logger_name: Optional[str] = ROOT_LOGGER_NAME) -> None:
    """Set the level of a logger, the package logger by default."""
    logging.getLogger(logger_name).setLevel(_to_level(level))


# =============================================================================
# DECORATORS / CONTEXT MANAGERS
# =============================================================================

def log_execution_time(logger: Optional[logging.Logger] = None,
                       level: int = logging.DEBUG):
    """
    Decorator to log how long a call took.

    Example:
        >>> @log_execution_time()
        ... def decode(path):
        ...     ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger or logging.getLogger(func.__module__)

            start_time = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed = time.perf_counter() - start_time

            log.log(level, f"{func.__qualname__} executed in {elapsed:.3f}s")
            return result

        return wrapper
    return decorator


class LogLevel:
    """
    Context manager for temporarily changing a logger's level.

    Example:
        >>> with LogLevel('DEBUG'):
        ...     codec.decode(path)
    """

    def __init__(self, level: Union[str, int], logger_name: Optional[str] = ROOT_LOGGER_NAME):
        self.level = _to_level(level)
        self.logger_name = logger_name
        self.original_level = None

    def __enter__(self):
        logger = logging.getLogger(self.logger_name)
        self.original_level = logger.level
        logger.setLevel(self.level)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.getLogger(self.logger_name).setLevel(self.original_level)
        return False


# =============================================================================
# PROGRESS REPORTING
# =============================================================================

class ProgressReporter:
    """
    Forwards ``(current, total)`` progress to an optional callback and
    logs at coarse percentage intervals.

    Used by long-running operations (record decoding, spectrogram windows).
    The callback runs synchronously on the calling thread.

    Example:
        >>> progress = ProgressReporter(total=n_records, desc="Decoding", callback=cb)
        >>> for record in range(n_records):
        ...     ...
        ...     progress.update()
        >>> progress.finish()
    """

    def __init__(self,
                 total: int,
                 desc: str = 'Progress',
                 callback: Optional[ProgressCallback] = None,
                 logger: Optional[logging.Logger] = None,
                 log_interval: float = 25.0):
        self.total = max(int(total), 0)
        self.desc = desc
        self.callback = callback
        self.logger = logger or logging.getLogger(__name__)
        self.log_interval = log_interval
        self.current = 0
        self.start_time = time.perf_counter()
        self._last_logged = 0.0

    def update(self, n: int = 1) -> None:
        """Advance progress by ``n`` steps."""
        self.current += n

        if self.callback is not None:
            self.callback(self.current, self.total)

        if self.total == 0:
            return

        percent = (self.current / self.total) * 100
        if percent - self._last_logged >= self.log_interval or self.current == self.total:
            self.logger.debug(f"{self.desc}: {self.current}/{self.total} ({percent:.1f}%)")
            self._last_logged = percent

    def finish(self) -> None:
        """Log completion with elapsed time."""
        elapsed = time.perf_counter() - self.start_time
        self.logger.debug(f"{self.desc}: complete ({elapsed:.3f}s)")
