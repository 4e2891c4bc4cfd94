"""
Logging configuration for the connectedness engine.

Console and file handlers for the ``connectedness`` logger tree, routing of
numerical warnings raised inside the per-pair regressions, and small helpers
for timed stages and window progress.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Any, Optional

from ..core.exceptions import ConnectednessError, format_exception_chain


# Format strings
CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DETAILED_FORMAT = '%(asctime)s [%(levelname)s] %(name)s (%(threadName)s %(filename)s:%(lineno)d): %(message)s'
QUIET_FORMAT = '[%(levelname)s] %(message)s'

PACKAGE_LOGGER = 'connectedness'

# Third-party loggers that are only interesting when debugging
NOISY_LOGGERS = ('matplotlib', 'PIL', 'openpyxl')


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    detailed: bool = False,
    quiet: bool = False,
    capture_warnings: bool = True,
) -> None:
    """
    Configure logging for a connectedness run.

    Args:
        level: Level of the package loggers (default: INFO)
        log_file: Optional path of a DEBUG-level log file
        detailed: Include thread and source location (useful with worker pools)
        quiet: Only warnings and errors on the console
        capture_warnings: Route ``warnings`` (statsmodels, numpy) into logging
    """
    if quiet:
        level = logging.WARNING
        fmt = QUIET_FORMAT
    elif detailed:
        fmt = DETAILED_FORMAT
    else:
        fmt = CONSOLE_FORMAT

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(fmt))
    console_handler.setLevel(level)
    handlers = [console_handler]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT))
        file_handler.setLevel(logging.DEBUG)  # file keeps per-pair diagnostics
        handlers.append(file_handler)

    # Root accepts everything; handlers do the filtering
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # Package level; a log file needs the debug records too
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if log_file else level)

    # One regression per ordered pair and window can warn thousands of times
    logging.captureWarnings(capture_warnings)
    if capture_warnings:
        warnings_level = logging.WARNING if level <= logging.DEBUG else logging.ERROR
        logging.getLogger('py.warnings').setLevel(warnings_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the package tree.

    Args:
        name: Module or component name

    Returns:
        ``connectedness.<name>`` logger (names already in the tree are kept)
    """
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + '.'):
        return logging.getLogger(name)
    return logging.getLogger(PACKAGE_LOGGER).getChild(name)


def log_exception(logger: logging.Logger, exc: Exception, context: str = "") -> None:
    """
    Log an exception with its cause chain.

    The traceback is attached for unexpected errors only; package errors
    already carry their details in the message.

    Args:
        logger: Logger instance
        exc: Exception to log
        context: Optional stage description
    """
    message = format_exception_chain(exc)
    if context:
        message = f"{context}: {message}"
    exc_info = None if isinstance(exc, ConnectednessError) else exc
    logger.error(message, exc_info=exc_info)


class LogContext:
    """
    Context manager logging a timed pipeline stage.

    Keyword fields are appended to the start message.

    Example:
        with LogContext(logger, "Calculating connectedness measures", windows=49):
            results = scheduler.run(task, windows)
        # "Calculating connectedness measures (windows=49)..."
        # "Calculating connectedness measures completed in 3.41s"
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO, **fields: Any):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.fields = fields
        self.elapsed: Optional[float] = None
        self._start: Optional[float] = None

    def __enter__(self) -> 'LogContext':
        self._start = time.perf_counter()
        if self.fields:
            detail = ", ".join(f"{key}={value}" for key, value in self.fields.items())
            self.logger.log(self.level, f"{self.operation} ({detail})...")
        else:
            self.logger.log(self.level, f"{self.operation}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.elapsed = time.perf_counter() - self._start

        if exc_type is None:
            self.logger.log(self.level, f"{self.operation} completed in {self.elapsed:.2f}s")
        else:
            self.logger.error(f"{self.operation} failed after {self.elapsed:.2f}s: {exc_val}")

        return False  # never suppress


class ProgressLogger:
    """
    Console progress sink fed with completion fractions.

    Instances are callable, so they can be handed to the scheduler directly.

    Example:
        progress = ProgressLogger(logger, description="Calculating connectedness measures")
        scheduler.run(task, windows, progress=progress)
        progress.finish()
    """

    def __init__(
        self,
        logger: logging.Logger,
        description: str = "Processing",
        step: float = 0.05,
        stream=None,
    ):
        self.logger = logger
        self.description = description
        self.step = step
        self.stream = stream if stream is not None else sys.stdout
        self.fraction = 0.0
        self._last_shown = -1.0

    def __call__(self, fraction: float) -> None:
        self.update(fraction)

    def update(self, fraction: float) -> None:
        """Update progress."""
        # Out-of-order completions must not move the bar backwards
        self.fraction = max(self.fraction, min(max(fraction, 0.0), 1.0))
        if self.fraction - self._last_shown >= self.step or self.fraction >= 1.0:
            self._last_shown = self.fraction
            self.stream.write(f"\r  {self.description}... {self.fraction * 100:.0f}%")
            self.stream.flush()

    def finish(self, message: Optional[str] = None) -> None:
        """Complete progress logging."""
        self.stream.write("\n")
        self.stream.flush()
        if message:
            self.logger.info(message)
        else:
            self.logger.info(f"{self.description} completed")
