"""
Queue-based logging.

Log calls from the tick loop and the dashboard only enqueue records;
a listener thread formats them and does the console and file I/O.
"""

import logging
import sys
from collections.abc import Sequence
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue

from arbitrage_tracker.config.constants import LOG_DATE_FORMAT, LOG_FORMAT, MAX_LOG_QUEUE_SIZE


# Loggers routed through the queue: the tracker itself and the HTTP server
ROUTED_LOGGERS: tuple[str, ...] = ("arbitrage_tracker", "uvicorn.error")


class MicrosecondFormatter(logging.Formatter):
    """Formatter with microsecond UTC timestamps, matching dashboard labels."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ct = datetime.fromtimestamp(record.created, tz=UTC)
        return f"{ct.strftime(datefmt or LOG_DATE_FORMAT)}.{ct.microsecond:06d}"


class AsyncLogger:
    """
    Non-blocking log pipeline.

    One queue handler is attached to each routed logger; the console
    handler honors the configured level, the optional file handler
    receives everything down to DEBUG.
    """

    def __init__(
        self,
        level: int = logging.INFO,
        log_file: Path | None = None,
        logger_names: Sequence[str] = ROUTED_LOGGERS,
    ) -> None:
        """
        Initialize the pipeline without starting it.

        Args:
            level: Console level, also applied to the routed loggers.
            log_file: Optional file receiving a full copy of the output.
            logger_names: Loggers whose records go through the queue.
        """
        self._level = level
        self._log_file = log_file
        self._loggers = [logging.getLogger(name) for name in logger_names]
        self._queue: Queue[logging.LogRecord] = Queue(maxsize=MAX_LOG_QUEUE_SIZE)
        self._queue_handler = QueueHandler(self._queue)
        self._listener: QueueListener | None = None

    def _build_handlers(self) -> list[logging.Handler]:
        formatter = MicrosecondFormatter(LOG_FORMAT, LOG_DATE_FORMAT)

        console = logging.StreamHandler(sys.stdout)
        console.setLevel(self._level)
        handlers: list[logging.Handler] = [console]

        if self._log_file is not None:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self._log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            handlers.append(file_handler)

        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers

    def start(self) -> None:
        """Attach the queue handler and start the listener thread."""
        if self._listener is not None:
            return

        self._listener = QueueListener(
            self._queue,
            *self._build_handlers(),
            respect_handler_level=True,
        )
        self._listener.start()

        file_level = logging.DEBUG if self._log_file is not None else self._level
        for logger in self._loggers:
            logger.addHandler(self._queue_handler)
            logger.setLevel(min(self._level, file_level))
            logger.propagate = False

    def stop(self) -> None:
        """Detach from the loggers, drain the queue and close the outputs."""
        for logger in self._loggers:
            logger.removeHandler(self._queue_handler)
            logger.propagate = True

        if self._listener is None:
            return

        self._listener.stop()
        for handler in self._listener.handlers:
            handler.close()
        self._listener = None

    @property
    def is_running(self) -> bool:
        """Check if the listener thread is active."""
        return self._listener is not None

    def __enter__(self) -> "AsyncLogger":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
) -> AsyncLogger:
    """
    Set up application-wide logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional log file path.

    Returns:
        The started AsyncLogger; call stop() on exit to flush it.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)

    async_logger = AsyncLogger(level=numeric_level, log_file=log_file)
    async_logger.start()

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return async_logger
