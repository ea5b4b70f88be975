"""
Append-only opportunity log.

Writes one line per flagged opportunity to a plain text file. The file
is opened for each append and closed straight after, so no handle is
held between ticks.
"""

import asyncio
import logging
from pathlib import Path

from arbitrage_tracker.config.constants import DEFAULT_TRADE_LOG_PATH
from arbitrage_tracker.core.exceptions import PersistenceError
from arbitrage_tracker.core.types import OpportunityEvent


logger = logging.getLogger(__name__)


def format_record(event: OpportunityEvent) -> str:
    """
    Render the persisted line for an event.

    Example:
        ``[PROFIT] NASDAQ vs IEX | Spread: 2.020%``
    """
    return event.record


class TradeLogSink:
    """
    File-backed persistence sink.

    Writes run in a worker thread so a slow disk never blocks the
    event loop.
    """

    def __init__(self, path: Path | str = DEFAULT_TRADE_LOG_PATH) -> None:
        """
        Initialize sink.

        Args:
            path: Log file; created on first append.
        """
        self._path = Path(path)
        self._records_written = 0

    @property
    def path(self) -> Path:
        """Get the log file path."""
        return self._path

    @property
    def records_written(self) -> int:
        """Get the number of records appended by this sink."""
        return self._records_written

    async def append(self, record: str) -> None:
        """
        Append one newline-terminated record.

        Args:
            record: Pre-formatted record text.

        Raises:
            PersistenceError: On any I/O failure.
        """
        try:
            await asyncio.to_thread(self._write, record)
        except OSError as e:
            raise PersistenceError(str(self._path), e.strerror or str(e)) from e

        self._records_written += 1
        logger.debug(f"Persisted to {self._path}: {record}")

    def _write(self, record: str) -> None:
        with self._path.open("a", encoding="utf-8") as f:
            f.write(record.rstrip("\n") + "\n")
