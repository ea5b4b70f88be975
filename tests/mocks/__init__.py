"""Mock implementations for testing."""

from tests.mocks.sinks import CrashingSink, FailingSink, RecordingSink
from tests.mocks.sources import (
    FIXED_TIMESTAMP_US,
    SOURCES,
    BrokenQuoteSource,
    EmptyQuoteSource,
    FlakyQuoteSource,
    MislabelledQuoteSource,
    MockQuoteSource,
)


__all__ = [
    "FIXED_TIMESTAMP_US",
    "SOURCES",
    "BrokenQuoteSource",
    "CrashingSink",
    "EmptyQuoteSource",
    "FailingSink",
    "FlakyQuoteSource",
    "MislabelledQuoteSource",
    "MockQuoteSource",
    "RecordingSink",
]
