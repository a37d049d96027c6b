"""
Observation Log module for Nest-Guard.

This module writes the tab-separated record of every poll tick and recovery
milestone.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, TextIO

from .models import ObservationRecord

logger = logging.getLogger("nest-guard")

HEADER = ("timestamp", "cooling", "temp", "notes")

# e.g. "Monday, 02-Jan-06 15:04:05 UTC"
TIMESTAMP_FORMAT = "%A, %d-%b-%y %H:%M:%S %Z"


def format_timestamp(timestamp: datetime) -> str:
    return timestamp.strftime(TIMESTAMP_FORMAT).rstrip()


def format_record(record: ObservationRecord) -> str:
    """Render a record as one TSV line, without the trailing newline."""
    timestamp = format_timestamp(record.timestamp)
    if record.note:
        return f"{timestamp}\t\t\t{record.note}"
    return f"{timestamp}\t{record.is_cooling}\t{record.temperature}"


class ObservationLog:
    """Append-only TSV log of observations.

    The file is held open for the duration of a tick and closed afterwards;
    records written outside a tick reopen it briefly.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._file: Optional[TextIO] = None

    def create(self) -> None:
        """Truncate the log and write the header row."""
        with self._lock:
            with open(self.path, "w", encoding="utf-8") as log_file:
                log_file.write("\t".join(HEADER) + "\n")
        logger.info(f"Writing observations to {self.path}")

    @contextmanager
    def tick(self) -> Iterator["ObservationLog"]:
        """Keep the log open for one poll tick, then flush and close it."""
        with self._lock:
            self._file = open(self.path, "a", encoding="utf-8")
        try:
            yield self
        finally:
            with self._lock:
                self._file.flush()
                self._file.close()
                self._file = None

    def append(self, record: ObservationRecord) -> None:
        line = format_record(record) + "\n"
        with self._lock:
            if self._file is not None:
                self._file.write(line)
                return
            with open(self.path, "a", encoding="utf-8") as log_file:
                log_file.write(line)

    def sample(self, sample) -> None:
        self.append(ObservationRecord.for_sample(sample))

    def note(self, note: str) -> None:
        self.append(ObservationRecord.for_note(note))
