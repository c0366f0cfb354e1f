"""Watch-folder ingestion for new PDF files.

Responsibilities:
- Poll an input directory for newly created PDFs.
- Hand each new file to the processor, one document at a time.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import time

from .telemetry.logger import RunLogger


class DirectoryMonitor:
    """Polling monitor that processes files appearing after `start()`."""

    def __init__(
        self,
        directory: Path,
        process_file: Callable[[Path], None],
        logger: RunLogger,
        pattern: str = "*.pdf",
        poll_interval_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.directory = directory
        self.pattern = pattern
        self.poll_interval_seconds = poll_interval_seconds
        self._process_file = process_file
        self._logger = logger
        self._sleep = sleep
        self._seen: set[Path] = set()

    def start(self) -> None:
        """Create the directory if needed and ignore files already present."""

        self.directory.mkdir(parents=True, exist_ok=True)
        self._seen = set(self._matching_files())
        self._logger.log(f"Monitoring {self.directory} for {self.pattern} files...")

    def scan_once(self) -> list[Path]:
        """Process files that appeared since the last scan, in name order."""

        current = self._matching_files()
        new_files = sorted(path for path in current if path not in self._seen)
        # deleted files may be dropped in again later
        self._seen = set(current)
        for path in new_files:
            self._logger.log(f"New file detected: {path.name}")
            self._process_file(path)
        return new_files

    def run(self, max_cycles: int | None = None) -> None:
        """Poll until interrupted, or for ``max_cycles`` scans when given."""

        self.start()
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            self._sleep(self.poll_interval_seconds)
            self.scan_once()
            cycles += 1

    def _matching_files(self) -> set[Path]:
        return {path for path in self.directory.glob(self.pattern) if path.is_file()}
