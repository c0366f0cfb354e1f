"""Run logging and progress reporting.

Responsibilities:
- Emit timestamped console lines for pipeline activity through `loguru`.
- Emit structured phase events for stage transitions.
- Provide bounded progress scopes for page-level synthesis.
"""

from __future__ import annotations

import sys
from types import TracebackType
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class ProgressTracker:
    """Bounded progress scope for one long-running operation."""

    def __init__(self, run_logger: RunLogger, description: str, maximum: int) -> None:
        self._logger = run_logger
        self.description = description
        self.maximum = max(0, maximum)
        self.current = 0

    def report(self, value: int) -> None:
        """Record the completed count, clamped to `[0, maximum]`; never moves backwards."""

        self.current = max(self.current, min(max(0, value), self.maximum))
        if self.maximum:
            percent = self.current * 100 // self.maximum
        else:
            percent = 100
        self._logger.log(
            f"[progress] {self.description}: {percent}% ({self.current}/{self.maximum})"
        )

    def complete(self) -> None:
        self.current = self.maximum

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.complete()


class RunLogger:
    """Console observer for document pipeline activity.

    The pipeline reports through this surface only; it never writes to a terminal
    directly, so tests can capture everything through the ``sink`` argument.
    """

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize the loguru sink with plain, timestamped formatting."""

        self._sink = sink or sys.stdout
        colorize = self._sink in (sys.stdout, sys.stderr) and self._sink.isatty()
        _loguru_logger.remove()
        _loguru_logger.add(
            self._sink,
            format="[{time:HH:mm:ss}] {message}",
            level=level,
            colorize=colorize,
        )

    def log(self, message: str) -> None:
        """Log an informational message."""

        _loguru_logger.info(message)

    def warning(self, message: str) -> None:
        _loguru_logger.warning(f"WARNING: {message}")

    def error(self, message: str, cause: BaseException | None = None) -> None:
        """Log an error, appending the cause type and message when given."""

        if cause is None:
            _loguru_logger.error(f"ERROR: {message}")
            return
        _loguru_logger.error(f"ERROR: {message} ({type(cause).__name__}: {cause})")

    def success(self, message: str) -> None:
        _loguru_logger.success(message)

    def header(self, title: str) -> None:
        """Log a section rule naming the work that follows."""

        rule = "-" * 8
        _loguru_logger.info(f"{rule} {title} {rule}")

    def success_panel(self, title: str, message: str) -> None:
        _loguru_logger.success(f"[{title}] {message}")

    def progress(self, description: str, maximum: int) -> ProgressTracker:
        """Open a progress scope bounded by ``maximum``."""

        return ProgressTracker(self, description, maximum)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured phase line."""

        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        self._emit("INFO", "start", stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        self._emit("INFO", "complete", stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)
