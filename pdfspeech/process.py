"""External process invocation.

Responsibilities:
- Spawn one external tool, optionally feeding standard input line by line.
- Forward each stdout/stderr line to caller-supplied callbacks.
- Report the exit status without raising on non-zero exit.

Key public functions:
- `run_process`: synchronous spawn-stream-wait helper used by engines and ffmpeg.
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable, Iterable, Sequence
from typing import IO, Protocol

LineCallback = Callable[[str], None]

# Shell convention for "command not found"; used when a tool cannot be spawned.
MISSING_EXECUTABLE_EXIT_CODE = 127


class ProcessRunner(Protocol):
    """Callable signature shared by `run_process` and test doubles."""

    def __call__(
        self,
        executable: str,
        args: Sequence[str],
        *,
        stdin_lines: Iterable[str] | None = None,
        on_stdout_line: LineCallback | None = None,
        on_stderr_line: LineCallback | None = None,
    ) -> int:
        """Run one process and return its exit code."""


def run_process(
    executable: str,
    args: Sequence[str],
    *,
    stdin_lines: Iterable[str] | None = None,
    on_stdout_line: LineCallback | None = None,
    on_stderr_line: LineCallback | None = None,
) -> int:
    """Run ``executable`` with ``args`` and return its exit code.

    Each item of ``stdin_lines`` is written as one line and flushed before the next
    item is pulled, so a lazy iterable can report progress as input is consumed.
    A process that stops reading early ends the writer quietly.

    Raises:
        FileNotFoundError: If the executable cannot be started.
    """

    process = subprocess.Popen(
        [executable, *args],
        stdin=subprocess.PIPE if stdin_lines is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
    )
    readers = [
        _start_reader(process.stdout, on_stdout_line),
        _start_reader(process.stderr, on_stderr_line),
    ]

    try:
        if stdin_lines is not None and process.stdin is not None:
            _write_lines(process.stdin, stdin_lines)
        exit_code = process.wait()
    except BaseException:
        process.kill()
        process.wait()
        raise
    finally:
        for reader in readers:
            reader.join()

    return exit_code


def _write_lines(stream: IO[str], lines: Iterable[str]) -> None:
    """Write and flush lines one at a time, then close the stream."""

    try:
        for line in lines:
            stream.write(line)
            stream.write("\n")
            stream.flush()
    except BrokenPipeError:
        pass
    finally:
        try:
            stream.close()
        except BrokenPipeError:
            pass


def _start_reader(stream: IO[str] | None, callback: LineCallback | None) -> threading.Thread:
    """Drain one output stream on a daemon thread, forwarding stripped lines."""

    def _drain() -> None:
        if stream is None:
            return
        with stream:
            for raw_line in stream:
                if callback is not None:
                    callback(raw_line.rstrip("\r\n"))

    thread = threading.Thread(target=_drain, daemon=True)
    thread.start()
    return thread
