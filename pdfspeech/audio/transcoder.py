"""Distribution transcoding for merged document audio.

Responsibilities:
- Convert the intermediate WAV into the MP3 deliverable with ffmpeg.
- Map tool absence and non-zero exits to `TranscodingError`.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import TranscodingError
from ..process import MISSING_EXECUTABLE_EXIT_CODE, ProcessRunner, run_process
from ..runtime_tools import resolve_executable
from ..telemetry.logger import RunLogger


class FfmpegTranscoder:
    """Encode WAV input to MP3 using a fixed libmp3lame profile."""

    def __init__(
        self,
        logger: RunLogger,
        ffmpeg_path: str = "ffmpeg",
        bitrate: str = "128k",
        runner: ProcessRunner = run_process,
    ) -> None:
        self._logger = logger
        self._ffmpeg_path = ffmpeg_path
        self._bitrate = bitrate
        self._runner = runner

    def convert(self, input_path: Path, output_path: Path) -> None:
        """Convert ``input_path`` to ``output_path``, overwriting an existing file.

        Raises:
            TranscodingError: If ffmpeg is missing, exits non-zero, or writes nothing.
        """

        self._logger.log(f"Converting {input_path.name} to {output_path.name}...")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        command = [
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(input_path),
            "-vn",
            "-c:a",
            "libmp3lame",
            "-b:a",
            self._bitrate,
            str(output_path),
        ]
        try:
            exit_code = self._runner(
                resolve_executable(self._ffmpeg_path),
                command,
                on_stderr_line=self._log_ffmpeg_line,
            )
        except FileNotFoundError as exc:
            raise TranscodingError(
                MISSING_EXECUTABLE_EXIT_CODE,
                detail=f"Transcoding tool `{self._ffmpeg_path}` is not available on PATH.",
            ) from exc

        if exit_code != 0:
            raise TranscodingError(exit_code)
        if not output_path.exists():
            raise TranscodingError(
                exit_code,
                detail=f"ffmpeg reported success but did not write {output_path}.",
            )

    def _log_ffmpeg_line(self, line: str) -> None:
        if line.strip():
            self._logger.log(f"[ffmpeg] {line}")
