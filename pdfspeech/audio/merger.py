"""Audio merge stage.

Responsibilities:
- Merge per-page WAV parts into one continuous WAV with ffmpeg's concat demuxer.
- Preserve page order regardless of how the parts were collected.
- Copy streams without re-encoding.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import ConcatenationFailed
from ..models.datatypes import PartArtifact
from ..process import MISSING_EXECUTABLE_EXIT_CODE, ProcessRunner, run_process
from ..runtime_tools import resolve_executable
from ..telemetry.logger import RunLogger


class AudioMerger:
    """Concatenate ordered WAV parts losslessly with ffmpeg."""

    def __init__(
        self,
        logger: RunLogger,
        ffmpeg_path: str = "ffmpeg",
        runner: ProcessRunner = run_process,
    ) -> None:
        self._logger = logger
        self._ffmpeg_path = ffmpeg_path
        self._runner = runner

    def concatenate(
        self,
        parts: list[PartArtifact],
        output_path: Path,
        work_dir: Path,
    ) -> Path:
        """Merge ``parts`` in ascending page order into ``output_path``.

        Raises:
            ValueError: If ``parts`` is empty.
            ConcatenationFailed: If ffmpeg exits non-zero or writes no output.
        """

        if not parts:
            raise ValueError("At least one audio part is required for concatenation.")

        ordered_parts = sorted(parts, key=lambda item: item.page_index)
        manifest_path = work_dir / "list.txt"
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        manifest_path.write_text(self.render_manifest(ordered_parts), encoding="utf-8")
        output_path.parent.mkdir(parents=True, exist_ok=True)

        self._logger.log(f"Concatenating {len(ordered_parts)} audio parts into {output_path.name}...")
        try:
            exit_code = self._runner(
                resolve_executable(self._ffmpeg_path),
                self._command_args(manifest_path, output_path),
                on_stderr_line=self._log_ffmpeg_line,
            )
        except FileNotFoundError as exc:
            raise ConcatenationFailed(
                MISSING_EXECUTABLE_EXIT_CODE,
                detail=f"Concatenation tool `{self._ffmpeg_path}` is not available on PATH.",
            ) from exc
        if exit_code != 0:
            raise ConcatenationFailed(exit_code)
        if not output_path.exists():
            raise ConcatenationFailed(
                exit_code,
                detail=f"ffmpeg reported success but did not write {output_path}.",
            )

        try:
            manifest_path.unlink()
        except OSError as exc:
            self._logger.warning(f"Could not remove concat list {manifest_path}: {exc}")
        return output_path

    def render_manifest(self, ordered_parts: list[PartArtifact]) -> str:
        """Render the concat demuxer list for already ordered parts."""

        lines = [
            f"file '{self._escape_concat_path(part.path.resolve())}'"
            for part in ordered_parts
        ]
        return "\n".join(lines) + "\n"

    def _command_args(self, manifest_path: Path, output_path: Path) -> list[str]:
        return [
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "concat",
            "-safe",
            "0",
            "-i",
            str(manifest_path),
            "-c",
            "copy",
            str(output_path),
        ]

    def _log_ffmpeg_line(self, line: str) -> None:
        if line.strip():
            self._logger.log(f"[ffmpeg] {line}")

    @staticmethod
    def _escape_concat_path(path: Path) -> str:
        """Escape one file path for ffmpeg concat list format."""

        return str(path).replace("'", "'\\''")
