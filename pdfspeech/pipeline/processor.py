"""Document pipeline orchestration.

Responsibilities:
- Drive one PDF through readiness, extraction, synthesis, and transcoding.
- Turn every per-document failure into a logged terminal outcome.
- Own the intermediate WAV lifecycle: removed after a successful transcode,
  kept when transcoding fails.

Key types:
- `PdfSpeechProcessor`: host-facing `process_file` entry point.
"""

from __future__ import annotations

from collections.abc import Callable
import os
from pathlib import Path
import time
from typing import IO, Protocol

from ..config import PdfSpeechConfig
from ..errors import (
    EmptyOutputError,
    ExtractionError,
    FileNotReadyError,
    PipelineStageError,
)
from ..models.datatypes import DocumentOutcome, DocumentStage, ParseResult, SynthesisJob
from ..telemetry.logger import RunLogger
from ..tts.synthesizer import SpeechSynthesizer

if os.name == "posix":
    import fcntl


class TextExtractor(Protocol):
    """Extraction collaborator contract."""

    def extract_text(self, pdf_path: Path) -> ParseResult:
        """Return page count and lazy page texts for ``pdf_path``."""


class Transcoder(Protocol):
    """Transcoding collaborator contract."""

    def convert(self, input_path: Path, output_path: Path) -> None:
        """Convert ``input_path`` into ``output_path``."""


class PdfSpeechProcessor:
    """Convert one PDF at a time into an MP3 next to the configured output dir."""

    def __init__(
        self,
        extractor: TextExtractor,
        synthesizer: SpeechSynthesizer,
        transcoder: Transcoder,
        logger: RunLogger,
        config: PdfSpeechConfig,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Wire collaborators; the voice model must already be resolved.

        Raises:
            PipelineStageError: If ``config.resolved_model_path`` is unset.
        """

        if config.resolved_model_path is None:
            raise PipelineStageError(
                stage="model",
                detail="Model path not resolved in config.",
                hint="Resolve the voice model before constructing the processor.",
            )
        self._extractor = extractor
        self._synthesizer = synthesizer
        self._transcoder = transcoder
        self._logger = logger
        self._config = config
        self._model_path = config.resolved_model_path
        self._sleep = sleep
        self.stage = DocumentStage.PENDING
        self.last_outcome: DocumentOutcome | None = None

    def process_file(self, file_path: Path) -> None:
        """Process one PDF; outcomes are reported through the logger only."""

        self.stage = DocumentStage.PENDING
        try:
            output_path = self._run(file_path)
        except EmptyOutputError as exc:
            self._logger.warning(exc.detail)
            self._finish_failed(file_path, exc)
        except FileNotReadyError as exc:
            self._logger.log(exc.detail)
            self._finish_failed(file_path, exc)
        except Exception as exc:
            self._logger.error(f"Error processing file {file_path.name}", exc)
            self._finish_failed(file_path, exc)
        else:
            self._logger.log_stage_complete("document", file=file_path.name)
            self.stage = DocumentStage.DONE
            self.last_outcome = DocumentOutcome(
                source=file_path,
                stage=DocumentStage.DONE,
                output_path=output_path,
            )

    def _run(self, file_path: Path) -> Path:
        self._enter(DocumentStage.STABILIZING)
        self.wait_for_file(file_path)

        self._enter(DocumentStage.EXTRACTING)
        self._logger.header(f"Processing {file_path.name}")
        parse_result = self._extract(file_path)

        base_name = file_path.stem
        output_dir = self._config.output_dir
        wav_path = output_dir / f"{base_name}.wav"
        mp3_path = output_dir / f"{base_name}.mp3"

        self._enter(DocumentStage.SYNTHESIZING)
        with parse_result:
            self._logger.log(f"Found {parse_result.total_pages} pages in {file_path.name}.")
            output_dir.mkdir(parents=True, exist_ok=True)
            self._discard(wav_path)
            with self._logger.progress(
                f"Synthesizing {file_path.name}", parse_result.total_pages
            ) as tracker:
                self._synthesizer.generate(
                    SynthesisJob(
                        text_chunks=parse_result.pages,
                        output_path=wav_path,
                        model_path=self._model_path,
                        speaker_id=self._config.speaker_id,
                        progress=tracker.report,
                    )
                )

        if not wav_path.exists():
            raise EmptyOutputError(file_path)

        self._enter(DocumentStage.TRANSCODING)
        self._transcoder.convert(wav_path, mp3_path)
        self._discard(wav_path)
        self._logger.success_panel("Success", f"Audio saved to {mp3_path}")
        return mp3_path

    def wait_for_file(self, file_path: Path) -> None:
        """Poll until ``file_path`` can be opened for exclusive reading.

        On POSIX the check also takes a non-blocking exclusive `flock`, so a
        writer holding a lock on the file keeps it "not ready".

        Raises:
            FileNotReadyError: If every attempt fails.
        """

        attempts = self._config.readiness_attempts
        for attempt in range(1, attempts + 1):
            try:
                with file_path.open("rb") as handle:
                    self._check_exclusive(handle)
                    return
            except OSError:
                if attempt < attempts:
                    self._sleep(self._config.readiness_delay_seconds)
        raise FileNotReadyError(file_path, attempts)

    @staticmethod
    def _check_exclusive(handle: IO[bytes]) -> None:
        """Raise `OSError` when another open file holds a lock on ``handle``."""

        if os.name != "posix":
            return
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

    def _extract(self, file_path: Path) -> ParseResult:
        try:
            return self._extractor.extract_text(file_path)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"Failed to extract text from {file_path.name}: {exc}") from exc

    def _enter(self, stage: DocumentStage) -> None:
        self.stage = stage
        self._logger.log_stage_start(stage.value)

    def _finish_failed(self, file_path: Path, exc: Exception) -> None:
        failed_stage = self.stage
        self._logger.log_stage_failure(failed_stage.value, type(exc).__name__)
        self.stage = DocumentStage.FAILED
        self.last_outcome = DocumentOutcome(
            source=file_path,
            stage=DocumentStage.FAILED,
            failed_stage=failed_stage,
            error_type=type(exc).__name__,
        )

    def _discard(self, path: Path) -> None:
        """Remove an intermediate file; failures only warn."""

        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            self._logger.warning(f"Could not remove {path}: {exc}")
