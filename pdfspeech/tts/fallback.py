"""Primary/fallback synthesis coordination."""

from __future__ import annotations

from dataclasses import replace

from ..io.workspace import PartsWorkspace
from ..models.datatypes import ProgressSink, SynthesisJob
from ..telemetry.logger import RunLogger
from .synthesizer import SpeechSynthesizer


def _monotonic_progress(sink: ProgressSink | None) -> ProgressSink | None:
    """Wrap ``sink`` so it only receives counts above the highest one seen."""

    if sink is None:
        return None
    highest = 0

    def _report(completed: int) -> None:
        nonlocal highest
        if completed > highest:
            highest = completed
            sink(completed)

    return _report


class FallbackSynthesizer:
    """Run the primary backend end-to-end, retrying once with the fallback.

    The text chunks are buffered before the first attempt so the retry
    re-synthesizes the whole document from page one. Without a fallback the
    primary failure propagates unchanged. Page progress stays monotonic across
    both attempts.
    """

    def __init__(
        self,
        primary: SpeechSynthesizer,
        fallback: SpeechSynthesizer | None,
        logger: RunLogger,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self._logger = logger

    def generate(self, job: SynthesisJob) -> None:
        buffered = replace(
            job,
            text_chunks=list(job.text_chunks),
            progress=_monotonic_progress(job.progress),
        )

        try:
            self.primary.generate(buffered)
            return
        except Exception as exc:
            if self.fallback is None:
                self._logger.error("Primary TTS failed and no fallback is configured.", exc)
                raise
            self._logger.error("Primary TTS failed. Attempting fallback...", exc)
            primary_error = exc

        try:
            self.fallback.generate(buffered)
        except Exception as exc:
            self._logger.error("Fallback TTS failed.", exc)
            raise exc from primary_error
        # parts from the failed primary attempt
        PartsWorkspace.for_output(job.output_path).remove(self._logger)
        self._logger.log("Fallback TTS completed.")
