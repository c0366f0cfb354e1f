"""Speech synthesis backends.

Responsibilities:
- Define the document-level synthesis protocol shared by all backends.
- Drive Piper once per non-blank page and merge the page parts in order.
- Stream a whole document through macOS `say` as a platform fallback.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

from ..audio.merger import AudioMerger
from ..errors import MissingSynthesisOutput, PageSynthesisFailed, SynthesisError
from ..io.workspace import PartsWorkspace
from ..models.datatypes import Page, SynthesisJob
from ..process import MISSING_EXECUTABLE_EXIT_CODE, ProcessRunner, run_process
from ..telemetry.logger import RunLogger


class SpeechSynthesizer(Protocol):
    """Protocol for document synthesis backends."""

    def generate(self, job: SynthesisJob) -> None:
        """Synthesize ``job.text_chunks`` into ``job.output_path``."""


class PiperSynthesizer:
    """Piper-backed synthesizer producing one WAV part per non-blank page."""

    def __init__(
        self,
        piper_path: str,
        logger: RunLogger,
        merger: AudioMerger,
        runner: ProcessRunner = run_process,
    ) -> None:
        self.piper_path = piper_path
        self._logger = logger
        self._merger = merger
        self._runner = runner

    def generate(self, job: SynthesisJob) -> None:
        """Synthesize every page of ``job`` and merge the parts into one WAV.

        Blank pages advance progress without producing a part. The first failing
        page aborts the document; parts written so far stay on disk for diagnosis.

        Raises:
            PageSynthesisFailed: If Piper fails or writes nothing for a page.
            ConcatenationFailed: If the parts cannot be merged.
        """

        self._logger.log(f"Generating audio with Piper at {self.piper_path}... Output: {job.output_path}")
        workspace = PartsWorkspace.for_output(job.output_path)
        workspace.prepare()

        completed = 0
        for page in self._pages(job):
            if not page.is_blank:
                destination = workspace.part_path(page.index)
                exit_code = self.synthesize_page(
                    page.text,
                    job.model_path,
                    job.speaker_id,
                    destination,
                )
                if exit_code != 0:
                    raise PageSynthesisFailed(page.index, exit_code)
                if not destination.exists():
                    raise MissingSynthesisOutput(page.index)
                workspace.add(page.index, destination)
            completed += 1
            if job.progress is not None:
                job.progress(completed)

        if not workspace.parts:
            self._logger.warning("No parts produced; every page was blank.")
            workspace.remove(self._logger)
            return

        self._merger.concatenate(workspace.parts, job.output_path, workspace.directory)
        workspace.remove(self._logger)

    def synthesize_page(
        self,
        text: str,
        model_path: Path,
        speaker_id: int | None,
        destination: Path,
    ) -> int:
        """Run Piper for one page of non-blank text and return its exit code."""

        trimmed = text.strip()
        if not trimmed:
            raise ValueError("Page text must be non-blank; blank pages are skipped by the caller.")

        args = ["--model", str(model_path)]
        if speaker_id is not None:
            args.extend(["--speaker", str(speaker_id)])
        args.extend(["--output_file", str(destination)])

        try:
            return self._runner(
                self.piper_path,
                args,
                stdin_lines=[trimmed],
                on_stdout_line=self._log_engine_line,
                on_stderr_line=self._log_engine_line,
            )
        except FileNotFoundError:
            self._logger.error(f"Piper executable not found: {self.piper_path}")
            return MISSING_EXECUTABLE_EXIT_CODE

    def _pages(self, job: SynthesisJob) -> Iterator[Page]:
        for index, text in enumerate(job.text_chunks, start=1):
            yield Page(index=index, text=text)

    def _log_engine_line(self, line: str) -> None:
        if line.strip():
            self._logger.log(f"[piper] {line}")


class SaySynthesizer:
    """macOS `say` fallback that reads the whole document from standard input."""

    def __init__(
        self,
        logger: RunLogger,
        say_path: str = "/usr/bin/say",
        voice: str | None = None,
        runner: ProcessRunner = run_process,
    ) -> None:
        self.say_path = say_path
        self.voice = voice
        self._logger = logger
        self._runner = runner

    def generate(self, job: SynthesisJob) -> None:
        """Stream each page as one input line; the model path does not apply here.

        Raises:
            SynthesisError: If `say` is missing, fails, or writes no audio.
        """

        self._logger.log("Using macOS 'say' command...")
        job.output_path.parent.mkdir(parents=True, exist_ok=True)
        args = ["-o", str(job.output_path), "--data-format=LEI16@22050"]
        if self.voice:
            args.extend(["-v", self.voice])

        try:
            exit_code = self._runner(
                self.say_path,
                args,
                stdin_lines=self._input_lines(job),
                on_stderr_line=self._log_engine_line,
            )
        except FileNotFoundError as exc:
            raise SynthesisError(
                f"Fallback engine `{self.say_path}` is not available.",
                hint="The `say` fallback only exists on macOS; install Piper instead.",
            ) from exc

        if exit_code != 0:
            raise SynthesisError(f"'say' exited with code {exit_code}.")
        if not job.output_path.exists():
            raise SynthesisError(f"'say' reported success but did not write {job.output_path}.")

    def _input_lines(self, job: SynthesisJob) -> Iterator[str]:
        """Yield page lines, reporting progress right after each line is handed over."""

        count = 0
        for text in job.text_chunks:
            yield " ".join(text.split())
            count += 1
            if job.progress is not None:
                job.progress(count)

    def _log_engine_line(self, line: str) -> None:
        if line.strip():
            self._logger.log(f"[say] {line}")
