"""Domain exceptions for document pipeline and CLI diagnostics.

Every per-document failure is a `PipelineStageError` so the processor can turn it
into one logged terminal outcome without inspecting concrete types.
"""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific pipeline stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class FileNotReadyError(PipelineStageError):
    """Raised when the input file never became readable within the retry budget."""

    def __init__(self, path: object, attempts: int) -> None:
        super().__init__(
            stage="stabilize",
            detail=f"Could not access file after {attempts} attempts: {path}",
            hint="Wait for the copy to finish and process the file again.",
        )
        self.attempts = attempts


class ExtractionError(PipelineStageError):
    """Raised when page text cannot be extracted from a PDF."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        super().__init__(
            stage="extract",
            detail=detail,
            hint=hint or "Verify the file is a readable, text-based PDF.",
        )


class SynthesisError(PipelineStageError):
    """Raised when a speech synthesis backend fails for the whole document."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="synthesize", detail=detail, hint=hint)


class PageSynthesisFailed(SynthesisError):
    """Raised when the engine fails on one page; aborts the document."""

    def __init__(self, page_index: int, exit_code: int, detail: str | None = None) -> None:
        super().__init__(
            detail or f"Speech engine exited with code {exit_code} on page {page_index}.",
            hint="Check the engine diagnostics above and the configured voice model.",
        )
        self.page_index = page_index
        self.exit_code = exit_code


class MissingSynthesisOutput(PageSynthesisFailed):
    """Raised when the engine reported success but wrote no audio file."""

    def __init__(self, page_index: int) -> None:
        super().__init__(
            page_index,
            0,
            detail=f"Speech engine reported success but produced no output for page {page_index}.",
        )


class ConcatenationFailed(PipelineStageError):
    """Raised when per-page audio parts cannot be merged."""

    def __init__(self, exit_code: int, detail: str | None = None) -> None:
        super().__init__(
            stage="concatenate",
            detail=detail or f"ffmpeg concatenation exited with code {exit_code}.",
            hint="Verify ffmpeg is installed and the part files are valid WAV audio.",
        )
        self.exit_code = exit_code


class EmptyOutputError(PipelineStageError):
    """Raised when synthesis finished without producing any audio."""

    def __init__(self, path: object) -> None:
        super().__init__(
            stage="synthesize",
            detail=f"No audio was produced for {path} (text was empty).",
            hint="Only text-based PDFs are supported; scanned pages carry no text.",
        )


class TranscodingError(PipelineStageError):
    """Raised when the intermediate WAV cannot be converted to MP3."""

    def __init__(self, exit_code: int, detail: str | None = None) -> None:
        super().__init__(
            stage="transcode",
            detail=detail or f"ffmpeg transcoding exited with code {exit_code}.",
            hint="The intermediate WAV was kept; verify ffmpeg has libmp3lame support.",
        )
        self.exit_code = exit_code


class ModelResolutionError(PipelineStageError):
    """Raised when a voice model cannot be resolved to a local file."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="model", detail=detail, hint=hint)
