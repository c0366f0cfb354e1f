"""Core datatypes shared across pdfspeech modules.

Responsibilities:
- Represent records exchanged between extraction, synthesis, and the processor.
- Tie the lazy page sequence to the lifetime of its underlying document resource.

Key types:
- `ParseResult`, `Page`, `PartArtifact`, `SynthesisJob`, `DocumentStage`,
  and `DocumentOutcome`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import TracebackType

ProgressSink = Callable[[int], None]


@dataclass(slots=True)
class ParseResult:
    """Extracted page text for one document.

    Attributes:
        total_pages: Page count reported by the extractor.
        pages: Lazy, ordered page texts; owns the open document resource.
    """

    total_pages: int
    pages: Iterator[str]
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.total_pages < 0:
            raise ValueError("`total_pages` must be >= 0.")

    def close(self) -> None:
        """Release the underlying document resource exactly once."""

        if self._closed:
            return
        self._closed = True
        close = getattr(self.pages, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> ParseResult:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


@dataclass(frozen=True, slots=True)
class Page:
    """One extracted page.

    Attributes:
        index: 1-based page index.
        text: Raw page text, possibly blank.
    """

    index: int
    text: str

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True, slots=True)
class PartArtifact:
    """One synthesized per-page audio file.

    Attributes:
        page_index: 1-based index of the source page.
        path: Filesystem path of the page WAV.
    """

    page_index: int
    path: Path


@dataclass(frozen=True, slots=True)
class SynthesisJob:
    """Request passed to a speech synthesis backend.

    Attributes:
        text_chunks: Ordered page texts, one per source page.
        output_path: Destination WAV for the whole document.
        model_path: Local voice model file.
        speaker_id: Optional multi-speaker model speaker.
        progress: Optional sink receiving the completed page count.
    """

    text_chunks: Iterable[str]
    output_path: Path
    model_path: Path
    speaker_id: int | None = None
    progress: ProgressSink | None = None


class DocumentStage(str, Enum):
    """Lifecycle stages of one document pipeline run."""

    PENDING = "pending"
    STABILIZING = "stabilizing"
    EXTRACTING = "extracting"
    SYNTHESIZING = "synthesizing"
    TRANSCODING = "transcoding"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DocumentOutcome:
    """Terminal record of one `process_file` call.

    Attributes:
        source: Input PDF path.
        stage: Terminal stage, `done` or `failed`.
        failed_stage: Stage that was active when the run failed.
        output_path: Final MP3 path on success.
        error_type: Exception class name on failure.
    """

    source: Path
    stage: DocumentStage
    failed_stage: DocumentStage | None = None
    output_path: Path | None = None
    error_type: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage is DocumentStage.DONE
