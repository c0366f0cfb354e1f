"""PDF page text extraction.

Responsibilities:
- Report the page count of a PDF and stream its page texts lazily, in order.
- Prefer poppler's `pdfinfo`/`pdftotext`, falling back to `pypdf` when the binaries
  are unavailable.
- Keep the open document tied to the page iterator so it is released exactly once.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
import re
import subprocess

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..errors import ExtractionError
from ..models.datatypes import ParseResult
from ..runtime_tools import resolve_executable

_MISSING_BINARY_SUFFIX = "command is required but was not found."


class PageStream(Iterator[str]):
    """Page-text iterator that releases its document on exhaustion or `close()`."""

    def __init__(self, pages: Iterator[str], release: Callable[[], None]) -> None:
        self._pages = pages
        self._release = release
        self._released = False

    def __next__(self) -> str:
        if self._released:
            raise StopIteration
        try:
            return next(self._pages)
        except BaseException:
            # exhaustion and extraction errors both end the document
            self.close()
            raise

    def close(self) -> None:
        """Release the underlying document; later calls are no-ops."""

        if self._released:
            return
        self._released = True
        close = getattr(self._pages, "close", None)
        try:
            if callable(close):
                close()
        finally:
            self._release()

    @property
    def released(self) -> bool:
        return self._released


class PdfTextExtractor:
    """Extractor for text-based PDFs using poppler tools with a `pypdf` fallback."""

    def extract_text(self, pdf_path: Path) -> ParseResult:
        """Return the page count and a lazy page-text iterator for ``pdf_path``.

        Raises:
            ExtractionError: If the file is missing or cannot be opened as a PDF.
        """

        if not pdf_path.exists():
            raise ExtractionError(f"Input PDF not found: {pdf_path}")

        try:
            page_count = self._page_count(pdf_path)
        except ExtractionError as exc:
            if not self._is_missing_binary_error(exc):
                raise
            return self._extract_with_pypdf(pdf_path)

        if not self._has_binary("pdftotext"):
            return self._extract_with_pypdf(pdf_path)
        return ParseResult(
            total_pages=page_count,
            pages=self._iter_pdftotext_pages(pdf_path, page_count),
        )

    def _iter_pdftotext_pages(self, pdf_path: Path, page_count: int) -> Iterator[str]:
        for page in range(1, page_count + 1):
            page_text = self._run_pdftotext(pdf_path, first_page=page, last_page=page)
            yield page_text.replace("\f", "\n").strip()

    def _run_pdftotext(self, pdf_path: Path, first_page: int, last_page: int) -> str:
        command = [
            resolve_executable("pdftotext"),
            "-enc",
            "UTF-8",
            "-f",
            str(first_page),
            "-l",
            str(last_page),
            str(pdf_path),
            "-",
        ]
        try:
            result = subprocess.run(
                command,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise ExtractionError(f"The `pdftotext` {_MISSING_BINARY_SUFFIX}") from exc

        if result.returncode != 0:
            details = result.stderr.strip() or "unknown error"
            raise ExtractionError(f"pdftotext failed for {pdf_path}: {details}")

        return result.stdout

    def _page_count(self, pdf_path: Path) -> int:
        try:
            result = subprocess.run(
                [resolve_executable("pdfinfo"), str(pdf_path)],
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise ExtractionError(f"The `pdfinfo` {_MISSING_BINARY_SUFFIX}") from exc

        if result.returncode != 0:
            details = result.stderr.strip() or "unknown error"
            raise ExtractionError(f"pdfinfo failed for {pdf_path}: {details}")

        match = re.search(r"(?m)^Pages:\s+(\d+)\s*$", result.stdout)
        if not match:
            raise ExtractionError(f"Could not determine page count for PDF: {pdf_path}")
        return int(match.group(1))

    def _has_binary(self, command_name: str) -> bool:
        resolved = resolve_executable(command_name)
        return Path(resolved).is_file()

    def _extract_with_pypdf(self, pdf_path: Path) -> ParseResult:
        """Open the PDF with `pypdf` and stream pages from the open handle."""

        handle = pdf_path.open("rb")
        try:
            reader = PdfReader(handle)
            total_pages = len(reader.pages)
        except (PyPdfError, ValueError, OSError) as exc:
            handle.close()
            raise ExtractionError(f"Could not open PDF {pdf_path}: {exc}") from exc
        except BaseException:
            handle.close()
            raise
        pages = (
            (page.extract_text() or "").replace("\f", "\n").strip()
            for page in reader.pages
        )
        return ParseResult(
            total_pages=total_pages,
            pages=PageStream(pages, release=handle.close),
        )

    def _is_missing_binary_error(self, error: ExtractionError) -> bool:
        """Return whether extraction failed due to unavailable external PDF binaries."""

        return str(error).endswith(_MISSING_BINARY_SUFFIX)
