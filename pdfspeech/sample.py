"""Sample PDF generation for trying the pipeline end to end.

The generated document has extractable text on every page except one blank page,
so a run exercises both synthesized and skipped pages.
"""

from __future__ import annotations

from pathlib import Path

from pypdf import PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

PAGE_WIDTH = 595
PAGE_HEIGHT = 842
FONT_SIZE = 12
LEFT_MARGIN = 72
TOP_Y = 780
LINE_HEIGHT = 16

SAMPLE_PAGES: tuple[tuple[str, ...], ...] = (
    (
        "Welcome to pdfspeech.",
        "This sample document is converted into narrated audio one page at a time.",
    ),
    (
        "The second page continues the story.",
        "Each page becomes a separate audio part before the parts are joined.",
    ),
    (),
    (
        "The page before this one was intentionally left blank.",
        "Blank pages are skipped, and the final file is saved as an MP3.",
    ),
)


def _escape_pdf_text(value: str) -> str:
    """Escape literal text for safe inclusion in a PDF text stream."""

    return value.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _add_text_page(writer: PdfWriter, lines: tuple[str, ...] | list[str]) -> None:
    """Append one page; an empty ``lines`` produces a page without text."""

    page = writer.add_blank_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    if not lines:
        return

    font_ref = writer._add_object(
        DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject("/Helvetica"),
            }
        )
    )
    page[NameObject("/Resources")] = DictionaryObject(
        {
            NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})
        }
    )

    content_lines = [
        "BT",
        f"/F1 {FONT_SIZE} Tf",
        f"{LEFT_MARGIN} {TOP_Y} Td",
        f"{LINE_HEIGHT} TL",
    ]
    for index, line in enumerate(lines):
        content_lines.append(f"({_escape_pdf_text(line)}) Tj")
        if index < len(lines) - 1:
            content_lines.append("T*")
    content_lines.append("ET")

    stream = DecodedStreamObject()
    stream.set_data("\n".join(content_lines).encode("latin-1"))
    page[NameObject("/Contents")] = writer._add_object(stream)


def create_sample_pdf(
    output_path: Path,
    pages: tuple[tuple[str, ...], ...] | list[list[str]] = SAMPLE_PAGES,
) -> Path:
    """Write a text PDF with one page per entry of ``pages`` and return its path."""

    writer = PdfWriter()
    for page_lines in pages:
        _add_text_page(writer, page_lines)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("wb") as handle:
        writer.write(handle)
    return output_path
