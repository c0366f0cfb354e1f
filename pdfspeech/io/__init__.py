"""Input/output components for pdfspeech.

This package contains PDF page extraction and the per-document parts workspace.
"""

from .pdf_text_extractor import PageStream, PdfTextExtractor
from .workspace import PartsWorkspace

__all__ = ["PageStream", "PartsWorkspace", "PdfTextExtractor"]
