"""Top-level package for pdfspeech.

This package converts text-based PDF documents into narrated MP3 files using a
local Piper voice, with macOS `say` as a fallback engine. The main entry point
is `PdfSpeechProcessor.process_file`.
"""

from .pipeline.processor import PdfSpeechProcessor

__all__ = ["PdfSpeechProcessor", "__version__"]

__version__ = "0.1.0"
