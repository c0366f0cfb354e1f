"""Document pipeline orchestration package."""

from .factory import PipelineFactory
from .processor import PdfSpeechProcessor

__all__ = ["PdfSpeechProcessor", "PipelineFactory"]
