"""Audio merging and transcoding components."""

from .merger import AudioMerger
from .transcoder import FfmpegTranscoder

__all__ = ["AudioMerger", "FfmpegTranscoder"]
