"""Text-to-speech backends, fallback coordination, and voice model resolution."""

from .fallback import FallbackSynthesizer
from .models import VoiceModelResolver
from .synthesizer import PiperSynthesizer, SaySynthesizer, SpeechSynthesizer

__all__ = [
    "FallbackSynthesizer",
    "PiperSynthesizer",
    "SaySynthesizer",
    "SpeechSynthesizer",
    "VoiceModelResolver",
]
