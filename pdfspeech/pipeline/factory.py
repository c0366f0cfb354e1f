"""Composition helpers for the document pipeline.

Responsibilities:
- Resolve the Piper executable and the voice model before any document runs.
- Build the processor with its extractor, synthesis backends, and transcoder.

Notes:
- Backend mappings are explicit so new fallback engines stay a one-line addition.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import requests

from ..audio.merger import AudioMerger
from ..audio.transcoder import FfmpegTranscoder
from ..config import PdfSpeechConfig
from ..io.pdf_text_extractor import PdfTextExtractor
from ..process import ProcessRunner, run_process
from ..runtime_tools import resolve_piper_executable
from ..telemetry.logger import RunLogger
from ..tts.fallback import FallbackSynthesizer
from ..tts.models import VoiceModelResolver
from ..tts.synthesizer import PiperSynthesizer, SaySynthesizer, SpeechSynthesizer
from .processor import PdfSpeechProcessor


class PipelineFactory:
    """Factory for fully wired pipeline components."""

    @staticmethod
    def prepare_runtime(
        config: PdfSpeechConfig,
        logger: RunLogger,
        session: requests.Session | None = None,
        piper_resolver: Callable[[str], str | None] = resolve_piper_executable,
    ) -> PdfSpeechConfig:
        """Validate config, pick a Piper binary, and resolve the voice model.

        Raises:
            ValueError: If the configuration is invalid.
            ModelResolutionError: If the voice model cannot be resolved.
        """

        config.validate()

        piper_path = piper_resolver(config.piper_path)
        if piper_path is None:
            logger.warning(
                f"'{config.piper_path}' executable not found or not working. "
                "Will likely fall back to 'say'."
            )
        else:
            logger.log(f"Using piper at: {piper_path}")
            config = replace(config, piper_path=piper_path)

        logger.log(f"Checking model: {config.model_name}...")
        resolver = VoiceModelResolver(
            models_dir=config.models_dir,
            catalog=config.model_catalog,
            logger=logger,
            session=session,
        )
        model_path = resolver.resolve(config.model_name)
        return config.with_resolved_model(Path(model_path))

    @staticmethod
    def create_synthesizer(
        config: PdfSpeechConfig,
        logger: RunLogger,
        runner: ProcessRunner = run_process,
    ) -> SpeechSynthesizer:
        """Create the primary Piper backend wrapped with the configured fallback."""

        merger = AudioMerger(logger, ffmpeg_path=config.ffmpeg_path, runner=runner)
        primary = PiperSynthesizer(config.piper_path, logger, merger, runner=runner)
        fallback: SpeechSynthesizer | None
        if config.fallback_engine == "say":
            fallback = SaySynthesizer(logger, voice=config.say_voice, runner=runner)
        elif config.fallback_engine == "none":
            fallback = None
        else:
            raise ValueError(f"Unsupported fallback engine `{config.fallback_engine}`.")
        return FallbackSynthesizer(primary, fallback, logger)

    @staticmethod
    def create_processor(
        config: PdfSpeechConfig,
        logger: RunLogger,
        runner: ProcessRunner = run_process,
    ) -> PdfSpeechProcessor:
        """Create a processor for an already prepared configuration."""

        return PdfSpeechProcessor(
            extractor=PdfTextExtractor(),
            synthesizer=PipelineFactory.create_synthesizer(config, logger, runner=runner),
            transcoder=FfmpegTranscoder(
                logger,
                ffmpeg_path=config.ffmpeg_path,
                bitrate=config.mp3_bitrate,
                runner=runner,
            ),
            logger=logger,
            config=config,
        )
