"""Configuration model and loaders for pdfspeech.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.
- Carry the voice model catalog as injected data rather than a process-wide table.

Key types:
- `PdfSpeechConfig`: normalized settings for the processor and CLI commands.
- `ConfigLoader`: static construction helpers for `PdfSpeechConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_optional_float,
    parse_optional_int,
)

_PIPER_VOICES_BASE = "https://huggingface.co/rhasspy/piper-voices/resolve/main"

DEFAULT_MODEL_CATALOG: Mapping[str, str] = {
    "lessac-medium": f"{_PIPER_VOICES_BASE}/en/en_US/lessac/medium/en_US-lessac-medium",
    "lessac-high": f"{_PIPER_VOICES_BASE}/en/en_US/lessac/high/en_US-lessac-high",
    "ryan-medium": f"{_PIPER_VOICES_BASE}/en/en_US/ryan/medium/en_US-ryan-medium",
    "ryan-high": f"{_PIPER_VOICES_BASE}/en/en_US/ryan/high/en_US-ryan-high",
    "alan-medium": f"{_PIPER_VOICES_BASE}/en/en_GB/alan/medium/en_GB-alan-medium",
    "southern-low": (
        f"{_PIPER_VOICES_BASE}/en/en_GB/southern_english_female/low/"
        "en_GB-southern_english_female-low"
    ),
}

_DEFAULT_MODEL_NAME = "lessac-medium"
_SUPPORTED_FALLBACK_ENGINES = frozenset({"say", "none"})


@dataclass(slots=True)
class PdfSpeechConfig:
    """Runtime configuration for the document pipeline.

    Attributes:
        input_dir: Watch folder for new PDFs and target of `sample`.
        output_dir: Directory receiving WAV intermediates and final MP3 files.
        models_dir: Cache directory for downloaded voice models.
        piper_path: Piper executable name or path.
        model_name: Catalog alias, file name in `models_dir`, or model path.
        speaker_id: Optional speaker for multi-speaker voice models.
        fallback_engine: Fallback backend id (`say` or `none`).
        say_voice: Optional voice name for the `say` fallback.
        ffmpeg_path: ffmpeg executable name or path.
        mp3_bitrate: Target MP3 bitrate passed to ffmpeg.
        readiness_attempts: Attempts to open a new file before giving up.
        readiness_delay_seconds: Delay between readiness attempts.
        poll_interval_seconds: Watch-folder polling interval.
        model_catalog: Mapping of model aliases to download base URLs.
        resolved_model_path: Local model path, set once the model is resolved.
    """

    input_dir: Path = Path("input")
    output_dir: Path = Path("output")
    models_dir: Path = Path("models")
    piper_path: str = "piper"
    model_name: str = _DEFAULT_MODEL_NAME
    speaker_id: int | None = None
    fallback_engine: str = "say"
    say_voice: str | None = None
    ffmpeg_path: str = "ffmpeg"
    mp3_bitrate: str = "128k"
    readiness_attempts: int = 10
    readiness_delay_seconds: float = 0.5
    poll_interval_seconds: float = 1.0
    model_catalog: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MODEL_CATALOG))
    resolved_model_path: Path | None = None

    def validate(self) -> None:
        """Validate configuration values before any document is processed."""

        self._require_non_empty(self.piper_path, "piper_path")
        self._require_non_empty(self.model_name, "model_name")
        self._require_non_empty(self.ffmpeg_path, "ffmpeg_path")
        self._require_non_empty(self.mp3_bitrate, "mp3_bitrate")
        if self.fallback_engine not in _SUPPORTED_FALLBACK_ENGINES:
            supported = ", ".join(sorted(_SUPPORTED_FALLBACK_ENGINES))
            raise ValueError(
                f"Unsupported `fallback_engine` value `{self.fallback_engine}`; "
                f"supported: {supported}."
            )
        if self.speaker_id is not None and self.speaker_id < 0:
            raise ValueError("`speaker_id` must be a non-negative integer.")
        if self.readiness_attempts <= 0:
            raise ValueError("`readiness_attempts` must be a positive integer.")
        if self.readiness_delay_seconds < 0:
            raise ValueError("`readiness_delay_seconds` must be >= 0.")
        if self.poll_interval_seconds <= 0:
            raise ValueError("`poll_interval_seconds` must be positive.")

    def with_resolved_model(self, model_path: Path) -> PdfSpeechConfig:
        """Return a copy carrying the resolved local model path."""

        return replace(self, resolved_model_path=model_path)

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `PdfSpeechConfig` from external sources."""

    _PATH_KEYS = ("input_dir", "output_dir", "models_dir")
    _STRING_KEYS = ("piper_path", "model_name", "fallback_engine", "ffmpeg_path", "mp3_bitrate")
    _SUPPORTED_YAML_KEYS = frozenset(
        {
            *_PATH_KEYS,
            *_STRING_KEYS,
            "speaker_id",
            "say_voice",
            "readiness_attempts",
            "readiness_delay_seconds",
            "poll_interval_seconds",
            "model_catalog",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> PdfSpeechConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> PdfSpeechConfig:
        """Create a validated config from `PDFSPEECH_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS - {"model_catalog"}:
            env_key = f"PDFSPEECH_{key.upper()}"
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value
        return ConfigLoader.from_mapping(payload, source_label="Environment")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> PdfSpeechConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        defaults = PdfSpeechConfig()
        values: dict[str, Any] = {}
        for key in ConfigLoader._PATH_KEYS:
            raw = normalize_optional_string(payload.get(key))
            if raw is not None:
                values[key] = Path(raw)
        for key in ConfigLoader._STRING_KEYS:
            raw = normalize_optional_string(payload.get(key))
            if raw is not None:
                values[key] = raw

        try:
            values["speaker_id"] = parse_optional_int(
                payload.get("speaker_id"), "speaker_id", minimum=0
            )
            attempts = parse_optional_int(
                payload.get("readiness_attempts"), "readiness_attempts", minimum=1
            )
            delay = parse_optional_float(
                payload.get("readiness_delay_seconds"), "readiness_delay_seconds"
            )
            interval = parse_optional_float(
                payload.get("poll_interval_seconds"), "poll_interval_seconds"
            )
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc

        values["readiness_attempts"] = attempts or defaults.readiness_attempts
        values["readiness_delay_seconds"] = (
            delay if delay is not None else defaults.readiness_delay_seconds
        )
        values["poll_interval_seconds"] = (
            interval if interval is not None else defaults.poll_interval_seconds
        )
        values["say_voice"] = normalize_optional_string(payload.get("say_voice"))

        catalog = ConfigLoader._optional_string_map(payload, "model_catalog", source_label)
        if catalog:
            values["model_catalog"] = {**DEFAULT_MODEL_CATALOG, **catalog}

        config = PdfSpeechConfig(**values)
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
        return config

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        raw = payload.get(key)
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized
