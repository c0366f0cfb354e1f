"""Command-line interface for pdfspeech.

Responsibilities:
- Expose user-facing commands for single-file and watch-folder conversion.
- Convert CLI arguments into `PdfSpeechConfig` and resolve runtime prerequisites
  before any document is processed.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_document_outcome, echo_model_catalog, exit_with_command_error
from .config import ConfigLoader, PdfSpeechConfig
from .errors import PipelineStageError
from .monitor import DirectoryMonitor
from .pipeline.factory import PipelineFactory
from .pipeline.processor import PdfSpeechProcessor
from .sample import create_sample_pdf
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="pdfspeech",
    no_args_is_help=True,
    help="Convert PDF documents into narrated MP3 files.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
OutOption = Annotated[
    Path | None,
    typer.Option("--out", help="Output directory (overrides config file value)."),
]
ModelsDirOption = Annotated[
    Path | None,
    typer.Option("--models-dir", help="Voice model cache directory."),
]
ModelOption = Annotated[
    str | None,
    typer.Option("--model", help="Voice model alias, file in the models dir, or path."),
]
SpeakerOption = Annotated[
    int | None,
    typer.Option("--speaker", min=0, help="Speaker id for multi-speaker voice models."),
]
PiperOption = Annotated[
    str | None,
    typer.Option("--piper", help="Piper executable name or path."),
]
FallbackOption = Annotated[
    str | None,
    typer.Option("--fallback", help="Fallback engine when Piper fails: `say` or `none`."),
]


def _load_yaml_config(config_path: Path | None) -> PdfSpeechConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    *,
    input_dir: Path | None = None,
    out: Path | None = None,
    models_dir: Path | None = None,
    model: str | None = None,
    speaker: int | None = None,
    piper: str | None = None,
    fallback: str | None = None,
) -> PdfSpeechConfig:
    """Resolve effective config from YAML defaults and explicit CLI overrides."""

    base = _load_yaml_config(config_file) or PdfSpeechConfig()
    overrides = {
        "input_dir": input_dir,
        "output_dir": out,
        "models_dir": models_dir,
        "model_name": model,
        "speaker_id": speaker,
        "piper_path": piper,
        "fallback_engine": fallback,
    }
    config = replace(base, **{key: value for key, value in overrides.items() if value is not None})
    try:
        config.validate()
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Update the command options or config file and rerun.",
        ) from exc
    return config


def _build_processor(config: PdfSpeechConfig, logger: RunLogger) -> PdfSpeechProcessor:
    """Resolve Piper and the voice model, then build a wired processor."""

    prepared = PipelineFactory.prepare_runtime(config, logger)
    return PipelineFactory.create_processor(prepared, logger)


@app.command("process")
def process_command(
    input_pdf: Annotated[Path, typer.Argument(help="Path to the PDF to convert.")],
    config_file: ConfigOption = None,
    out: OutOption = None,
    models_dir: ModelsDirOption = None,
    model: ModelOption = None,
    speaker: SpeakerOption = None,
    piper: PiperOption = None,
    fallback: FallbackOption = None,
) -> None:
    """Convert one PDF into an MP3."""

    try:
        config = _resolve_command_config(
            config_file,
            out=out,
            models_dir=models_dir,
            model=model,
            speaker=speaker,
            piper=piper,
            fallback=fallback,
        )
        logger = RunLogger()
        processor = _build_processor(config, logger)
        logger.log(f"Processing single file: {input_pdf}")
        processor.process_file(input_pdf)
    except Exception as exc:
        exit_with_command_error("process", exc)

    echo_document_outcome("process", processor.last_outcome)


@app.command("watch")
def watch_command(
    input_dir: Annotated[
        Path | None,
        typer.Option("--input-dir", help="Directory to watch for new PDF files."),
    ] = None,
    config_file: ConfigOption = None,
    out: OutOption = None,
    models_dir: ModelsDirOption = None,
    model: ModelOption = None,
    speaker: SpeakerOption = None,
    piper: PiperOption = None,
    fallback: FallbackOption = None,
) -> None:
    """Convert every PDF dropped into the input directory until interrupted."""

    try:
        config = _resolve_command_config(
            config_file,
            input_dir=input_dir,
            out=out,
            models_dir=models_dir,
            model=model,
            speaker=speaker,
            piper=piper,
            fallback=fallback,
        )
        logger = RunLogger()
        processor = _build_processor(config, logger)
        monitor = DirectoryMonitor(
            config.input_dir,
            processor.process_file,
            logger,
            poll_interval_seconds=config.poll_interval_seconds,
        )
        logger.log("Press Ctrl+C to quit.")
        monitor.run()
    except KeyboardInterrupt:
        typer.echo("Stopped watching.")
    except Exception as exc:
        exit_with_command_error("watch", exc)


@app.command("models")
def models_command(config_file: ConfigOption = None) -> None:
    """List voice model aliases available for download."""

    try:
        config = _resolve_command_config(config_file)
    except Exception as exc:
        exit_with_command_error("models", exc)

    echo_model_catalog(config.model_catalog, config.model_name)


@app.command("sample")
def sample_command(
    input_dir: Annotated[
        Path | None,
        typer.Option("--input-dir", help="Directory receiving `sample.pdf`."),
    ] = None,
    config_file: ConfigOption = None,
) -> None:
    """Generate a small sample PDF to try the pipeline."""

    try:
        config = _resolve_command_config(config_file, input_dir=input_dir)
        sample_path = create_sample_pdf(config.input_dir / "sample.pdf")
    except Exception as exc:
        exit_with_command_error("sample", exc)

    typer.echo(f"Sample PDF generated at {sample_path}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
