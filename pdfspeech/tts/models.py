"""Voice model resolution and caching.

Responsibilities:
- Map a configured model name to a local Piper `.onnx` file.
- Download catalog models (`.onnx` plus `.onnx.json`) into the models directory once.
- Keep the alias-to-URL catalog injected, not process-wide.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import requests

from ..errors import ModelResolutionError
from ..telemetry.logger import RunLogger


class VoiceModelResolver:
    """Resolve voice model names to local files, downloading catalog entries."""

    _CHUNK_SIZE = 1 << 16

    def __init__(
        self,
        models_dir: Path,
        catalog: Mapping[str, str],
        logger: RunLogger,
        session: requests.Session | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        self.models_dir = models_dir
        self.catalog = dict(catalog)
        self._logger = logger
        self._session = session or requests.Session()
        self.timeout_seconds = timeout_seconds

    def known_models(self) -> list[str]:
        return sorted(self.catalog)

    def resolve(self, model_name: str) -> Path:
        """Return a local model path for ``model_name``.

        Resolution order: catalog alias (downloaded on demand), a file inside the
        models directory, then ``model_name`` as a filesystem path.

        Raises:
            ModelResolutionError: If the name is unknown or the download fails.
        """

        name = model_name.strip()
        if name in self.catalog:
            return self._ensure_downloaded(name, self.catalog[name])

        local_path = self.models_dir / name
        if local_path.is_file():
            return local_path

        direct_path = Path(name).expanduser()
        if direct_path.is_file():
            return direct_path

        available = ", ".join(self.known_models()) or "(none)"
        raise ModelResolutionError(
            f"Unknown model `{name}`. Available models: {available}",
            hint="Pass a catalog alias or a path to an existing `.onnx` voice model.",
        )

    def _ensure_downloaded(self, name: str, base_url: str) -> Path:
        onnx_path = self.models_dir / f"{name}.onnx"
        json_path = self.models_dir / f"{name}.onnx.json"
        if onnx_path.is_file() and json_path.is_file():
            return onnx_path

        self._logger.log(f"Downloading model '{name}'...")
        self.models_dir.mkdir(parents=True, exist_ok=True)
        self._download(f"{base_url}.onnx", onnx_path)
        self._download(f"{base_url}.onnx.json", json_path)
        self._logger.success(f"Model '{name}' downloaded successfully.")
        return onnx_path

    def _download(self, url: str, destination: Path) -> None:
        """Stream ``url`` into ``destination`` through a temporary `.part` file."""

        self._logger.log(f"Downloading {url}...")
        partial = destination.with_name(destination.name + ".part")
        try:
            with self._session.get(url, stream=True, timeout=self.timeout_seconds) as response:
                response.raise_for_status()
                with partial.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=self._CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
        except requests.RequestException as exc:
            partial.unlink(missing_ok=True)
            raise ModelResolutionError(
                f"Failed to download `{url}`: {exc}",
                hint="Check network connectivity or point `--model` at a local file.",
            ) from exc
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise ModelResolutionError(
                f"Failed to write model file `{destination}`: {exc}",
                hint="Verify the models directory is writable.",
            ) from exc
        partial.replace(destination)
