"""Scratch workspace for per-page audio parts.

Responsibilities:
- Derive the `<basename>_parts` directory and part filenames from an output path.
- Track created part artifacts in page order.
- Remove the workspace best-effort once its parts are merged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import shutil

from ..models.datatypes import PartArtifact
from ..telemetry.logger import RunLogger


@dataclass(slots=True)
class PartsWorkspace:
    """Per-document scratch directory and its ordered part artifacts.

    Attributes:
        directory: Workspace root, `<output_dir>/<basename>_parts`.
        parts: Part artifacts in the order they were created.
    """

    directory: Path
    parts: list[PartArtifact] = field(default_factory=list)

    MANIFEST_NAME = "list.txt"

    @classmethod
    def for_output(cls, output_path: Path) -> PartsWorkspace:
        """Return the workspace belonging to a document output file."""

        return cls(directory=output_path.parent / f"{output_path.stem}_parts")

    @property
    def manifest_path(self) -> Path:
        return self.directory / self.MANIFEST_NAME

    def prepare(self) -> None:
        """Create an empty workspace, clearing leftovers from an earlier run."""

        if self.directory.exists():
            shutil.rmtree(self.directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.parts.clear()

    def part_path(self, page_index: int) -> Path:
        return self.directory / f"part_{page_index:04d}.wav"

    def add(self, page_index: int, path: Path) -> PartArtifact:
        """Record one part artifact; page indices must arrive in ascending order."""

        if self.parts and page_index <= self.parts[-1].page_index:
            raise ValueError(
                f"Part for page {page_index} arrived after page {self.parts[-1].page_index}."
            )
        artifact = PartArtifact(page_index=page_index, path=path)
        self.parts.append(artifact)
        return artifact

    def remove(self, logger: RunLogger) -> bool:
        """Delete the workspace recursively; failures are logged as warnings."""

        try:
            shutil.rmtree(self.directory)
        except FileNotFoundError:
            return True
        except OSError as exc:
            logger.warning(f"Could not remove parts workspace {self.directory}: {exc}")
            return False
        return True
