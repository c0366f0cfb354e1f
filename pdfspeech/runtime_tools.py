"""Runtime executable resolution helpers.

Responsibilities:
- Resolve external tools (`piper`, `ffmpeg`, `pdftotext`, `say`) with bundled-first
  precedence, then `PATH`.
- Probe whether a resolved executable actually runs before a pipeline starts.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess
import sys


def resolve_executable(command_name: str) -> str:
    """Resolve an executable with bundled-first precedence, then PATH.

    Resolution order:
    1. Bundled app directories (`./bin/<tool>`, `./<tool>/<tool>`, `./<tool>`).
    2. System `PATH`.
    3. Raw command name (allowing subprocess to raise a native missing-binary error).
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name
    if Path(normalized).parent != Path("."):
        return normalized

    for candidate in _bundled_candidates(normalized):
        if candidate.is_file():
            return str(candidate)

    resolved_path = shutil.which(normalized)
    if resolved_path is not None:
        return resolved_path

    return normalized


def probe_executable(
    executable: str,
    args: tuple[str, ...] = ("--help",),
    timeout_seconds: float = 2.0,
) -> bool:
    """Return whether ``executable`` starts and exits with code 0 within the timeout."""

    try:
        result = subprocess.run(
            [executable, *args],
            check=False,
            capture_output=True,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def resolve_piper_executable(configured: str, working_dir: Path | None = None) -> str | None:
    """Resolve a working Piper binary, preferring a local `piper/piper` unpack.

    Returns `None` when no candidate passes the `--help` probe.
    """

    root = working_dir if working_dir is not None else Path.cwd()
    for name in _candidate_names("piper"):
        local = (root / "piper" / name).resolve()
        if local.is_file() and probe_executable(str(local)):
            return str(local)

    resolved = resolve_executable(configured)
    if probe_executable(resolved):
        return resolved
    return None


def _bundled_candidates(command_name: str) -> list[Path]:
    """Return bundled candidate paths for one executable name."""

    app_root = _app_root()
    names = _candidate_names(command_name)
    candidates: list[Path] = []
    for name in names:
        candidates.append(app_root / "bin" / name)
        candidates.append(app_root / command_name / name)
        candidates.append(app_root / name)
    return candidates


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including Windows `.exe` fallback."""

    lowered = command_name.lower()
    if lowered.endswith(".exe"):
        return (command_name,)
    return (command_name, f"{command_name}.exe")


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    frozen = bool(getattr(sys, "frozen", False))
    if frozen:
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]
