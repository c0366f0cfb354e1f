"""Shared typed data models for pdfspeech.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    DocumentOutcome,
    DocumentStage,
    Page,
    ParseResult,
    PartArtifact,
    ProgressSink,
    SynthesisJob,
)

__all__ = [
    "DocumentOutcome",
    "DocumentStage",
    "Page",
    "ParseResult",
    "PartArtifact",
    "ProgressSink",
    "SynthesisJob",
]
