"""Observability for document pipeline runs.

This package renders log lines, stage events, and page progress.
"""

from .logger import ProgressTracker, RunLogger

__all__ = ["ProgressTracker", "RunLogger"]
