"""Unit tests for the parts workspace and core pipeline records."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfspeech.io.workspace import PartsWorkspace
from pdfspeech.models.datatypes import DocumentOutcome, DocumentStage, Page, ParseResult
from pdfspeech.telemetry.logger import RunLogger


def test_workspace_derives_directory_and_zero_padded_part_names(tmp_path: Path) -> None:
    """The workspace should sit next to the output and use sortable part names."""

    workspace = PartsWorkspace.for_output(tmp_path / "out" / "report.wav")

    assert workspace.directory == tmp_path / "out" / "report_parts"
    assert workspace.part_path(7).name == "part_0007.wav"
    assert workspace.manifest_path == tmp_path / "out" / "report_parts" / "list.txt"


def test_workspace_prepare_clears_previous_contents(tmp_path: Path) -> None:
    """Preparing twice should always start from an empty directory."""

    workspace = PartsWorkspace.for_output(tmp_path / "doc.wav")
    workspace.prepare()
    (workspace.directory / "part_0001.wav").write_text("old", encoding="utf-8")
    workspace.add(1, workspace.part_path(1))

    workspace.prepare()

    assert list(workspace.directory.iterdir()) == []
    assert workspace.parts == []


def test_workspace_add_requires_ascending_page_indices(tmp_path: Path) -> None:
    """Parts must be recorded in strictly ascending page order."""

    workspace = PartsWorkspace.for_output(tmp_path / "doc.wav")
    workspace.add(2, workspace.part_path(2))

    with pytest.raises(ValueError):
        workspace.add(2, workspace.part_path(2))
    with pytest.raises(ValueError):
        workspace.add(1, workspace.part_path(1))


def test_workspace_remove_is_idempotent(tmp_path: Path, run_logger: RunLogger) -> None:
    """Removing a workspace that no longer exists should still succeed."""

    workspace = PartsWorkspace.for_output(tmp_path / "doc.wav")
    workspace.prepare()

    assert workspace.remove(run_logger) is True
    assert not workspace.directory.exists()
    assert workspace.remove(run_logger) is True


def test_parse_result_closes_page_source_once() -> None:
    """Closing a parse result should release its page iterator exactly once."""

    closed: list[bool] = []

    def _pages():
        try:
            yield "one"
        finally:
            closed.append(True)

    pages = _pages()
    next(pages)
    with ParseResult(total_pages=1, pages=pages) as result:
        pass
    result.close()

    assert closed == [True]


def test_parse_result_rejects_negative_page_count() -> None:
    """A negative page count is never valid."""

    with pytest.raises(ValueError):
        ParseResult(total_pages=-1, pages=iter(()))


def test_page_blankness_and_outcome_success() -> None:
    """Whitespace-only pages are blank and only `done` outcomes succeed."""

    assert Page(index=1, text=" \n\t").is_blank
    assert not Page(index=2, text="text").is_blank
    assert DocumentOutcome(source=Path("a.pdf"), stage=DocumentStage.DONE).succeeded
    assert not DocumentOutcome(
        source=Path("a.pdf"),
        stage=DocumentStage.FAILED,
        failed_stage=DocumentStage.SYNTHESIZING,
        error_type="PageSynthesisFailed",
    ).succeeded
