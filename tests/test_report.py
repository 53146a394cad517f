"""Tests for storycheck.report module."""

import json
import pytest
from datetime import datetime

from storycheck.lib.validate import ValidationError
from storycheck.report import (
    ItemResult,
    ValidationReport,
    latest_outcome,
    latest_report,
    latest_report_markdown,
    list_reports,
    load_report,
    render_markdown,
    report_basename,
    write_report,
)

STEM = "2-3-approve-reject"


def make_report(outcome="PASS_WITH_ISSUES", generated_at="2026-10-19T09:30:05", results=None):
    if results is None:
        results = [
            ItemResult("META-TITLE", "metadata", "Title names the story key", "critical", "PASS",
                       "Story 2.3: Approve"),
            ItemResult("CITE-FILES", "citations", "Cited files exist", "critical", "FAIL",
                       "1 of 3 cited files not found", ["line 12: docs/prd.md"],
                       "Fix the path or remove the citation."),
            ItemResult("CITE-SPECIFIC", "citations", "Citations point at sections", "minor", "PARTIAL",
                       "1 of 2 citations cite a whole file", [], "Add '#<section>'."),
            ItemResult("CONT-PREVIOUS", "continuity", "Learnings captured", "major", "NA",
                       "No previous story in this epic"),
        ]
    return ValidationReport(
        story_key="2.3",
        story_title="Approve",
        story_path=f"docs/stories/{STEM}.md",
        checklist="Create Story Quality Checklist",
        generated_at=generated_at,
        outcome=outcome,
        counts={"critical": 1, "major": 0, "minor": 1},
        results=results,
    )


class TestRenderMarkdown:

    def test_header(self):
        md = render_markdown(make_report(outcome="FAIL"))
        assert md.startswith("# Story Quality Validation Report\n")
        assert "**Story:** 2.3 - Approve" in md
        assert "**Outcome:** FAIL (Critical: 1, Major: 0, Minor: 1)" in md

    def test_summary_counts(self):
        md = render_markdown(make_report())
        assert "| PASS | 1 |" in md
        assert "| FAIL | 1 |" in md
        assert "| N/A | 1 |" in md

    def test_section_pass_rates(self):
        md = render_markdown(make_report())
        assert "### Metadata\n\nPass rate: 1/1 (100%)" in md
        assert "### Citations\n\nPass rate: 0/2 (0%)" in md
        assert "### Previous Story Continuity\n\nPass rate: n/a" in md

    def test_failed_items_with_details_and_fix(self):
        md = render_markdown(make_report())
        assert "- **[CRITICAL] CITE-FILES** Cited files exist: 1 of 3 cited files not found" in md
        assert "  - line 12: docs/prd.md" in md
        assert "  - Fix: Fix the path or remove the citation." in md

    def test_recommendations(self):
        md = render_markdown(make_report())
        assert "**Must Fix:**\n\n1. CITE-FILES: Fix the path or remove the citation." in md
        assert "**Consider:**\n\n1. CITE-SPECIFIC: Add '#<section>'." in md
        assert "**Should Improve:**" not in md

    def test_clean_report(self):
        clean = [ItemResult("META-TITLE", "metadata", "Title", "critical", "PASS", "ok")]
        md = render_markdown(make_report(outcome="PASS", results=clean))
        assert "## Failed Items\n\nNone." in md
        assert "No changes needed. Story is ready for development." in md

    def test_pipes_escaped_in_table(self):
        results = [ItemResult("META-TITLE", "metadata", "Title", "critical", "FAIL", "a | b")]
        md = render_markdown(make_report(results=results))
        assert "| a \\| b |" in md


class TestWriteReport:

    def test_writes_markdown_and_json(self, tmp_path):
        paths = write_report(make_report(), tmp_path / "reports")
        names = [p.name for p in paths]
        assert names == [
            f"validation-report-{STEM}-20261019-093005.md",
            f"validation-report-{STEM}-20261019-093005.json",
        ]
        data = json.loads(paths[1].read_text())
        assert data["outcome"] == "PASS_WITH_ISSUES"
        assert data["results"][1]["details"] == ["line 12: docs/prd.md"]

    def test_markdown_only(self, tmp_path):
        paths = write_report(make_report(), tmp_path, write_json=False)
        assert [p.suffix for p in paths] == [".md"]

    def test_invalid_report_not_written(self, tmp_path):
        with pytest.raises(ValidationError, match="Refusing to write"):
            write_report(make_report(outcome="MAYBE"), tmp_path)
        assert not list(tmp_path.glob("*.json"))

    def test_round_trip(self, tmp_path):
        report = make_report()
        paths = write_report(report, tmp_path)
        assert load_report(paths[1]) == report

    def test_basename(self):
        from pathlib import Path
        name = report_basename(Path("docs/stories/2-3-x.md"), datetime(2026, 1, 2, 3, 4, 5))
        assert name == "validation-report-2-3-x-20260102-030405"


class TestLatestReport:

    def test_none_without_reports(self, tmp_path):
        assert latest_report(tmp_path, STEM) is None
        assert latest_outcome(tmp_path, STEM) is None
        assert latest_report_markdown(tmp_path / "missing", STEM) is None

    def test_picks_newest(self, tmp_path):
        write_report(make_report(outcome="FAIL", generated_at="2026-10-18T10:00:00"), tmp_path)
        write_report(make_report(outcome="PASS", generated_at="2026-10-19T10:00:00"), tmp_path)
        assert latest_report(tmp_path, STEM).outcome == "PASS"
        assert latest_outcome(tmp_path, STEM) == "PASS"
        assert latest_report_markdown(tmp_path, STEM).name.endswith("20261019-100000.md")

    def test_ignores_other_stories(self, tmp_path):
        write_report(make_report(), tmp_path)
        assert list_reports(tmp_path, "2-3") == []

    def test_skips_corrupt_json(self, tmp_path):
        write_report(make_report(outcome="FAIL", generated_at="2026-10-18T10:00:00"), tmp_path)
        (tmp_path / f"validation-report-{STEM}-20261019-100000.json").write_text("{not json")
        assert latest_report(tmp_path, STEM).outcome == "FAIL"

    def test_outcome_from_markdown_when_no_json(self, tmp_path):
        write_report(make_report(outcome="PASS_WITH_ISSUES"), tmp_path, write_json=False)
        assert latest_outcome(tmp_path, STEM) == "PASS_WITH_ISSUES"
