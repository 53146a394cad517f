"""
Validation reports.

A report is written as a markdown file for humans and, unless disabled,
a JSON twin for tooling (the status gate reads the JSON):

  <reports_dir>/validation-report-<story-stem>-<YYYYMMDD-HHMMSS>.md
  <reports_dir>/validation-report-<story-stem>-<YYYYMMDD-HHMMSS>.json
"""

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from storycheck.checklist import SECTION_TITLES
from storycheck.lib.constants import (
    OUTCOME_FAIL,
    OUTCOME_PASS,
    OUTCOME_PASS_WITH_ISSUES,
    RESULT_FAIL,
    RESULT_NA,
    RESULT_PARTIAL,
    RESULT_PASS,
    SEVERITIES,
)
from storycheck.lib.validate import ValidationError, validate_before_write, validate_file

logger = logging.getLogger(__name__)

REPORT_PREFIX = "validation-report-"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
OUTCOME_LINE_RE = re.compile(r'^\*\*Outcome:\*\*\s*([A-Z_]+)', re.MULTILINE)

RESULT_LABELS = {
    RESULT_PASS: "PASS",
    RESULT_PARTIAL: "PARTIAL",
    RESULT_FAIL: "FAIL",
    RESULT_NA: "N/A",
}

OUTCOME_LABELS = {
    OUTCOME_PASS: "PASS",
    OUTCOME_PASS_WITH_ISSUES: "PASS with issues",
    OUTCOME_FAIL: "FAIL",
}


@dataclass
class ItemResult:
    """A checklist item together with its result for one story."""
    item_id: str
    section: str
    title: str
    severity: str
    result: str
    evidence: str
    details: list[str] = field(default_factory=list)
    remediation: str = ""


@dataclass
class ValidationReport:
    story_key: Optional[str]
    story_title: str
    story_path: str
    checklist: str
    generated_at: str  # ISO timestamp
    outcome: str
    counts: dict[str, int]
    results: list[ItemResult] = field(default_factory=list)

    def by_result(self, result: str) -> list[ItemResult]:
        return [r for r in self.results if r.result == result]

    @property
    def failed(self) -> bool:
        return self.outcome == OUTCOME_FAIL

    def counts_text(self) -> str:
        return ", ".join(f"{s.capitalize()}: {self.counts.get(s, 0)}" for s in SEVERITIES)

    def outcome_line(self) -> str:
        return f"{OUTCOME_LABELS.get(self.outcome, self.outcome)} ({self.counts_text()})"


def report_to_dict(report: ValidationReport) -> dict:
    return asdict(report)


def report_from_dict(data: dict) -> ValidationReport:
    results = [ItemResult(**r) for r in data.get("results", [])]
    return ValidationReport(
        story_key=data.get("story_key"),
        story_title=data.get("story_title", ""),
        story_path=data["story_path"],
        checklist=data["checklist"],
        generated_at=data["generated_at"],
        outcome=data["outcome"],
        counts=dict(data["counts"]),
        results=results,
    )


def _cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def _story_label(report: ValidationReport) -> str:
    if report.story_key:
        return f"{report.story_key} - {report.story_title}" if report.story_title else report.story_key
    return report.story_title or Path(report.story_path).stem


def _item_block(r: ItemResult) -> list[str]:
    lines = [f"- **[{r.severity.upper()}] {r.item_id}** {r.title}: {r.evidence}"]
    for detail in r.details:
        lines.append(f"  - {detail}")
    if r.remediation:
        lines.append(f"  - Fix: {r.remediation}")
    return lines


def render_markdown(report: ValidationReport) -> str:
    """Render a report as markdown."""
    lines = [
        "# Story Quality Validation Report",
        "",
        f"**Story:** {_story_label(report)}",
        f"**Story File:** {report.story_path}",
        f"**Checklist:** {report.checklist}",
        f"**Date:** {report.generated_at}",
        f"**Outcome:** {report.outcome} ({report.counts_text()})",
        "",
        "## Summary",
        "",
        "| Result | Count |",
        "|--------|-------|",
    ]
    for result in (RESULT_PASS, RESULT_PARTIAL, RESULT_FAIL, RESULT_NA):
        lines.append(f"| {RESULT_LABELS[result]} | {len(report.by_result(result))} |")
    lines.append("")

    lines.extend(["## Section Results", ""])
    sections: list[str] = []
    for r in report.results:
        if r.section not in sections:
            sections.append(r.section)

    for section in sections:
        items = [r for r in report.results if r.section == section]
        applicable = [r for r in items if r.result != RESULT_NA]
        passing = [r for r in applicable if r.result == RESULT_PASS]
        lines.append(f"### {SECTION_TITLES.get(section, section)}")
        lines.append("")
        if applicable:
            rate = round(100 * len(passing) / len(applicable))
            lines.append(f"Pass rate: {len(passing)}/{len(applicable)} ({rate}%)")
        else:
            lines.append("Pass rate: n/a")
        lines.append("")
        lines.append("| ID | Check | Severity | Result | Evidence |")
        lines.append("|----|-------|----------|--------|----------|")
        for r in items:
            lines.append(
                f"| {r.item_id} | {_cell(r.title)} | {r.severity} "
                f"| {RESULT_LABELS.get(r.result, r.result)} | {_cell(r.evidence)} |"
            )
        lines.append("")

    failed = report.by_result(RESULT_FAIL)
    lines.extend(["## Failed Items", ""])
    if failed:
        for r in sorted(failed, key=lambda r: SEVERITIES.index(r.severity)):
            lines.extend(_item_block(r))
    else:
        lines.append("None.")
    lines.append("")

    partials = report.by_result(RESULT_PARTIAL)
    lines.extend(["## Partial Items", ""])
    if partials:
        for r in partials:
            lines.extend(_item_block(r))
    else:
        lines.append("None.")
    lines.append("")

    lines.extend(["## Successes", ""])
    successes = report.by_result(RESULT_PASS)
    if successes:
        for r in successes:
            lines.append(f"- {r.item_id} {r.title}: {r.evidence}")
    else:
        lines.append("None.")
    lines.append("")

    lines.extend(["## Recommendations", ""])
    lines.extend(_recommendations(report))
    lines.append("")

    return "\n".join(lines)


def _recommendations(report: ValidationReport) -> list[str]:
    must = [r for r in report.by_result(RESULT_FAIL) if r.severity == "critical"]
    should = [r for r in report.by_result(RESULT_FAIL) if r.severity == "major"]
    consider = [r for r in report.by_result(RESULT_FAIL) if r.severity == "minor"]
    consider += report.by_result(RESULT_PARTIAL)

    lines = []
    for heading, items in (("Must Fix", must), ("Should Improve", should), ("Consider", consider)):
        if not items:
            continue
        lines.append(f"**{heading}:**")
        lines.append("")
        for i, r in enumerate(items, 1):
            fix = r.remediation or r.evidence
            lines.append(f"{i}. {r.item_id}: {fix}")
        lines.append("")

    if not lines:
        return ["No changes needed. Story is ready for development."]
    return lines[:-1]


def report_basename(story_path: Path, generated_at: datetime) -> str:
    return f"{REPORT_PREFIX}{story_path.stem}-{generated_at.strftime(TIMESTAMP_FORMAT)}"


def write_report(report: ValidationReport, reports_dir: Path, write_json: bool = True) -> list[Path]:
    """Write the markdown report (and JSON twin) and return the written paths.

    Raises:
        ValidationError: If the report data doesn't match the report schema
    """
    reports_dir.mkdir(parents=True, exist_ok=True)
    generated = datetime.fromisoformat(report.generated_at)
    base = report_basename(Path(report.story_path), generated)

    written = []
    if write_json:
        json_path = reports_dir / f"{base}.json"
        data = report_to_dict(report)
        validate_before_write(data, "report", json_path)
        json_path.write_text(json.dumps(data, indent=2))
        written.append(json_path)

    md_path = reports_dir / f"{base}.md"
    md_path.write_text(render_markdown(report))
    written.insert(0, md_path)

    logger.info(f"Wrote validation report {md_path.name} ({report.outcome})")
    return written


def load_report(path: Path) -> ValidationReport:
    """Load and validate a report JSON file.

    Raises:
        ValidationError: If the file is missing, malformed or invalid
    """
    return report_from_dict(validate_file(path, "report"))


def list_reports(reports_dir: Path, story_stem: str, suffix: str = ".json") -> list[Path]:
    """Reports for a story, oldest first (timestamps sort lexically)."""
    if not reports_dir.exists():
        return []
    pattern = re.compile(rf'^{re.escape(REPORT_PREFIX + story_stem)}-\d{{8}}-\d{{6}}{re.escape(suffix)}$')
    return sorted(p for p in reports_dir.iterdir() if pattern.match(p.name))


def latest_report(reports_dir: Path, story_stem: str) -> Optional[ValidationReport]:
    """Most recent valid JSON report for a story, skipping unreadable ones."""
    for path in reversed(list_reports(reports_dir, story_stem)):
        try:
            return load_report(path)
        except ValidationError as e:
            logger.warning(f"Skipping unreadable report {path.name}: {e}")
    return None


def latest_report_markdown(reports_dir: Path, story_stem: str) -> Optional[Path]:
    paths = list_reports(reports_dir, story_stem, suffix=".md")
    return paths[-1] if paths else None


def latest_outcome(reports_dir: Path, story_stem: str) -> Optional[str]:
    """Outcome of the latest report, from JSON or else the markdown Outcome line."""
    report = latest_report(reports_dir, story_stem)
    if report:
        return report.outcome

    md_path = latest_report_markdown(reports_dir, story_stem)
    if md_path is None:
        return None
    match = OUTCOME_LINE_RE.search(md_path.read_text())
    return match.group(1) if match else None
