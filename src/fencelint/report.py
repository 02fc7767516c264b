"""Aggregate findings across documents and render them."""

import json
from collections import Counter
from dataclasses import dataclass, field

from .core.model import Document, Finding, Severity


@dataclass
class Report:
    documents: int = 0
    blocks: int = 0
    _findings: list[Finding] = field(default_factory=list)

    def add(self, document: Document, findings: list[Finding]) -> None:
        self.documents += 1
        self.blocks += len(document.blocks)
        self._findings.extend(findings)

    @property
    def findings(self) -> list[Finding]:
        """All findings, sorted by path then line."""
        return sorted(self._findings, key=Finding.sort_key)

    def counts(self) -> dict[str, int]:
        c = Counter(f.severity for f in self._findings)
        return {s.label: c.get(s, 0) for s in Severity}

    def failed(self, threshold: Severity = Severity.ERROR) -> bool:
        return any(f.severity >= threshold for f in self._findings)

    def exit_code(self, threshold: Severity = Severity.ERROR) -> int:
        return 1 if self.failed(threshold) else 0


def format_finding(f: Finding) -> str:
    return f"{f.path}:{f.line}:{f.severity.label}:{f.kind}: {f.message}"


def render_text(report: Report) -> list[str]:
    return [format_finding(f) for f in report.findings]


def render_summary(report: Report) -> str:
    counts = report.counts()
    return (
        f"{report.documents} documents, {report.blocks} blocks: "
        f"{counts['error']} errors, {counts['warning']} warnings, {counts['info']} info"
    )


def render_json(report: Report) -> str:
    return json.dumps(
        {
            "findings": [f.to_dict() for f in report.findings],
            "summary": {
                "documents": report.documents,
                "blocks": report.blocks,
                **report.counts(),
            },
        },
        indent=2,
    )
