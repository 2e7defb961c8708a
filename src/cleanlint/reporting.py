"""
cleanlint - Reporting and output formatting.

Handles:
- Finding dataclass
- Human-readable output
- JSON output
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Optional

from . import __version__

_SEVERITY_ORDER = {"ERROR": 0, "WARN": 1, "DOC-WARN": 2, "INFO": 3}


@dataclass
class Finding:
    """A single lint finding."""
    rule_id: str
    severity: str  # "ERROR", "WARN", "INFO", "DOC-WARN"
    path: str
    line: int
    col: int
    message: str
    evidence: str = ""
    symbol: Optional[str] = None
    suggested_fix: Optional[str] = None
    is_doc: bool = False

    def __str__(self) -> str:
        loc = f"{self.path}:{self.line}:{self.col}"
        sym = f" [{self.symbol}]" if self.symbol else ""
        return f"{self.severity} {self.rule_id} {loc}{sym} - {self.message}"


class Reporter:
    """Collects and formats findings."""

    def __init__(self) -> None:
        self.findings: list[Finding] = []
        self.files_scanned = 0

    def add(self, finding: Finding) -> None:
        """Add a finding."""
        self.findings.append(finding)

    def extend(self, findings: list[Finding]) -> None:
        self.findings.extend(findings)

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == "ERROR"]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity in ("WARN", "DOC-WARN")]

    @property
    def infos(self) -> list[Finding]:
        return [f for f in self.findings if f.severity == "INFO"]

    def counts_by_rule(self) -> dict[str, int]:
        """Finding count per rule id, most frequent first."""
        return dict(Counter(f.rule_id for f in self.findings).most_common())

    def sorted_findings(self) -> list[Finding]:
        # Errors first, then by path/line
        return sorted(
            self.findings,
            key=lambda f: (_SEVERITY_ORDER.get(f.severity, 9), f.path, f.line, f.col, f.rule_id),
        )

    def render_human(self) -> str:
        """Render findings as human-readable text."""
        if not self.findings:
            return f"cleanlint v{__version__}: OK - no findings"

        lines = [
            f"cleanlint v{__version__}",
            f"Errors: {len(self.errors)}  Warnings: {len(self.warnings)}  Info: {len(self.infos)}",
            "",
        ]

        for f in self.sorted_findings():
            lines.append(str(f))
            if f.evidence:
                lines.append(f"    {f.evidence}")
            if f.suggested_fix:
                lines.append(f"    -> {f.suggested_fix}")

        lines.append("")
        lines.append("By rule:")
        for rule_id, count in self.counts_by_rule().items():
            lines.append(f"  {rule_id:<22} {count}")

        return "\n".join(lines)

    def render_json(self) -> str:
        """Render findings as JSON."""
        return json.dumps(
            [asdict(f) for f in self.sorted_findings()],
            indent=2,
            default=str,
        )
