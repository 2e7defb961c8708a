"""
Reporter: severity buckets, ordering, human and JSON rendering.
"""
from __future__ import annotations

import json

from cleanlint import __version__
from cleanlint.reporting import Finding, Reporter


def _finding(rule_id: str, severity: str, path: str = "a.py", line: int = 1, **extra) -> Finding:
    return Finding(
        rule_id=rule_id,
        severity=severity,
        path=path,
        line=line,
        col=0,
        message=f"{rule_id} message",
        **extra,
    )


class TestReporter:

    def test_severity_buckets(self) -> None:
        reporter = Reporter()
        reporter.extend([
            _finding("PARSE_ERROR", "ERROR"),
            _finding("MAGIC_NUMBER", "WARN"),
            _finding("UNPAIRED_EXAMPLE", "DOC-WARN", path="guide.md"),
            _finding("MAGIC_STRING", "INFO"),
        ])
        assert [f.rule_id for f in reporter.errors] == ["PARSE_ERROR"]
        assert [f.rule_id for f in reporter.warnings] == ["MAGIC_NUMBER", "UNPAIRED_EXAMPLE"]
        assert [f.rule_id for f in reporter.infos] == ["MAGIC_STRING"]

    def test_sorted_errors_first(self) -> None:
        reporter = Reporter()
        reporter.add(_finding("MAGIC_STRING", "INFO", path="a.py", line=1))
        reporter.add(_finding("MAGIC_NUMBER", "WARN", path="b.py", line=9))
        reporter.add(_finding("MAGIC_NUMBER", "WARN", path="b.py", line=2))
        reporter.add(_finding("PARSE_ERROR", "ERROR", path="z.py", line=5))
        order = [(f.rule_id, f.line) for f in reporter.sorted_findings()]
        assert order == [
            ("PARSE_ERROR", 5),
            ("MAGIC_NUMBER", 2),
            ("MAGIC_NUMBER", 9),
            ("MAGIC_STRING", 1),
        ]

    def test_counts_by_rule(self) -> None:
        reporter = Reporter()
        reporter.extend([
            _finding("SHORT_NAME", "WARN"),
            _finding("SHORT_NAME", "WARN", line=2),
            _finding("BARE_EXCEPT", "WARN"),
        ])
        assert reporter.counts_by_rule() == {"SHORT_NAME": 2, "BARE_EXCEPT": 1}


class TestRendering:

    def test_empty_report(self) -> None:
        assert Reporter().render_human() == f"cleanlint v{__version__}: OK - no findings"

    def test_finding_str(self) -> None:
        f = _finding("SHORT_NAME", "WARN", path="pkg/m.py", line=4, symbol="q")
        assert str(f) == "WARN SHORT_NAME pkg/m.py:4:0 [q] - SHORT_NAME message"

    def test_human_report(self) -> None:
        reporter = Reporter()
        reporter.add(_finding(
            "BOOL_COMPARE", "WARN",
            evidence="if ready == True:",
            suggested_fix="Use the value directly.",
        ))
        text = reporter.render_human()
        assert "Errors: 0  Warnings: 1  Info: 0" in text
        assert "    if ready == True:" in text
        assert "    -> Use the value directly." in text
        assert "By rule:" in text

    def test_json_report(self) -> None:
        reporter = Reporter()
        reporter.add(_finding("UNPAIRED_EXAMPLE", "DOC-WARN", path="guide.md", is_doc=True))
        (data,) = json.loads(reporter.render_json())
        assert data["rule_id"] == "UNPAIRED_EXAMPLE"
        assert data["severity"] == "DOC-WARN"
        assert data["is_doc"] is True
        assert data["symbol"] is None
