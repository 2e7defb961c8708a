"""
cleanlint - Main runner and CLI.

Orchestrates all lint checks and handles CLI arguments.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .analysis import build_doc_index, build_index
from .config import ConfigError, LintConfig, load_config
from .patterns import RULES
from .reporting import Finding, Reporter
from .rules import (
    apply_waivers,
    check_classes,
    check_comments,
    check_conditionals,
    check_doc_examples,
    check_exceptions,
    check_functions,
    check_magic_literals,
    check_naming,
    parse_error_finding,
)
from .scanner import SourceFile, load_source, load_sources, relpath_str

logger = logging.getLogger(__name__)


def lint_source(cfg: LintConfig, src: SourceFile) -> list[Finding]:
    """Run every applicable rule on one loaded source."""
    findings: list[Finding] = []

    if src.is_doc:
        findings.extend(check_doc_examples(cfg, src, build_doc_index(src)))
        return apply_waivers(src, findings)

    idx = build_index(src)
    if idx.syntax_error is not None:
        logger.info("Cannot parse %s: %s", src.path, idx.syntax_error.detail)
        err = parse_error_finding(cfg, src, idx)
        if err is not None:
            findings.append(err)
    else:
        findings.extend(check_conditionals(cfg, src, idx))
        findings.extend(check_magic_literals(cfg, src, idx))
        findings.extend(check_functions(cfg, src, idx))
        findings.extend(check_naming(cfg, src, idx))
        findings.extend(check_classes(cfg, src, idx))
        findings.extend(check_exceptions(cfg, src, idx))

    # Comment checks only need the token stream
    findings.extend(check_comments(cfg, src))

    return apply_waivers(src, findings)


def _read_fail_finding(cfg: LintConfig, path: Path, reason: str) -> Finding:
    return Finding(
        rule_id="READ_FAIL",
        severity=cfg.severity_for("READ_FAIL"),
        path=relpath_str(cfg.root, path),
        line=1,
        col=0,
        message=f"Could not read file: {reason}",
    )


def lint_file(cfg: LintConfig, path: Path) -> list[Finding]:
    """Load and lint a single file."""
    try:
        src = load_source(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        if not cfg.is_enabled("READ_FAIL"):
            return []
        return [_read_fail_finding(cfg, path, str(e))]
    return lint_source(cfg, src)


def run(root: Path, cfg: LintConfig | None = None) -> Reporter:
    """
    Run all lint checks and return a Reporter with findings.

    A cfg built for a different root is rejected.
    """
    cfg = cfg or LintConfig(root=root)
    if Path(cfg.root) != Path(root):
        raise ValueError(f"Config root {cfg.root} does not match scan root {root}")
    reporter = Reporter()

    sources, failures = load_sources(cfg)
    reporter.files_scanned = len(sources) + len(failures)

    if cfg.is_enabled("READ_FAIL"):
        for path, reason in failures:
            reporter.add(_read_fail_finding(cfg, path, reason))

    for src in sources:
        if src.is_doc and not cfg.check_docs:
            continue
        reporter.extend(lint_source(cfg, src))

    if cfg.errors_only:
        reporter.findings = [f for f in reporter.findings if f.severity == "ERROR"]

    logger.debug(
        "Scanned %d files under %s: %d findings",
        reporter.files_scanned, cfg.root, len(reporter.findings),
    )
    return reporter


def exit_code(reporter: Reporter, strict: bool = False) -> int:
    """1 when a failing finding remains (errors; warnings too when strict)."""
    if reporter.errors:
        return 1
    if strict and reporter.warnings:
        return 1
    return 0


# =============================================================================
# CLI
# =============================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cleanlint",
        description=f"cleanlint v{__version__} - clean-code style checker",
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Root directory to scan (default: current directory)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML config file (default: <root>/.cleanlint.yaml)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--errors-only",
        action="store_true",
        help="Only show ERROR severity",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero on warnings as well as errors",
    )
    parser.add_argument(
        "--select",
        metavar="RULES",
        help="Comma-separated rule ids to run (default: all)",
    )
    parser.add_argument(
        "--ignore",
        metavar="RULES",
        help="Comma-separated rule ids to skip",
    )
    parser.add_argument(
        "--no-docs",
        action="store_true",
        help="Skip guide-document checks",
    )
    parser.add_argument(
        "--files",
        nargs="*",
        metavar="FILE",
        help="Lint only these specific files (disables directory scan)",
    )
    parser.add_argument(
        "--files-from",
        metavar="MANIFEST",
        help="Read file list from JSON manifest (array of paths)",
    )
    parser.add_argument(
        "--list-rules",
        action="store_true",
        help="List rule ids with default severities and exit",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Run in watch mode (continuous lint on change)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=0.75,
        help="Watch poll interval in seconds (default: 0.75)",
    )
    parser.add_argument(
        "--full-scan-mins",
        type=int,
        default=45,
        help="Watch full scan interval in minutes (default: 45, 0 disables)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )
    return parser


def _read_manifest(path: Path) -> tuple[Path, ...]:
    """Files listed in a JSON manifest: a list, or {"files": [...]}."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read manifest {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get("files")
    if not isinstance(data, list):
        raise ConfigError(f"Manifest {path} must be a list of paths or {{\"files\": [...]}}")
    return tuple(Path(f).resolve() for f in data)


def _list_rules() -> str:
    lines = []
    for rule_id, (severity, category, summary) in RULES.items():
        lines.append(f"{rule_id:<22} {severity:<8} {category:<12} {summary}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.watch:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_rules:
        print(_list_rules())
        return 0

    root = Path(args.root).resolve()

    try:
        explicit_files = None
        if args.files:
            explicit_files = tuple(Path(f).resolve() for f in args.files)
        elif args.files_from:
            explicit_files = _read_manifest(Path(args.files_from))

        cfg = load_config(
            root,
            config_path=Path(args.config) if args.config else None,
            select=args.select,
            ignore=args.ignore,
            explicit_files=explicit_files,
            check_docs=False if args.no_docs else None,
            json_output=args.json or None,
            errors_only=args.errors_only or None,
            strict=args.strict or None,
        )
    except ConfigError as e:
        print(f"cleanlint: configuration error: {e}", file=sys.stderr)
        return 2

    if args.watch:
        from .daemon import run_daemon
        return run_daemon(
            cfg,
            interval=max(0.1, args.interval),
            debounce_seconds=2.0,
            full_scan_mins=max(0, args.full_scan_mins),
        )

    reporter = run(root, cfg)

    if cfg.json_output:
        print(reporter.render_json())
    else:
        print(f"Scanned: {reporter.files_scanned} files under {root}")
        print(reporter.render_human())

    return exit_code(reporter, strict=cfg.strict)


if __name__ == "__main__":
    raise SystemExit(main())
