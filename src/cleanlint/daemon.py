"""
cleanlint - File watch mode.

Continuously lints recently edited files first.
Writes findings to timestamped JSON log files.

Usage:
    python -m cleanlint --watch
    python -m cleanlint --watch --interval 1.0 --full-scan-mins 30

Log files are written to: <log_dir>/ (default ~/.cleanlint/logs/)
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from . import __version__
from .config import LintConfig, should_exclude_path
from .reporting import Finding

logger = logging.getLogger(__name__)


def _get_log_path(log_dir: Path) -> Path:
    """Get timestamped log file path, creating the directory if needed."""
    log_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    return log_dir / f"cleanlint_{ts}.json"


class RecentQueue:
    """Thread-safe queue that hands out the most recently modified file first."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, float] = {}  # path -> last_ts

    def push(self, path: Path, ts: float) -> None:
        p = str(path)
        with self._lock:
            prev = self._items.get(p)
            if prev is None or ts > prev:
                self._items[p] = ts

    def pop_most_recent(self) -> Optional[tuple[Path, float]]:
        with self._lock:
            if not self._items:
                return None
            p, ts = max(self._items.items(), key=lambda kv: kv[1])
            del self._items[p]
            return Path(p), ts

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class SourceChangeHandler(FileSystemEventHandler):
    """Queues lintable files on create/modify events."""

    def __init__(self, cfg: LintConfig, queue: RecentQueue) -> None:
        super().__init__()
        self.cfg = cfg
        self.queue = queue
        self._exts = set(cfg.python_exts)
        if cfg.check_docs:
            self._exts |= set(cfg.docs_exts)

    def wants(self, path: Path) -> bool:
        if path.suffix.lower() not in self._exts:
            return False
        try:
            rel = path.relative_to(self.cfg.root)
        except ValueError:
            return False
        return not should_exclude_path(self.cfg, rel)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = Path(str(event.src_path))
        if self.wants(path):
            self.queue.push(path, time.time())

    def on_created(self, event: FileSystemEvent) -> None:
        self.on_modified(event)


class JsonLog:
    """Appends watch-mode results to a JSON log file."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path
        self._lock = threading.Lock()
        self._entries: list[dict[str, Any]] = []
        self._append({
            "type": "session_start",
            "timestamp": datetime.now().isoformat(),
            "version": __version__,
        })

    def log_findings(self, path: str, findings: list[Finding]) -> None:
        """Log findings for a file."""
        self._append({
            "type": "lint_result",
            "timestamp": datetime.now().isoformat(),
            "file": path,
            "error_count": sum(1 for f in findings if f.severity == "ERROR"),
            "warning_count": sum(1 for f in findings if f.severity in ("WARN", "DOC-WARN")),
            "findings": [asdict(f) for f in findings],
        })

    def log_full_scan(self, error_count: int, warning_count: int) -> None:
        """Log a full scan completion."""
        self._append({
            "type": "full_scan",
            "timestamp": datetime.now().isoformat(),
            "error_count": error_count,
            "warning_count": warning_count,
        })

    @property
    def entries(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._entries)

    def _append(self, entry: dict[str, Any]) -> None:
        with self._lock:
            self._entries.append(entry)
            self.log_path.write_text(json.dumps(self._entries, indent=2, default=str))


def _print_findings(findings: list[Finding], max_shown: int = 50) -> None:
    for f in findings[:max_shown]:
        print(str(f))
        if f.evidence:
            print(f"    {f.evidence}")
    if len(findings) > max_shown:
        print(f"... {len(findings) - max_shown} more findings suppressed")


def _full_scan(cfg: LintConfig, log: Optional[JsonLog] = None) -> int:
    """Run a full scan."""
    from .runner import exit_code, run
    reporter = run(cfg.root, cfg)
    print(reporter.render_human())
    if log:
        log.log_full_scan(len(reporter.errors), len(reporter.warnings))
    return exit_code(reporter, strict=cfg.strict)


def process_next(
    cfg: LintConfig,
    queue: RecentQueue,
    last_linted: dict[str, float],
    debounce_seconds: float,
    log: Optional[JsonLog] = None,
) -> Optional[list[Finding]]:
    """
    Lint the most recently changed file, if any.

    Returns the findings, or None when the queue was empty or the file was
    linted less than debounce_seconds ago. A debounced file stays queued.
    """
    from .runner import lint_file

    item = queue.pop_most_recent()
    if item is None:
        return None
    path, ts = item
    p = str(path)

    now = time.time()
    if (now - last_linted.get(p, 0.0)) < debounce_seconds:
        # Requeue; linted once the window expires
        queue.push(path, ts)
        return None
    last_linted[p] = now

    findings = lint_file(cfg, path)
    if findings:
        print(f"\n[cleanlint] lint {path} (queue={len(queue)})")
        _print_findings(findings)
        if log:
            log.log_findings(p, findings)
    return findings


def run_daemon(
    cfg: LintConfig,
    interval: float,
    debounce_seconds: float,
    full_scan_mins: int,
) -> int:
    """Run the watch loop until interrupted."""
    log_path = _get_log_path(cfg.log_dir)
    log = JsonLog(log_path)

    queue = RecentQueue()
    handler = SourceChangeHandler(cfg, queue)
    observer = Observer()
    observer.schedule(handler, str(cfg.root), recursive=True)
    observer.start()

    logger.info("Watching %s", cfg.root)
    logger.info(
        "interval=%ss debounce=%ss full_scan=%sm",
        interval, debounce_seconds, full_scan_mins,
    )
    logger.info("Logging to %s", log_path)

    last_linted: dict[str, float] = {}
    last_full_scan = time.time()

    try:
        while True:
            now = time.time()

            # Periodic full scan
            if full_scan_mins > 0 and (now - last_full_scan) >= (full_scan_mins * 60):
                logger.info("Full scan starting")
                rc = _full_scan(cfg, log)
                logger.info("Full scan finished rc=%d", rc)
                last_full_scan = now

            process_next(cfg, queue, last_linted, debounce_seconds, log)
            time.sleep(interval)

    except KeyboardInterrupt:
        logger.info("Stopping; log written to %s", log_path)
    finally:
        observer.stop()
        observer.join()

    return 0
