"""
cleanlint - File scanning and source loading.

Handles:
- Directory walking with exclusions
- Source file loading
- Comment extraction (via Python tokenize)
- Inline waiver parsing
"""

from __future__ import annotations

import logging
import tokenize
from dataclasses import dataclass
from io import StringIO
from pathlib import Path
from typing import Iterator, Optional

from .config import LintConfig, should_exclude_path
from .patterns import DOC_EXTS, WAIVER_RX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """A loaded source file with content."""
    path: Path
    text: str
    lines: list[str]

    @property
    def is_python(self) -> bool:
        return self.path.suffix == ".py"

    @property
    def is_doc(self) -> bool:
        return self.path.suffix.lower() in DOC_EXTS


@dataclass(frozen=True)
class Comment:
    """A single `#` comment token."""
    line: int
    col: int
    text: str  # without the leading '#', stripped
    standalone: bool  # nothing but whitespace before it on the line


def load_source(path: Path) -> SourceFile:
    """Load a single source file. Raises OSError/UnicodeDecodeError on failure."""
    text = path.read_text(encoding="utf-8")
    return SourceFile(path=path, text=text, lines=text.splitlines())


def iter_files(cfg: LintConfig) -> Iterator[Path]:
    """Iterate over all relevant files under root (or explicit list)."""
    # If explicit_files provided, use that instead of scanning
    if cfg.explicit_files is not None:
        for path in cfg.explicit_files:
            if path.is_file():
                yield path
            else:
                logger.warning("Skipping missing file: %s", path)
        return

    all_exts = set(cfg.python_exts)
    if cfg.check_docs:
        all_exts |= set(cfg.docs_exts)

    for path in sorted(cfg.root.rglob("*")):
        if not path.is_file():
            continue
        if should_exclude_path(cfg, path.relative_to(cfg.root)):
            continue
        if path.suffix.lower() in all_exts:
            yield path


def load_sources(cfg: LintConfig) -> tuple[list[SourceFile], list[tuple[Path, str]]]:
    """
    Load all source files under root.

    Returns (sources, failures) where failures are (path, reason) pairs for
    files that could not be read or decoded.
    """
    sources: list[SourceFile] = []
    failures: list[tuple[Path, str]] = []
    for path in iter_files(cfg):
        try:
            sources.append(load_source(path))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            failures.append((path, str(e)))
    return sources, failures


def get_line(lines: list[str], line_no: int) -> str:
    """Get line by 1-based line number."""
    if line_no <= 0 or line_no > len(lines):
        return ""
    return lines[line_no - 1]


def relpath_str(root: Path, p: Path) -> str:
    """Get relative path as posix string."""
    try:
        return p.relative_to(root).as_posix()
    except ValueError:
        return p.as_posix()


# =============================================================================
# Comments
# =============================================================================

def iter_comments(src: SourceFile) -> Iterator[Comment]:
    """
    Yield comment tokens from a Python source.

    Uses tokenize, so '#' inside strings is never mistaken for a comment.
    Stops quietly at the first tokenizer error (the file is reported as a
    PARSE_ERROR elsewhere).
    """
    try:
        for tok in tokenize.generate_tokens(StringIO(src.text).readline):
            if tok.type != tokenize.COMMENT:
                continue
            line_no, col = tok.start
            prefix = get_line(src.lines, line_no)[:col]
            yield Comment(
                line=line_no,
                col=col,
                text=tok.string[1:].strip(),
                standalone=not prefix.strip(),
            )
    except (tokenize.TokenError, SyntaxError) as e:
        logger.debug("Tokenizer stopped in %s: %s", src.path, e)


# =============================================================================
# Waivers
# =============================================================================

def parse_waivers(lines: list[str]) -> dict[int, Optional[frozenset[str]]]:
    """
    Map line number -> waived rule ids.

    A value of None waives every rule on that line.
    """
    waivers: dict[int, Optional[frozenset[str]]] = {}
    for i, line in enumerate(lines, start=1):
        if "cleanlint" not in line:
            continue
        m = WAIVER_RX.search(line)
        if m is None:
            continue
        rules = m.group("rules")
        if rules is None:
            waivers[i] = None
        else:
            waivers[i] = frozenset(r.strip().upper() for r in rules.split(",") if r.strip())
    return waivers
