"""
Scanner: file walking, source loading, comment extraction, waivers.
"""
from __future__ import annotations

from pathlib import Path

from cleanlint.config import LintConfig
from cleanlint.scanner import (
    get_line,
    iter_comments,
    iter_files,
    load_source,
    load_sources,
    parse_waivers,
    relpath_str,
)


def _touch(root: Path, rel: str, text: str = "") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestIterFiles:

    def test_walk_with_exclusions(self, tmp_path: Path) -> None:
        _touch(tmp_path, "pkg/mod.py")
        _touch(tmp_path, "docs/guide.md")
        _touch(tmp_path, "notes.txt")
        _touch(tmp_path, ".venv/lib/site.py")
        _touch(tmp_path, "pkg/__pycache__/mod.py")

        found = {relpath_str(tmp_path, p) for p in iter_files(LintConfig(root=tmp_path))}
        assert found == {"pkg/mod.py", "docs/guide.md"}

    def test_docs_skipped_when_disabled(self, tmp_path: Path) -> None:
        _touch(tmp_path, "pkg/mod.py")
        _touch(tmp_path, "docs/guide.md")
        cfg = LintConfig(root=tmp_path, check_docs=False)
        assert [p.name for p in iter_files(cfg)] == ["mod.py"]

    def test_explicit_files(self, tmp_path: Path) -> None:
        keep = _touch(tmp_path, "a.py")
        _touch(tmp_path, "b.py")
        cfg = LintConfig(root=tmp_path, explicit_files=(keep, tmp_path / "missing.py"))
        assert list(iter_files(cfg)) == [keep]


class TestLoadSources:

    def test_undecodable_file_is_reported(self, tmp_path: Path) -> None:
        _touch(tmp_path, "good.py", "VALUE = 1\n")
        (tmp_path / "bad.py").write_bytes(b"\xff\xfe\x00broken")

        sources, failures = load_sources(LintConfig(root=tmp_path))
        assert [s.path.name for s in sources] == ["good.py"]
        assert [p.name for p, _ in failures] == ["bad.py"]

    def test_source_file_kinds(self, tmp_path: Path) -> None:
        src = load_source(_touch(tmp_path, "mod.py", "a = 1\nb = 2\n"))
        assert src.is_python and not src.is_doc
        assert src.lines == ["a = 1", "b = 2"]
        assert load_source(_touch(tmp_path, "GUIDE.MD")).is_doc

    def test_get_line_bounds(self) -> None:
        lines = ["first", "second"]
        assert get_line(lines, 1) == "first"
        assert get_line(lines, 0) == ""
        assert get_line(lines, 3) == ""


class TestComments:

    def test_comment_tokens(self, tmp_path: Path) -> None:
        src = load_source(_touch(tmp_path, "mod.py", (
            "# heading\n"
            "value = '# not a comment'  # trailing\n"
            "    # indented\n"
        )))
        comments = list(iter_comments(src))
        assert [(c.line, c.text, c.standalone) for c in comments] == [
            (1, "heading", True),
            (2, "trailing", False),
            (3, "indented", True),
        ]

    def test_tokenizer_error_stops_quietly(self, tmp_path: Path) -> None:
        src = load_source(_touch(tmp_path, "broken.py", "# before\ncall(\n"))
        assert [c.text for c in iter_comments(src)] == ["before"]


class TestWaivers:

    def test_parse_waivers(self) -> None:
        waivers = parse_waivers([
            "x = 1",
            "if ready == True:  # cleanlint: ignore",
            "total = price * 3  # cleanlint: ignore[MAGIC_NUMBER, short_name]",
            "# cleanlint is great",
        ])
        assert waivers == {
            2: None,
            3: frozenset({"MAGIC_NUMBER", "SHORT_NAME"}),
        }
