"""
Guide documents: every "Bad" example must have a paired "Good" example
in the same section.
"""
from __future__ import annotations

from cleanlint.analysis import build_doc_index
from cleanlint.scanner import load_source

GUIDE = """
# Naming

Bad:

```python
d = 5
```

Good:

```python
elapsed_days = 5
```

## Conditionals

**Bad:**

```python
if ready == True:
    start()
```

## Functions

```python
# Good
def publish(article):
    ...
```

```python
# Bad
def publish(title, body, author, tags, draft):
    ...
```

## Comments

### Bad

```python
# i = i + 1
```

### Good

```python
retries = 0
```
"""


class TestDocIndex:

    def test_sections_and_labels(self, write_file) -> None:
        doc = build_doc_index(load_source(write_file("guide.md", GUIDE)))
        titles = [s.title for s in doc.sections]
        assert titles == ["", "Naming", "Conditionals", "Functions", "Comments"]

        labels = {s.title: [ex.label for ex in s.examples] for s in doc.sections}
        assert labels["Naming"] == ["bad", "good"]
        assert labels["Conditionals"] == ["bad"]
        assert labels["Functions"] == ["good", "bad"]
        assert labels["Comments"] == ["bad", "good"]
        assert doc.has_markers

    def test_prose_starting_with_marker_word_is_not_a_marker(self, write_file) -> None:
        doc = build_doc_index(load_source(write_file("prose.md", """
            # Names

            Good names reveal intent.

            ```python
            elapsed_days = 5
            ```
        """)))
        assert [ex.label for s in doc.sections for ex in s.examples] == [None]
        assert not doc.has_markers

    def test_unterminated_fence_still_counts(self, write_file) -> None:
        doc = build_doc_index(load_source(write_file("cut.md", """
            Bad:

            ```python
            d = 5
        """)))
        assert [ex.label for ex in doc.sections[0].examples] == ["bad"]


class TestUnpairedExample:

    def test_only_unpaired_bad_is_reported(self, lint) -> None:
        found = lint(GUIDE, name="guide.md")
        assert [f.rule_id for f in found] == ["UNPAIRED_EXAMPLE"]
        assert "'Conditionals'" in found[0].message
        assert found[0].severity == "DOC-WARN"
        assert found[0].is_doc

    def test_two_bads_one_good(self, lint) -> None:
        found = lint("""
            ## Magic numbers

            Bad:

            ```python
            if age > 18: ...
            ```

            Bad:

            ```python
            total = price * 1.2
            ```

            Good:

            ```python
            if age > ADULT_AGE: ...
            ```
        """, rule="UNPAIRED_EXAMPLE", name="magic.md")
        assert len(found) == 1
        assert found[0].line == 12

    def test_document_without_markers_is_clean(self, lint) -> None:
        assert lint("""
            # Readme

            ```bash
            pip install cleanlint
            ```
        """, name="README.md") == []

    def test_docs_skipped_when_disabled(self, lint) -> None:
        assert lint(GUIDE, name="guide.md", select=frozenset({"BOOL_COMPARE"})) == []
