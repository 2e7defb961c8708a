"""
Pytest configuration and shared fixtures.
"""

import sys
import textwrap
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cleanlint import config as config_module
from cleanlint.config import LintConfig
from cleanlint.runner import lint_file


# =============================================================================
# ENVIRONMENT ISOLATION
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path_factory):
    """Keep user config files and CLEANLINT_* variables out of every test."""
    for var in list(config_module.ENV_OVERRIDES) + ["CLEANLINT_CONFIG"]:
        monkeypatch.delenv(var, raising=False)
    missing = tmp_path_factory.mktemp("home") / "config.yaml"
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH", missing)


# =============================================================================
# LINT FIXTURES
# =============================================================================

@pytest.fixture
def cfg(tmp_path):
    """Default configuration rooted at tmp_path."""
    return LintConfig(root=tmp_path)


@pytest.fixture
def write_file(tmp_path):
    """Write dedented text to tmp_path/name and return the path."""
    def _write(name, text):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def lint(tmp_path, write_file):
    """
    Lint a code snippet and return its findings.

    lint(code, rule="BOOL_COMPARE") keeps only that rule's findings;
    extra keyword arguments become LintConfig fields.
    """
    def _lint(code, rule=None, name="sample.py", **cfg_overrides):
        path = write_file(name, code)
        findings = lint_file(LintConfig(root=tmp_path, **cfg_overrides), path)
        if rule is not None:
            findings = [f for f in findings if f.rule_id == rule]
        return findings
    return _lint
