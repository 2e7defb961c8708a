"""
cleanlint - Rule implementations.

This module applies the rule catalogue (from patterns.py) to indexed sources.
Each rule function takes the config, a source file and, where it needs one,
its ModuleIndex/DocIndex, and returns findings.
"""

from __future__ import annotations

import ast
import warnings
from typing import Optional

from .analysis import DocIndex, ModuleIndex
from .config import LintConfig
from .patterns import (
    CLASS_NAME_RX,
    ENCODED_PREFIX_RX,
    ENCODED_SUFFIX_RX,
    FUNCTION_NAME_EXEMPT_RX,
    FUNCTION_NAME_RX,
    INTERFACE_PREFIX_RX,
    NOISE_WORD_SUFFIXES,
    PRAGMA_PREFIXES,
    SUSPICIOUS_COMMENT_KEYWORDS,
)
from .reporting import Finding
from .scanner import SourceFile, get_line, iter_comments, parse_waivers, relpath_str

_EVIDENCE_MAX = 240


def _finding(
    cfg: LintConfig,
    src: SourceFile,
    rule_id: str,
    line: int,
    col: int,
    message: str,
    symbol: Optional[str] = None,
    suggested_fix: Optional[str] = None,
) -> Finding:
    """Build a finding with the rule's effective severity and line evidence."""
    severity = cfg.severity_for(rule_id)
    return Finding(
        rule_id=rule_id,
        severity=severity,
        path=relpath_str(cfg.root, src.path),
        line=line,
        col=col,
        message=message,
        evidence=get_line(src.lines, line).strip()[:_EVIDENCE_MAX],
        symbol=symbol,
        suggested_fix=suggested_fix,
        is_doc=severity == "DOC-WARN",
    )


# =============================================================================
# Conditionals
# =============================================================================

def check_conditionals(cfg: LintConfig, src: SourceFile, idx: ModuleIndex) -> list[Finding]:
    """Boolean comparisons, negative conditionals, redundant else, bool returns."""
    findings: list[Finding] = []

    if cfg.is_enabled("BOOL_COMPARE"):
        for site in idx.bool_compares:
            negate = site.detail in ("== False", "!= True", "is False", "is not True")
            fix = "Use 'not <value>'." if negate else "Use the value directly."
            findings.append(_finding(
                cfg, src, "BOOL_COMPARE", site.line, site.col,
                f"Comparison '{site.detail}' against a boolean literal.",
                suggested_fix=fix,
            ))

    if cfg.is_enabled("NEGATIVE_CONDITIONAL"):
        for site in idx.negated_ifs:
            findings.append(_finding(
                cfg, src, "NEGATIVE_CONDITIONAL", site.line, site.col,
                f"Negated condition '{site.detail}' with an else branch.",
                suggested_fix="Invert the condition and swap the branches.",
            ))
        for site in idx.negated_names:
            findings.append(_finding(
                cfg, src, "NEGATIVE_CONDITIONAL", site.line, site.col,
                f"Double negative: 'not {site.detail}'.",
                symbol=site.detail,
                suggested_fix="Name the positive state and test it directly.",
            ))

    if cfg.is_enabled("ELSE_AFTER_RETURN"):
        for site in idx.else_after_exit:
            findings.append(_finding(
                cfg, src, "ELSE_AFTER_RETURN", site.line, site.col,
                f"Unnecessary else after '{site.detail}'.",
                suggested_fix="Drop the else and dedent its body (guard clause).",
            ))

    if cfg.is_enabled("RETURN_BOOL_LITERAL"):
        for site in idx.bool_returns:
            findings.append(_finding(
                cfg, src, "RETURN_BOOL_LITERAL", site.line, site.col,
                f"If/else returns boolean literals for condition '{site.detail}'.",
                suggested_fix="Return the condition (or its negation) directly.",
            ))

    return findings


def check_magic_literals(cfg: LintConfig, src: SourceFile, idx: ModuleIndex) -> list[Finding]:
    """Numeric and string literals embedded in logic."""
    findings: list[Finding] = []

    if cfg.is_enabled("MAGIC_NUMBER"):
        allowed = set(cfg.allowed_numbers)
        for lit in idx.magic_numbers:
            if lit.value in allowed:
                continue
            findings.append(_finding(
                cfg, src, "MAGIC_NUMBER", lit.line, lit.col,
                f"Magic number {lit.value!r} in logic.",
                symbol=repr(lit.value),
                suggested_fix="Extract a named UPPER_CASE constant.",
            ))

    if cfg.is_enabled("MAGIC_STRING"):
        for lit in idx.magic_strings:
            findings.append(_finding(
                cfg, src, "MAGIC_STRING", lit.line, lit.col,
                f"Magic string {lit.value!r} compared in logic.",
                symbol=repr(lit.value),
                suggested_fix="Extract a named constant or an Enum member.",
            ))

    return findings


# =============================================================================
# Functions
# =============================================================================

def check_functions(cfg: LintConfig, src: SourceFile, idx: ModuleIndex) -> list[Finding]:
    """Parameter counts, flag arguments, function length, nesting depth."""
    findings: list[Finding] = []

    for fn in idx.functions:
        if cfg.is_enabled("TOO_MANY_PARAMS") and len(fn.params) > cfg.max_params:
            findings.append(_finding(
                cfg, src, "TOO_MANY_PARAMS", fn.line, fn.col,
                f"'{fn.name}' takes {len(fn.params)} parameters (max {cfg.max_params}).",
                symbol=fn.qualname,
                suggested_fix="Introduce a parameter object or split the function.",
            ))

        if cfg.is_enabled("FLAG_ARGUMENT"):
            for p in fn.params:
                if p.bool_default or p.bool_annotation:
                    findings.append(_finding(
                        cfg, src, "FLAG_ARGUMENT", p.line, p.col,
                        f"Boolean flag parameter '{p.name}' in '{fn.name}'.",
                        symbol=f"{fn.qualname}.{p.name}",
                        suggested_fix="Split into one function per behavior.",
                    ))

        if cfg.is_enabled("LONG_FUNCTION") and fn.body_lines > cfg.max_function_lines:
            findings.append(_finding(
                cfg, src, "LONG_FUNCTION", fn.line, fn.col,
                f"'{fn.name}' body is {fn.body_lines} lines (max {cfg.max_function_lines}).",
                symbol=fn.qualname,
                suggested_fix="Extract well-named helper functions.",
            ))

        if cfg.is_enabled("DEEP_NESTING") and fn.max_depth > cfg.max_nesting:
            findings.append(_finding(
                cfg, src, "DEEP_NESTING", fn.deepest_line, fn.col,
                f"'{fn.name}' nests {fn.max_depth} levels deep (max {cfg.max_nesting}).",
                symbol=fn.qualname,
                suggested_fix="Use guard clauses or extract the inner block.",
            ))

    return findings


# =============================================================================
# Naming
# =============================================================================

def _naming_convention_ok(kind: str, name: str) -> bool:
    if kind == "class":
        return bool(CLASS_NAME_RX.match(name))
    if kind == "function":
        if any(rx.match(name) for rx in FUNCTION_NAME_EXEMPT_RX):
            return True
        return bool(FUNCTION_NAME_RX.match(name))
    return True


def check_naming(cfg: LintConfig, src: SourceFile, idx: ModuleIndex) -> list[Finding]:
    """Short names, encoded names, naming conventions, noise words."""
    findings: list[Finding] = []
    seen: set[tuple[str, str, str]] = set()
    allowed_short = set(cfg.allowed_short_names)

    for bound in idx.names:
        key = (bound.scope, bound.name, bound.kind)
        if key in seen:
            continue
        seen.add(key)
        name = bound.name

        if (
            cfg.is_enabled("SHORT_NAME")
            and len(name) < cfg.min_name_length
            and name not in allowed_short
        ):
            findings.append(_finding(
                cfg, src, "SHORT_NAME", bound.line, bound.col,
                f"{bound.kind.capitalize()} name '{name}' is too short to reveal intent.",
                symbol=name,
                suggested_fix="Use a searchable, intention-revealing name.",
            ))

        if cfg.is_enabled("ENCODED_NAME"):
            if bound.kind == "class" and INTERFACE_PREFIX_RX.match(name):
                findings.append(_finding(
                    cfg, src, "ENCODED_NAME", bound.line, bound.col,
                    f"Class name '{name}' encodes an interface prefix.",
                    symbol=name,
                    suggested_fix="Drop the 'I' prefix.",
                ))
            elif bound.kind != "class" and (
                ENCODED_PREFIX_RX.match(name) or ENCODED_SUFFIX_RX.search(name)
            ):
                findings.append(_finding(
                    cfg, src, "ENCODED_NAME", bound.line, bound.col,
                    f"Name '{name}' encodes its type.",
                    symbol=name,
                    suggested_fix="Name what it holds, not how it is stored.",
                ))

        if cfg.is_enabled("NAMING_CONVENTION") and not _naming_convention_ok(bound.kind, name):
            expected = "CapWords" if bound.kind == "class" else "snake_case"
            findings.append(_finding(
                cfg, src, "NAMING_CONVENTION", bound.line, bound.col,
                f"{bound.kind.capitalize()} name '{name}' is not {expected}.",
                symbol=name,
            ))

        if (
            cfg.is_enabled("NOISE_WORD_NAME")
            and bound.kind == "class"
            and any(name.endswith(w) and name != w for w in NOISE_WORD_SUFFIXES)
        ):
            findings.append(_finding(
                cfg, src, "NOISE_WORD_NAME", bound.line, bound.col,
                f"Class name '{name}' ends in a noise word.",
                symbol=name,
                suggested_fix="Name the responsibility instead.",
            ))

    return findings


# =============================================================================
# Classes
# =============================================================================

def check_classes(cfg: LintConfig, src: SourceFile, idx: ModuleIndex) -> list[Finding]:
    """Class size and cohesion."""
    findings: list[Finding] = []

    for cls in idx.classes:
        if cfg.is_enabled("LARGE_CLASS") and cls.method_count > cfg.max_methods:
            findings.append(_finding(
                cfg, src, "LARGE_CLASS", cls.line, cls.col,
                f"Class '{cls.name}' has {cls.method_count} methods (max {cfg.max_methods}).",
                symbol=cls.name,
                suggested_fix="Split responsibilities into smaller classes.",
            ))

        if (
            cfg.is_enabled("LOW_COHESION")
            and len(cls.instance_methods) >= cfg.cohesion_min_methods
        ):
            groups = cls.cohesion_groups()
            if len(groups) > 1:
                shown = "; ".join(", ".join(g) for g in groups)
                findings.append(_finding(
                    cfg, src, "LOW_COHESION", cls.line, cls.col,
                    f"Class '{cls.name}' splits into {len(groups)} unrelated method groups: {shown}.",
                    symbol=cls.name,
                    suggested_fix="Extract each group into its own class.",
                ))

    return findings


# =============================================================================
# Exceptions
# =============================================================================

def check_exceptions(cfg: LintConfig, src: SourceFile, idx: ModuleIndex) -> list[Finding]:
    """Bare and swallowed exception handlers."""
    findings: list[Finding] = []

    if cfg.is_enabled("BARE_EXCEPT"):
        for site in idx.bare_excepts:
            findings.append(_finding(
                cfg, src, "BARE_EXCEPT", site.line, site.col,
                "Bare 'except:' clause.",
                suggested_fix="Catch the specific exceptions you can recover from.",
            ))

    if cfg.is_enabled("SWALLOWED_EXCEPTION"):
        for site in idx.swallowed:
            findings.append(_finding(
                cfg, src, "SWALLOWED_EXCEPTION", site.line, site.col,
                f"Exception ({site.detail}) silently swallowed.",
                suggested_fix="Use contextlib.suppress() for ignorable errors, or log/re-raise.",
            ))

    return findings


# =============================================================================
# Comments
# =============================================================================

def _is_bare_jump(stmt: ast.stmt) -> bool:
    if isinstance(stmt, (ast.Break, ast.Continue)):
        return True
    return isinstance(stmt, ast.Return) and (stmt.value is None or isinstance(stmt.value, ast.Name))


def looks_like_code(text: str) -> bool:
    """Whether comment text parses as a Python statement worth flagging."""
    if not text or text.lower().startswith(PRAGMA_PREFIXES):
        return False
    candidate = text
    if candidate.endswith(":"):
        # Compound statement header: give it a body
        candidate += "\n    pass"
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", SyntaxWarning)
            tree = ast.parse(candidate)
    except SyntaxError:
        return False

    for stmt in tree.body:
        if isinstance(stmt, ast.Expr):
            if isinstance(stmt.value, (ast.Call, ast.Await)):
                return True
            continue
        if _is_bare_jump(stmt):
            # "return value", "break": reads as prose
            continue
        if isinstance(stmt, ast.AnnAssign) and stmt.value is None:
            # "Note: something" is prose
            continue
        return True
    return False


def check_comments(cfg: LintConfig, src: SourceFile) -> list[Finding]:
    """Commented-out code and debt markers."""
    want_code = cfg.is_enabled("COMMENTED_CODE")
    want_markers = cfg.is_enabled("SUSPECT_COMMENT")
    if not (want_code or want_markers):
        return []

    findings: list[Finding] = []
    for comment in iter_comments(src):
        if want_code and comment.standalone and looks_like_code(comment.text):
            findings.append(_finding(
                cfg, src, "COMMENTED_CODE", comment.line, comment.col,
                "Commented-out code.",
                suggested_fix="Delete it; version control keeps the history.",
            ))
            continue

        if want_markers:
            words = set(comment.text.lower().replace(":", " ").replace("(", " ").split())
            for kw, reason in SUSPICIOUS_COMMENT_KEYWORDS.items():
                if kw in words:
                    findings.append(_finding(
                        cfg, src, "SUSPECT_COMMENT", comment.line, comment.col,
                        f"{reason} (keyword: '{kw}')",
                    ))
                    break  # One per line

    return findings


# =============================================================================
# Documents
# =============================================================================

def check_doc_examples(cfg: LintConfig, src: SourceFile, doc: DocIndex) -> list[Finding]:
    """Every Bad example needs a Good example in the same section."""
    if not cfg.is_enabled("UNPAIRED_EXAMPLE") or not doc.has_markers:
        return []

    findings: list[Finding] = []
    for section in doc.sections:
        pending_bad = []
        spare_good = 0
        for ex in section.examples:
            if ex.label == "bad":
                if spare_good:
                    spare_good -= 1
                else:
                    pending_bad.append(ex)
            elif ex.label == "good":
                if pending_bad:
                    pending_bad.pop(0)
                else:
                    spare_good += 1

        title = section.title or "(document start)"
        for ex in pending_bad:
            findings.append(_finding(
                cfg, src, "UNPAIRED_EXAMPLE", ex.line, 0,
                f"Bad example in section '{title}' has no paired Good example.",
                suggested_fix="Add a Good example showing the corrected code.",
            ))

    return findings


# =============================================================================
# Engine findings and waivers
# =============================================================================

def parse_error_finding(cfg: LintConfig, src: SourceFile, idx: ModuleIndex) -> Optional[Finding]:
    """PARSE_ERROR finding for a module that failed to parse."""
    if idx.syntax_error is None or not cfg.is_enabled("PARSE_ERROR"):
        return None
    err = idx.syntax_error
    return _finding(
        cfg, src, "PARSE_ERROR", err.line, err.col,
        f"Cannot parse ({err.detail}). AST rules skipped for this file.",
    )


def apply_waivers(src: SourceFile, findings: list[Finding]) -> list[Finding]:
    """Drop findings waived by an inline '# cleanlint: ignore[...]' on their line."""
    waivers = parse_waivers(src.lines)
    if not waivers:
        return findings
    kept: list[Finding] = []
    for f in findings:
        if f.line in waivers:
            rules = waivers[f.line]
            if rules is None or f.rule_id in rules:
                continue
        kept.append(f)
    return kept
