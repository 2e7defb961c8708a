"""
cleanlint - Pattern definitions.

This module contains PURE DATA: the rule catalogue, thresholds' allowlists,
naming patterns, comment markers and guide-document markers.
Edit this file to add/remove rules or tune what they recognize.
No logic here, just definitions.

Organization:
1. RULES - Rule catalogue (id -> severity, category, summary)
2. MAGIC_LITERALS - Literals that are never "magic"
3. NAMING - Short-name allowlist, encodings, conventions, noise words
4. NEGATIVE_NAMES - Prefixes that make a name read as a negation
5. COMMENT_KEYWORDS - Debt markers and pragma prefixes
6. DOC_MARKERS - Bad/Good example labels in guide documents
7. WAIVER - Inline suppression syntax
"""

from __future__ import annotations

import re

SEVERITIES: tuple[str, ...] = ("ERROR", "WARN", "INFO", "DOC-WARN")

# =============================================================================
# 1. RULES
# =============================================================================
# Tuple: (default_severity, category, summary)

RULES: dict[str, tuple[str, str, str]] = {
    # Conditionals
    "BOOL_COMPARE": (
        "WARN", "conditionals",
        "Comparison against a boolean literal; use the value directly.",
    ),
    "MAGIC_NUMBER": (
        "WARN", "conditionals",
        "Numeric literal in logic; give it a named constant.",
    ),
    "MAGIC_STRING": (
        "INFO", "conditionals",
        "String literal compared in logic; give it a named constant or enum.",
    ),
    "NEGATIVE_CONDITIONAL": (
        "INFO", "conditionals",
        "Negative conditional; state the condition positively.",
    ),
    "ELSE_AFTER_RETURN": (
        "INFO", "conditionals",
        "Else after an exiting branch; use a guard clause.",
    ),
    "RETURN_BOOL_LITERAL": (
        "INFO", "conditionals",
        "If/else returning True/False; return the condition.",
    ),
    # Functions
    "TOO_MANY_PARAMS": (
        "WARN", "functions",
        "Too many parameters; group them or split the function.",
    ),
    "FLAG_ARGUMENT": (
        "WARN", "functions",
        "Boolean flag parameter; the function does more than one thing.",
    ),
    "LONG_FUNCTION": (
        "WARN", "functions",
        "Function body too long; extract smaller functions.",
    ),
    "DEEP_NESTING": (
        "WARN", "functions",
        "Control flow nested too deeply; flatten with guard clauses or extraction.",
    ),
    # Naming
    "SHORT_NAME": (
        "WARN", "naming",
        "Name too short to reveal intent.",
    ),
    "ENCODED_NAME": (
        "INFO", "naming",
        "Type or interface encoded in the name.",
    ),
    "NAMING_CONVENTION": (
        "WARN", "naming",
        "Name does not follow CapWords/snake_case conventions.",
    ),
    "NOISE_WORD_NAME": (
        "INFO", "naming",
        "Class name ends in a noise word.",
    ),
    # Classes
    "LARGE_CLASS": (
        "WARN", "classes",
        "Class has too many methods.",
    ),
    "LOW_COHESION": (
        "INFO", "classes",
        "Class methods split into unrelated groups.",
    ),
    # Comments
    "COMMENTED_CODE": (
        "INFO", "comments",
        "Commented-out code; delete it, version control remembers.",
    ),
    "SUSPECT_COMMENT": (
        "INFO", "comments",
        "Debt marker in comment.",
    ),
    # Exceptions
    "BARE_EXCEPT": (
        "WARN", "exceptions",
        "Bare except catches everything, including KeyboardInterrupt.",
    ),
    "SWALLOWED_EXCEPTION": (
        "WARN", "exceptions",
        "Exception silently swallowed.",
    ),
    # Documents
    "UNPAIRED_EXAMPLE": (
        "DOC-WARN", "documents",
        "Bad example without a paired Good example in the same section.",
    ),
    # Engine
    "PARSE_ERROR": (
        "ERROR", "engine",
        "File could not be parsed as Python.",
    ),
    "READ_FAIL": (
        "WARN", "engine",
        "File could not be read.",
    ),
}

# =============================================================================
# 2. MAGIC LITERALS
# =============================================================================

DEFAULT_ALLOWED_NUMBERS: tuple[float, ...] = (0, 1, -1, 2)

# Strings compared against these left-hand names are idiomatic, not magic
MAGIC_STRING_EXEMPT_NAMES: frozenset[str] = frozenset({"__name__"})

# UPPER_CASE (optionally _PRIVATE) names define constants
CONSTANT_NAME_RX = re.compile(r"^_*[A-Z][A-Z0-9_]*$")

# =============================================================================
# 3. NAMING
# =============================================================================

DEFAULT_ALLOWED_SHORT_NAMES: tuple[str, ...] = (
    "_", "i", "j", "k", "n", "x", "y", "z", "e", "db", "id", "ok", "fn",
)

# Hungarian-style type encodings
ENCODED_PREFIX_RX = re.compile(
    r"^_*(str|int|flt|lst|arr|dict|obj|bln|sz)_[a-z]",
)
ENCODED_SUFFIX_RX = re.compile(
    r"[a-z0-9]_(str|int|flt|lst|list|arr|dict|obj)$",
)
# IShape, IRepository
INTERFACE_PREFIX_RX = re.compile(r"^I[A-Z][a-z]")

CLASS_NAME_RX = re.compile(r"^_*[A-Z][A-Za-z0-9]*$")
FUNCTION_NAME_RX = re.compile(r"^_*[a-z][a-z0-9_]*$|^__[a-z][a-z0-9_]*__$")

FUNCTION_NAME_EXEMPT_RX: list[re.Pattern[str]] = [
    re.compile(r"^visit_[A-Z]\w*$"),   # ast.NodeVisitor
    re.compile(r"^(setUp|tearDown|setUpClass|tearDownClass|setUpModule|tearDownModule)$"),
]

NOISE_WORD_SUFFIXES: tuple[str, ...] = (
    "Manager",
    "Processor",
    "Data",
    "Info",
    "Helper",
    "Helpers",
    "Util",
    "Utils",
    "Stuff",
    "Thing",
)

# =============================================================================
# 4. NEGATIVE NAMES
# =============================================================================

NEGATIVE_NAME_PREFIXES: tuple[str, ...] = (
    "not_",
    "is_not_",
    "isnot",
    "no_",
    "has_no_",
    "dont_",
    "disable_",
    "is_disabled",
)

# =============================================================================
# 5. COMMENT KEYWORDS
# =============================================================================
# Dict: keyword -> message

SUSPICIOUS_COMMENT_KEYWORDS: dict[str, str] = {
    "fixme": "FIXME left in comment. Fix it or file it.",
    "hack": "Hack marker in comment. Replace with a clean solution.",
    "xxx": "XXX marker in comment.",
    "kludge": "Kludge marker in comment.",
    "workaround": "Workaround described in comment.",
    "todo": "TODO left in comment.",
}

# Machine-readable comments that are never prose or code
PRAGMA_PREFIXES: tuple[str, ...] = (
    "type:",
    "noqa",
    "pragma",
    "cleanlint:",
    "fmt:",
    "pylint:",
    "mypy:",
    "isort:",
    "!",  # shebang
    "-*-",  # coding cookie
)

# =============================================================================
# 6. DOC MARKERS
# =============================================================================

DOC_EXTS: tuple[str, ...] = (".md", ".markdown")

# Marker line outside a fence: "Bad:", "**Good:**", "Bad example: ...", "#### Bad"
DOC_MARKER_RX = re.compile(
    r"^[\s>#*_\-]*(?:[^\w\s]+\s*)?(bad|good)"
    r"(?:\s+(?:example|code|practice|version))?[*_]*\s*(?::.*|[*_]*)$",
    re.IGNORECASE,
)
# Marker on the first line inside a fence: "# Bad", "// Good", "-- bad", "/* good"
DOC_FENCE_MARKER_RX = re.compile(r"^\s*(?:#|//|--|/\*|<!--)\s*(bad|good)\b", re.IGNORECASE)
DOC_FENCE_RX = re.compile(r"^\s*(```|~~~)")
DOC_HEADING_RX = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")

# =============================================================================
# 7. WAIVER
# =============================================================================
# "# cleanlint: ignore" or "# cleanlint: ignore[RULE_A, RULE_B]"

WAIVER_RX = re.compile(r"#\s*cleanlint:\s*ignore(?:\[(?P<rules>[A-Za-z0-9_,\s-]+)\])?")
