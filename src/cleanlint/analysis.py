"""
cleanlint - AST analysis and module indexing.

Handles:
- Python AST parsing
- Function shape (parameters, length, nesting depth)
- Class shape (methods, fields, cohesion groups)
- Candidate sites for expression-level rules
- Markdown guide structure (sections and labelled examples)
"""

from __future__ import annotations

import ast
import logging
import warnings
from dataclasses import dataclass, field
from typing import Iterator, Optional

from .patterns import (
    CONSTANT_NAME_RX,
    DOC_FENCE_MARKER_RX,
    DOC_FENCE_RX,
    DOC_HEADING_RX,
    DOC_MARKER_RX,
    MAGIC_STRING_EXEMPT_NAMES,
    NEGATIVE_NAME_PREFIXES,
)
from .scanner import SourceFile

logger = logging.getLogger(__name__)

TOO_DEEP_DETAIL = "too deeply nested to analyse"


@dataclass(frozen=True)
class Site:
    """A location of interest, with an optional detail string."""
    line: int
    col: int
    detail: str = ""


@dataclass(frozen=True)
class Literal:
    """A literal value found in a rule-relevant context."""
    value: object
    line: int
    col: int


@dataclass(frozen=True)
class BoundName:
    """A name bound by a definition or assignment."""
    name: str
    kind: str  # "function", "class", "param", "var", "loop", "with", "except"
    scope: str
    line: int
    col: int


@dataclass(frozen=True)
class ParamInfo:
    name: str
    line: int
    col: int
    bool_default: bool = False
    bool_annotation: bool = False


@dataclass
class FunctionInfo:
    """Shape of one function or method."""
    name: str
    qualname: str
    line: int
    col: int
    is_method: bool
    params: list[ParamInfo]  # excludes self/cls, *args, **kwargs
    body_lines: int
    max_depth: int
    deepest_line: int


@dataclass
class MethodUsage:
    """Instance fields and sibling methods one method touches through self."""
    name: str
    line: int
    fields: set[str] = field(default_factory=set)
    calls: set[str] = field(default_factory=set)


@dataclass
class ClassInfo:
    name: str
    line: int
    col: int
    method_count: int
    fields: set[str]
    instance_methods: list[MethodUsage]

    def cohesion_groups(self) -> list[list[str]]:
        """
        Connected components of instance methods (LCOM4).

        Two methods are connected when they share a field or one uses the
        other through self.
        """
        names = [m.name for m in self.instance_methods]
        by_name = {m.name: m for m in self.instance_methods}
        adjacency: dict[str, set[str]] = {n: set() for n in names}
        for i, a in enumerate(self.instance_methods):
            for b in self.instance_methods[i + 1:]:
                if a.fields & b.fields or b.name in a.calls or a.name in b.calls:
                    adjacency[a.name].add(b.name)
                    adjacency[b.name].add(a.name)

        groups: list[list[str]] = []
        seen: set[str] = set()
        for start in names:
            if start in seen:
                continue
            stack = [start]
            group: list[str] = []
            seen.add(start)
            while stack:
                cur = stack.pop()
                group.append(cur)
                for nxt in adjacency[cur]:
                    if nxt not in seen:
                        seen.add(nxt)
                        stack.append(nxt)
            groups.append(sorted(group, key=lambda n: by_name[n].line))
        return groups


@dataclass
class ModuleIndex:
    """Index of a Python module's structure."""
    functions: list[FunctionInfo] = field(default_factory=list)
    classes: list[ClassInfo] = field(default_factory=list)
    names: list[BoundName] = field(default_factory=list)
    bool_compares: list[Site] = field(default_factory=list)
    magic_numbers: list[Literal] = field(default_factory=list)
    magic_strings: list[Literal] = field(default_factory=list)
    negated_ifs: list[Site] = field(default_factory=list)
    negated_names: list[Site] = field(default_factory=list)
    else_after_exit: list[Site] = field(default_factory=list)
    bool_returns: list[Site] = field(default_factory=list)
    bare_excepts: list[Site] = field(default_factory=list)
    swallowed: list[Site] = field(default_factory=list)
    syntax_error: Optional[Site] = None


# =============================================================================
# Node helpers
# =============================================================================

_NESTING_TYPES: tuple[type, ...] = (
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.With,
    ast.AsyncWith,
    ast.Try,
    ast.TryStar,
    ast.Match,
)

_EXIT_TYPES = (ast.Return, ast.Raise, ast.Continue, ast.Break)

_FUNC_TYPES = (ast.FunctionDef, ast.AsyncFunctionDef)

_CMP_SYMBOLS = {
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Is: "is",
    ast.IsNot: "is not",
}


def _is_bool_const(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and isinstance(node.value, bool)


def _numeric_value(node: ast.AST) -> Optional[int | float]:
    """Value of a (possibly signed) int/float literal, else None."""
    if isinstance(node, ast.Constant):
        v = node.value
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return v
        return None
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.USub, ast.UAdd)):
        inner = _numeric_value(node.operand)
        if inner is None:
            return None
        return -inner if isinstance(node.op, ast.USub) else inner
    return None


def _str_value(node: ast.AST) -> Optional[str]:
    if isinstance(node, ast.Constant) and isinstance(node.value, str) and node.value:
        return node.value
    return None


def _target_names(target: ast.AST) -> Iterator[ast.Name]:
    """Flatten assignment targets to the plain names they bind."""
    if isinstance(target, ast.Name):
        yield target
    elif isinstance(target, (ast.Tuple, ast.List)):
        for elt in target.elts:
            yield from _target_names(elt)
    elif isinstance(target, ast.Starred):
        yield from _target_names(target.value)


def _referenced_name(node: ast.AST) -> Optional[str]:
    """Name a value reads as: x, obj.x, x(), obj.x()."""
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _decorator_names(node: ast.FunctionDef | ast.AsyncFunctionDef) -> set[str]:
    names: set[str] = set()
    for dec in node.decorator_list:
        n = _referenced_name(dec)
        if n:
            names.add(n)
    return names


def _is_docstring(stmt: ast.stmt) -> bool:
    return (
        isinstance(stmt, ast.Expr)
        and isinstance(stmt.value, ast.Constant)
        and isinstance(stmt.value.value, str)
    )


def _is_noop(stmt: ast.stmt) -> bool:
    if isinstance(stmt, ast.Pass):
        return True
    return (
        isinstance(stmt, ast.Expr)
        and isinstance(stmt.value, ast.Constant)
        and stmt.value.value is Ellipsis
    )


def _is_elif(orelse: list[ast.stmt]) -> bool:
    return len(orelse) == 1 and isinstance(orelse[0], ast.If)


def _returned_bool(stmts: list[ast.stmt]) -> Optional[bool]:
    """True/False if stmts is exactly `return True`/`return False`."""
    if len(stmts) != 1:
        return None
    stmt = stmts[0]
    if isinstance(stmt, ast.Return) and stmt.value is not None and _is_bool_const(stmt.value):
        return stmt.value.value
    return None


def _safe_unparse(node: ast.AST) -> str:
    try:
        return ast.unparse(node)
    except (ValueError, TypeError, AttributeError, RecursionError):
        return ""


# =============================================================================
# Function shape
# =============================================================================

def _params(node: ast.FunctionDef | ast.AsyncFunctionDef, is_method: bool) -> list[ParamInfo]:
    a = node.args
    positional = a.posonlyargs + a.args
    pos_defaults: list[Optional[ast.expr]] = [None] * (len(positional) - len(a.defaults))
    pos_defaults += list(a.defaults)
    pairs = list(zip(positional, pos_defaults)) + list(zip(a.kwonlyargs, a.kw_defaults))

    if is_method and positional and "staticmethod" not in _decorator_names(node):
        pairs = pairs[1:]

    params: list[ParamInfo] = []
    for arg, default in pairs:
        ann = arg.annotation
        params.append(ParamInfo(
            name=arg.arg,
            line=arg.lineno,
            col=arg.col_offset,
            bool_default=default is not None and _is_bool_const(default),
            bool_annotation=(
                (isinstance(ann, ast.Name) and ann.id == "bool")
                or (isinstance(ann, ast.Constant) and ann.value == "bool")
            ),
        ))
    return params


def _body_line_count(node: ast.FunctionDef | ast.AsyncFunctionDef, lines: list[str]) -> int:
    """Code lines in the body: no docstring, blank or comment-only lines."""
    body = node.body
    if body and _is_docstring(body[0]):
        body = body[1:]
    if not body:
        return 0
    start = body[0].lineno
    end = node.end_lineno or body[-1].lineno
    count = 0
    for text in lines[start - 1:end]:
        stripped = text.strip()
        if stripped and not stripped.startswith("#"):
            count += 1
    return count


def _child_blocks(stmt: ast.stmt, level: int) -> Iterator[tuple[list[ast.stmt], int]]:
    """Statement blocks directly owned by a nesting statement, with their depth."""
    if isinstance(stmt, ast.If):
        yield stmt.body, level
        if _is_elif(stmt.orelse):
            # elif sits at the same depth as its if
            yield stmt.orelse, level - 1
        else:
            yield stmt.orelse, level
    elif isinstance(stmt, (ast.For, ast.AsyncFor, ast.While)):
        yield stmt.body, level
        yield stmt.orelse, level
    elif isinstance(stmt, (ast.With, ast.AsyncWith)):
        yield stmt.body, level
    elif isinstance(stmt, (ast.Try, ast.TryStar)):
        yield stmt.body, level
        for handler in stmt.handlers:
            yield handler.body, level
        yield stmt.orelse, level
        yield stmt.finalbody, level
    elif isinstance(stmt, ast.Match):
        for case in stmt.cases:
            yield case.body, level


def nesting_depth(stmts: list[ast.stmt], depth: int = 0) -> tuple[int, int]:
    """
    Deepest control-flow nesting within stmts.

    Returns (max_depth, line_of_deepest_statement). Nested function and
    class bodies are not descended into.
    """
    best_depth, best_line = depth, 0
    for stmt in stmts:
        if not isinstance(stmt, _NESTING_TYPES):
            continue
        if depth + 1 > best_depth:
            best_depth, best_line = depth + 1, stmt.lineno
        for block, block_depth in _child_blocks(stmt, depth + 1):
            d, ln = nesting_depth(block, block_depth)
            if d > best_depth:
                best_depth, best_line = d, ln
    return best_depth, best_line


# =============================================================================
# Class shape
# =============================================================================

def _self_attrs(node: ast.AST, self_name: str) -> Iterator[ast.Attribute]:
    for sub in ast.walk(node):
        if (
            isinstance(sub, ast.Attribute)
            and isinstance(sub.value, ast.Name)
            and sub.value.id == self_name
        ):
            yield sub


def _class_info(node: ast.ClassDef) -> ClassInfo:
    methods = [n for n in node.body if isinstance(n, _FUNC_TYPES)]
    method_names = {m.name for m in methods}

    # Fields: class-level assignments plus self.x = ... anywhere in the class
    fields: set[str] = set()
    for stmt in node.body:
        if isinstance(stmt, ast.Assign):
            for t in stmt.targets:
                fields.update(n.id for n in _target_names(t))
        elif isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            fields.add(stmt.target.id)

    usages: list[MethodUsage] = []
    for m in methods:
        positional = m.args.posonlyargs + m.args.args
        if not positional:
            continue
        self_name = positional[0].arg
        for attr in _self_attrs(m, self_name):
            if isinstance(attr.ctx, ast.Store) and attr.attr not in method_names:
                fields.add(attr.attr)

    for m in methods:
        decorators = _decorator_names(m)
        if m.name.startswith("__") and m.name.endswith("__"):
            continue
        if decorators & {"staticmethod", "classmethod"}:
            continue
        positional = m.args.posonlyargs + m.args.args
        if not positional:
            continue
        usage = MethodUsage(name=m.name, line=m.lineno)
        for attr in _self_attrs(m, positional[0].arg):
            if attr.attr in method_names and attr.attr != m.name:
                usage.calls.add(attr.attr)
            elif attr.attr in fields:
                usage.fields.add(attr.attr)
        usages.append(usage)

    return ClassInfo(
        name=node.name,
        line=node.lineno,
        col=node.col_offset,
        method_count=len(methods),
        fields=fields,
        instance_methods=usages,
    )


# =============================================================================
# Collector
# =============================================================================

class _Collector(ast.NodeVisitor):
    """AST visitor collecting rule candidate sites."""

    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.index = ModuleIndex()
        self._scopes: list[tuple[str, str]] = []  # (kind, name)
        self._const_depth = 0

    # -- scope bookkeeping ----------------------------------------------------

    @property
    def _qualname(self) -> str:
        return ".".join(name for _, name in self._scopes) or "<module>"

    def _bind(self, name: str, kind: str, line: int, col: int) -> None:
        self.index.names.append(BoundName(
            name=name, kind=kind, scope=self._qualname, line=line, col=col,
        ))

    # -- definitions ----------------------------------------------------------

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self._bind(node.name, "class", node.lineno, node.col_offset)
        self.index.classes.append(_class_info(node))
        self._scopes.append(("class", node.name))
        self.generic_visit(node)
        self._scopes.pop()

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        is_method = bool(self._scopes) and self._scopes[-1][0] == "class"
        self._bind(node.name, "function", node.lineno, node.col_offset)
        params = _params(node, is_method)
        depth, deepest = nesting_depth(node.body)

        self._scopes.append(("function", node.name))
        self.index.functions.append(FunctionInfo(
            name=node.name,
            qualname=self._qualname,
            line=node.lineno,
            col=node.col_offset,
            is_method=is_method,
            params=params,
            body_lines=_body_line_count(node, self.lines),
            max_depth=depth,
            deepest_line=deepest,
        ))
        for p in params:
            self._bind(p.name, "param", p.line, p.col)
        self.generic_visit(node)
        self._scopes.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node)

    # -- bindings -------------------------------------------------------------

    def _visit_assignment(self, node: ast.Assign | ast.AnnAssign, targets: list[ast.expr]) -> None:
        names = [n for t in targets for n in _target_names(t)]
        for n in names:
            self._bind(n.id, "var", n.lineno, n.col_offset)
        is_constant = bool(names) and len(names) == len(targets) and all(
            CONSTANT_NAME_RX.match(n.id) for n in names
        )
        if is_constant:
            self._const_depth += 1
        self.generic_visit(node)
        if is_constant:
            self._const_depth -= 1

    def visit_Assign(self, node: ast.Assign) -> None:
        self._visit_assignment(node, node.targets)

    def visit_AnnAssign(self, node: ast.AnnAssign) -> None:
        self._visit_assignment(node, [node.target])

    def visit_NamedExpr(self, node: ast.NamedExpr) -> None:
        self._bind(node.target.id, "var", node.target.lineno, node.target.col_offset)
        self.generic_visit(node)

    def _visit_loop(self, node: ast.For | ast.AsyncFor) -> None:
        for n in _target_names(node.target):
            self._bind(n.id, "loop", n.lineno, n.col_offset)
        self.generic_visit(node)

    def visit_For(self, node: ast.For) -> None:
        self._visit_loop(node)

    def visit_AsyncFor(self, node: ast.AsyncFor) -> None:
        self._visit_loop(node)

    def _visit_with(self, node: ast.With | ast.AsyncWith) -> None:
        for item in node.items:
            if item.optional_vars is not None:
                for n in _target_names(item.optional_vars):
                    self._bind(n.id, "with", n.lineno, n.col_offset)
        self.generic_visit(node)

    def visit_With(self, node: ast.With) -> None:
        self._visit_with(node)

    def visit_AsyncWith(self, node: ast.AsyncWith) -> None:
        self._visit_with(node)

    # -- conditionals ---------------------------------------------------------

    def visit_If(self, node: ast.If) -> None:
        has_else = bool(node.orelse) and not _is_elif(node.orelse)

        if has_else and isinstance(node.test, ast.UnaryOp) and isinstance(node.test.op, ast.Not):
            self.index.negated_ifs.append(Site(
                node.lineno, node.col_offset, _safe_unparse(node.test),
            ))

        if has_else and node.body and isinstance(node.body[-1], _EXIT_TYPES):
            exit_kw = type(node.body[-1]).__name__.lower()
            self.index.else_after_exit.append(Site(node.lineno, node.col_offset, exit_kw))

        self.generic_visit(node)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> None:
        if isinstance(node.op, ast.Not):
            name = _referenced_name(node.operand)
            if name and name.lower().startswith(NEGATIVE_NAME_PREFIXES):
                self.index.negated_names.append(Site(node.lineno, node.col_offset, name))
        self.generic_visit(node)

    def visit_Compare(self, node: ast.Compare) -> None:
        operands = [node.left] + list(node.comparators)
        for i, op in enumerate(node.ops):
            left, right = operands[i], operands[i + 1]

            symbol = _CMP_SYMBOLS.get(type(op))
            if symbol is not None:
                for side in (left, right):
                    if _is_bool_const(side):
                        self.index.bool_compares.append(Site(
                            node.lineno, node.col_offset, f"{symbol} {side.value}",
                        ))

            if isinstance(op, (ast.Eq, ast.NotEq, ast.In, ast.NotIn)):
                self._record_strings(left, right, op)

        for operand in operands:
            self._record_number(operand)
        self.generic_visit(node)

    def _record_strings(self, left: ast.expr, right: ast.expr, op: ast.cmpop) -> None:
        if self._const_depth:
            return
        names = {_referenced_name(left), _referenced_name(right)}
        if names & MAGIC_STRING_EXEMPT_NAMES:
            return
        candidates: list[ast.expr] = [left, right]
        if isinstance(op, (ast.In, ast.NotIn)) and isinstance(right, (ast.Tuple, ast.List, ast.Set)):
            candidates = [left] + list(right.elts)
        for c in candidates:
            value = _str_value(c)
            if value is not None:
                self.index.magic_strings.append(Literal(value, c.lineno, c.col_offset))

    # -- numbers --------------------------------------------------------------

    def _record_number(self, node: ast.expr) -> None:
        if self._const_depth:
            return
        value = _numeric_value(node)
        if value is not None:
            self.index.magic_numbers.append(Literal(value, node.lineno, node.col_offset))

    def visit_BinOp(self, node: ast.BinOp) -> None:
        self._record_number(node.left)
        self._record_number(node.right)
        self.generic_visit(node)

    def visit_AugAssign(self, node: ast.AugAssign) -> None:
        target = node.target
        is_constant = isinstance(target, ast.Name) and bool(CONSTANT_NAME_RX.match(target.id))
        if is_constant:
            self._const_depth += 1
        self._record_number(node.value)
        self.generic_visit(node)
        if is_constant:
            self._const_depth -= 1

    # -- exceptions -----------------------------------------------------------

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.type is None:
            self.index.bare_excepts.append(Site(node.lineno, node.col_offset))
        if node.body and all(_is_noop(s) for s in node.body):
            caught = _safe_unparse(node.type) if node.type is not None else "everything"
            self.index.swallowed.append(Site(node.lineno, node.col_offset, caught))
        if node.name:
            self._bind(node.name, "except", node.lineno, node.col_offset)
        self.generic_visit(node)


def _bool_return_sites(tree: ast.AST) -> list[Site]:
    """
    `if c: return True else: return False`, or the same with the else
    replaced by the statement that follows the if.
    """
    sites: list[Site] = []
    for node in ast.walk(tree):
        for attr in ("body", "orelse", "finalbody"):
            stmts = getattr(node, attr, None)
            if not isinstance(stmts, list):
                continue
            for i, stmt in enumerate(stmts):
                if not isinstance(stmt, ast.If):
                    continue
                first = _returned_bool(stmt.body)
                if first is None:
                    continue
                if stmt.orelse:
                    second = _returned_bool(stmt.orelse)
                elif i + 1 < len(stmts):
                    second = _returned_bool([stmts[i + 1]])
                else:
                    second = None
                if second is not None and second is not first:
                    sites.append(Site(stmt.lineno, stmt.col_offset, _safe_unparse(stmt.test)))
    return sites


def build_index(src: SourceFile) -> ModuleIndex:
    """Build a ModuleIndex from a Python source file."""
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", SyntaxWarning)
            tree = ast.parse(src.text, filename=str(src.path))
    except SyntaxError as e:
        return ModuleIndex(syntax_error=Site(e.lineno or 1, e.offset or 0, e.msg or "invalid syntax"))
    except (ValueError, RecursionError, MemoryError) as e:
        # Null bytes, or nesting beyond what the parser can hold
        return ModuleIndex(syntax_error=Site(1, 0, str(e) or type(e).__name__))

    collector = _Collector(src.lines)
    try:
        collector.visit(tree)
    except RecursionError:
        logger.warning("%s is too deeply nested to analyse", src.path)
        return ModuleIndex(syntax_error=Site(1, 0, TOO_DEEP_DETAIL))
    index = collector.index
    index.bool_returns = _bool_return_sites(tree)
    return index


# =============================================================================
# Guide documents
# =============================================================================

@dataclass(frozen=True)
class DocExample:
    """A fenced code example in a guide document."""
    label: Optional[str]  # "bad", "good" or None
    line: int


@dataclass
class DocSection:
    title: str
    line: int
    examples: list[DocExample] = field(default_factory=list)


@dataclass
class DocIndex:
    sections: list[DocSection]

    @property
    def has_markers(self) -> bool:
        return any(ex.label for s in self.sections for ex in s.examples)


def build_doc_index(src: SourceFile) -> DocIndex:
    """Split a markdown document into sections and label its code examples."""
    sections = [DocSection(title="", line=1)]
    pending: Optional[str] = None
    fence: Optional[str] = None
    fence_line = 0
    fence_label: Optional[str] = None
    first_in_fence = False

    for i, line in enumerate(src.lines, start=1):
        if fence is not None:
            if line.strip().startswith(fence):
                sections[-1].examples.append(DocExample(label=fence_label, line=fence_line))
                fence = None
                pending = None
                continue
            if first_in_fence:
                first_in_fence = False
                m = DOC_FENCE_MARKER_RX.match(line)
                if m:
                    fence_label = m.group(1).lower()
            continue

        m = DOC_FENCE_RX.match(line)
        if m:
            fence = m.group(1)
            fence_line = i
            fence_label = pending
            first_in_fence = True
            continue

        h = DOC_HEADING_RX.match(line)
        if h:
            marker = DOC_MARKER_RX.match(h.group(2))
            if marker:
                pending = marker.group(1).lower()
            else:
                sections.append(DocSection(title=h.group(2), line=i))
                pending = None
            continue

        marker = DOC_MARKER_RX.match(line)
        if marker:
            pending = marker.group(1).lower()

    if fence is not None:
        # Unterminated fence runs to end of file
        sections[-1].examples.append(DocExample(label=fence_label, line=fence_line))

    return DocIndex(sections=sections)
