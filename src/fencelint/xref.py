"""Cross-reference checking for the Python snippets of one document.

All Python blocks of a document are treated as one flat namespace: a name
used in any block must be bound in some block of the same document (in any
order), be a builtin, or be on the allow-list. Scoping inside a block is
ignored.
"""

import ast
import builtins
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .core.model import (
    DUPLICATE_SYMBOL,
    UNDEFINED_REFERENCE,
    Block,
    Document,
    Finding,
    Severity,
)
from .validators.python import PYCON_TAGS, PYTHON_TAGS, Segment, parse_segments

logger = logging.getLogger(__name__)

PYTHON_FAMILY = frozenset(PYTHON_TAGS + PYCON_TAGS)
NOLINT = "nolint"

MODULE_GLOBALS = frozenset(
    {
        "__name__",
        "__file__",
        "__doc__",
        "__package__",
        "__spec__",
        "__loader__",
        "__builtins__",
        "__path__",
        "__annotations__",
        "_",  # last value in the interactive interpreter
    }
)
BUILTIN_NAMES = frozenset(dir(builtins)) | MODULE_GLOBALS

_NAMED_BINDERS = tuple(
    getattr(ast, n)
    for n in (
        "FunctionDef",
        "AsyncFunctionDef",
        "ClassDef",
        "MatchAs",
        "MatchStar",
        "TypeVar",
        "ParamSpec",
        "TypeVarTuple",
    )
    if hasattr(ast, n)
)
_DECLARATIONS = (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)


@dataclass
class BlockSymbols:
    block: Block
    bindings: set[str] = field(default_factory=set)
    uses: list[tuple[int, int, str]] = field(default_factory=list)  # (line, column, name)
    declarations: list[tuple[str, int]] = field(default_factory=list)  # (name, line)
    star_import: bool = False


def _bound_names(node: ast.AST) -> Iterator[str]:
    if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store):
        yield node.id
    elif isinstance(node, _NAMED_BINDERS):
        if node.name:
            yield node.name
    elif isinstance(node, ast.arg):
        yield node.arg
    elif isinstance(node, ast.alias):
        if node.name != "*":
            yield node.asname or node.name.partition(".")[0]
    elif isinstance(node, ast.ExceptHandler):
        if node.name:
            yield node.name
    elif isinstance(node, (ast.Global, ast.Nonlocal)):
        yield from node.names
    elif isinstance(node, ast.MatchMapping):
        if node.rest:
            yield node.rest


def _is_overload(node: ast.AST) -> bool:
    for deco in getattr(node, "decorator_list", []):
        if isinstance(deco, ast.Name) and deco.id == "overload":
            return True
        if isinstance(deco, ast.Attribute) and deco.attr == "overload":
            return True
    return False


def scan_block(block: Block, segments: list[tuple[Segment, ast.Module]]) -> BlockSymbols:
    """Collect the names a parsed block binds, uses and declares."""
    symbols = BlockSymbols(block)

    def line_of(segment: Segment, lineno: int) -> int:
        return block.start_line + segment.content_line(lineno)

    for segment, tree in segments:
        for node in ast.walk(tree):
            symbols.bindings.update(_bound_names(node))
            if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load):
                symbols.uses.append(
                    (
                        line_of(segment, node.lineno),
                        node.col_offset + 1 + segment.col_offset,
                        node.id,
                    )
                )
            elif isinstance(node, ast.ImportFrom) and any(a.name == "*" for a in node.names):
                symbols.star_import = True

        for stmt in tree.body:
            if isinstance(stmt, _DECLARATIONS) and not _is_overload(stmt):
                symbols.declarations.append((stmt.name, line_of(segment, stmt.lineno)))

    return symbols


class CrossReferenceChecker:
    id = "xref"

    def __init__(self, allow: Iterable[str] = ()):
        self.allow = BUILTIN_NAMES | frozenset(allow)

    def scan(self, document: Document) -> list[BlockSymbols]:
        """Symbols of every Python block that parses, in document order."""
        out = []
        for block in document.blocks:
            if block.language not in PYTHON_FAMILY or block.has_attr(NOLINT):
                continue
            segments = parse_segments(block.language, block.content)
            if segments is None:
                # reported by the syntax check
                continue
            out.append(scan_block(block, segments))
        return out

    def symbol_table(self, scanned: list[BlockSymbols]) -> dict[str, Block]:
        """Map each bound name to the first block binding it."""
        table: dict[str, Block] = {}
        for symbols in scanned:
            for name in sorted(symbols.bindings):
                table.setdefault(name, symbols.block)
        return table

    def check(self, document: Document) -> list[Finding]:
        scanned = self.scan(document)
        if not scanned:
            return []

        findings: list[Finding] = []
        table = self.symbol_table(scanned)

        declared: dict[str, int] = {}
        for symbols in scanned:
            for name, line in symbols.declarations:
                if name in declared:
                    findings.append(
                        Finding(
                            Severity.WARNING,
                            DUPLICATE_SYMBOL,
                            f"'{name}' is already declared at line {declared[name]}",
                            document.path,
                            line,
                            block=symbols.block,
                        )
                    )
                else:
                    declared[name] = line

        if any(s.star_import for s in scanned):
            logger.info(
                "%s: star import present, not checking for undefined names",
                document.path,
            )
            return findings

        allow = self.allow | document.options.allow
        for symbols in scanned:
            reported: set[str] = set()
            for line, column, name in sorted(symbols.uses):
                if name in table or name in allow or name in reported:
                    continue
                reported.add(name)
                findings.append(
                    Finding(
                        Severity.ERROR,
                        UNDEFINED_REFERENCE,
                        f"name '{name}' is not defined in this document",
                        document.path,
                        line,
                        column,
                        symbols.block,
                    )
                )
        return findings
