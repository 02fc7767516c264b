from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any


class Severity(IntEnum):
    INFO = 0
    WARNING = 1
    ERROR = 2

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: str) -> "Severity":
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown severity: {value!r}") from None


# Finding kinds
MALFORMED_BLOCK = "MalformedBlock"
SYNTAX_ERROR = "SyntaxError"
UNDEFINED_REFERENCE = "UndefinedReference"
DUPLICATE_SYMBOL = "DuplicateSymbol"
MALFORMED_FRONTMATTER = "MalformedFrontmatter"
MISSING_LANGUAGE = "MissingLanguage"


@dataclass(frozen=True)
class Block:
    path: Path
    language: str  # lower-cased first word of the info string, "" if none
    info: str
    content: str
    start_line: int  # line of the opening fence (1-based)
    end_line: int  # line of the closing fence
    attrs: tuple[str, ...] = ()

    @property
    def first_content_line(self) -> int:
        return self.start_line + 1

    def has_attr(self, name: str) -> bool:
        return name in self.attrs


@dataclass(frozen=True)
class Finding:
    severity: Severity
    kind: str
    message: str
    path: Path
    line: int
    column: int | None = None
    block: Block | None = field(default=None, compare=False, repr=False)

    def sort_key(self) -> tuple:
        return (
            str(self.path),
            self.line,
            self.column if self.column is not None else 0,
            self.kind,
            self.message,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "line": self.line,
            "column": self.column,
            "severity": self.severity.label,
            "kind": self.kind,
            "message": self.message,
            "block_start": self.block.start_line if self.block else None,
        }


@dataclass(frozen=True)
class DocumentOptions:
    """Per-document options lifted from the `fencelint:` frontmatter key."""
    skip: bool = False
    allow: frozenset[str] = frozenset()


@dataclass(frozen=True)
class Document:
    path: Path
    blocks: tuple[Block, ...] = ()
    findings: tuple[Finding, ...] = ()  # produced while loading
    options: DocumentOptions = field(default_factory=DocumentOptions)
