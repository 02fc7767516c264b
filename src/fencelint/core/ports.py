from typing import Any, Iterable, Protocol
from pathlib import Path

from .model import Block, Document, Finding


class StorageStrategy(Protocol):
    """
    Resolves the paths given on the command line into document files and
    reads them. Fatal problems raise InputError.
    """

    def collect(self, paths: Iterable[Path]) -> list[Path]:
        pass

    def read_text(self, path: Path) -> str:
        pass


class FrontmatterCodec(Protocol):
    """
    Split optional frontmatter off a document. Returns the decoded mapping,
    the remaining body and the 1-based line the body starts on.
    """

    def split(self, text: str) -> tuple[str | None, str, int]:
        pass

    def decode(self, text: str) -> tuple[dict[str, Any], str, int]:
        pass


class ParserStrategy(Protocol):
    """
    Extract fenced code blocks in source order. Malformed fences become
    findings; extraction never stops early.
    """

    def parse(
        self, text: str, path: Path, first_line: int = 1
    ) -> tuple[list[Block], list[Finding]]:
        pass


class LintRule(Protocol):
    id: str

    def check(self, document: Document) -> list[Finding]:
        pass
