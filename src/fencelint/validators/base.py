from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class SyntaxProblem:
    message: str
    line: int  # 1-based, relative to the block content
    column: int | None = None


class Validator(Protocol):
    """
    Lightweight parse of one language. `check` returns the first problem
    found, or None when the source parses.
    """

    name: str
    tags: tuple[str, ...]

    def check(self, content: str) -> SyntaxProblem | None:
        pass
