"""Python and Python console (doctest) snippets."""

import ast
import textwrap
import warnings
from dataclasses import dataclass

from ..core.utils import split_lines
from .base import SyntaxProblem, Validator

PYTHON_TAGS = ("python", "py", "python3", "py3")
PYCON_TAGS = ("pycon", "doctest")

PS1 = ">>>"
PS2 = "..."


@dataclass(frozen=True)
class Segment:
    """A piece of parseable source plus where its lines came from."""
    source: str
    lines: tuple[int, ...]  # content line (1-based) of each source line
    col_offset: int = 0  # characters stripped from the left of each line

    def content_line(self, lineno: int | None) -> int:
        if not self.lines:
            return 1
        if lineno is None or lineno < 1:
            return self.lines[0]
        return self.lines[min(lineno, len(self.lines)) - 1]


def _margin(text: str) -> int:
    widths = [len(ln) - len(ln.lstrip(" \t")) for ln in split_lines(text) if ln.strip(" \t")]
    return min(widths) if widths else 0


def _script_segments(content: str) -> list[Segment]:
    n = len(split_lines(content))
    return [
        Segment(
            source=textwrap.dedent(content),
            lines=tuple(range(1, n + 1)),
            col_offset=_margin(content),
        )
    ]


def _console_segments(content: str) -> list[Segment]:
    """Split a console transcript into one segment per `>>>` statement."""
    segments: list[Segment] = []
    source: list[str] = []
    lines: list[int] = []
    width = 0

    def flush() -> None:
        if source:
            segments.append(Segment("\n".join(source) + "\n", tuple(lines), width))
        source.clear()
        lines.clear()

    for i, raw in enumerate(split_lines(content), start=1):
        stripped = raw.lstrip(" \t")
        indent = len(raw) - len(stripped)
        if stripped == PS1 or stripped.startswith(PS1 + " "):
            flush()
            width = indent + len(PS1) + 1
            source.append(stripped[len(PS1) + 1:])
            lines.append(i)
        elif source and (stripped == PS2 or stripped.startswith(PS2 + " ")):
            source.append(stripped[len(PS2) + 1:])
            lines.append(i)
        else:
            # expected output ends the statement
            flush()
    flush()
    return segments


def python_segments(language: str, content: str) -> list[Segment]:
    if language in PYCON_TAGS:
        return _console_segments(content)
    return _script_segments(content)


def _parse(source: str) -> ast.Module:
    with warnings.catch_warnings():
        # invalid escape sequences and the like are not our concern
        warnings.simplefilter("ignore", SyntaxWarning)
        warnings.simplefilter("ignore", DeprecationWarning)
        return ast.parse(source)


def _problem(segment: Segment, e: Exception) -> SyntaxProblem:
    if isinstance(e, SyntaxError):
        column = e.offset + segment.col_offset if e.offset else None
        return SyntaxProblem(e.msg, segment.content_line(e.lineno), column)
    return SyntaxProblem(str(e), segment.content_line(None))


def parse_segments(language: str, content: str) -> list[tuple[Segment, ast.Module]] | None:
    """Parse every segment of a snippet; None if any of them fails."""
    out = []
    for segment in python_segments(language, content):
        try:
            out.append((segment, _parse(segment.source)))
        except (SyntaxError, ValueError):
            return None
    return out


class PythonValidator(Validator):
    name = "python"
    tags = PYTHON_TAGS

    def check(self, content: str) -> SyntaxProblem | None:
        for segment in python_segments(self.tags[0], content):
            try:
                _parse(segment.source)
            except (SyntaxError, ValueError) as e:
                return _problem(segment, e)
        return None


class PyconValidator(PythonValidator):
    name = "pycon"
    tags = PYCON_TAGS
