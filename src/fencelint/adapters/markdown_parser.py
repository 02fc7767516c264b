import re
from dataclasses import dataclass
from pathlib import Path

from ..core.model import MALFORMED_BLOCK, Block, Finding, Severity
from ..core.ports import ParserStrategy
from ..core.utils import split_info, split_lines

# Up to three spaces of indentation, then a run of ``` or ~~~, then the info string
FENCE_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")


@dataclass
class _OpenFence:
    indent: int
    char: str
    length: int
    info: str
    line: int

    @property
    def marker(self) -> str:
        return self.char * self.length


def _is_opener(fence: str, rest: str) -> bool:
    # A backtick info string may not itself contain backticks (inline code)
    return not (fence[0] == "`" and "`" in rest)


def _closes(fence: _OpenFence, m: re.Match) -> bool:
    return (
        m.group(2)[0] == fence.char
        and len(m.group(2)) >= fence.length
        and not m.group(3).strip()
    )


def _strip_indent(line: str, indent: int) -> str:
    n = 0
    while n < indent and n < len(line) and line[n] == " ":
        n += 1
    return line[n:]


class MarkdownParser(ParserStrategy):
    """Extract fenced code blocks from Markdown text.

    Fences follow the CommonMark rules for opening and closing. A line that
    looks like a new opener (same fence character, at least as long, with an
    info string) while a fence is still open cannot legally close it; we take
    that as a sign the previous fence was left unterminated, report it, and
    restart from the new opener. The outer fence's own closer is expected
    later: the first bare fence line that could close it is swallowed
    instead of opening a new block.
    """

    def parse(
        self, text: str, path: Path, first_line: int = 1
    ) -> tuple[list[Block], list[Finding]]:
        blocks: list[Block] = []
        findings: list[Finding] = []

        current: _OpenFence | None = None
        content: list[str] = []
        # outer fence already reported as broken, still waiting for its closer
        broken: _OpenFence | None = None

        for i, ln in enumerate(split_lines(text)):
            lineno = first_line + i
            m = FENCE_RE.match(ln)

            if current is None:
                if m and _is_opener(m.group(2), m.group(3)):
                    if broken is not None and _closes(broken, m):
                        broken = None
                        continue
                    current = _OpenFence(
                        indent=len(m.group(1)),
                        char=m.group(2)[0],
                        length=len(m.group(2)),
                        info=m.group(3).strip(),
                        line=lineno,
                    )
                    content = []
                continue

            if m and m.group(2)[0] == current.char and len(m.group(2)) >= current.length:
                rest = m.group(3)
                if not rest.strip():
                    blocks.append(self._block(path, current, content, lineno))
                    current = None
                    continue
                if _is_opener(m.group(2), rest):
                    findings.append(
                        Finding(
                            Severity.ERROR,
                            MALFORMED_BLOCK,
                            f"code fence opened with {current.marker} is not closed "
                            f"before the next fence at line {lineno}",
                            path,
                            current.line,
                        )
                    )
                    if broken is None:
                        broken = current
                    current = _OpenFence(
                        indent=len(m.group(1)),
                        char=m.group(2)[0],
                        length=len(m.group(2)),
                        info=rest.strip(),
                        line=lineno,
                    )
                    content = []
                    continue

            content.append(_strip_indent(ln, current.indent))

        if current is not None:
            findings.append(
                Finding(
                    Severity.ERROR,
                    MALFORMED_BLOCK,
                    f"unterminated code fence opened with {current.marker}",
                    path,
                    current.line,
                )
            )

        return blocks, findings

    def _block(
        self, path: Path, fence: _OpenFence, content: list[str], end_line: int
    ) -> Block:
        language, attrs = split_info(fence.info)
        return Block(
            path=path,
            language=language,
            info=fence.info,
            content="".join(f"{c}\n" for c in content),
            start_line=fence.line,
            end_line=end_line,
            attrs=attrs,
        )
