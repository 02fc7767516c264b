"""Tests for fenced block extraction."""

from pathlib import Path

from fencelint.adapters.markdown_parser import MarkdownParser
from fencelint.core.model import MALFORMED_BLOCK

DOC = Path("doc.md")


def parse(text: str, first_line: int = 1):
    return MarkdownParser().parse(text, DOC, first_line)


def test_extract_blocks_in_order():
    """Test that blocks come back in source order with line numbers."""
    text = """# Title

```python
x = 1
```

Some prose.

~~~yaml
a: 1
~~~
"""
    blocks, findings = parse(text)

    assert findings == []
    assert [b.language for b in blocks] == ["python", "yaml"]
    assert blocks[0].content == "x = 1\n"
    assert (blocks[0].start_line, blocks[0].end_line) == (3, 5)
    assert blocks[1].content == "a: 1\n"
    assert (blocks[1].start_line, blocks[1].end_line) == (9, 11)
    assert all(b.path == DOC for b in blocks)


def test_n_fences_yield_n_blocks():
    """Test that well-formed Markdown with N fences yields exactly N blocks."""
    parts = []
    for i in range(7):
        parts.append(f"Paragraph {i}.\n\n```text\nblock {i}\n```\n")
    blocks, findings = parse("\n".join(parts))

    assert findings == []
    assert len(blocks) == 7
    assert [b.content for b in blocks] == [f"block {i}\n" for i in range(7)]
    starts = [b.start_line for b in blocks]
    assert starts == sorted(starts)


def test_unterminated_fence_at_end():
    """Test that a fence open at EOF is one MalformedBlock and no block."""
    blocks, findings = parse("Intro\n\n```python\nx = 1\n")

    assert blocks == []
    assert len(findings) == 1
    assert findings[0].kind == MALFORMED_BLOCK
    assert findings[0].line == 3
    assert "unterminated" in findings[0].message


def test_unterminated_fence_resumes_at_next_fence():
    """Test that extraction resumes at the next valid fence."""
    text = """```python
def f(:

```json
{"a": 1}
```

```yaml
b: 2
```
"""
    blocks, findings = parse(text)

    assert len(findings) == 1
    assert findings[0].kind == MALFORMED_BLOCK
    assert findings[0].line == 1
    assert "line 4" in findings[0].message
    assert [b.language for b in blocks] == ["json", "yaml"]
    assert blocks[0].start_line == 4
    assert blocks[0].content == '{"a": 1}\n'
    assert blocks[1].start_line == 8


def test_longer_outer_fence_allows_inner_fences():
    """Test that a shorter inner fence is content, not nesting."""
    text = """````markdown
```python
x
```
````
"""
    blocks, findings = parse(text)

    assert findings == []
    assert len(blocks) == 1
    assert blocks[0].language == "markdown"
    assert blocks[0].content == "```python\nx\n```\n"
    assert blocks[0].end_line == 5


def test_tilde_inside_backticks_is_content():
    """Test that a different fence character does not close or nest."""
    text = "```\n~~~python\nx\n~~~\n```\n"
    blocks, findings = parse(text)

    assert findings == []
    assert len(blocks) == 1
    assert blocks[0].content == "~~~python\nx\n~~~\n"


def test_inline_code_is_not_a_fence():
    """Test that ```code``` on one line opens nothing."""
    blocks, findings = parse("Use ```x``` here.\n```inline```\n")

    assert blocks == []
    assert findings == []


def test_longer_closing_fence():
    """Test that a closer may be longer than the opener."""
    blocks, findings = parse("```\nx\n`````\n")

    assert findings == []
    assert len(blocks) == 1
    assert blocks[0].end_line == 3


def test_indented_fence_strips_indentation():
    """Test that content loses the opener's indentation."""
    text = "1. Step one\n\n   ```python\n   x = 1\n     y = 2\n   ```\n"
    blocks, findings = parse(text)

    assert findings == []
    assert blocks[0].content == "x = 1\n  y = 2\n"


def test_info_string_language_and_attrs():
    """Test language normalization and attributes."""
    blocks, _ = parse("```Python nolint title=x\npass\n```\n")

    assert blocks[0].language == "python"
    assert blocks[0].info == "Python nolint title=x"
    assert blocks[0].has_attr("nolint")


def test_empty_info_string():
    """Test that a bare fence has an empty language."""
    blocks, _ = parse("```\nplain\n```\n")

    assert blocks[0].language == ""
    assert blocks[0].attrs == ()


def test_first_line_offset():
    """Test that line numbers start from the given first line."""
    blocks, findings = parse("```python\nx = 1\n```\n\n```json\n", first_line=5)

    assert blocks[0].start_line == 5
    assert blocks[0].end_line == 7
    assert findings[0].line == 9


def test_empty_block():
    """Test that an empty block has empty content."""
    blocks, _ = parse("```json\n```\n")

    assert blocks[0].content == ""
    assert (blocks[0].start_line, blocks[0].end_line) == (1, 2)


def test_nested_opener_reports_once():
    """Test that a wrapped example's outer closer does not open a new fence."""
    blocks, findings = parse("```markdown\n```python\nx = 1\n```\n```\n")

    assert len(findings) == 1
    assert findings[0].kind == MALFORMED_BLOCK
    assert findings[0].line == 1
    assert "line 2" in findings[0].message
    assert [b.language for b in blocks] == ["python"]
    assert blocks[0].content == "x = 1\n"


def test_nested_opener_with_several_inner_blocks():
    """Test that the outer closer is found after more than one inner block."""
    text = """```markdown
```python
x = 1
```

```bash
ls
```
```

```json
{}
```
"""
    blocks, findings = parse(text)

    assert [f.line for f in findings] == [1]
    assert [b.language for b in blocks] == ["python", "bash", "json"]
    assert blocks[2].start_line == 11


def test_only_newline_breaks_lines():
    """Test that U+2028 inside a line neither splits it nor shifts lines."""
    text = '```python\ns = "a\u2028b"\n```\n\n```json\n{}\n```\n'
    blocks, findings = parse(text)

    assert findings == []
    assert blocks[0].content == 's = "a\u2028b"\n'
    assert (blocks[0].start_line, blocks[0].end_line) == (1, 3)
    assert blocks[1].start_line == 5


def test_crlf_line_endings():
    """Test that carriage returns are not part of the info string or content."""
    blocks, findings = parse("```python\r\nx = 1\r\n```\r\n")

    assert findings == []
    assert blocks[0].language == "python"
    assert blocks[0].content == "x = 1\n"
