"""Tests for frontmatter splitting and per-document options."""

import tempfile
from pathlib import Path

import pytest

from fencelint.adapters.fs_storage import FsStorage
from fencelint.adapters.markdown_parser import MarkdownParser
from fencelint.adapters.yaml_codec import YamlFrontmatter
from fencelint.core.corpus import Corpus
from fencelint.core.model import MALFORMED_FRONTMATTER
from fencelint.errors import FrontmatterError


def test_decode_without_frontmatter():
    """Test that text without frontmatter is returned untouched."""
    meta, body, first_line = YamlFrontmatter().decode("# Title\n")

    assert meta == {}
    assert body == "# Title\n"
    assert first_line == 1


def test_decode_frontmatter():
    """Test that the body starts after the closing delimiter."""
    text = "---\ntitle: Testing\ntags: [a, b]\n---\n# Title\n"
    meta, body, first_line = YamlFrontmatter().decode(text)

    assert meta == {"title": "Testing", "tags": ["a", "b"]}
    assert body == "# Title\n"
    assert first_line == 5


def test_decode_empty_frontmatter():
    """Test an empty frontmatter block."""
    meta, body, first_line = YamlFrontmatter().decode("---\n---\nBody\n")

    assert meta == {}
    assert body == "Body\n"
    assert first_line == 3


def test_decode_invalid_yaml():
    """Test that broken YAML raises with the line of the problem."""
    text = "---\ntitle: ok\nbad: [1, 2\n---\nBody\n"
    with pytest.raises(FrontmatterError) as exc:
        YamlFrontmatter().decode(text)

    assert "invalid YAML frontmatter" in str(exc.value)
    assert exc.value.line >= 3


def test_decode_non_mapping():
    """Test that a scalar frontmatter is rejected."""
    with pytest.raises(FrontmatterError):
        YamlFrontmatter().decode("---\njust a string\n---\n")


def _corpus() -> Corpus:
    return Corpus(FsStorage(), MarkdownParser(), YamlFrontmatter())


def test_corpus_line_numbers_are_absolute():
    """Test that block lines count the frontmatter lines."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "doc.md"
        path.write_text("---\ntitle: x\n---\n\n```python\nx = 1\n```\n")

        doc = _corpus().load(path)

        assert len(doc.blocks) == 1
        assert doc.blocks[0].start_line == 5
        assert doc.blocks[0].end_line == 7


def test_corpus_malformed_frontmatter_still_lints():
    """Test that bad frontmatter is a finding, not a fatal error."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "doc.md"
        path.write_text("---\nkey: [unclosed\n---\n\n```json\n{}\n```\n")

        doc = _corpus().load(path)

        assert [f.kind for f in doc.findings] == [MALFORMED_FRONTMATTER]
        assert len(doc.blocks) == 1
        assert doc.blocks[0].start_line == 5


def test_corpus_document_options():
    """Test that fencelint options are read from frontmatter."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "doc.md"
        path.write_text("---\nfencelint:\n  allow: [db, session]\n---\n")

        doc = _corpus().load(path)

        assert doc.options.allow == frozenset({"db", "session"})
        assert doc.options.skip is False


def test_corpus_skip_option():
    """Test that a skipped document has no blocks."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "doc.md"
        path.write_text("---\nfencelint:\n  skip: true\n---\n```python\ndef (\n```\n")

        doc = _corpus().load(path)

        assert doc.options.skip is True
        assert doc.blocks == ()


def test_corpus_options_must_be_mapping():
    """Test that a non-mapping fencelint key is reported."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "doc.md"
        path.write_text("---\nfencelint: yes\n---\n")

        doc = _corpus().load(path)

        assert [f.kind for f in doc.findings] == [MALFORMED_FRONTMATTER]


def test_corpus_byte_order_mark():
    """Test that a UTF-8 BOM does not hide frontmatter or a line-1 fence."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with_fm = Path(tmpdir) / "fm.md"
        with_fm.write_text(
            "---\nfencelint:\n  allow: [db]\n---\n```python\nx = db\n```\n",
            encoding="utf-8-sig",
        )
        fence = Path(tmpdir) / "fence.md"
        fence.write_text("```python\nx = 1\n```\n", encoding="utf-8-sig")

        doc = _corpus().load(with_fm)
        assert doc.options.allow == frozenset({"db"})
        assert doc.blocks[0].start_line == 5

        doc = _corpus().load(fence)
        assert doc.findings == ()
        assert [b.language for b in doc.blocks] == ["python"]
