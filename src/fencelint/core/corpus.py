import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..errors import FrontmatterError
from .model import MALFORMED_FRONTMATTER, Document, DocumentOptions, Finding, Severity
from .ports import FrontmatterCodec, ParserStrategy, StorageStrategy

logger = logging.getLogger(__name__)

OPTIONS_KEY = "fencelint"


def _options(meta: dict[str, Any], path: Path) -> tuple[DocumentOptions, list[Finding]]:
    raw = meta.get(OPTIONS_KEY)
    if raw is None:
        return DocumentOptions(), []
    if not isinstance(raw, dict):
        return DocumentOptions(), [
            Finding(
                Severity.ERROR,
                MALFORMED_FRONTMATTER,
                f"'{OPTIONS_KEY}' must be a mapping",
                path,
                1,
            )
        ]
    allow = raw.get("allow", [])
    if isinstance(allow, str):
        allow = allow.split()
    return DocumentOptions(
        skip=bool(raw.get("skip", False)),
        allow=frozenset(str(a) for a in allow),
    ), []


class Corpus:
    """Loads Markdown files into immutable Documents."""

    def __init__(
        self, storage: StorageStrategy, parser: ParserStrategy, codec: FrontmatterCodec
    ):
        self.storage = storage
        self.parser = parser
        self.codec = codec

    def load(self, path: Path) -> Document:
        text = self.storage.read_text(path)
        findings: list[Finding] = []

        try:
            meta, body, first_line = self.codec.decode(text)
        except FrontmatterError as e:
            findings.append(
                Finding(Severity.ERROR, MALFORMED_FRONTMATTER, str(e), path, e.line)
            )
            meta = {}
            _, body, first_line = self.codec.split(text)

        options, option_findings = _options(meta, path)
        findings.extend(option_findings)
        if options.skip:
            logger.info("skipping %s (frontmatter skip)", path)
            return Document(path=path, findings=tuple(findings), options=options)

        blocks, fence_findings = self.parser.parse(body, path, first_line)
        findings.extend(fence_findings)
        logger.debug("%s: %d blocks", path, len(blocks))
        return Document(
            path=path,
            blocks=tuple(blocks),
            findings=tuple(findings),
            options=options,
        )

    def load_all(self, paths: Iterable[Path]) -> list[Document]:
        """Collect and load every document; fails before returning anything."""
        return [self.load(p) for p in self.storage.collect(paths)]
