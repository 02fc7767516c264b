import fnmatch
import logging
from pathlib import Path
from typing import Iterable

from ..core.ports import StorageStrategy
from ..errors import InputError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md", ".markdown")


def is_hidden(path: Path, root: Path) -> bool:
    """True if any part of path below root starts with a dot."""
    return any(part.startswith(".") for part in path.relative_to(root).parts)


class FsStorage(StorageStrategy):
    def __init__(
        self,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        exclude: Iterable[str] = (),
    ):
        self.extensions = tuple(
            e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions
        )
        self.exclude = tuple(exclude)

    def excluded(self, path: Path) -> bool:
        """True if path matches one of the exclude patterns."""
        posix = path.as_posix()
        for pattern in self.exclude:
            if path.match(pattern) or fnmatch.fnmatch(posix, pattern):
                return True
        return False

    def _walk(self, root: Path) -> list[Path]:
        found = []
        for p in root.rglob("*"):
            # skip hidden files and anything under a hidden directory
            if is_hidden(p, root):
                continue
            if p.is_file() and p.suffix.lower() in self.extensions:
                found.append(p)
        return sorted(found)

    def collect(self, paths: Iterable[Path]) -> list[Path]:
        """
        Expand files and directories into the list of documents to lint.

        Files named explicitly are kept whatever their extension; directories
        are walked recursively and filtered by extension. Exclude patterns
        apply to both. Raises InputError for a path that does not exist.
        """
        out: list[Path] = []
        seen: set[Path] = set()
        for path in paths:
            path = Path(path)
            if not path.exists():
                raise InputError(f"Path does not exist: {path}")
            candidates = self._walk(path) if path.is_dir() else [path]
            for p in candidates:
                if self.excluded(p):
                    logger.debug("excluded %s", p)
                    continue
                key = p.resolve()
                if key in seen:
                    continue
                seen.add(key)
                out.append(p)
        return out

    def read_text(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            raise InputError(f"{path} is not valid UTF-8: {e.reason}") from e
        except OSError as e:
            raise InputError(f"Cannot read {path}: {e.strerror or e}") from e
