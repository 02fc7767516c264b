import io
import re
from typing import Any

import yaml

from ..core.ports import FrontmatterCodec
from ..core.utils import position_at
from ..errors import FrontmatterError

_FM = re.compile(r"\A---[ \t]*\r?\n(.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


class YamlFrontmatter(FrontmatterCodec):
    def split(self, text: str) -> tuple[str | None, str, int]:
        """Return (raw frontmatter or None, body, first body line)."""
        m = _FM.match(text)
        if not m:
            return None, text, 1
        first_line = text[: m.end()].count("\n") + 1
        return m.group(1), text[m.end():], first_line

    def decode(self, text: str) -> tuple[dict[str, Any], str, int]:
        raw, body, first_line = self.split(text)
        if raw is None:
            return {}, body, first_line
        try:
            fm = yaml.safe_load(io.StringIO(raw))
        except yaml.YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            # content starts on line 2, after the opening ---; YAML also breaks
            # lines at U+2028 and friends, so count from the offset instead
            line = position_at(raw, mark.index)[0] + 1 if mark is not None else 1
            problem = getattr(e, "problem", None) or str(e)
            raise FrontmatterError(f"invalid YAML frontmatter: {problem}", line) from e
        if fm is None:
            fm = {}
        if not isinstance(fm, dict):
            raise FrontmatterError(
                f"frontmatter must be a mapping, got {type(fm).__name__}"
            )
        return fm, body, first_line
