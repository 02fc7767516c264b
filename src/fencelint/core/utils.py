"""Utility functions for fencelint."""

import re

# Attribute syntax seen in the wild: ```python {title="app.py"} or ```{.python}
_BRACES = re.compile(r"^\{\s*\.?([\w+#.-]+)[^}]*\}")


def split_info(info: str) -> tuple[str, tuple[str, ...]]:
    """
    Split a fence info string into a language tag and its attributes.

    The language is the first word, lower-cased. Pandoc style `{.python}`
    braces are accepted. Remaining words become attributes.

    Examples:
        >>> split_info("python nolint")
        ('python', ('nolint',))
        >>> split_info("{.yaml}")
        ('yaml', ())
        >>> split_info("")
        ('', ())
    """
    info = info.strip()
    if not info:
        return "", ()

    m = _BRACES.match(info)
    if m:
        return m.group(1).lower(), tuple(info[m.end():].split())

    words = info.split()
    language = words[0]
    # "python{title=x}" and "python," style suffixes
    language = re.split(r"[{,;]", language, maxsplit=1)[0]
    return language.lower(), tuple(words[1:])


def count_lines(text: str) -> int:
    """Number of lines in text, counting a final unterminated line."""
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


def split_lines(text: str) -> list[str]:
    """
    Split text on newlines only, dropping a trailing carriage return.

    Unlike str.splitlines(), characters such as U+2028 or form feed stay
    inside their line, as they do for the Python and JSON parsers.

    Examples:
        >>> split_lines("a\\r\\nb\\u2028c\\n")
        ['a', 'b\\u2028c']
        >>> split_lines("")
        []
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def position_at(text: str, index: int) -> tuple[int, int]:
    """1-based (line, column) of a character offset, counting only newlines."""
    index = max(0, min(index, len(text)))
    line_start = text.rfind("\n", 0, index) + 1
    return text.count("\n", 0, index) + 1, index - line_start + 1
