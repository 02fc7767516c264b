"""Allow-list files: names that snippets may use without defining them."""

from pathlib import Path

import yaml

from ..core.utils import split_lines
from ..errors import ConfigError, InputError


def _names_from_yaml(data: object, path: Path) -> set[str]:
    if data is None:
        return set()
    if isinstance(data, dict):
        data = data.get("allow", [])
    if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
        raise ConfigError(f"{path}: expected a list of names or an 'allow:' list")
    return {n.strip() for n in data if n.strip()}


def load_allow_file(path: Path) -> frozenset[str]:
    """
    Read an allow-list file.

    Plain text files hold one name per line; `#` starts a comment. Files
    ending in .yaml/.yml hold either a list of names or a mapping with an
    `allow` list.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise InputError(f"Cannot read allow-list file {path}: {e.strerror or e}") from e

    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"{path}: invalid YAML: {e}") from e
        return frozenset(_names_from_yaml(data, path))

    names = set()
    for line in split_lines(text):
        line = line.split("#", 1)[0].strip()
        if line:
            names.update(line.split())
    return frozenset(names)
