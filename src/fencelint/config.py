"""Configuration loader for fencelint.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .adapters.fs_storage import DEFAULT_EXTENSIONS
from .errors import ConfigError

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_NAME = "fencelint.toml"


@dataclass
class WatchConfig:
    """Watch mode configuration."""
    debounce_ms: int = 150


@dataclass
class FencelintConfig:
    """Complete fencelint configuration."""
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude: list[str] = field(default_factory=list)
    allow: list[str] = field(default_factory=list)
    allow_file: Path | None = None
    languages: list[str] = field(default_factory=list)  # empty: every validator
    require_language: bool = False
    xref: bool = True
    fail_on: str = "error"
    watch: WatchConfig = field(default_factory=WatchConfig)
    source: Path | None = None  # file the settings came from


def _str_list(data: dict[str, Any], key: str, default: list[str]) -> list[str]:
    value = data.get(key, default)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false")
    return value


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e.strerror or e}") from e


def parse_config(data: dict[str, Any], base: Path | None = None) -> FencelintConfig:
    """Build a FencelintConfig from a decoded TOML table."""
    allow_file = data.get("allow_file")
    if allow_file is not None:
        if not isinstance(allow_file, str):
            raise ConfigError("'allow_file' must be a path string")
        allow_file = Path(allow_file)
        # relative to the config file, not the working directory
        if base is not None and not allow_file.is_absolute():
            allow_file = base / allow_file

    fail_on = data.get("fail_on", "error")
    if fail_on not in ("error", "warning"):
        raise ConfigError("'fail_on' must be 'error' or 'warning'")

    watch_data = data.get("watch", {})
    if not isinstance(watch_data, dict):
        raise ConfigError("'watch' must be a table")
    debounce_ms = watch_data.get("debounce_ms", 150)
    if not isinstance(debounce_ms, int) or debounce_ms < 0:
        raise ConfigError("'watch.debounce_ms' must be a non-negative integer")

    return FencelintConfig(
        extensions=_str_list(data, "extensions", list(DEFAULT_EXTENSIONS)),
        exclude=_str_list(data, "exclude", []),
        allow=_str_list(data, "allow", []),
        allow_file=allow_file,
        languages=_str_list(data, "languages", []),
        require_language=_bool(data, "require_language", False),
        xref=_bool(data, "xref", True),
        fail_on=fail_on,
        watch=WatchConfig(debounce_ms=debounce_ms),
    )


def load_config(config_path: Path | None = None) -> FencelintConfig:
    """
    Load configuration.

    Search order:
    1. config_path (if provided; it must exist)
    2. cwd/fencelint.toml
    3. [tool.fencelint] in cwd/pyproject.toml

    Returns:
        FencelintConfig with resolved settings, defaults if nothing is found
    """
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        data = _read_toml(config_path)
        if config_path.name == "pyproject.toml":
            data = data.get("tool", {}).get("fencelint", {})
        config = parse_config(data, config_path.parent)
        config.source = config_path
        return config

    local = Path.cwd() / CONFIG_NAME
    if local.exists():
        config = parse_config(_read_toml(local), local.parent)
        config.source = local
        return config

    pyproject = Path.cwd() / "pyproject.toml"
    if pyproject.exists():
        table = _read_toml(pyproject).get("tool", {}).get("fencelint")
        if table is not None:
            config = parse_config(table, pyproject.parent)
            config.source = pyproject
            return config

    return FencelintConfig()
