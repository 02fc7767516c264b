"""Runtime wiring helper for CLI applications."""

import logging
from dataclasses import dataclass
from pathlib import Path

from .adapters.allow_file import load_allow_file
from .adapters.fs_storage import FsStorage
from .adapters.markdown_parser import MarkdownParser
from .adapters.yaml_codec import YamlFrontmatter
from .config import FencelintConfig, load_config
from .core.corpus import Corpus
from .core.model import Severity
from .errors import ConfigError
from .lint import Linter, build_rules
from .validators import ValidatorRegistry, default_registry
from .xref import CrossReferenceChecker

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Container for all wired components."""
    corpus: Corpus
    registry: ValidatorRegistry
    linter: Linter
    config: FencelintConfig
    fail_on: Severity


def build_runtime(
    config_path: Path | None = None,
    config: FencelintConfig | None = None,
) -> Runtime:
    """Build and wire all components from a configuration.

    `config` wins over `config_path`; with neither, the usual search for a
    config file applies.
    """
    if config is None:
        config = load_config(config_path)
    if config.source:
        logger.info("using configuration from %s", config.source)

    storage = FsStorage(extensions=config.extensions, exclude=config.exclude)
    corpus = Corpus(storage, MarkdownParser(), YamlFrontmatter())

    registry = default_registry()
    if config.languages:
        try:
            registry = registry.restrict(config.languages)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    checker = None
    if config.xref:
        allow = set(config.allow)
        if config.allow_file is not None:
            allow |= load_allow_file(config.allow_file)
        checker = CrossReferenceChecker(allow)

    linter = Linter(build_rules(registry, checker, config.require_language))

    return Runtime(
        corpus=corpus,
        registry=registry,
        linter=linter,
        config=config,
        fail_on=Severity.parse(config.fail_on),
    )
