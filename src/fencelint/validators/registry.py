import logging
from collections.abc import Iterable

from ..core.model import SYNTAX_ERROR, Block, Finding, Severity
from ..core.utils import count_lines
from .base import Validator
from .data import JsonValidator, TomlValidator, XmlValidator, YamlValidator
from .python import PyconValidator, PythonValidator

logger = logging.getLogger(__name__)


class ValidatorRegistry:
    """Maps language tags to validators. Unknown tags have no validator."""

    def __init__(self, validators: Iterable[Validator] = ()):
        self._validators: list[Validator] = []
        self._by_tag: dict[str, Validator] = {}
        for v in validators:
            self.register(v)

    def register(self, validator: Validator) -> None:
        self._validators.append(validator)
        for tag in validator.tags:
            self._by_tag[tag] = validator

    def get(self, language: str) -> Validator | None:
        return self._by_tag.get(language.lower())

    def validators(self) -> list[Validator]:
        return list(self._validators)

    def restrict(self, languages: Iterable[str]) -> "ValidatorRegistry":
        """
        Keep only validators named in `languages` (by name or by any tag).
        Raises ValueError for a language nothing here knows about.
        """
        wanted = []
        for lang in languages:
            lang = lang.lower()
            v = self._by_tag.get(lang) or next(
                (v for v in self._validators if v.name == lang), None
            )
            if v is None:
                raise ValueError(f"No validator for language {lang!r}")
            if v not in wanted:
                wanted.append(v)
        return ValidatorRegistry(wanted)

    def validate(self, block: Block) -> Finding | None:
        validator = self.get(block.language)
        if validator is None:
            return None
        problem = validator.check(block.content)
        if problem is None:
            return None

        n = count_lines(block.content)
        if n == 0:
            line = block.start_line
        else:
            line = block.start_line + min(max(problem.line, 1), n)
        logger.debug("%s:%d: %s failed to parse", block.path, line, validator.name)
        return Finding(
            Severity.ERROR,
            SYNTAX_ERROR,
            f"{validator.name}: {problem.message}",
            block.path,
            line,
            problem.column,
            block,
        )


def default_registry() -> ValidatorRegistry:
    return ValidatorRegistry(
        [
            PythonValidator(),
            PyconValidator(),
            JsonValidator(),
            YamlValidator(),
            TomlValidator(),
            XmlValidator(),
        ]
    )
