"""Data formats: JSON, YAML, TOML and XML."""

import json
import re
import xml.etree.ElementTree as ET

import yaml

from ..core.utils import count_lines, position_at
from .base import SyntaxProblem, Validator

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

_TOML_POS = re.compile(r"\s*\(at line (\d+), column (\d+)\)$")
_TOML_END = re.compile(r"\s*\(at end of document\)$")
_XML_POS = re.compile(r":\s*line \d+, column \d+$")

# Synthetic root so that fragments with several top-level elements parse
_XML_WRAPPER = "fencelint-fragment"


class JsonValidator(Validator):
    name = "json"
    tags = ("json",)

    def check(self, content: str) -> SyntaxProblem | None:
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            return SyntaxProblem(e.msg, e.lineno, e.colno)
        return None


class YamlValidator(Validator):
    """Syntax-only check: compose the node graph without constructing tags."""

    name = "yaml"
    tags = ("yaml", "yml")

    def check(self, content: str) -> SyntaxProblem | None:
        try:
            for _ in yaml.compose_all(content, Loader=yaml.SafeLoader):
                pass
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark or e.context_mark
            message = e.problem or e.context or "invalid YAML"
            if mark is None:
                return SyntaxProblem(message, 1)
            line, column = position_at(content, mark.index)
            return SyntaxProblem(message, line, column)
        except yaml.YAMLError as e:
            return SyntaxProblem(str(e), 1)
        return None


class TomlValidator(Validator):
    name = "toml"
    tags = ("toml",)

    def check(self, content: str) -> SyntaxProblem | None:
        try:
            tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            message = str(e)
            m = _TOML_POS.search(message)
            if m:
                return SyntaxProblem(
                    message[: m.start()], int(m.group(1)), int(m.group(2))
                )
            m = _TOML_END.search(message)
            if m:
                return SyntaxProblem(message[: m.start()], max(count_lines(content), 1))
            return SyntaxProblem(message, 1)
        return None


class XmlValidator(Validator):
    name = "xml"
    tags = ("xml", "svg", "xsd")

    def check(self, content: str) -> SyntaxProblem | None:
        stripped = content.lstrip()
        wrapped = not stripped.startswith(("<?xml", "<!DOCTYPE"))
        if wrapped:
            prefix = f"<{_XML_WRAPPER}>"
            source = f"{prefix}{content}</{_XML_WRAPPER}>"
            skipped = 0
        else:
            # the declaration must be the very first thing in the entity
            prefix = ""
            source = stripped
            skipped = content[: len(content) - len(stripped)].count("\n")
        try:
            ET.fromstring(source)
        except ET.ParseError as e:
            line, column = e.position
            if line == 1:
                column -= len(prefix)
            message = _XML_POS.sub("", str(e))
            return SyntaxProblem(message, line + skipped, max(column, 0) + 1)
        return None
