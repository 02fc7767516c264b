import logging
from collections.abc import Iterable

from .core.model import MISSING_LANGUAGE, Document, Finding, Severity
from .core.ports import LintRule
from .report import Report
from .validators import ValidatorRegistry
from .xref import NOLINT, CrossReferenceChecker

logger = logging.getLogger(__name__)


class SyntaxRule:
    id = "syntax"

    def __init__(self, registry: ValidatorRegistry):
        self.registry = registry

    def check(self, document: Document) -> list[Finding]:
        out: list[Finding] = []
        for block in document.blocks:
            if block.has_attr(NOLINT):
                continue
            finding = self.registry.validate(block)
            if finding is not None:
                out.append(finding)
        return out


class MissingLanguageRule:
    id = "missing-language"

    def check(self, document: Document) -> list[Finding]:
        return [
            Finding(
                Severity.WARNING,
                MISSING_LANGUAGE,
                "code fence has no language tag",
                document.path,
                block.start_line,
                block=block,
            )
            for block in document.blocks
            if not block.language and not block.has_attr(NOLINT)
        ]


class Linter:
    """Runs every rule over every document and collects the report."""

    def __init__(self, rules: Iterable[LintRule]):
        self.rules = list(rules)

    def lint_document(self, document: Document) -> list[Finding]:
        findings = list(document.findings)
        if document.options.skip:
            return findings
        for rule in self.rules:
            found = rule.check(document)
            if found:
                logger.debug("%s: %s found %d", document.path, rule.id, len(found))
            findings.extend(found)
        return findings

    def lint(self, documents: Iterable[Document]) -> Report:
        report = Report()
        for document in documents:
            report.add(document, self.lint_document(document))
        return report


def build_rules(
    registry: ValidatorRegistry,
    checker: CrossReferenceChecker | None = None,
    require_language: bool = False,
) -> list[LintRule]:
    rules: list[LintRule] = [SyntaxRule(registry)]
    if checker is not None:
        rules.append(checker)
    if require_language:
        rules.append(MissingLanguageRule())
    return rules
