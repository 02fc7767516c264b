"""Per-language syntax validators for fenced code blocks."""

from .base import SyntaxProblem, Validator
from .registry import ValidatorRegistry, default_registry

__all__ = [
    "SyntaxProblem",
    "Validator",
    "ValidatorRegistry",
    "default_registry",
]
