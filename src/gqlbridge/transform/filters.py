"""
Diagnostic suppression - drops validation messages caused by the transformation.

The placeholders written by the scanner and normalizer are not the author's
text, so errors about them are false positives. Each rule is a predicate on
the diagnostic message; a diagnostic survives only if no rule of its
environment matches.

Messages are matched in both the graphql-js shape ("double quotes") and the
graphql-core shape ('single quotes').
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.types import Diagnostic, Environment
from .context import (
    FRAGMENT_NAME_PLACEHOLDER,
    LOKKA_FRAGMENT_PLACEHOLDER,
    TEMPLATE_PLACEHOLDER,
)

logger = logging.getLogger(__name__)

_QUOTED_PATTERN = re.compile(r'["\']([^"\']+)["\']')

# Field names the scanner may have written into a selection set
TEMPLATE_FIELD_NAMES = {TEMPLATE_PLACEHOLDER, LOKKA_FRAGMENT_PLACEHOLDER, FRAGMENT_NAME_PLACEHOLDER}

ANONYMOUS_OPERATION_MESSAGES = {
    "This anonymous operation must be the only defined operation.",
}


@dataclass(frozen=True)
class SuppressionRule:
    """A named predicate over a diagnostic message."""
    name: str
    matches: Callable[[str], bool]


def _pattern(pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern)
    return lambda message: compiled.search(message) is not None


def _quoted_names(message: str) -> list[str]:
    return _QUOTED_PATTERN.findall(message)


def _is_placeholder_subselection(message: str) -> bool:
    if "must have a selection of subfields" not in message and "must have a sub selection" not in message:
        return False
    names = _quoted_names(message)
    return bool(names) and names[0] in TEMPLATE_FIELD_NAMES


def _is_placeholder_variable(message: str) -> bool:
    if not message.startswith("Variable ") or "is not defined" not in message:
        return False
    names = _quoted_names(message)
    return bool(names) and names[0].lstrip("$") in TEMPLATE_FIELD_NAMES


_Q = "[\"']"

BASE_RULES: tuple[SuppressionRule, ...] = (
    SuppressionRule("lone-anonymous-operation", lambda message: message in ANONYMOUS_OPERATION_MESSAGES),
    SuppressionRule(
        "duplicate-placeholder-fragment",
        _pattern(rf"^There can be only one fragment named {_Q}{FRAGMENT_NAME_PLACEHOLDER}{_Q}\.$"),
    ),
    SuppressionRule(
        "unused-placeholder-fragment",
        _pattern(rf"^Fragment {_Q}{FRAGMENT_NAME_PLACEHOLDER}{_Q} is never used\.$"),
    ),
    SuppressionRule("placeholder-subselection", _is_placeholder_subselection),
    SuppressionRule("placeholder-variable", _is_placeholder_variable),
    SuppressionRule("relay-directive", _pattern(rf"^Unknown directive {_Q}@?relay{_Q}\.$")),
    # never show errors about the synthesized fragment name itself
    SuppressionRule("fragment-placeholder", _pattern(rf"{_Q}{FRAGMENT_NAME_PLACEHOLDER}{_Q}")),
)

APOLLO_RULES: tuple[SuppressionRule, ...] = (
    # fragment definitions are interpolated at the top level and blanked out
    SuppressionRule("apollo-unknown-fragment", _pattern(r"Unknown fragment")),
)

LOKKA_RULES: tuple[SuppressionRule, ...] = (
    SuppressionRule(
        "lokka-placeholder-field",
        _pattern(rf"^Cannot query field {_Q}{LOKKA_FRAGMENT_PLACEHOLDER}{_Q}"),
    ),
)

ENVIRONMENT_RULES: dict[str, tuple[SuppressionRule, ...]] = {
    "apollo": APOLLO_RULES,
    "lokka": LOKKA_RULES,
}


class DiagnosticFilter:
    """
    Environment-aware suppression of transformation artifacts.

    Usage:
        diagnostic_filter = DiagnosticFilter("relay")
        visible = diagnostic_filter.apply(diagnostics)
    """

    def __init__(self, environment: Environment = "plain"):
        self.environment = environment
        self.rules = BASE_RULES + ENVIRONMENT_RULES.get(environment, ())

    def suppressed_by(self, message: str) -> Optional[str]:
        """Name of the first rule matching `message`, if any."""
        for rule in self.rules:
            if rule.matches(message):
                return rule.name
        return None

    def apply(self, diagnostics: list[Diagnostic]) -> list[Diagnostic]:
        """Return the diagnostics no rule matches, in their original order."""
        visible = []
        for diagnostic in diagnostics:
            rule = self.suppressed_by(diagnostic.message)
            if rule:
                logger.debug(f"Suppressed diagnostic by {rule}: {diagnostic.message}")
                continue
            visible.append(diagnostic)
        return visible
