"""Tests for environment-aware diagnostic suppression."""

from __future__ import annotations

import pytest

from gqlbridge.core.types import ENVIRONMENTS, Diagnostic, Position
from gqlbridge.transform import DiagnosticFilter


def diagnostic(message: str) -> Diagnostic:
    return Diagnostic(from_=Position(line=0, ch=0), to=Position(line=0, ch=1), message=message)


@pytest.mark.parametrize("environment", ENVIRONMENTS)
@pytest.mark.parametrize("message", [
    "Unknown directive '@relay'.",
    'Unknown directive "@relay".',
    'Unknown directive "relay".',
    "Fragment '____' is never used.",
    "There can be only one fragment named '____'.",
    "This anonymous operation must be the only defined operation.",
    'Field "__typename" must have a selection of subfields. Did you mean "__typename { ... }"?',
])
def test_transformation_artifacts_are_suppressed_everywhere(environment: str, message: str) -> None:
    """Base rules apply in every environment."""
    assert DiagnosticFilter(environment).apply([diagnostic(message)]) == []


def test_unknown_fragment_is_only_suppressed_for_apollo() -> None:
    """Apollo interpolates fragment definitions, so their names are never known."""
    message = "Unknown fragment 'TodoFragment'."

    assert DiagnosticFilter("apollo").suppressed_by(message) == "apollo-unknown-fragment"
    assert DiagnosticFilter("relay").suppressed_by(message) is None


def test_lokka_placeholder_field_is_only_suppressed_for_lokka() -> None:
    """The '__' spread placeholder is not a real field."""
    message = "Cannot query field '__' on type 'User'."

    assert DiagnosticFilter("lokka").suppressed_by(message) == "lokka-placeholder-field"
    assert DiagnosticFilter("plain").suppressed_by(message) is None


def test_real_errors_survive_in_order() -> None:
    """Diagnostics no rule matches are returned unchanged and in order."""
    first = diagnostic("Cannot query field 'nope' on type 'Todo'.")
    second = diagnostic("Unknown type 'Nope'.")
    artifact = diagnostic("Fragment '____' is never used.")

    assert DiagnosticFilter("relay").apply([first, artifact, second]) == [first, second]
