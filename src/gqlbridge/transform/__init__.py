"""
Transformation engine.

Makes tagged-template GraphQL parseable (scanner, normalizer) and maps the
toolchain's answers back onto the editor buffer (reverse mapper).
"""

from .context import (
    FRAGMENT_NAME_PLACEHOLDER,
    LOKKA_FRAGMENT_PLACEHOLDER,
    TEMPLATE_PLACEHOLDER,
    TEMPLATE_TOKEN_TYPE,
    Replacement,
    TransformContext,
    create_context,
)
from .filters import DiagnosticFilter, SuppressionRule
from .normalizer import FragmentNormalizer, normalize_fragments
from .pipeline import ForwardResult, TransformPipeline, reverse_map, transform
from .reverse import ResponseReverseMapper
from .scanner import TemplateScanner, scan_templates
from .shifts import Shift, ShiftLedger

__all__ = [
    "FRAGMENT_NAME_PLACEHOLDER",
    "LOKKA_FRAGMENT_PLACEHOLDER",
    "TEMPLATE_PLACEHOLDER",
    "TEMPLATE_TOKEN_TYPE",
    "Replacement",
    "TransformContext",
    "create_context",
    "DiagnosticFilter",
    "SuppressionRule",
    "FragmentNormalizer",
    "normalize_fragments",
    "ForwardResult",
    "TransformPipeline",
    "reverse_map",
    "transform",
    "ResponseReverseMapper",
    "TemplateScanner",
    "scan_templates",
    "Shift",
    "ShiftLedger",
]
