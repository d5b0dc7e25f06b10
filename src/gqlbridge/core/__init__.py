"""
Core types, errors and buffer utilities.
"""

from .errors import (
    GqlBridgeError,
    SchemaLoadError,
    ToolchainParseError,
    TransformError,
    UnknownCommandError,
)
from .types import (
    CURSOR_COMMANDS,
    ENVIRONMENTS,
    Diagnostic,
    Environment,
    Hint,
    HintResult,
    LanguageRequest,
    Position,
    Token,
    dump,
    normalize_environment,
)
from .utils import line_starts, offset_to_position, position_to_offset, word_bounds

__all__ = [
    # Errors
    "GqlBridgeError",
    "SchemaLoadError",
    "ToolchainParseError",
    "TransformError",
    "UnknownCommandError",
    # Types
    "CURSOR_COMMANDS",
    "ENVIRONMENTS",
    "Diagnostic",
    "Environment",
    "Hint",
    "HintResult",
    "LanguageRequest",
    "Position",
    "Token",
    "dump",
    "normalize_environment",
    # Utils
    "line_starts",
    "offset_to_position",
    "position_to_offset",
    "word_bounds",
]
