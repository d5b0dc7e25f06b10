"""
Custom exceptions for the gqlbridge language service.
"""

from __future__ import annotations

from typing import Any, Optional


class GqlBridgeError(Exception):
    """Base exception for all gqlbridge errors."""
    pass


class TransformError(GqlBridgeError):
    """Raised when a buffer transformation cannot be recorded consistently."""
    pass


class ToolchainParseError(GqlBridgeError):
    """Raised when the GraphQL parser rejects a (transformed) buffer."""

    def __init__(self, message: str, locations: Optional[list[dict[str, Any]]] = None):
        self.message = message
        self.locations = locations or []
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "locations": self.locations}


class UnknownCommandError(GqlBridgeError):
    """Raised when a request names a command the service does not know."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f'Unknown command "{command}"')


class SchemaLoadError(GqlBridgeError):
    """Raised when a project schema cannot be loaded."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Unable to load schema from '{source}': {message}")
