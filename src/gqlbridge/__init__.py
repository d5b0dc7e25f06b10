"""
gqlbridge - GraphQL language service for GraphQL embedded in JavaScript.

Editors send buffers that contain tagged-template GraphQL (Relay.QL, Apollo
gql, Lokka, graphql-tag). The embedded ${...} expressions and Relay's
nameless fragments are rewritten into plain GraphQL, the GraphQL toolchain
runs on the result, and every answer (tokens, hints, diagnostics, ASTs) is
mapped back onto the buffer the editor sent.

Usage:
    from gqlbridge import LanguageServer

    server = LanguageServer(default_env="relay")
    app = server.app    # serve with uvicorn
"""

from .core import (
    Diagnostic,
    Environment,
    GqlBridgeError,
    Hint,
    HintResult,
    LanguageRequest,
    Position,
    SchemaLoadError,
    Token,
    ToolchainParseError,
    TransformError,
    UnknownCommandError,
)
from .schema import ProjectSchemaLoader, SchemaSnapshot, SchemaStore
from .server import LanguageServer
from .service import LanguageService, ServiceResponse
from .transform import ForwardResult, TransformContext, TransformPipeline, reverse_map, transform

__version__ = "0.1.0"

__all__ = [
    # Server
    "LanguageServer",
    "LanguageService",
    "ServiceResponse",
    # Engine
    "ForwardResult",
    "TransformContext",
    "TransformPipeline",
    "reverse_map",
    "transform",
    # Schema
    "ProjectSchemaLoader",
    "SchemaSnapshot",
    "SchemaStore",
    # Types
    "Diagnostic",
    "Environment",
    "Hint",
    "HintResult",
    "LanguageRequest",
    "Position",
    "Token",
    # Errors
    "GqlBridgeError",
    "SchemaLoadError",
    "ToolchainParseError",
    "TransformError",
    "UnknownCommandError",
]
