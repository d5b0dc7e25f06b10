"""
Language service command dispatcher.

Every editor request names a command. Buffer commands run through the
transformation engine:

    buffer -> transform -> toolchain -> reverse_map -> response

Schema and project commands work on the current schema snapshot directly.

Usage:
    service = LanguageService()
    response = await service.handle(LanguageRequest(command="getTokens", buffer="{ viewer { id } }"))
    response.content    # -> {"tokens": [...]}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from graphql import print_schema

from .core.errors import ToolchainParseError, UnknownCommandError
from .core.types import Environment, LanguageRequest, dump
from .schema.docs import field_documentation, type_documentation
from .schema.project import ProjectSchemaLoader
from .schema.store import SchemaSnapshot, SchemaStore
from .toolchain import hint, lint, parse, schema_tokens_and_ast, token_documentation, tokenize
from .transform.pipeline import TransformPipeline

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"
TEXT_MEDIA_TYPE = "text/plain"


@dataclass
class ServiceResponse:
    """Response body plus the media type it should be sent with."""
    content: Any
    media_type: str = JSON_MEDIA_TYPE


class LanguageService:
    """
    Dispatches editor commands.

    One instance serves all requests; per-request state lives in the
    TransformContext created by the pipeline and in the schema snapshot
    captured at the start of handle().
    """

    def __init__(
        self,
        store: Optional[SchemaStore] = None,
        loader: Optional[ProjectSchemaLoader] = None,
        default_env: Environment = "plain",
    ):
        """
        Initialize the service.

        Args:
            store: Schema store (defaults to one holding the builtin schema)
            loader: Project schema loader feeding `store`
            default_env: Environment for requests that name none
        """
        self.store = store or SchemaStore()
        self.loader = loader or ProjectSchemaLoader(self.store)
        self.default_env = default_env
        self.pipeline = TransformPipeline()

        self._buffer_commands: dict[str, Callable[[LanguageRequest, Environment, SchemaSnapshot], Any]] = {
            "getTokens": self.get_tokens,
            "getHints": self.get_hints,
            "getTokenDocumentation": self.get_token_documentation,
            "getAnnotations": self.get_annotations,
            "getAST": self.get_ast,
        }
        self._schema_commands: dict[str, Callable[[LanguageRequest, SchemaSnapshot], ServiceResponse]] = {
            "getSchemaTokensAndAST": self.get_schema_tokens_and_ast,
            "getTypeDocumentation": self.get_type_documentation,
            "getFieldDocumentation": self.get_field_documentation,
            "getSchema": self.get_schema,
            "getSchemaWithVersion": self.get_schema_with_version,
        }
        self._project_commands: dict[str, Callable[[LanguageRequest], Awaitable[ServiceResponse]]] = {
            "setProjectDir": self.set_project_dir,
        }

    @property
    def commands(self) -> list[str]:
        return [*self._buffer_commands, *self._schema_commands, *self._project_commands]

    async def handle(self, request: LanguageRequest) -> ServiceResponse:
        """
        Run one editor command.

        Unknown commands produce {"error": "Unknown command \\"<name>\\""}.
        """
        try:
            return await self._dispatch(request)
        except UnknownCommandError as e:
            logger.warning(str(e))
            return ServiceResponse({"error": str(e)})

    async def _dispatch(self, request: LanguageRequest) -> ServiceResponse:
        command = request.command

        project_command = self._project_commands.get(command)
        if project_command is not None:
            return await project_command(request)

        await self.loader.refresh()
        snapshot = self.store.snapshot()

        schema_command = self._schema_commands.get(command)
        if schema_command is not None:
            return schema_command(request, snapshot)

        buffer_command = self._buffer_commands.get(command)
        if buffer_command is None:
            raise UnknownCommandError(command)
        return ServiceResponse(buffer_command(request, self.environment_for(request), snapshot))

    def environment_for(self, request: LanguageRequest) -> Environment:
        if request.env is None and not request.relay:
            return self.default_env
        return request.environment

    # =========================================================================
    # Buffer commands
    # =========================================================================

    def get_tokens(self, request: LanguageRequest, env: Environment, snapshot: SchemaSnapshot) -> dict[str, Any]:
        forward = self.pipeline.forward("getTokens", request.buffer, environment=env)
        tokens = tokenize(forward.transformed_buffer)
        return {"tokens": dump(self.pipeline.reverse("getTokens", tokens, forward.context))}

    def get_hints(self, request: LanguageRequest, env: Environment, snapshot: SchemaSnapshot) -> dict[str, Any]:
        forward = self.pipeline.forward("getHints", request.buffer, request.cursor, env)
        result = hint(forward.transformed_buffer, forward.adjusted_cursor, snapshot.schema)
        result = self.pipeline.reverse("getHints", result, forward.context)
        content = dump(result)
        content.setdefault("from", None)
        content.setdefault("to", None)
        return content

    def get_token_documentation(self, request: LanguageRequest, env: Environment, snapshot: SchemaSnapshot) -> dict[str, Any]:
        forward = self.pipeline.forward("getTokenDocumentation", request.buffer, request.cursor, env)
        return token_documentation(forward.transformed_buffer, forward.adjusted_cursor, snapshot.schema)

    def get_annotations(self, request: LanguageRequest, env: Environment, snapshot: SchemaSnapshot) -> dict[str, Any]:
        forward = self.pipeline.forward("getAnnotations", request.buffer, environment=env)
        diagnostics = lint(forward.transformed_buffer, snapshot.schema)
        return {"annotations": dump(self.pipeline.reverse("getAnnotations", diagnostics, forward.context))}

    def get_ast(self, request: LanguageRequest, env: Environment, snapshot: SchemaSnapshot) -> dict[str, Any]:
        forward = self.pipeline.forward("getAST", request.buffer, environment=env)
        try:
            return parse(forward.transformed_buffer)
        except ToolchainParseError as e:
            error = self.pipeline.reverse("getAST", e, forward.context)
            logger.debug(f"getAST parse error: {error.message}")
            return error.to_dict()

    # =========================================================================
    # Schema commands
    # =========================================================================

    def get_schema_tokens_and_ast(self, request: LanguageRequest, snapshot: SchemaSnapshot) -> ServiceResponse:
        result = schema_tokens_and_ast(request.buffer)
        return ServiceResponse({"tokens": dump(result["tokens"]), "ast": result["ast"]})

    def get_type_documentation(self, request: LanguageRequest, snapshot: SchemaSnapshot) -> ServiceResponse:
        return ServiceResponse(type_documentation(snapshot.schema, request.type))

    def get_field_documentation(self, request: LanguageRequest, snapshot: SchemaSnapshot) -> ServiceResponse:
        return ServiceResponse(field_documentation(snapshot.schema, request.type, request.field))

    def get_schema(self, request: LanguageRequest, snapshot: SchemaSnapshot) -> ServiceResponse:
        return ServiceResponse(print_schema(snapshot.schema), media_type=TEXT_MEDIA_TYPE)

    def get_schema_with_version(self, request: LanguageRequest, snapshot: SchemaSnapshot) -> ServiceResponse:
        schema = snapshot.schema
        return ServiceResponse({
            "schema": print_schema(schema),
            "queryType": schema.query_type.name if schema.query_type else "",
            "mutationType": schema.mutation_type.name if schema.mutation_type else "",
            "subscriptionType": schema.subscription_type.name if schema.subscription_type else "",
            "url": snapshot.url,
            "version": snapshot.version,
        })

    # =========================================================================
    # Project commands
    # =========================================================================

    async def set_project_dir(self, request: LanguageRequest) -> ServiceResponse:
        self.loader.set_project_dir(request.project_dir)
        await self.loader.refresh()
        return ServiceResponse({"projectDir": request.project_dir})
