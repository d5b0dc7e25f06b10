"""
Language server - FastAPI application hosting the language service.

Usage:
    from gqlbridge import LanguageServer

    server = LanguageServer(project_dir="/path/to/project", default_env="relay")
    app = server.app
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import create_language_service_app
from .core.types import Environment
from .schema.project import ProjectSchemaLoader
from .schema.store import SchemaStore
from .service import LanguageService

logger = logging.getLogger(__name__)


class LanguageServer:
    """
    GraphQL language service for editors embedding GraphQL in JavaScript.

    Features:
    - Tokens, hints, annotations and ASTs for tagged-template GraphQL
    - Project schema from graphql.config.json, builtin schema otherwise
    - Health endpoint reporting the active schema version
    """

    def __init__(
        self,
        *,
        project_dir: Optional[str] = None,
        default_env: Environment = "plain",
        title: str = "GraphQL Language Service",
        cors_origins: Optional[List[str]] = None,
        schema_timeout: float = 30.0,
    ):
        """
        Initialize the server.

        Args:
            project_dir: Project whose graphql.config.json provides the schema
            default_env: Environment for requests that name none
            title: FastAPI app title
            cors_origins: CORS allowed origins (default: none)
            schema_timeout: HTTP timeout for remote schema requests, in seconds
        """
        self.title = title
        self.cors_origins = cors_origins or []
        self.store = SchemaStore()
        self.loader = ProjectSchemaLoader(self.store, timeout=schema_timeout)
        self.service = LanguageService(self.store, self.loader, default_env=default_env)

        if project_dir:
            self.loader.set_project_dir(project_dir)

        self.app = self._create_app()
        self.app.state.language_server = self

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        app = FastAPI(
            title=self.title,
            description="GraphQL language service for tagged-template GraphQL",
            version="1.0.0",
        )

        # CORS
        if self.cors_origins:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=self.cors_origins,
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            )

        app.include_router(create_language_service_app(self.service))

        # Health check
        @app.get("/health")
        async def health():
            snapshot = self.store.snapshot()
            return {
                "status": "ok",
                "schemaVersion": snapshot.version,
                "schemaUrl": snapshot.url,
                "projectDir": str(self.loader.project_dir) if self.loader.project_dir else None,
            }

        logger.debug(f"Created {self.title} app with commands: {', '.join(self.service.commands)}")
        return app
