"""
FastAPI router for the language service.

Endpoints:
- GET/POST /js-graphql-language-service - run one editor command

Supported request formats:

1. JSON body:
   {"command": "getTokens", "buffer": "{ viewer { id } }", "env": "relay"}

2. Query parameters:
   /js-graphql-language-service?command=getTypeDocumentation&type=User

3. Raw GraphQL body (Content-Type: application/graphql), command from the
   query string:
   POST /js-graphql-language-service?command=getAnnotations
   { viewer { id } }

The legacy boolean `relay` flag is accepted instead of `env`.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError

from ..core.errors import GqlBridgeError
from ..core.types import LanguageRequest
from ..service import TEXT_MEDIA_TYPE, LanguageService

SERVICE_PATH = "/js-graphql-language-service"
GRAPHQL_MEDIA_TYPE = "application/graphql"

# Create router
router = APIRouter()

# Global instance (set by create_language_service_app)
_service: Optional[LanguageService] = None


def set_service(service: LanguageService):
    """Set the language service used by the endpoint."""
    global _service
    _service = service


def get_service() -> LanguageService:
    """Get the language service."""
    if _service is None:
        raise RuntimeError("Language service not initialized. Call set_service() first.")
    return _service


async def parse_language_request(request: Request) -> LanguageRequest:
    """
    Build a LanguageRequest from query parameters and the request body.

    Body values take precedence over query parameters.

    Raises:
        HTTPException(400): on a malformed JSON body or invalid field values
    """
    data: dict[str, Any] = dict(request.query_params)

    body = await request.body()
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(GRAPHQL_MEDIA_TYPE):
        data["buffer"] = body.decode("utf-8")
    elif body:
        try:
            payload = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail={"error": "Request body is not valid JSON"})
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail={"error": "Request body must be a JSON object"})
        data.update(payload)

    if isinstance(data.get("relay"), str):
        data["relay"] = data["relay"] == "true"

    try:
        return LanguageRequest.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"error": "Invalid request", "details": e.errors()})


@router.api_route(SERVICE_PATH, methods=["GET", "POST"])
async def language_service_endpoint(
    request: Request,
    service: LanguageService = Depends(get_service),
) -> Response:
    """
    Run an editor command.

    Example request:
    {
        "command": "getHints",
        "buffer": "fragment on Todo { }",
        "line": 0,
        "ch": 19,
        "env": "relay"
    }

    Example response:
    {
        "hints": [{"text": "id", "type": "ID!", "description": "The ID of an object", "relay": false}, ...],
        "from": {"line": 0, "ch": 19},
        "to": {"line": 0, "ch": 19}
    }
    """
    language_request = await parse_language_request(request)

    try:
        response = await service.handle(language_request)
    except GqlBridgeError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)})

    if response.media_type == TEXT_MEDIA_TYPE:
        return PlainTextResponse(response.content)
    return JSONResponse(response.content)


def create_language_service_app(service: Optional[LanguageService] = None) -> APIRouter:
    """
    Create a configured language service router.

    Args:
        service: Language service (defaults to one with the builtin schema)

    Returns:
        Configured FastAPI router
    """
    set_service(service or LanguageService())
    return router
