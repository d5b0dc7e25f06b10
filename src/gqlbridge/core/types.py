"""
Pydantic models exchanged between the editor, the transformation engine and
the GraphQL toolchain.

Field names follow the editor protocol (camelCase, `from`/`to`, `ch`), so the
models are dumped with `by_alias=True` before they go over the wire.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field


# Embedding conventions
Environment = Literal["relay", "apollo", "lokka", "graphqlTemplate", "plain"]
ENVIRONMENTS: tuple[str, ...] = get_args(Environment)

# Commands that reference a cursor position in the buffer
CURSOR_COMMANDS = {"getHints", "getTokenDocumentation"}


def normalize_environment(env: Optional[str], relay: bool = False) -> Environment:
    """
    Resolve the requested environment.

    The legacy boolean `relay` flag maps to "relay"; unknown or missing
    values fall back to "plain".
    """
    if env in ENVIRONMENTS:
        return env  # type: ignore[return-value]
    if relay:
        return "relay"
    return "plain"


class Position(BaseModel):
    """Zero-based line/column position in a buffer."""
    line: int = 0
    ch: int = 0


class Token(BaseModel):
    """
    A lexical token in some buffer's coordinate space.

    The same instance is mutated in place by the reverse mapper when it moves
    from transformed-buffer to original-buffer coordinates.
    """
    text: str
    type: str
    start: int
    end: int
    scope: Optional[int] = None
    kind: Optional[str] = None


class Diagnostic(BaseModel):
    """A lint/validation message anchored to a line/column range."""
    model_config = ConfigDict(populate_by_name=True)

    from_: Position = Field(alias="from")
    to: Position
    message: str
    severity: str = "error"


class Hint(BaseModel):
    """A single completion candidate."""
    text: str
    type: Optional[str] = None
    description: Optional[str] = None
    relay: bool = False


class HintResult(BaseModel):
    """Completion candidates and the span they replace when accepted."""
    model_config = ConfigDict(populate_by_name=True)

    hints: list[Hint] = Field(default_factory=list)
    from_: Optional[Position] = Field(default=None, alias="from")
    to: Optional[Position] = None


class LanguageRequest(BaseModel):
    """
    Incoming editor request.

    Example:
    {
        "command": "getTokens",
        "env": "relay",
        "buffer": "fragment on Todo { id }",
        "line": 0,
        "ch": 0
    }
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    command: str = "getTokens"
    env: Optional[str] = None
    relay: bool = False
    buffer: str = ""
    line: int = 0
    ch: int = 0
    type: Optional[str] = None
    field: Optional[str] = None
    project_dir: Optional[str] = Field(default=None, alias="projectDir")

    @property
    def environment(self) -> Environment:
        return normalize_environment(self.env, self.relay)

    @property
    def cursor(self) -> Position:
        return Position(line=self.line, ch=self.ch)


def dump(model: BaseModel | list[BaseModel] | Any) -> Any:
    """Serialize models (or lists of models) using wire aliases."""
    if isinstance(model, BaseModel):
        return model.model_dump(by_alias=True, exclude_none=True)
    if isinstance(model, list):
        return [dump(item) for item in model]
    return model
