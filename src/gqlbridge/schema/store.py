"""
Active schema holder.

Requests never read the store piecemeal: each captures one SchemaSnapshot at
its start. Reloads build a new snapshot and swap the reference, so a request
keeps a consistent schema even if a reload lands mid-request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from graphql import GraphQLSchema

from .builtin import build_builtin_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaSnapshot:
    """A schema together with its version and where it came from."""
    schema: GraphQLSchema
    version: int = 0
    url: str = ""


class SchemaStore:
    """
    Holds the current schema snapshot.

    Usage:
        store = SchemaStore()
        snapshot = store.snapshot()
        store.replace(new_schema, url="http://localhost:4000/graphql")
    """

    def __init__(self, builtin: Optional[GraphQLSchema] = None):
        self.builtin = builtin or build_builtin_schema()
        self._snapshot = SchemaSnapshot(schema=self.builtin)

    def snapshot(self) -> SchemaSnapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        return self._snapshot.version

    def replace(self, schema: GraphQLSchema, url: str = "") -> SchemaSnapshot:
        """Activate `schema` and bump the version."""
        snapshot = SchemaSnapshot(schema=schema, version=self._snapshot.version + 1, url=url or "")
        self._snapshot = snapshot
        logger.info(f"Loaded schema from '{url or 'unknown'}' (version {snapshot.version})")
        return snapshot

    def reset(self) -> SchemaSnapshot:
        """Fall back to the builtin schema."""
        if self._snapshot.schema is self.builtin and not self._snapshot.url:
            return self._snapshot
        snapshot = SchemaSnapshot(schema=self.builtin, version=self._snapshot.version + 1)
        self._snapshot = snapshot
        logger.info(f"Using builtin schema (version {snapshot.version})")
        return snapshot
