"""
Schema acquisition and documentation.
"""

from .builtin import BUILTIN_SCHEMA_SDL, build_builtin_schema
from .docs import field_documentation, get_schema_type, type_documentation
from .project import CONFIG_FILE_NAME, ProjectConfig, ProjectSchemaLoader, build_introspection_schema
from .store import SchemaSnapshot, SchemaStore

__all__ = [
    "BUILTIN_SCHEMA_SDL",
    "build_builtin_schema",
    "field_documentation",
    "get_schema_type",
    "type_documentation",
    "CONFIG_FILE_NAME",
    "ProjectConfig",
    "ProjectSchemaLoader",
    "build_introspection_schema",
    "SchemaSnapshot",
    "SchemaStore",
]
