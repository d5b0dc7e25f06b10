"""
Type and field documentation lookups.
"""

from __future__ import annotations

from typing import Any, Optional

from graphql import GraphQLInterfaceType, GraphQLSchema, GraphQLUnionType


def get_schema_type(schema: GraphQLSchema, type_name: Optional[str]) -> Any:
    """
    Look up a named type; 'Query', 'Mutation' and 'Subscription' also
    resolve to the root types when those are named differently.
    """
    if not type_name:
        return None
    graphql_type = schema.get_type(type_name)
    if graphql_type is not None:
        return graphql_type
    if type_name == "Query":
        return schema.query_type
    if type_name == "Mutation":
        return schema.mutation_type
    if type_name == "Subscription":
        return schema.subscription_type
    return None


def type_documentation(schema: GraphQLSchema, type_name: Optional[str]) -> dict[str, Any]:
    """
    Documentation for a type.

    Returns:
        {"type", "description", "interfaces", "implementations", "fields"},
        or {} for unknown types
    """
    graphql_type = get_schema_type(schema, type_name)
    if graphql_type is None:
        return {}

    interfaces = getattr(graphql_type, "interfaces", None) or []
    fields = getattr(graphql_type, "fields", None) or {}
    if isinstance(graphql_type, (GraphQLInterfaceType, GraphQLUnionType)):
        implementations = schema.get_possible_types(graphql_type)
    else:
        implementations = []

    return {
        "type": str(graphql_type),
        "description": graphql_type.description,
        "interfaces": [str(interface) for interface in interfaces],
        "implementations": [str(implementation) for implementation in implementations],
        "fields": [
            {
                "name": name,
                "args": [
                    {"name": arg_name, "type": str(arg.type), "description": arg.description}
                    for arg_name, arg in (getattr(field, "args", None) or {}).items()
                ],
                "type": str(field.type),
                "description": field.description,
            }
            for name, field in fields.items()
        ],
    }


def field_documentation(schema: GraphQLSchema, type_name: Optional[str], field_name: Optional[str]) -> dict[str, Any]:
    """Type and description of one field, or {} if either name is unknown."""
    graphql_type = get_schema_type(schema, type_name)
    fields = getattr(graphql_type, "fields", None) or {}
    field = fields.get(field_name) if field_name else None
    if field is None:
        return {}
    return {"type": str(field.type), "description": field.description}
