"""
Builtin example schema, used until a project schema is loaded.

A small Relay-style Todo/Star Wars schema: Node interface, connections with
edges and PageInfo, and a few plain object types.
"""

from __future__ import annotations

from graphql import GraphQLSchema, build_schema


BUILTIN_SCHEMA_SDL = '''
"""An object with an ID"""
interface Node {
  """The id of the object."""
  id: ID!
}

"""Information about pagination in a connection."""
type PageInfo {
  """When paginating forwards, are there more items?"""
  hasNextPage: Boolean!

  """When paginating backwards, are there more items?"""
  hasPreviousPage: Boolean!

  """When paginating backwards, the cursor to continue."""
  startCursor: String

  """When paginating forwards, the cursor to continue."""
  endCursor: String
}

"""A user of the Todo app"""
type User implements Node {
  """The ID of an object"""
  id: ID!
  name: String
  todos(status: TodoStatus = any, after: String, first: Int, before: String, last: Int): TodoConnection
  totalCount: Int
  completedCount: Int
}

enum TodoStatus {
  any
  active
  completed
}

"""A single todo item"""
type Todo implements Node {
  """The ID of an object"""
  id: ID!
  text: String
  complete: Boolean
}

"""A connection to a list of items."""
type TodoConnection {
  """Information to aid in pagination."""
  pageInfo: PageInfo!

  """A list of edges."""
  edges: [TodoEdge]
}

"""An edge in a connection."""
type TodoEdge {
  """The item at the end of the edge"""
  node: Todo

  """A cursor for use in pagination"""
  cursor: String!
}

"""A ship in the Star Wars saga"""
type Ship implements Node {
  """The ID of an object"""
  id: ID!

  """The name of the ship."""
  name: String
}

"""A faction in the Star Wars saga"""
type Faction implements Node {
  """The ID of an object"""
  id: ID!

  """The name of the faction."""
  name: String

  """The ships used by the faction."""
  ships(after: String, first: Int, before: String, last: Int): ShipConnection
}

"""A connection to a list of items."""
type ShipConnection {
  """Information to aid in pagination."""
  pageInfo: PageInfo!

  """A list of edges."""
  edges: [ShipEdge]
}

"""An edge in a connection."""
type ShipEdge {
  """The item at the end of the edge"""
  node: Ship

  """A cursor for use in pagination"""
  cursor: String!
}

type Query {
  viewer: User

  """Fetches an object given its ID"""
  node(
    """The ID of an object"""
    id: ID!
  ): Node
  rebels: Faction
  empire: Faction
}

input AddTodoInput {
  text: String!
  clientMutationId: String
}

type AddTodoPayload {
  todoEdge: TodoEdge
  viewer: User
  clientMutationId: String
}

type Mutation {
  addTodo(input: AddTodoInput!): AddTodoPayload
}
'''


def build_builtin_schema() -> GraphQLSchema:
    """Build a fresh GraphQLSchema from BUILTIN_SCHEMA_SDL."""
    return build_schema(BUILTIN_SCHEMA_SDL)
