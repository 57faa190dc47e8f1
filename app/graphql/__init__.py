from app.graphql.context import build_context, create_graphql_router
from app.graphql.schema import schema

__all__ = ["build_context", "create_graphql_router", "schema"]
