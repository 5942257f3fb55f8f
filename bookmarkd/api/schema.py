"""Strawberry schema and the FastAPI router that serves it at ``/graphql``."""

from __future__ import annotations

from typing import Optional

import strawberry
import structlog
from graphql import GraphQLError
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext

from bookmarkd.api.context import get_context
from bookmarkd.api.mutations import Mutation
from bookmarkd.api.queries import Query
from bookmarkd.exceptions import BookmarkdError

logger = structlog.get_logger()


class BookmarkdSchema(strawberry.Schema):
    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        """Domain failures are expected outcomes; only unexpected ones get a traceback."""
        for error in errors:
            original = error.original_error
            if isinstance(original, BookmarkdError):
                logger.info(
                    "graphql_domain_error",
                    code=original.code,
                    message=original.message,
                    path=error.path,
                )
            elif original is None:
                logger.info("graphql_request_error", message=error.message)
            else:
                logger.error(
                    "graphql_unhandled_error",
                    path=error.path,
                    exc_info=(type(original), original, original.__traceback__),
                )


schema = BookmarkdSchema(query=Query, mutation=Mutation)


def create_graphql_router(graphiql: bool = True) -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context, graphql_ide="graphiql" if graphiql else None)
