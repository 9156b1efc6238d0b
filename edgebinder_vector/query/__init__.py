"""Relationship query building.

Primary components:
- ``builder``: ``BasicQueryBuilder``, the immutable fluent criteria builder.
- ``criteria``: frozen ``QueryCriteria`` records handed to the executing store.
- ``result``: ``QueryResult``, the immutable container of executed results.
- ``base``: the ``QueryBuilder`` interface, ``Capability`` and query errors.
"""

from .base import (
    Capability,
    CapabilityNotAvailableError,
    InvalidQueryArgumentError,
    OperationNotConfiguredError,
    QueryBuilder,
    QueryError,
)
from .builder import BasicQueryBuilder
from .criteria import OrderBy, QueryCriteria, WhereCondition
from .entities import extract_entity_id, extract_entity_type
from .result import QueryResult

__all__ = [
    "BasicQueryBuilder",
    "Capability",
    "CapabilityNotAvailableError",
    "InvalidQueryArgumentError",
    "OperationNotConfiguredError",
    "OrderBy",
    "QueryBuilder",
    "QueryCriteria",
    "QueryError",
    "QueryResult",
    "WhereCondition",
    "extract_entity_id",
    "extract_entity_type",
]
