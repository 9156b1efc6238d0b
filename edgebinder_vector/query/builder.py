"""Basic query builder for the binding store.

The builder accumulates criteria through chained calls, each returning a new
builder, and defers execution to a callback supplied by the store that
created it. Only ``get()`` executes; ``first()``, ``count()``, ``exists()``,
OR groups and similarity search wait on a richer query backend and raise
``CapabilityNotAvailableError`` instead of being emulated client-side.
"""

from dataclasses import replace
from typing import Any, Callable, Iterable, Optional, Sequence

from .base import (
    Capability,
    CapabilityNotAvailableError,
    InvalidQueryArgumentError,
    OperationNotConfiguredError,
    QueryBuilder,
)
from .criteria import (
    OPERATOR_BETWEEN,
    OPERATOR_EQUALS,
    OPERATOR_EXISTS,
    OPERATOR_IN,
    OPERATOR_IS_NULL,
    OrderBy,
    QueryCriteria,
    WhereCondition,
)
from .entities import extract_entity_id, extract_entity_type

ExecuteCallback = Callable[["BasicQueryBuilder"], Any]

_MISSING = object()


class BasicQueryBuilder(QueryBuilder):
    """Immutable query builder bound to a client and a collection.

    The client handle is never used here; it travels with the builder so the
    execute callback can reach it.
    """

    def __init__(
        self,
        client: Any,
        collection_name: str,
        criteria: Optional[QueryCriteria] = None,
        execute_callback: Optional[ExecuteCallback] = None,
    ):
        self._client = client
        self._collection_name = collection_name
        self._criteria = criteria if criteria is not None else QueryCriteria()
        self._execute_callback = execute_callback

    @property
    def client(self) -> Any:
        return self._client

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def execute_callback(self) -> Optional[ExecuteCallback]:
        return self._execute_callback

    def set_execute_callback(self, callback: ExecuteCallback) -> "BasicQueryBuilder":
        """Attach the callback that executes the query.

        The callback receives the finished builder and returns the matching
        bindings. Builders derived from this one afterwards inherit it.
        """
        self._execute_callback = callback
        return self

    def _derive(self, **changes: Any) -> "BasicQueryBuilder":
        return BasicQueryBuilder(
            self._client,
            self._collection_name,
            replace(self._criteria, **changes),
            self._execute_callback,
        )

    def _with_condition(self, field: str, operator: str, value: Any = None) -> "BasicQueryBuilder":
        conditions = self._criteria.where_conditions + (WhereCondition(field, operator, value),)
        return self._derive(where_conditions=conditions)

    @staticmethod
    def _resolve_endpoint(entity: Any, entity_id: Optional[str]):
        if isinstance(entity, str):
            if entity_id is None:
                raise InvalidQueryArgumentError(
                    "Entity ID is required when entity is provided as string"
                )
            return entity, entity_id
        resolved_id = extract_entity_id(entity)
        return extract_entity_type(entity), resolved_id

    def from_(self, entity: Any, entity_id: Optional[str] = None) -> "BasicQueryBuilder":
        """Filter bindings by source entity.

        Accepts an entity object or a ``(type_name, entity_id)`` pair.
        """
        entity_type, resolved_id = self._resolve_endpoint(entity, entity_id)
        return self._derive(from_entity_type=entity_type, from_entity_id=resolved_id)

    def to(self, entity: Any, entity_id: Optional[str] = None) -> "BasicQueryBuilder":
        """Filter bindings by target entity."""
        entity_type, resolved_id = self._resolve_endpoint(entity, entity_id)
        return self._derive(to_entity_type=entity_type, to_entity_id=resolved_id)

    def type(self, binding_type: str) -> "BasicQueryBuilder":
        return self._derive(binding_type=binding_type)

    def where(self, field: str, operator: Any, value: Any = _MISSING) -> "BasicQueryBuilder":
        """Add a condition on ``field``.

        ``where(field, value)`` compares for equality;
        ``where(field, operator, value)`` uses the given operator.
        """
        if value is _MISSING:
            return self._with_condition(field, OPERATOR_EQUALS, operator)
        return self._with_condition(field, str(operator), value)

    def where_in(self, field: str, values: Iterable[Any]) -> "BasicQueryBuilder":
        return self._with_condition(field, OPERATOR_IN, tuple(values))

    def where_between(self, field: str, min_value: Any, max_value: Any) -> "BasicQueryBuilder":
        return self._with_condition(field, OPERATOR_BETWEEN, (min_value, max_value))

    def where_exists(self, field: str) -> "BasicQueryBuilder":
        return self._with_condition(field, OPERATOR_EXISTS)

    def where_null(self, field: str) -> "BasicQueryBuilder":
        """Match bindings where ``field`` is null or missing."""
        return self._with_condition(field, OPERATOR_IS_NULL)

    def or_where(self, callback: Callable[[QueryBuilder], QueryBuilder]) -> "BasicQueryBuilder":
        raise CapabilityNotAvailableError(Capability.OR_CONDITIONS, "or_where")

    def order_by(self, field: str, direction: str = "asc") -> "BasicQueryBuilder":
        # Direction is not validated here; the executing store rejects bad values.
        return self._derive(order_by=OrderBy(field, direction.lower()))

    def limit(self, limit: int) -> "BasicQueryBuilder":
        return self._derive(limit=limit)

    def offset(self, offset: int) -> "BasicQueryBuilder":
        return self._derive(offset=offset)

    def reset(self) -> "BasicQueryBuilder":
        """Return a builder with every filter cleared."""
        return BasicQueryBuilder(
            self._client,
            self._collection_name,
            execute_callback=self._execute_callback,
        )

    def get(self) -> Any:
        """Execute the query through the execute callback.

        Raises
        - ``OperationNotConfiguredError`` if no callback is attached
        """
        if self._execute_callback is None:
            raise OperationNotConfiguredError(
                "Query execution callback not set. "
                "Use set_execute_callback() to enable query execution."
            )
        return self._execute_callback(self)

    def first(self) -> Any:
        raise CapabilityNotAvailableError(Capability.FIRST_RESULT, "first")

    def count(self) -> int:
        raise CapabilityNotAvailableError(Capability.RESULT_COUNT, "count")

    def exists(self) -> bool:
        raise CapabilityNotAvailableError(Capability.EXISTENCE_CHECK, "exists")

    def near_text(self, concepts: Sequence[str], certainty: float = 0.7) -> "BasicQueryBuilder":
        raise CapabilityNotAvailableError(Capability.SEMANTIC_SEARCH, "near_text")

    def near_vector(self, vector: Sequence[float], certainty: float = 0.7) -> "BasicQueryBuilder":
        raise CapabilityNotAvailableError(Capability.VECTOR_SEARCH, "near_vector")

    def get_criteria(self) -> QueryCriteria:
        return self._criteria

    def __repr__(self) -> str:
        return (
            f"BasicQueryBuilder(collection_name={self._collection_name!r}, "
            f"criteria={self._criteria!r})"
        )
