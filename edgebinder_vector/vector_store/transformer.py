"""Translate query criteria into an OpenSearch search body.

Filters are rendered in ``bool`` filter context (no scoring). Where
conditions on binding columns hit the document field directly; any other
field is looked up under ``metadata``.
"""

from typing import Any, Dict, List, Optional

from ..query.base import InvalidQueryArgumentError
from ..query.criteria import QueryCriteria, WhereCondition

# Field names accepted in where()/order_by() mapped to document fields.
BINDING_FIELDS = {
    "id": "binding_id",
    "binding_id": "binding_id",
    "from_type": "from_entity_type",
    "from_entity_type": "from_entity_type",
    "from_id": "from_entity_id",
    "from_entity_id": "from_entity_id",
    "to_type": "to_entity_type",
    "to_entity_type": "to_entity_type",
    "to_id": "to_entity_id",
    "to_entity_id": "to_entity_id",
    "type": "binding_type",
    "binding_type": "binding_type",
    "created_at": "created_at",
    "updated_at": "updated_at",
}

_RANGE_OPERATORS = {">": "gt", ">=": "gte", "<": "lt", "<=": "lte"}

SORT_DIRECTIONS = ("asc", "desc")


class CriteriaTransformer:
    """Render ``QueryCriteria`` as an OpenSearch query DSL body."""

    def __init__(self, default_size: int = 100):
        self.default_size = default_size

    def resolve_field(self, field: str) -> str:
        if field in BINDING_FIELDS:
            return BINDING_FIELDS[field]
        if field.startswith("metadata."):
            return field
        return f"metadata.{field}"

    def transform_entity(self, entity_type: Optional[str], entity_id: Optional[str], direction: str) -> List[Dict[str, Any]]:
        """Term filters for one endpoint (``direction`` is ``from`` or ``to``)."""
        filters = []
        if entity_type is not None:
            filters.append({"term": {f"{direction}_entity_type": entity_type}})
        if entity_id is not None:
            filters.append({"term": {f"{direction}_entity_id": entity_id}})
        return filters

    def transform_where(self, condition: WhereCondition) -> Dict[str, Any]:
        """Return ``{"filter": clause}`` or ``{"must_not": clause}``."""
        field = self.resolve_field(condition.field)
        operator = condition.operator.upper()
        value = condition.value

        if value is None and operator in ("=", "=="):
            return {"must_not": {"exists": {"field": field}}}
        if value is None and operator in ("!=", "<>"):
            return {"filter": {"exists": {"field": field}}}
        if operator in ("=", "=="):
            return {"filter": {"term": {field: value}}}
        if operator in ("!=", "<>"):
            return {"must_not": {"term": {field: value}}}
        if operator in _RANGE_OPERATORS:
            return {"filter": {"range": {field: {_RANGE_OPERATORS[operator]: value}}}}
        if operator == "IN":
            return {"filter": {"terms": {field: list(value)}}}
        if operator == "NOT IN":
            return {"must_not": {"terms": {field: list(value)}}}
        if operator == "BETWEEN":
            low, high = value
            return {"filter": {"range": {field: {"gte": low, "lte": high}}}}
        if operator == "EXISTS":
            return {"filter": {"exists": {"field": field}}}
        if operator == "IS_NULL":
            return {"must_not": {"exists": {"field": field}}}
        if operator == "LIKE":
            return {"filter": {"wildcard": {field: str(value).replace("%", "*")}}}

        raise InvalidQueryArgumentError(
            f"Unsupported where operator '{condition.operator}' for field '{condition.field}'"
        )

    def transform_order_by(self, field: str, direction: str) -> Dict[str, Any]:
        if direction not in SORT_DIRECTIONS:
            raise InvalidQueryArgumentError(
                f"Invalid sort direction '{direction}'; expected 'asc' or 'desc'"
            )
        return {self.resolve_field(field): {"order": direction}}

    def build_search_body(self, criteria: QueryCriteria) -> Dict[str, Any]:
        """Build the complete search request body."""
        filters: List[Dict[str, Any]] = []
        must_not: List[Dict[str, Any]] = []

        filters.extend(self.transform_entity(criteria.from_entity_type, criteria.from_entity_id, "from"))
        filters.extend(self.transform_entity(criteria.to_entity_type, criteria.to_entity_id, "to"))

        if criteria.binding_type is not None:
            filters.append({"term": {"binding_type": criteria.binding_type}})

        for condition in criteria.where_conditions:
            clause = self.transform_where(condition)
            if "filter" in clause:
                filters.append(clause["filter"])
            else:
                must_not.append(clause["must_not"])

        if filters or must_not:
            bool_query: Dict[str, Any] = {}
            if filters:
                bool_query["filter"] = filters
            if must_not:
                bool_query["must_not"] = must_not
            query: Dict[str, Any] = {"bool": bool_query}
        else:
            query = {"match_all": {}}

        body: Dict[str, Any] = {
            "query": query,
            "size": criteria.limit if criteria.limit is not None else self.default_size,
        }

        if criteria.offset is not None:
            body["from"] = criteria.offset

        if criteria.order_by is not None:
            body["sort"] = [
                self.transform_order_by(criteria.order_by.field, criteria.order_by.direction)
            ]

        return body
