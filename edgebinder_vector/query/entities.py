"""Entity id/type extraction shared by the query builder and bindings.

Resolution is two-tier: an ``Entity`` instance is asked directly; any other
object is accepted if it exposes callable ``get_id``/``get_type`` accessors.
"""

from typing import Any

from ..models import Entity
from .base import InvalidQueryArgumentError


def _call_accessor(entity: Any, accessor: str) -> str:
    method = getattr(entity, accessor, None)
    if not callable(method):
        raise InvalidQueryArgumentError(
            f"Entity must implement Entity or have a {accessor}() method, "
            f"got {type(entity).__name__}"
        )
    return method()


def extract_entity_id(entity: Any) -> str:
    """Return the id of ``entity``."""
    if isinstance(entity, Entity):
        return entity.get_id()
    return _call_accessor(entity, "get_id")


def extract_entity_type(entity: Any) -> str:
    """Return the type name of ``entity``."""
    if isinstance(entity, Entity):
        return entity.get_type()
    return _call_accessor(entity, "get_type")
