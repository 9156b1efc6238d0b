"""Relationship (binding) persistence on top of a vector-search database.

Subpackages:
- ``edgebinder_vector.query``: immutable query builder and result container.
- ``edgebinder_vector.vector_store``: store interface and OpenSearch backend.
- ``edgebinder_vector.common``: configuration and structured logging.

Usage:
- ``store = create_binding_store_from_env()``
- ``store.query().from_(workspace).type("has_access").get()``
"""

__version__ = "0.1.0"
