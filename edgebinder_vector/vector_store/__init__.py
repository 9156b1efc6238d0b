"""Binding store adapters and utilities.

Primary components:
- ``base``: abstract ``BindingStore`` interface and store exceptions.
- ``opensearch``: OpenSearch implementation of the interface.
- ``mapping``/``transformer``: document mapping and criteria rendering.
- ``factory``: helpers to construct a store from framework config or env.

Guidance:
- Prefer ``factory.create_binding_store_from_env`` or
  ``BindingStoreFactory.create_adapter`` over wiring the store by hand.
"""
