"""Tests for the binding store adapter.

Unit tests cover the query builder, result container, mappers, criteria
transformer, store and factory. The OpenSearch client is replaced by mocks;
nothing here needs a running cluster.
"""
