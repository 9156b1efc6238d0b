"""Utility scripts for operating the binding store.

Scripts include:
- ``bootstrap_index.py``: wait for OpenSearch and create the binding index.
"""
