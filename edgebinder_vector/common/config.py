"""Configuration management for the binding store adapter.

This module centralizes environment-driven configuration for the OpenSearch
binding store. It builds on ``pydantic_settings.BaseSettings`` so
configuration can be provided via environment variables, ``.env`` files, or
defaults.

Highlights
- Strongly-typed settings with sensible defaults
- One place to discover the ``EDGEBINDER_*`` environment variables
- ``to_adapter_config`` renders the nested dict the store expects

Usage
- ``settings = AdapterSettings()`` then
  ``create_binding_store_from_env(settings)``
"""

from typing import Any, Dict, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AdapterSettings(BaseSettings):
    """Settings for the OpenSearch binding store.

    Parameters are read from the process environment with the
    ``EDGEBINDER_`` prefix (e.g. ``EDGEBINDER_COLLECTION_NAME``). Defaults
    keep local development convenient while still being explicit.
    """

    model_config = SettingsConfigDict(
        env_prefix="EDGEBINDER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Collection / index
    collection_name: str = "edge_bindings"
    schema_auto_create: bool = True
    number_of_shards: int = 1
    number_of_replicas: int = 0

    # OpenSearch
    opensearch_hosts: str = "http://localhost:9200"
    opensearch_username: Optional[str] = None
    opensearch_password: Optional[str] = None
    opensearch_verify_certs: bool = False
    opensearch_ssl_assert_hostname: bool = False
    opensearch_ssl_show_warn: bool = False

    # Performance
    batch_size: int = 100
    refresh_on_write: bool = False

    # Metadata
    max_metadata_bytes: int = 64 * 1024

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    debug: bool = False

    def host_list(self) -> List[str]:
        """Split ``opensearch_hosts`` into a list, dropping blanks."""
        return [host.strip() for host in self.opensearch_hosts.split(",") if host.strip()]

    def to_adapter_config(self) -> Dict[str, Any]:
        """Render the nested configuration dict used by the binding store."""
        config: Dict[str, Any] = {
            "collection_name": self.collection_name,
            "schema": {
                "auto_create": self.schema_auto_create,
                "number_of_shards": self.number_of_shards,
                "number_of_replicas": self.number_of_replicas,
            },
            "performance": {
                "batch_size": self.batch_size,
                "refresh": self.refresh_on_write,
            },
            "max_metadata_bytes": self.max_metadata_bytes,
        }
        if self.debug:
            config["debug"] = True
        return config
