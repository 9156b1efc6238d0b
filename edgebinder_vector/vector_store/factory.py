"""Binding store factory.

Centralizes creation of ``OpenSearchBindingStore`` instances so callers don't
depend on client wiring. Two entry points:

- ``BindingStoreFactory.create_adapter(config)`` for frameworks that resolve
  the client from a service container (a mapping of service name to client).
- ``create_binding_store_from_env(settings)`` for standalone use, building
  the client from ``AdapterSettings``.
"""

from typing import Any, Dict, Mapping, Optional

import structlog
from opensearchpy import OpenSearch

from ..common.config import AdapterSettings
from .base import AdapterError
from .opensearch import OpenSearchBindingStore

logger = structlog.get_logger("vector_store.factory")

DEFAULT_CLIENT_SERVICE = "opensearch.client.default"


class BindingStoreFactory:
    """Factory for creating OpenSearch binding store instances.

    The configuration mapping contains:
    - ``container``: mapping of service names to clients
    - ``instance``: adapter-specific options
    - ``global``: framework-wide options

    Instance options:
    - ``opensearch_client``: container service name (default
      ``opensearch.client.default``)
    - ``collection_name``: non-empty index name
    - ``schema``, ``performance``: option dicts passed to the store
    """

    adapter_type = "opensearch"

    def create_adapter(self, config: Mapping[str, Any]) -> OpenSearchBindingStore:
        """Create a binding store from framework configuration.

        Raises
        - ``AdapterError`` if the configuration is invalid or creation fails
        """
        try:
            self._validate_configuration(config)

            instance_config = config["instance"]
            service_name = instance_config.get("opensearch_client", DEFAULT_CLIENT_SERVICE)
            client = self._get_client(config["container"], service_name)

            adapter_config = self._build_adapter_config(instance_config, config["global"])
            store = OpenSearchBindingStore(client, adapter_config)
            logger.info(
                "Binding store created",
                adapter_type=self.adapter_type,
                collection_name=store.collection_name
            )
            return store
        except AdapterError:
            raise
        except Exception as e:
            logger.error("Binding store creation failed", adapter_type=self.adapter_type, error=str(e))
            raise AdapterError.creation_failed(self.adapter_type, str(e)) from e

    def _validate_configuration(self, config: Mapping[str, Any]) -> None:
        missing = [key for key in ("container", "instance", "global") if config.get(key) is None]
        if missing:
            raise AdapterError.missing_configuration(self.adapter_type, missing)

        if not isinstance(config["container"], Mapping):
            raise AdapterError.invalid_configuration(
                self.adapter_type, "Container must be a mapping of service names to services"
            )
        if not isinstance(config["instance"], dict):
            raise AdapterError.invalid_configuration(
                self.adapter_type, "Instance configuration must be a dict"
            )
        if not isinstance(config["global"], dict):
            raise AdapterError.invalid_configuration(
                self.adapter_type, "Global configuration must be a dict"
            )

    def _get_client(self, container: Mapping[str, Any], service_name: str) -> OpenSearch:
        if service_name not in container:
            raise AdapterError.invalid_configuration(
                self.adapter_type, f"OpenSearch client service '{service_name}' not found in container"
            )

        client = container[service_name]
        if not isinstance(client, OpenSearch):
            raise AdapterError.invalid_configuration(
                self.adapter_type,
                f"Service '{service_name}' must return an OpenSearch instance, got {type(client).__name__}"
            )

        try:
            reachable = client.ping()
        except Exception as e:
            raise AdapterError.creation_failed(
                self.adapter_type, f"OpenSearch client connection test failed: {e}"
            ) from e
        if not reachable:
            raise AdapterError.creation_failed(
                self.adapter_type, "OpenSearch client connection test failed: ping returned False"
            )

        return client

    def _build_adapter_config(
        self,
        instance_config: Dict[str, Any],
        global_config: Dict[str, Any]
    ) -> Dict[str, Any]:
        config: Dict[str, Any] = {}

        if "collection_name" in instance_config:
            collection_name = instance_config["collection_name"]
            if not isinstance(collection_name, str) or not collection_name:
                raise AdapterError.invalid_configuration(
                    self.adapter_type, "Collection name must be a non-empty string"
                )
            config["collection_name"] = collection_name

        for key in ("schema", "performance"):
            if key in instance_config:
                if not isinstance(instance_config[key], dict):
                    raise AdapterError.invalid_configuration(
                        self.adapter_type, f"{key.capitalize()} configuration must be a dict"
                    )
                config[key] = instance_config[key]

        if global_config.get("debug"):
            config["debug"] = True

        return config


def create_opensearch_client(settings: AdapterSettings) -> OpenSearch:
    """Create an OpenSearch client from settings."""
    hosts = settings.host_list()
    if not hosts:
        raise ValueError("OpenSearch requires at least one host in EDGEBINDER_OPENSEARCH_HOSTS")

    username = settings.opensearch_username
    password = settings.opensearch_password
    return OpenSearch(
        hosts=hosts,
        http_auth=(username, password) if username and password else None,
        verify_certs=settings.opensearch_verify_certs,
        ssl_assert_hostname=settings.opensearch_ssl_assert_hostname,
        ssl_show_warn=settings.opensearch_ssl_show_warn,
        use_ssl=hosts[0].startswith("https"),
    )


def create_binding_store_from_env(
    settings: Optional[AdapterSettings] = None,
    client: Optional[OpenSearch] = None,
) -> OpenSearchBindingStore:
    """Create a binding store from ``EDGEBINDER_*`` settings.

    Parameters
    - settings: Settings to use; read from the environment when omitted
    - client: Pre-built client; created from ``settings`` when omitted
    """
    settings = settings or AdapterSettings()
    client = client or create_opensearch_client(settings)
    return OpenSearchBindingStore(client, settings.to_adapter_config())
