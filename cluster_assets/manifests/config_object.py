"""ConfigMap objects written alongside the generated manifests."""

from pydantic import Field

from cluster_assets.model import BaseManifest, ObjectMeta

__all__ = [
    "ConfigurationObject",
    "config_map",
]

CONFIG_MAP_API_VERSION = "v1"
CONFIG_MAP_KIND = "ConfigMap"


class ConfigurationObject(BaseManifest):
    """A ConfigMap holding string key/value configuration for the cluster."""

    api_version: str = CONFIG_MAP_API_VERSION
    kind: str = CONFIG_MAP_KIND
    metadata: ObjectMeta
    data: dict[str, str] = Field(default_factory=dict)


def config_map(namespace: str, name: str, data: dict[str, str]) -> ConfigurationObject:
    """Return a ConfigMap with the specified contents."""
    return ConfigurationObject(
        metadata=ObjectMeta(name=name, namespace=namespace),
        data=data,
    )
