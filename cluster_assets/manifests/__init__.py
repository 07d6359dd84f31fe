"""Assets for the manifests installed in every cluster."""

from .config_object import ConfigurationObject, config_map
from .facts import DNS, Infrastructure, Ingress, Networking
from .manifests import (
    KUBE_SYS_CONFIG_PATH,
    MANIFEST_DIR,
    BootkubeTemplateData,
    Manifests,
    ManifestState,
)

__all__ = [
    "ConfigurationObject",
    "config_map",
    "DNS",
    "Infrastructure",
    "Ingress",
    "Networking",
    "KUBE_SYS_CONFIG_PATH",
    "MANIFEST_DIR",
    "BootkubeTemplateData",
    "Manifests",
    "ManifestState",
]
