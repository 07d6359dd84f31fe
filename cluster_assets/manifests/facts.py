"""Cluster configuration manifests derived directly from the install config.

Each asset here emits a single `config.openshift.io` object that is merged
into the manifests unmodified.
"""

from abc import abstractmethod
import logging
from typing import Any

import yaml

from cluster_assets.asset import Asset, File, Parents
from cluster_assets.exceptions import PersistedStateError
from cluster_assets.fetcher import FileFetcher
from cluster_assets.installconfig import ClusterID, InstallConfigAsset
from cluster_assets.model import dump_yaml

__all__ = [
    "Ingress",
    "DNS",
    "Infrastructure",
    "Networking",
]

_LOGGER = logging.getLogger(__name__)

CONFIG_API_VERSION = "config.openshift.io/v1"
CONFIG_NAME = "cluster"
API_SERVER_PORT = 6443

PLATFORM_TYPES = {
    "aws": "AWS",
    "vsphere": "VSphere",
    "none": "None",
}


class ClusterConfigAsset(Asset):
    """Base class for assets emitting one cluster configuration object."""

    NAME: str
    FILENAME: str
    KIND: str

    def __init__(self) -> None:
        """Initialize ClusterConfigAsset."""
        self._data: bytes | None = None

    @property
    def name(self) -> str:
        return self.NAME

    def dependencies(self) -> list[str]:
        return [InstallConfigAsset.NAME]

    @abstractmethod
    def build(self, parents: Parents) -> dict[str, Any]:
        """Return the spec and status of the configuration object."""

    async def generate(self, parents: Parents) -> None:
        doc = {
            "apiVersion": CONFIG_API_VERSION,
            "kind": self.KIND,
            "metadata": {"name": CONFIG_NAME},
            **self.build(parents),
        }
        self._data = dump_yaml(doc).encode()

    async def load(self, fetcher: FileFetcher) -> bool:
        if (file := await fetcher.fetch_by_name(self.FILENAME)) is None:
            return False
        try:
            doc = yaml.safe_load(file.data)
        except yaml.YAMLError as err:
            raise PersistedStateError(f"Failed to parse {self.FILENAME}: {err}") from err
        if not isinstance(doc, dict) or doc.get("kind") != self.KIND:
            raise PersistedStateError(f"Expected a {self.KIND} in {self.FILENAME}")
        self._data = file.data
        return True

    def files(self) -> list[File]:
        if self._data is None:
            return []
        return [File(self.FILENAME, self._data)]


class Ingress(ClusterConfigAsset):
    """Cluster wide ingress configuration."""

    NAME = "Ingress Config"
    FILENAME = "manifests/cluster-ingress-02-config.yml"
    KIND = "Ingress"

    def build(self, parents: Parents) -> dict[str, Any]:
        install_config = parents.get_asset(InstallConfigAsset.NAME, InstallConfigAsset)
        return {"spec": {"domain": f"apps.{install_config.config.cluster_domain()}"}}


class DNS(ClusterConfigAsset):
    """Cluster wide DNS configuration."""

    NAME = "DNS Config"
    FILENAME = "manifests/cluster-dns-02-config.yml"
    KIND = "DNS"

    def build(self, parents: Parents) -> dict[str, Any]:
        install_config = parents.get_asset(InstallConfigAsset.NAME, InstallConfigAsset)
        return {"spec": {"baseDomain": install_config.config.cluster_domain()}}


class Infrastructure(ClusterConfigAsset):
    """Cluster wide infrastructure configuration."""

    NAME = "Infrastructure Config"
    FILENAME = "manifests/cluster-infrastructure-02-config.yml"
    KIND = "Infrastructure"

    def dependencies(self) -> list[str]:
        return [ClusterID.NAME, InstallConfigAsset.NAME]

    def build(self, parents: Parents) -> dict[str, Any]:
        cluster_id = parents.get_asset(ClusterID.NAME, ClusterID)
        config = parents.get_asset(InstallConfigAsset.NAME, InstallConfigAsset).config
        platform = config.platform.name
        return {
            "spec": {"cloudConfig": {"name": ""}},
            "status": {
                "apiServerURL": f"https://api.{config.cluster_domain()}:{API_SERVER_PORT}",
                "etcdDiscoveryDomain": config.cluster_domain(),
                "infrastructureName": cluster_id.infra_id,
                "platform": PLATFORM_TYPES.get(platform, platform),
            },
        }


class Networking(ClusterConfigAsset):
    """Cluster wide network configuration."""

    NAME = "Network Config"
    FILENAME = "manifests/cluster-network-02-config.yml"
    KIND = "Network"

    def build(self, parents: Parents) -> dict[str, Any]:
        install_config = parents.get_asset(InstallConfigAsset.NAME, InstallConfigAsset)
        networking = install_config.config.networking
        return {
            "spec": {
                "clusterNetwork": [
                    entry.compact_dict() for entry in networking.cluster_network
                ],
                "serviceNetwork": list(networking.service_network),
                "networkType": networking.network_type,
            },
        }
