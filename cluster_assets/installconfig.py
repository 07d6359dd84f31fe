"""Install config and cluster identity assets.

The install config is the user supplied description of the cluster. Loading
it from a user facing file format and validating it in depth is left to the
caller; this module models the fields the manifests are built from.
"""

import logging
import re
import secrets
import string
from uuid import uuid4

from pydantic import Field

from .asset import Asset, File, Parents
from .exceptions import PersistedStateError, SynthesisError
from .fetcher import FileFetcher
from .model import BaseManifest, ObjectMeta

__all__ = [
    "InstallConfig",
    "InstallConfigAsset",
    "ClusterID",
    "INSTALL_CONFIG_FILENAME",
]

_LOGGER = logging.getLogger(__name__)

INSTALL_CONFIG_FILENAME = "install-config.yaml"
INSTALL_CONFIG_VERSION = "v1"
DEFAULT_SERVICE_NETWORK = "172.30.0.0/16"
DEFAULT_NETWORK_TYPE = "OpenShiftSDN"

# Infrastructure names are used as prefixes for cloud resources with short
# maximum name lengths.
INFRA_ID_MAX_LEN = 27
INFRA_ID_RANDOM_LEN = 5


class MachinePool(BaseManifest):
    """A pool of machines with the same configuration."""

    name: str
    replicas: int | None = None


class ClusterNetworkEntry(BaseManifest):
    """An IP block from which pod IPs are allocated."""

    cidr: str
    host_prefix: int | None = None


class NetworkConfig(BaseManifest):
    """Cluster networking settings."""

    network_type: str = DEFAULT_NETWORK_TYPE
    cluster_network: list[ClusterNetworkEntry] = Field(default_factory=list)
    service_network: list[str] = Field(
        default_factory=lambda: [DEFAULT_SERVICE_NETWORK]
    )
    machine_cidr: str | None = Field(default=None, alias="machineCIDR")


class AWSPlatform(BaseManifest):
    """Settings for clusters on AWS."""

    region: str
    user_tags: dict[str, str] | None = None


class VSpherePlatform(BaseManifest):
    """Settings for clusters on vSphere."""

    vcenter: str = Field(alias="vCenter")
    username: str
    password: str
    datacenter: str
    default_datastore: str


class NonePlatform(BaseManifest):
    """Settings for clusters on user provisioned infrastructure."""


class Platform(BaseManifest):
    """The platform the cluster is installed on.

    Exactly one variant is expected to be set. Variants that are not modeled
    here are kept as extra keys and passed through unchanged.
    """

    aws: AWSPlatform | None = None
    vsphere: VSpherePlatform | None = None
    none: NonePlatform | None = None

    @property
    def name(self) -> str:
        """Return the name of the configured platform variant."""
        for variant in ("aws", "vsphere", "none"):
            if getattr(self, variant) is not None:
                return variant
        if self.model_extra:
            return next(iter(self.model_extra))
        return ""


class InstallConfig(BaseManifest):
    """The user supplied configuration for a cluster."""

    api_version: str = INSTALL_CONFIG_VERSION
    metadata: ObjectMeta
    base_domain: str
    pull_secret: str
    ssh_key: str | None = None
    control_plane: MachinePool | None = None
    networking: NetworkConfig = Field(default_factory=NetworkConfig)
    platform: Platform = Field(default_factory=Platform)

    def cluster_domain(self) -> str:
        """Return the DNS domain of the cluster."""
        return f"{self.metadata.name}.{self.base_domain}"


class InstallConfigAsset(Asset):
    """Asset holding the install config for a run."""

    NAME = "Install Config"

    def __init__(self, config: InstallConfig | None = None) -> None:
        """Initialize InstallConfigAsset."""
        self._config = config

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def config(self) -> InstallConfig:
        """Return the install config."""
        if self._config is None:
            raise SynthesisError("Install config has not been loaded")
        return self._config

    @property
    def control_plane_replicas(self) -> int:
        """Return the number of control plane machines."""
        control_plane = self.config.control_plane
        if control_plane is None or control_plane.replicas is None:
            raise SynthesisError("Install config is missing controlPlane.replicas")
        return control_plane.replicas

    def _validate(self) -> None:
        if self.control_plane_replicas < 0:
            raise SynthesisError(
                f"Invalid controlPlane.replicas {self.control_plane_replicas}"
            )

    async def generate(self, parents: Parents) -> None:
        if self._config is None:
            raise SynthesisError("No install config was supplied")
        self._validate()

    async def load(self, fetcher: FileFetcher) -> bool:
        if (file := await fetcher.fetch_by_name(INSTALL_CONFIG_FILENAME)) is None:
            return False
        try:
            self._config = InstallConfig.parse_yaml(file.data)
        except ValueError as err:
            raise PersistedStateError(
                f"Failed to parse {INSTALL_CONFIG_FILENAME}: {err}"
            ) from err
        _LOGGER.info("Using install config from %s", INSTALL_CONFIG_FILENAME)
        self._validate()
        return True

    def files(self) -> list[File]:
        if self._config is None:
            return []
        return [File(INSTALL_CONFIG_FILENAME, self._config.yaml().encode())]


def _infra_id(cluster_name: str) -> str:
    """Return a unique name used as a prefix for infrastructure resources."""
    base = re.sub(r"[^a-z0-9-]", "-", cluster_name.lower())
    base = base.strip("-")[: INFRA_ID_MAX_LEN - INFRA_ID_RANDOM_LEN - 1].strip("-")
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(INFRA_ID_RANDOM_LEN))
    if not base:
        return suffix
    return f"{base}-{suffix}"


class ClusterID(Asset):
    """Unique identifiers for the cluster.

    The identifiers can be supplied up front so that separate runs over the
    same inputs produce identical manifests.
    """

    NAME = "Cluster ID"

    def __init__(self, uuid: str | None = None, infra_id: str | None = None) -> None:
        """Initialize ClusterID."""
        self.uuid = uuid
        self.infra_id = infra_id

    @property
    def name(self) -> str:
        return self.NAME

    def dependencies(self) -> list[str]:
        return [InstallConfigAsset.NAME]

    async def generate(self, parents: Parents) -> None:
        install_config = parents.get_asset(InstallConfigAsset.NAME, InstallConfigAsset)
        if self.uuid is None:
            self.uuid = str(uuid4())
        if self.infra_id is None:
            self.infra_id = _infra_id(install_config.config.metadata.name)
        _LOGGER.debug("Cluster %s has infra id %s", self.uuid, self.infra_id)
