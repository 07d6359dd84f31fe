"""Asset that generates the common manifests installed in every cluster.

The manifests are either generated from the full graph of assets or loaded
as-is from a previous run. Generation redacts the install config into the
`kube-system/cluster-config-v1` ConfigMap, binds every bootkube template
against a fixed record of identifiers and certificates, then merges the
result with the cluster configuration objects into one ordered file list.
"""

import base64
from dataclasses import dataclass
from enum import StrEnum
import logging
import posixpath

import yaml

from cluster_assets.asset import Asset, File, Parents, merge_files, sort_files
from cluster_assets.exceptions import PersistedStateError, SynthesisError
from cluster_assets.fetcher import FileFetcher
from cluster_assets.installconfig import ClusterID, InstallConfigAsset
from cluster_assets.redact import redacted_install_config
from cluster_assets.store import Store
from cluster_assets.template import TemplateBinder
from cluster_assets.templates import BOOTKUBE_TEMPLATE_NAMES, Template
from cluster_assets import tls

from .config_object import ConfigurationObject, config_map
from .facts import DNS, Infrastructure, Ingress, Networking

__all__ = [
    "Manifests",
    "ManifestState",
    "BootkubeTemplateData",
    "MANIFEST_DIR",
    "KUBE_SYS_CONFIG_PATH",
]

_LOGGER = logging.getLogger(__name__)

MANIFEST_DIR = "manifests"
KUBE_SYS_CONFIG_PATH = f"{MANIFEST_DIR}/cluster-config.yaml"
KUBE_SYS_CONFIG_NAMESPACE = "kube-system"
KUBE_SYS_CONFIG_NAME = "cluster-config-v1"
INSTALL_CONFIG_KEY = "install-config"
TEMPLATE_SUFFIX = ".template"

FACT_ASSETS = [
    Ingress.NAME,
    DNS.NAME,
    Infrastructure.NAME,
    Networking.NAME,
]

TLS_ASSETS = [
    tls.ROOT_CA,
    tls.ETCD_CA,
    tls.ETCD_SIGNER,
    tls.ETCD_CA_BUNDLE,
    tls.ETCD_SIGNER_CLIENT,
    tls.ETCD_CLIENT,
    tls.ETCD_METRIC_SIGNER,
    tls.ETCD_METRIC_CA_BUNDLE,
    tls.ETCD_METRIC_SIGNER_CLIENT,
    tls.MCS_CERT_KEY,
]


class ManifestState(StrEnum):
    """Lifecycle of the manifests within a single generate or load operation."""

    UNINITIALIZED = "Uninitialized"
    RESOLVING = "Resolving"
    SYNTHESIZED = "Synthesized"
    RESTORED = "Restored"
    FAILED = "Failed"


@dataclass(frozen=True)
class BootkubeTemplateData:
    """Values available to the bootkube templates.

    Certificates and keys placed in Secrets are base64 encoded, while
    certificates placed in ConfigMaps are PEM text.
    """

    cvo_cluster_id: str
    etcd_ca_bundle: str
    etcd_ca_cert: str
    etcd_client_ca_cert: str
    etcd_client_ca_key: str
    etcd_client_cert: str
    etcd_client_key: str
    etcd_endpoint_dns_suffix: str
    etcd_endpoint_hostnames: list[str]
    etcd_metric_ca_cert: str
    etcd_metric_client_cert: str
    etcd_metric_client_key: str
    etcd_signer_cert: str
    etcd_signer_client_cert: str
    etcd_signer_client_key: str
    etcd_signer_key: str
    mcs_tls_cert: str
    mcs_tls_key: str
    pull_secret_base64: str
    root_ca_cert: str


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def etcd_endpoint_hostnames(replicas: int) -> list[str]:
    """Return the etcd member hostnames for the control plane replica count."""
    return [f"etcd-{i}" for i in range(replicas)]


class Manifests(Asset):
    """Generates the dependent operator config files."""

    NAME = "Common Manifests"

    def __init__(self, templates: list[str] | None = None) -> None:
        """Initialize Manifests.

        Args:
            templates: Names of the template assets to bind, defaulting to
                every bootkube template.
        """
        self._templates = (
            list(templates) if templates is not None else list(BOOTKUBE_TEMPLATE_NAMES)
        )
        self._state = ManifestState.UNINITIALIZED
        self._files: list[File] = []
        self.kube_sys_config: ConfigurationObject | None = None

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def state(self) -> ManifestState:
        return self._state

    def _set_state(self, state: ManifestState) -> None:
        _LOGGER.debug("Manifests %s -> %s", self._state, state)
        self._state = state

    def dependencies(self) -> list[str]:
        return [
            ClusterID.NAME,
            InstallConfigAsset.NAME,
            *FACT_ASSETS,
            *TLS_ASSETS,
            *self._templates,
        ]

    async def resolve(self, store: Store) -> None:
        """Generate the manifests and their dependencies through the store.

        The store must have been created with this asset.
        """
        self._set_state(ManifestState.RESOLVING)
        try:
            resolved = await store.resolve(self.name)
            if resolved is not self:
                raise SynthesisError(
                    "Store resolved a different manifests asset", asset_name=self.name
                )
        except Exception:
            self._set_state(ManifestState.FAILED)
            raise

    async def generate(self, parents: Parents) -> None:
        try:
            self._files = self._generate(parents)
        except Exception:
            self._set_state(ManifestState.FAILED)
            raise
        self._set_state(ManifestState.SYNTHESIZED)
        _LOGGER.info("Generated %d manifests", len(self._files))

    def _generate(self, parents: Parents) -> list[File]:
        install_config = parents.get_asset(InstallConfigAsset.NAME, InstallConfigAsset)

        redacted = redacted_install_config(install_config.config)
        kube_sys_config = config_map(
            KUBE_SYS_CONFIG_NAMESPACE,
            KUBE_SYS_CONFIG_NAME,
            {INSTALL_CONFIG_KEY: redacted},
        )
        try:
            kube_sys_config_data = kube_sys_config.yaml().encode()
        except (yaml.YAMLError, ValueError) as err:
            raise SynthesisError(
                f"Failed to create {KUBE_SYS_CONFIG_NAMESPACE}/{KUBE_SYS_CONFIG_NAME} configmap: {err}"
            ) from err
        self.kube_sys_config = kube_sys_config

        return merge_files(
            [File(KUBE_SYS_CONFIG_PATH, kube_sys_config_data)],
            self._generate_bootkube_manifests(parents),
            *(parents.get_asset(name, Asset).files() for name in FACT_ASSETS),
        )

    def template_data(self, parents: Parents) -> BootkubeTemplateData:
        """Return the values bound into the bootkube templates."""
        cluster_id = parents.get_asset(ClusterID.NAME, ClusterID)
        install_config = parents.get_asset(InstallConfigAsset.NAME, InstallConfigAsset)

        def cert_key(name: str) -> tls.CertKey:
            return parents.get_asset(name, tls.CertKey)

        def bundle(name: str) -> tls.CertBundle:
            return parents.get_asset(name, tls.CertBundle)

        if cluster_id.uuid is None:
            raise SynthesisError("Cluster ID has not been generated")
        etcd_ca = cert_key(tls.ETCD_CA)
        etcd_client = cert_key(tls.ETCD_CLIENT)
        etcd_metric_client = cert_key(tls.ETCD_METRIC_SIGNER_CLIENT)
        etcd_signer = cert_key(tls.ETCD_SIGNER)
        etcd_signer_client = cert_key(tls.ETCD_SIGNER_CLIENT)
        mcs = cert_key(tls.MCS_CERT_KEY)
        return BootkubeTemplateData(
            cvo_cluster_id=cluster_id.uuid,
            etcd_ca_bundle=_b64(bundle(tls.ETCD_CA_BUNDLE).cert()),
            etcd_ca_cert=etcd_ca.cert().decode(),
            etcd_client_ca_cert=_b64(etcd_ca.cert()),
            etcd_client_ca_key=_b64(etcd_ca.key()),
            etcd_client_cert=_b64(etcd_client.cert()),
            etcd_client_key=_b64(etcd_client.key()),
            etcd_endpoint_dns_suffix=install_config.config.cluster_domain(),
            etcd_endpoint_hostnames=etcd_endpoint_hostnames(
                install_config.control_plane_replicas
            ),
            etcd_metric_ca_cert=bundle(tls.ETCD_METRIC_CA_BUNDLE).cert().decode(),
            etcd_metric_client_cert=_b64(etcd_metric_client.cert()),
            etcd_metric_client_key=_b64(etcd_metric_client.key()),
            etcd_signer_cert=_b64(etcd_signer.cert()),
            etcd_signer_client_cert=_b64(etcd_signer_client.cert()),
            etcd_signer_client_key=_b64(etcd_signer_client.key()),
            etcd_signer_key=_b64(etcd_signer.key()),
            mcs_tls_cert=_b64(mcs.cert()),
            mcs_tls_key=_b64(mcs.key()),
            pull_secret_base64=_b64(install_config.config.pull_secret.encode()),
            root_ca_cert=cert_key(tls.ROOT_CA).cert().decode(),
        )

    def _generate_bootkube_manifests(self, parents: Parents) -> list[File]:
        binder = TemplateBinder(self.template_data(parents))
        files = []
        for name in self._templates:
            template = parents.get_asset(name, Template)
            for f in template.files():
                filename = posixpath.basename(f.filename).removesuffix(TEMPLATE_SUFFIX)
                files.append(
                    File(
                        filename=f"{MANIFEST_DIR}/{filename}",
                        data=binder.bind(f.data, name=f.filename),
                    )
                )
        return files

    async def load(self, fetcher: FileFetcher) -> bool:
        """Load the manifests written by a previous run.

        The manifests are only considered present when the cluster config
        is among them; any other files in the directory alone are ignored.
        """
        try:
            file_list = await fetcher.fetch_by_pattern(f"{MANIFEST_DIR}/*")
        except OSError as err:
            self._set_state(ManifestState.FAILED)
            raise PersistedStateError(
                f"Failed to read {MANIFEST_DIR}: {err}", asset_name=self.name
            ) from err
        if not file_list:
            return False

        kube_sys_config: ConfigurationObject | None = None
        for file in file_list:
            if file.filename != KUBE_SYS_CONFIG_PATH:
                continue
            try:
                kube_sys_config = ConfigurationObject.parse_yaml(file.data)
            except ValueError as err:
                self._set_state(ManifestState.FAILED)
                raise PersistedStateError(
                    f"Failed to unmarshal {KUBE_SYS_CONFIG_PATH}: {err}",
                    asset_name=self.name,
                ) from err

        if kube_sys_config is None:
            _LOGGER.warning(
                "Found %d files in %s without %s; ignoring them",
                len(file_list),
                MANIFEST_DIR,
                KUBE_SYS_CONFIG_PATH,
            )
            return False

        self._files = list(file_list)
        sort_files(self._files)
        self.kube_sys_config = kube_sys_config
        self._set_state(ManifestState.RESTORED)
        _LOGGER.info("Loaded %d manifests", len(self._files))
        return True

    def files(self) -> list[File]:
        return list(self._files)
