"""Library for building the cluster manifests into an output directory.

This either loads the manifests written by a previous run to the output
directory, or generates them from a fresh set of assets.

Example usage:
```
from cluster_assets import builder

assets = builder.default_assets(install_config, cert_source)
manifests = await builder.build_manifests(output_dir, assets)
await builder.write_manifests(output_dir, manifests)
```
"""

import logging
from pathlib import Path

from .asset import Asset
from .context import trace_context
from .fetcher import DirectoryFileFetcher, write_files
from .installconfig import ClusterID, InstallConfig, InstallConfigAsset
from .manifests import DNS, Infrastructure, Ingress, Manifests, Networking
from .store import InMemoryStore, StoreConfig
from .templates import bootkube_templates
from .tls import CertKeySource, tls_assets

__all__ = [
    "default_assets",
    "build_manifests",
    "write_manifests",
]

_LOGGER = logging.getLogger(__name__)


def default_assets(
    install_config: InstallConfig,
    cert_source: CertKeySource | None,
    cluster_id: ClusterID | None = None,
) -> list[Asset]:
    """Return a new set of the assets the manifests depend on.

    A new set must be created for every run since assets hold their
    resolved values.
    """
    return [
        InstallConfigAsset(install_config),
        cluster_id or ClusterID(),
        Ingress(),
        DNS(),
        Infrastructure(),
        Networking(),
        *tls_assets(cert_source),
        *bootkube_templates(),
    ]


async def build_manifests(
    directory: Path | None,
    assets: list[Asset],
    config: StoreConfig | None = None,
) -> Manifests:
    """Return the manifests loaded from the directory or generated from the assets.

    Manifests previously written to the directory are used as-is. Otherwise
    every asset is generated without reading the directory.
    """
    config = config or StoreConfig()
    manifests = Manifests()
    if directory is not None and config.restore:
        with trace_context("Load manifests"):
            if await manifests.load(DirectoryFileFetcher(directory)):
                _LOGGER.info("Using manifests from %s", directory)
                return manifests

    store = InMemoryStore([manifests, *assets], config=config)
    with trace_context("Generate manifests"):
        await manifests.resolve(store)
    return manifests


async def write_manifests(directory: Path, manifests: Manifests) -> None:
    """Write the manifests to the output directory."""
    await write_files(directory, manifests.files())
