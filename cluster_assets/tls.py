"""Certificate and key assets.

Creating key material is delegated to a `CertKeySource`, a callable that
returns PEM encoded certificate and key bytes for a named certificate given
the asset holding its signer (None for self-signed authorities). The assets
in this module only track which certificate is signed by which, persist the
material under `tls/` and restore it on later runs.
"""

from collections.abc import Callable
import logging

from .asset import Asset, File, Parents
from .exceptions import PersistedStateError, SynthesisError
from .fetcher import FileFetcher

__all__ = [
    "CertKey",
    "CertBundle",
    "CertKeySource",
    "tls_assets",
]

_LOGGER = logging.getLogger(__name__)

TLS_DIR = "tls"
CERT_MARKER = b"-----BEGIN CERTIFICATE-----"
KEY_MARKER = b"PRIVATE KEY-----"

ROOT_CA = "Root CA"
ETCD_CA = "Etcd CA"
ETCD_SIGNER = "Etcd Signer Cert Key"
ETCD_CA_BUNDLE = "Etcd CA Bundle"
ETCD_SIGNER_CLIENT = "Etcd Signer Client Cert Key"
ETCD_CLIENT = "Etcd Client Cert Key"
ETCD_METRIC_SIGNER = "Etcd Metric Signer Cert Key"
ETCD_METRIC_CA_BUNDLE = "Etcd Metric CA Bundle"
ETCD_METRIC_SIGNER_CLIENT = "Etcd Metric Signer Client Cert Key"
MCS_CERT_KEY = "Machine Config Server Cert Key"


class CertKey(Asset):
    """A certificate and private key, optionally signed by another CertKey."""

    def __init__(
        self,
        name: str,
        base_filename: str,
        source: "CertKeySource | None",
        signer: str | None = None,
    ) -> None:
        """Initialize CertKey."""
        self._name = name
        self._base_filename = base_filename
        self._source = source
        self._signer = signer
        self._cert: bytes | None = None
        self._key: bytes | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def cert_path(self) -> str:
        return f"{TLS_DIR}/{self._base_filename}.crt"

    @property
    def key_path(self) -> str:
        return f"{TLS_DIR}/{self._base_filename}.key"

    def cert(self) -> bytes:
        """Return the PEM encoded certificate."""
        if self._cert is None:
            raise SynthesisError(f"Certificate {self._name} has not been generated")
        return self._cert

    def key(self) -> bytes:
        """Return the PEM encoded private key."""
        if self._key is None:
            raise SynthesisError(f"Key {self._name} has not been generated")
        return self._key

    def dependencies(self) -> list[str]:
        return [self._signer] if self._signer else []

    async def generate(self, parents: Parents) -> None:
        if self._source is None:
            raise SynthesisError("No certificate source configured")
        signer = parents.get_asset(self._signer, CertKey) if self._signer else None
        cert, key = self._source(self._name, signer)
        if CERT_MARKER not in cert:
            raise SynthesisError("Certificate source returned an invalid certificate")
        if KEY_MARKER not in key:
            raise SynthesisError("Certificate source returned an invalid key")
        self._cert, self._key = cert, key

    async def load(self, fetcher: FileFetcher) -> bool:
        cert_file = await fetcher.fetch_by_name(self.cert_path)
        key_file = await fetcher.fetch_by_name(self.key_path)
        if cert_file is None and key_file is None:
            return False
        if cert_file is None or key_file is None:
            raise PersistedStateError(
                f"Expected both {self.cert_path} and {self.key_path} on disk"
            )
        if CERT_MARKER not in cert_file.data:
            raise PersistedStateError(f"Invalid certificate in {self.cert_path}")
        if KEY_MARKER not in key_file.data:
            raise PersistedStateError(f"Invalid key in {self.key_path}")
        self._cert, self._key = cert_file.data, key_file.data
        return True

    def files(self) -> list[File]:
        if self._cert is None or self._key is None:
            return []
        return [File(self.cert_path, self._cert), File(self.key_path, self._key)]


CertKeySource = Callable[[str, CertKey | None], tuple[bytes, bytes]]


class CertBundle(Asset):
    """A bundle of the certificates of other CertKey assets."""

    def __init__(self, name: str, base_filename: str, certs: list[str]) -> None:
        """Initialize CertBundle."""
        self._name = name
        self._base_filename = base_filename
        self._certs = certs
        self._bundle: bytes | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def cert_path(self) -> str:
        return f"{TLS_DIR}/{self._base_filename}.crt"

    def cert(self) -> bytes:
        """Return the concatenated PEM encoded certificates."""
        if self._bundle is None:
            raise SynthesisError(f"Bundle {self._name} has not been generated")
        return self._bundle

    def dependencies(self) -> list[str]:
        return list(self._certs)

    async def generate(self, parents: Parents) -> None:
        bundle = b""
        for name in self._certs:
            cert = parents.get_asset(name, CertKey).cert()
            if not cert.endswith(b"\n"):
                cert += b"\n"
            bundle += cert
        self._bundle = bundle

    async def load(self, fetcher: FileFetcher) -> bool:
        if (file := await fetcher.fetch_by_name(self.cert_path)) is None:
            return False
        if CERT_MARKER not in file.data:
            raise PersistedStateError(f"Invalid certificate bundle in {self.cert_path}")
        self._bundle = file.data
        return True

    def files(self) -> list[File]:
        if self._bundle is None:
            return []
        return [File(self.cert_path, self._bundle)]


def tls_assets(source: CertKeySource | None) -> list[Asset]:
    """Return the certificate assets the cluster manifests are built from."""
    return [
        CertKey(ROOT_CA, "root-ca", source),
        CertKey(ETCD_CA, "etcd-ca", source),
        CertKey(ETCD_SIGNER, "etcd-signer", source),
        CertBundle(ETCD_CA_BUNDLE, "etcd-ca-bundle", [ETCD_CA, ETCD_SIGNER]),
        CertKey(ETCD_SIGNER_CLIENT, "etcd-signer-client", source, signer=ETCD_SIGNER),
        CertKey(ETCD_CLIENT, "etcd-client", source, signer=ETCD_CA),
        CertKey(ETCD_METRIC_SIGNER, "etcd-metric-signer", source),
        CertBundle(ETCD_METRIC_CA_BUNDLE, "etcd-metric-ca-bundle", [ETCD_METRIC_SIGNER]),
        CertKey(
            ETCD_METRIC_SIGNER_CLIENT,
            "etcd-metric-signer-client",
            source,
            signer=ETCD_METRIC_SIGNER,
        ),
        CertKey(MCS_CERT_KEY, "machine-config-server", source, signer=ROOT_CA),
    ]
