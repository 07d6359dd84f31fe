"""Template bodies for the manifests needed to bootstrap the control plane.

Templates are assets so that a user can edit the copy written under
`templates/bootkube/` and have the edited body picked up on the next run.
Bodies whose filename ends in `.template` reference fields of
`cluster_assets.manifests.BootkubeTemplateData`.
"""

import logging

from cluster_assets.asset import Asset, File, Parents
from cluster_assets.exceptions import PersistedStateError
from cluster_assets.fetcher import FileFetcher

__all__ = [
    "Template",
    "bootkube_templates",
    "BOOTKUBE_TEMPLATE_NAMES",
]

_LOGGER = logging.getLogger(__name__)

TEMPLATE_DIR = "templates/bootkube"


class Template(Asset):
    """A template body for a single manifest."""

    def __init__(self, filename: str, body: str) -> None:
        """Initialize Template."""
        self._filename = filename
        self._body = body.encode()

    @property
    def name(self) -> str:
        return template_name(self._filename)

    @property
    def path(self) -> str:
        return f"{TEMPLATE_DIR}/{self._filename}"

    async def generate(self, parents: Parents) -> None:
        """The built in body is used as is."""

    async def load(self, fetcher: FileFetcher) -> bool:
        if (file := await fetcher.fetch_by_name(self.path)) is None:
            return False
        try:
            file.data.decode()
        except UnicodeDecodeError as err:
            raise PersistedStateError(f"Template {self.path} is not utf-8") from err
        _LOGGER.info("Using template %s from disk", self.path)
        self._body = file.data
        return True

    def files(self) -> list[File]:
        return [File(self.path, self._body)]


def template_name(filename: str) -> str:
    """Return the asset name for a bootkube template file."""
    return f"Bootkube {filename}"


CVO_OVERRIDES = """\
apiVersion: config.openshift.io/v1
kind: ClusterVersion
metadata:
  namespace: openshift-cluster-version
  name: version
spec:
  upstream: https://api.openshift.com/api/upgrades_info/v1/graph
  channel: stable-4.1
  clusterID: {{ cvo_cluster_id }}
"""

ETCD_SERVICE = """\
apiVersion: v1
kind: Service
metadata:
  name: etcd
  namespace: kube-system
  annotations:
    prometheus.io/scrape: "true"
    prometheus.io/scheme: https
  labels:
    k8s-app: etcd
spec:
  type: ClusterIP
  clusterIP: None
  selector:
    k8s-app: etcd
  ports:
  - name: etcd
    port: 2379
    protocol: TCP
"""

HOST_ETCD_SERVICE_ENDPOINTS = """\
apiVersion: v1
kind: Endpoints
metadata:
  name: host-etcd
  namespace: kube-system
  annotations:
    alpha.installer.openshift.io/dns-suffix: {{ etcd_endpoint_dns_suffix }}
subsets:
- addresses:
{%- for hostname in etcd_endpoint_hostnames %}
  - ip: 192.0.2.{{ add(loop.index0, 1) }}
    hostname: {{ hostname }}
{%- endfor %}
  ports:
  - name: etcd
    port: 2379
    protocol: TCP
"""

HOST_ETCD_SERVICE = """\
apiVersion: v1
kind: Service
metadata:
  name: host-etcd
  namespace: kube-system
  labels:
    k8s-app: etcd
spec:
  clusterIP: None
  ports:
  - name: etcd
    port: 2379
    protocol: TCP
"""

KUBE_CLOUD_CONFIG = """\
apiVersion: v1
kind: Secret
metadata:
  name: kube-cloud-cfg
  namespace: kube-system
type: Opaque
data:
  config: ""
"""

KUBE_SYSTEM_CONFIGMAP_ETCD_CA = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: etcd-ca
  namespace: kube-system
data:
  ca-bundle.crt: |
    {{ etcd_ca_cert | indent(4) }}
"""

KUBE_SYSTEM_CONFIGMAP_ETCD_SERVING_CA = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: etcd-serving-ca
  namespace: kube-system
data:
  ca-bundle.crt: |
    {{ etcd_ca_cert | indent(4) }}
"""

KUBE_SYSTEM_CONFIGMAP_ROOT_CA = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: root-ca
  namespace: kube-system
data:
  ca.crt: |
    {{ root_ca_cert | indent(4) }}
"""

KUBE_SYSTEM_SECRET_ETCD_CLIENT = """\
apiVersion: v1
kind: Secret
metadata:
  name: etcd-client
  namespace: kube-system
type: SecretTypeTLS
data:
  tls.crt: {{ etcd_client_cert }}
  tls.key: {{ etcd_client_key }}
"""

KUBE_SYSTEM_SECRET_ETCD_CLIENT_CA = """\
apiVersion: v1
kind: Secret
metadata:
  name: etcd-client-ca
  namespace: kube-system
type: SecretTypeTLS
data:
  tls.crt: {{ etcd_client_ca_cert }}
  tls.key: {{ etcd_client_ca_key }}
"""

KUBE_SYSTEM_SECRET_ETCD_SIGNER = """\
apiVersion: v1
kind: Secret
metadata:
  name: etcd-signer
  namespace: kube-system
type: SecretTypeTLS
data:
  tls.crt: {{ etcd_signer_cert }}
  tls.key: {{ etcd_signer_key }}
"""

KUBE_SYSTEM_SECRET_ETCD_SIGNER_CLIENT = """\
apiVersion: v1
kind: Secret
metadata:
  name: etcd-signer-client
  namespace: kube-system
type: SecretTypeTLS
data:
  ca-bundle.crt: {{ etcd_ca_bundle }}
  tls.crt: {{ etcd_signer_client_cert }}
  tls.key: {{ etcd_signer_client_key }}
"""

MACHINE_CONFIG_SERVER_TLS_SECRET = """\
apiVersion: v1
kind: Secret
metadata:
  name: machine-config-server-tls
  namespace: openshift-machine-config-operator
type: kubernetes.io/tls
data:
  tls.crt: {{ mcs_tls_cert }}
  tls.key: {{ mcs_tls_key }}
"""

OPENSHIFT_CONFIG_CONFIGMAP_ETCD_METRIC_SERVING_CA = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: etcd-metric-serving-ca
  namespace: openshift-config
data:
  ca-bundle.crt: |
    {{ etcd_metric_ca_cert | indent(4) }}
"""

OPENSHIFT_CONFIG_SECRET_ETCD_METRIC_CLIENT = """\
apiVersion: v1
kind: Secret
metadata:
  name: etcd-metric-client
  namespace: openshift-config
type: SecretTypeTLS
data:
  tls.crt: {{ etcd_metric_client_cert }}
  tls.key: {{ etcd_metric_client_key }}
"""

OPENSHIFT_CONFIG_SECRET_PULL_SECRET = """\
apiVersion: v1
kind: Secret
metadata:
  name: pull-secret
  namespace: openshift-config
type: kubernetes.io/dockerconfigjson
data:
  .dockerconfigjson: {{ pull_secret_base64 }}
"""

OPENSHIFT_MACHINE_CONFIG_OPERATOR = """\
apiVersion: v1
kind: Namespace
metadata:
  name: openshift-machine-config-operator
  labels:
    name: openshift-machine-config-operator
    openshift.io/run-level: "1"
"""

PULL = """\
apiVersion: v1
kind: Secret
metadata:
  name: coreos-pull-secret
  namespace: kube-system
type: kubernetes.io/dockerconfigjson
data:
  .dockerconfigjson: {{ pull_secret_base64 }}
"""

BOOTKUBE_TEMPLATES: list[tuple[str, str]] = [
    ("cvo-overrides.yaml.template", CVO_OVERRIDES),
    ("etcd-service.yaml", ETCD_SERVICE),
    ("host-etcd-service-endpoints.yaml.template", HOST_ETCD_SERVICE_ENDPOINTS),
    ("host-etcd-service.yaml", HOST_ETCD_SERVICE),
    ("kube-cloud-config.yaml", KUBE_CLOUD_CONFIG),
    ("kube-system-configmap-etcd-ca.yaml.template", KUBE_SYSTEM_CONFIGMAP_ETCD_CA),
    (
        "kube-system-configmap-etcd-serving-ca.yaml.template",
        KUBE_SYSTEM_CONFIGMAP_ETCD_SERVING_CA,
    ),
    ("kube-system-configmap-root-ca.yaml.template", KUBE_SYSTEM_CONFIGMAP_ROOT_CA),
    ("kube-system-secret-etcd-client.yaml.template", KUBE_SYSTEM_SECRET_ETCD_CLIENT),
    (
        "kube-system-secret-etcd-client-ca.yaml.template",
        KUBE_SYSTEM_SECRET_ETCD_CLIENT_CA,
    ),
    ("kube-system-secret-etcd-signer.yaml.template", KUBE_SYSTEM_SECRET_ETCD_SIGNER),
    (
        "kube-system-secret-etcd-signer-client.yaml.template",
        KUBE_SYSTEM_SECRET_ETCD_SIGNER_CLIENT,
    ),
    (
        "machine-config-server-tls-secret.yaml.template",
        MACHINE_CONFIG_SERVER_TLS_SECRET,
    ),
    (
        "openshift-config-configmap-etcd-metric-serving-ca.yaml.template",
        OPENSHIFT_CONFIG_CONFIGMAP_ETCD_METRIC_SERVING_CA,
    ),
    (
        "openshift-config-secret-etcd-metric-client.yaml.template",
        OPENSHIFT_CONFIG_SECRET_ETCD_METRIC_CLIENT,
    ),
    (
        "openshift-config-secret-pull-secret.yaml.template",
        OPENSHIFT_CONFIG_SECRET_PULL_SECRET,
    ),
    ("04-openshift-machine-config-operator.yaml", OPENSHIFT_MACHINE_CONFIG_OPERATOR),
    ("pull.yaml.template", PULL),
]

BOOTKUBE_TEMPLATE_NAMES: list[str] = [
    template_name(filename) for filename, _ in BOOTKUBE_TEMPLATES
]


def bootkube_templates() -> list[Asset]:
    """Return new template assets for every bootkube manifest."""
    return [Template(filename, body) for filename, body in BOOTKUBE_TEMPLATES]
