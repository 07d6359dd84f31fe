"""
cluster-assets builds the manifests needed to bootstrap a cluster from a
graph of assets, or restores them from the output of a previous run.
"""

__all__ = [
    "asset",
    "builder",
    "exceptions",
    "fetcher",
    "installconfig",
    "manifests",
    "redact",
    "store",
    "template",
    "tls",
]
