"""Template assets bound into the generated manifests."""

from .bootkube import BOOTKUBE_TEMPLATE_NAMES, Template, bootkube_templates

__all__ = ["BOOTKUBE_TEMPLATE_NAMES", "Template", "bootkube_templates"]
