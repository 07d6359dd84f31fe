"""Library for removing secrets from the install config before it is persisted.

Redaction is driven by an explicit list of fields per platform variant. There
is no attempt to detect secrets automatically, so this list must be updated
when a platform gains a new credential field.
"""

import logging

import yaml

from .exceptions import RedactionError
from .installconfig import InstallConfig

__all__ = [
    "redact_install_config",
    "redacted_install_config",
]

_LOGGER = logging.getLogger(__name__)


REDACTED_PLATFORM_FIELDS: dict[str, tuple[str, ...]] = {
    "vsphere": ("username", "password"),
}


def redact_install_config(config: InstallConfig) -> InstallConfig:
    """Return a copy of the install config with sensitive fields cleared.

    The supplied config is not modified.
    """
    platform_update = {}
    for variant, fields in REDACTED_PLATFORM_FIELDS.items():
        if (value := getattr(config.platform, variant, None)) is None:
            continue
        _LOGGER.debug("Redacting %s fields %s", variant, fields)
        platform_update[variant] = value.model_copy(
            update={field: "" for field in fields}
        )
    return config.model_copy(
        update={
            "pull_secret": "",
            "platform": config.platform.model_copy(update=platform_update),
        }
    )


def redacted_install_config(config: InstallConfig) -> str:
    """Return the redacted install config serialized as yaml."""
    redacted = redact_install_config(config)
    try:
        return redacted.yaml()
    except (yaml.YAMLError, ValueError, TypeError) as err:
        raise RedactionError(f"Failed to serialize install config: {err}") from err
