"""Base class for the typed configuration objects read from and written to YAML."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel
import yaml

__all__ = [
    "BaseManifest",
    "ObjectMeta",
    "dump_yaml",
]


class _Dumper(yaml.SafeDumper):
    """Dumper that writes multi-line strings as literal blocks."""


def _str_presenter(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    """Represent multi-line yaml strings as you'd expect.

    See https://github.com/yaml/pyyaml/issues/240
    """
    return dumper.represent_scalar(
        "tag:yaml.org,2002:str", data, style="|" if data.count("\n") > 0 else None
    )


_Dumper.add_representer(str, _str_presenter)


def dump_yaml(doc: Any) -> str:
    """Serialize a document with sorted keys so output is stable across runs."""
    return yaml.dump(doc, Dumper=_Dumper, sort_keys=True)


class BaseManifest(BaseModel):
    """Base class for all serialized objects.

    Fields use snake_case names in python and camelCase keys on disk. Keys
    that are not modeled are kept so they round trip unchanged.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def compact_dict(self) -> dict[str, Any]:
        """Return a dictionary with the on-disk keys and unset values removed."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def parse_doc(cls, doc: Any) -> Self:
        """Parse an object from a yaml document."""
        return cls.model_validate(doc)

    @classmethod
    def parse_yaml(cls, content: str | bytes) -> Self:
        """Parse a serialized object.

        Raises:
            ValueError: If the content is not valid yaml or does not match the object.
        """
        try:
            doc = yaml.safe_load(content)
        except yaml.YAMLError as err:
            raise ValueError(f"Invalid yaml for {cls.__name__}: {err}") from err
        try:
            return cls.parse_doc(doc)
        except ValidationError as err:
            raise ValueError(f"Invalid {cls.__name__}: {err}") from err

    def yaml(self) -> str:
        """Return a YAML string representation of compact_dict."""
        return dump_yaml(self.compact_dict())


class ObjectMeta(BaseManifest):
    """Standard object metadata."""

    name: str
    namespace: str | None = None
