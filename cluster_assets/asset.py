"""Representation of assets and the files they produce.

An asset is a single node in the dependency graph. It declares the names of
the assets it is built from, can generate itself from those resolved
dependencies, can load itself from files written by a previous run, and may
emit files to be written to disk.

Assets do not find each other through any registry. The set of assets for a
run is passed explicitly to a `cluster_assets.store.Store`, which resolves a
requested asset and hands each asset a read-only `Parents` view of its
resolved dependencies.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import TypeVar, TYPE_CHECKING

from .exceptions import FileConflictError, SynthesisError

if TYPE_CHECKING:
    from .fetcher import FileFetcher

__all__ = [
    "Asset",
    "File",
    "Parents",
    "merge_files",
    "sort_files",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound="Asset")


@dataclass(frozen=True)
class File:
    """A file generated by an asset."""

    filename: str
    """Path of the file relative to the output directory."""

    data: bytes
    """The full contents of the file."""


class Asset(ABC):
    """Base class for all nodes in the asset graph."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human friendly name that identifies the asset within a run."""

    def dependencies(self) -> list[str]:
        """Return the names of the assets directly needed to generate this asset.

        This is read before any asset is resolved and must not have side effects.
        """
        return []

    @abstractmethod
    async def generate(self, parents: "Parents") -> None:
        """Generate the asset from its resolved dependencies."""

    async def load(self, fetcher: "FileFetcher") -> bool:
        """Load the asset from files written by a previous run.

        Returns False when there is nothing on disk for the asset, which is
        the normal state for a first run.
        """
        return False

    def files(self) -> list[File]:
        """Return the files generated by the asset."""
        return []

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


class Parents(Mapping[str, Asset]):
    """Read-only view of the resolved dependencies of an asset."""

    def __init__(self, assets: Mapping[str, Asset]) -> None:
        self._assets = MappingProxyType(dict(assets))

    def __getitem__(self, name: str) -> Asset:
        return self._assets[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def get_asset(self, name: str, cls: type[T]) -> T:
        """Return the resolved dependency with the specified name and type."""
        if (asset := self._assets.get(name)) is None:
            raise SynthesisError(f"Dependency {name} was not declared or resolved")
        if not isinstance(asset, cls):
            raise SynthesisError(
                f"Dependency {name} is not of type {cls.__name__} (was {asset.__class__.__name__})"
            )
        return asset


def _file_key(file: File) -> bytes:
    return file.filename.encode()


def sort_files(files: list[File]) -> None:
    """Sort the files in place by their path."""
    files.sort(key=_file_key)


def merge_files(*groups: Iterable[File]) -> list[File]:
    """Concatenate groups of files into a single list ordered by path.

    The order only depends on the paths, so output is stable no matter what
    order the assets producing the files were resolved in.
    """
    merged: list[File] = []
    seen: set[str] = set()
    for group in groups:
        for file in group:
            if file.filename in seen:
                raise FileConflictError(
                    f"Multiple files generated for path {file.filename}"
                )
            seen.add(file.filename)
            merged.append(file)
    sort_files(merged)
    _LOGGER.debug("Merged %d files", len(merged))
    return merged
