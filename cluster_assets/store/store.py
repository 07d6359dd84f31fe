"""Store module for resolving assets and holding their state during a pass."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from cluster_assets.asset import Asset

from .status import StatusInfo

T = TypeVar("T", bound=Asset)


class StoreEvent(str, Enum):
    """Enum for store events."""

    ASSET_GENERATED = "asset_generated"
    ASSET_RESTORED = "asset_restored"
    ASSET_FAILED = "asset_failed"


@dataclass
class StoreConfig:
    """Configuration for resolving assets in a store."""

    restore: bool = True
    """Load assets from previously written files before generating them."""

    concurrent: bool = True
    """Resolve independent dependencies of an asset concurrently."""


class Store(ABC):
    """Abstract base class for resolving assets from an explicit set of assets."""

    @abstractmethod
    async def resolve(self, name: str) -> Asset:
        """Resolve the named asset and all of its transitive dependencies.

        Each asset is loaded or generated at most once per store, and always
        after all of its declared dependencies.

        Raises:
            MissingProducerError: If an asset or declared dependency is unknown.
            CycleError: If the declared dependencies contain a cycle.
            AssetException: The error raised by the asset that failed.
        """

    @abstractmethod
    def get_asset(self, name: str, cls: type[T]) -> T | None:
        """Return a resolved asset by name and type, or None if not resolved."""

    @abstractmethod
    def get_status(self, name: str) -> StatusInfo | None:
        """Retrieve the resolution status for an asset."""

    @abstractmethod
    def add_listener(
        self,
        event: StoreEvent,
        callback: Callable[[str, StatusInfo], None],
    ) -> Callable[[], None]:
        """Register a callback for a specific event (asset generated, restored, failed).

        Returns a callable that can be called to remove the listener.
        """
