"""Module for the in memory asset store."""

import asyncio
from collections import defaultdict
from collections.abc import Callable, Iterable
import logging
from typing import DefaultDict, TypeVar

from cluster_assets.asset import Asset, Parents
from cluster_assets.context import current_trace, trace_context
from cluster_assets.exceptions import (
    AssetException,
    CycleError,
    DependencyFailedError,
    MissingProducerError,
    SynthesisError,
)
from cluster_assets.fetcher import FileFetcher

from .status import Status, StatusInfo
from .store import Store, StoreConfig, StoreEvent


_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=Asset)

_STATUS_EVENTS = {
    Status.GENERATED: StoreEvent.ASSET_GENERATED,
    Status.RESTORED: StoreEvent.ASSET_RESTORED,
    Status.FAILED: StoreEvent.ASSET_FAILED,
}


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Holds the assets for a single pass keyed by name along with the
    resolution status of each one. The status table is the memoization
    table: an asset with a resolved status is never loaded or generated
    again, and a per-asset lock keeps concurrent consumers of a shared
    dependency from racing to resolve it.
    """

    def __init__(
        self,
        assets: Iterable[Asset],
        fetcher: FileFetcher | None = None,
        config: StoreConfig | None = None,
    ) -> None:
        """Initialize the InMemoryStore."""
        self._assets: dict[str, Asset] = {}
        for asset in assets:
            if asset.name in self._assets:
                raise ValueError(f"Asset {asset.name} was registered more than once")
            self._assets[asset.name] = asset
        self._fetcher = fetcher
        self._config = config or StoreConfig()
        self._status: dict[str, StatusInfo] = {}
        self._locks: DefaultDict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._listeners: DefaultDict[StoreEvent, list[Callable[..., None]]] = (
            defaultdict(list)
        )

    def plan(self, name: str) -> list[str]:
        """Return the assets needed to resolve the named asset in dependency order.

        The declared dependencies are walked before anything is resolved so
        that an invalid graph fails without loading or generating any asset.
        """
        order: list[str] = []
        done: set[str] = set()
        chain: list[str] = []

        def visit(current: str, dependent: str | None) -> None:
            if current in done:
                return
            if current in chain:
                raise CycleError(chain[chain.index(current) :] + [current])
            if (asset := self._assets.get(current)) is None:
                raise MissingProducerError(dependent, current)
            chain.append(current)
            for dependency in asset.dependencies():
                visit(dependency, current)
            chain.pop()
            done.add(current)
            order.append(current)

        visit(name, None)
        return order

    async def resolve(self, name: str) -> Asset:
        order = self.plan(name)
        _LOGGER.debug("Resolving %s from %d assets", name, len(order))
        return await self._resolve(name)

    async def _resolve(self, name: str) -> Asset:
        asset = self._assets[name]
        async with self._locks[name]:
            if (info := self._status.get(name)) is not None:
                if info.status.resolved:
                    return asset
                if info.status == Status.FAILED:
                    raise DependencyFailedError(name, info.error)

            with trace_context(name):
                dependencies = asset.dependencies()
                try:
                    await self._resolve_all(dependencies)
                except BaseException as err:
                    self._update_status(name, Status.FAILED, str(err))
                    raise

                parents = Parents({dep: self._assets[dep] for dep in dependencies})
                self._update_status(name, Status.PENDING)
                try:
                    status = await self._load_or_generate(asset, parents)
                except AssetException as err:
                    if err.asset_name is None:
                        err.asset_name = name
                    self._update_status(name, Status.FAILED, str(err))
                    raise
                except Exception as err:
                    wrapped = SynthesisError(
                        str(err) or err.__class__.__name__, asset_name=name
                    )
                    self._update_status(name, Status.FAILED, str(wrapped))
                    raise wrapped from err
            self._update_status(name, status)
        return asset

    async def _resolve_all(self, names: list[str]) -> None:
        if not self._config.concurrent:
            for name in names:
                await self._resolve(name)
            return
        results = await asyncio.gather(
            *(self._resolve(name) for name in names), return_exceptions=True
        )
        # Raise the first failure in declaration order, after all siblings finish
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def _load_or_generate(self, asset: Asset, parents: Parents) -> Status:
        if self._fetcher is not None and self._config.restore:
            if await asset.load(self._fetcher):
                _LOGGER.debug("Loaded %s from disk", asset.name)
                return Status.RESTORED
        _LOGGER.debug("Generating %s (%s)", asset.name, current_trace())
        await asset.generate(parents)
        return Status.GENERATED

    def get_asset(self, name: str, cls: type[T]) -> T | None:
        info = self._status.get(name)
        if info is None or not info.status.resolved:
            return None
        asset = self._assets[name]
        if not isinstance(asset, cls):
            raise ValueError(
                f"Asset {name} is not of type {cls.__name__} (was {asset.__class__.__name__})"
            )
        return asset

    def get_status(self, name: str) -> StatusInfo | None:
        return self._status.get(name)

    def _update_status(self, name: str, status: Status, error: str | None = None) -> None:
        if status == Status.FAILED:
            _LOGGER.error("Asset %s status %s with error: %s", name, status, error)
        else:
            _LOGGER.debug("Updating status for asset %s to %s", name, status)
        info = StatusInfo(status=status, error=error)
        self._status[name] = info
        if (event := _STATUS_EVENTS.get(status)) is not None:
            self._fire_event(event, name, info)

    def add_listener(
        self,
        event: StoreEvent,
        callback: Callable[[str, StatusInfo], None],
    ) -> Callable[[], None]:

        def remove() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        self._listeners[event].append(callback)
        return remove

    def _fire_event(self, event: StoreEvent, name: str, info: StatusInfo) -> None:
        for cb in list(self._listeners[event]):  # Iterate over a copy for safe removal
            try:
                cb(name, info)
            except Exception:
                _LOGGER.exception("Store listener callback failed for event %s", event)
