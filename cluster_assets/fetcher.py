"""Library for reading and writing asset files in an output directory."""

from abc import ABC, abstractmethod
import asyncio
import logging
from pathlib import Path

import aiofiles
import aiofiles.os
from aiofiles.ospath import isdir, isfile

from .asset import File

__all__ = [
    "FileFetcher",
    "DirectoryFileFetcher",
    "write_files",
]

_LOGGER = logging.getLogger(__name__)


class FileFetcher(ABC):
    """Interface for reading files written by a previous run."""

    @abstractmethod
    async def fetch_by_name(self, filename: str) -> File | None:
        """Return the file with the relative path, or None if it does not exist."""

    @abstractmethod
    async def fetch_by_pattern(self, pattern: str) -> list[File]:
        """Return all files whose relative path matches the glob pattern."""


class DirectoryFileFetcher(FileFetcher):
    """Fetches files from an asset output directory on local disk."""

    def __init__(self, directory: Path) -> None:
        """Initialize DirectoryFileFetcher."""
        self._directory = directory

    async def _read(self, path: Path) -> File:
        async with aiofiles.open(path, mode="rb") as f:
            data = await f.read()
        return File(filename=path.relative_to(self._directory).as_posix(), data=data)

    async def fetch_by_name(self, filename: str) -> File | None:
        path = self._directory / filename
        if not await isfile(path):
            return None
        return await self._read(path)

    async def fetch_by_pattern(self, pattern: str) -> list[File]:
        if not await isdir(self._directory):
            return []
        paths = await asyncio.to_thread(
            lambda: sorted(self._directory.glob(pattern))
        )
        files = []
        for path in paths:
            if not await isfile(path):
                continue
            files.append(await self._read(path))
        _LOGGER.debug(
            "Found %d files matching %s in %s", len(files), pattern, self._directory
        )
        return files


async def write_files(directory: Path, files: list[File]) -> None:
    """Write the files to the output directory, creating parent directories."""
    for file in files:
        path = directory / file.filename
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, mode="wb") as f:
            await f.write(file.data)
    _LOGGER.info("Wrote %d files to %s", len(files), directory)
