from abc import ABC, abstractmethod
from collections.abc import Sequence

from resumind.models.submission import Document, StoredFile


class AbstractKeyValueStore(ABC):
    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """Insert or overwrite the value stored under key. Returns True on success."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent."""


class AbstractFileStorage(ABC):
    @abstractmethod
    async def upload(self, files: Sequence[Document]) -> StoredFile | None:
        """Store the given files. Returns a handle to the first stored file, or None on failure."""

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Return the content of a previously stored file."""
