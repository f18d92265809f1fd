import asyncio
import logging
import uuid
from collections.abc import Sequence
from pathlib import Path

from resumind.models.submission import Document, StoredFile
from resumind.repositories.base import AbstractFileStorage

logger = logging.getLogger(__name__)


class LocalFileStorage(AbstractFileStorage):
    """Stores uploads under a root directory. Handles are paths relative to that root."""

    def __init__(self, root: str) -> None:
        self._root = Path(root)

    def _write(self, document: Document) -> StoredFile:
        self._root.mkdir(parents=True, exist_ok=True)
        name = Path(document.filename).name or "upload"
        relative = f"{uuid.uuid4().hex}/{name}"
        target = self._root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(document.content)
        return StoredFile(path=relative, name=name, size=len(document.content))

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._root.resolve()):
            raise ValueError(f"path escapes storage root: {path}")
        return target

    async def upload(self, files: Sequence[Document]) -> StoredFile | None:
        """Write every file and return the handle of the first one. None if nothing could be stored."""
        if not files:
            return None
        try:
            stored = [await asyncio.to_thread(self._write, doc) for doc in files]
        except OSError as exc:
            logger.error("[storage] upload failed | root=%s | error=%s", self._root, exc)
            return None
        logger.info("[storage] uploaded | path=%s | bytes=%d", stored[0].path, stored[0].size)
        return stored[0]

    async def read(self, path: str) -> bytes:
        return await asyncio.to_thread(self._resolve(path).read_bytes)
