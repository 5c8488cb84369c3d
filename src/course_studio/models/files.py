"""Local file handles handed to the upload pipeline."""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from course_studio.models.content import DEFAULT_MIME_TYPE

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@dataclass(frozen=True)
class SourceFile:
    """A file on local disk, with the name and MIME type it is uploaded under."""

    path: Path
    name: str = ""
    mime_type: str = field(default="")

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        if not self.name:
            object.__setattr__(self, "name", self.path.name)
        if not self.mime_type:
            guessed, _ = mimetypes.guess_type(self.name)
            object.__setattr__(self, "mime_type", guessed or DEFAULT_MIME_TYPE)

    @property
    def size_bytes(self) -> int:
        return self.path.stat().st_size

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    async def load(self) -> bytes:
        """Read the whole file in a worker thread."""
        return await asyncio.to_thread(self.read_bytes)

    async def iter_chunks(self, chunk_size: int) -> AsyncIterator[bytes]:
        """Yield the file's bytes in chunks of at most ``chunk_size``.

        Disk reads run in a worker thread so a slow disk never stalls the event loop.
        """
        handle = await asyncio.to_thread(self.path.open, "rb")
        try:
            while chunk := await asyncio.to_thread(handle.read, chunk_size):
                yield chunk
        finally:
            handle.close()
