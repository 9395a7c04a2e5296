from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class MediaAsset:
    """
    Result of a successful upload.

    :ivar url: Public URL of the stored asset.
    :ivar public_id: Store-specific identifier (object key, file name).
    """

    url: str
    public_id: str


class MediaStore(Protocol):
    """
    Port for durable media storage (avatars, cover images).

    ``upload`` consumes a *staged* local file: implementations remove the
    staged file whether or not the upload succeeded, and return ``None``
    instead of raising when the backend rejects the file.
    """

    def upload(self, local_path: str) -> MediaAsset | None: ...

    def delete(self, public_id: str) -> bool:
        """Remove a stored asset; return ``False`` if the backend refused."""
        ...


class InMemoryMediaStore(MediaStore):
    """Records uploads without touching the filesystem. Used in unit tests."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: list[str] = []
        self.deleted: list[str] = []
        self._seq = 0
        self._lock = threading.Lock()

    def upload(self, local_path: str) -> MediaAsset | None:
        with self._lock:
            self.uploads.append(local_path)
            if self.fail:
                return None
            self._seq += 1
            name = f"{self._seq}-{os.path.basename(local_path)}"
        return MediaAsset(url=f"https://media.test/{name}", public_id=name)

    def delete(self, public_id: str) -> bool:
        with self._lock:
            self.deleted.append(public_id)
        return True
