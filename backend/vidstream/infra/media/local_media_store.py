# vidstream/infra/media/local_media_store.py
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from uuid import uuid4

from vidstream.services._shared.ports import MediaAsset, MediaStore

logger = logging.getLogger(__name__)


class LocalMediaStore(MediaStore):
    """
    Filesystem media store for development and single-node deployments.

    Staged files are moved under ``root`` with a random prefix and exposed at
    ``<base_url>/<name>`` by the media blueprint.
    """

    def __init__(self, root: str | os.PathLike[str], base_url: str = "/media") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, local_path: str) -> MediaAsset | None:
        if not local_path or not os.path.isfile(local_path):
            logger.warning("Staged upload not found", extra={"reason": "missing_file"})
            return None

        name = f"{uuid4().hex[:12]}-{os.path.basename(local_path)}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            shutil.move(local_path, self.root / name)
        except OSError:
            logger.exception("Failed to store media file")
            _discard(local_path)
            return None

        return MediaAsset(url=f"{self.base_url}/{name}", public_id=name)

    def delete(self, public_id: str) -> bool:
        path = self.root / os.path.basename(public_id)
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to delete media file")
            return False
        return True


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
