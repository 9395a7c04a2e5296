"""Staging of multipart uploads before they are handed to the media store."""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

from flask import current_app, request
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename


def stage_upload(file: FileStorage | None) -> str | None:
    """Write ``file`` under ``UPLOAD_TMP_DIR`` and return its path.

    Returns ``None`` when no file (or an empty filename) was sent.
    """
    if file is None or not file.filename:
        return None

    tmp_dir = Path(current_app.config["UPLOAD_TMP_DIR"])
    tmp_dir.mkdir(parents=True, exist_ok=True)
    name = secure_filename(file.filename) or "upload"
    path = tmp_dir / f"{uuid4().hex[:12]}-{name}"
    file.save(path)
    return str(path)


@contextlib.contextmanager
def staged_files(*field_names: str) -> Iterator[dict[str, str | None]]:
    """Stage the named request files and discard leftovers afterwards.

    Media stores remove the files they consume; anything still on disk when
    the block exits (e.g. the request failed validation first) is deleted.
    """
    staged = {name: stage_upload(request.files.get(name)) for name in field_names}
    try:
        yield staged
    finally:
        for path in staged.values():
            if path:
                with contextlib.suppress(FileNotFoundError):
                    os.remove(path)
