"""Serves files written by the local media store."""

from __future__ import annotations

import os

from flask import Blueprint, current_app, send_from_directory

bp = Blueprint("media", __name__)


@bp.get("/<path:filename>")
def media_file(filename: str):
    # send_from_directory rejects paths escaping MEDIA_ROOT.
    root = os.path.abspath(current_app.config["MEDIA_ROOT"])
    return send_from_directory(root, filename)
