"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, pre_load


class InputSchema(Schema):
    """Base for request payloads.

    Unknown keys are dropped and blank strings are treated as absent, so the
    service layer decides what "missing" means and which message to return.
    """

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def drop_blank_strings(self, data: Any, **_: Any) -> Any:
        if not hasattr(data, "items"):
            return data
        return {
            key: value
            for key, value in data.items()
            if not (isinstance(value, str) and not value.strip())
        }
