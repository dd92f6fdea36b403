"""Render site configurations into the exact bytes committed to the repository."""

from __future__ import annotations

import base64
import json
from typing import Any

from topiko_publisher.errors import SerializationError

JSON_INDENT = 2


def serialize_site_config(config: Any) -> str:
    """Return ``config`` as pretty-printed JSON with two-space indentation.

    Key order is preserved and non-ASCII characters are written verbatim so the
    committed file matches what the site builder sent. NaN and infinities are
    rejected because they have no JSON representation.
    """

    try:
        return json.dumps(config, indent=JSON_INDENT, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Site configuration is not JSON serialisable: {exc}") from exc


def encode_content(text: str) -> str:
    """Return the base64 transport encoding of ``text`` encoded as UTF-8."""

    return base64.b64encode(text.encode("utf-8")).decode("ascii")


__all__ = ["encode_content", "serialize_site_config"]
