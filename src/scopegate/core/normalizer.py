"""Response normalization across client generations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from elastic_transport import ApiResponse


def normalize_response(raw: Any) -> Any:
    """Reduce a client response to its plain JSON payload.

    Generation 8 and 9 libraries return ``ApiResponse`` objects whose payload
    is ``.body``. Transport envelopes of the form ``{body, statusCode,
    headers, warnings}`` are unwrapped as well; a mapping counts as one when
    it has a ``body`` key next to ``statusCode`` or ``headers``. Anything else,
    including the plain dicts of generation 7, is returned unchanged.

    >>> normalize_response({"body": {"x": 1}, "statusCode": 200})
    {'x': 1}
    >>> normalize_response({"x": 1})
    {'x': 1}
    """
    if isinstance(raw, ApiResponse):
        return raw.body
    if isinstance(raw, Mapping) and "body" in raw and ("statusCode" in raw or "headers" in raw):
        return raw["body"]
    return raw
