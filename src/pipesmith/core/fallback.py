"""No-script fallback markup injected into the bootstrap head.

Components are rendered client side, so a browser without JavaScript would see
an empty page. The async fallback refreshes into the server-rendered ``sync``
mode through the ``no_pagelet_js`` query flag. The sync fallback strips that
flag again for browsers that do run scripts, since a shared URL may carry it.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any
from urllib.parse import urlencode


NO_SCRIPT_FLAG = "no_pagelet_js"
DEFAULT_PATH = "http://localhost/"

NOSCRIPT_TEMPLATE = "".join(
    [
        "<noscript>",
        '<meta http-equiv="refresh" content="0; URL={path}?{query}">',
        "</noscript>",
    ]
)

SYNC_SCRIPT = "".join(
    [
        "<script>",
        f'if (~location.search.indexOf("{NO_SCRIPT_FLAG}=1"))',
        'location.href = location.href.replace(location.search, "")',
        "</script>",
    ]
)


class RenderMode(str, Enum):
    """How the host renders components for a response."""

    ASYNC = "async"
    SYNC = "sync"


def build_fallback(
    mode: RenderMode | str,
    *,
    path: str | None = None,
    query: Mapping[str, Any] | None = None,
) -> str:
    """Return the fallback markup for ``mode`` and the current request."""
    if RenderMode(mode) is RenderMode.SYNC:
        return SYNC_SCRIPT

    params: dict[str, Any] = {NO_SCRIPT_FLAG: 1}
    params.update(query or {})
    return NOSCRIPT_TEMPLATE.replace("{path}", path or DEFAULT_PATH).replace(
        "{query}", urlencode(params, doseq=True)
    )


__all__ = [
    "DEFAULT_PATH",
    "NOSCRIPT_TEMPLATE",
    "NO_SCRIPT_FLAG",
    "SYNC_SCRIPT",
    "RenderMode",
    "build_fallback",
]
