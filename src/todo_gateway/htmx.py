"""
Helpers for the htmx request/response header convention.

Requests issued by htmx carry ``HX-Request: true``. Boosted navigations and
history restores also carry it but expect a full page back.
"""
from __future__ import annotations

from fastapi import Request

HX_REQUEST = "HX-Request"
HX_BOOSTED = "HX-Boosted"
HX_HISTORY_RESTORE_REQUEST = "HX-History-Restore-Request"

HX_TRIGGER = "HX-Trigger"
HX_RETARGET = "HX-Retarget"
HX_RESWAP = "HX-Reswap"


def _header_is_true(request: Request, name: str) -> bool:
    return request.headers.get(name, "").strip().lower() == "true"


# PUBLIC_INTERFACE
def is_partial_request(request: Request) -> bool:
    """Return True when the request should be answered with a fragment."""
    if not _header_is_true(request, HX_REQUEST):
        return False
    if _header_is_true(request, HX_BOOSTED):
        return False
    return not _header_is_true(request, HX_HISTORY_RESTORE_REQUEST)
