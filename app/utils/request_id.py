"""Per-request correlation id, shared with log lines through a ContextVar."""

from __future__ import annotations

import contextvars
import re
import uuid

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)

# Echoed into headers and logs, so only a short ASCII token is accepted.
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}", flags=re.ASCII)


def validate_request_id(value: str | None) -> str | None:
    """Return ``value`` when it is a usable request id, else None."""
    if not isinstance(value, str) or len(value) > 64:
        return None
    return value if _SAFE_REQUEST_ID.fullmatch(value) else None


def new_request_id() -> str:
    return uuid.uuid4().hex


def resolve_request_id(incoming: str | None) -> str:
    """Keep a client-supplied id when it is safe, otherwise mint a fresh one."""
    return validate_request_id(incoming) or new_request_id()
