from __future__ import annotations

from typing import Any, Mapping

REDACTED = "***"

# Credentials travel in the request body, never in logs.
SENSITIVE_KEYS = frozenset({"password", "username"})


def dest_hint(v: str, keep: int = 4) -> str:
    v = (v or "").strip()
    if not v:
        return ""
    if len(v) <= keep:
        return v
    return f"...{v[-keep:]}"


def redact(payload: Mapping[str, Any]) -> dict:
    out = {}
    for k, v in payload.items():
        if str(k).lower() in SENSITIVE_KEYS:
            out[k] = REDACTED
        elif isinstance(v, Mapping):
            out[k] = redact(v)
        else:
            out[k] = v
    return out
