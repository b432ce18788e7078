from __future__ import annotations

import re

_WS_RE = re.compile(r"\s+")


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def normalize_name(name: str) -> str:
    return _WS_RE.sub(" ", str(name or "").strip())


def _keep(s: str, n: int) -> str:
    return s[:n] if len(s) >= n else s[:1]


def mask_email(email: str) -> str:
    """``alice@example.com`` -> ``al***@e***.com``; anything without a local part and domain masks to ``""``."""
    local, sep, domain = normalize_email(email).partition("@")
    if not (sep and local and domain):
        return ""

    labels = domain.split(".")
    masked_domain = f"{domain[0]}***"
    if len(labels) >= 2 and labels[0] and labels[-1]:
        masked_domain += f".{labels[-1]}"
    return f"{_keep(local, 2)}***@{masked_domain}"


def mask_name(name: str) -> str:
    s = normalize_name(name)
    return f"{_keep(s, 2)}***" if s else ""
