"""Anonymized caller fingerprints used as rate limit keys."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from fastapi import Request

SUPPORTED_LOCALES = ("en", "es")
DEFAULT_LOCALE = "en"


@dataclass(frozen=True)
class RequestFingerprint:
    fingerprint: str
    locale: str


def get_client_ip(request: Request) -> str:
    """Return the originating client IP (first X-Forwarded-For hop)."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def get_request_fingerprint(request: Request) -> RequestFingerprint:
    """Hash client IP and user agent so raw addresses never reach limiter state or logs."""
    ip = get_client_ip(request)
    user_agent = request.headers.get("user-agent", "")
    digest = hashlib.sha256(f"{ip}|{user_agent}".encode()).hexdigest()[:32]

    locale = request.query_params.get("locale", DEFAULT_LOCALE).lower()
    if locale not in SUPPORTED_LOCALES:
        locale = DEFAULT_LOCALE

    return RequestFingerprint(fingerprint=digest, locale=locale)
