"""Client IP resolution shared by the rate limiter and auth routes."""

from __future__ import annotations

from typing import Sequence

from starlette.requests import Request


def get_client_ip(
    request: Request,
    trusted_proxies: Sequence[str] = (),
) -> str:
    """Return the real client IP address.

    Only trusts ``X-Forwarded-For`` when the *immediate* connection
    (``request.client.host``) comes from a known trusted proxy.
    When untrusted, the header is ignored entirely.
    """
    direct_ip = request.client.host if request.client else "unknown"

    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded:
        return direct_ip

    if direct_ip not in trusted_proxies:
        return direct_ip

    # Rightmost entry that is not one of our proxies.
    parts = [p.strip() for p in forwarded.split(",")]
    for ip_str in reversed(parts):
        if ip_str not in trusted_proxies:
            return ip_str

    return direct_ip
