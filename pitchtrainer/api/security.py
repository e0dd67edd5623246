"""
Security response headers.

Every response carries a restrictive Content-Security-Policy plus the usual
hardening headers. The policy allows the Mistral API for `connect-src` and
`blob:` media for recorded audio.
"""

from typing import Awaitable, Callable

from fastapi import Request, Response

CSP_DIRECTIVES: dict[str, tuple[str, ...]] = {
    "default-src": ("'self'",),
    "base-uri": ("'self'",),
    "font-src": ("'self'", "https:", "data:"),
    "form-action": ("'self'",),
    "frame-ancestors": ("'self'",),
    "img-src": ("'self'", "data:"),
    "object-src": ("'none'",),
    "script-src": ("'self'", "'unsafe-inline'"),
    "script-src-attr": ("'none'",),
    "style-src": ("'self'", "'unsafe-inline'"),
    "connect-src": ("'self'", "https://api.mistral.ai"),
    "media-src": ("'self'", "blob:"),
    "upgrade-insecure-requests": (),
}


def content_security_policy(directives: dict[str, tuple[str, ...]] = CSP_DIRECTIVES) -> str:
    return ";".join(
        " ".join((name, *sources)) for name, sources in directives.items()
    )


SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": content_security_policy(),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


async def add_security_headers(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """HTTP middleware setting SECURITY_HEADERS on every response."""
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response
