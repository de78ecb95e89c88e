"""Security helpers for response headers and password policy."""
from flask import request


def apply_security_headers(response, force_https: bool = False):
    """Apply headers suited to a JSON API consumed by a separate front-end."""
    response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("Cache-Control", "no-store")
    if force_https or request.is_secure:
        response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload")
    return response


def password_meets_policy(password: str, min_length: int = 8) -> tuple[bool, str | None]:
    """Enforce a sane password baseline."""
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters long."
    if not any(c.isalpha() for c in password):
        return False, "Include at least one letter."
    if not any(c.isdigit() for c in password):
        return False, "Include at least one digit."
    return True, None
