"""
Credential comparison.

Passwords are stored as plain text.  Every comparison goes through
``passwords_match`` so that hashing can be introduced here without
touching any call site.
"""
import hmac


def passwords_match(stored: str, supplied: str) -> bool:
    """Return True when *supplied* equals the *stored* password exactly."""
    return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))
