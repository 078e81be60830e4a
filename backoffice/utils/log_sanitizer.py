"""Helpers for logging user-controlled values without forging or PII leaks."""

from typing import Optional


def sanitize(value: Optional[str]) -> str:
    """Strip CR/LF so a value cannot inject fake log lines."""
    if not value:
        return ""
    return (
        str(value)
        .replace("\r", "")
        .replace("\n", "")
        .replace("\t", " ")
    )


def mask_id(value) -> str:
    """Keep only the first 8 characters of an identifier.

    ``a1b2c3d4-e5f6-7890-abcd-ef1234567890`` -> ``a1b2c3d4-****``
    """
    cleaned = sanitize(str(value) if value is not None else None)
    if len(cleaned) > 8:
        return cleaned[:8] + "-****"
    return cleaned


def mask_storage_key(storage_key: Optional[str]) -> str:
    """Mask the account segment of ``{account_id}/{namespace}/...`` keys."""
    cleaned = sanitize(storage_key)
    head, sep, rest = cleaned.partition("/")
    if sep and head:
        return mask_id(head) + "/" + rest
    return cleaned
