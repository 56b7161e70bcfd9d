"""Text formatting helpers."""

from __future__ import annotations


def truncate_secret(value: str | None, keep: int = 12) -> str:
    """Return the first ``keep`` characters of a secret followed by an ellipsis."""

    text = (value or "").strip()
    if not text:
        return "-"
    if len(text) <= keep:
        return text
    return f"{text[:keep]}..."
