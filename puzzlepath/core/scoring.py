from __future__ import annotations

MAX_STARS = 3


def stars(mistake_count: int) -> int:
    """Star rating for a passed level: 3 for a clean run, 2 after one mistake, else 1."""
    if mistake_count < 0:
        raise ValueError(f"mistake_count must be non-negative, got {mistake_count}")
    if mistake_count == 0:
        return 3
    if mistake_count == 1:
        return 2
    return 1
