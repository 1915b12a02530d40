from __future__ import annotations

from typing import Sequence, TypeVar

from .types import normalize_content_type

C = TypeVar("C")


def select_best_match(candidates: Sequence[C], wanted_content_type: str | None) -> C | None:
    """First candidate of the wanted content type, else the first candidate.

    The service's relevance order is trusted as the tie-break; no scoring happens here.
    With `wanted_content_type=None` the first candidate wins.
    """
    if not candidates:
        return None
    wanted = normalize_content_type(wanted_content_type) if wanted_content_type else None
    if wanted:
        for c in candidates:
            if getattr(c, "content_type", None) == wanted:
                return c
    return candidates[0]
