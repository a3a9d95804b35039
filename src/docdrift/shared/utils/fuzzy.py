"""Closest-name suggestions for drift messages ("Did you mean ...?")."""

from __future__ import annotations

import difflib
from typing import Iterable, Optional

# Below this similarity a suggestion is more confusing than helpful.
MIN_SIMILARITY = 0.6


def find_closest_match(name: str, candidates: Iterable[str], cutoff: float = MIN_SIMILARITY) -> Optional[str]:
    """Return the candidate most similar to *name*, or None."""
    pool = sorted({c for c in candidates if c and c != name})
    if not name or not pool:
        return None
    matches = difflib.get_close_matches(name, pool, n=1, cutoff=cutoff)
    if matches:
        return matches[0]
    # Case-only differences fall under the cutoff for short names
    lowered = name.lower()
    for candidate in pool:
        if candidate.lower() == lowered:
            return candidate
    return None


def did_you_mean(name: str, candidates: Iterable[str]) -> Optional[str]:
    """Format a suggestion sentence, or None when nothing is close."""
    match = find_closest_match(name, candidates)
    return f"Did you mean '{match}'?" if match else None
