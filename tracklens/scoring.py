"""Pure scoring functions for commercial, production and viral potential."""

import math
from typing import Sequence

from .models import AudioDescriptors, ReferenceTrack


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (builtin round is banker's)."""
    return int(math.floor(value + 0.5))


def clamp_score(raw: float, max_score: int = 10) -> int:
    """Round and clamp a raw score into [0, max_score]."""
    return max(0, round_half_up(min(float(max_score), raw)))


def average_popularity(
    similar: Sequence[ReferenceTrack], window: int = 7, default: float = 50.0
) -> float:
    """Mean popularity of the top ``window`` similar tracks."""
    top = similar[:window]
    if not top:
        return default
    return sum(t.popularity for t in top) / len(top)


def commercial_score(d: AudioDescriptors, avg_popularity: float) -> int:
    """Mainstream appeal on a 0-10 scale."""
    raw = (
        d.energy * 2.5
        + d.danceability * 2.5
        + (d.valence * 1.5 if d.valence > 0.5 else 0.5)
        + (avg_popularity / 10) * 2
        + (1 if 95 < d.tempo < 135 else 0)
    )
    return clamp_score(raw)


def production_score(d: AudioDescriptors) -> int:
    """Production polish on a 0-10 scale."""
    raw = (
        (1 - d.acousticness) * 3
        + d.energy * 2.5
        + ((d.loudness + 60) / 60) * 2.5
        + (1.5 if d.dynamic_range > 3 else 0.5)
    ) / 0.95
    return clamp_score(raw)


def viral_potential(d: AudioDescriptors, commercial: int) -> int:
    """Short-form/social spread potential on a 0-10 scale."""
    raw = (
        d.danceability * 3
        + d.energy * 2
        + (2 if 100 < d.tempo < 130 else 0.5)
        + commercial * 0.3
    ) / 0.8
    return clamp_score(raw)


def score_band(score: int) -> str:
    """Bucket a 0-10 score for display."""
    if score >= 8:
        return "high"
    if score >= 6:
        return "medium"
    return "low"
