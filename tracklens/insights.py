"""Categorical insights derived from descriptors, genre and scores.

Multi-valued outputs append every triggered template in table order. Single-valued
outputs (market fit, vibe) take the first matching row.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from .models import AudioDescriptors, ClassificationDecision, MoodEntry
from .scoring import round_half_up


@dataclass(frozen=True)
class InsightContext:
    """Everything the insight rules may look at."""

    descriptors: AudioDescriptors
    decision: ClassificationDecision
    commercial: int
    production: int
    viral: int

    @property
    def d(self) -> AudioDescriptors:
        return self.descriptors

    @property
    def genre(self) -> str:
        return self.decision.genre

    def template_fields(self) -> Dict[str, object]:
        top = self.decision.similar_tracks[0] if self.decision.similar_tracks else None
        return {
            "genre": self.decision.genre,
            "subgenre": self.decision.subgenre,
            "confidence": self.decision.confidence,
            "commercial": self.commercial,
            "production": self.production,
            "viral": self.viral,
            "top_song": top.song if top else "",
            "top_artist": top.artist if top else "",
        }


InsightRule = Tuple[Callable[[InsightContext], bool], str]


def _collect(
    rules: Sequence[InsightRule],
    ctx: InsightContext,
    fallback: str,
    limit: Optional[int] = None,
    **extra_fields,
) -> Tuple[str, ...]:
    fields = ctx.template_fields()
    fields.update(extra_fields)
    out = tuple(template.format(**fields) for predicate, template in rules if predicate(ctx))
    if limit is not None:
        out = out[:limit]
    return out or (fallback,)


def _first(rules: Sequence[InsightRule], ctx: InsightContext, default: str) -> str:
    for predicate, text in rules:
        if predicate(ctx):
            return text
    return default


STRENGTH_RULES: Tuple[InsightRule, ...] = (
    (lambda c: c.d.energy > 0.7, "High energy that keeps listeners engaged"),
    (lambda c: c.d.danceability > 0.7, "Strong, danceable groove"),
    (lambda c: c.d.valence > 0.6, "Uplifting, positive mood"),
    (lambda c: c.production >= 8, "Polished, radio-ready production"),
    (lambda c: c.d.dynamic_range > 3, "Healthy dynamic range with room to breathe"),
    (lambda c: 95 < c.d.tempo < 135, "Tempo sits in the commercial sweet spot"),
    (lambda c: c.d.acousticness > 0.6, "Warm, organic acoustic character"),
    (lambda c: c.d.instrumentalness > 0.6, "Rich instrumental arrangement"),
    (lambda c: c.decision.confidence >= 85, "Clear {genre} identity"),
)
STRENGTH_FALLBACK = "Distinctive sonic character that stands apart"

IMPROVEMENT_RULES: Tuple[InsightRule, ...] = (
    (
        lambda c: c.d.energy < 0.4,
        "Raise the energy with fuller drums or a stronger build into the hook",
    ),
    (lambda c: c.d.danceability < 0.5, "Tighten the rhythm section to improve groove consistency"),
    (
        lambda c: c.d.loudness < -14,
        "Master louder, the track sits well below streaming loudness targets",
    ),
    (lambda c: c.d.dynamic_range < 2, "Add contrast between sections, the dynamics are very flat"),
    (
        lambda c: c.d.speechiness > 0.33 and c.d.instrumentalness < 0.2,
        "Support the vocal with more melodic instrumentation",
    ),
    (lambda c: c.d.tempo < 80, "Consider a slightly faster tempo for playlist placement"),
    (lambda c: c.production < 6, "Invest in mixing and mastering to lift production quality"),
)
IMPROVEMENT_FALLBACK = "Well balanced overall, focus on refining arrangement details"

GENRE_PLAYLISTS = {
    "Electronic/Dance": "Electronic Essentials",
    "Hip-Hop/Rap": "Hip-Hop Central",
    "Pop": "Pop Rising",
    "Rock": "Rock Anthems",
    "Acoustic/Folk": "Acoustic Chill",
    "R&B/Soul": "R&B Vibes",
    "Indie/Alternative": "Indie Mix",
    "Classical/Ambient": "Peaceful Piano",
}

PLAYLIST_RULES: Tuple[InsightRule, ...] = (
    (lambda c: c.d.danceability > 0.7 and c.d.energy > 0.7, "Dance Party"),
    (lambda c: c.d.energy > 0.8, "Workout Motivation"),
    (lambda c: c.genre in GENRE_PLAYLISTS, "{genre_playlist}"),
    (lambda c: c.d.valence > 0.7, "Good Vibes"),
    (lambda c: c.d.acousticness > 0.6 and c.d.energy < 0.5, "Coffeehouse Acoustic"),
    (lambda c: c.d.valence < 0.3, "Melancholy Moods"),
    (lambda c: c.d.instrumentalness > 0.7, "Deep Focus"),
    (lambda c: c.d.energy < 0.3, "Sleep & Relax"),
    (lambda c: 100 < c.d.tempo < 130 and c.d.danceability > 0.6, "Running Mix"),
)
PLAYLIST_FALLBACK = "New Music Discovery"

AUDIENCE_RULES: Tuple[InsightRule, ...] = (
    (lambda c: c.d.danceability > 0.7 and c.d.energy > 0.7, "Club-goers and festival fans"),
    (
        lambda c: c.d.speechiness > 0.25 or c.genre == "Hip-Hop/Rap",
        "Hip-hop heads and lyric-focused listeners",
    ),
    (lambda c: 95 < c.d.tempo < 135 and c.d.valence > 0.5, "Gen Z and millennial streamers"),
    (lambda c: c.d.acousticness > 0.6, "Acoustic and singer-songwriter fans"),
    (lambda c: c.d.energy < 0.4, "Listeners looking to study or unwind"),
    (lambda c: c.d.energy > 0.8, "Fitness and workout enthusiasts"),
)
AUDIENCE_FALLBACK = "General music listeners"

MARKET_FIT_RULES: Tuple[InsightRule, ...] = (
    (
        lambda c: c.genre == "Electronic/Dance" and c.d.energy > 0.75,
        "Club and festival circuits, with strong streaming playlist potential",
    ),
    (
        lambda c: c.genre == "Electronic/Dance",
        "Electronic streaming playlists, with sync potential in lifestyle content",
    ),
    (
        lambda c: c.genre == "Hip-Hop/Rap",
        "Urban streaming market, with strong short-form video potential",
    ),
    (
        lambda c: c.genre == "Pop",
        "Mainstream radio and top streaming playlists, with broad demographic reach",
    ),
    (lambda c: c.genre == "Rock", "Rock radio and live venues, with a loyal album audience"),
    (
        lambda c: c.genre == "Acoustic/Folk",
        "Coffeehouse and acoustic playlists, with sync potential in film and TV",
    ),
    (
        lambda c: c.genre == "R&B/Soul",
        "Urban contemporary radio, with late-night mood playlist placement",
    ),
    (
        lambda c: c.genre == "Indie/Alternative",
        "Indie tastemakers and college radio, with festival potential",
    ),
    (
        lambda c: c.genre == "Classical/Ambient",
        "Focus and wellness playlists, with sync potential in documentaries",
    ),
)
MARKET_FIT_DEFAULT = "Niche audiences, with room to grow through targeted playlisting"

VIBE_RULES: Tuple[InsightRule, ...] = (
    (lambda c: c.d.energy > 0.8 and c.d.valence > 0.6, "Euphoric and high-octane"),
    (lambda c: c.d.energy > 0.7 and c.d.valence < 0.4, "Intense and brooding"),
    (lambda c: c.d.danceability > 0.75, "Groovy and infectious"),
    (lambda c: c.d.valence > 0.7, "Bright and feel-good"),
    (lambda c: c.d.acousticness > 0.7 and c.d.energy < 0.4, "Intimate and mellow"),
    (lambda c: c.d.energy < 0.3, "Calm and atmospheric"),
    (lambda c: c.d.valence < 0.3, "Moody and introspective"),
)
VIBE_DEFAULT = "Balanced and versatile"

KEY_INSIGHT_RULES: Tuple[InsightRule, ...] = (
    (
        lambda c: c.commercial >= 8,
        "Strong commercial potential ({commercial}/10), ready for playlist pitching",
    ),
    (lambda c: c.viral >= 8, "High viral potential ({viral}/10), suited to short-form video"),
    (
        lambda c: len(c.decision.similar_tracks) > 0,
        "Sonically closest to {top_song} by {top_artist}",
    ),
    (
        lambda c: 118 <= c.d.tempo <= 130,
        "Tempo lines up with current club and dance standards",
    ),
    (
        lambda c: c.d.energy > 0.7 and c.d.danceability > 0.7,
        "Energy and groove combine for strong replay value",
    ),
    (lambda c: c.d.acousticness > 0.6, "Organic sound suits sync licensing in film and TV"),
    (
        lambda c: c.production < 6,
        "Production score of {production}/10 leaves room for a stronger mix",
    ),
    (lambda c: c.d.speechiness > 0.33, "Vocal-forward delivery puts the lyrics up front"),
)


def to_percent(value: float) -> int:
    return max(0, min(100, round_half_up(value * 100)))


def strengths(ctx: InsightContext) -> Tuple[str, ...]:
    return _collect(STRENGTH_RULES, ctx, STRENGTH_FALLBACK)


def improvements(ctx: InsightContext) -> Tuple[str, ...]:
    return _collect(IMPROVEMENT_RULES, ctx, IMPROVEMENT_FALLBACK)


def playlist_fit(ctx: InsightContext, limit: int = 6) -> Tuple[str, ...]:
    return _collect(
        PLAYLIST_RULES,
        ctx,
        PLAYLIST_FALLBACK,
        limit,
        genre_playlist=GENRE_PLAYLISTS.get(ctx.genre, ""),
    )


def target_audience(ctx: InsightContext) -> Tuple[str, ...]:
    return _collect(AUDIENCE_RULES, ctx, AUDIENCE_FALLBACK)


def market_fit(ctx: InsightContext) -> str:
    return _first(MARKET_FIT_RULES, ctx, MARKET_FIT_DEFAULT)


def vibe(ctx: InsightContext) -> str:
    return _first(VIBE_RULES, ctx, VIBE_DEFAULT)


def mood_profile(d: AudioDescriptors) -> Tuple[MoodEntry, ...]:
    """Always exactly four moods, as percentages."""
    return (
        MoodEntry("Happy", to_percent(d.valence)),
        MoodEntry("Energetic", to_percent(d.energy)),
        MoodEntry("Danceable", to_percent(d.danceability)),
        MoodEntry("Acoustic", to_percent(d.acousticness)),
    )


def key_insights(ctx: InsightContext, limit: int = 5) -> Tuple[str, ...]:
    fields = ctx.template_fields()
    out = tuple(t.format(**fields) for predicate, t in KEY_INSIGHT_RULES if predicate(ctx))
    return out[:limit]


def prediction(ctx: InsightContext, market: str) -> str:
    """One-sentence summary of the analysis."""
    return (
        f"Predicted {ctx.genre} ({ctx.decision.confidence}% confidence) with "
        f"{ctx.decision.subgenre} character: commercial {ctx.commercial}/10, "
        f"production {ctx.production}/10, viral {ctx.viral}/10. "
        f"Best fit: {market.split(',')[0]}."
    )
