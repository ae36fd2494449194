"""Tests for categorical insight rules."""

from tracklens.insights import (
    IMPROVEMENT_FALLBACK,
    MARKET_FIT_DEFAULT,
    STRENGTH_FALLBACK,
    VIBE_DEFAULT,
    InsightContext,
    improvements,
    key_insights,
    market_fit,
    mood_profile,
    playlist_fit,
    prediction,
    strengths,
    target_audience,
    vibe,
)
from tracklens.models import AudioDescriptors, ClassificationDecision, ReferenceTrack


def _descriptors(**overrides):
    values = dict(
        tempo=128.0,
        energy=0.8,
        danceability=0.8,
        valence=0.7,
        acousticness=0.1,
        loudness=-4.0,
        speechiness=0.05,
        instrumentalness=0.2,
        spectral_centroid=2000.0,
        dynamic_range=3.0,
    )
    values.update(overrides)
    return AudioDescriptors(**values)


def _ctx(descriptors=None, genre="Electronic/Dance", confidence=95, similar=(), scores=(9, 8, 9)):
    decision = ClassificationDecision(
        genre=genre, subgenre="House", confidence=confidence, similar_tracks=tuple(similar)
    )
    commercial, production, viral = scores
    return InsightContext(
        descriptors=descriptors or _descriptors(),
        decision=decision,
        commercial=commercial,
        production=production,
        viral=viral,
    )


# A track that triggers no strength or improvement rule
_PLAIN = dict(
    tempo=85.0,
    energy=0.5,
    danceability=0.6,
    valence=0.5,
    acousticness=0.3,
    loudness=-10.0,
    speechiness=0.05,
    instrumentalness=0.3,
    dynamic_range=2.5,
)


class TestLists:
    def test_strengths_in_table_order(self):
        out = strengths(_ctx())
        assert out[:3] == (
            "High energy that keeps listeners engaged",
            "Strong, danceable groove",
            "Uplifting, positive mood",
        )
        assert out[-1] == "Clear Electronic/Dance identity"

    def test_strengths_fallback(self):
        ctx = _ctx(_descriptors(**_PLAIN), confidence=60, scores=(5, 6, 5))
        assert strengths(ctx) == (STRENGTH_FALLBACK,)

    def test_improvements_fallback(self):
        ctx = _ctx(_descriptors(**_PLAIN), confidence=60, scores=(5, 6, 5))
        assert improvements(ctx) == (IMPROVEMENT_FALLBACK,)

    def test_quiet_track_improvements(self):
        d = _descriptors(energy=0.2, loudness=-30.0, tempo=70.0, dynamic_range=1.0)
        out = improvements(_ctx(d, scores=(3, 4, 3)))
        assert out[0].startswith("Raise the energy")
        assert any("faster tempo" in item for item in out)

    def test_playlist_limit(self):
        # Energetic, upbeat and instrumental triggers most playlist rules
        d = _descriptors(energy=0.9, danceability=0.9, valence=0.8, instrumentalness=0.8, tempo=120.0)
        out = playlist_fit(_ctx(d))
        assert len(out) <= 6
        assert out[:3] == ("Dance Party", "Workout Motivation", "Electronic Essentials")

    def test_target_audience_fallback(self):
        d = _descriptors(**_PLAIN)
        assert target_audience(_ctx(d, genre="Rock")) == ("General music listeners",)

    def test_key_insights_limit(self):
        similar = [
            ReferenceTrack("Strobe", "deadmau5", 128, 0.6, 0.6, 0.1, 0.01, -9.4, 0.04, 62)
        ]
        d = _descriptors(acousticness=0.7, speechiness=0.4)
        out = key_insights(_ctx(d, similar=similar, scores=(9, 4, 9)))
        assert len(out) == 5
        assert "Sonically closest to Strobe by deadmau5" in out

    def test_key_insights_can_be_empty(self):
        d = _descriptors(**_PLAIN)
        assert key_insights(_ctx(d, scores=(5, 6, 5))) == ()


class TestSingleValues:
    def test_market_fit_first_match(self):
        assert market_fit(_ctx()).startswith("Club and festival")
        quiet = _ctx(_descriptors(energy=0.5))
        assert market_fit(quiet).startswith("Electronic streaming playlists")

    def test_market_fit_by_genre(self):
        assert market_fit(_ctx(genre="Rock")).startswith("Rock radio")

    def test_market_fit_default(self):
        assert market_fit(_ctx(genre="Polka")) == MARKET_FIT_DEFAULT

    def test_vibe(self):
        assert vibe(_ctx()) == "Groovy and infectious"
        assert vibe(_ctx(_descriptors(energy=0.9))) == "Euphoric and high-octane"
        assert vibe(_ctx(_descriptors(energy=0.9, valence=0.2))) == "Intense and brooding"
        assert vibe(_ctx(_descriptors(**_PLAIN))) == VIBE_DEFAULT


class TestMoodAndPrediction:
    def test_mood_profile(self):
        moods = mood_profile(_descriptors(valence=0.71, energy=1.0, danceability=0.0))
        assert [m.name for m in moods] == ["Happy", "Energetic", "Danceable", "Acoustic"]
        assert [m.intensity for m in moods] == [71, 100, 0, 10]

    def test_prediction_uses_first_market_clause(self):
        ctx = _ctx()
        market = market_fit(ctx)
        sentence = prediction(ctx, market)
        assert "Electronic/Dance (95% confidence)" in sentence
        assert "House" in sentence
        assert "commercial 9/10, production 8/10, viral 9/10" in sentence
        assert sentence.endswith("Best fit: Club and festival circuits.")
