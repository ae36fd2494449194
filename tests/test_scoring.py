"""Tests for scoring pure functions."""

import itertools

import pytest

from tracklens.models import AudioDescriptors, ReferenceTrack
from tracklens.scoring import (
    average_popularity,
    clamp_score,
    commercial_score,
    production_score,
    round_half_up,
    score_band,
    viral_potential,
)


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


def _track(popularity):
    return ReferenceTrack(
        song="s",
        artist="a",
        tempo=120.0,
        energy=0.5,
        danceability=0.5,
        valence=0.5,
        acousticness=0.5,
        loudness=-8.0,
        speechiness=0.05,
        popularity=popularity,
    )


# --- Rounding ---


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_clamp(self):
        assert clamp_score(16.05) == 10
        assert clamp_score(-3.0) == 0
        assert clamp_score(9.5) == 10
        assert clamp_score(9.49) == 9


# --- Popularity ---


class TestAveragePopularity:
    def test_empty_defaults(self):
        assert average_popularity([]) == 50.0

    def test_only_top_window(self):
        tracks = [_track(80.0)] * 7 + [_track(0.0)] * 5
        assert average_popularity(tracks) == pytest.approx(80.0)

    def test_fewer_than_window(self):
        assert average_popularity([_track(40.0), _track(60.0)]) == pytest.approx(50.0)


# --- Scores ---


class TestScores:
    def test_commercial_caps_at_ten(self):
        assert commercial_score(_descriptors(), 50.0) == 10

    def test_commercial_floor_case(self):
        d = _descriptors(tempo=60.0, energy=0.0, danceability=0.0, valence=0.05)
        # 0.5 from the low-valence branch, rounded half up
        assert commercial_score(d, 0.0) == 1

    def test_commercial_tempo_window_is_exclusive(self):
        quiet = dict(energy=0.0, danceability=0.0, valence=0.0)
        assert commercial_score(_descriptors(tempo=135.0, **quiet), 0.0) == 1
        assert commercial_score(_descriptors(tempo=134.0, **quiet), 0.0) == 2

    def test_production(self):
        d = _descriptors(acousticness=0.95, energy=0.0, loudness=-40.0, dynamic_range=1.0)
        # (0.15 + 0 + 0.8333 + 0.5) / 0.95 = 1.56
        assert production_score(d) == 2

    def test_production_dynamic_bonus(self):
        flat = _descriptors(dynamic_range=2.0)
        dynamic = _descriptors(dynamic_range=4.0)
        assert production_score(dynamic) >= production_score(flat)

    def test_viral(self):
        d = _descriptors(tempo=60.0, energy=0.0, danceability=0.15)
        # (0.45 + 0 + 0.5 + 0.3) / 0.8 = 1.56
        assert viral_potential(d, 1) == 2

    def test_viral_caps_at_ten(self):
        assert viral_potential(_descriptors(tempo=120.0), 10) == 10

    def test_scores_stay_in_range(self):
        grid = itertools.product(
            (60.0, 100.0, 120.0, 180.0),  # tempo
            (0.0, 0.5, 1.0),  # energy
            (0.15, 0.95),  # danceability
            (0.05, 0.95),  # valence
            (0.05, 0.95),  # acousticness
            (-60.0, -40.0, 5.0),  # loudness
            (1.0, 10.0),  # dynamic range
            (0.0, 50.0, 100.0),  # popularity
        )
        for tempo, energy, dance, valence, acoustic, loudness, dyn, pop in grid:
            d = _descriptors(
                tempo=tempo,
                energy=energy,
                danceability=dance,
                valence=valence,
                acousticness=acoustic,
                loudness=loudness,
                dynamic_range=dyn,
            )
            commercial = commercial_score(d, pop)
            for score in (commercial, production_score(d), viral_potential(d, commercial)):
                assert isinstance(score, int)
                assert 0 <= score <= 10


class TestScoreBand:
    def test_bands(self):
        assert score_band(10) == "high"
        assert score_band(8) == "high"
        assert score_band(7) == "medium"
        assert score_band(6) == "medium"
        assert score_band(5) == "low"
        assert score_band(0) == "low"
