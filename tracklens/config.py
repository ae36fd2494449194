"""Configuration for tracklens analysis parameters."""

from dataclasses import dataclass


@dataclass
class AnalysisConfig:
    """Configuration for audio analysis."""

    # Envelope blocks the channel is partitioned into
    envelope_blocks: int = 200

    # Bars in the visualization waveform
    waveform_bars: int = 100

    # Spectral proxy chunking
    spectral_chunk_size: int = 2048
    spectral_chunk_count: int = 10

    # Tempo estimation
    tempo_min: float = 60.0
    tempo_max: float = 180.0
    tempo_peak_ratio: float = 1.2
    tempo_default_interval: float = 20.0

    # Silence and dynamic range floors
    silence_threshold: float = 0.08
    dynamic_range_floor: float = 0.01

    # Similarity ranking
    similar_track_limit: int = 20
    popularity_window: int = 7
    default_popularity: float = 50.0

    # Rule-based genre profiles (weights sum to 100)
    profile_tempo_weight: float = 25.0
    profile_energy_weight: float = 20.0
    profile_danceability_weight: float = 15.0
    profile_acousticness_weight: float = 15.0
    profile_speechiness_weight: float = 15.0
    profile_valence_weight: float = 10.0
    profile_tolerance: float = 0.15
    rule_confidence_min: int = 60
    rule_confidence_max: int = 95

    # Insight list limits
    playlist_fit_limit: int = 6
    key_insight_limit: int = 5


# Default configuration instance
DEFAULT_CONFIG = AnalysisConfig()
