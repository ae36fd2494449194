"""Domain models for tracklens."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np


class AgentState(Enum):
    """Phase of a single analysis run, reported for progress display."""

    IDLE = "idle"
    OBSERVING = "observing"
    THINKING = "thinking"
    DECIDING = "deciding"
    ACTING = "acting"
    ERROR = "error"


@dataclass(frozen=True)
class ReferenceTrack:
    """One row of the reference corpus with ground-truth audio features."""

    song: str
    artist: str
    tempo: float  # BPM
    energy: float  # 0-1
    danceability: float  # 0-1
    valence: float  # 0-1
    acousticness: float  # 0-1
    loudness: float  # dB
    speechiness: float  # 0-1
    popularity: float  # 0-100
    key: Optional[int] = None
    mode: Optional[int] = None
    instrumentalness: Optional[float] = None
    liveness: Optional[float] = None

    @property
    def display_name(self) -> str:
        """Get display name for the track."""
        return f"{self.artist} - {self.song}"


@dataclass
class DecodedAudio:
    """Decoded waveform; only channel 0 is analyzed."""

    duration: float  # seconds
    sample_rate: int  # Hz
    channels: Sequence[np.ndarray]

    @property
    def num_channels(self) -> int:
        return len(self.channels)


@dataclass(frozen=True)
class AudioDescriptors:
    """The 10 audio features consumed by classification and scoring."""

    tempo: float  # BPM, 60-180
    energy: float  # 0-1
    danceability: float  # 0-1
    valence: float  # 0-1
    acousticness: float  # 0-1
    loudness: float  # dB
    speechiness: float  # 0-1
    instrumentalness: float  # 0-1
    spectral_centroid: float  # Hz-scaled proxy
    dynamic_range: float  # ratio >= 1

    def as_vector(self) -> np.ndarray:
        """Normalized model input, every field roughly in [0, 1]."""
        return np.array(
            [
                self.tempo / 200,
                self.energy,
                self.danceability,
                self.valence,
                self.acousticness,
                (self.loudness + 60) / 60,
                self.speechiness,
                self.instrumentalness,
                self.spectral_centroid / 5000,
                self.dynamic_range / 10,
            ],
            dtype=float,
        )


@dataclass(frozen=True)
class ClassificationDecision:
    """Genre decision plus the reference tracks closest to the input."""

    genre: str
    subgenre: str
    confidence: int  # percent, 0-100
    similar_tracks: Tuple[ReferenceTrack, ...] = ()


@dataclass(frozen=True)
class MoodEntry:
    """A named mood intensity."""

    name: str
    intensity: int  # percent, 0-100


@dataclass(frozen=True)
class AnalysisResult:
    """Full output of one analysis run."""

    genre: str
    subgenre: str
    confidence: int
    similar_tracks: Tuple[ReferenceTrack, ...]
    descriptors: AudioDescriptors
    commercial_score: int
    production_score: int
    viral_potential: int
    strengths: Tuple[str, ...]
    improvements: Tuple[str, ...]
    playlist_fit: Tuple[str, ...]
    market_fit: str
    vibe: str
    target_audience: Tuple[str, ...]
    mood_profile: Tuple[MoodEntry, ...]
    key_insights: Tuple[str, ...]
    prediction: str
    duration: Optional[float] = None
    sample_rate: Optional[int] = None
    waveform: Tuple[float, ...] = ()
    analyzed_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        data = asdict(self)
        data["similar_tracks"] = [
            {"song": t.song, "artist": t.artist, "popularity": t.popularity}
            for t in self.similar_tracks
        ]
        return data
