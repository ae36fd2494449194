"""Genre classification and reference-track similarity ranking."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple, Union

import numpy as np

from .config import DEFAULT_CONFIG, AnalysisConfig
from .exceptions import ModelWeightsError
from .logging_config import get_logger
from .models import AudioDescriptors, ClassificationDecision, ReferenceTrack
from .scoring import round_half_up

logger = get_logger(__name__)

# Closed set; model output index i maps to GENRES[i]
GENRES = (
    "Electronic/Dance",
    "Hip-Hop/Rap",
    "Pop",
    "Rock",
    "Acoustic/Folk",
    "R&B/Soul",
    "Indie/Alternative",
    "Classical/Ambient",
)

MODEL_INPUT_SIZE = 10


# --- Similarity ranking ---


def _tiered(diff: float, tiers: Sequence[Tuple[float, float]]) -> float:
    """Points for the first tier whose threshold covers diff."""
    for threshold, points in tiers:
        if diff <= threshold:
            return points
    return 0.0


def score_similarity(descriptors: AudioDescriptors, track: ReferenceTrack) -> float:
    """Additive closeness score between descriptors and a reference track."""
    d = descriptors
    score = 0.0
    score += _tiered(abs(d.tempo - track.tempo), [(10, 5.0), (20, 3.0), (30, 1.0)])
    score += _tiered(abs(d.energy - track.energy), [(0.1, 4.0), (0.2, 2.0)])
    score += _tiered(abs(d.danceability - track.danceability), [(0.1, 3.0), (0.2, 1.5)])
    score += _tiered(abs(d.valence - track.valence), [(0.15, 2.0), (0.3, 1.0)])
    score += _tiered(abs(d.acousticness - track.acousticness), [(0.15, 2.5)])
    score += _tiered(abs(d.loudness - track.loudness), [(4, 2.0)])
    score += _tiered(abs(d.speechiness - track.speechiness), [(0.1, 2.0)])
    return score


def rank_similar_tracks(
    descriptors: AudioDescriptors, corpus: Sequence[ReferenceTrack], limit: int = 20
) -> List[ReferenceTrack]:
    """Rank corpus tracks by descending similarity.

    ``sorted`` is stable, so equal scores keep their corpus order.
    """
    scored = [(score_similarity(descriptors, t), t) for t in corpus]
    scored.sort(key=lambda x: -x[0])
    return [t for _, t in scored[:limit]]


# --- Rule-based fallback ---


@dataclass(frozen=True)
class GenreProfile:
    """Expected tempo range and feature midpoints of a genre."""

    genre: str
    tempo_range: Tuple[float, float]
    energy: float
    danceability: float
    acousticness: float
    speechiness: float
    valence: float


GENRE_PROFILES = (
    GenreProfile("Electronic/Dance", (118, 140), 0.80, 0.80, 0.10, 0.06, 0.60),
    GenreProfile("Hip-Hop/Rap", (80, 110), 0.65, 0.75, 0.15, 0.30, 0.50),
    GenreProfile("Pop", (90, 125), 0.60, 0.65, 0.25, 0.08, 0.70),
    GenreProfile("Rock", (100, 150), 0.80, 0.50, 0.10, 0.06, 0.50),
    GenreProfile("Acoustic/Folk", (70, 120), 0.35, 0.50, 0.80, 0.05, 0.50),
    GenreProfile("R&B/Soul", (65, 100), 0.50, 0.65, 0.35, 0.10, 0.55),
    GenreProfile("Indie/Alternative", (90, 140), 0.60, 0.55, 0.30, 0.06, 0.45),
    GenreProfile("Classical/Ambient", (60, 100), 0.20, 0.25, 0.90, 0.04, 0.30),
)


def score_profile(
    descriptors: AudioDescriptors, profile: GenreProfile, config: AnalysisConfig
) -> float:
    """Sum the weights of every profile feature the descriptors match."""
    d = descriptors
    tol = config.profile_tolerance
    lo, hi = profile.tempo_range
    score = 0.0
    if lo <= d.tempo <= hi:
        score += config.profile_tempo_weight
    if abs(d.energy - profile.energy) <= tol:
        score += config.profile_energy_weight
    if abs(d.danceability - profile.danceability) <= tol:
        score += config.profile_danceability_weight
    if abs(d.acousticness - profile.acousticness) <= tol:
        score += config.profile_acousticness_weight
    if abs(d.speechiness - profile.speechiness) <= tol:
        score += config.profile_speechiness_weight
    if abs(d.valence - profile.valence) <= tol:
        score += config.profile_valence_weight
    return score


class RuleBasedClassifier:
    """Deterministic genre-profile scoring used when no trained model is loaded."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def classify(self, descriptors: AudioDescriptors) -> Tuple[str, int]:
        best_genre = GENRE_PROFILES[0].genre
        best_score = -1.0
        for profile in GENRE_PROFILES:
            score = score_profile(descriptors, profile, self.config)
            # Strict comparison keeps the earlier profile on ties
            if score > best_score:
                best_score = score
                best_genre = profile.genre

        cfg = self.config
        confidence = int(
            min(cfg.rule_confidence_max, max(cfg.rule_confidence_min, round_half_up(best_score)))
        )
        return best_genre, confidence


# --- Model-backed classification ---


class GenreModel(Protocol):
    def predict(self, vector: np.ndarray) -> Tuple[int, np.ndarray]:
        ...


class FeedForwardModel:
    """Multi-layer perceptron over the normalized descriptor vector.

    Hidden layers use ReLU, the output layer softmax over the 8 genres.
    Weights are supplied externally; nothing is trained here.
    """

    def __init__(self, layers: Sequence[Tuple[np.ndarray, np.ndarray]]):
        if not layers:
            raise ModelWeightsError("Model needs at least one layer")

        checked = []
        expected_in = MODEL_INPUT_SIZE
        for i, (weights, bias) in enumerate(layers):
            weights = np.asarray(weights, dtype=np.float64)
            bias = np.asarray(bias, dtype=np.float64)
            if weights.ndim != 2 or weights.shape[0] != expected_in:
                raise ModelWeightsError(
                    f"Layer {i} weights have shape {weights.shape}, expected ({expected_in}, n)"
                )
            if bias.shape != (weights.shape[1],):
                raise ModelWeightsError(
                    f"Layer {i} bias has shape {bias.shape}, expected ({weights.shape[1]},)"
                )
            checked.append((weights, bias))
            expected_in = weights.shape[1]

        if expected_in != len(GENRES):
            raise ModelWeightsError(
                f"Output layer has {expected_in} units, expected {len(GENRES)}"
            )
        self.layers = tuple(checked)

    @classmethod
    def from_npz(cls, path: Union[str, Path]) -> "FeedForwardModel":
        """Load weights stored as W0, b0, W1, b1, ... in an .npz archive."""
        try:
            archive = np.load(path)
        except (OSError, ValueError) as e:
            raise ModelWeightsError(f"Unable to read model weights {path}: {e}") from e
        if not hasattr(archive, "files"):
            raise ModelWeightsError(f"Model weights {path} are not an .npz archive")

        with archive:
            layers = []
            i = 0
            while f"W{i}" in archive.files:
                if f"b{i}" not in archive.files:
                    raise ModelWeightsError(f"Missing bias b{i} in {path}")
                layers.append((archive[f"W{i}"], archive[f"b{i}"]))
                i += 1

        logger.debug("Loaded %d-layer genre model from %s", len(layers), path)
        return cls(layers)

    def predict(self, vector: np.ndarray) -> Tuple[int, np.ndarray]:
        """Return (arg-max index, probability vector)."""
        x = np.asarray(vector, dtype=np.float64)
        last = len(self.layers) - 1
        for i, (weights, bias) in enumerate(self.layers):
            x = x @ weights + bias
            if i < last:
                x = np.maximum(x, 0.0)
        exp = np.exp(x - np.max(x))
        probs = exp / np.sum(exp)
        return int(np.argmax(probs)), probs


class ModelClassifier:
    """Classify by arg-max of a trained model's output distribution."""

    def __init__(self, model: GenreModel):
        self.model = model

    def classify(self, descriptors: AudioDescriptors) -> Tuple[str, int]:
        index, probs = self.model.predict(descriptors.as_vector())
        confidence = int(round_half_up(float(probs[index]) * 100))
        return GENRES[index], min(100, max(0, confidence))


class GenreClassifier(Protocol):
    def classify(self, descriptors: AudioDescriptors) -> Tuple[str, int]:
        ...


def select_classifier(
    model: Optional[GenreModel] = None, config: Optional[AnalysisConfig] = None
) -> GenreClassifier:
    """Model-backed when a model is supplied, rule-based otherwise."""
    if model is not None:
        return ModelClassifier(model)
    logger.debug("No trained genre model, using rule-based classification")
    return RuleBasedClassifier(config)


# --- Subgenres ---

Rule = Tuple[Callable[[AudioDescriptors], bool], str]

# Evaluated top to bottom, first match wins
SUBGENRE_RULES: Dict[str, Tuple[Rule, ...]] = {
    "Electronic/Dance": (
        (lambda d: d.tempo >= 160, "Drum & Bass"),
        (lambda d: d.tempo > 130 and d.energy > 0.75, "Techno"),
        (lambda d: d.danceability > 0.75, "House"),
        (lambda d: d.acousticness > 0.3, "Downtempo"),
        (lambda d: d.energy < 0.5, "Chillout"),
    ),
    "Hip-Hop/Rap": (
        (lambda d: d.tempo >= 130 and d.energy > 0.7, "Trap"),
        (lambda d: d.energy < 0.45, "Lo-Fi Hip-Hop"),
        (lambda d: d.speechiness > 0.3, "Boom Bap"),
        (lambda d: d.valence > 0.6, "Melodic Rap"),
    ),
    "Pop": (
        (lambda d: d.danceability > 0.75 and d.energy > 0.7, "Dance Pop"),
        (lambda d: d.acousticness > 0.5, "Acoustic Pop"),
        (lambda d: d.energy < 0.45, "Pop Ballad"),
        (lambda d: d.acousticness < 0.1, "Synth-Pop"),
    ),
    "Rock": (
        (lambda d: d.energy > 0.85 and d.tempo > 140, "Punk Rock"),
        (lambda d: d.energy > 0.8 and d.loudness > -6, "Hard Rock"),
        (lambda d: d.acousticness > 0.4, "Soft Rock"),
        (lambda d: d.valence < 0.35, "Alternative Rock"),
    ),
    "Acoustic/Folk": (
        (lambda d: d.instrumentalness > 0.7, "Fingerstyle"),
        (lambda d: d.valence > 0.6, "Folk Pop"),
        (lambda d: d.energy < 0.25, "Singer-Songwriter"),
    ),
    "R&B/Soul": (
        (lambda d: d.tempo < 80 and d.energy < 0.5, "Slow Jam"),
        (lambda d: d.danceability > 0.7, "Contemporary R&B"),
        (lambda d: d.acousticness > 0.5, "Neo-Soul"),
    ),
    "Indie/Alternative": (
        (lambda d: d.acousticness > 0.5, "Indie Folk"),
        (lambda d: d.danceability > 0.7, "Indie Pop"),
        (lambda d: d.energy > 0.75, "Indie Rock"),
        (lambda d: d.valence < 0.35, "Dream Pop"),
    ),
    "Classical/Ambient": (
        (lambda d: d.instrumentalness > 0.8 and d.energy < 0.2, "Ambient"),
        (lambda d: d.acousticness > 0.8, "Classical"),
        (lambda d: d.tempo < 70, "Drone"),
    ),
}

SUBGENRE_DEFAULTS = {
    "Electronic/Dance": "EDM",
    "Hip-Hop/Rap": "Hip-Hop",
    "Pop": "Mainstream Pop",
    "Rock": "Classic Rock",
    "Acoustic/Folk": "Contemporary Folk",
    "R&B/Soul": "Soul",
    "Indie/Alternative": "Alternative",
    "Classical/Ambient": "Neo-Classical",
}


def derive_subgenre(genre: str, descriptors: AudioDescriptors) -> str:
    """First matching subgenre rule for the genre, else its default label."""
    for predicate, label in SUBGENRE_RULES.get(genre, ()):
        if predicate(descriptors):
            return label
    return SUBGENRE_DEFAULTS.get(genre, genre)


def classify_track(
    descriptors: AudioDescriptors,
    corpus: Sequence[ReferenceTrack],
    classifier: GenreClassifier,
    config: Optional[AnalysisConfig] = None,
) -> ClassificationDecision:
    """Decide genre, subgenre and confidence, and rank the corpus."""
    cfg = config or DEFAULT_CONFIG
    genre, confidence = classifier.classify(descriptors)
    similar = rank_similar_tracks(descriptors, corpus, cfg.similar_track_limit)
    return ClassificationDecision(
        genre=genre,
        subgenre=derive_subgenre(genre, descriptors),
        confidence=confidence,
        similar_tracks=tuple(similar),
    )
