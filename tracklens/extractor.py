"""Descriptor extraction from decoded audio.

Every formula here is an empirically tuned heuristic over coarse envelope
statistics. The constants are kept exactly as tuned, so the output stays
comparable with previously analyzed tracks.
"""

from typing import List, Optional

import numpy as np

from .config import DEFAULT_CONFIG, AnalysisConfig
from .logging_config import get_logger
from .models import AudioDescriptors, DecodedAudio

logger = get_logger(__name__)


def block_envelopes(samples: np.ndarray, blocks: int):
    """Split samples into equal blocks and return (mean |x|, RMS) per block.

    The remainder that does not fill a whole block is dropped. With fewer
    samples than blocks both envelopes are all zeros, same as silence.
    """
    block_size = len(samples) // blocks
    if block_size == 0:
        logger.debug("Only %d samples for %d blocks, treating as silent", len(samples), blocks)
        return np.zeros(blocks), np.zeros(blocks)
    framed = np.asarray(samples[: block_size * blocks], dtype=np.float64).reshape(
        blocks, block_size
    )
    peaks = np.mean(np.abs(framed), axis=1)
    rms = np.sqrt(np.mean(framed**2, axis=1))
    return peaks, rms


def normalize_peaks(peaks: np.ndarray) -> np.ndarray:
    """Scale peaks by their max; an all-silent envelope stays all zeros."""
    peak_max = float(np.max(peaks)) if len(peaks) else 0.0
    if peak_max <= 0:
        return np.zeros_like(peaks)
    return peaks / peak_max


def dynamic_range(normalized: np.ndarray, floor: float) -> float:
    """Ratio of loudest block to quietest audible block, never below 1."""
    active = normalized[normalized > floor]
    denominator = max(float(np.min(active)), floor) if len(active) else floor
    return max(1.0, float(np.max(normalized)) / denominator)


def estimate_tempo(
    normalized: np.ndarray, avg_energy: float, duration: float, config: AnalysisConfig
) -> float:
    """Estimate BPM from spacing between envelope peaks.

    A block counts as a peak when it is a strict local maximum above
    ``avg_energy * tempo_peak_ratio``.
    """
    threshold = avg_energy * config.tempo_peak_ratio
    inner = normalized[1:-1]
    is_peak = (inner > normalized[:-2]) & (inner > normalized[2:]) & (inner > threshold)
    peak_indices = np.nonzero(is_peak)[0] + 1

    intervals = np.diff(peak_indices)
    if len(intervals) > 0:
        avg_interval = float(np.mean(intervals))
    else:
        avg_interval = config.tempo_default_interval

    block_seconds = duration / config.envelope_blocks
    bpm = 60 / (avg_interval * block_seconds) * 60
    return float(np.clip(bpm, config.tempo_min, config.tempo_max))


def spectral_profile(samples: np.ndarray, chunk_size: int, chunk_count: int) -> np.ndarray:
    """Mean |x| of each of the first ``chunk_count`` chunks."""
    limit = min(len(samples), chunk_size * chunk_count)
    return np.array(
        [np.mean(np.abs(samples[i : i + chunk_size])) for i in range(0, limit, chunk_size)],
        dtype=np.float64,
    )


def count_zero_crossings(samples: np.ndarray) -> int:
    """Count sign changes between consecutive samples (zero counts as positive)."""
    non_negative = np.asarray(samples) >= 0
    return int(np.count_nonzero(non_negative[1:] != non_negative[:-1]))


def _speechiness(silence_ratio: float, energy_variation: float) -> float:
    if silence_ratio > 0.3 and energy_variation > 0.4:
        return min(0.66, 0.25 + energy_variation * 0.3)
    return min(0.25, energy_variation * 0.2)


def _instrumentalness(speechiness: float, spectral_variation: float) -> float:
    if speechiness < 0.15:
        return min(0.9, 0.4 + spectral_variation * 2)
    return max(0.05, 0.4 - speechiness)


def _acousticness(energy: float, spectral_centroid: float) -> float:
    high_freq_ratio = spectral_centroid / 5000
    if energy < 0.5 and high_freq_ratio < 0.8:
        return min(0.95, 0.6 + (1 - energy) * 0.4)
    return max(0.05, 0.4 - energy * 0.3)


def extract_descriptors(
    audio: DecodedAudio, config: Optional[AnalysisConfig] = None
) -> AudioDescriptors:
    """Compute the 10 audio descriptors from channel 0 of decoded audio.

    Args:
        audio: Decoded audio; only the first channel is read.
        config: Analysis configuration. Uses DEFAULT_CONFIG if not provided.

    Returns:
        AudioDescriptors with every bounded field clamped to its range.
    """
    cfg = config or DEFAULT_CONFIG
    samples = np.asarray(audio.channels[0], dtype=np.float64)
    duration = audio.duration

    peaks, rms_energy = block_envelopes(samples, cfg.envelope_blocks)
    normalized = normalize_peaks(peaks)
    silent = not np.any(normalized)

    avg_energy = float(np.mean(normalized))
    variance = float(np.mean((normalized - avg_energy) ** 2))
    std_dev = float(np.sqrt(variance))
    dyn_range = dynamic_range(normalized, cfg.dynamic_range_floor)

    # A silent clip has no rhythm to measure
    if silent:
        tempo = cfg.tempo_min
        rhythmic_consistency = 0.0
    else:
        tempo = estimate_tempo(normalized, avg_energy, duration, cfg)
        rhythmic_consistency = 1 - std_dev * 2

    spectral_data = spectral_profile(samples, cfg.spectral_chunk_size, cfg.spectral_chunk_count)
    spectral_variation = float(np.std(spectral_data)) if len(spectral_data) else 0.0
    zero_crossings = count_zero_crossings(samples)

    silence_ratio = float(np.mean(normalized < cfg.silence_threshold))
    energy_variation = std_dev / avg_energy if avg_energy > 0 else 0.0
    speechiness = _speechiness(silence_ratio, energy_variation)
    instrumentalness = _instrumentalness(speechiness, spectral_variation)

    spectral_centroid = zero_crossings / duration / audio.sample_rate * 10000

    avg_rms = float(np.mean(rms_energy))
    energy = min(1.0, avg_rms * 2.5)
    acousticness = _acousticness(energy, spectral_centroid)

    danceability = min(
        0.95,
        max(0.15, energy * 0.4 + rhythmic_consistency * 0.3 + (0.3 if tempo > 90 else 0.1)),
    )
    valence = min(
        0.95,
        max(
            0.05,
            energy * 0.3
            + (0.25 if tempo > 100 else 0.1)
            + (1 - acousticness) * 0.2
            + variance * 0.8,
        ),
    )
    loudness = -40 + avg_rms * 35 + energy * 10

    descriptors = AudioDescriptors(
        tempo=float(tempo),
        energy=float(energy),
        danceability=float(danceability),
        valence=float(valence),
        acousticness=float(acousticness),
        loudness=float(loudness),
        speechiness=float(speechiness),
        instrumentalness=float(instrumentalness),
        spectral_centroid=float(spectral_centroid),
        dynamic_range=float(dyn_range),
    )
    logger.debug(
        "Descriptors: tempo=%.1f energy=%.2f dance=%.2f zc=%d silent=%s",
        descriptors.tempo,
        descriptors.energy,
        descriptors.danceability,
        zero_crossings,
        silent,
    )
    return descriptors


def waveform_peaks(samples: np.ndarray, bars: int = 100) -> List[float]:
    """Normalized mean |x| per bar for waveform display.

    Returns an empty list when there are fewer samples than bars.
    """
    block_size = len(samples) // bars
    if block_size == 0:
        return []
    framed = np.abs(np.asarray(samples[: block_size * bars], dtype=np.float64)).reshape(
        bars, block_size
    )
    return normalize_peaks(np.mean(framed, axis=1)).tolist()
