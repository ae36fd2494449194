"""Audio decoding front-end: raw bytes to per-channel float samples."""

import asyncio
import io
from pathlib import Path
from typing import Union

import librosa
import numpy as np

from .exceptions import DecodeError
from .logging_config import get_logger
from .models import DecodedAudio

logger = get_logger(__name__)


def decode_audio(data: bytes) -> DecodedAudio:
    """Decode an in-memory audio file at its native sample rate.

    Args:
        data: Encoded audio file contents (WAV, FLAC, OGG, ...).

    Returns:
        DecodedAudio with one float array per channel.

    Raises:
        DecodeError: If the payload is empty or not decodable audio.
    """
    if not data:
        raise DecodeError("Empty audio payload")

    try:
        y, sr = librosa.load(io.BytesIO(data), sr=None, mono=False)
    except Exception as e:
        logger.error("Failed to decode audio payload: %s", e)
        raise DecodeError("Unable to decode audio file") from e

    y = np.asarray(y, dtype=np.float32)
    channels = [y] if y.ndim == 1 else list(y)
    num_samples = len(channels[0]) if channels else 0
    if num_samples == 0 or sr <= 0:
        raise DecodeError("Decoded audio contains no samples")

    duration = num_samples / float(sr)
    logger.debug(
        "Decoded %d channel(s), %d samples @ %d Hz (%.1fs)",
        len(channels),
        num_samples,
        sr,
        duration,
    )
    return DecodedAudio(duration=duration, sample_rate=int(sr), channels=channels)


def decode_file(file_path: Union[str, Path]) -> DecodedAudio:
    """Read and decode an audio file from disk."""
    try:
        data = Path(file_path).read_bytes()
    except OSError as e:
        logger.error("Failed to read audio file %s: %s", file_path, e)
        raise DecodeError("Unable to load audio file") from e
    return decode_audio(data)


async def decode_audio_async(data: bytes) -> DecodedAudio:
    """Decode in a worker thread so large files do not block the event loop."""
    return await asyncio.to_thread(decode_audio, data)
