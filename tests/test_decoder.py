"""Tests for the audio decoding front-end."""

import io

import numpy as np
import pytest
import soundfile as sf

from tracklens.decoder import decode_audio, decode_audio_async, decode_file
from tracklens.exceptions import DecodeError

SR = 22050


def _wav_bytes(y, sr=SR):
    buf = io.BytesIO()
    sf.write(buf, y, sr, format="WAV")
    return buf.getvalue()


def _sine(seconds=1.0):
    t = np.arange(int(SR * seconds)) / SR
    return 0.5 * np.sin(2 * np.pi * 440 * t)


class TestDecode:
    def test_mono(self):
        audio = decode_audio(_wav_bytes(_sine()))
        assert audio.sample_rate == SR
        assert audio.num_channels == 1
        assert audio.duration == pytest.approx(1.0)
        assert np.max(np.abs(audio.channels[0])) <= 1.0

    def test_keeps_native_sample_rate(self):
        audio = decode_audio(_wav_bytes(_sine(), sr=8000))
        assert audio.sample_rate == 8000

    def test_stereo(self):
        y = _sine()
        audio = decode_audio(_wav_bytes(np.stack([y, -y], axis=1)))
        assert audio.num_channels == 2
        assert len(audio.channels[0]) == len(y)

    def test_garbage_bytes(self):
        with pytest.raises(DecodeError):
            decode_audio(b"definitely not audio" * 100)

    def test_empty_payload(self):
        with pytest.raises(DecodeError):
            decode_audio(b"")

    def test_file(self, tmp_path):
        path = tmp_path / "tone.wav"
        sf.write(str(path), _sine(), SR)
        assert decode_file(path).num_channels == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeError):
            decode_file(tmp_path / "missing.wav")

    @pytest.mark.asyncio
    async def test_async(self):
        audio = await decode_audio_async(_wav_bytes(_sine()))
        assert audio.duration == pytest.approx(1.0)
