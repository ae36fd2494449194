"""Tests for reference corpus loading."""

import io

import pytest

from tracklens.corpus import load_default_corpus, load_reference_corpus, parse_corpus
from tracklens.exceptions import CorpusLoadError

HEADER = "song,artist,tempo,energy,danceability,valence,acousticness,loudness,speechiness,popularity"


def _parse(text):
    return parse_corpus(io.StringIO(text))


class TestParseCorpus:
    def test_basic_row(self):
        tracks = _parse(HEADER + "\nStrobe,deadmau5,128,0.63,0.6,0.07,0.01,-9.4,0.04,62\n")
        assert len(tracks) == 1
        t = tracks[0]
        assert t.song == "Strobe"
        assert t.artist == "deadmau5"
        assert t.tempo == 128.0
        assert t.popularity == 62.0
        assert t.key is None
        assert t.instrumentalness is None

    def test_header_aliases_and_column_order(self):
        text = (
            "Track Name,Artists,Popularity,BPM,Energy,Danceability,Valence,"
            "Acousticness,Loudness,Speechiness,Key,Mode\n"
            "Get Lucky,Daft Punk,80,116,0.81,0.79,0.86,0.04,-8.1,0.04,6,0\n"
        )
        (t,) = _parse(text)
        assert t.song == "Get Lucky"
        assert t.artist == "Daft Punk"
        assert t.tempo == 116.0
        assert t.key == 6
        assert t.mode == 0

    def test_malformed_rows_skipped(self):
        text = (
            HEADER
            + "\nGood,A,120,0.5,0.5,0.5,0.5,-8,0.05,50"
            + "\nBad Number,A,fast,0.5,0.5,0.5,0.5,-8,0.05,50"
            + "\nShort,A,120,0.5"
            + "\n,A,120,0.5,0.5,0.5,0.5,-8,0.05,50"
            + "\n\nAlso Good,B,90,0.3,0.4,0.2,0.7,-12,0.03,40\n"
        )
        tracks = _parse(text)
        assert [t.song for t in tracks] == ["Good", "Also Good"]

    def test_missing_required_column(self):
        text = "song,artist,tempo\nA,B,120\n"
        assert _parse(text) == ()

    def test_byte_order_mark(self):
        text = "\ufeff" + HEADER + "\nA,B,120,0.5,0.5,0.5,0.5,-8,0.05,50\n"
        assert _parse(text)[0].song == "A"

    def test_empty_input(self):
        assert _parse("") == ()


class TestLoadCorpus:
    def test_load_from_file(self, tmp_path):
        path = tmp_path / "corpus.csv"
        path.write_text(HEADER + "\nA,B,120,0.5,0.5,0.5,0.5,-8,0.05,50\n", encoding="utf-8")
        assert len(load_reference_corpus(path)) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(CorpusLoadError):
            load_reference_corpus(tmp_path / "missing.csv")

    def test_default_corpus(self):
        tracks = load_default_corpus()
        assert len(tracks) == 40
        assert all(60 <= t.tempo <= 200 for t in tracks)
        assert all(0 <= t.popularity <= 100 for t in tracks)
