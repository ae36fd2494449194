"""Reference corpus loading."""

import csv
import io
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from .exceptions import CorpusLoadError
from .logging_config import get_logger
from .models import ReferenceTrack

logger = get_logger(__name__)

DEFAULT_CORPUS_PATH = Path(__file__).parent / "data" / "reference_tracks.csv"

REQUIRED_FIELDS = (
    "tempo",
    "energy",
    "danceability",
    "valence",
    "acousticness",
    "loudness",
    "speechiness",
    "popularity",
)
OPTIONAL_FLOAT_FIELDS = ("instrumentalness", "liveness")
OPTIONAL_INT_FIELDS = ("key", "mode")

# Alternate column names seen in exported track datasets
HEADER_ALIASES = {
    "track_name": "song",
    "track": "song",
    "name": "song",
    "title": "song",
    "artists": "artist",
    "artist_name": "artist",
    "bpm": "tempo",
}


def _normalize_header(name: str) -> str:
    key = name.strip().lower().replace(" ", "_").replace("-", "_")
    return HEADER_ALIASES.get(key, key)


def _optional(raw: Optional[str], cast):
    if raw is None or not raw.strip():
        return None
    return cast(float(raw))


def parse_row(row: Dict[str, str]) -> Optional[ReferenceTrack]:
    """Build a ReferenceTrack from a header-normalized row, or None if malformed."""
    song = (row.get("song") or "").strip()
    artist = (row.get("artist") or "").strip()
    if not song:
        return None
    try:
        values = {name: float(row[name]) for name in REQUIRED_FIELDS}
        for name in OPTIONAL_FLOAT_FIELDS:
            values[name] = _optional(row.get(name), float)
        for name in OPTIONAL_INT_FIELDS:
            values[name] = _optional(row.get(name), int)
    except (KeyError, TypeError, ValueError):
        return None
    return ReferenceTrack(song=song, artist=artist, **values)


def parse_corpus(lines: Iterable[str]) -> Tuple[ReferenceTrack, ...]:
    """Parse CSV lines into reference tracks, skipping malformed rows."""
    reader = csv.reader(lines)
    try:
        header = next(reader)
    except StopIteration:
        return ()
    if header and header[0].startswith("\ufeff"):
        header[0] = header[0][1:]
    columns = [_normalize_header(h) for h in header]

    tracks = []
    skipped = 0
    for line_no, raw in enumerate(reader, start=2):
        if not any(cell.strip() for cell in raw):
            continue
        track = parse_row(dict(zip(columns, raw)))
        if track is None:
            skipped += 1
            logger.debug("Skipping malformed corpus row %d", line_no)
            continue
        tracks.append(track)

    if skipped:
        logger.warning("Skipped %d malformed corpus row(s)", skipped)
    return tuple(tracks)


def load_reference_corpus(path: Union[str, Path]) -> Tuple[ReferenceTrack, ...]:
    """Load a reference corpus from a CSV file.

    Args:
        path: CSV file with a header row.

    Returns:
        Tuple of reference tracks in file order.

    Raises:
        CorpusLoadError: If the file cannot be read.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusLoadError(f"Unable to read reference corpus {path}: {e}") from e

    tracks = parse_corpus(io.StringIO(text))
    logger.debug("Loaded %d reference tracks from %s", len(tracks), path)
    return tracks


def load_default_corpus() -> Tuple[ReferenceTrack, ...]:
    """Load the reference corpus bundled with the package."""
    return load_reference_corpus(DEFAULT_CORPUS_PATH)
