"""Rich terminal report for analysis results."""

from typing import List, Optional, Sequence

import numpy as np
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tracklens.models import AnalysisResult
from tracklens.scoring import score_band

BLOCKS = " ▁▂▃▄▅▆▇█"
COLORS = ["blue", "cyan", "green", "yellow", "red"]
BAND_COLORS = {"high": "green", "medium": "yellow", "low": "red"}


def _amplitude_color(level: float) -> str:
    """Map normalized amplitude (0-1) to a color name."""
    idx = min(int(level * len(COLORS)), len(COLORS) - 1)
    return COLORS[idx]


def _format_time(seconds: float) -> str:
    """Format seconds as M:SS."""
    m = int(seconds) // 60
    s = int(seconds) % 60
    return f"{m}:{s:02d}"


def _resample(envelope: Sequence[float], width: int) -> List[float]:
    """Stretch or shrink the envelope to exactly width columns."""
    if not envelope:
        return [0.0] * width
    indices = np.linspace(0, len(envelope) - 1, width).astype(int)
    return [float(envelope[i]) for i in indices]


def _build_waveform_line(envelope: List[float]) -> Text:
    """Build a Rich Text line of colored Unicode block characters."""
    text = Text()
    for amp in envelope:
        idx = min(int(amp * (len(BLOCKS) - 1)), len(BLOCKS) - 1)
        text.append(BLOCKS[idx], style=_amplitude_color(amp))
    return text


def _build_timeline(duration: Optional[float], width: int) -> Text:
    """Build a ruler with the start and end time."""
    if not duration:
        return Text()
    start = _format_time(0)
    end = _format_time(duration)
    gap = max(1, width - len(start) - len(end))
    return Text(start + " " * gap + end, style="dim")


def _score_line(result: AnalysisResult) -> Text:
    text = Text()
    for label, score in (
        ("Commercial", result.commercial_score),
        ("Production", result.production_score),
        ("Viral", result.viral_potential),
    ):
        text.append(f"{label}: ")
        text.append(f"{score}/10", style=f"bold {BAND_COLORS[score_band(score)]}")
        text.append("   ")
    return text


def _descriptor_table(result: AnalysisResult) -> Table:
    d = result.descriptors
    table = Table(show_header=False, box=None, padding=(0, 2))
    rows = [
        ("Tempo", f"{d.tempo:.0f} BPM", "Energy", f"{d.energy * 100:.0f}%"),
        ("Danceability", f"{d.danceability * 100:.0f}%", "Valence", f"{d.valence * 100:.0f}%"),
        ("Acousticness", f"{d.acousticness * 100:.0f}%", "Loudness", f"{d.loudness:.0f} dB"),
        (
            "Speechiness",
            f"{d.speechiness * 100:.0f}%",
            "Instrumental",
            f"{d.instrumentalness * 100:.0f}%",
        ),
        ("Spectral", f"{d.spectral_centroid:.0f} Hz", "Dynamic range", f"{d.dynamic_range:.1f}x"),
    ]
    for row in rows:
        table.add_row(*row)
    return table


def _bullets(title: str, items: Sequence[str], style: str) -> Text:
    text = Text(title, style=f"bold {style}")
    for item in items:
        text.append(f"\n  • {item}")
    return text


def render_report(
    result: AnalysisResult, title: str, width: int = 70, console: Optional[Console] = None
) -> None:
    """Render an analysis result as a panel in the terminal.

    Args:
        result: AnalysisResult from the agent.
        title: Panel title, usually the file name.
        width: Character width of the waveform display.
        console: Console to print to. A new stdout console if not provided.
    """
    console = console or Console()

    header = Text()
    header.append(f"{result.genre}", style="bold magenta")
    header.append(f" / {result.subgenre}  ({result.confidence}% confidence)")

    parts = [header, Text(f"Vibe: {result.vibe}", style="italic")]
    if result.waveform:
        parts.append(_build_waveform_line(_resample(result.waveform, width)))
        parts.append(_build_timeline(result.duration, width))
    parts.append(_score_line(result))
    parts.append(_descriptor_table(result))
    parts.append(_bullets("STRENGTHS", result.strengths, "green"))
    parts.append(_bullets("SUGGESTED IMPROVEMENTS", result.improvements, "yellow"))

    moods = "  ".join(f"{m.name} {m.intensity}%" for m in result.mood_profile)
    parts.append(Text(f"Mood: {moods}"))
    parts.append(Text(f"Playlists: {', '.join(result.playlist_fit)}"))
    if result.similar_tracks:
        similar = ", ".join(t.display_name for t in result.similar_tracks[:5])
        parts.append(Text(f"Similar: {similar}", style="dim"))
    parts.append(Text(result.prediction, style="bold"))

    console.print(Panel(Group(*parts), title=title, expand=False))
