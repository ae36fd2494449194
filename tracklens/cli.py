"""Command-line interface for tracklens audio analysis."""

import asyncio
import json
import sys
from pathlib import Path

import click

from .agent import MusicAgent
from .classifier import FeedForwardModel
from .corpus import load_default_corpus, load_reference_corpus
from .exceptions import CorpusLoadError, ModelWeightsError
from .logging_config import setup_logging
from .visualizer import render_report


def _load_corpus(corpus_path):
    """Load the corpus given on the command line, or the bundled one."""
    try:
        if corpus_path:
            return load_reference_corpus(corpus_path)
        return load_default_corpus()
    except CorpusLoadError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _load_model(weights_path):
    if not weights_path:
        return None
    try:
        return FeedForwardModel.from_npz(weights_path)
    except ModelWeightsError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose):
    """tracklens - genre, descriptor and market analysis for audio tracks."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("audio_files", nargs=-1, required=True)
@click.option("--format", "output_format", default="text", type=click.Choice(["text", "json"]))
@click.option("--corpus", "corpus_path", default=None, help="Reference corpus CSV")
@click.option("--weights", "weights_path", default=None, help="Genre model weights (.npz)")
def analyze(audio_files, output_format, corpus_path, weights_path):
    """Analyze audio files for genre, audio descriptors and market scores.

    Example:
        tracklens analyze demo.wav --format json
    """
    agent = MusicAgent(corpus=_load_corpus(corpus_path), model=_load_model(weights_path))
    results = []

    for file_path in audio_files:
        if not Path(file_path).exists():
            click.echo(f"Error: Unable to load audio file {file_path}", err=True)
            sys.exit(1)

        result = asyncio.run(agent.run_file(file_path))
        if result is None:
            click.echo(f"Error: Unable to analyze audio file {file_path}", err=True)
            sys.exit(1)
        results.append((file_path, result))

    if output_format == "json":
        tracks = [dict(file=file_path, **result.to_dict()) for file_path, result in results]
        output = tracks[0] if len(tracks) == 1 else {"tracks": tracks}
        click.echo(json.dumps(output, indent=2))
    else:
        for file_path, result in results:
            render_report(result, title=Path(file_path).name)


@cli.command()
@click.option("--corpus", "corpus_path", default=None, help="Reference corpus CSV")
@click.option("--limit", default=10, type=int, help="Rows to show (default: 10)")
def corpus(corpus_path, limit):
    """Show the reference corpus used for similarity ranking."""
    tracks = _load_corpus(corpus_path)
    click.echo(f"{len(tracks)} reference tracks")
    for t in tracks[:limit]:
        click.echo(
            f"{t.display_name}  tempo={t.tempo:.0f} energy={t.energy:.2f} "
            f"popularity={t.popularity:.0f}"
        )
