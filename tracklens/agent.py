"""Analysis orchestrator: decode, extract, classify, score."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence, Union

from .classifier import GenreClassifier, GenreModel, classify_track, select_classifier
from .config import DEFAULT_CONFIG, AnalysisConfig
from .corpus import load_default_corpus
from .decoder import decode_audio_async, decode_file
from .extractor import extract_descriptors, waveform_peaks
from .insights import (
    InsightContext,
    improvements,
    key_insights,
    market_fit,
    mood_profile,
    playlist_fit,
    prediction,
    strengths,
    target_audience,
    vibe,
)
from .logging_config import get_logger
from .models import (
    AgentState,
    AnalysisResult,
    AudioDescriptors,
    ClassificationDecision,
    DecodedAudio,
    ReferenceTrack,
)
from .scoring import average_popularity, commercial_score, production_score, viral_potential

logger = get_logger(__name__)

ProgressCallback = Callable[[AgentState], None]


def build_result(
    descriptors: AudioDescriptors,
    decision: ClassificationDecision,
    config: Optional[AnalysisConfig] = None,
    audio: Optional[DecodedAudio] = None,
    waveform: Optional[Sequence[float]] = None,
) -> AnalysisResult:
    """Score a classified track and derive every insight.

    Args:
        descriptors: Extracted audio descriptors.
        decision: Genre decision with ranked similar tracks.
        config: Analysis configuration. Uses DEFAULT_CONFIG if not provided.
        audio: Decoded audio, only used for duration/sample-rate metadata.
        waveform: Normalized bars for display.

    Returns:
        AnalysisResult: The full analysis.
    """
    cfg = config or DEFAULT_CONFIG
    avg_pop = average_popularity(
        decision.similar_tracks, cfg.popularity_window, cfg.default_popularity
    )
    commercial = commercial_score(descriptors, avg_pop)
    production = production_score(descriptors)
    viral = viral_potential(descriptors, commercial)

    ctx = InsightContext(
        descriptors=descriptors,
        decision=decision,
        commercial=commercial,
        production=production,
        viral=viral,
    )
    market = market_fit(ctx)

    return AnalysisResult(
        genre=decision.genre,
        subgenre=decision.subgenre,
        confidence=decision.confidence,
        similar_tracks=decision.similar_tracks,
        descriptors=descriptors,
        commercial_score=commercial,
        production_score=production,
        viral_potential=viral,
        strengths=strengths(ctx),
        improvements=improvements(ctx),
        playlist_fit=playlist_fit(ctx, cfg.playlist_fit_limit),
        market_fit=market,
        vibe=vibe(ctx),
        target_audience=target_audience(ctx),
        mood_profile=mood_profile(descriptors),
        key_insights=key_insights(ctx, cfg.key_insight_limit),
        prediction=prediction(ctx, market),
        duration=audio.duration if audio else None,
        sample_rate=audio.sample_rate if audio else None,
        waveform=tuple(waveform or ()),
        analyzed_at=datetime.now(timezone.utc).isoformat(),
    )


def analyze_descriptors(
    descriptors: AudioDescriptors,
    corpus: Sequence[ReferenceTrack],
    classifier: GenreClassifier,
    config: Optional[AnalysisConfig] = None,
) -> AnalysisResult:
    """Classify and score already-extracted descriptors."""
    decision = classify_track(descriptors, corpus, classifier, config)
    return build_result(descriptors, decision, config)


class MusicAgent:
    """Runs the full analysis pipeline for one file at a time.

    The corpus and model are shared read-only. Runs on one agent are
    serialized, so ``state`` always describes a single run.
    """

    def __init__(
        self,
        corpus: Optional[Sequence[ReferenceTrack]] = None,
        model: Optional[GenreModel] = None,
        config: Optional[AnalysisConfig] = None,
    ):
        """Initialize agent.

        Args:
            corpus: Reference tracks. Loads the bundled corpus if not provided.
            model: Trained genre model. Rule-based classification if not provided.
            config: Analysis configuration. Uses DEFAULT_CONFIG if not provided.
        """
        self.config = config or DEFAULT_CONFIG
        self.corpus = tuple(corpus) if corpus is not None else load_default_corpus()
        self.classifier = select_classifier(model, self.config)
        self._state = AgentState.IDLE
        self._lock = asyncio.Lock()

    @property
    def state(self) -> AgentState:
        return self._state

    def _enter(self, state: AgentState, on_progress: Optional[ProgressCallback]):
        self._state = state
        logger.debug("Agent state: %s", state.value)
        if on_progress is None:
            return
        try:
            on_progress(state)
        except Exception:
            logger.exception("Progress callback failed on state %s", state.value)

    async def run(
        self, data: bytes, on_progress: Optional[ProgressCallback] = None
    ) -> Optional[AnalysisResult]:
        """Analyze an in-memory audio file.

        Args:
            data: Encoded audio file contents.
            on_progress: Called with each AgentState as the run moves through it.

        Returns:
            AnalysisResult, or None if any step failed.
        """
        return await self._run(lambda: decode_audio_async(data), on_progress)

    async def run_file(
        self, file_path: Union[str, Path], on_progress: Optional[ProgressCallback] = None
    ) -> Optional[AnalysisResult]:
        """Analyze an audio file on disk."""
        return await self._run(lambda: asyncio.to_thread(decode_file, file_path), on_progress)

    async def _run(
        self,
        load: Callable[[], Awaitable[DecodedAudio]],
        on_progress: Optional[ProgressCallback],
    ) -> Optional[AnalysisResult]:
        cfg = self.config
        async with self._lock:
            try:
                self._enter(AgentState.OBSERVING, on_progress)
                audio = await load()

                self._enter(AgentState.THINKING, on_progress)
                descriptors = extract_descriptors(audio, cfg)
                waveform = waveform_peaks(audio.channels[0], cfg.waveform_bars)

                self._enter(AgentState.DECIDING, on_progress)
                decision = classify_track(descriptors, self.corpus, self.classifier, cfg)

                self._enter(AgentState.ACTING, on_progress)
                result = build_result(descriptors, decision, cfg, audio, waveform)
            except Exception as e:
                logger.error("Analysis failed: %s", e)
                self._enter(AgentState.ERROR, on_progress)
                result = None
            else:
                logger.info(
                    "Analysis complete: %s / %s (%d%%), scores %d/%d/%d",
                    result.genre,
                    result.subgenre,
                    result.confidence,
                    result.commercial_score,
                    result.production_score,
                    result.viral_potential,
                )
            finally:
                self._enter(AgentState.IDLE, on_progress)
            return result
