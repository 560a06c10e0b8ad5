"""Heuristic confidence scoring for generated summaries."""

from __future__ import annotations

import math

MAX_CONFIDENCE = 98
TRANSCRIPT_BASE_CONFIDENCE = 90
METADATA_BASE_CONFIDENCE = 70
COVERAGE_WEIGHT = 10
TRANSCRIPT_WEIGHT = 5
FALLBACK_PENALTY = 10


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def coverage_ratio(videos_sampled: int, total_videos: int) -> float:
    """Fraction of the playlist that was sampled, capped at 1.0."""

    if total_videos <= 0:
        return 1.0 if videos_sampled > 0 else 0.0
    return min(videos_sampled / total_videos, 1.0)


def score_confidence(
    *,
    videos_sampled: int,
    total_videos: int,
    transcripts_found: int,
    transcripts_attempted: bool,
) -> int:
    """Return a 0-98 score from coverage, transcript hit rate, and the gathering strategy.

    The cap stays below 100 because the score is an estimate, never a certainty.
    """

    base = TRANSCRIPT_BASE_CONFIDENCE if transcripts_attempted else METADATA_BASE_CONFIDENCE
    coverage_bonus = _round_half_up(coverage_ratio(videos_sampled, total_videos) * COVERAGE_WEIGHT)

    transcript_bonus = 0
    if transcripts_attempted and videos_sampled > 0:
        success_rate = transcripts_found / videos_sampled
        transcript_bonus = _round_half_up(success_rate * TRANSCRIPT_WEIGHT)

    return min(base + coverage_bonus + transcript_bonus, MAX_CONFIDENCE)


def apply_fallback_penalty(confidence: int) -> int:
    """Lower the score when the model reply could not be parsed as JSON."""

    return max(confidence - FALLBACK_PENALTY, 0)


__all__ = [
    "FALLBACK_PENALTY",
    "MAX_CONFIDENCE",
    "apply_fallback_penalty",
    "coverage_ratio",
    "score_confidence",
]
