"""Evaluation module for rarity distribution analysis."""

from .metrics import (
    sample_answer_vectors,
    compute_tier_distribution,
    compare_to_advertised,
    compute_score_distribution_stats,
    run_distribution_analysis,
    DistributionReport,
)

__all__ = [
    "sample_answer_vectors",
    "compute_tier_distribution",
    "compare_to_advertised",
    "compute_score_distribution_stats",
    "run_distribution_analysis",
    "DistributionReport",
]
