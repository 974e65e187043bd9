"""
Rarity distribution analysis.

The result screen advertises a legend of tier shares
(C 35% / U 25% / R 20% / E 12% / M 6% / Lg 1.5% / Sg 0.5%). This module
samples answer vectors from the base answer distribution, runs the
rarity engine over them and reports how the observed shares compare:
1. Tier distribution (counts and percentages)
2. Chi-square goodness of fit against the advertised legend
3. Score distribution of the strongest phase score

This module DOES NOT claim that real users answer like the base
distribution; it documents engine behavior under that assumption.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Any, Iterable, Mapping, Optional
import json
from pathlib import Path

import numpy as np
import pandas as pd
from scipy.stats import chisquare

from ..aggregation.answers import LIKERT_MAX, LIKERT_MIN
from ..scoring.rarity import RarityConfig, calc_rarity_with_debug
from ..tables import ADVERTISED_RARITY_RATES, NUM_QUESTIONS, PHASES, RARITY_ORDER, RarityTier

logger = logging.getLogger(__name__)


@dataclass
class ScoreDistributionStats:
    """Statistics about score distribution."""
    mean: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]  # e.g., {"p10": 0.2, "p50": 0.5, "p90": 0.8}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": float(self.mean),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()}
        }


@dataclass
class TierDistributionStats:
    """Observed tier counts and shares (percent)."""
    n_samples: int
    counts: Dict[RarityTier, int]
    rates: Dict[RarityTier, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_samples": int(self.n_samples),
            "counts": {t.value: int(c) for t, c in self.counts.items()},
            "rates": {t.value: float(r) for t, r in self.rates.items()},
        }


@dataclass
class AdvertisedComparison:
    """Chi-square goodness of fit of observed tiers against advertised rates."""
    chi2: float
    p_value: float
    observed: Dict[RarityTier, int]
    expected: Dict[RarityTier, float]
    alpha: float = 0.05

    @property
    def consistent(self) -> bool:
        """True when the advertised legend is not rejected at `alpha`."""
        return self.p_value >= self.alpha

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chi2": float(self.chi2),
            "p_value": float(self.p_value),
            "alpha": float(self.alpha),
            "consistent": bool(self.consistent),
            "observed": {t.value: int(c) for t, c in self.observed.items()},
            "expected": {t.value: float(e) for t, e in self.expected.items()},
        }


@dataclass
class DistributionReport:
    """
    Complete distribution report for one sampling run.

    Contains tier distribution, advertised-rate comparison and score
    statistics.
    """
    name: str
    seed: Optional[int]
    tier_distribution: TierDistributionStats
    score_distribution: ScoreDistributionStats
    comparison: Optional[AdvertisedComparison] = None
    phase_score_means: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "name": self.name,
            "seed": self.seed,
            "tier_distribution": self.tier_distribution.to_dict(),
            "score_distribution": self.score_distribution.to_dict(),
            "phase_score_means": {k: float(v) for k, v in self.phase_score_means.items()},
        }
        if self.comparison:
            result["comparison"] = self.comparison.to_dict()
        return result

    def to_frame(self) -> pd.DataFrame:
        """Per-tier table of observed and advertised shares."""
        rows = []
        for tier in RARITY_ORDER:
            rows.append({
                "tier": tier.value,
                "count": self.tier_distribution.counts.get(tier, 0),
                "observed_pct": self.tier_distribution.rates.get(tier, 0.0),
                "advertised_pct": ADVERTISED_RARITY_RATES[tier],
            })
        return pd.DataFrame(rows).set_index("tier")

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved distribution report to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the report."""
        lines = [
            f"Distribution Report: {self.name}",
            "=" * 50,
            "",
            f"Samples: {self.tier_distribution.n_samples} (seed={self.seed})",
            "",
            "Tier Shares (observed / advertised):",
        ]
        for tier in RARITY_ORDER:
            observed = self.tier_distribution.rates.get(tier, 0.0)
            lines.append(f"  {tier.value:<3} {observed:6.2f}% / {ADVERTISED_RARITY_RATES[tier]:5.1f}%")

        lines.extend([
            "",
            "Strongest Phase Score:",
            f"  Mean: {self.score_distribution.mean:.4f}",
            f"  Std:  {self.score_distribution.std:.4f}",
            f"  Min:  {self.score_distribution.min:.4f}",
            f"  Max:  {self.score_distribution.max:.4f}",
        ])
        for q_name, q_value in self.score_distribution.quantiles.items():
            lines.append(f"  {q_name}: {q_value:.4f}")

        if self.comparison:
            lines.extend([
                "",
                "Advertised Legend Fit:",
                f"  Chi2:    {self.comparison.chi2:.2f}",
                f"  p-value: {self.comparison.p_value:.4g}",
                f"  Consistent at alpha={self.comparison.alpha}: {self.comparison.consistent}",
            ])

        return "\n".join(lines)


def sample_answer_vectors(
    n: int,
    seed: Optional[int] = None,
    probabilities: Optional[Mapping[int, float]] = None
) -> np.ndarray:
    """
    Draw answer vectors from the base answer distribution.

    Args:
        n: Number of vectors
        seed: Random seed
        probabilities: Answer -> probability (defaults to the rarity
            engine's base distribution)

    Returns:
        (n, 20) int array
    """
    probabilities = probabilities or RarityConfig().base_probabilities
    answers = np.arange(LIKERT_MIN, LIKERT_MAX + 1)
    p = np.array([probabilities[a] for a in answers], dtype=float)
    p = p / p.sum()
    rng = np.random.default_rng(seed)
    return rng.choice(answers, size=(n, NUM_QUESTIONS), p=p)


def compute_tier_distribution(tiers: Iterable) -> TierDistributionStats:
    """Count tiers and convert to percentages; every tier is present."""
    series = pd.Series([RarityTier.parse(t).value for t in tiers], dtype=object)
    n = int(len(series))
    value_counts = series.value_counts()
    counts = {tier: int(value_counts.get(tier.value, 0)) for tier in RARITY_ORDER}
    rates = {tier: (100.0 * c / n if n else 0.0) for tier, c in counts.items()}
    return TierDistributionStats(n_samples=n, counts=counts, rates=rates)


def compare_to_advertised(
    stats: TierDistributionStats,
    rates: Optional[Mapping[RarityTier, float]] = None,
    alpha: float = 0.05
) -> AdvertisedComparison:
    """
    Chi-square goodness of fit against advertised tier shares.

    Args:
        stats: Observed tier distribution
        rates: Advertised percent per tier (defaults to the result legend)
        alpha: Significance level for the `consistent` flag

    Raises:
        ValueError: If there are no samples
    """
    if stats.n_samples == 0:
        raise ValueError("Cannot compare an empty tier distribution")
    rates = rates or ADVERTISED_RARITY_RATES
    total_rate = sum(rates[t] for t in RARITY_ORDER)
    observed = np.array([stats.counts.get(t, 0) for t in RARITY_ORDER], dtype=float)
    expected = np.array([rates[t] / total_rate * stats.n_samples for t in RARITY_ORDER])

    chi2, p_value = chisquare(observed, f_exp=expected)
    return AdvertisedComparison(
        chi2=float(chi2),
        p_value=float(p_value),
        observed={t: int(o) for t, o in zip(RARITY_ORDER, observed)},
        expected={t: float(e) for t, e in zip(RARITY_ORDER, expected)},
        alpha=alpha,
    )


def compute_score_distribution_stats(
    scores: np.ndarray,
    quantiles: List[float] = [0.1, 0.25, 0.5, 0.75, 0.9]
) -> ScoreDistributionStats:
    """
    Compute distribution statistics for scores.

    Args:
        scores: Array of scores
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance
    """
    quantile_dict = {
        f"p{int(q * 100)}": float(np.percentile(scores, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        mean=float(np.mean(scores)),
        std=float(np.std(scores)),
        min=float(np.min(scores)),
        max=float(np.max(scores)),
        quantiles=quantile_dict
    )


def run_distribution_analysis(
    n: int,
    seed: Optional[int] = None,
    config: Optional[RarityConfig] = None,
    name: str = "rarity",
    quantiles: List[float] = [0.1, 0.25, 0.5, 0.75, 0.9]
) -> DistributionReport:
    """
    Sample `n` answer vectors and build a DistributionReport.

    Args:
        n: Number of sampled vectors (must be positive)
        seed: Random seed
        config: RarityConfig used for both sampling and scoring
        name: Report name
        quantiles: Quantiles for the score statistics

    Returns:
        DistributionReport instance
    """
    if n <= 0:
        raise ValueError(f"n must be positive, got {n}")
    config = config or RarityConfig()
    samples = sample_answer_vectors(n, seed, config.base_probabilities)

    tiers = []
    phase_rows = []
    for row in samples:
        breakdown = calc_rarity_with_debug([int(a) for a in row], config)
        tiers.append(breakdown.rarity)
        phase_rows.append({p.value: breakdown.phases[p].score for p in PHASES})

    phase_scores = pd.DataFrame(phase_rows, columns=[p.value for p in PHASES])
    strongest = phase_scores.max(axis=1).to_numpy()

    tier_stats = compute_tier_distribution(tiers)
    report = DistributionReport(
        name=name,
        seed=seed,
        tier_distribution=tier_stats,
        score_distribution=compute_score_distribution_stats(strongest, quantiles),
        comparison=compare_to_advertised(tier_stats),
        phase_score_means=phase_scores.mean().to_dict(),
    )
    logger.info(
        f"Sampled {n} vectors: " +
        ", ".join(f"{t.value}={tier_stats.rates[t]:.1f}%" for t in RARITY_ORDER)
    )
    return report
