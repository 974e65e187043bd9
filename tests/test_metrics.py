import json

import numpy as np
import pytest

from diagnosis.evaluation import (
    compare_to_advertised,
    compute_score_distribution_stats,
    compute_tier_distribution,
    run_distribution_analysis,
    sample_answer_vectors,
)
from diagnosis.tables import ADVERTISED_RARITY_RATES, RARITY_ORDER, RarityTier


def test_samples_are_seeded_and_in_range():
    first = sample_answer_vectors(100, seed=1)
    second = sample_answer_vectors(100, seed=1)
    assert first.shape == (100, 20)
    assert np.array_equal(first, second)
    assert first.min() >= 1 and first.max() <= 5


def test_samples_follow_base_distribution():
    samples = sample_answer_vectors(5000, seed=2)
    share_neutral = float(np.mean(samples == 3))
    assert share_neutral == pytest.approx(0.40, abs=0.02)


def test_tier_distribution_counts_every_tier():
    stats = compute_tier_distribution(["C", "C", RarityTier.U, "Sg"])
    assert stats.n_samples == 4
    assert stats.counts[RarityTier.C] == 2
    assert stats.counts[RarityTier.M] == 0
    assert stats.rates[RarityTier.SG] == pytest.approx(25.0)
    assert list(stats.counts) == list(RARITY_ORDER)


def test_exact_advertised_counts_fit_perfectly():
    tiers = []
    for tier in RARITY_ORDER:
        tiers += [tier] * int(ADVERTISED_RARITY_RATES[tier] * 10)
    comparison = compare_to_advertised(compute_tier_distribution(tiers))
    assert comparison.chi2 == pytest.approx(0.0)
    assert comparison.p_value == pytest.approx(1.0)
    assert comparison.consistent


def test_skewed_counts_are_rejected():
    comparison = compare_to_advertised(compute_tier_distribution(["Sg"] * 500 + ["C"] * 500))
    assert not comparison.consistent


def test_empty_distribution_cannot_be_compared():
    with pytest.raises(ValueError):
        compare_to_advertised(compute_tier_distribution([]))


def test_score_distribution_stats():
    stats = compute_score_distribution_stats(np.array([0.0, 0.25, 0.5, 0.75, 1.0]))
    assert stats.mean == pytest.approx(0.5)
    assert stats.min == 0.0 and stats.max == 1.0
    assert stats.quantiles["p50"] == pytest.approx(0.5)


def test_distribution_report(tmp_path):
    report = run_distribution_analysis(60, seed=4)
    assert report.tier_distribution.n_samples == 60
    assert sum(report.tier_distribution.counts.values()) == 60

    frame = report.to_frame()
    assert list(frame.index) == [t.value for t in RARITY_ORDER]
    assert frame["observed_pct"].sum() == pytest.approx(100.0)

    assert "Distribution Report" in report.summary()
    path = tmp_path / "reports" / "distribution.json"
    report.save(str(path))
    saved = json.loads(path.read_text())
    assert saved["tier_distribution"]["n_samples"] == 60
    assert "comparison" in saved


def test_distribution_requires_samples():
    with pytest.raises(ValueError):
        run_distribution_analysis(0)
