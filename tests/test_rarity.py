import numpy as np
import pytest

from diagnosis.evaluation import sample_answer_vectors
from diagnosis.scoring.rarity import (
    RarityConfig,
    calc_coherence,
    calc_edge_gate,
    calc_jitter,
    calc_rarity,
    calc_rarity_with_debug,
    safe_calc_rarity,
    tier_from_score,
)
from diagnosis.aggregation import InvalidAnswersError
from diagnosis.tables import PHASES, RarityTier, max_tier

THRESHOLDS = RarityConfig().tier_thresholds


def test_all_neutral_is_common():
    breakdown = calc_rarity_with_debug([3] * 20)
    assert breakdown.rarity == RarityTier.C
    for phase_rarity in breakdown.phases.values():
        assert phase_rarity.s_norm == pytest.approx(0.0, abs=1e-9)
        assert phase_rarity.coherence == 0.0
        assert phase_rarity.neutral == pytest.approx(1.0)
        assert phase_rarity.anti_noise == pytest.approx(0.3)
        assert phase_rarity.score == pytest.approx(0.06)


def test_all_strong_agree_regression():
    breakdown = calc_rarity_with_debug([1] * 20)
    assert breakdown.rarity == RarityTier.LG
    assert breakdown.jitter == 0.0
    for phase_rarity in breakdown.phases.values():
        assert phase_rarity.s_norm == pytest.approx(1.0)
        assert phase_rarity.anti_noise == pytest.approx(1.0)
        assert phase_rarity.score >= 0.875 - 1e-9
        # Sg candidate blocked by the edge gate
        assert phase_rarity.edge_gate is not None
        assert phase_rarity.edge_gate.edge_fraction == pytest.approx(1.0)
        assert not phase_rarity.edge_gate.passed


@pytest.mark.parametrize("answers", [[1] * 20, [5] * 20, [1, 5] * 10])
def test_extreme_only_vectors_never_singular(answers):
    assert calc_rarity(answers) != RarityTier.SG


def test_alternating_extremes_jitter_and_anti_noise():
    breakdown = calc_rarity_with_debug([1, 5] * 10)
    assert breakdown.jitter == 4.0
    for phase_rarity in breakdown.phases.values():
        assert phase_rarity.neutral == 0.0
        assert phase_rarity.anti_noise == pytest.approx(0.7)


def test_overall_is_max_of_phase_tiers():
    for row in sample_answer_vectors(200, seed=3):
        breakdown = calc_rarity_with_debug([int(a) for a in row])
        assert breakdown.rarity == max_tier(p.tier for p in breakdown.phases.values())
        assert list(breakdown.phases) == list(PHASES)


SINGULAR_ANSWERS = [5, 5, 1, 1, 2, 5, 4, 4, 4, 4, 4, 1, 1, 3, 4, 4, 4, 4, 4, 4]


def test_singular_fixture_passes_edge_gate():
    breakdown = calc_rarity_with_debug(SINGULAR_ANSWERS)
    assert breakdown.rarity == RarityTier.SG
    assert not breakdown.variance_low
    assert calc_rarity(SINGULAR_ANSWERS) == RarityTier.SG


def test_low_variance_demotes_singular():
    breakdown = calc_rarity_with_debug(SINGULAR_ANSWERS, RarityConfig(variance_floor=1.0))
    assert breakdown.variance_low
    assert breakdown.rarity == RarityTier.LG


def test_variance_floor_never_leaves_singular():
    config = RarityConfig(variance_floor=1.0)
    for row in sample_answer_vectors(200, seed=5):
        breakdown = calc_rarity_with_debug([int(a) for a in row], config)
        assert breakdown.variance_low
        assert breakdown.rarity != RarityTier.SG


def test_determinism():
    answers = [1, 2, 3, 4, 5, 2, 3, 4, 1, 2, 4, 3, 2, 1, 5, 4, 3, 2, 1, 2]
    first = calc_rarity_with_debug(answers).to_dict()
    second = calc_rarity_with_debug(list(answers)).to_dict()
    assert first == second


@pytest.mark.parametrize("score,expected", [
    (0.0, RarityTier.C),
    (0.3999, RarityTier.C),
    (0.40, RarityTier.U),
    (0.48, RarityTier.R),
    (0.56, RarityTier.E),
    (0.64, RarityTier.M),
    (0.72, RarityTier.LG),
    (0.7999, RarityTier.LG),
    (0.95, RarityTier.LG),
])
def test_tier_from_score(score, expected):
    assert tier_from_score(score, THRESHOLDS) == expected


def test_coherence_edge_cases():
    assert calc_coherence({}) == 0.0
    assert calc_coherence({"a": 0.0}) == 0.0
    assert calc_coherence({"a": 2.0}) == pytest.approx(1.0)
    assert calc_coherence({"a": -2.0}) == pytest.approx(0.5)
    assert calc_coherence({"a": 3.0, "b": -1.0}) == pytest.approx(0.375)
    assert calc_coherence({"a": 2.0, "b": 2.0}) == pytest.approx(0.75)


def test_jitter():
    assert calc_jitter(np.array([3] * 20)) == 0.0
    assert calc_jitter(np.array([1, 5] * 10)) == 4.0


def test_edge_gate_passes_for_balanced_edges():
    answers = np.array([1, 5, 3, 3, 3, 3, 3, 3, 3, 3])
    gate = calc_edge_gate(answers, np.ones(10), 10.0, RarityConfig())
    assert gate.edge_fraction == pytest.approx(0.2)
    assert gate.edge_direction == 0.0
    assert gate.edge_balance == pytest.approx(1.0)
    assert gate.passed


def test_edge_gate_fails_for_one_sided_edges():
    answers = np.array([1, 1, 1, 1, 3, 3, 3, 3, 3, 3])
    gate = calc_edge_gate(answers, np.ones(10), 10.0, RarityConfig())
    assert gate.edge_direction == pytest.approx(0.4)
    assert not gate.passed


def test_invalid_answers_raise():
    with pytest.raises(InvalidAnswersError):
        calc_rarity([1, 2, 3])


def test_safe_variant_degrades_to_common():
    assert safe_calc_rarity([1, 2, 3]) == RarityTier.C
    assert safe_calc_rarity([7] * 20) == RarityTier.C


def test_thresholds_are_configurable():
    config = RarityConfig(tier_thresholds=[0.01, 0.02, 0.03, 0.04, 0.05, 2.0])
    assert calc_rarity([3] * 20, config) == RarityTier.LG


def test_config_validation():
    RarityConfig().validate()
    with pytest.raises(ValueError):
        RarityConfig(tier_thresholds=[0.8, 0.7, 0.6, 0.5, 0.4, 0.3]).validate()
    with pytest.raises(ValueError):
        RarityConfig(base_probabilities={1: 0.5, 2: 0.5}).validate()
