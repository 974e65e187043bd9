"""Consistency checks for the shared weighting tables."""

import numpy as np

from diagnosis.inference import QUESTIONS
from diagnosis.tables import (
    ADVERTISED_RARITY_RATES,
    ALIAS_POOLS,
    CONTRIBUTIONS,
    NUM_QUESTIONS,
    OPPOSITE_TAG,
    PHASES,
    RARITY_ORDER,
    Phase,
    PoolKey,
    RarityTier,
    Tag,
    get_pool,
    max_tier,
    phase_weight_matrix,
    phase_weight_sums,
)
from diagnosis.tables.alias_pools import SG_BRACKET_MARKER


def test_twenty_rows_in_question_order():
    assert len(CONTRIBUTIONS) == NUM_QUESTIONS
    assert [row.qid for row in CONTRIBUTIONS] == [f"Q{i}" for i in range(1, 21)]


def test_question_bank_matches_contribution_rows():
    assert [q.qid for q in QUESTIONS] == [row.qid for row in CONTRIBUTIONS]


def test_phase_weights_are_bounded():
    for row in CONTRIBUTIONS:
        assert set(row.phase_weights) == set(PHASES)
        for weight in row.phase_weights.values():
            assert 0.0 <= weight <= 1.0


def test_rows_use_known_tags_with_positive_weights():
    for row in CONTRIBUTIONS:
        assert row.tags
        for tag, weight in row.tags.items():
            assert isinstance(tag, Tag)
            assert weight > 0


def test_opposites_are_symmetric():
    for tag, opposite in OPPOSITE_TAG.items():
        assert OPPOSITE_TAG[opposite] == tag
        assert tag != opposite


def test_weight_matrix_shape_and_sums():
    matrix = phase_weight_matrix()
    assert matrix.shape == (NUM_QUESTIONS, len(PHASES))
    sums = phase_weight_sums()
    assert list(sums) == list(PHASES)
    assert np.allclose(matrix.sum(axis=0), [sums[p] for p in PHASES])
    assert all(s > 0 for s in sums.values())


def test_every_tier_and_pool_key_has_aliases():
    for tier in RARITY_ORDER:
        for key in PoolKey:
            assert len(get_pool(tier, key)) > 0, (tier, key)
    assert len(ALIAS_POOLS) == len(RARITY_ORDER) * len(PoolKey)


def test_singular_aliases_carry_sub_line_and_marker():
    for key in PoolKey:
        for candidate in get_pool(RarityTier.SG, key):
            assert SG_BRACKET_MARKER in candidate.main
            assert candidate.sub
            assert candidate.text == f"{candidate.main}\n{candidate.sub}"


def test_rarity_order_and_max_tier():
    assert [t.rank for t in RARITY_ORDER] == list(range(7))
    assert max_tier([RarityTier.U, RarityTier.LG, RarityTier.C]) == RarityTier.LG
    assert max_tier([]) == RarityTier.C
    assert RarityTier.parse("Sg") == RarityTier.SG


def test_advertised_rates_cover_every_tier():
    assert set(ADVERTISED_RARITY_RATES) == set(RARITY_ORDER)
    assert sum(ADVERTISED_RARITY_RATES.values()) == 100.0


def test_phase_parse_accepts_short_aliases():
    assert Phase.parse("match") == Phase.MATCHING
    assert Phase.parse("first") == Phase.FIRST_MEET
    assert Phase.parse("firstMeet") == Phase.FIRST_MEET
    assert Phase.parse(Phase.DATE) == Phase.DATE
