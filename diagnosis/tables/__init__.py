"""Static weighting tables and vocabulary shared by all engines."""

from .vocabulary import (
    Phase,
    PHASES,
    Tag,
    OPPOSITE_TAG,
    RarityTier,
    RARITY_ORDER,
    ADVERTISED_RARITY_RATES,
    CategoryKey,
    CATEGORY_TIE_ORDER,
    PhaseTrend,
    PoolKey,
    max_tier,
)
from .contributions import (
    CONTRIBUTIONS,
    ContributionRow,
    NUM_QUESTIONS,
    TABLE_VERSION,
    phase_weight_matrix,
    phase_weight_sums,
    tag_weight_sums,
)
from .alias_pools import ALIAS_POOLS, AliasCandidate, DEFAULT_ALIAS, get_pool

__all__ = [
    "Phase",
    "PHASES",
    "Tag",
    "OPPOSITE_TAG",
    "RarityTier",
    "RARITY_ORDER",
    "ADVERTISED_RARITY_RATES",
    "CategoryKey",
    "CATEGORY_TIE_ORDER",
    "PhaseTrend",
    "PoolKey",
    "max_tier",
    "CONTRIBUTIONS",
    "ContributionRow",
    "NUM_QUESTIONS",
    "TABLE_VERSION",
    "phase_weight_matrix",
    "phase_weight_sums",
    "tag_weight_sums",
    "ALIAS_POOLS",
    "AliasCandidate",
    "DEFAULT_ALIAS",
    "get_pool",
]
