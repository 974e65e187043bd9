"""Scoring engines: rarity, alias, result keys and phase bands."""

from .rarity import (
    RarityConfig,
    RarityBreakdown,
    PhaseRarity,
    calc_rarity,
    calc_rarity_with_debug,
    safe_calc_rarity,
)
from .alias import AliasConfig, AliasResult, compute_alias
from .result_keys import (
    DEFAULT_TEXT_KEY,
    FALLBACK_KEY_BY_PHASE,
    ResultKeyConfig,
    calc_result_keys,
    fallback_keys,
)
from .phase_bands import PhaseBand, PhaseBandConfig, compute_phase_bands

__all__ = [
    "RarityConfig",
    "RarityBreakdown",
    "PhaseRarity",
    "calc_rarity",
    "calc_rarity_with_debug",
    "safe_calc_rarity",
    "AliasConfig",
    "AliasResult",
    "compute_alias",
    "DEFAULT_TEXT_KEY",
    "FALLBACK_KEY_BY_PHASE",
    "ResultKeyConfig",
    "calc_result_keys",
    "fallback_keys",
    "PhaseBand",
    "PhaseBandConfig",
    "compute_phase_bands",
]
