"""
Diagnosis evaluation for a completed questionnaire.

This module provides the orchestration that:
1. Validates the 20-answer vector
2. Aggregates per-phase tag totals once
3. Runs the rarity, alias, result-key and phase-band engines
4. Merges their outputs into a DiagnosisResult

Engine failures never reach the caller: each one is logged and replaced
by its fallback (C, the default alias, fallback keys, neutral bands).
"""

import logging
from typing import Dict, Any, Optional

from ..aggregation import AnswersLike, aggregate, as_answer_vector
from ..hashing import save_code
from ..scoring.alias import AliasConfig, AliasResult, asset_candidates, compute_alias
from ..scoring.phase_bands import PhaseBand, PhaseBandConfig, compute_phase_bands
from ..scoring.rarity import RarityConfig, calc_rarity_with_debug
from ..scoring.result_keys import ResultKeyConfig, calc_result_keys, fallback_keys
from ..tables import (
    DEFAULT_ALIAS,
    PHASES,
    CategoryKey,
    PhaseTrend,
    PoolKey,
    RarityTier,
    TABLE_VERSION,
)
from .schema import DiagnosisResult

logger = logging.getLogger(__name__)


class DiagnosisEvaluator:
    """
    Runs every scoring engine over one answer vector.

    Attributes:
        rarity_config: Rarity engine constants
        alias_config: Alias engine constants
        result_key_config: Result-key discretization settings
        phase_band_config: Phase band cut points and labels
        include_breakdown: Attach the rarity breakdown to results
    """

    def __init__(
        self,
        rarity_config: Optional[RarityConfig] = None,
        alias_config: Optional[AliasConfig] = None,
        result_key_config: Optional[ResultKeyConfig] = None,
        phase_band_config: Optional[PhaseBandConfig] = None,
        include_breakdown: bool = False
    ):
        self.rarity_config = rarity_config or RarityConfig()
        self.alias_config = alias_config or AliasConfig()
        self.result_key_config = result_key_config or ResultKeyConfig()
        self.phase_band_config = phase_band_config or PhaseBandConfig()
        self.include_breakdown = include_breakdown

        self.rarity_config.validate()
        self.alias_config.validate()
        self.result_key_config.validate()
        self.phase_band_config.validate()
        logger.info(f"Initialized DiagnosisEvaluator (table {TABLE_VERSION})")

    @classmethod
    def from_config(cls, config: Dict[str, Any], include_breakdown: bool = False) -> "DiagnosisEvaluator":
        """Create from main config dictionary."""
        return cls(
            rarity_config=RarityConfig.from_config(config),
            alias_config=AliasConfig.from_config(config),
            result_key_config=ResultKeyConfig.from_config(config),
            phase_band_config=PhaseBandConfig.from_config(config),
            include_breakdown=include_breakdown,
        )

    def evaluate(self, answers: AnswersLike, phase_trend=None) -> DiagnosisResult:
        """
        Compute the full diagnosis for an answer vector.

        Args:
            answers: 20-answer vector
            phase_trend: PhaseTrend or its value (defaults to flat)

        Returns:
            DiagnosisResult

        Raises:
            InvalidAnswersError: If answers are malformed; there is no
                meaningful result to fall back to without answers
        """
        answer_vector = as_answer_vector(answers)
        trend = self._parse_trend(phase_trend)

        breakdown = None
        try:
            rarity_breakdown = calc_rarity_with_debug(answer_vector, self.rarity_config)
            rarity = rarity_breakdown.rarity
            if self.include_breakdown:
                breakdown = rarity_breakdown.to_dict()
        except Exception as e:
            logger.error(f"Rarity engine failed, using C: {e}")
            rarity = RarityTier.C

        try:
            alias = compute_alias(answer_vector, rarity, trend, self.alias_config)
        except Exception as e:
            logger.error(f"Alias engine failed, using default alias: {e}")
            alias = self._default_alias(rarity)

        try:
            totals = aggregate(answer_vector)
            result_keys = calc_result_keys(answer_vector, totals, self.result_key_config)
        except Exception as e:
            logger.error(f"Result-key engine failed, using fallback keys: {e}")
            result_keys = fallback_keys()

        try:
            phase_bands = compute_phase_bands(answer_vector, self.phase_band_config)
        except Exception as e:
            logger.error(f"Phase band computation failed, using neutral bands: {e}")
            label = self.phase_band_config.labels[2]
            phase_bands = {p: PhaseBand(raw=0.0, band=3, label=label) for p in PHASES}

        result = DiagnosisResult(
            answers=answer_vector,
            save_code=save_code(answer_vector),
            rarity=rarity,
            alias=alias,
            result_keys=result_keys,
            phase_bands=phase_bands,
            phase_trend=trend,
            table_version=TABLE_VERSION,
            breakdown=breakdown,
        )
        logger.info(f"Diagnosis {result.save_code}: rarity={rarity.value} alias={alias.asset_id}")
        return result

    def _parse_trend(self, phase_trend) -> PhaseTrend:
        if phase_trend is None:
            return PhaseTrend.FLAT
        try:
            return PhaseTrend(phase_trend)
        except ValueError:
            logger.warning(f"Unknown phase trend {phase_trend!r}; using flat")
            return PhaseTrend.FLAT

    def _default_alias(self, rarity: RarityTier) -> AliasResult:
        asset_id, candidates = asset_candidates(DEFAULT_ALIAS.text, rarity, self.alias_config)
        return AliasResult(
            alias_text=DEFAULT_ALIAS.text,
            category=CategoryKey.BLANK,
            pool_key=PoolKey.BLANK,
            asset_id=asset_id,
            asset_candidates=candidates,
        )
