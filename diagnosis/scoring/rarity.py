"""
Rarity engine.

Projects an answer vector onto a single rarity tier. Five phase-level
scores are computed internally; only the rarest resulting tier is
returned.

Per-phase Score:
    surprisal   = sum_i w[i,p] * I(a_i),   I(a) = -ln P(a)
    S_norm      = clamp01((surprisal - W_p*I(3)) / (W_p*I(1) - W_p*I(3)))
    coherence   = 0.5 * |top1| / sum|tags| + 0.5 * [sign(top1) == sign(top2)]
    neutral     = share of phase weight spent on "3" answers
    anti_noise  = clamp01(1 - 0.7*neutral - 0.3*(jitter/4))
    score       = 0.55*S_norm + 0.25*coherence + 0.20*anti_noise

Tiers:
    <0.40 C, <0.48 U, <0.56 R, <0.64 E, <0.72 M, <0.80 Lg,
    >=0.80 Sg only when the edge-balance gate passes (else Lg).
    If the five scores are nearly uniform (variance < 0.0025) every
    Sg is demoted to Lg.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional

import numpy as np

from ..aggregation import (
    AnswersLike,
    InvalidInputError,
    aggregate_phase,
    as_answer_vector,
)
from ..aggregation.answers import LIKERT_MAX, LIKERT_MIN, NEUTRAL_ANSWER
from ..tables import PHASES, Phase, RarityTier, RARITY_ORDER, max_tier, phase_weight_matrix

logger = logging.getLogger(__name__)


@dataclass
class RarityConfig:
    """
    Configuration for the rarity engine.

    All defaults are the fixed production constants.
    """
    base_probabilities: Dict[int, float] = field(
        default_factory=lambda: {1: 0.08, 2: 0.22, 3: 0.40, 4: 0.22, 5: 0.08}
    )
    weight_surprisal: float = 0.55
    weight_coherence: float = 0.25
    weight_anti_noise: float = 0.20
    neutral_penalty: float = 0.7
    jitter_penalty: float = 0.3
    # Lower bounds of U, R, E, M, Lg and the Sg candidate band
    tier_thresholds: List[float] = field(
        default_factory=lambda: [0.40, 0.48, 0.56, 0.64, 0.72, 0.80]
    )
    edge_direction_weight: float = 0.8
    edge_excess_weight: float = 0.4
    edge_excess_start: float = 0.45
    min_edge_balance: float = 0.55
    max_edge_fraction: float = 0.70
    max_edge_direction: float = 0.35
    variance_floor: float = 0.0025

    def validate(self) -> None:
        """Validate configuration values."""
        if sorted(self.base_probabilities) != list(range(LIKERT_MIN, LIKERT_MAX + 1)):
            raise ValueError("base_probabilities must define answers 1..5")
        if any(p <= 0 for p in self.base_probabilities.values()):
            raise ValueError("base_probabilities must be positive")
        if len(self.tier_thresholds) != len(RARITY_ORDER) - 1:
            raise ValueError(
                f"tier_thresholds needs {len(RARITY_ORDER) - 1} values, got {len(self.tier_thresholds)}"
            )
        if list(self.tier_thresholds) != sorted(self.tier_thresholds):
            raise ValueError(f"tier_thresholds must be ascending: {self.tier_thresholds}")
        if self.variance_floor < 0:
            raise ValueError(f"variance_floor must be >= 0, got {self.variance_floor}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RarityConfig":
        """Create from main config dictionary."""
        rarity_config = config.get("rarity", {})
        weights = rarity_config.get("score_weights", {})
        anti_noise = rarity_config.get("anti_noise", {})
        gate = rarity_config.get("sg_gate", {})
        defaults = cls()

        probs = rarity_config.get("base_probabilities")
        if probs is not None:
            probs = {int(k): float(v) for k, v in probs.items()}

        return cls(
            base_probabilities=probs or defaults.base_probabilities,
            weight_surprisal=weights.get("surprisal", defaults.weight_surprisal),
            weight_coherence=weights.get("coherence", defaults.weight_coherence),
            weight_anti_noise=weights.get("anti_noise", defaults.weight_anti_noise),
            neutral_penalty=anti_noise.get("neutral_penalty", defaults.neutral_penalty),
            jitter_penalty=anti_noise.get("jitter_penalty", defaults.jitter_penalty),
            tier_thresholds=list(rarity_config.get("tier_thresholds", defaults.tier_thresholds)),
            edge_direction_weight=gate.get("edge_direction_weight", defaults.edge_direction_weight),
            edge_excess_weight=gate.get("edge_excess_weight", defaults.edge_excess_weight),
            edge_excess_start=gate.get("edge_excess_start", defaults.edge_excess_start),
            min_edge_balance=gate.get("min_edge_balance", defaults.min_edge_balance),
            max_edge_fraction=gate.get("max_edge_fraction", defaults.max_edge_fraction),
            max_edge_direction=gate.get("max_edge_direction", defaults.max_edge_direction),
            variance_floor=rarity_config.get("variance_floor", defaults.variance_floor),
        )

    def information_content(self) -> np.ndarray:
        """I(a) = -ln P(a), indexed by answer value (index 0 unused)."""
        info = np.zeros(LIKERT_MAX + 1)
        for answer, p in self.base_probabilities.items():
            info[answer] = -np.log(p)
        return info


@dataclass
class EdgeGate:
    """Edge-balance gate for Sg candidates."""
    edge_fraction: float
    edge_direction: float
    edge_balance: float
    passed: bool


@dataclass
class PhaseRarity:
    """Per-phase rarity factors (internal; not part of the public output)."""
    weight_sum: float
    surprisal: float
    s_norm: float
    coherence: float
    neutral: float
    anti_noise: float
    score: float
    tier: RarityTier
    edge_gate: Optional[EdgeGate] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "weight_sum": self.weight_sum,
            "surprisal": self.surprisal,
            "s_norm": self.s_norm,
            "coherence": self.coherence,
            "neutral": self.neutral,
            "anti_noise": self.anti_noise,
            "score": self.score,
            "tier": self.tier.value,
        }
        if self.edge_gate:
            result["edge_gate"] = asdict(self.edge_gate)
        return result


@dataclass
class RarityBreakdown:
    """Overall rarity plus the intermediate values that produced it."""
    rarity: RarityTier
    jitter: float
    variance: float
    variance_low: bool
    phases: Dict[Phase, PhaseRarity]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rarity": self.rarity.value,
            "jitter": self.jitter,
            "variance": self.variance,
            "variance_low": self.variance_low,
            "phases": {p.value: r.to_dict() for p, r in self.phases.items()},
        }


def _clamp01(x: float) -> float:
    return float(min(1.0, max(0.0, x)))


def calc_jitter(answers: np.ndarray) -> float:
    """Mean absolute difference between consecutive answers."""
    return float(np.mean(np.abs(np.diff(answers))))


def calc_coherence(totals: Dict[Any, float]) -> float:
    """
    Coherence of a phase's tag signal.

    Half of the score is the share of the strongest tag, half is whether
    the two strongest tags agree in sign (zero counts as positive).
    """
    if not totals:
        return 0.0
    ranked = sorted(totals.values(), key=abs, reverse=True)
    sum_abs = float(sum(abs(v) for v in ranked))
    if sum_abs == 0:
        return 0.0
    top1 = ranked[0]
    top2 = ranked[1] if len(ranked) > 1 else 0.0
    share = abs(top1) / sum_abs
    same_sign = (top1 >= 0) == (top2 >= 0)
    return _clamp01(0.5 * share + 0.5 * (1.0 if same_sign else 0.0))


def tier_from_score(score: float, thresholds: List[float]) -> RarityTier:
    """
    Map a phase score to a tier below Sg.

    Scores at or above the top threshold are Sg candidates; they map to
    Lg here and are promoted only by the edge-balance gate.
    """
    for tier, upper in zip(RARITY_ORDER, thresholds):
        if score < upper:
            return tier
    return RarityTier.LG


def calc_edge_gate(
    answers: np.ndarray,
    weights: np.ndarray,
    weight_sum: float,
    config: RarityConfig
) -> EdgeGate:
    """Edge-balance gate over one phase's weight column."""
    if weight_sum <= 0:
        return EdgeGate(0.0, 0.0, 0.0, False)
    w_low = float(weights[answers == LIKERT_MIN].sum())
    w_high = float(weights[answers == LIKERT_MAX].sum())
    edge_fraction = (w_low + w_high) / weight_sum
    edge_direction = abs(w_low - w_high) / weight_sum
    edge_balance = _clamp01(
        1.0
        - config.edge_direction_weight * edge_direction
        - config.edge_excess_weight * max(0.0, edge_fraction - config.edge_excess_start)
    )
    passed = (
        edge_balance >= config.min_edge_balance
        and edge_fraction < config.max_edge_fraction
        and edge_direction < config.max_edge_direction
    )
    return EdgeGate(edge_fraction, edge_direction, edge_balance, passed)


def calc_rarity_with_debug(
    answers: AnswersLike,
    config: Optional[RarityConfig] = None
) -> RarityBreakdown:
    """
    Compute the overall rarity tier and its per-phase breakdown.

    Args:
        answers: 20-answer vector
        config: RarityConfig (defaults to production constants)

    Returns:
        RarityBreakdown

    Raises:
        InvalidAnswersError: If answers are malformed
    """
    config = config or RarityConfig()
    answer_vector = as_answer_vector(answers)
    a = np.array(answer_vector.values, dtype=int)

    info = config.information_content()
    info_neutral = info[NEUTRAL_ANSWER]
    info_extreme = max(info[LIKERT_MIN], info[LIKERT_MAX])

    weights = phase_weight_matrix()
    weight_sums = weights.sum(axis=0)
    surprisals = info[a] @ weights
    neutral_mass = weights[a == NEUTRAL_ANSWER].sum(axis=0)

    # Shared by all phases
    jitter = calc_jitter(a)
    thresholds = list(config.tier_thresholds)
    sg_threshold = thresholds[-1]

    phases: Dict[Phase, PhaseRarity] = {}
    for j, phase in enumerate(PHASES):
        w_sum = float(weight_sums[j])
        surprisal = float(surprisals[j])
        s_min = w_sum * info_neutral
        s_max = w_sum * info_extreme
        s_norm = _clamp01((surprisal - s_min) / (s_max - s_min)) if s_max > s_min else 0.0

        coherence = calc_coherence(aggregate_phase(answer_vector, phase))
        neutral = float(neutral_mass[j]) / w_sum if w_sum > 0 else 0.0
        anti_noise = _clamp01(
            1.0 - config.neutral_penalty * neutral - config.jitter_penalty * (jitter / 4.0)
        )

        score = (
            config.weight_surprisal * s_norm
            + config.weight_coherence * coherence
            + config.weight_anti_noise * anti_noise
        )

        tier = tier_from_score(score, thresholds)
        edge_gate = None
        if score >= sg_threshold:
            edge_gate = calc_edge_gate(a, weights[:, j], w_sum, config)
            tier = RarityTier.SG if edge_gate.passed else RarityTier.LG

        phases[phase] = PhaseRarity(
            weight_sum=w_sum,
            surprisal=surprisal,
            s_norm=s_norm,
            coherence=coherence,
            neutral=neutral,
            anti_noise=anti_noise,
            score=float(score),
            tier=tier,
            edge_gate=edge_gate,
        )

    # Uniform phase scores suggest non-discriminating answers
    variance = float(np.var([r.score for r in phases.values()]))
    variance_low = variance < config.variance_floor
    if variance_low:
        for phase_rarity in phases.values():
            if phase_rarity.tier == RarityTier.SG:
                phase_rarity.tier = RarityTier.LG
        logger.debug(f"Phase score variance {variance:.5f} below floor; Sg demoted")

    overall = max_tier(r.tier for r in phases.values())
    return RarityBreakdown(
        rarity=overall,
        jitter=jitter,
        variance=variance,
        variance_low=variance_low,
        phases=phases,
    )


def calc_rarity(answers: AnswersLike, config: Optional[RarityConfig] = None) -> RarityTier:
    """
    Compute the overall rarity tier.

    Raises:
        InvalidAnswersError: If answers are malformed
    """
    return calc_rarity_with_debug(answers, config).rarity


def safe_calc_rarity(answers: AnswersLike, config: Optional[RarityConfig] = None) -> RarityTier:
    """Compute the rarity tier, degrading to C on malformed input."""
    try:
        return calc_rarity(answers, config)
    except InvalidInputError as e:
        logger.warning(f"Rarity fell back to C: {e}")
        return RarityTier.C
