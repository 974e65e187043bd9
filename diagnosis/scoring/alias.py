"""
Category / alias engine.

Selects a narrative alias for an answer vector at a given rarity tier.

Steps:
1. Category composites from overall tag totals (distance, temperature,
   emotion, phase), each a fixed weighted sum of tag magnitudes.
2. Category decision: "blank" when the composites carry too little
   signal (sum < 6.0) or do not discriminate (top-two gap < 1.0),
   otherwise the largest composite with a fixed tie order.
3. Pool resolution: "phase" is refined by the phase trend.
4. Deterministic pick: FNV-1a over five rounded overall tag totals,
   index = hash % len(pool).
5. Asset resolution: candidate filenames for the renderer to probe.
"""

import logging
import re
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Mapping, Optional, Tuple

from ..aggregation import (
    AnswersLike,
    InvalidInputError,
    aggregate,
    as_answer_vector,
    sum_overall,
)
from ..hashing import fnv1a_32
from ..tables import (
    CATEGORY_TIE_ORDER,
    DEFAULT_ALIAS,
    CategoryKey,
    PhaseTrend,
    PoolKey,
    RarityTier,
    Tag,
    get_pool,
)
from ..tables.alias_pools import SG_BRACKET_MARKER

logger = logging.getLogger(__name__)

# (weight, tag, opposite tag or None). A component with an opposite uses
# |t[tag] - t[opposite]|, otherwise |t[tag]|.
CATEGORY_COMPONENTS: Dict[CategoryKey, Tuple[Tuple[float, Tag, Optional[Tag]], ...]] = {
    CategoryKey.DISTANCE: (
        (1.0, Tag.PACE_SLOW, Tag.PACE_FAST),
        (0.8, Tag.BOUNDARY, None),
        (0.6, Tag.SELF_OPEN_LOW, Tag.SELF_OPEN_HIGH),
    ),
    CategoryKey.TEMPERATURE: (
        (1.0, Tag.MOOD_SYNC, None),
        (0.8, Tag.READ_REACTION, None),
        (0.6, Tag.INITIATIVE, None),
        (0.4, Tag.EDGE_PREFERENCE, None),
    ),
    CategoryKey.EMOTION: (
        (1.0, Tag.LOSS_FEAR, None),
        (0.8, Tag.AMBIG_INTOL, Tag.AMBIG_TOL),
        (0.6, Tag.HARM_AVOID, None),
    ),
    CategoryKey.PHASE: (
        (1.0, Tag.LONG_TERM, None),
        (0.8, Tag.DEVOTION, None),
        (0.6, Tag.TRUST_ACTION, None),
    ),
}

_PHASE_POOL_BY_TREND = {
    PhaseTrend.WEAK_TO_STRONG: PoolKey.PHASE_WEAK_TO_STRONG,
    PhaseTrend.FLAT: PoolKey.PHASE_FLAT,
    PhaseTrend.STRONG_TO_WEAK: PoolKey.PHASE_STRONG_TO_WEAK,
}

_POOL_BY_CATEGORY = {
    CategoryKey.DISTANCE: PoolKey.DISTANCE,
    CategoryKey.TEMPERATURE: PoolKey.TEMPERATURE,
    CategoryKey.EMOTION: PoolKey.EMOTION,
    CategoryKey.BLANK: PoolKey.BLANK,
}

_ANIMATED_FIRST_TIERS = (RarityTier.LG, RarityTier.SG)


@dataclass
class AliasConfig:
    """Configuration for alias selection and asset resolution."""
    blank_sum_floor: float = 6.0
    blank_gap_floor: float = 1.0
    hash_tags: List[str] = field(
        default_factory=lambda: ["PACE_SLOW", "BOUNDARY", "LOSS_FEAR", "DEVOTION", "LONG_TERM"]
    )
    hash_decimals: int = 1
    asset_dir: str = "assets/alias"
    default_asset: str = "_default.png"
    animated_formats: List[str] = field(default_factory=lambda: ["gif"])
    static_formats: List[str] = field(default_factory=lambda: ["png", "webp"])

    def validate(self) -> None:
        """Validate configuration values."""
        if self.blank_sum_floor < 0 or self.blank_gap_floor < 0:
            raise ValueError("blank floors must be >= 0")
        unknown = [t for t in self.hash_tags if t not in Tag.__members__]
        if unknown:
            raise ValueError(f"Unknown hash tags: {unknown}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AliasConfig":
        """Create from main config dictionary."""
        alias_config = config.get("alias", {})
        assets = alias_config.get("assets", {})
        defaults = cls()
        return cls(
            blank_sum_floor=alias_config.get("blank_sum_floor", defaults.blank_sum_floor),
            blank_gap_floor=alias_config.get("blank_gap_floor", defaults.blank_gap_floor),
            hash_tags=list(alias_config.get("hash_tags", defaults.hash_tags)),
            hash_decimals=alias_config.get("hash_decimals", defaults.hash_decimals),
            asset_dir=assets.get("dir", defaults.asset_dir),
            default_asset=assets.get("default", defaults.default_asset),
            animated_formats=list(assets.get("animated_formats", defaults.animated_formats)),
            static_formats=list(assets.get("static_formats", defaults.static_formats)),
        )


@dataclass
class AliasResult:
    """
    Selected alias and its rendering hints.

    Attributes:
        alias_text: Alias string (Sg: main and sub joined by a newline)
        category: Decided category
        pool_key: Pool the alias was drawn from
        asset_id: Identifier used to build asset filenames
        asset_candidates: Ordered filenames; the last one always exists
    """
    alias_text: str
    category: CategoryKey
    pool_key: PoolKey
    asset_id: str
    asset_candidates: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alias_text": self.alias_text,
            "category": self.category.value,
            "pool_key": self.pool_key.value,
            "asset_id": self.asset_id,
            "asset_candidates": list(self.asset_candidates),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AliasResult":
        return cls(
            alias_text=data["alias_text"],
            category=CategoryKey(data["category"]),
            pool_key=PoolKey(data["pool_key"]),
            asset_id=data["asset_id"],
            asset_candidates=list(data["asset_candidates"]),
        )


def category_raws(overall: Mapping[Tag, float]) -> Dict[CategoryKey, float]:
    """Weighted-magnitude composite for each non-blank category."""
    raws = {}
    for category, components in CATEGORY_COMPONENTS.items():
        total = 0.0
        for weight, tag, opposite in components:
            value = overall.get(tag, 0.0)
            if opposite is not None:
                value -= overall.get(opposite, 0.0)
            total += weight * abs(value)
        raws[category] = total
    return raws


def decide_category(
    raws: Mapping[CategoryKey, float],
    config: Optional[AliasConfig] = None
) -> CategoryKey:
    """
    Pick the dominant category, or BLANK when the signal is weak.

    Exact ties go to the earlier category in CATEGORY_TIE_ORDER.
    """
    config = config or AliasConfig()
    ranked = sorted(
        CATEGORY_TIE_ORDER,
        key=lambda c: (-raws.get(c, 0.0), CATEGORY_TIE_ORDER.index(c))
    )
    values = [raws.get(c, 0.0) for c in ranked]
    if sum(values) < config.blank_sum_floor:
        return CategoryKey.BLANK
    if values[0] - values[1] < config.blank_gap_floor:
        return CategoryKey.BLANK
    return ranked[0]


def resolve_pool_key(category: CategoryKey, trend: PhaseTrend = PhaseTrend.FLAT) -> PoolKey:
    """Map a category (and trend, for PHASE) to its alias pool key."""
    if category == CategoryKey.PHASE:
        return _PHASE_POOL_BY_TREND[trend]
    return _POOL_BY_CATEGORY[category]


def hash_snapshot(overall: Mapping[Tag, float], config: Optional[AliasConfig] = None) -> str:
    """Rounded snapshot of the hash tags, joined into one string."""
    config = config or AliasConfig()
    parts = []
    for name in config.hash_tags:
        # + 0.0 folds -0.0 into 0.0
        value = round(overall.get(Tag[name], 0.0), config.hash_decimals) + 0.0
        parts.append(f"{value:.{config.hash_decimals}f}")
    return "|".join(parts)


def alias_hash(overall: Mapping[Tag, float], config: Optional[AliasConfig] = None) -> int:
    """Stable 32-bit FNV-1a hash of the rounded snapshot."""
    return fnv1a_32(hash_snapshot(overall, config).encode("utf-8"))


def _slugify(text: str) -> str:
    slug = re.sub(r"[^0-9a-zA-Z]+", "_", text).strip("_").lower()
    return slug or "alias"


def derive_asset_id(alias_text: str, tier: RarityTier) -> str:
    """
    Asset identifier for an alias.

    For Sg the first line is cut at the bracket marker before slugifying.
    """
    first_line = alias_text.split("\n", 1)[0]
    if tier == RarityTier.SG and SG_BRACKET_MARKER in first_line:
        first_line = first_line.split(SG_BRACKET_MARKER, 1)[0]
    return _slugify(first_line.strip())


def asset_candidates(
    alias_text: str,
    tier: RarityTier,
    config: Optional[AliasConfig] = None
) -> Tuple[str, List[str]]:
    """
    Build the ordered asset filename list for the renderer.

    Lg and Sg probe animated formats first; lower tiers probe static
    formats first. The default asset always ends the list.

    Returns:
        Tuple of (asset_id, candidate paths)
    """
    config = config or AliasConfig()
    asset_id = derive_asset_id(alias_text, tier)
    if tier in _ANIMATED_FIRST_TIERS:
        formats = config.animated_formats + config.static_formats
    else:
        formats = config.static_formats + config.animated_formats

    base = config.asset_dir.rstrip("/")
    candidates = [f"{base}/{asset_id}.{ext}" for ext in formats]
    candidates.append(f"{base}/{config.default_asset}")
    return asset_id, candidates


def _parse_rarity(rarity) -> RarityTier:
    try:
        return RarityTier.parse(rarity)
    except ValueError as e:
        raise InvalidInputError(f"Unknown rarity tier: {rarity!r}") from e


def _parse_trend(phase_trend) -> PhaseTrend:
    if phase_trend is None:
        return PhaseTrend.FLAT
    try:
        return PhaseTrend(phase_trend)
    except ValueError as e:
        raise InvalidInputError(f"Unknown phase trend: {phase_trend!r}") from e


def compute_alias(
    answers: AnswersLike,
    rarity,
    phase_trend=None,
    config: Optional[AliasConfig] = None
) -> AliasResult:
    """
    Select the alias for an answer vector at a given rarity tier.

    Args:
        answers: 20-answer vector
        rarity: RarityTier or its code ("C".."Sg")
        phase_trend: PhaseTrend or its value; defaults to flat
        config: AliasConfig (defaults to production constants)

    Returns:
        AliasResult

    Raises:
        InvalidAnswersError: If answers are malformed
        InvalidInputError: If rarity or phase_trend is unknown
    """
    config = config or AliasConfig()
    answer_vector = as_answer_vector(answers)
    tier = _parse_rarity(rarity)
    trend = _parse_trend(phase_trend)

    overall = sum_overall(aggregate(answer_vector))
    raws = category_raws(overall)
    category = decide_category(raws, config)
    pool_key = resolve_pool_key(category, trend)

    pool = get_pool(tier, pool_key)
    if pool:
        hash_value = alias_hash(overall, config)
        candidate = pool[hash_value % len(pool)]
    else:
        logger.warning(f"No alias pool for ({tier.value}, {pool_key.value}); using default alias")
        candidate = DEFAULT_ALIAS

    alias_text = candidate.text
    asset_id, candidates = asset_candidates(alias_text, tier, config)
    logger.debug(
        f"Alias resolved: category={category.value} pool={pool_key.value} "
        f"tier={tier.value} asset={asset_id}"
    )
    return AliasResult(
        alias_text=alias_text,
        category=category,
        pool_key=pool_key,
        asset_id=asset_id,
        asset_candidates=candidates,
    )
