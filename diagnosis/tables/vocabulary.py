"""
Shared vocabulary for the diagnosis engines.

Defines the closed sets every engine speaks in: phases, tags, rarity
tiers, alias categories, alias pool keys and phase trends. Engines use
these enums as table keys instead of free-form strings, so an unknown
key fails at parse time rather than as a silent missing lookup.
"""

from enum import Enum
from typing import Dict, Iterable


class Phase(str, Enum):
    """Relationship-progression stages, in narrative order."""
    MATCHING = "matching"
    FIRST_MEET = "firstMeet"
    DATE = "date"
    RELATIONSHIP = "relationship"
    MARRIAGE = "marriage"

    @classmethod
    def parse(cls, value) -> "Phase":
        """Accept a Phase, its value, or one of the short aliases."""
        if isinstance(value, cls):
            return value
        key = str(value)
        if key in _PHASE_ALIASES:
            return _PHASE_ALIASES[key]
        return cls(key)


_PHASE_ALIASES = {
    "match": Phase.MATCHING,
    "first": Phase.FIRST_MEET,
}

PHASES = (
    Phase.MATCHING,
    Phase.FIRST_MEET,
    Phase.DATE,
    Phase.RELATIONSHIP,
    Phase.MARRIAGE,
)


class Tag(str, Enum):
    """Latent behavioural axes derived from answers."""
    PACE_SLOW = "PACE_SLOW"
    PACE_FAST = "PACE_FAST"
    BOUNDARY = "BOUNDARY"
    READ_REACTION = "READ_REACTION"
    LOSS_FEAR = "LOSS_FEAR"
    AMBIG_TOL = "AMBIG_TOL"
    AMBIG_INTOL = "AMBIG_INTOL"
    EDGE_PREFERENCE = "EDGE_PREFERENCE"
    HARM_AVOID = "HARM_AVOID"
    SELF_OPEN_LOW = "SELF_OPEN_LOW"
    SELF_OPEN_HIGH = "SELF_OPEN_HIGH"
    TRUST_ACTION = "TRUST_ACTION"
    MOOD_SYNC = "MOOD_SYNC"
    DEVOTION = "DEVOTION"
    LONG_TERM = "LONG_TERM"
    INITIATIVE = "INITIATIVE"


# Direction-of-preference pairs. A negative answer on one side of a pair
# is credited to the other side; unpaired tags accumulate signed values.
OPPOSITE_TAG: Dict[Tag, Tag] = {
    Tag.PACE_SLOW: Tag.PACE_FAST,
    Tag.PACE_FAST: Tag.PACE_SLOW,
    Tag.SELF_OPEN_LOW: Tag.SELF_OPEN_HIGH,
    Tag.SELF_OPEN_HIGH: Tag.SELF_OPEN_LOW,
    Tag.AMBIG_TOL: Tag.AMBIG_INTOL,
    Tag.AMBIG_INTOL: Tag.AMBIG_TOL,
}


class RarityTier(str, Enum):
    """Seven-level uncommonness rating, C (common) to Sg (singular)."""
    C = "C"
    U = "U"
    R = "R"
    E = "E"
    M = "M"
    LG = "Lg"
    SG = "Sg"

    @property
    def rank(self) -> int:
        return RARITY_ORDER.index(self)

    @classmethod
    def parse(cls, value) -> "RarityTier":
        if isinstance(value, cls):
            return value
        return cls(str(value))


RARITY_ORDER = (
    RarityTier.C,
    RarityTier.U,
    RarityTier.R,
    RarityTier.E,
    RarityTier.M,
    RarityTier.LG,
    RarityTier.SG,
)

# Advertised share of each tier, in percent (shown as the result legend)
ADVERTISED_RARITY_RATES: Dict[RarityTier, float] = {
    RarityTier.C: 35.0,
    RarityTier.U: 25.0,
    RarityTier.R: 20.0,
    RarityTier.E: 12.0,
    RarityTier.M: 6.0,
    RarityTier.LG: 1.5,
    RarityTier.SG: 0.5,
}


def max_tier(tiers: Iterable[RarityTier]) -> RarityTier:
    """Return the rarest tier in `tiers` (C when empty)."""
    best = RarityTier.C
    for tier in tiers:
        if tier.rank > best.rank:
            best = tier
    return best


class CategoryKey(str, Enum):
    """Dominant alias category of an answer pattern."""
    DISTANCE = "distance"
    TEMPERATURE = "temperature"
    EMOTION = "emotion"
    PHASE = "phase"
    BLANK = "blank"


# Preference order used to break exact ties between category composites
CATEGORY_TIE_ORDER = (
    CategoryKey.DISTANCE,
    CategoryKey.TEMPERATURE,
    CategoryKey.EMOTION,
    CategoryKey.PHASE,
)


class PhaseTrend(str, Enum):
    """Externally supplied direction of change across the phases."""
    WEAK_TO_STRONG = "weak_to_strong"
    FLAT = "flat"
    STRONG_TO_WEAK = "strong_to_weak"


class PoolKey(str, Enum):
    """Alias pool selector: a category, refined by trend for `phase`."""
    DISTANCE = "distance"
    TEMPERATURE = "temperature"
    EMOTION = "emotion"
    PHASE_WEAK_TO_STRONG = "phase_weak_to_strong"
    PHASE_FLAT = "phase_flat"
    PHASE_STRONG_TO_WEAK = "phase_strong_to_weak"
    BLANK = "blank"
