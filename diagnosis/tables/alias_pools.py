"""
Alias candidate pools keyed by (RarityTier, PoolKey).

Lower tiers hold plain alias strings. The rarest tier (Sg) holds
main/sub pairs; the main line carries a bracket marker that is cut off
when the asset identifier is derived.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .vocabulary import PoolKey, RarityTier

SG_BRACKET_MARKER = "["


@dataclass(frozen=True)
class AliasCandidate:
    """One alias pool entry. `sub` is only set for Sg entries."""
    main: str
    sub: Optional[str] = None

    @property
    def text(self) -> str:
        if self.sub:
            return f"{self.main}\n{self.sub}"
        return self.main


DEFAULT_ALIAS = AliasCandidate("Nameless Traveler")


_PLAIN_POOLS: Dict[RarityTier, Dict[PoolKey, Tuple[str, ...]]] = {
    RarityTier.C: {
        PoolKey.DISTANCE: ("Polite Distance Keeper", "Step-Back Strategist"),
        PoolKey.TEMPERATURE: ("Room Temperature Reader", "Easygoing Mood Mirror"),
        PoolKey.EMOTION: ("Quiet Worrier", "Gentle Second-Guesser"),
        PoolKey.PHASE_WEAK_TO_STRONG: ("Slow Starter", "Late Bloomer"),
        PoolKey.PHASE_FLAT: ("Steady Walker", "Even-Keel Partner"),
        PoolKey.PHASE_STRONG_TO_WEAK: ("Bright First Impression", "Sprint Starter"),
        PoolKey.BLANK: ("Blank Canvas", "Open Question"),
    },
    RarityTier.U: {
        PoolKey.DISTANCE: ("Measured Approacher", "Fence Builder"),
        PoolKey.TEMPERATURE: ("Warm Listener", "Atmosphere Tuner"),
        PoolKey.EMOTION: ("Soft-Hearted Sentinel", "Careful Feeler"),
        PoolKey.PHASE_WEAK_TO_STRONG: ("Warming Ember", "Gradual Opener"),
        PoolKey.PHASE_FLAT: ("Constant Lantern", "Metronome Heart"),
        PoolKey.PHASE_STRONG_TO_WEAK: ("First-Spark Chaser", "Opening Act"),
        PoolKey.BLANK: ("Unwritten Page", "Neutral Ground"),
    },
    RarityTier.R: {
        PoolKey.DISTANCE: ("Boundary Cartographer", "Distance Architect"),
        PoolKey.TEMPERATURE: ("Mood Conductor", "Reaction Reader"),
        PoolKey.EMOTION: ("Storm-Aware Guardian", "Tender Alarm Bell"),
        PoolKey.PHASE_WEAK_TO_STRONG: ("Deep-Root Grower", "Slow-Burn Flame"),
        PoolKey.PHASE_FLAT: ("Unshaken Anchor", "Plateau Keeper"),
        PoolKey.PHASE_STRONG_TO_WEAK: ("Firework Starter", "Early Summit Climber"),
        PoolKey.BLANK: ("Fog Walker", "Shapeless Wind"),
    },
    RarityTier.E: {
        PoolKey.DISTANCE: ("Orbit Designer", "Perimeter Strategist"),
        PoolKey.TEMPERATURE: ("Thermostat of Hearts", "Ambience Alchemist"),
        PoolKey.EMOTION: ("Loss-Proof Fortress", "Heartbeat Cartographer"),
        PoolKey.PHASE_WEAK_TO_STRONG: ("Crescendo Builder", "Rising Tide"),
        PoolKey.PHASE_FLAT: ("Evergreen Pillar", "Unbroken Rhythm"),
        PoolKey.PHASE_STRONG_TO_WEAK: ("Comet Opener", "Blazing Overture"),
        PoolKey.BLANK: ("Mirage Drifter", "Quiet Enigma"),
    },
    RarityTier.M: {
        PoolKey.DISTANCE: ("Architect of Safe Distance", "Gatekeeper of the Inner Room"),
        PoolKey.TEMPERATURE: ("Weaver of Shared Moods", "Conductor of Quiet Warmth"),
        PoolKey.EMOTION: ("Keeper of Fragile Lights", "Sentinel of Unspoken Fears"),
        PoolKey.PHASE_WEAK_TO_STRONG: ("Cultivator of Slow Miracles", "Engineer of Lasting Warmth"),
        PoolKey.PHASE_FLAT: ("Bearer of the Steady Flame", "Lighthouse of Even Waters"),
        PoolKey.PHASE_STRONG_TO_WEAK: ("Herald of First Sparks", "Dancer of the Opening Night"),
        PoolKey.BLANK: ("Wanderer of Blank Maps", "Shadow Without Outline"),
    },
    RarityTier.LG: {
        PoolKey.DISTANCE: ("Psychological Fortress Architect", "Sovereign of Measured Steps"),
        PoolKey.TEMPERATURE: ("Grand Mood Alchemist", "Emperor of Quiet Warmth"),
        PoolKey.EMOTION: ("Guardian of the Last Ember", "Oracle of Trembling Hearts"),
        PoolKey.PHASE_WEAK_TO_STRONG: ("Legend of the Slow Ascent", "Titan of Late Devotion"),
        PoolKey.PHASE_FLAT: ("Eternal Keel", "Unmoving North Star"),
        PoolKey.PHASE_STRONG_TO_WEAK: ("Supernova Overture", "Legend of the First Glance"),
        PoolKey.BLANK: ("Phantom of the Undrawn Map", "Legendary Blank Verse"),
    },
}

_SG_POOLS: Dict[PoolKey, Tuple[Tuple[str, str], ...]] = {
    PoolKey.DISTANCE: (
        ("Lone Orbit [Singular]", "Circles close enough to matter, never close enough to collide"),
        ("Keeper of the Last Door [Singular]", "Opens only once, and only for one"),
    ),
    PoolKey.TEMPERATURE: (
        ("Heart Thermostat [Singular]", "Sets the warmth of a room before anyone notices"),
        ("Silent Conductor [Singular]", "Leads every mood without raising a hand"),
    ),
    PoolKey.EMOTION: (
        ("Ember Sentinel [Singular]", "Guards a fire that fear never put out"),
        ("Glass Fortress [Singular]", "Clear to see through, impossible to break"),
    ),
    PoolKey.PHASE_WEAK_TO_STRONG: (
        ("Slow Miracle [Singular]", "Grows stronger with every season that passes"),
        ("Late Dawn [Singular]", "The light arrives last and stays longest"),
    ),
    PoolKey.PHASE_FLAT: (
        ("North Star [Singular]", "The same light in every hour of the night"),
        ("Still Water [Singular]", "Depth that never changes its surface"),
    ),
    PoolKey.PHASE_STRONG_TO_WEAK: (
        ("First Light Comet [Singular]", "Blinding on arrival, rare to witness twice"),
        ("Opening Night [Singular]", "Every story peaks at the first act"),
    ),
    PoolKey.BLANK: (
        ("Unnamed Star [Singular]", "A pattern no map has drawn yet"),
        ("White Cipher [Singular]", "Answers that refuse to be read"),
    ),
}


def _build_pools() -> Dict[Tuple[RarityTier, PoolKey], Tuple[AliasCandidate, ...]]:
    pools = {}
    for tier, by_key in _PLAIN_POOLS.items():
        for key, names in by_key.items():
            pools[(tier, key)] = tuple(AliasCandidate(name) for name in names)
    for key, pairs in _SG_POOLS.items():
        pools[(RarityTier.SG, key)] = tuple(AliasCandidate(main, sub) for main, sub in pairs)
    return pools


ALIAS_POOLS = _build_pools()


def get_pool(tier: RarityTier, key: PoolKey) -> Tuple[AliasCandidate, ...]:
    """Return the pool for (tier, key), or an empty tuple when undefined."""
    return ALIAS_POOLS.get((tier, key), ())
