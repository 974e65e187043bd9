"""
Result-key engine.

Turns per-phase tag totals into the pattern key ("MT-07", "RL-03", ...)
that selects a phase's narrative text block. The engine never returns
text and never raises: invalid input or missing axis totals resolve to
a fixed per-phase fallback key.

Discretization Policies:
- matching, date: 4-axis binary. Axes are tri-state; Neutral axes are
  expanded into both branches and narrowed by the largest-magnitude
  axis, then the phase axis priority. code = 8*b0 + 4*b1 + 2*b2 + b3 + 1.
- relationship: 3-axis tri-state looked up in a 12-entry table.
- marriage: 3-axis binary (zero is Low) matched against four patterns;
  any other pattern uses the fallback key.
- firstMeet: the strongest of seven named tag readings wins.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Mapping, Optional, Sequence, Tuple

from ..aggregation import AnswersLike, InvalidInputError, aggregate, as_answer_vector
from ..tables import PHASES, Phase, Tag

logger = logging.getLogger(__name__)

HIGH = "H"
LOW = "L"
NEUTRAL = "N"

DEFAULT_TEXT_KEY = "_default"

PREFIX_BY_PHASE = {
    Phase.MATCHING: "MT",
    Phase.FIRST_MEET: "FM",
    Phase.DATE: "DT",
    Phase.RELATIONSHIP: "RL",
    Phase.MARRIAGE: "MR",
}

FALLBACK_KEY_BY_PHASE = {
    Phase.MATCHING: "MT-08",
    Phase.FIRST_MEET: "FM-05",
    Phase.DATE: "DT-08",
    Phase.RELATIONSHIP: "RL-08",
    Phase.MARRIAGE: "MR-01",
}


@dataclass(frozen=True)
class Axis:
    """
    One discretization axis.

    The axis total is t[positive] - t[negative] when the axis spans an
    opposite pair, otherwise t[positive].
    """
    name: str
    positive: Tag
    negative: Optional[Tag] = None

    def total(self, totals: Mapping[str, float]) -> Optional[float]:
        """Axis total, or None when none of its tags are present."""
        keys = [self.positive.value] + ([self.negative.value] if self.negative else [])
        if not any(k in totals for k in keys):
            return None
        value = totals.get(self.positive.value, 0.0)
        if self.negative is not None:
            value -= totals.get(self.negative.value, 0.0)
        return value


@dataclass(frozen=True)
class PhaseAxes:
    """Axes of a phase and the priority used to break ties."""
    axes: Tuple[Axis, ...]
    priority: Tuple[str, ...]


PHASE_AXES: Dict[Phase, PhaseAxes] = {
    Phase.MATCHING: PhaseAxes(
        axes=(
            Axis("A", Tag.PACE_SLOW, Tag.PACE_FAST),
            Axis("B", Tag.READ_REACTION),
            Axis("C", Tag.BOUNDARY),
            Axis("D", Tag.SELF_OPEN_LOW, Tag.SELF_OPEN_HIGH),
        ),
        priority=("A", "B", "C", "D"),
    ),
    Phase.DATE: PhaseAxes(
        axes=(
            Axis("A", Tag.MOOD_SYNC),
            Axis("B", Tag.TRUST_ACTION),
            Axis("C", Tag.AMBIG_TOL, Tag.AMBIG_INTOL),
            Axis("D", Tag.DEVOTION),
        ),
        priority=("B", "A", "D", "C"),
    ),
    Phase.RELATIONSHIP: PhaseAxes(
        axes=(
            Axis("A", Tag.LOSS_FEAR),
            Axis("B", Tag.DEVOTION),
            Axis("C", Tag.SELF_OPEN_LOW, Tag.SELF_OPEN_HIGH),
        ),
        priority=("B", "A", "C"),
    ),
    Phase.MARRIAGE: PhaseAxes(
        axes=(
            Axis("A", Tag.LONG_TERM),
            Axis("B", Tag.LOSS_FEAR),
            Axis("C", Tag.TRUST_ACTION),
        ),
        priority=("A", "C", "B"),
    ),
}

# 8 pure H/L combinations plus 4 Neutral-containing patterns
RELATIONSHIP_TABLE: Dict[str, int] = {
    "LLL": 1, "LLH": 2, "LHL": 3, "LHH": 4,
    "HLL": 5, "HLH": 6, "HHL": 7, "HHH": 8,
    "NHH": 9, "NHL": 10, "HNL": 11, "LHN": 12,
}

MARRIAGE_PATTERNS: Dict[str, int] = {
    "HLH": 1,
    "HHH": 2,
    "LHL": 3,
    "LLL": 4,
}

# Scanned in order; the first entry wins a tie on |value|
FIRST_MEET_KEYS: Tuple[Tuple[str, Tag], ...] = (
    ("FM-01", Tag.PACE_SLOW),
    ("FM-02", Tag.READ_REACTION),
    ("FM-03", Tag.BOUNDARY),
    ("FM-04", Tag.HARM_AVOID),
    ("FM-05", Tag.TRUST_ACTION),
    ("FM-06", Tag.SELF_OPEN_LOW),
    ("FM-07", Tag.MOOD_SYNC),
)


@dataclass
class ResultKeyConfig:
    """
    Configuration for result-key discretization.

    Attributes:
        neutral_band: |axis total| <= neutral_band counts as Neutral
    """
    neutral_band: float = 0.0

    def validate(self) -> None:
        if self.neutral_band < 0:
            raise ValueError(f"neutral_band must be >= 0, got {self.neutral_band}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ResultKeyConfig":
        """Create from main config dictionary."""
        section = config.get("result_keys", {})
        return cls(neutral_band=section.get("neutral_band", 0.0))


def build_key(phase: Phase, number: int) -> str:
    return f"{PREFIX_BY_PHASE[phase]}-{number:02d}"


def _tri_state(value: float, band: float) -> str:
    if value > band:
        return HIGH
    if value < -band:
        return LOW
    return NEUTRAL


def _narrowing_order(names: Sequence[str], totals: Mapping[str, float], priority: Sequence[str]) -> List[str]:
    """Largest-magnitude axis first, then the remaining axes by priority."""
    ordered = [n for n in priority if n in names]
    strongest = max(ordered, key=lambda n: (abs(totals[n]), -ordered.index(n)))
    return [strongest] + [n for n in ordered if n != strongest]


def _axis_totals(layout: PhaseAxes, totals: Mapping[str, float]) -> Optional[Dict[str, float]]:
    values = {}
    for axis in layout.axes:
        value = axis.total(totals)
        if value is None:
            return None
        values[axis.name] = value
    return values


def _four_axis_key(phase: Phase, totals: Mapping[str, float], config: ResultKeyConfig) -> Optional[str]:
    layout = PHASE_AXES[phase]
    axis_totals = _axis_totals(layout, totals)
    if axis_totals is None:
        return None

    names = [axis.name for axis in layout.axes]
    states = {n: _tri_state(axis_totals[n], config.neutral_band) for n in names}
    if all(s == NEUTRAL for s in states.values()):
        return None

    branches = []
    for n in names:
        if states[n] == HIGH:
            branches.append((1,))
        elif states[n] == LOW:
            branches.append((0,))
        else:
            branches.append((1, 0))
    candidates = list(itertools.product(*branches))

    for n in _narrowing_order(names, axis_totals, layout.priority):
        if len(candidates) == 1:
            break
        value = axis_totals[n]
        if value == 0:
            continue
        bit = 1 if value > 0 else 0
        idx = names.index(n)
        narrowed = [c for c in candidates if c[idx] == bit]
        if narrowed:
            candidates = narrowed

    if len(candidates) != 1:
        return None
    b0, b1, b2, b3 = candidates[0]
    return build_key(phase, 8 * b0 + 4 * b1 + 2 * b2 + b3 + 1)


def _relationship_key(totals: Mapping[str, float], config: ResultKeyConfig) -> Optional[str]:
    phase = Phase.RELATIONSHIP
    layout = PHASE_AXES[phase]
    axis_totals = _axis_totals(layout, totals)
    if axis_totals is None:
        return None

    names = [axis.name for axis in layout.axes]
    states = {n: _tri_state(axis_totals[n], config.neutral_band) for n in names}
    if all(s == NEUTRAL for s in states.values()):
        return None

    pattern = "".join(states[n] for n in names)
    if pattern in RELATIONSHIP_TABLE:
        return build_key(phase, RELATIONSHIP_TABLE[pattern])

    for n in _narrowing_order(names, axis_totals, layout.priority):
        if states[n] != NEUTRAL:
            continue
        if axis_totals[n] > 0:
            states[n] = HIGH
        elif axis_totals[n] < 0:
            states[n] = LOW
    for n in names:
        if states[n] == NEUTRAL:
            states[n] = LOW

    pattern = "".join(states[n] for n in names)
    if pattern in RELATIONSHIP_TABLE:
        return build_key(phase, RELATIONSHIP_TABLE[pattern])
    return None


def _marriage_key(totals: Mapping[str, float]) -> Optional[str]:
    phase = Phase.MARRIAGE
    layout = PHASE_AXES[phase]
    axis_totals = _axis_totals(layout, totals)
    if axis_totals is None:
        return None

    # Zero is Low, so every positive axis is already High and raising
    # positive axes cannot produce a new match. Unmatched patterns fall back.
    names = [axis.name for axis in layout.axes]
    pattern = "".join(HIGH if axis_totals[n] > 0 else LOW for n in names)
    if pattern in MARRIAGE_PATTERNS:
        return build_key(phase, MARRIAGE_PATTERNS[pattern])
    return None


def _first_meet_key(totals: Mapping[str, float]) -> Optional[str]:
    best_key = None
    best_value = 0.0
    for key, tag in FIRST_MEET_KEYS:
        if tag.value not in totals:
            continue
        value = totals[tag.value]
        if best_key is None or abs(value) > abs(best_value):
            best_key, best_value = key, value
    if best_key is None or best_value == 0:
        return None
    return best_key


def result_key_for_phase(
    phase: Phase,
    totals: Mapping[str, float],
    config: Optional[ResultKeyConfig] = None
) -> str:
    """
    Pattern key for one phase, falling back to the phase default.

    Args:
        phase: Phase to key
        totals: That phase's tag totals, keyed by tag value
        config: ResultKeyConfig
    """
    config = config or ResultKeyConfig()
    if phase in (Phase.MATCHING, Phase.DATE):
        key = _four_axis_key(phase, totals, config)
    elif phase == Phase.RELATIONSHIP:
        key = _relationship_key(totals, config)
    elif phase == Phase.MARRIAGE:
        key = _marriage_key(totals)
    else:
        key = _first_meet_key(totals)
    return key or FALLBACK_KEY_BY_PHASE[phase]


def _normalize_totals(tag_totals_by_phase: Mapping[Any, Mapping[Any, float]]) -> Dict[Phase, Dict[str, float]]:
    normalized: Dict[Phase, Dict[str, float]] = {}
    try:
        entries = list(tag_totals_by_phase.items())
    except AttributeError:
        logger.warning(f"Ignoring tag totals: expected a mapping, got {type(tag_totals_by_phase).__name__}")
        return normalized

    for phase_key, totals in entries:
        try:
            phase = Phase.parse(phase_key)
        except ValueError:
            logger.warning(f"Ignoring tag totals for unknown phase {phase_key!r}")
            continue
        try:
            normalized[phase] = {
                (k.value if isinstance(k, Tag) else str(k)): float(v)
                for k, v in (totals or {}).items()
            }
        except (TypeError, ValueError, AttributeError) as e:
            # The phase is left out and resolves to its fallback key.
            logger.warning(f"Ignoring malformed tag totals for {phase.value}: {e}")
    return normalized


def fallback_keys() -> Dict[Phase, str]:
    return {phase: FALLBACK_KEY_BY_PHASE[phase] for phase in PHASES}


def calc_result_keys(
    answers: AnswersLike,
    tag_totals_by_phase: Optional[Mapping[Any, Mapping[Any, float]]] = None,
    config: Optional[ResultKeyConfig] = None
) -> Dict[Phase, str]:
    """
    Compute the pattern key for every phase.

    Never raises: invalid answers give every phase its fallback key.

    Args:
        answers: 20-answer vector
        tag_totals_by_phase: Precomputed per-phase tag totals (computed
            from `answers` when omitted)
        config: ResultKeyConfig

    Returns:
        Mapping of phase to pattern key, in PHASES order
    """
    config = config or ResultKeyConfig()
    try:
        answer_vector = as_answer_vector(answers)
    except InvalidInputError as e:
        logger.warning(f"Result keys fell back to defaults: {e}")
        return fallback_keys()

    if tag_totals_by_phase is None:
        tag_totals_by_phase = aggregate(answer_vector)
    totals = _normalize_totals(tag_totals_by_phase)

    return {
        phase: result_key_for_phase(phase, totals.get(phase, {}), config)
        for phase in PHASES
    }
