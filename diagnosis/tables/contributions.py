"""
Canonical per-question contribution table.

Every engine (tag aggregation, rarity, alias, result keys, phase bands)
reads question weights from this single table. Each row maps the
question's tags to tag weights and each phase to a phase weight in
[0, 1].

TABLE_VERSION identifies the table revision; bump it whenever a weight
changes, since stored results are only comparable within one version.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from .vocabulary import Phase, PHASES, Tag

TABLE_VERSION = "rarity-locked-2025-12-26"

NUM_QUESTIONS = 20


@dataclass(frozen=True)
class ContributionRow:
    """
    Weights for one question.

    Attributes:
        qid: Question identifier ("Q1".."Q20")
        tags: Tag -> tag weight
        phase_weights: Phase -> phase weight in [0, 1]
    """
    qid: str
    tags: Dict[Tag, float]
    phase_weights: Dict[Phase, float]

    @property
    def tag_weight_sum(self) -> float:
        return float(sum(self.tags.values()))

    def phase_weight(self, phase: Phase) -> float:
        return self.phase_weights.get(phase, 0.0)


def _row(qid: str, tags: Dict[Tag, float], weights: Tuple[float, ...]) -> ContributionRow:
    return ContributionRow(qid=qid, tags=tags, phase_weights=dict(zip(PHASES, weights)))


T = Tag

# Phase weight columns: matching, firstMeet, date, relationship, marriage
CONTRIBUTIONS: Tuple[ContributionRow, ...] = (
    _row("Q1", {T.PACE_SLOW: 1.0, T.BOUNDARY: 0.8, T.READ_REACTION: 0.4},
         (0.7, 0.9, 0.4, 0.2, 0.0)),
    _row("Q2", {T.PACE_SLOW: 1.2, T.READ_REACTION: 0.6, T.LOSS_FEAR: 0.4},
         (0.8, 0.8, 0.4, 0.2, 0.0)),
    _row("Q3", {T.BOUNDARY: 0.8, T.AMBIG_TOL: 0.8, T.EDGE_PREFERENCE: 0.4},
         (0.6, 0.7, 0.6, 0.3, 0.1)),
    _row("Q4", {T.READ_REACTION: 1.0, T.HARM_AVOID: 0.6, T.SELF_OPEN_LOW: 0.6},
         (0.5, 0.9, 0.4, 0.2, 0.0)),
    _row("Q5", {T.READ_REACTION: 1.1, T.TRUST_ACTION: 0.7, T.PACE_SLOW: 0.5},
         (0.7, 0.8, 0.4, 0.2, 0.0)),
    _row("Q6", {T.MOOD_SYNC: 1.0, T.DEVOTION: 0.7, T.READ_REACTION: 0.3},
         (0.1, 0.4, 0.8, 0.7, 0.6)),
    _row("Q7", {T.AMBIG_TOL: 1.1, T.BOUNDARY: 0.7, T.TRUST_ACTION: 0.4},
         (0.0, 0.3, 0.6, 0.9, 0.8)),
    _row("Q8", {T.TRUST_ACTION: 1.0, T.LONG_TERM: 0.9},
         (0.0, 0.2, 0.5, 0.9, 0.9)),
    _row("Q9", {T.BOUNDARY: 1.0, T.PACE_SLOW: 0.8, T.SELF_OPEN_LOW: 0.4},
         (0.7, 0.7, 0.5, 0.2, 0.0)),
    _row("Q10", {T.LONG_TERM: 1.1, T.DEVOTION: 0.8, T.TRUST_ACTION: 0.4},
         (0.0, 0.1, 0.3, 0.8, 1.0)),
    _row("Q11", {T.AMBIG_TOL: 0.7, T.DEVOTION: 0.6, T.LONG_TERM: 0.7},
         (0.0, 0.1, 0.4, 0.8, 1.0)),
    _row("Q12", {T.SELF_OPEN_LOW: 1.1, T.BOUNDARY: 0.6, T.READ_REACTION: 0.5},
         (0.3, 0.5, 0.5, 0.5, 0.4)),
    _row("Q13", {T.DEVOTION: 1.0, T.HARM_AVOID: 0.6, T.LOSS_FEAR: 0.5},
         (0.0, 0.1, 0.4, 0.9, 1.0)),
    _row("Q14", {T.BOUNDARY: 1.0, T.PACE_SLOW: 0.6, T.AMBIG_INTOL: 0.6},
         (0.0, 0.1, 0.4, 0.9, 1.0)),
    _row("Q15", {T.LOSS_FEAR: 1.2, T.AMBIG_INTOL: 1.0, T.READ_REACTION: 0.4},
         (0.0, 0.0, 0.3, 0.9, 1.0)),
    _row("Q16", {T.LOSS_FEAR: 1.4, T.AMBIG_INTOL: 0.8},
         (0.0, 0.0, 0.2, 0.8, 1.0)),
    _row("Q17", {T.DEVOTION: 1.1, T.LONG_TERM: 0.9},
         (0.0, 0.0, 0.2, 0.7, 1.0)),
    _row("Q18", {T.TRUST_ACTION: 1.0, T.LONG_TERM: 1.0, T.DEVOTION: 0.6},
         (0.0, 0.0, 0.2, 0.8, 1.0)),
    _row("Q19", {T.LONG_TERM: 1.2, T.DEVOTION: 0.9, T.BOUNDARY: 0.3},
         (0.0, 0.0, 0.2, 0.7, 1.0)),
    _row("Q20", {T.LONG_TERM: 0.8, T.DEVOTION: 0.8, T.INITIATIVE: 0.7, T.EDGE_PREFERENCE: 0.4},
         (0.0, 0.1, 0.3, 0.8, 1.0)),
)

del T


def phase_weight_matrix() -> np.ndarray:
    """
    Phase weights as a (20 x 5) matrix.

    Rows follow question order Q1..Q20, columns follow PHASES order.
    """
    return np.array(
        [[row.phase_weight(p) for p in PHASES] for row in CONTRIBUTIONS],
        dtype=float
    )


def phase_weight_sums() -> Dict[Phase, float]:
    """Total phase weight W_p for every phase."""
    sums = phase_weight_matrix().sum(axis=0)
    return {p: float(s) for p, s in zip(PHASES, sums)}


def tag_weight_sums() -> np.ndarray:
    """Sum of tag weights per question (length 20)."""
    return np.array([row.tag_weight_sum for row in CONTRIBUTIONS], dtype=float)
