"""
Tag aggregation over the canonical contribution table.

Folds an answer vector into signed per-phase tag totals.

Aggregation Rule:
    v = 3 - answer                      (1 -> +2, 3 -> 0, 5 -> -2)
    v >= 0:           tag      += v * tag_w * phase_w
    v < 0, paired:    opposite += -v * tag_w * phase_w
    v < 0, unpaired:  tag      += v * tag_w * phase_w

Only direction-of-preference tags (those with an opposite) are flipped;
intensity tags keep the signed magnitude.
"""

import logging
from typing import Dict, Mapping, Optional, Sequence

from ..tables import CONTRIBUTIONS, OPPOSITE_TAG, PHASES, ContributionRow, Phase, Tag
from .answers import AnswersLike, NEUTRAL_ANSWER, as_answer_vector

logger = logging.getLogger(__name__)

TagTotals = Dict[Tag, float]
TagTotalsByPhase = Dict[Phase, TagTotals]


def aggregate_phase(
    answers: AnswersLike,
    phase: Phase,
    rows: Optional[Sequence[ContributionRow]] = None
) -> TagTotals:
    """
    Aggregate signed tag totals for a single phase.

    Args:
        answers: 20-answer vector
        phase: Phase to aggregate
        rows: Contribution rows (defaults to the canonical table)

    Returns:
        Mapping of tag to signed total; tags with no contribution are absent
    """
    answers = as_answer_vector(answers)
    rows = CONTRIBUTIONS if rows is None else rows

    totals: TagTotals = {}
    for answer, row in zip(answers, rows):
        phase_w = row.phase_weight(phase)
        if phase_w == 0:
            continue
        v = NEUTRAL_ANSWER - answer
        if v == 0:
            continue
        for tag, tag_w in row.tags.items():
            if v < 0 and tag in OPPOSITE_TAG:
                target = OPPOSITE_TAG[tag]
                totals[target] = totals.get(target, 0.0) + (-v) * tag_w * phase_w
            else:
                totals[tag] = totals.get(tag, 0.0) + v * tag_w * phase_w
    return totals


def aggregate(
    answers: AnswersLike,
    rows: Optional[Sequence[ContributionRow]] = None
) -> TagTotalsByPhase:
    """
    Aggregate signed tag totals for every phase.

    Args:
        answers: 20-answer vector
        rows: Contribution rows (defaults to the canonical table)

    Returns:
        Mapping of phase to tag totals, in PHASES order

    Raises:
        InvalidAnswersError: If answers are malformed
    """
    answers = as_answer_vector(answers)
    by_phase = {phase: aggregate_phase(answers, phase, rows) for phase in PHASES}
    logger.debug(
        "Aggregated tag totals: "
        + ", ".join(f"{p.value}={len(t)} tags" for p, t in by_phase.items())
    )
    return by_phase


def sum_overall(totals_by_phase: Mapping[Phase, Mapping[Tag, float]]) -> TagTotals:
    """Sum per-phase tag totals into one overall mapping."""
    overall: TagTotals = {}
    for totals in totals_by_phase.values():
        for tag, value in totals.items():
            overall[tag] = overall.get(tag, 0.0) + value
    return overall
