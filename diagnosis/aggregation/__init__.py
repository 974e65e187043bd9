"""Answer validation and tag aggregation."""

from .answers import (
    AnswerVector,
    AnswersLike,
    InvalidAnswersError,
    InvalidInputError,
    as_answer_vector,
)
from .tag_aggregator import aggregate, aggregate_phase, sum_overall, TagTotals, TagTotalsByPhase

__all__ = [
    "AnswerVector",
    "AnswersLike",
    "InvalidAnswersError",
    "InvalidInputError",
    "as_answer_vector",
    "aggregate",
    "aggregate_phase",
    "sum_overall",
    "TagTotals",
    "TagTotalsByPhase",
]
