import numpy as np
import pytest

from diagnosis.aggregation import (
    AnswerVector,
    InvalidAnswersError,
    InvalidInputError,
    aggregate,
    as_answer_vector,
    sum_overall,
)
from diagnosis.tables import PHASES, Phase, Tag


def _with(index, value):
    answers = [3] * 20
    answers[index] = value
    return answers


def test_all_neutral_answers_contribute_nothing():
    totals = aggregate([3] * 20)
    assert list(totals) == list(PHASES)
    assert all(t == {} for t in totals.values())
    assert sum_overall(totals) == {}


def test_agreement_credits_own_tags():
    totals = aggregate(_with(0, 1))
    matching = totals[Phase.MATCHING]
    assert matching[Tag.PACE_SLOW] == pytest.approx(2 * 1.0 * 0.7)
    assert matching[Tag.BOUNDARY] == pytest.approx(2 * 0.8 * 0.7)
    assert matching[Tag.READ_REACTION] == pytest.approx(2 * 0.4 * 0.7)


def test_zero_phase_weight_is_skipped():
    totals = aggregate(_with(0, 1))
    assert totals[Phase.MARRIAGE] == {}


def test_disagreement_flips_paired_tags_and_signs_unpaired():
    matching = aggregate(_with(0, 5))[Phase.MATCHING]
    assert Tag.PACE_SLOW not in matching
    assert matching[Tag.PACE_FAST] == pytest.approx(1.4)
    assert matching[Tag.BOUNDARY] == pytest.approx(-1.12)
    assert matching[Tag.READ_REACTION] == pytest.approx(-0.56)


def test_ambiguity_pair_flips_both_ways():
    date = aggregate(_with(2, 5))[Phase.DATE]
    assert date[Tag.AMBIG_INTOL] == pytest.approx(2 * 0.8 * 0.6)
    assert Tag.AMBIG_TOL not in date

    date = aggregate(_with(13, 4))[Phase.DATE]
    assert date[Tag.AMBIG_TOL] == pytest.approx(1 * 0.6 * 0.4)


def test_sum_overall_adds_phases():
    totals = aggregate(_with(0, 1))
    overall = sum_overall(totals)
    expected = 2 * 1.0 * (0.7 + 0.9 + 0.4 + 0.2)
    assert overall[Tag.PACE_SLOW] == pytest.approx(expected)


@pytest.mark.parametrize("answers", [
    [3] * 19,
    [3] * 21,
    [0] + [3] * 19,
    [6] + [3] * 19,
    [True] + [3] * 19,
    [2.0] + [3] * 19,
    ["3"] * 20,
    "33333333333333333333",
    None,
])
def test_invalid_answers_are_rejected(answers):
    with pytest.raises(InvalidAnswersError):
        as_answer_vector(answers)


def test_invalid_answers_error_is_value_error():
    assert issubclass(InvalidAnswersError, InvalidInputError)
    assert issubclass(InvalidInputError, ValueError)


def test_numpy_answers_are_accepted():
    vector = as_answer_vector(np.array([1, 2, 3, 4, 5] * 4))
    assert vector.values == (1, 2, 3, 4, 5) * 4
    assert all(type(v) is int for v in vector)


def test_from_string():
    vector = AnswerVector.from_string("1, 2,3,4,5,1,2,3,4,5,1,2,3,4,5,1,2,3,4,5")
    assert vector.to_list() == [1, 2, 3, 4, 5] * 4
    with pytest.raises(InvalidAnswersError):
        AnswerVector.from_string("1,2,x")
