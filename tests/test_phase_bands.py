import pytest

from diagnosis.aggregation import InvalidAnswersError
from diagnosis.scoring.phase_bands import (
    PhaseBand,
    PhaseBandConfig,
    band_from_raw,
    compute_phase_bands,
    phase_raw_scores,
)
from diagnosis.tables import PHASES, Phase


@pytest.mark.parametrize("raw,band", [
    (-25.0, 1),
    (-10.0, 1),
    (-9.99, 2),
    (-4.0, 2),
    (-3.99, 3),
    (0.0, 3),
    (3.99, 3),
    (4.0, 4),
    (9.99, 4),
    (10.0, 5),
    (30.0, 5),
])
def test_band_boundaries(raw, band):
    assert band_from_raw(raw) == band


def test_neutral_answers_are_average():
    bands = compute_phase_bands([3] * 20)
    assert list(bands) == list(PHASES)
    for band in bands.values():
        assert band == PhaseBand(raw=0.0, band=3, label="average")


def test_extreme_answers_hit_outer_bands():
    assert {b.band for b in compute_phase_bands([1] * 20).values()} == {5}
    assert {b.band for b in compute_phase_bands([5] * 20).values()} == {1}


def test_raw_score_for_matching():
    raws = phase_raw_scores([1] * 20)
    # 2 * sum(tag weight sum * matching weight)
    assert raws[Phase.MATCHING] == pytest.approx(2 * 9.61)


def test_labels_are_configurable():
    config = PhaseBandConfig(labels=["1", "2", "3", "4", "5"])
    bands = compute_phase_bands([3] * 20, config)
    assert bands[Phase.DATE].label == "3"


def test_config_validation():
    with pytest.raises(ValueError):
        PhaseBandConfig(thresholds=[10.0, 4.0, -4.0, -10.0]).validate()
    with pytest.raises(ValueError):
        PhaseBandConfig(labels=["only one"]).validate()


def test_invalid_answers_raise():
    with pytest.raises(InvalidAnswersError):
        compute_phase_bands([3] * 10)
