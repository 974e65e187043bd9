import pytest

from diagnosis.aggregation import InvalidAnswersError
from diagnosis.configs import DEFAULT_CONFIG_PATH, load_config
from diagnosis.inference import DiagnosisEvaluator, DiagnosisResult
from diagnosis.inference import evaluate as evaluate_module
from diagnosis.scoring import FALLBACK_KEY_BY_PHASE
from diagnosis.tables import DEFAULT_ALIAS, PHASES, CategoryKey, PhaseTrend, RarityTier, TABLE_VERSION

MIXED = [1, 2, 3, 4, 5, 2, 3, 4, 1, 2, 4, 3, 2, 1, 5, 4, 3, 2, 1, 2]


@pytest.fixture
def evaluator():
    return DiagnosisEvaluator()


def test_all_neutral_result(evaluator):
    result = evaluator.evaluate([3] * 20)
    assert result.rarity == RarityTier.C
    assert result.alias.category == CategoryKey.BLANK
    assert result.result_keys == {p: FALLBACK_KEY_BY_PHASE[p] for p in PHASES}
    assert all(b.band == 3 for b in result.phase_bands.values())
    assert len(result.save_code) == 7
    assert result.table_version == TABLE_VERSION
    assert result.phase_trend == PhaseTrend.FLAT


def test_all_strong_agree_result(evaluator):
    result = evaluator.evaluate([1] * 20)
    assert result.rarity == RarityTier.LG
    assert result.ordered_result_keys() == ["MT-16", "FM-02", "DT-16", "RL-08", "MR-02"]


def test_evaluation_is_deterministic(evaluator):
    assert evaluator.evaluate(MIXED).to_dict() == DiagnosisEvaluator().evaluate(list(MIXED)).to_dict()


def test_invalid_answers_raise(evaluator):
    with pytest.raises(InvalidAnswersError):
        evaluator.evaluate([3] * 19)


def test_unknown_trend_falls_back_to_flat(evaluator):
    result = evaluator.evaluate(MIXED, phase_trend="sideways")
    assert result.phase_trend == PhaseTrend.FLAT


def test_rarity_failure_degrades_to_common(monkeypatch, evaluator):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(evaluate_module, "calc_rarity_with_debug", broken)
    result = evaluator.evaluate([1] * 20)
    assert result.rarity == RarityTier.C
    assert result.result_keys[PHASES[0]] == "MT-16"


def test_alias_failure_uses_default_alias(monkeypatch, evaluator):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(evaluate_module, "compute_alias", broken)
    result = evaluator.evaluate(MIXED)
    assert result.alias.alias_text == DEFAULT_ALIAS.text
    assert result.alias.asset_candidates[-1].endswith("_default.png")


def test_breakdown_is_optional():
    assert DiagnosisEvaluator().evaluate(MIXED).breakdown is None
    result = DiagnosisEvaluator(include_breakdown=True).evaluate(MIXED)
    assert set(result.breakdown["phases"]) == {p.value for p in PHASES}
    assert "breakdown" in result.to_dict()


def test_result_round_trip(evaluator):
    result = evaluator.evaluate(MIXED, phase_trend="strong_to_weak")
    restored = DiagnosisResult.from_dict(result.to_dict())
    assert restored == result
    assert restored.to_dict() == result.to_dict()


def test_from_config_matches_defaults():
    config = load_config(str(DEFAULT_CONFIG_PATH))
    configured = DiagnosisEvaluator.from_config(config)
    assert configured.evaluate(MIXED).to_dict() == DiagnosisEvaluator().evaluate(MIXED).to_dict()
