import pytest
import yaml

from diagnosis.inference import DiagnosisEvaluator
from diagnosis.scoring import DEFAULT_TEXT_KEY
from diagnosis.tables import PHASES, Phase
from diagnosis.texts import TextCatalog


@pytest.fixture
def catalog():
    return TextCatalog.from_yaml()


def test_every_phase_has_a_default(catalog):
    for phase in PHASES:
        assert DEFAULT_TEXT_KEY in catalog.keys(phase)
        assert catalog.get(phase, DEFAULT_TEXT_KEY).paragraphs()


def test_known_key(catalog):
    block = catalog.get(Phase.MARRIAGE, "MR-01")
    assert block.key == "MR-01"
    assert block.label == "Marriage"
    assert block.paragraphs()[0].startswith("You picture a long future")


def test_unknown_key_falls_back_to_default(catalog):
    block = catalog.get("first", "FM-99")
    assert block.phase == Phase.FIRST_MEET
    assert block.key == DEFAULT_TEXT_KEY


def test_every_result_key_resolves(catalog):
    result = DiagnosisEvaluator().evaluate([1, 2, 3, 4, 5] * 4)
    for phase, key in result.result_keys.items():
        assert catalog.get(phase, key).paragraphs()


def test_sections_are_ordered(tmp_path):
    path = tmp_path / "texts.yaml"
    path.write_text(yaml.safe_dump({
        "phases": {
            "date": {
                "label": "Dating",
                "texts": {"DT-01": {"recommend": ["r1", "r2"], "scene": "s", "why": ""}},
            }
        }
    }))
    block = TextCatalog.from_yaml(path).get("date", "DT-01")
    assert block.paragraphs() == ["s", "r1", "r2"]


def test_phase_without_default_gives_empty_block(tmp_path):
    path = tmp_path / "texts.yaml"
    path.write_text(yaml.safe_dump({"phases": {"marriage": {"texts": {}}}}))
    block = TextCatalog.from_yaml(path).get(Phase.MARRIAGE, "MR-02")
    assert block.sections == {}
    assert block.label == "marriage"


def test_missing_catalog_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        TextCatalog.from_yaml(tmp_path / "missing.yaml")
