import json

import pytest

from diagnosis.aggregation import InvalidAnswersError, InvalidInputError
from diagnosis.inference import DiagnosisEvaluator
from diagnosis.session import LocalStore, Screen, SessionState


def _answer_all(state, value=2):
    for index in range(20):
        state = state.set_answer(index, value)
    return state


def test_flow_through_screens():
    state = SessionState()
    assert state.screen == Screen.TITLE
    state = state.open().start()
    assert state.screen == Screen.PAGE_1
    assert state.page_index == 0

    for index in range(10):
        state = state.set_answer(index, 1)
    state = state.next_page()
    assert state.page_index == 1

    for index in range(10, 20):
        state = state.set_answer(index, 5)
    result = DiagnosisEvaluator().evaluate(state.answer_vector())
    state = state.finish(result)
    assert state.screen == Screen.ALIAS
    state = state.show_result()
    assert state.screen == Screen.RESULT
    assert state.result == result


def test_transitions_do_not_mutate():
    state = SessionState().start()
    updated = state.set_answer(0, 4)
    assert state.answers[0] is None
    assert updated.answers[0] == 4


def test_next_page_requires_complete_page():
    state = SessionState().start().set_answer(0, 3)
    with pytest.raises(InvalidInputError):
        state.next_page()


def test_previous_page_keeps_answers():
    state = _answer_all(SessionState().start())
    state = state.next_page().previous_page()
    assert state.screen == Screen.PAGE_1
    assert state.is_complete()
    assert state.previous_page().screen == Screen.START


def test_set_answer_validates():
    state = SessionState()
    with pytest.raises(InvalidAnswersError):
        state.set_answer(20, 3)
    with pytest.raises(InvalidAnswersError):
        state.set_answer(0, 6)
    with pytest.raises(InvalidAnswersError):
        state.set_answer(0, True)


def test_incomplete_session_cannot_finish():
    state = SessionState().start().set_answer(0, 3)
    with pytest.raises(InvalidAnswersError):
        state.answer_vector()
    result = DiagnosisEvaluator().evaluate([3] * 20)
    with pytest.raises(InvalidInputError):
        state.finish(result)


def test_randomize_is_seeded():
    first = SessionState().randomize(seed=7)
    second = SessionState().randomize(seed=7)
    assert first == second
    assert first.is_complete()
    assert all(1 <= a <= 5 for a in first.answers)
    assert first.screen == Screen.PAGE_2


def test_retry_resets():
    state = _answer_all(SessionState().start())
    assert state.retry() == SessionState()


def test_store_round_trip(tmp_path):
    store = LocalStore(tmp_path / "state.json")
    state = SessionState().randomize(seed=11)
    result = DiagnosisEvaluator().evaluate(state.answer_vector())
    state = state.finish(result).show_result()

    assert store.save(state.to_dict())
    restored = SessionState.from_dict(store.load())
    assert restored == state
    assert restored.answer_vector() == state.answer_vector()


def test_partial_state_round_trip(tmp_path):
    store = LocalStore(tmp_path / "state.json")
    state = SessionState().start().set_answer(3, 4)
    store.save(state.to_dict())
    assert SessionState.from_dict(store.load()) == state


def test_missing_file_loads_none(tmp_path):
    assert LocalStore(tmp_path / "nothing.json").load() is None


def test_corrupt_file_loads_none(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")
    assert LocalStore(path).load() is None


def test_undecodable_file_loads_none(tmp_path):
    path = tmp_path / "state.json"
    path.write_bytes(b'{"diagnosis_state_v1": "\xff\xfe"}')
    assert LocalStore(path).load() is None


def test_failed_save_keeps_existing_keys(tmp_path):
    path = tmp_path / "state.json"
    LocalStore(path, key="a").save({"x": 1})
    assert not LocalStore(path, key="b").save({"bad": {1, 2}})
    assert LocalStore(path, key="a").load() == {"x": 1}
    assert json.loads(path.read_text()) == {"a": {"x": 1}}
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_clear_keeps_other_keys(tmp_path):
    path = tmp_path / "state.json"
    LocalStore(path, key="other").save({"x": 1})
    store = LocalStore(path)
    store.save({"screen": "title"})
    store.clear()
    assert store.load() is None
    assert json.loads(path.read_text()) == {"other": {"x": 1}}


def test_malformed_state_raises_input_error():
    with pytest.raises(InvalidInputError):
        SessionState.from_dict({"screen": "nowhere"})
    with pytest.raises(InvalidInputError):
        SessionState.from_dict({"answers": [1, 2]})
