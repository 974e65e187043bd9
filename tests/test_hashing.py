import pytest

from diagnosis.hashing import SAVE_CODE_WIDTH, fnv1a_32, save_code, to_base36


def test_fnv1a_reference_values():
    assert fnv1a_32(b"") == 0x811C9DC5
    assert fnv1a_32(b"a") == 0xE40C292C
    assert fnv1a_32(b"foobar") == 0xBF9CF968


def test_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"
    assert to_base36(0xFFFFFFFF) == "1Z141Z3"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_save_code_shape_and_determinism():
    answers = [1, 2, 3, 4, 5] * 4
    code = save_code(answers)
    assert len(code) == SAVE_CODE_WIDTH
    assert code == code.upper()
    assert code.isalnum()
    assert save_code(tuple(answers)) == code


def test_save_code_uses_comma_joined_answers():
    answers = [3] * 20
    expected = to_base36(fnv1a_32(",".join(["3"] * 20).encode())).rjust(SAVE_CODE_WIDTH, "0")
    assert save_code(answers) == expected


def test_save_code_differs_between_vectors():
    assert save_code([3] * 20) != save_code([3] * 19 + [4])
