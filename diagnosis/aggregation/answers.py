"""
Answer vector input contract.

The only externally supplied input to the scoring core is an ordered
sequence of exactly 20 integers in [1, 5], where index i answers
question Q(i+1):

1 = strongly applies
2 = applies
3 = neither
4 = does not apply
5 = strongly does not apply
"""

import numbers
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple, Union

from ..tables import NUM_QUESTIONS

LIKERT_MIN = 1
LIKERT_MAX = 5
NEUTRAL_ANSWER = 3


class InvalidInputError(ValueError):
    """Raised when an engine receives input outside its contract."""


class InvalidAnswersError(InvalidInputError):
    """Raised when an answer vector is not 20 integers in [1, 5]."""


@dataclass(frozen=True)
class AnswerVector:
    """
    Immutable, validated 20-answer vector.

    Attributes:
        values: Tuple of 20 ints in [1, 5], Q1 first
    """
    values: Tuple[int, ...]

    def __post_init__(self):
        """Validate length and Likert bounds."""
        values = self.values
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise InvalidAnswersError(
                f"answers must be a sequence of {NUM_QUESTIONS} integers, got {type(values).__name__}"
            )
        if len(values) != NUM_QUESTIONS:
            raise InvalidAnswersError(
                f"answers must contain exactly {NUM_QUESTIONS} values, got {len(values)}"
            )
        normalized = []
        for i, val in enumerate(values):
            if isinstance(val, bool) or not isinstance(val, numbers.Integral):
                raise InvalidAnswersError(f"answers[{i}] must be an integer between 1 and 5, got {val!r}")
            if not LIKERT_MIN <= val <= LIKERT_MAX:
                raise InvalidAnswersError(f"answers[{i}] must be an integer between 1 and 5, got {val}")
            normalized.append(int(val))
        object.__setattr__(self, "values", tuple(normalized))

    def __iter__(self) -> Iterator[int]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index):
        return self.values[index]

    def to_list(self) -> List[int]:
        return list(self.values)

    @classmethod
    def from_string(cls, text: str) -> "AnswerVector":
        """
        Parse a comma separated answer string such as "1,2,3,...".

        Raises:
            InvalidAnswersError: If any item is not an integer
        """
        items = [part.strip() for part in text.split(",") if part.strip()]
        try:
            values = tuple(int(item) for item in items)
        except ValueError as e:
            raise InvalidAnswersError(f"answers must be comma separated integers: {e}") from e
        return cls(values)


AnswersLike = Union[AnswerVector, Sequence[int]]


def as_answer_vector(answers: AnswersLike) -> AnswerVector:
    """Coerce `answers` into a validated AnswerVector."""
    if isinstance(answers, AnswerVector):
        return answers
    if isinstance(answers, (str, bytes)) or not isinstance(answers, Sequence):
        # Accept generic iterables such as numpy arrays
        try:
            answers = tuple(answers)
        except TypeError as e:
            raise InvalidAnswersError(f"answers must be a sequence, got {type(answers).__name__}") from e
    return AnswerVector(tuple(answers))
