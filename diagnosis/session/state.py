"""
Questionnaire session state.

A session moves through the screens

    title -> start -> page 1 (Q1-Q10) -> page 2 (Q11-Q20) -> alias -> result

SessionState is immutable; every transition returns a new state and the
caller decides whether to persist it.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Any, Optional, Tuple

import numpy as np

from ..aggregation import AnswerVector, InvalidAnswersError, InvalidInputError
from ..aggregation.answers import LIKERT_MAX, LIKERT_MIN
from ..inference.schema import DiagnosisResult
from ..tables import NUM_QUESTIONS

logger = logging.getLogger(__name__)

QUESTIONS_PER_PAGE = 10


class Screen(str, Enum):
    """Screens of a session, in flow order."""
    TITLE = "title"
    START = "start"
    PAGE_1 = "q1"
    PAGE_2 = "q2"
    ALIAS = "alias"
    RESULT = "result"


_PAGES = (Screen.PAGE_1, Screen.PAGE_2)


def _empty_answers() -> Tuple[Optional[int], ...]:
    return (None,) * NUM_QUESTIONS


@dataclass(frozen=True)
class SessionState:
    """
    Snapshot of one questionnaire session.

    Attributes:
        screen: Current screen
        answers: 20 answers, None where unanswered
        result: Diagnosis once finished
    """
    screen: Screen = Screen.TITLE
    answers: Tuple[Optional[int], ...] = field(default_factory=_empty_answers)
    result: Optional[DiagnosisResult] = None

    @property
    def page_index(self) -> Optional[int]:
        """0 or 1 on a question page, otherwise None."""
        if self.screen in _PAGES:
            return _PAGES.index(self.screen)
        return None

    @property
    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    def is_complete(self) -> bool:
        return self.answered_count == NUM_QUESTIONS

    def page_complete(self, page_index: int) -> bool:
        start = page_index * QUESTIONS_PER_PAGE
        return all(a is not None for a in self.answers[start:start + QUESTIONS_PER_PAGE])

    def answer_vector(self) -> AnswerVector:
        """
        Validated answers of a complete session.

        Raises:
            InvalidAnswersError: If any question is unanswered
        """
        if not self.is_complete():
            missing = [f"Q{i + 1}" for i, a in enumerate(self.answers) if a is None]
            raise InvalidAnswersError(f"Unanswered questions: {', '.join(missing)}")
        return AnswerVector(tuple(self.answers))

    # Transitions

    def open(self) -> "SessionState":
        """Title -> start screen."""
        return replace(self, screen=Screen.START)

    def start(self) -> "SessionState":
        """Go to the first question page."""
        return replace(self, screen=Screen.PAGE_1)

    def set_answer(self, index: int, value: int) -> "SessionState":
        """
        Record the answer to question index (0-based).

        Raises:
            InvalidAnswersError: If index or value is out of range
        """
        if not 0 <= index < NUM_QUESTIONS:
            raise InvalidAnswersError(f"question index must be in [0, {NUM_QUESTIONS - 1}], got {index}")
        if isinstance(value, bool) or not isinstance(value, int) or not LIKERT_MIN <= value <= LIKERT_MAX:
            raise InvalidAnswersError(f"answer must be an integer between 1 and 5, got {value!r}")
        answers = list(self.answers)
        answers[index] = value
        return replace(self, answers=tuple(answers))

    def next_page(self) -> "SessionState":
        """
        Page 1 -> page 2.

        Raises:
            InvalidInputError: If not on page 1 or page 1 is incomplete
        """
        if self.screen != Screen.PAGE_1:
            raise InvalidInputError(f"next_page is only valid on page 1, not {self.screen.value}")
        if not self.page_complete(0):
            raise InvalidInputError("All questions on page 1 must be answered")
        return replace(self, screen=Screen.PAGE_2)

    def previous_page(self) -> "SessionState":
        """Page 2 -> page 1 -> start; answers are kept."""
        if self.screen == Screen.PAGE_2:
            return replace(self, screen=Screen.PAGE_1)
        if self.screen == Screen.PAGE_1:
            return replace(self, screen=Screen.START)
        return self

    def finish(self, result: DiagnosisResult) -> "SessionState":
        """
        Attach a diagnosis and show the alias screen.

        Raises:
            InvalidInputError: If the session is incomplete
        """
        if not self.is_complete():
            raise InvalidInputError(
                f"Cannot finish with {self.answered_count}/{NUM_QUESTIONS} answers"
            )
        return replace(self, screen=Screen.ALIAS, result=result)

    def show_result(self) -> "SessionState":
        """Alias screen -> result screen."""
        if self.result is None:
            return self
        return replace(self, screen=Screen.RESULT)

    def retry(self) -> "SessionState":
        """Discard everything and return to the title screen."""
        return SessionState()

    def randomize(self, seed: Optional[int] = None) -> "SessionState":
        """Fill every answer uniformly at random and jump to page 2."""
        rng = np.random.default_rng(seed)
        values = rng.integers(LIKERT_MIN, LIKERT_MAX + 1, size=NUM_QUESTIONS)
        return replace(
            self,
            screen=Screen.PAGE_2,
            answers=tuple(int(v) for v in values),
            result=None,
        )

    # Persistence boundary

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "screen": self.screen.value,
            "answers": list(self.answers),
            "result": self.result.to_dict() if self.result else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionState":
        """
        Create from dictionary.

        Raises:
            InvalidInputError: If the stored state is malformed
        """
        try:
            answers = tuple(data.get("answers") or _empty_answers())
            if len(answers) != NUM_QUESTIONS:
                raise InvalidInputError(f"stored answers must have {NUM_QUESTIONS} entries")
            result_data = data.get("result")
            return cls(
                screen=Screen(data.get("screen", Screen.TITLE.value)),
                answers=answers,
                result=DiagnosisResult.from_dict(result_data) if result_data else None,
            )
        except InvalidInputError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError(f"Malformed session state: {e}") from e
