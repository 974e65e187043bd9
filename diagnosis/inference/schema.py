"""
Input and output schema for a diagnosis run.

The questionnaire is 20 statements answered on a 1-5 Likert scale:
1 = Strongly Agree
2 = Agree
3 = Neutral
4 = Disagree
5 = Strongly Disagree

Answers are scored as v = 3 - answer, so agreement pushes a question's
tags in their own direction.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from ..aggregation import AnswerVector, InvalidAnswersError, InvalidInputError
from ..scoring.alias import AliasResult
from ..scoring.phase_bands import PhaseBand
from ..tables import PHASES, Phase, PhaseTrend, RarityTier, TABLE_VERSION

__all__ = [
    "AnswerVector",
    "InvalidAnswersError",
    "InvalidInputError",
    "AliasResult",
    "PhaseBand",
    "Phase",
    "PhaseTrend",
    "RarityTier",
    "Question",
    "QUESTIONS",
    "DiagnosisResult",
]


@dataclass(frozen=True)
class Question:
    """
    One questionnaire statement.

    Attributes:
        qid: "Q1".."Q20"
        phase: Phase the statement is presented under
        text: Statement shown to the user
    """
    qid: str
    phase: Phase
    text: str


QUESTIONS: List[Question] = [
    Question("Q1", Phase.MATCHING, "I don't force the mood when meeting someone new."),
    Question("Q2", Phase.MATCHING, "The more I like someone, the more carefully I approach them."),
    Question("Q3", Phase.MATCHING, "I prefer calm conversation over lots of talking."),
    Question("Q4", Phase.MATCHING, "I tend to give the other person the floor."),
    Question("Q5", Phase.MATCHING, "I usually observe someone before I fall for them."),
    Question("Q6", Phase.FIRST_MEET, "I notice quickly when the other person is tired."),
    Question("Q7", Phase.FIRST_MEET, "I take silence as something to respect, not to worry about."),
    Question("Q8", Phase.DATE, "I judge trust by actions rather than feelings."),
    Question("Q9", Phase.DATE, "Sudden closeness makes me uncomfortable."),
    Question("Q10", Phase.DATE, "I can keep up being considerate for a long time."),
    Question("Q11", Phase.RELATIONSHIP, "My affection tends to stay even when they differ from my ideal."),
    Question("Q12", Phase.RELATIONSHIP, "It takes me a long time to show my real feelings."),
    Question("Q13", Phase.RELATIONSHIP, "I stay kind even when I'm treated carelessly."),
    Question("Q14", Phase.MARRIAGE, "When someone pushes themselves for me, I pull back."),
    Question("Q15", Phase.MARRIAGE, "Even when I'm in love, the anxiety rarely goes away."),
    Question("Q16", Phase.MARRIAGE, "The longer happiness lasts, the more I fear it breaking."),
    Question("Q17", Phase.RELATIONSHIP, "My kindness is closer to a habit than an act."),
    Question("Q18", Phase.RELATIONSHIP, "I take keeping promises for granted."),
    Question("Q19", Phase.MARRIAGE, "Once I choose someone, I can cherish them for a long time."),
    Question("Q20", Phase.MARRIAGE, "I feel safer when care shows up in actions."),
]


@dataclass
class DiagnosisResult:
    """
    Complete diagnosis for one answer vector.

    Attributes:
        answers: Validated answer vector
        save_code: Short stable code for the answers
        rarity: Overall rarity tier
        alias: Selected alias and asset hints
        result_keys: Pattern key per phase
        phase_bands: Score band per phase
        phase_trend: Trend used for the phase alias pool
        table_version: Contribution table the result was scored with
        breakdown: Optional rarity breakdown (debug only)
    """
    answers: AnswerVector
    save_code: str
    rarity: RarityTier
    alias: AliasResult
    result_keys: Dict[Phase, str]
    phase_bands: Dict[Phase, PhaseBand]
    phase_trend: PhaseTrend = PhaseTrend.FLAT
    table_version: str = TABLE_VERSION
    breakdown: Optional[Dict[str, Any]] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            "answers": self.answers.to_list(),
            "save_code": self.save_code,
            "rarity": self.rarity.value,
            "alias": self.alias.to_dict(),
            "result_keys": {p.value: k for p, k in self.result_keys.items()},
            "phase_bands": {p.value: b.to_dict() for p, b in self.phase_bands.items()},
            "phase_trend": self.phase_trend.value,
            "table_version": self.table_version,
        }
        if self.breakdown:
            result["breakdown"] = self.breakdown
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiagnosisResult":
        """Create from dictionary."""
        return cls(
            answers=AnswerVector(tuple(data["answers"])),
            save_code=data["save_code"],
            rarity=RarityTier.parse(data["rarity"]),
            alias=AliasResult.from_dict(data["alias"]),
            result_keys={Phase.parse(p): k for p, k in data["result_keys"].items()},
            phase_bands={
                Phase.parse(p): PhaseBand.from_dict(b) for p, b in data["phase_bands"].items()
            },
            phase_trend=PhaseTrend(data.get("phase_trend", PhaseTrend.FLAT.value)),
            table_version=data.get("table_version", TABLE_VERSION),
            breakdown=data.get("breakdown"),
        )

    def ordered_result_keys(self) -> List[str]:
        """Result keys in phase order."""
        return [self.result_keys[p] for p in PHASES if p in self.result_keys]
