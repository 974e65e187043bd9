"""
Phase score bands.

Each phase gets a coarse 1..5 band from a signed raw score:

    raw_p = sum_i v_i * (sum of tag weights of row i) * phase_w[i, p]

with v_i = 3 - answer_i. Bands: raw <= -10 -> 1, raw <= -4 -> 2,
raw < 4 -> 3, raw < 10 -> 4, otherwise 5.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

import numpy as np

from ..aggregation import AnswersLike, as_answer_vector
from ..aggregation.answers import NEUTRAL_ANSWER
from ..tables import PHASES, Phase, phase_weight_matrix, tag_weight_sums

logger = logging.getLogger(__name__)


@dataclass
class PhaseBandConfig:
    """
    Band cut points and labels.

    Attributes:
        thresholds: [very_weak_max, weak_max, strong_min, very_strong_min];
            the first two are inclusive upper bounds, the last two
            inclusive lower bounds
        labels: Label for bands 1..5
    """
    thresholds: List[float] = field(default_factory=lambda: [-10.0, -4.0, 4.0, 10.0])
    labels: List[str] = field(
        default_factory=lambda: ["very weak", "weak", "average", "strong", "very strong"]
    )

    def validate(self) -> None:
        if len(self.thresholds) != 4:
            raise ValueError(f"thresholds needs 4 values, got {len(self.thresholds)}")
        if list(self.thresholds) != sorted(self.thresholds):
            raise ValueError(f"thresholds must be ascending: {self.thresholds}")
        if len(self.labels) != 5:
            raise ValueError(f"labels needs 5 values, got {len(self.labels)}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "PhaseBandConfig":
        """Create from main config dictionary."""
        section = config.get("phase_bands", {})
        defaults = cls()
        return cls(
            thresholds=[float(t) for t in section.get("thresholds", defaults.thresholds)],
            labels=list(section.get("labels", defaults.labels)),
        )


@dataclass
class PhaseBand:
    """Band for one phase."""
    raw: float
    band: int
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"raw": self.raw, "band": self.band, "label": self.label}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhaseBand":
        return cls(raw=float(data["raw"]), band=int(data["band"]), label=data["label"])


def band_from_raw(raw: float, config: Optional[PhaseBandConfig] = None) -> int:
    config = config or PhaseBandConfig()
    very_weak, weak, strong, very_strong = config.thresholds
    if raw <= very_weak:
        return 1
    if raw <= weak:
        return 2
    if raw < strong:
        return 3
    if raw < very_strong:
        return 4
    return 5


def phase_raw_scores(answers: AnswersLike) -> Dict[Phase, float]:
    """Signed raw score per phase."""
    answer_vector = as_answer_vector(answers)
    v = NEUTRAL_ANSWER - np.array(answer_vector.values, dtype=float)
    raws = (v * tag_weight_sums()) @ phase_weight_matrix()
    return {phase: float(raw) for phase, raw in zip(PHASES, raws)}


def compute_phase_bands(
    answers: AnswersLike,
    config: Optional[PhaseBandConfig] = None
) -> Dict[Phase, PhaseBand]:
    """
    Compute the score band of every phase.

    Raises:
        InvalidAnswersError: If answers are malformed
    """
    config = config or PhaseBandConfig()
    bands = {}
    for phase, raw in phase_raw_scores(answers).items():
        band = band_from_raw(raw, config)
        bands[phase] = PhaseBand(raw=raw, band=band, label=config.labels[band - 1])
    logger.debug("Phase bands: " + ", ".join(f"{p.value}={b.band}" for p, b in bands.items()))
    return bands
