"""
Narrative text lookup by phase and result pattern key.

Texts live in a YAML file shaped as

    phases:
      matching:
        label: Matching
        texts:
          MT-01: {scene: ..., why: ..., awareness: ..., recommend: [...]}
          _default: {...}

A key without text resolves to the phase's `_default` block.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

import yaml

from ..scoring.result_keys import DEFAULT_TEXT_KEY
from ..tables import Phase

logger = logging.getLogger(__name__)

SECTION_ORDER = ("scene", "why", "awareness", "recommend")

DEFAULT_TEXTS_PATH = Path(__file__).parent.parent.parent / "configs" / "texts.yaml"


@dataclass
class TextBlock:
    """Narrative sections for one (phase, key)."""
    phase: Phase
    key: str
    label: str
    sections: Dict[str, List[str]] = field(default_factory=dict)

    def paragraphs(self) -> List[str]:
        """Non-empty paragraphs in display order."""
        out = []
        for name in SECTION_ORDER:
            out.extend(p for p in self.sections.get(name, []) if p.strip())
        return out


def _normalize_sections(raw: Dict[str, Any]) -> Dict[str, List[str]]:
    sections = {}
    for name in SECTION_ORDER:
        value = raw.get(name)
        if isinstance(value, str):
            sections[name] = [value]
        elif isinstance(value, list):
            sections[name] = [v for v in value if isinstance(v, str)]
    return sections


class TextCatalog:
    """Phase -> key -> TextBlock lookup with per-phase defaults."""

    def __init__(self, data: Dict[str, Any]):
        self._labels: Dict[Phase, str] = {}
        self._texts: Dict[Phase, Dict[str, Dict[str, List[str]]]] = {}
        for phase_key, phase_data in (data.get("phases") or {}).items():
            phase = Phase.parse(phase_key)
            phase_data = phase_data or {}
            self._labels[phase] = phase_data.get("label", phase.value)
            self._texts[phase] = {
                str(key): _normalize_sections(block or {})
                for key, block in (phase_data.get("texts") or {}).items()
            }

    @classmethod
    def from_yaml(cls, path: Optional[Union[str, Path]] = None) -> "TextCatalog":
        """
        Load a catalog from YAML.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path) if path else DEFAULT_TEXTS_PATH
        if not path.exists():
            raise FileNotFoundError(f"Text catalog not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        catalog = cls(data)
        logger.info(f"Loaded text catalog from {path}")
        return catalog

    def label(self, phase) -> str:
        phase = Phase.parse(phase)
        return self._labels.get(phase, phase.value)

    def keys(self, phase) -> List[str]:
        return sorted(self._texts.get(Phase.parse(phase), {}))

    def get(self, phase, key: str) -> TextBlock:
        """
        Text for (phase, key), falling back to the phase default.

        A phase without a default yields an empty block.
        """
        phase = Phase.parse(phase)
        texts = self._texts.get(phase, {})
        if key in texts:
            return TextBlock(phase, key, self.label(phase), texts[key])

        logger.warning(f"No text for {phase.value}/{key}; using {DEFAULT_TEXT_KEY}")
        if DEFAULT_TEXT_KEY in texts:
            return TextBlock(phase, DEFAULT_TEXT_KEY, self.label(phase), texts[DEFAULT_TEXT_KEY])
        return TextBlock(phase, DEFAULT_TEXT_KEY, self.label(phase), {})
