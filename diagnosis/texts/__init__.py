"""Narrative text lookup."""

from .catalog import DEFAULT_TEXTS_PATH, SECTION_ORDER, TextBlock, TextCatalog

__all__ = ["DEFAULT_TEXTS_PATH", "SECTION_ORDER", "TextBlock", "TextCatalog"]
