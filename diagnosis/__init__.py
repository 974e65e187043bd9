"""
Relationship-Phase Diagnosis - Scoring Core

This package maps 20 Likert-scale answers (1-5) to a deterministic
diagnosis result: a rarity tier, a narrative alias, per-phase result
pattern keys and per-phase score bands.

Key Design Decisions:
- One canonical contribution table shared by every engine
- Every engine is a pure function of the answer vector
- Engines reject malformed input; the evaluator degrades to safe defaults
- No randomness, clock or external entropy in any scoring path
"""

__version__ = "1.0.0"
