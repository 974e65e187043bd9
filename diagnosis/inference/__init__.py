"""
Inference module for the diagnosis.

This module provides the orchestration that turns a completed
questionnaire into a merged DiagnosisResult.
"""

from .schema import AnswerVector, DiagnosisResult, Question, QUESTIONS
from .evaluate import DiagnosisEvaluator

__all__ = [
    "AnswerVector",
    "DiagnosisResult",
    "Question",
    "QUESTIONS",
    "DiagnosisEvaluator",
]
