from journey.exams.definitions import (
    ExamDefinition,
    ExamDefinitionStore,
    ExamQuestion,
    normalize_correct_index,
)
from journey.exams.engine import ExamEngine, ExamScore, ExamStatus, score_answers

__all__ = [
    "ExamDefinition",
    "ExamDefinitionStore",
    "ExamQuestion",
    "normalize_correct_index",
    "ExamEngine",
    "ExamScore",
    "ExamStatus",
    "score_answers",
]
