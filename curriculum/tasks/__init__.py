"""
Tasks module - definitions, validators, availability and submission.
"""

from curriculum.tasks.task import (
    Task,
    TaskSubmission,
    TaskSolveResult,
    TaskValidator,
    SubmissionSpec,
    TaskOverview,
    TaskDialogues,
    success,
    failure,
    text_length_validator,
    word_count_validator,
    keywords_validator,
    choice_validator,
    combine_validators,
)
from curriculum.tasks.availability import TaskStatus, TaskClassification, TaskAvailabilityService

__all__ = [
    "Task",
    "TaskSubmission",
    "TaskSolveResult",
    "TaskValidator",
    "SubmissionSpec",
    "TaskOverview",
    "TaskDialogues",
    "success",
    "failure",
    "text_length_validator",
    "word_count_validator",
    "keywords_validator",
    "choice_validator",
    "combine_validators",
    "TaskStatus",
    "TaskClassification",
    "TaskAvailabilityService",
]
