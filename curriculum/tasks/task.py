"""
Task definitions, submissions and validators.

Tasks are authored statically. Whether a task is locked, available,
active or completed is derived from progress and never stored here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Sequence

from pydantic import Field

from progression.core.model import ContentModel
from curriculum.unlock.requirements import UnlockRequirement

SubmissionType = Literal["text", "image", "code", "multiple_choice", "custom"]


@dataclass(frozen=True)
class TaskSubmission:
    """
    A player's answer.

    Attributes:
        type: Submission kind, matches the task's SubmissionSpec
        text: Text answer (text)
        code: Source answer (code)
        language: Source language (code)
        choice: Picked option (multiple_choice)
        image: Image path or URL (image)
        data: Arbitrary payload (custom)
    """
    type: SubmissionType
    text: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    choice: Optional[str] = None
    image: Optional[str] = None
    data: Any = None

    @classmethod
    def of_text(cls, text: str) -> TaskSubmission:
        return cls(type="text", text=text)

    @classmethod
    def of_choice(cls, choice: str) -> TaskSubmission:
        return cls(type="multiple_choice", choice=choice)

    @property
    def as_text(self) -> Optional[str]:
        """Text content for text and code submissions."""
        if self.type == "text":
            return self.text
        if self.type == "code":
            return self.code
        return None


@dataclass(frozen=True)
class TaskSolveResult:
    """Outcome of validating a submission."""
    solved: bool
    reason: str
    details: str = ""
    score: Optional[int] = None


# Validators turn a submission into a result
TaskValidator = Callable[[TaskSubmission], TaskSolveResult]


class SubmissionSpec(ContentModel):
    """How the player submits an answer."""
    type: SubmissionType = "text"
    component: Optional[str] = None
    options: tuple[str, ...] = ()
    config: dict[str, Any] = Field(default_factory=dict)


class TaskOverview(ContentModel):
    requirements: str = ""
    goals: tuple[str, ...] = ()


class TaskDialogues(ContentModel):
    """Lines spoken when offering, awaiting and completing a task."""
    offer: tuple[str, ...] = ()
    ready: tuple[str, ...] = ()
    complete: tuple[str, ...] = ()


class Task(ContentModel):
    """
    A task definition.

    Attributes:
        id: Unique within the owning module
        name: Display name
        description: What the player has to do
        submission: How the answer is submitted
        validator: Submission -> result function
        overview: Optional requirement/goal summary
        unlock_requirement: Gate on availability (None = always available)
        dialogues: Offer/ready/complete lines
        order: Optional ordering hint for sequential suggestion
        meta: Free-form extension data (hints, examples)
    """
    id: str
    name: str
    description: str = ""
    submission: SubmissionSpec = Field(default_factory=SubmissionSpec)
    validator: Optional[TaskValidator] = None
    overview: Optional[TaskOverview] = None
    unlock_requirement: Optional[UnlockRequirement] = None
    dialogues: TaskDialogues = Field(default_factory=TaskDialogues)
    order: Optional[int] = None
    meta: dict[str, Any] = Field(default_factory=dict)

    def validate_submission(self, submission: TaskSubmission) -> TaskSolveResult:
        """Run the validator; tasks without one accept any submission."""
        if self.validator is None:
            return success("accepted", "Submission received.")
        return self.validator(submission)


def task_id_of(task: Task | str) -> str:
    """Accept a Task or a bare id."""
    return task if isinstance(task, str) else task.id


# ----------------------------------------------------------------------
# Result helpers and validator builders
# ----------------------------------------------------------------------

def success(reason: str, details: str = "", score: Optional[int] = 100) -> TaskSolveResult:
    return TaskSolveResult(solved=True, reason=reason, details=details, score=score)


def failure(reason: str, details: str = "", score: Optional[int] = None) -> TaskSolveResult:
    return TaskSolveResult(solved=False, reason=reason, details=details, score=score)


def _default_valid(_: Any, *__: Any) -> TaskSolveResult:
    return success("complete", "Well done!")


def text_length_validator(
    min_length: int,
    on_valid: Optional[Callable[[str], TaskSolveResult]] = None,
) -> TaskValidator:
    """Require a text answer of at least ``min_length`` characters."""
    def validate(submission: TaskSubmission) -> TaskSolveResult:
        text = submission.as_text
        if text is None:
            return failure("invalid_submission", "Please submit your answer as text.")
        if len(text) < min_length:
            return failure(
                "too_short",
                f"Your answer is too short. Minimum length: {min_length} characters. "
                f"Current: {len(text)} characters.",
            )
        return (on_valid or _default_valid)(text)
    return validate


def word_count_validator(
    min_words: int,
    on_valid: Optional[Callable[[str, int], TaskSolveResult]] = None,
) -> TaskValidator:
    """Require at least ``min_words`` whitespace-separated words."""
    def validate(submission: TaskSubmission) -> TaskSolveResult:
        text = submission.as_text
        if text is None:
            return failure("invalid_submission", "Please submit your answer as text.")
        count = len([w for w in re.split(r"\s+", text) if w])
        if count < min_words:
            return failure(
                "too_short",
                f"Your answer needs more words. Minimum: {min_words} words. Current: {count} words.",
            )
        return (on_valid or _default_valid)(text, count)
    return validate


def keywords_validator(
    keywords: Sequence[str],
    on_valid: Optional[Callable[[str, list[str]], TaskSolveResult]] = None,
) -> TaskValidator:
    """Require every keyword to appear (case-insensitive)."""
    def validate(submission: TaskSubmission) -> TaskSolveResult:
        text = submission.as_text
        if text is None:
            return failure("invalid_submission", "Please submit your answer as text.")
        lowered = text.lower()
        missing = [kw for kw in keywords if kw.lower() not in lowered]
        if missing:
            quoted = ", ".join(f'"{kw}"' for kw in missing)
            return failure("missing_keywords", f"Your answer is missing required elements: {quoted}")
        return (on_valid or _default_valid)(text, list(keywords))
    return validate


def choice_validator(answer: str, wrong_details: str = "Not quite. Try again!") -> TaskValidator:
    """Require a specific multiple-choice answer."""
    def validate(submission: TaskSubmission) -> TaskSolveResult:
        if submission.type != "multiple_choice":
            return failure("invalid_submission", "Please pick one of the options.")
        if submission.choice == answer:
            return success("correct", f"Correct! {answer} is right.")
        return failure("incorrect", wrong_details)
    return validate


def combine_validators(validators: Sequence[TaskValidator]) -> TaskValidator:
    """Run validators in order; the first failure wins, else the last result."""
    if not validators:
        raise ValueError("combine_validators needs at least one validator")

    def validate(submission: TaskSubmission) -> TaskSolveResult:
        result = None
        for validator in validators:
            result = validator(submission)
            if not result.solved:
                return result
        return result
    return validate
