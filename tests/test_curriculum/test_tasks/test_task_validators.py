import pytest

from curriculum.tasks.task import (
    Task,
    TaskSubmission,
    choice_validator,
    combine_validators,
    keywords_validator,
    success,
    text_length_validator,
    word_count_validator,
)


def test_text_length_validator():
    validate = text_length_validator(10)

    short = validate(TaskSubmission.of_text("tiny"))
    assert not short.solved
    assert short.reason == "too_short"
    assert "Current: 4 characters" in short.details

    ok = validate(TaskSubmission.of_text("long enough answer"))
    assert ok.solved
    assert ok.reason == "complete"
    assert ok.score == 100

    assert validate(TaskSubmission.of_choice("a")).reason == "invalid_submission"


def test_text_length_custom_result():
    validate = text_length_validator(1, on_valid=lambda text: success("great", text.upper()))
    result = validate(TaskSubmission.of_text("hi"))
    assert result.reason == "great"
    assert result.details == "HI"


def test_code_submissions_count_as_text():
    submission = TaskSubmission(type="code", code="print('hi')", language="python")
    assert submission.as_text == "print('hi')"
    assert text_length_validator(5)(submission).solved


def test_word_count_validator():
    validate = word_count_validator(3)
    assert not validate(TaskSubmission.of_text("two   words")).solved
    assert validate(TaskSubmission.of_text("now three words")).solved


def test_keywords_validator_is_case_insensitive():
    validate = keywords_validator(["Bark", "leaves"])

    missing = validate(TaskSubmission.of_text("The bark is rough"))
    assert missing.reason == "missing_keywords"
    assert '"leaves"' in missing.details
    assert '"Bark"' not in missing.details

    assert validate(TaskSubmission.of_text("BARK and Leaves")).solved


def test_choice_validator():
    validate = choice_validator("blue")

    assert validate(TaskSubmission.of_choice("blue")).reason == "correct"
    assert validate(TaskSubmission.of_choice("red")).reason == "incorrect"
    assert validate(TaskSubmission.of_text("blue")).reason == "invalid_submission"


def test_combine_validators_first_failure_wins():
    validate = combine_validators([text_length_validator(5), keywords_validator(["bark"])])

    assert validate(TaskSubmission.of_text("ab")).reason == "too_short"
    assert validate(TaskSubmission.of_text("smooth trunk")).reason == "missing_keywords"
    assert validate(TaskSubmission.of_text("rough bark")).solved


def test_combine_validators_requires_one():
    with pytest.raises(ValueError):
        combine_validators([])


def test_task_without_validator_accepts_anything():
    task = Task(id="free", name="Free")
    result = task.validate_submission(TaskSubmission(type="image", image="drawing.png"))
    assert result.solved
    assert result.reason == "accepted"


def test_task_uses_its_validator(write_intro):
    assert not write_intro.validate_submission(TaskSubmission.of_text("hey")).solved
    assert write_intro.validate_submission(TaskSubmission.of_text("hello there")).solved
