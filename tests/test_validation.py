import pytest

from formbuilder.core.errors import FailureReason, SubmissionIncomplete
from formbuilder.schemas import FormField
from formbuilder.validation import (
    StepTracker,
    check_field,
    ensure_submission_complete,
    is_step_complete,
    submission_failures,
)


def field(field_type="text", required=False, validation=None, options=None, **extra):
    return FormField(
        id=extra.pop("id", "f1"),
        type=field_type,
        label="Answer",
        required=required,
        validation=validation,
        options=options,
        step_id=extra.pop("step_id", 1),
        order=extra.pop("order", 1),
    )


def reason(f, value):
    failure = check_field(f, value)
    return None if failure is None else failure.reason


@pytest.mark.parametrize("value", ["", "   ", None, []])
def test_required_empty_values_fail(value):
    assert reason(field(required=True), value) is FailureReason.REQUIRED_FIELD_MISSING


def test_required_filled_value_passes():
    assert check_field(field(required=True), "x") is None


def test_optional_empty_value_skips_rules():
    f = field(validation={"minLength": 5, "pattern": "email"})
    assert check_field(f, "") is None


def test_checkbox_group_requires_a_selection():
    f = field("checkbox", required=True, options=[{"label": "A", "value": "a"}])
    assert reason(f, []) is FailureReason.REQUIRED_FIELD_MISSING
    assert check_field(f, ["a"]) is None


def test_standalone_checkbox_must_be_ticked():
    f = field("checkbox", required=True)
    assert reason(f, False) is FailureReason.REQUIRED_FIELD_MISSING
    assert check_field(f, True) is None


def test_range_zero_counts_as_answered():
    assert check_field(field("range", required=True), 0) is None


def test_length_rules_apply_to_text_types():
    rules = {"minLength": 3, "maxLength": 5}
    assert reason(field("text", validation=rules), "ab") is FailureReason.LENGTH_OUT_OF_RANGE
    assert reason(field("textarea", validation=rules), "abcdef") is FailureReason.LENGTH_OUT_OF_RANGE
    assert check_field(field("phone", validation={"minLength": 3}), "12345678") is None


def test_length_rules_ignore_other_types():
    f = field("date", validation={"minLength": 20})
    assert check_field(f, "2024-05-01") is None


@pytest.mark.parametrize(
    "pattern,good,bad",
    [
        ("email", "ada@example.org", "ada@example"),
        ("phone", "+49 30 1234567", "call me"),
        ("url", "https://example.org/form", "example.org"),
    ],
)
def test_named_patterns(pattern, good, bad):
    f = field("text", validation={"pattern": pattern})
    assert check_field(f, good) is None
    assert reason(f, bad) is FailureReason.PATTERN_MISMATCH


def test_custom_pattern():
    f = field("text", validation={"pattern": "custom", "customPattern": r"^\d{5}$"})
    assert check_field(f, "10115") is None
    assert reason(f, "1011a") is FailureReason.PATTERN_MISMATCH


def test_broken_custom_pattern_counts_as_mismatch():
    f = field("text", validation={"pattern": "custom", "customPattern": "(["})
    assert reason(f, "anything") is FailureReason.PATTERN_MISMATCH


def test_step_completeness(two_step_document):
    assert not is_step_complete(two_step_document, 1, {"name": ""})
    assert is_step_complete(two_step_document, 1, {"name": "x"})
    # Optionale Felder spielen keine Rolle
    assert is_step_complete(two_step_document, 1, {"name": "x", "nickname": ""})


def test_submission_failures_follow_step_order(two_step_document):
    failures = submission_failures(two_step_document, {})

    assert [f.field_id for f in failures] == ["name", "places"]
    assert [f.step_id for f in failures] == [1, 2]


def test_ensure_submission_complete_raises_with_failures(two_step_document):
    with pytest.raises(SubmissionIncomplete) as exc_info:
        ensure_submission_complete(two_step_document, {"name": "Ada"})

    assert [f.field_id for f in exc_info.value.failures] == ["places"]
    ensure_submission_complete(two_step_document, {"name": "Ada", "places": ["beach"]})


def test_step_tracker_matches_full_check(two_step_document):
    tracker = StepTracker(two_step_document)
    values = {}

    for field_id, value in [("name", "Ada"), ("places", []), ("name", ""), ("places", ["beach"])]:
        values[field_id] = value
        tracker.update(field_id, value)
        for step_id in (1, 2):
            assert tracker.is_complete(step_id) == is_step_complete(two_step_document, step_id, values)

    assert list(tracker.failing_fields(1)) == ["name"]
