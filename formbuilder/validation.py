"""Validierung von Antwortwerten gegen Felddefinitionen.

- ``check_field``: ein Feld, ein Wert -> ``None`` oder ``FieldFailure``
- ``is_step_complete``: alle Pflichtfelder eines Schritts bestehen ihre Prüfung
- ``StepTracker``: dieselbe Entscheidung inkrementell, pro geändertem Feld
"""

import logging
import re
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Set

from .core.errors import FailureReason, FieldFailure, SubmissionIncomplete
from .schemas import TEXT_TYPES, FieldValidation, FormBase, FormField

logger = logging.getLogger(__name__)

PATTERNS: Dict[str, Pattern] = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone": re.compile(r"^\+?[0-9\s\-().]{7,20}$"),
    "url": re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE),
}


@lru_cache(maxsize=256)
def _compile_custom(pattern: str) -> Pattern:
    return re.compile(pattern)


def resolve_pattern(rules: Optional[FieldValidation]) -> Optional[Pattern]:
    """Symbolischen Pattern-Tag in einen regulären Ausdruck auflösen."""
    if rules is None or rules.pattern is None:
        return None
    if rules.pattern == "custom":
        if not rules.custom_pattern:
            return None
        return _compile_custom(rules.custom_pattern)
    return PATTERNS[rules.pattern]


def is_empty(field: FormField, value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    if isinstance(value, bool):
        # Einzel-Checkbox: nur angehakt zählt als ausgefüllt
        return field.type == "checkbox" and not value
    return False


def check_field(field: FormField, value: Any) -> Optional[FieldFailure]:
    if is_empty(field, value):
        if field.required:
            return FieldFailure(
                field_id=field.id,
                reason=FailureReason.REQUIRED_FIELD_MISSING,
                message=f"'{field.label}' is required",
                step_id=field.step_id,
            )
        return None

    rules = field.validation
    if rules is None or not isinstance(value, str):
        return None

    if field.type in TEXT_TYPES:
        length = len(value)
        if (rules.min_length is not None and length < rules.min_length) or (
            rules.max_length is not None and length > rules.max_length
        ):
            return FieldFailure(
                field_id=field.id,
                reason=FailureReason.LENGTH_OUT_OF_RANGE,
                message=f"'{field.label}' must be between "
                f"{rules.min_length or 0} and {rules.max_length or 'any'} characters",
                step_id=field.step_id,
            )

    try:
        pattern = resolve_pattern(rules)
        mismatch = pattern is not None and pattern.search(value) is None
    except re.error as e:
        logger.warning(f"Ungültiges Custom-Pattern in Feld {field.id}: {e}")
        mismatch = True
    if mismatch:
        return FieldFailure(
            field_id=field.id,
            reason=FailureReason.PATTERN_MISMATCH,
            message=f"'{field.label}' does not match the expected {rules.pattern} format",
            step_id=field.step_id,
        )
    return None


def step_failures(
    form: FormBase, step_id: int, values: Mapping[str, Any]
) -> List[FieldFailure]:
    """Fehlschläge der Pflichtfelder eines Schritts, in Feldreihenfolge."""
    failures = []
    for f in sorted(form.fields, key=lambda f: f.order):
        if f.step_id != step_id or not f.required:
            continue
        failure = check_field(f, values.get(f.id))
        if failure is not None:
            failures.append(failure)
    return failures


def is_step_complete(form: FormBase, step_id: int, values: Mapping[str, Any]) -> bool:
    return not step_failures(form, step_id, values)


def submission_failures(form: FormBase, values: Mapping[str, Any]) -> List[FieldFailure]:
    """Alle Schritte in ihrer Reihenfolge prüfen."""
    failures = []
    for step in sorted(form.steps, key=lambda s: s.order):
        failures.extend(step_failures(form, step.id, values))
    return failures


def ensure_submission_complete(form: FormBase, values: Mapping[str, Any]) -> None:
    failures = submission_failures(form, values)
    if failures:
        raise SubmissionIncomplete(failures=failures)


class StepTracker:
    """Hält pro Schritt die Menge der durchgefallenen Pflichtfelder.

    ``update`` prüft nur das geänderte Feld neu, ``is_complete`` ist dann ein
    Blick in die Menge des Schritts.
    """

    def __init__(self, form: FormBase, values: Optional[Mapping[str, Any]] = None):
        values = values or {}
        self._required: Dict[str, FormField] = {
            f.id: f for f in form.fields if f.required
        }
        self._failing: Dict[int, Set[str]] = {step.id: set() for step in form.steps}
        for f in self._required.values():
            if check_field(f, values.get(f.id)) is not None:
                self._failing.setdefault(f.step_id, set()).add(f.id)

    def update(self, field_id: str, value: Any) -> None:
        f = self._required.get(field_id)
        if f is None:
            return
        failing = self._failing.setdefault(f.step_id, set())
        if check_field(f, value) is None:
            failing.discard(field_id)
        else:
            failing.add(field_id)

    def is_complete(self, step_id: int) -> bool:
        return not self._failing.get(step_id)

    def failing_fields(self, step_id: int) -> Iterable[str]:
        return sorted(self._failing.get(step_id, ()))
