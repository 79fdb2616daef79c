"""Ausfüllen eines Formulars durch Teilnehmer: draft -> final.

Eine ``FillSession`` hält die eingegebenen Werte und den aktuellen Schritt.
``next`` ist nur möglich, wenn der aktuelle Schritt vollständig ist; die
Abgabe prüft alle Schritte in ihrer Reihenfolge. Nach der Abgabe sind keine
Änderungen mehr möglich, eine neue Abgabe ist eine neue Response.
"""

import enum
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .core.errors import NotFound, ValidationError
from .schemas import FormBase, FormField, FormStep, ResponseRead, ResponseSubmission
from .validation import StepTracker, ensure_submission_complete, submission_failures

logger = logging.getLogger(__name__)


class ResponseState(str, enum.Enum):
    DRAFT = "draft"
    FINAL = "final"


def response_state(is_complete: bool) -> ResponseState:
    return ResponseState.FINAL if is_complete else ResponseState.DRAFT


def validate_response_data(form: FormBase, submission: ResponseSubmission) -> None:
    """Finale Antworten müssen alle Schritte bestehen, Entwürfe nicht."""
    if submission.is_complete:
        ensure_submission_complete(form, submission.data)


SubmitResponse = Callable[[ResponseSubmission], Awaitable[ResponseRead]]


class FillSession:
    def __init__(self, form: FormBase):
        self.form = form
        self._steps: List[FormStep] = sorted(form.steps, key=lambda s: s.order)
        self._fields: Dict[str, FormField] = {f.id: f for f in form.fields}
        self._values: Dict[str, Any] = {}
        self._tracker = StepTracker(form)
        # 1-basierte Position in der Schrittreihenfolge
        self.current_step = 1
        self.state = ResponseState.DRAFT
        self.response: Optional[ResponseRead] = None

    @property
    def values(self) -> Dict[str, Any]:
        return dict(self._values)

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def current_step_definition(self) -> FormStep:
        return self._steps[self.current_step - 1]

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.step_count

    @property
    def progress(self) -> float:
        """Fortschritt in Prozent, bezogen auf bereits verlassene Schritte."""
        if self.step_count <= 1:
            return 100.0
        return (self.current_step - 1) / (self.step_count - 1) * 100

    def visible_fields(self) -> List[FormField]:
        step_id = self.current_step_definition.id
        return sorted(
            (f for f in self._fields.values() if f.step_id == step_id and not f.hidden),
            key=lambda f: f.order,
        )

    def set_value(self, field_id: str, value: Any) -> None:
        if self.state is ResponseState.FINAL:
            raise ValidationError("Response already submitted")
        if field_id not in self._fields:
            raise NotFound(f"Field '{field_id}' not found")
        self._values[field_id] = value
        self._tracker.update(field_id, value)

    def is_step_complete(self, position: Optional[int] = None) -> bool:
        if position is None:
            position = self.current_step
        if not 1 <= position <= self.step_count:
            raise ValidationError(f"Step position {position} out of range")
        return self._tracker.is_complete(self._steps[position - 1].id)

    def next(self) -> bool:
        """Einen Schritt weiter, nur wenn der aktuelle vollständig ist."""
        if self.is_last_step or not self.is_step_complete():
            return False
        self.current_step += 1
        return True

    def previous(self) -> bool:
        if self.current_step <= 1:
            return False
        self.current_step -= 1
        return True

    def build_submission(self) -> ResponseSubmission:
        if self.state is ResponseState.FINAL:
            raise ValidationError("Response already submitted")
        ensure_submission_complete(self.form, self._values)
        return ResponseSubmission(data=dict(self._values), is_complete=True)

    def missing_fields(self) -> List[str]:
        return [failure.field_id for failure in submission_failures(self.form, self._values)]

    async def submit(self, submit_response: SubmitResponse) -> ResponseRead:
        """Gibt die Antworten final ab.

        Schlägt die Prüfung oder das Speichern fehl, bleiben Werte und
        aktueller Schritt unverändert.
        """
        submission = self.build_submission()
        try:
            response = await submit_response(submission)
        except Exception as e:
            logger.warning(f"Abgabe fehlgeschlagen, Eingaben bleiben erhalten: {e}")
            raise
        self.response = response
        self.state = ResponseState.FINAL
        return response
