import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

FieldType = Literal[
    "text",
    "email",
    "textarea",
    "select",
    "checkbox",
    "radio",
    "date",
    "phone",
    "file",
    "range",
]
PatternKind = Literal["email", "phone", "url", "custom"]

# Feldtypen mit Antwortoptionen
CHOICE_TYPES = frozenset({"select", "checkbox", "radio"})
# Feldtypen, für die minLength/maxLength gelten
TEXT_TYPES = frozenset({"text", "email", "phone", "textarea"})

# Antwortwert je Feld: Text, Mehrfachauswahl, Einzel-Checkbox oder Zahl (range)
AnswerValue = Union[str, List[str], bool, int, float, None]


class CamelModel(BaseModel):
    """JSON mit camelCase-Schlüsseln, Python-seitig snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# --- Felder & Schritte ---


class FieldOption(CamelModel):
    label: str
    value: str


class FieldValidation(CamelModel):
    min_length: Optional[int] = Field(default=None, ge=0)
    max_length: Optional[int] = Field(default=None, ge=0)
    pattern: Optional[PatternKind] = None
    # Nur für pattern == "custom": der eigentliche reguläre Ausdruck
    custom_pattern: Optional[str] = None


class FormField(CamelModel):
    id: str = Field(..., min_length=1)
    type: FieldType
    label: str
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    required: bool = False
    validation: Optional[FieldValidation] = None
    options: Optional[List[FieldOption]] = None
    step_id: int
    order: int
    css_class: Optional[str] = None
    hidden: bool = False
    readonly: bool = False


class FormStep(CamelModel):
    id: int = Field(..., ge=1)
    title: str
    description: Optional[str] = None
    order: int


class FormSettings(CamelModel):
    allow_anonymous: bool = True
    require_auth: bool = False
    email_notifications: bool = True
    redirect_url: Optional[str] = None
    submit_message: Optional[str] = None


def default_steps() -> List[FormStep]:
    return [FormStep(id=1, title="Step 1", order=1)]


def check_structure(steps: List[FormStep], fields: List[FormField]) -> List[str]:
    """Prüft die strukturellen Invarianten eines Formulars.

    Gibt eine Liste von Problembeschreibungen zurück (leer == gültig).
    """
    problems = []
    if not steps:
        problems.append("a form needs at least one step")

    step_ids = [step.id for step in steps]
    if len(set(step_ids)) != len(step_ids):
        problems.append("step ids must be unique")

    field_ids = [f.id for f in fields]
    if len(set(field_ids)) != len(field_ids):
        problems.append("field ids must be unique")

    known_steps = set(step_ids)
    for f in fields:
        if f.step_id not in known_steps:
            problems.append(f"field '{f.id}' references unknown step {f.step_id}")
        # Einzel-Checkboxen (bool) kommen ohne Optionen aus
        if f.type in ("select", "radio") and f.options is None:
            problems.append(f"field '{f.id}' of type {f.type} needs options")
        rules = f.validation
        if rules is None:
            continue
        if (
            rules.min_length is not None
            and rules.max_length is not None
            and rules.min_length > rules.max_length
        ):
            problems.append(f"field '{f.id}' has minLength greater than maxLength")
        if rules.pattern == "custom":
            if not rules.custom_pattern:
                problems.append(f"field '{f.id}' uses a custom pattern without a regex")
            else:
                try:
                    re.compile(rules.custom_pattern)
                except re.error:
                    problems.append(f"field '{f.id}' has an invalid custom regex")
    return problems


# --- Formulare ---


class FormBase(CamelModel):
    title: str
    description: Optional[str] = None
    fields: List[FormField] = Field(default_factory=list)
    steps: List[FormStep] = Field(default_factory=default_steps)
    settings: FormSettings = Field(default_factory=FormSettings)
    is_published: bool = False


class FormCreate(FormBase):
    @model_validator(mode="after")
    def check_form_structure(self):
        problems = check_structure(self.steps, self.fields)
        if problems:
            raise ValueError("; ".join(problems))
        return self


class FormUpdate(CamelModel):
    """Teilaktualisierung: nur gesetzte Felder werden übernommen."""

    title: Optional[str] = None
    description: Optional[str] = None
    fields: Optional[List[FormField]] = None
    steps: Optional[List[FormStep]] = None
    settings: Optional[FormSettings] = None
    is_published: Optional[bool] = None


class FormDocument(FormBase):
    """Formular im Builder, mit oder ohne gespeicherte Identität."""

    title: str = "Untitled Form"
    description: Optional[str] = ""
    id: Optional[int] = None
    public_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def content(self) -> FormBase:
        """Nur der Inhalt, ohne Identität und Zeitstempel."""
        return FormBase.model_validate(
            self.model_dump(exclude={"id", "public_id", "created_at", "updated_at"})
        )


class FormRead(FormDocument):
    id: int
    public_id: str
    created_at: datetime
    updated_at: datetime


# --- Antworten ---


class ResponseSubmission(CamelModel):
    """Body von POST /api/forms/{id}/responses."""

    data: Dict[str, AnswerValue]
    is_complete: bool = False


class PublicSubmission(CamelModel):
    """Body von POST /api/public/{public_id}/submit, immer eine finale Abgabe."""

    data: Dict[str, AnswerValue]
    is_complete: bool = True


class ResponseCreate(CamelModel):
    form_id: int
    data: Dict[str, AnswerValue]
    is_complete: bool = False


class ResponseRead(CamelModel):
    id: int
    form_id: int
    data: Dict[str, Any]
    is_complete: bool
    created_at: datetime


class SubmitResult(CamelModel):
    success: bool = True
    response: ResponseRead


class SuccessResponse(BaseModel):
    success: bool = True


class TemplateSummary(CamelModel):
    key: str
    title: str
    description: Optional[str] = None
    step_count: int
    field_count: int
