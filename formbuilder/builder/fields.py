"""Erzeugen, Duplizieren und Sortieren von Feldern und Schritten."""

import re
import uuid
from typing import Iterable, List, Optional, Tuple

from ..schemas import CHOICE_TYPES, FieldOption, FormField, FormStep


def new_field_id() -> str:
    return uuid.uuid4().hex


def default_options() -> List[FieldOption]:
    return [
        FieldOption(label="Option 1", value="option1"),
        FieldOption(label="Option 2", value="option2"),
    ]


def slugify_option_label(label: str) -> str:
    """Leitet den Optionswert aus dem Label ab: klein, Whitespace -> ``_``.

    Keine Eindeutigkeitsprüfung, zwei gleiche Labels ergeben denselben Wert.
    """
    return re.sub(r"\s+", "_", label.lower())


def unique_option_value(label: str, existing: Iterable[str]) -> str:
    """Wie ``slugify_option_label``, hängt bei Kollision ``_2``, ``_3``... an."""
    taken = set(existing)
    base = slugify_option_label(label)
    value = base
    suffix = 2
    while value in taken:
        value = f"{base}_{suffix}"
        suffix += 1
    return value


def step_fields(fields: Iterable[FormField], step_id: int) -> List[FormField]:
    # sorted() ist stabil: gleiche order-Werte behalten die Einfügereihenfolge
    return sorted((f for f in fields if f.step_id == step_id), key=lambda f: f.order)


def next_order(fields: Iterable[FormField], step_id: int) -> int:
    orders = [f.order for f in fields if f.step_id == step_id]
    return max(orders) + 1 if orders else 1


def create_field(
    field_type: str,
    step_id: int,
    fields: Iterable[FormField],
    label: Optional[str] = None,
) -> FormField:
    """Neues Feld am Ende des Schritts, Auswahlfelder mit zwei Standardoptionen."""
    return FormField(
        id=new_field_id(),
        type=field_type,
        label=label if label is not None else f"New {field_type} field",
        placeholder="",
        help_text="",
        required=False,
        step_id=step_id,
        order=next_order(fields, step_id),
        options=default_options() if field_type in CHOICE_TYPES else None,
    )


def create_step(steps: List[FormStep]) -> FormStep:
    step_id = max((s.id for s in steps), default=0) + 1
    return FormStep(id=step_id, title=f"Step {step_id}", order=len(steps) + 1)


def duplicate_field(
    fields: List[FormField], original: FormField
) -> Tuple[List[FormField], FormField]:
    """Kopiert ``original`` direkt hinter sich selbst.

    Alle späteren Felder im selben Schritt rücken um eins nach, damit keine
    doppelten order-Werte entstehen. Gibt die neue Feldliste und die Kopie zurück.
    """
    copy = original.model_copy(
        deep=True,
        update={
            "id": new_field_id(),
            "label": f"{original.label} (Copy)",
            "order": original.order + 1,
        },
    )
    shifted = [
        f.model_copy(update={"order": f.order + 1})
        if f.step_id == original.step_id and f.order > original.order
        else f
        for f in fields
    ]
    return shifted + [copy], copy
