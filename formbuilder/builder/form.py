"""Form-Aggregat: alle Builder-Operationen auf einem Formular.

Jede Operation ersetzt den Zustand durch eine neue Kopie (``model_copy``),
bestehende Feld- und Schrittobjekte werden nie in place verändert. Damit
bleiben Snapshots in der Undo-Historie unabhängig vom aktuellen Zustand.
"""

from typing import Any, Dict, List, Optional, Union

import pydantic

from ..core.errors import NotFound, ValidationError
from ..schemas import (
    CHOICE_TYPES,
    FieldOption,
    FormBase,
    FormDocument,
    FormField,
    FormStep,
    FormSettings,
)
from . import fields as field_ops
from .templates import get_template

# Identität des Feldes, per Patch nicht änderbar
_IMMUTABLE_FIELD_KEYS = {"id"}


def _key_names(model) -> Dict[str, str]:
    """camelCase- und snake_case-Schlüssel -> Attributname des Modells."""
    names = {}
    for name, info in model.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


_FIELD_KEYS = _key_names(FormField)
_SETTINGS_KEYS = _key_names(FormSettings)


class FormAggregate:
    def __init__(self, document: Optional[FormDocument] = None):
        self._document = (
            document.model_copy(deep=True) if document is not None else FormDocument()
        )

    # --- Zustand ---

    @property
    def document(self) -> FormDocument:
        return self._document

    def snapshot(self) -> FormDocument:
        return self._document.model_copy(deep=True)

    def replace(self, document: FormDocument) -> None:
        self._document = document.model_copy(deep=True)

    def _set(self, **changes: Any) -> None:
        self._document = self._document.model_copy(update=changes)

    @property
    def fields(self) -> List[FormField]:
        return list(self._document.fields)

    @property
    def steps(self) -> List[FormStep]:
        return sorted(self._document.steps, key=lambda s: s.order)

    def step_ids(self) -> List[int]:
        return [s.id for s in self.steps]

    def get_field(self, field_id: str) -> FormField:
        for f in self._document.fields:
            if f.id == field_id:
                return f
        raise NotFound(f"Field '{field_id}' not found")

    def get_step(self, step_id: int) -> FormStep:
        for s in self._document.steps:
            if s.id == step_id:
                return s
        raise NotFound(f"Step {step_id} not found")

    def fields_in_step(self, step_id: int) -> List[FormField]:
        return field_ops.step_fields(self._document.fields, step_id)

    def _replace_field(self, updated: FormField) -> FormField:
        self._set(
            fields=[updated if f.id == updated.id else f for f in self._document.fields]
        )
        return updated

    # --- Formular-Eigenschaften ---

    def set_title(self, title: str) -> None:
        self._set(title=title)

    def set_description(self, description: Optional[str]) -> None:
        self._set(description=description)

    def set_settings(self, settings: Union[FormSettings, Dict[str, Any]]) -> None:
        if isinstance(settings, dict):
            merged = self._document.settings.model_dump()
            for key, value in settings.items():
                if key not in _SETTINGS_KEYS:
                    raise ValidationError(f"Unknown setting '{key}'")
                merged[_SETTINGS_KEYS[key]] = value
            try:
                settings = FormSettings.model_validate(merged)
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid settings: {e.errors()[0]['msg']}") from e
        self._set(settings=settings)

    def set_published(self, is_published: bool) -> None:
        self._set(is_published=is_published)

    # --- Felder ---

    def add_field(self, field_type: str, step_id: int) -> FormField:
        self.get_step(step_id)
        try:
            new_field = field_ops.create_field(field_type, step_id, self._document.fields)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Unknown field type '{field_type}'") from e
        self._set(fields=[*self._document.fields, new_field])
        return new_field

    def update_field(self, field_id: str, patch: Dict[str, Any]) -> FormField:
        """Übernimmt ``patch`` (camelCase oder snake_case) in das Feld.

        Ein Typwechsel weg von select/checkbox/radio lässt die Optionen stehen.
        """
        current = self.get_field(field_id)
        changes = {}
        for key, value in patch.items():
            name = _FIELD_KEYS.get(key)
            if name is None:
                raise ValidationError(f"Unknown field attribute '{key}'")
            if name in _IMMUTABLE_FIELD_KEYS and value != getattr(current, name):
                raise ValidationError("A field's id cannot be changed")
            changes[name] = value

        if "step_id" in changes and changes["step_id"] != current.step_id:
            self.get_step(changes["step_id"])

        merged = {**current.model_dump(), **changes}
        if merged.get("type") in CHOICE_TYPES and merged.get("options") is None:
            merged["options"] = [o.model_dump() for o in field_ops.default_options()]
        try:
            updated = FormField.model_validate(merged)
        except pydantic.ValidationError as e:
            raise ValidationError(f"Invalid field data: {e.errors()[0]['msg']}") from e
        return self._replace_field(updated)

    def move_field(self, field_id: str, step_id: int) -> FormField:
        """Verschiebt ein Feld ans Ende eines anderen Schritts."""
        current = self.get_field(field_id)
        self.get_step(step_id)
        if current.step_id == step_id:
            return current
        others = [f for f in self._document.fields if f.id != field_id]
        moved = current.model_copy(
            update={"step_id": step_id, "order": field_ops.next_order(others, step_id)}
        )
        return self._replace_field(moved)

    def remove_field(self, field_id: str) -> None:
        # Unbekannte IDs sind kein Fehler
        remaining = [f for f in self._document.fields if f.id != field_id]
        if len(remaining) != len(self._document.fields):
            self._set(fields=remaining)

    def duplicate_field(self, field_id: str) -> FormField:
        original = self.get_field(field_id)
        new_fields, copy = field_ops.duplicate_field(self._document.fields, original)
        self._set(fields=new_fields)
        return copy

    def reorder_fields(self, step_id: int, from_index: int, to_index: int) -> None:
        """Tauscht die order-Werte der Felder an zwei Positionen eines Schritts.

        Positionen beziehen sich auf die nach order sortierten Felder des
        Schritts. Ungültige Positionen ändern nichts.
        """
        self.get_step(step_id)
        ordered = self.fields_in_step(step_id)
        if not (0 <= from_index < len(ordered) and 0 <= to_index < len(ordered)):
            return
        if from_index == to_index:
            return
        dragged, hovered = ordered[from_index], ordered[to_index]
        swapped = {dragged.id: hovered.order, hovered.id: dragged.order}
        self._set(
            fields=[
                f.model_copy(update={"order": swapped[f.id]}) if f.id in swapped else f
                for f in self._document.fields
            ]
        )

    # --- Schritte ---

    def add_step(self) -> FormStep:
        step = field_ops.create_step(self._document.steps)
        self._set(steps=[*self._document.steps, step])
        return step

    # --- Vorlagen ---

    def load_template(self, template: Union[str, FormBase]) -> None:
        """Ersetzt Inhalt und Einstellungen, Identität und Zeitstempel bleiben."""
        if isinstance(template, str):
            template = get_template(template)
        else:
            template = template.model_copy(deep=True)
        self._set(
            title=template.title,
            description=template.description,
            fields=template.fields,
            steps=template.steps,
            settings=template.settings,
        )

    # --- Optionen ---

    def _options_of(self, field_id: str) -> List[FieldOption]:
        return list(self.get_field(field_id).options or [])

    def _check_option_index(self, options: List[FieldOption], index: int) -> None:
        if not 0 <= index < len(options):
            raise ValidationError(f"Option index {index} out of range")

    def add_option(self, field_id: str) -> FieldOption:
        options = self._options_of(field_id)
        n = len(options) + 1
        option = FieldOption(label=f"Option {n}", value=f"option{n}")
        self._replace_field(
            self.get_field(field_id).model_copy(update={"options": [*options, option]})
        )
        return option

    def update_option(
        self, field_id: str, index: int, label: str, ensure_unique: bool = False
    ) -> FieldOption:
        """Setzt das Label, der Wert wird daraus abgeleitet.

        Standardmäßig ohne Eindeutigkeitsprüfung; ``ensure_unique=True`` hängt
        bei Kollisionen ein Suffix an.
        """
        options = self._options_of(field_id)
        self._check_option_index(options, index)
        if ensure_unique:
            others = [o.value for i, o in enumerate(options) if i != index]
            value = field_ops.unique_option_value(label, others)
        else:
            value = field_ops.slugify_option_label(label)
        option = FieldOption(label=label, value=value)
        options[index] = option
        self._replace_field(
            self.get_field(field_id).model_copy(update={"options": options})
        )
        return option

    def remove_option(self, field_id: str, index: int) -> None:
        options = self._options_of(field_id)
        self._check_option_index(options, index)
        del options[index]
        self._replace_field(
            self.get_field(field_id).model_copy(update={"options": options})
        )
