"""Builder-Sitzung: Aggregat, Undo/Redo, Auswahl und Autosave.

Auswahl (``selected_field_id``) und aktueller Schritt sind reiner
Sitzungszustand und landen nie im gespeicherten Formular.
"""

import logging
from typing import Any, Dict, Optional, Union

from ..core.errors import FormBuilderError
from ..crud.crud_form import SaveForm
from ..schemas import FieldOption, FormBase, FormDocument, FormField, FormRead, FormStep
from .autosave import AutoSave
from .form import FormAggregate
from .history import History

logger = logging.getLogger(__name__)

_IDENTITY_KEYS = ("id", "public_id", "created_at", "updated_at")


class BuilderSession:
    def __init__(
        self,
        document: Optional[FormDocument] = None,
        save_form: Optional[SaveForm] = None,
        autosave_delay: Optional[float] = None,
        history_limit: Optional[int] = None,
    ):
        self.form = FormAggregate(document)
        self.history: History[FormDocument] = History(
            self.form.snapshot(), limit=history_limit
        )
        self._save_form = save_form
        self.autosave: Optional[AutoSave] = None
        if save_form is not None:
            self.autosave = AutoSave(save_form, autosave_delay, on_saved=self._persist)
            if self.form.document.id is not None:
                self.autosave.mark_saved(self.form.document)
        self.selected_field_id: Optional[str] = None
        self.current_step: Optional[int] = self._first_step_id()

    @property
    def document(self) -> FormDocument:
        return self.form.document

    @property
    def selected_field(self) -> Optional[FormField]:
        if self.selected_field_id is None:
            return None
        return self.form.get_field(self.selected_field_id)

    def _first_step_id(self) -> Optional[int]:
        steps = self.form.steps
        return steps[0].id if steps else None

    def _commit(self) -> None:
        self.history.set(self.form.snapshot())
        self._schedule_autosave()

    def _schedule_autosave(self) -> None:
        if self.autosave is not None:
            try:
                self.autosave.schedule(self.form.document)
            except RuntimeError:
                # Kein laufender Event-Loop, z.B. in synchronem Code
                logger.debug("Autosave übersprungen: kein laufender Event-Loop.")

    def _cleanup_session_state(self) -> None:
        field_ids = {f.id for f in self.form.fields}
        if self.selected_field_id not in field_ids:
            self.selected_field_id = None
        if self.current_step not in self.form.step_ids():
            self.current_step = self._first_step_id()

    # --- Auswahl ---

    def select_field(self, field_id: Optional[str]) -> None:
        if field_id is not None:
            self.form.get_field(field_id)
        self.selected_field_id = field_id

    def set_current_step(self, step_id: int) -> None:
        self.form.get_step(step_id)
        self.current_step = step_id

    # --- Bearbeitung ---

    def set_title(self, title: str) -> None:
        self.form.set_title(title)
        self._commit()

    def set_description(self, description: Optional[str]) -> None:
        self.form.set_description(description)
        self._commit()

    def set_settings(self, settings: Dict[str, Any]) -> None:
        self.form.set_settings(settings)
        self._commit()

    def set_published(self, is_published: bool) -> None:
        self.form.set_published(is_published)
        self._commit()

    def add_field(self, field_type: str, step_id: Optional[int] = None) -> FormField:
        """Legt ein Feld im aktuellen (oder angegebenen) Schritt an und wählt es aus."""
        target = self.current_step if step_id is None else step_id
        new_field = self.form.add_field(field_type, target)
        self.selected_field_id = new_field.id
        self._commit()
        return new_field

    def update_field(self, field_id: str, patch: Dict[str, Any]) -> FormField:
        updated = self.form.update_field(field_id, patch)
        self._commit()
        return updated

    def move_field(self, field_id: str, step_id: int) -> FormField:
        moved = self.form.move_field(field_id, step_id)
        self._commit()
        return moved

    def remove_field(self, field_id: str) -> None:
        self.form.remove_field(field_id)
        if self.selected_field_id == field_id:
            self.selected_field_id = None
        self._commit()

    def duplicate_field(self, field_id: str) -> FormField:
        copy = self.form.duplicate_field(field_id)
        self._commit()
        return copy

    def reorder_fields(
        self, from_index: int, to_index: int, step_id: Optional[int] = None
    ) -> None:
        target = self.current_step if step_id is None else step_id
        self.form.reorder_fields(target, from_index, to_index)
        self._commit()

    def add_step(self) -> FormStep:
        step = self.form.add_step()
        self._commit()
        return step

    def load_template(self, template: Union[str, FormBase]) -> None:
        self.form.load_template(template)
        self.selected_field_id = None
        self.current_step = self._first_step_id()
        self._commit()

    # Optionen beziehen sich ohne field_id auf das ausgewählte Feld

    def _option_target(self, field_id: Optional[str]) -> str:
        target = field_id or self.selected_field_id
        if target is None:
            raise FormBuilderError("No field selected")
        return target

    def add_option(self, field_id: Optional[str] = None) -> FieldOption:
        option = self.form.add_option(self._option_target(field_id))
        self._commit()
        return option

    def update_option(
        self,
        index: int,
        label: str,
        field_id: Optional[str] = None,
        ensure_unique: bool = False,
    ) -> FieldOption:
        option = self.form.update_option(
            self._option_target(field_id), index, label, ensure_unique=ensure_unique
        )
        self._commit()
        return option

    def remove_option(self, index: int, field_id: Optional[str] = None) -> None:
        self.form.remove_option(self._option_target(field_id), index)
        self._commit()

    # --- Undo/Redo ---

    def _restore(self, snapshot: FormDocument) -> None:
        # Gespeicherte Identität überlebt Undo/Redo
        identity = {key: getattr(self.form.document, key) for key in _IDENTITY_KEYS}
        self.form.replace(snapshot.model_copy(update=identity))
        self._cleanup_session_state()
        self._schedule_autosave()

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    # --- Speichern ---

    def _persist(self, saved: FormRead) -> None:
        """Übernimmt die vom Speicher vergebene Identität ins Formular."""
        self.form.replace(
            self.form.document.model_copy(
                update={key: getattr(saved, key) for key in _IDENTITY_KEYS}
            )
        )

    async def save(self) -> bool:
        """Manuelles Speichern. Fehler werden gemeldet, das Formular bleibt unverändert."""
        if self._save_form is None:
            logger.warning("Speichern nicht möglich: kein Speicherziel konfiguriert.")
            return False
        if self.autosave is not None:
            self.autosave.cancel()
        document = self.form.document
        try:
            saved = await self._save_form(document)
        except FormBuilderError as e:
            logger.warning(f"Speichern fehlgeschlagen: {e}")
            return False
        self._persist(saved)
        if self.autosave is not None:
            self.autosave.mark_saved(
                document.model_copy(
                    update={key: getattr(saved, key) for key in _IDENTITY_KEYS}
                )
            )
        logger.info(f"Formular {saved.id} gespeichert (public_id={saved.public_id}).")
        return True

    async def close(self) -> None:
        if self.autosave is not None:
            await self.autosave.close()
