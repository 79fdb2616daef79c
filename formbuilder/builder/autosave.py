"""Debounce-Autosave für Builder-Sitzungen.

Jede Änderung bricht einen laufenden Timer ab und startet ihn neu. Gespeichert
wird nur, wenn das Formular schon eine ID hat und sich seit dem letzten
Speichern geändert hat.
"""

import asyncio
import json
import logging
from typing import Optional

from ..core.config import AUTOSAVE_DELAY_SECONDS
from ..core.errors import FormBuilderError
from ..crud.crud_form import SaveForm
from ..schemas import FormDocument, FormRead

logger = logging.getLogger(__name__)

_VOLATILE_KEYS = {"created_at", "updated_at"}


def fingerprint(document: FormDocument) -> str:
    return json.dumps(
        document.model_dump(mode="json", exclude=_VOLATILE_KEYS), sort_keys=True
    )


class AutoSave:
    def __init__(self, save: SaveForm, delay: Optional[float] = None, on_saved=None):
        self._save = save
        self.delay = AUTOSAVE_DELAY_SECONDS if delay is None else delay
        self._on_saved = on_saved
        self._task: Optional[asyncio.Task] = None
        self._last_saved: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def mark_saved(self, document: FormDocument) -> None:
        self._last_saved = fingerprint(document)

    def is_dirty(self, document: FormDocument) -> bool:
        return fingerprint(document) != self._last_saved

    def schedule(self, document: FormDocument) -> bool:
        """Startet den Timer neu. Gibt False zurück, wenn nichts zu tun ist."""
        self.cancel()
        if document.id is None or not self.is_dirty(document):
            return False
        self._task = asyncio.get_running_loop().create_task(self._run(document))
        return True

    async def _run(self, document: FormDocument) -> None:
        await asyncio.sleep(self.delay)
        try:
            saved: FormRead = await self._save(document)
        except FormBuilderError as e:
            logger.warning(f"Autosave für Formular {document.id} fehlgeschlagen: {e}")
            return
        except Exception:
            # Der Task wird nie awaited, Fehler landen nur im Log
            logger.exception(f"Unerwarteter Fehler beim Autosave für Formular {document.id}")
            return
        self.mark_saved(document)
        logger.debug(f"Autosave: Formular {saved.id} gespeichert.")
        if self._on_saved is not None:
            self._on_saved(saved)

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def close(self) -> None:
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
