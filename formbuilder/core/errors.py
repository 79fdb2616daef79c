"""Fehler-Taxonomie des Formular-Backends.

ValidationError -> 400, NotFound -> 404, StorageUnavailable -> 500.
Die HTTP-Abbildung passiert in ``formbuilder.main``.
"""

import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class FailureReason(str, enum.Enum):
    REQUIRED_FIELD_MISSING = "RequiredFieldMissing"
    LENGTH_OUT_OF_RANGE = "LengthOutOfRange"
    PATTERN_MISMATCH = "PatternMismatch"


@dataclass(frozen=True)
class FieldFailure:
    """Ein einzelnes Feld, das seine Prüfung nicht bestanden hat."""

    field_id: str
    reason: FailureReason
    message: str
    step_id: Optional[int] = None


class FormBuilderError(Exception):
    message = "Form builder error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(FormBuilderError):
    message = "Invalid form data"

    def __init__(
        self,
        message: Optional[str] = None,
        failures: Optional[List[FieldFailure]] = None,
    ):
        super().__init__(message)
        self.failures = list(failures or [])


class SubmissionIncomplete(ValidationError):
    message = "Please fill in all required fields"


class NotFound(FormBuilderError):
    message = "Not found"


class StorageUnavailable(FormBuilderError):
    message = "Storage unavailable"


@contextmanager
def storage_errors(action: str):
    """Übersetzt Datenbankfehler in ``StorageUnavailable``."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Datenbankfehler bei '{action}': {e}")
        raise StorageUnavailable(f"Failed to {action}") from e
