from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .database import Base

# jsonb auf PostgreSQL, einfaches JSON überall sonst (SQLite in Tests)
JSONColumn = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Form(Base):
    __tablename__ = "forms"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    # Öffentliche ID für Teilnehmer-Links, interne IDs werden nie herausgegeben
    public_id = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    fields = Column(JSONColumn, nullable=False, default=list)
    steps = Column(JSONColumn, nullable=False, default=list)
    settings = Column(JSONColumn, nullable=False, default=dict)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    responses = relationship(
        "Response",
        back_populates="form",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Response(Base):
    __tablename__ = "responses"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    form_id = Column(
        Integer, ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Antworten je Feld-ID, Werteform hängt vom Feldtyp ab (str, Liste, bool, Zahl)
    data = Column(JSONColumn, nullable=False, default=dict)
    is_complete = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    form = relationship("Form", back_populates="responses")
