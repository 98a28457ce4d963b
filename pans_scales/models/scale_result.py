"""Stored result of a completed PANS/PANDAS scale."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import JSON
from sqlalchemy.orm import Mapped, mapped_column

from pans_scales.db.base import Base, TimestampMixin, utc_now


class InstrumentKind(str, Enum):
    """Supported clinical instruments."""

    PANDAS = "pandas"  # PANS/PANDAS time-windowed symptom scale
    KOVACEVIC = "kovacevic"  # Kovacevic diagnostic criteria
    PANS31 = "pans31"  # PANS 31-item symptom rating scale
    PTEC = "ptec"  # PANS/PANDAS treatment and flare evaluation checklist
    CBI = "cbi"  # Caregiver Burden Inventory


class ScaleResult(Base, TimestampMixin):
    """A scored questionnaire, saved best-effort after computation.

    The raw answers are kept next to the computed scores so a result can be
    re-scored if the scoring version changes.
    """

    __tablename__ = "scale_results"

    instrument: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    # Version of the scoring algorithm used
    score_version: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    # Anonymous client session identifier, if provided
    session_id: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    form_data: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    scores: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    calculated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return f"<ScaleResult {self.instrument} {self.id}>"
