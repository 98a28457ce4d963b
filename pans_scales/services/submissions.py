"""Best-effort persistence of scored questionnaires.

A result is always computed before any save is attempted. If the save
fails, the caller still receives the computed result together with a
user-facing notice; a storage outage never hides a score.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from pans_scales.core.logging import get_logger
from pans_scales.models.scale_result import InstrumentKind, ScaleResult
from pans_scales.services.scoring import SCORING_VERSIONS, ScoringService, to_jsonable

logger = get_logger(__name__)

SAVE_FAILED_MESSAGE = "Your result is shown below, but we couldn't save it."


class ResultStoreError(Exception):
    """Base exception for result storage errors."""

    pass


class ResultStore(ABC):
    """Abstract base class for result storage backends."""

    @abstractmethod
    async def save(
        self,
        instrument: InstrumentKind,
        form_data: Mapping[str, Any],
        scores: Mapping[str, Any],
        score_version: str,
        session_id: str | None = None,
    ) -> str:
        """Persist a scored questionnaire.

        Returns:
            Identifier of the stored result

        Raises:
            ResultStoreError: If the result could not be stored
        """
        pass

    @abstractmethod
    async def get(self, result_id: str) -> ScaleResult | None:
        """Fetch a stored result, or None if it does not exist."""
        pass

    @abstractmethod
    async def list_recent(self, instrument: InstrumentKind, limit: int) -> list[ScaleResult]:
        """Most recent results for an instrument, newest first."""
        pass

    @abstractmethod
    async def list_by_session(
        self,
        session_id: str,
        limit: int,
        instrument: InstrumentKind | None = None,
    ) -> list[ScaleResult]:
        """Results saved under one session, newest first.

        Args:
            session_id: Anonymous session identifier
            limit: Maximum number of results
            instrument: Restrict to one instrument, or None for all
        """
        pass


class SqlResultStore(ResultStore):
    """Result store backed by the scale_results table.

    Any failure reaching or using the database, including driver-level
    connection errors that are not SQLAlchemy exceptions, is raised as
    ResultStoreError.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save(
        self,
        instrument: InstrumentKind,
        form_data: Mapping[str, Any],
        scores: Mapping[str, Any],
        score_version: str,
        session_id: str | None = None,
    ) -> str:
        record = ScaleResult(
            id=str(uuid4()),
            instrument=instrument.value,
            score_version=score_version,
            session_id=session_id,
            form_data=dict(form_data),
            scores=dict(scores),
        )
        try:
            self._session.add(record)
            await self._session.commit()
        except Exception as exc:
            await self._rollback()
            raise ResultStoreError(f"Failed to save {instrument.value} result: {exc}") from exc
        return record.id

    async def get(self, result_id: str) -> ScaleResult | None:
        try:
            return await self._session.get(ScaleResult, result_id)
        except Exception as exc:
            raise ResultStoreError(f"Failed to load result {result_id}: {exc}") from exc

    async def list_recent(self, instrument: InstrumentKind, limit: int) -> list[ScaleResult]:
        query = (
            select(ScaleResult)
            .where(ScaleResult.instrument == instrument.value)
            .order_by(ScaleResult.calculated_at.desc())
            .limit(limit)
        )
        return await self._fetch(query, f"Failed to list {instrument.value} results")

    async def list_by_session(
        self,
        session_id: str,
        limit: int,
        instrument: InstrumentKind | None = None,
    ) -> list[ScaleResult]:
        query = select(ScaleResult).where(ScaleResult.session_id == session_id)
        if instrument is not None:
            query = query.where(ScaleResult.instrument == instrument.value)
        query = query.order_by(ScaleResult.calculated_at.desc()).limit(limit)
        return await self._fetch(query, f"Failed to list results for session {session_id}")

    async def _fetch(self, query: Select, message: str) -> list[ScaleResult]:
        try:
            result = await self._session.execute(query)
        except Exception as exc:
            raise ResultStoreError(f"{message}: {exc}") from exc
        return list(result.scalars().all())

    async def _rollback(self) -> None:
        try:
            await self._session.rollback()
        except Exception as exc:
            # connection already gone; the session is discarded with the request
            logger.warning(f"Rollback after failed save also failed: {exc}")


@dataclass
class SubmissionOutcome:
    """A computed result and the outcome of saving it."""

    instrument: InstrumentKind
    score_version: str
    result: Any
    scores: dict[str, Any]
    result_id: str | None = None
    saved: bool = False
    save_error: str | None = None


class SubmissionService:
    """Computes a result, then attempts to store it."""

    def __init__(self, store: ResultStore) -> None:
        self.store = store

    async def submit(
        self,
        kind: InstrumentKind,
        answers: Mapping[str, Any],
        session_id: str | None = None,
    ) -> SubmissionOutcome:
        """Score answers and save the result best-effort.

        Args:
            kind: Instrument to score
            answers: Complete questionnaire answers
            session_id: Optional anonymous session identifier

        Returns:
            SubmissionOutcome with saved=False and a save_error message if
            the result could not be stored

        Raises:
            ScoringError: If answers are incomplete or invalid. Nothing is
                saved in that case.
        """
        result = ScoringService.calculate(kind, answers)
        scores = to_jsonable(result)
        score_version = SCORING_VERSIONS[kind]
        logger.debug(
            "Scale scored",
            extra={"instrument": kind.value, "session_id": session_id},
        )

        outcome = SubmissionOutcome(
            instrument=kind,
            score_version=score_version,
            result=result,
            scores=scores,
        )

        try:
            outcome.result_id = await self.store.save(
                instrument=kind,
                form_data=answers,
                scores=scores,
                score_version=score_version,
                session_id=session_id,
            )
        except ResultStoreError as exc:
            logger.warning(
                f"Could not save scale result: {exc}",
                extra={"instrument": kind.value, "session_id": session_id},
            )
            outcome.save_error = SAVE_FAILED_MESSAGE
            return outcome

        outcome.saved = True
        logger.info(
            "Scale result saved",
            extra={
                "instrument": kind.value,
                "result_id": outcome.result_id,
                "session_id": session_id,
            },
        )
        return outcome
