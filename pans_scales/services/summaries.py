"""Summaries and per-session history of stored results.

Summaries re-score the stored answers with the current scorers, so every
result in a summary is computed the same way whatever version saved it.
"""

from dataclasses import dataclass
from typing import Any

from pans_scales.core.logging import get_logger
from pans_scales.models.scale_result import InstrumentKind, ScaleResult
from pans_scales.scoring.errors import ScoringError
from pans_scales.services.scoring import ScoringService, to_jsonable
from pans_scales.services.submissions import ResultStore

logger = get_logger(__name__)


@dataclass
class ResultSummary:
    """Summary of the most recent stored results of one instrument."""

    instrument: InstrumentKind
    summary: Any
    skipped: int = 0

    def to_payload(self) -> dict[str, Any]:
        return to_jsonable(self.summary)


class ResultSummaryService:
    """Reads stored results back for summaries and session history."""

    def __init__(self, store: ResultStore) -> None:
        self.store = store

    async def summarize(self, kind: InstrumentKind, limit: int) -> ResultSummary:
        """Summarize the most recent stored results of an instrument.

        Stored answers that no longer parse are left out and counted in
        `skipped`.

        Raises:
            ResultStoreError: If results could not be loaded
        """
        records = await self.store.list_recent(kind, limit)

        forms = []
        skipped = 0
        scorer = ScoringService.get_scorer(kind)
        for record in records:
            try:
                forms.append(scorer.parse(record.form_data))
            except ScoringError as exc:
                skipped += 1
                logger.warning(
                    f"Stored result left out of summary: {exc}",
                    extra={"instrument": kind.value, "result_id": record.id},
                )

        return ResultSummary(
            instrument=kind,
            summary=scorer.summarize(forms),
            skipped=skipped,
        )

    async def session_history(
        self,
        session_id: str,
        limit: int,
        kind: InstrumentKind | None = None,
    ) -> list[ScaleResult]:
        """Results saved under a session, newest first.

        Raises:
            ResultStoreError: If results could not be loaded
        """
        records = await self.store.list_by_session(session_id, limit, instrument=kind)
        logger.debug(
            f"Loaded {len(records)} results for session",
            extra={"session_id": session_id},
        )
        return records
