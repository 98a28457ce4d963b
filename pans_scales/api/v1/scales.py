"""Scale scoring endpoints."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from pans_scales.api.deps import ResultStoreDep
from pans_scales.core.config import settings
from pans_scales.models.scale_result import InstrumentKind, ScaleResult
from pans_scales.schemas.scales import (
    InstrumentInfo,
    ScaleResultRead,
    ScoreRequest,
    ScoreResponse,
    SubmissionCreate,
    SubmissionResponse,
    SummaryResponse,
)
from pans_scales.services.scoring import SCORING_VERSIONS, ScoringService
from pans_scales.services.submissions import ResultStoreError, SubmissionService
from pans_scales.services.summaries import ResultSummaryService

router = APIRouter(prefix="/scales", tags=["scales"])


def _resolve_instrument(instrument: str) -> InstrumentKind:
    try:
        return InstrumentKind(instrument)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown instrument: {instrument}",
        ) from None


def _storage_unavailable(exc: ResultStoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=str(exc),
    )


@router.get("", response_model=list[InstrumentInfo])
async def list_instruments() -> list[dict]:
    """List supported instruments with their bands and scoring versions."""
    return ScoringService.instruments()


@router.get("/results/{result_id}", response_model=ScaleResultRead)
async def get_result(result_id: str, store: ResultStoreDep) -> ScaleResult:
    """Get a stored result by id."""
    try:
        UUID(result_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Result not found",
        ) from None

    try:
        record = await store.get(result_id)
    except ResultStoreError as exc:
        raise _storage_unavailable(exc) from exc

    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Result not found",
        )
    return record


@router.get("/sessions/{session_id}/results", response_model=list[ScaleResultRead])
async def list_session_results(
    session_id: str,
    store: ResultStoreDep,
    instrument: str | None = None,
    limit: int | None = Query(None, ge=1, le=settings.max_recent_results_limit),
) -> list[ScaleResult]:
    """List results saved under an anonymous session, newest first.

    Pass instrument to restrict the history to one instrument.
    """
    kind = _resolve_instrument(instrument) if instrument is not None else None
    try:
        return await ResultSummaryService(store).session_history(
            session_id,
            limit or settings.session_history_limit,
            kind=kind,
        )
    except ResultStoreError as exc:
        raise _storage_unavailable(exc) from exc


@router.post("/{instrument}/score", response_model=ScoreResponse)
async def score_scale(instrument: str, request: ScoreRequest) -> ScoreResponse:
    """Score a completed questionnaire without saving it.

    Incomplete or invalid answers are rejected with 422.
    """
    kind = _resolve_instrument(instrument)
    scores = ScoringService.calculate_payload(kind, request.answers)
    return ScoreResponse(
        instrument=kind,
        score_version=SCORING_VERSIONS[kind],
        scores=scores,
    )


@router.post("/{instrument}/submissions", response_model=SubmissionResponse)
async def submit_scale(
    instrument: str,
    request: SubmissionCreate,
    store: ResultStoreDep,
) -> SubmissionResponse:
    """Score a completed questionnaire and save the result.

    The computed scores are returned even if saving fails; saved is then
    false and save_error explains it.
    """
    kind = _resolve_instrument(instrument)
    outcome = await SubmissionService(store).submit(
        kind,
        request.answers,
        session_id=request.session_id,
    )
    return SubmissionResponse(
        instrument=outcome.instrument,
        score_version=outcome.score_version,
        scores=outcome.scores,
        result_id=outcome.result_id,
        saved=outcome.saved,
        save_error=outcome.save_error,
    )


@router.get("/{instrument}/results", response_model=list[ScaleResultRead])
async def list_results(
    instrument: str,
    store: ResultStoreDep,
    limit: int | None = Query(None, ge=1, le=settings.max_recent_results_limit),
) -> list[ScaleResult]:
    """List the most recent stored results for an instrument."""
    kind = _resolve_instrument(instrument)
    try:
        return await store.list_recent(kind, limit or settings.recent_results_limit)
    except ResultStoreError as exc:
        raise _storage_unavailable(exc) from exc


@router.get("/{instrument}/summary", response_model=SummaryResponse)
async def summarize_results(
    instrument: str,
    store: ResultStoreDep,
    limit: int | None = Query(None, ge=1, le=settings.max_summary_results_limit),
) -> SummaryResponse:
    """Summarize the most recent stored results for an instrument.

    Averages, band distributions and instrument-specific rates are computed
    over at most limit results.
    """
    kind = _resolve_instrument(instrument)
    try:
        result = await ResultSummaryService(store).summarize(
            kind, limit or settings.summary_results_limit
        )
    except ResultStoreError as exc:
        raise _storage_unavailable(exc) from exc
    return SummaryResponse(
        instrument=result.instrument,
        skipped=result.skipped,
        summary=result.to_payload(),
    )
