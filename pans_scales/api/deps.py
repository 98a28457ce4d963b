"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pans_scales.db.session import get_db
from pans_scales.services.submissions import ResultStore, SqlResultStore

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_result_store(session: DbSession) -> ResultStore:
    """Result store bound to the request's database session."""
    return SqlResultStore(session)


ResultStoreDep = Annotated[ResultStore, Depends(get_result_store)]
