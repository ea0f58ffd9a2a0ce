"""Recommendation API endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.auth import get_optional_user
from cinecrib.db import get_db
from cinecrib.models.schemas import RecommendationRequest, RecommendationResponse
from cinecrib.models.user import User
from cinecrib.services.recommendations import FilterSpec, RecommendationQuery
from cinecrib.utils.logging import LogContext, get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.post("", response_model=RecommendationResponse)
async def recommend(
    data: RecommendationRequest,
    user: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RecommendationResponse:
    """Filter the catalog and return one page of recommendations.

    Works for guests and logged-in users alike; the filters come entirely
    from the request body.
    """
    spec = FilterSpec.from_request(data)
    page = await RecommendationQuery(db).execute(spec)

    LogContext(logger, user=user.uid if user else "guest").debug(
        f"{page.total_results} recommendations, page {page.page}/{page.total_pages}"
    )

    return RecommendationResponse(
        recommendations=page.items,
        total_results=page.total_results,
        page=page.page,
        page_size=page.page_size,
    )
