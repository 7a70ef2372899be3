"""
Feedback API endpoints.

- POST  /submit            rate a meal (authenticated)
- GET   /history           caller's own feedback (authenticated)
- GET   /admin/all         filtered listing of all feedback (admin)
- GET   /admin/stats       aggregated statistics (admin)
- GET   /admin/export      filtered listing as CSV download (admin)
- PATCH /{id}/status       move feedback through its lifecycle (admin)
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mess_feedback.core.dependencies import get_current_claims, get_db, require_admin
from mess_feedback.models.feedback import FeedbackStatus, MealType, utc_today
from mess_feedback.schemas.feedback import (
    AdminFeedbackListResponse,
    FeedbackCreate,
    FeedbackHistoryResponse,
    MessageResponse,
    Pagination,
    StatusUpdate,
    SubmitFeedbackResponse,
)
from mess_feedback.schemas.stats import FeedbackStats
from mess_feedback.schemas.user import TokenClaims
from mess_feedback.services import export_service, feedback_service, stats_service
from mess_feedback.services.filters import FeedbackFilter

router = APIRouter()

MAX_PAGE_SIZE = 200


def feedback_filters(
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    rating: Optional[int] = Query(default=None, ge=1, le=5),
    meal_type: Optional[MealType] = Query(default=None),
    status: Optional[FeedbackStatus] = Query(default=None),
) -> FeedbackFilter:
    return FeedbackFilter(
        date_from=date_from,
        date_to=date_to,
        rating=rating,
        meal_type=meal_type,
        status=status,
    )


@router.post("/submit", response_model=SubmitFeedbackResponse, status_code=status.HTTP_201_CREATED)
async def submit(
    payload: FeedbackCreate,
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
):
    """Submit a rating for today's meal."""
    feedback = await feedback_service.submit_feedback(db, claims, payload)
    return SubmitFeedbackResponse(feedback=feedback)


@router.get("/history", response_model=FeedbackHistoryResponse)
async def history(
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
):
    """The caller's own feedback, newest first."""
    items = await feedback_service.get_history(db, claims, limit=limit, offset=offset)
    return FeedbackHistoryResponse(
        feedback=items,
        pagination=Pagination(limit=limit, offset=offset, count=len(items)),
    )


@router.get("/admin/all", response_model=AdminFeedbackListResponse)
async def list_all(
    filters: FeedbackFilter = Depends(feedback_filters),
    limit: int = Query(default=50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All feedback matching the optional filters."""
    items = await feedback_service.list_feedback(db, filters, limit=limit, offset=offset)
    return AdminFeedbackListResponse(
        feedback=items,
        pagination=Pagination(limit=limit, offset=offset, count=len(items)),
    )


@router.get("/admin/stats", response_model=FeedbackStats)
async def stats(
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Overall and per-meal-type rating statistics."""
    filters = FeedbackFilter(date_from=date_from, date_to=date_to)
    return await stats_service.compute_stats(db, filters)


@router.get("/admin/export")
async def export(
    filters: FeedbackFilter = Depends(feedback_filters),
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Download the filtered feedback set as CSV."""
    items = await feedback_service.list_feedback(db, filters, limit=None)
    filename = export_service.export_filename(utc_today())
    return Response(
        content=export_service.render_feedback_csv(items),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.patch("/{feedback_id}/status", response_model=MessageResponse)
async def change_status(
    feedback_id: int,
    body: StatusUpdate,
    _admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Set a feedback record's status (pending, processing, resolved)."""
    await feedback_service.update_status(db, feedback_id, body.status)
    return MessageResponse(message="Feedback status updated successfully")
