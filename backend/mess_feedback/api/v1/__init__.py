"""
API v1 router: aggregates all sub-routers.
"""

from fastapi import APIRouter

from mess_feedback.api.v1.auth import router as auth_router
from mess_feedback.api.v1.feedback import router as feedback_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(feedback_router, prefix="/feedback", tags=["feedback"])
