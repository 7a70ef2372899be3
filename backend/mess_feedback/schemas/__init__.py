from mess_feedback.schemas.user import (
    UserCreate, UserLogin, TokenResponse, TokenClaims, UserOut,
    RegisterResponse, LoginResponse, MeResponse,
)
from mess_feedback.schemas.feedback import (
    FeedbackCreate, StatusUpdate, FeedbackOut, AdminFeedbackOut, Pagination,
    SubmitFeedbackResponse, FeedbackHistoryResponse, AdminFeedbackListResponse,
    MessageResponse,
)
from mess_feedback.schemas.stats import OverallStats, MealTypeStats, FeedbackStats
