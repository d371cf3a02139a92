# API package - FastAPI components
from .models import (
    BusinessRequest,
    DiscoverRequest,
    FeedbackRequest,
    StatusRequest,
    WorkflowsUpdateRequest,
)
from .routes import router

__all__ = [
    # Models
    "BusinessRequest",
    "DiscoverRequest",
    "FeedbackRequest",
    "StatusRequest",
    "WorkflowsUpdateRequest",
    # Router
    "router",
]
