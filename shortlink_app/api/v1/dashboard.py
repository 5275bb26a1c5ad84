from fastapi import APIRouter, Depends
from shortlink_app.dependencies import get_current_user, get_metrics_service
from shortlink_app.models.user import User
from shortlink_app.schemas.dashboard import Dashboard
from shortlink_app.services.metrics_service import MetricsService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/", response_model=Dashboard)
def get_dashboard(
    user: User = Depends(get_current_user),
    metrics_service: MetricsService = Depends(get_metrics_service)
):
    """Key metrics, recent and top links, and the daily click series"""
    return metrics_service.get_dashboard(user)
