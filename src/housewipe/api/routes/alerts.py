"""Alerts API endpoints."""

from fastapi import APIRouter, HTTPException, Query

from housewipe.api.dependencies import CurrentUser, FeedServiceDep
from housewipe.api.schemas import AlertListResponse
from housewipe.models.pydantic_models import AlertRead

router = APIRouter()


@router.get("", response_model=AlertListResponse)
async def list_alerts(
    service: FeedServiceDep,
    user: CurrentUser,
    unread_only: bool = Query(False, description="Only unread alerts"),
    limit: int = Query(50, ge=1, le=200),
) -> AlertListResponse:
    """Get the user's alerts, newest first."""
    alerts = service.get_alerts(user.id, unread_only=unread_only, limit=limit)
    return AlertListResponse(alerts=alerts, count=len(alerts))


@router.post("/{alert_id}/read", response_model=AlertRead)
async def mark_alert_read(
    alert_id: int,
    service: FeedServiceDep,
    user: CurrentUser,
) -> AlertRead:
    """Mark an alert as read.

    Raises:
        HTTPException: 404 if the alert doesn't exist or belongs to another user.
    """
    alert = service.mark_alert_read(alert_id, user.id)
    if alert is None:
        raise HTTPException(status_code=404, detail=f"Alert {alert_id} not found")
    return alert
