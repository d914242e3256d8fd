from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from rememberme.api.deps import get_current_user_id, get_db
from rememberme.schemas.notification_preferences import (
    NotificationPreferencesCreate,
    NotificationPreferencesRead,
    NotificationPreferencesToggle,
    NotificationPreferencesUpdate,
    ScheduleInfoRead,
)

from .exceptions import InvalidPreferences, PreferencesAlreadyExist, PreferencesNotFound
from .preferences import NotificationPreferencesService


router = APIRouter()


def get_preferences_service(db: Session = Depends(get_db)) -> NotificationPreferencesService:
    return NotificationPreferencesService(db)


@router.get("/health")
def health_check():
    return {"status": "healthy", "service": "notifications"}


@router.post("/", response_model=NotificationPreferencesRead, status_code=201)
def create_preferences_endpoint(
    payload: NotificationPreferencesCreate,
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferencesService = Depends(get_preferences_service),
):
    try:
        return service.create(user_id, payload)
    except (InvalidPreferences, PreferencesAlreadyExist) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=NotificationPreferencesRead)
def get_preferences_endpoint(
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferencesService = Depends(get_preferences_service),
):
    try:
        return service.find_one(user_id)
    except PreferencesNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/jobs", response_model=Optional[ScheduleInfoRead])
def get_scheduled_jobs_endpoint(
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferencesService = Depends(get_preferences_service),
):
    info = service.get_scheduled_jobs(user_id)
    return info.to_dict() if info else None


@router.put("/", response_model=NotificationPreferencesRead)
def update_preferences_endpoint(
    payload: NotificationPreferencesUpdate,
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferencesService = Depends(get_preferences_service),
):
    try:
        return service.update(user_id, payload)
    except InvalidPreferences as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PreferencesNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/", status_code=204)
def delete_preferences_endpoint(
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferencesService = Depends(get_preferences_service),
):
    try:
        service.remove(user_id)
    except PreferencesNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@router.patch("/toggle", response_model=NotificationPreferencesRead)
def toggle_preferences_endpoint(
    payload: NotificationPreferencesToggle,
    user_id: str = Depends(get_current_user_id),
    service: NotificationPreferencesService = Depends(get_preferences_service),
):
    try:
        return service.toggle_active(user_id, payload.is_active)
    except PreferencesNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
