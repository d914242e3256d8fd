"""
Schemas for notification preferences and the derived schedule
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TimeInterval(BaseModel):
    """Allowed window, HH:mm (24-hour). end <= start wraps past midnight."""
    start_time: str
    end_time: str


class ScheduledTimeRead(BaseModel):
    hour: int
    minute: int


class NotificationPreferencesCreate(BaseModel):
    notifications_per_day: int = Field(..., ge=1, le=24)
    timezone: str  # e.g. 'Europe/Bucharest'
    time_intervals: List[TimeInterval]
    is_active: bool = True


class NotificationPreferencesUpdate(BaseModel):
    notifications_per_day: Optional[int] = Field(default=None, ge=1, le=24)
    timezone: Optional[str] = None
    time_intervals: Optional[List[TimeInterval]] = None
    is_active: Optional[bool] = None


class NotificationPreferencesToggle(BaseModel):
    is_active: bool


class NotificationPreferencesRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    notifications_per_day: int
    timezone: str
    time_intervals: List[TimeInterval]
    is_active: bool
    scheduled_times: List[ScheduledTimeRead] = Field(default_factory=list)
    current_notification_index: int = 0
    next_notification_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ScheduleInfoRead(BaseModel):
    scheduled_times: List[ScheduledTimeRead]
    next_notification_at: Optional[datetime] = None
    current_notification_index: int
