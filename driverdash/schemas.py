# driverdash/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional
from pydantic import BaseModel, ConfigDict, Field, StringConstraints

# Plain YYYY-MM-DD strings; no timezone handling on the server
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

# ---------- User ----------
# Stripped before the length check, so "   " is not a username
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]

class UserCreate(BaseModel):
    username: Username
    password: str = Field(min_length=1)

class UserLogin(BaseModel):
    username: Username
    password: str



class LoginResponse(BaseModel):
    token: str
    username: str
    rate_per_km: float
    language: str

class SettingsUpdate(BaseModel):
    rate_per_km: Optional[float] = None
    language: Optional[str] = Field(default=None, max_length=8)

class UserSettings(BaseModel):
    rate_per_km: float
    language: str
    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    profile_image: Optional[str] = Field(default=None, max_length=500)
    cover_image: Optional[str] = Field(default=None, max_length=500)

class Profile(BaseModel):
    username: str
    profile_image: Optional[str] = None
    cover_image: Optional[str] = None
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None
    role: str
    model_config = ConfigDict(from_attributes=True)

class PublicUser(BaseModel):
    username: str
    profile_image: Optional[str] = None
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None
    role: str


# ---------- DailyLog (earnings) ----------
class DailyLogBase(BaseModel):
    date: str = Field(pattern=DATE_PATTERN)
    start_km: float = 0.0
    end_km: float = 0.0
    wage: float = 0.0

class DailyLogCreate(DailyLogBase):
    # Accepted for wire compatibility; the server recomputes it
    total_earnings: Optional[float] = None

class DailyLog(DailyLogBase):
    id: int
    total_earnings: float
    model_config = ConfigDict(from_attributes=True)

class DailyLogSaved(BaseModel):
    success: bool = True
    log: DailyLog

class EarningsSummary(BaseModel):
    period: str
    start: str
    end: str
    days: int
    total_km: float
    total_wage: float
    total_earnings: float
    total_earnings_display: str


# ---------- Austria tracking ----------
class AustriaState(BaseModel):
    total_seconds: int = 0
    is_active: bool = False
    last_start_timestamp: Optional[int] = None
    display_seconds: int = 0
    display_time: str = "00:00:00"

class AustriaLog(BaseModel):
    id: int
    date: str
    total_seconds: int
    is_active: bool
    last_start_timestamp: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)

class AustriaSession(BaseModel):
    id: int
    date: str
    start_time: int
    end_time: int
    duration: int
    model_config = ConfigDict(from_attributes=True)

class ToggleResult(BaseModel):
    success: bool = True
    is_active: bool
    total_seconds: int


# ---------- Notes ----------
class NoteCreate(BaseModel):
    content: str = Field(min_length=1)
    reminder_date: str = Field(pattern=DATE_PATTERN)

class Note(BaseModel):
    id: int
    content: str
    reminder_date: str
    is_completed: bool
    model_config = ConfigDict(from_attributes=True)


# ---------- Dashboard ----------
class Dashboard(BaseModel):
    settings: UserSettings
    profile: Profile
    austria: AustriaState
    logs: List[DailyLog] = []
    austria_logs: List[AustriaLog] = []
    sessions: List[AustriaSession] = []
    notes: List[Note] = []


class Success(BaseModel):
    success: bool = True
