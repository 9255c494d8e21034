# main.py (project root)

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from driverdash.config import settings
from driverdash.db import Base, engine, get_db
from driverdash.auth import create_access_token, get_current_user
from driverdash import crud, earnings, models, roles, schemas, tracker
from driverdash.formatters import format_currency, format_duration

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# ---------------- App ----------------

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Driver Dashboard", version="1.0.0")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Database error"})


@app.on_event("startup")
async def startup():
    logger.info("Driver Dashboard started (db=%s)", engine.url.get_backend_name())


# ---------------- Helpers ----------------

def get_now_ms() -> int:
    """Wall clock in epoch milliseconds; overridden in tests."""
    return tracker.now_ms()


def _utc_naive(now_ms: int) -> datetime:
    # Stored timestamps are naive UTC
    return datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).replace(tzinfo=None)


def _history_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return settings.history_limit
    return min(limit, settings.max_history_limit)


def _profile(user: models.User, now_ms: int) -> schemas.Profile:
    return schemas.Profile(
        username=user.username,
        profile_image=user.profile_image,
        cover_image=user.cover_image,
        created_at=user.created_at,
        last_active=user.last_active,
        role=roles.get_role(user.created_at, _utc_naive(now_ms)),
    )


def _austria_state(row: Optional[models.AustriaLog], now_ms: int) -> schemas.AustriaState:
    state = crud.timer_state(row)
    shown = tracker.displayed_seconds(state, now_ms)
    return schemas.AustriaState(
        total_seconds=state.total_seconds,
        is_active=state.is_active,
        last_start_timestamp=state.last_start_timestamp,
        display_seconds=shown,
        display_time=format_duration(shown),
    )


def _current_austria_row(db: Session, user_id: int, now_ms: int) -> Optional[models.AustriaLog]:
    # A running interval that began yesterday is still "the" current one
    return crud.get_active_austria_log(db, user_id) or crud.get_austria_log(db, user_id, tracker.date_of(now_ms))


# ---------------- Health ----------------

@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


# ---------------- Auth ----------------

@app.post("/api/auth/register")
def register(
    user: schemas.UserCreate,
    db: Session = Depends(get_db),
    now_ms: int = Depends(get_now_ms),
):
    if crud.get_user_by_username(db, user.username):
        raise HTTPException(status_code=400, detail="Username already exists")
    try:
        new_user = crud.create_user(
            db, user,
            rate_per_km=settings.default_rate_per_km,
            language=settings.default_language,
            now=_utc_naive(now_ms),
        )
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Username already exists")
    logger.info("Registered user %s (id=%s)", new_user.username, new_user.id)
    return {"message": "User created"}


@app.post("/api/auth/login", response_model=schemas.LoginResponse)
def login(
    creds: schemas.UserLogin,
    db: Session = Depends(get_db),
    now_ms: int = Depends(get_now_ms),
):
    u = crud.get_user_by_username(db, creds.username)
    if not u:
        raise HTTPException(status_code=400, detail="User not found")
    if not crud.check_password(creds.password, u.password_hash):
        logger.warning("Failed login for %s", u.username)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid password")

    crud.touch_last_active(db, u, _utc_naive(now_ms))
    return schemas.LoginResponse(
        token=create_access_token(u),
        username=u.username,
        rate_per_km=u.rate_per_km,
        language=u.language,
    )


# ---------------- Dashboard ----------------

@app.get("/api/data", response_model=schemas.Dashboard)
def dashboard(
    limit: Optional[int] = Query(None),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now_ms: int = Depends(get_now_ms),
):
    """
    Everything the dashboard needs in one round-trip.
    Lists are newest first and bounded by the history limit.
    """
    n = _history_limit(limit)
    return schemas.Dashboard(
        settings=schemas.UserSettings.model_validate(user),
        profile=_profile(user, now_ms),
        austria=_austria_state(_current_austria_row(db, user.id, now_ms), now_ms),
        logs=[schemas.DailyLog.model_validate(x) for x in crud.get_daily_logs(db, user.id, n)],
        austria_logs=[schemas.AustriaLog.model_validate(x) for x in crud.get_austria_logs(db, user.id, n)],
        sessions=[schemas.AustriaSession.model_validate(x) for x in crud.get_sessions(db, user.id, n)],
        notes=[schemas.Note.model_validate(x) for x in crud.get_notes(db, user.id, settings.max_history_limit)],
    )


# ---------------- Settings / Profile ----------------

@app.post("/api/settings", response_model=schemas.Success)
def update_settings(
    upd: schemas.SettingsUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    crud.update_settings(db, user, upd)
    return schemas.Success()


@app.post("/api/profile", response_model=schemas.Profile)
def update_profile(
    upd: schemas.ProfileUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now_ms: int = Depends(get_now_ms),
):
    user = crud.update_profile(db, user, upd)
    return _profile(user, now_ms)


@app.get("/api/public/users", response_model=List[schemas.PublicUser])
def public_users(db: Session = Depends(get_db), now_ms: int = Depends(get_now_ms)):
    now = _utc_naive(now_ms)
    return [
        schemas.PublicUser(
            username=u.username,
            profile_image=u.profile_image,
            created_at=u.created_at,
            last_active=u.last_active,
            role=roles.get_role(u.created_at, now),
        )
        for u in crud.list_public_users(db)
    ]


# ---------------- Daily Logs (earnings) ----------------

@app.post("/api/logs", response_model=schemas.DailyLogSaved)
def save_daily_log(
    log: schemas.DailyLogCreate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    obj = crud.upsert_daily_log(db, user, log)
    if log.total_earnings is not None and abs(log.total_earnings - obj.total_earnings) > 0.005:
        logger.info(
            "Client total %.2f for %s differs from computed %.2f; stored computed value",
            log.total_earnings, log.date, obj.total_earnings,
        )
    return schemas.DailyLogSaved(log=schemas.DailyLog.model_validate(obj))


@app.get("/api/logs/summary", response_model=schemas.EarningsSummary)
def earnings_summary(
    period: str = Query("today"),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now_ms: int = Depends(get_now_ms),
):
    today = _utc_naive(now_ms).date()
    try:
        start_d, end_d = earnings.period_bounds(period, today, start, end)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    totals = earnings.summarize(crud.get_daily_logs_between(db, user.id, start_d, end_d))
    return schemas.EarningsSummary(
        period=period,
        start=start_d,
        end=end_d,
        total_earnings_display=format_currency(totals["total_earnings"]),
        **totals,
    )


@app.delete("/api/logs/{day}", response_model=schemas.Success)
def delete_daily_log(
    day: str,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not crud.delete_daily_log(db, user.id, day):
        raise HTTPException(status_code=404, detail="Log not found")
    return schemas.Success()


# ---------------- Austria Tracking ----------------

@app.post("/api/austria/toggle", response_model=schemas.ToggleResult)
def toggle_austria(
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
    now_ms: int = Depends(get_now_ms),
):
    row, closed = crud.toggle_austria(db, user.id, now_ms)
    if closed is not None:
        logger.info("User %s left Austria after %ss (day %s)", user.id, closed.duration, row.date)
    else:
        logger.info("User %s entered Austria (day %s)", user.id, row.date)
    return schemas.ToggleResult(is_active=row.is_active, total_seconds=row.total_seconds)


@app.get("/api/austria/sessions", response_model=List[schemas.AustriaSession])
def austria_sessions(
    limit: Optional[int] = Query(None),
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return crud.get_sessions(db, user.id, _history_limit(limit))


@app.delete("/api/austria/sessions/{session_id}", response_model=schemas.Success)
def delete_austria_session(
    session_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # Only the session record goes; the day's accumulated total is left as is
    if not crud.delete_session(db, user.id, session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return schemas.Success()


# ---------------- Notes ----------------

@app.get("/api/notes", response_model=List[schemas.Note])
def list_notes(user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud.get_notes(db, user.id, settings.max_history_limit)


@app.post("/api/notes", response_model=schemas.Note)
def add_note(
    note: schemas.NoteCreate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return crud.create_note(db, user.id, note)


@app.post("/api/notes/{note_id}/toggle", response_model=schemas.Note)
def toggle_note(
    note_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    obj = crud.toggle_note(db, user.id, note_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Note not found")
    return obj


@app.delete("/api/notes/{note_id}", response_model=schemas.Success)
def delete_note(
    note_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not crud.delete_note(db, user.id, note_id):
        raise HTTPException(status_code=404, detail="Note not found")
    return schemas.Success()
