# driverdash/crud.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from driverdash.config import settings
from driverdash import earnings, models, schemas, tracker

# ---------- USER ----------
def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode("utf-8")

def check_password(plain: str, hashed: Optional[str]) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), (hashed or "").encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def get_user(db: Session, user_id: int):
    return db.get(models.User, user_id)

def get_user_by_username(db: Session, username: str):
    return db.query(models.User).filter(models.User.username == username.strip()).first()

def create_user(
    db: Session, user: schemas.UserCreate, rate_per_km: float = 0.12, language: str = "en",
    now: Optional[datetime] = None,
):
    now = now or datetime.utcnow()
    obj = models.User(
        username=user.username.strip(),
        password_hash=hash_password(user.password),
        rate_per_km=rate_per_km,
        language=language,
        created_at=now,
        last_active=now,
    )
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

def touch_last_active(db: Session, user: models.User, when: Optional[datetime] = None):
    user.last_active = when or datetime.utcnow()
    db.commit(); db.refresh(user)
    return user

def update_settings(db: Session, user: models.User, upd: schemas.SettingsUpdate):
    data = upd.model_dump(exclude_unset=True, exclude_none=True)
    for k, v in data.items():
        setattr(user, k, v)
    db.commit(); db.refresh(user)
    return user

def update_profile(db: Session, user: models.User, upd: schemas.ProfileUpdate):
    # Empty string clears an image reference
    data = upd.model_dump(exclude_unset=True)
    for k, v in data.items():
        setattr(user, k, v or None)
    db.commit(); db.refresh(user)
    return user

def list_public_users(db: Session, limit: int = 50):
    return (db.query(models.User)
            .order_by(models.User.last_active.desc(), models.User.id.asc())
            .limit(limit)
            .all())

# ---------- DAILY LOGS (earnings) ----------
def get_daily_log(db: Session, user_id: int, day: str):
    return db.query(models.DailyLog).filter_by(user_id=user_id, date=day).first()

def get_daily_logs(db: Session, user_id: int, limit: int = 90):
    return (db.query(models.DailyLog)
            .filter(models.DailyLog.user_id == user_id)
            .order_by(models.DailyLog.date.desc())
            .limit(limit)
            .all())

def get_daily_logs_between(db: Session, user_id: int, start: str, end: str):
    return (db.query(models.DailyLog)
            .filter(
                models.DailyLog.user_id == user_id,
                models.DailyLog.date >= start,
                models.DailyLog.date <= end,
            )
            .order_by(models.DailyLog.date.asc())
            .all())

def _apply_daily_log(obj: models.DailyLog, log: schemas.DailyLogCreate, total: float):
    obj.start_km = log.start_km
    obj.end_km = log.end_km
    obj.wage = log.wage
    obj.total_earnings = total

def upsert_daily_log(db: Session, user: models.User, log: schemas.DailyLogCreate):
    """One entry per (user, date): an existing entry is overwritten, never summed."""
    total = earnings.calculate_total(log.start_km, log.end_km, log.wage, user.rate_per_km)
    obj = get_daily_log(db, user.id, log.date)
    if obj:
        _apply_daily_log(obj, log, total)
        db.commit(); db.refresh(obj)
        return obj

    obj = models.DailyLog(user_id=user.id, date=log.date)
    _apply_daily_log(obj, log, total)
    db.add(obj)
    try:
        db.commit()
    except IntegrityError:
        # Another writer inserted this date first; overwrite its row instead
        db.rollback()
        obj = get_daily_log(db, user.id, log.date)
        _apply_daily_log(obj, log, total)
        db.commit()
    db.refresh(obj)
    return obj


def delete_daily_log(db: Session, user_id: int, day: str):
    obj = get_daily_log(db, user_id, day)
    if not obj: return False
    db.delete(obj); db.commit()
    return True

# ---------- AUSTRIA TRACKING ----------
def get_austria_log(db: Session, user_id: int, day: str):
    return db.query(models.AustriaLog).filter_by(user_id=user_id, date=day).first()

def get_active_austria_log(db: Session, user_id: int):
    return (db.query(models.AustriaLog)
            .filter_by(user_id=user_id, is_active=True)
            .order_by(models.AustriaLog.date.desc())
            .first())

def get_austria_logs(db: Session, user_id: int, limit: int = 90):
    return (db.query(models.AustriaLog)
            .filter(models.AustriaLog.user_id == user_id)
            .order_by(models.AustriaLog.date.desc())
            .limit(limit)
            .all())

def timer_state(row: Optional[models.AustriaLog]) -> tracker.TimerState:
    if row is None:
        return tracker.TimerState()
    return tracker.TimerState(
        total_seconds=row.total_seconds or 0,
        is_active=bool(row.is_active),
        last_start_timestamp=row.last_start_timestamp if row.is_active else None,
    )

def apply_austria_toggle(
    db: Session, user_id: int, day: str, state: tracker.TimerState, at_ms: int
) -> Tuple[models.AustriaLog, Optional[models.AustriaSession]]:
    """
    Write the transition computed from `state` onto the (user, day) row.
    There is no compare against what is stored now: two writers holding the
    same snapshot both succeed and the later one wins.
    """
    new_state, interval = tracker.toggle(state, at_ms)

    row = get_austria_log(db, user_id, day)
    if not row:
        row = models.AustriaLog(user_id=user_id, date=day)
        db.add(row)
    row.total_seconds = new_state.total_seconds
    row.is_active = new_state.is_active
    row.last_start_timestamp = new_state.last_start_timestamp

    session_obj = None
    if interval is not None:
        session_obj = models.AustriaSession(
            user_id=user_id,
            date=day,
            start_time=interval.start_time,
            end_time=interval.end_time,
            duration=interval.duration,
        )
        db.add(session_obj)

    db.commit(); db.refresh(row)
    return row, session_obj

def toggle_austria(db: Session, user_id: int, at_ms: int):
    """
    Stop whichever row is running (even one from an earlier date, so an
    interval that crossed midnight stays on the day it began), otherwise
    start today's row.
    """
    row = get_active_austria_log(db, user_id)
    if row is None:
        day = tracker.date_of(at_ms)
        row = get_austria_log(db, user_id, day)
    else:
        day = row.date
    return apply_austria_toggle(db, user_id, day, timer_state(row), at_ms)

def get_sessions(db: Session, user_id: int, limit: int = 90):
    return (db.query(models.AustriaSession)
            .filter(models.AustriaSession.user_id == user_id)
            .order_by(models.AustriaSession.start_time.desc())
            .limit(limit)
            .all())

def delete_session(db: Session, user_id: int, session_id: int):
    obj = db.get(models.AustriaSession, session_id)
    if not obj or obj.user_id != user_id: return False
    db.delete(obj); db.commit()
    return True

# ---------- NOTES ----------
def create_note(db: Session, user_id: int, note: schemas.NoteCreate):
    obj = models.Note(user_id=user_id, content=note.content.strip(), reminder_date=note.reminder_date)
    db.add(obj); db.commit(); db.refresh(obj)
    return obj

def get_notes(db: Session, user_id: int, limit: int = 200) -> List[models.Note]:
    return (db.query(models.Note)
            .filter(models.Note.user_id == user_id)
            .order_by(models.Note.reminder_date.asc(), models.Note.id.asc())
            .limit(limit)
            .all())

def get_note(db: Session, user_id: int, note_id: int):
    obj = db.get(models.Note, note_id)
    if not obj or obj.user_id != user_id:
        return None
    return obj

def toggle_note(db: Session, user_id: int, note_id: int):
    obj = get_note(db, user_id, note_id)
    if not obj: return None
    obj.is_completed = not obj.is_completed
    db.commit(); db.refresh(obj)
    return obj

def delete_note(db: Session, user_id: int, note_id: int):
    obj = get_note(db, user_id, note_id)
    if not obj: return False
    db.delete(obj); db.commit()
    return True
