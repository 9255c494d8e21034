# driverdash/models.py
from __future__ import annotations
from sqlalchemy import (
    BigInteger, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from driverdash.db import Base
from datetime import datetime

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(200), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    rate_per_km = Column(Float, nullable=False, default=0.12)
    language = Column(String(8), nullable=False, default="en")
    profile_image = Column(String(500))  # URL or storage key, never the bytes
    cover_image = Column(String(500))
    created_at = Column(DateTime, default=datetime.utcnow)
    last_active = Column(DateTime, default=datetime.utcnow)

    # relationships
    daily_logs = relationship("DailyLog", back_populates="user", cascade="all,delete-orphan")
    austria_logs = relationship("AustriaLog", back_populates="user", cascade="all,delete-orphan")
    austria_sessions = relationship("AustriaSession", back_populates="user", cascade="all,delete-orphan")
    notes = relationship("Note", back_populates="user", cascade="all,delete-orphan")

class DailyLog(Base):
    __tablename__ = "daily_logs"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD, client-local
    start_km = Column(Float, default=0.0)
    end_km = Column(Float, default=0.0)
    wage = Column(Float, default=0.0)
    total_earnings = Column(Float, default=0.0)  # fixed at write time
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="daily_logs")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_log_user_date"),
    )

class AustriaLog(Base):
    __tablename__ = "austria_logs"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False)
    total_seconds = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=False)
    last_start_timestamp = Column(BigInteger, nullable=True)  # epoch ms, set only while active

    user = relationship("User", back_populates="austria_logs")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_austria_log_user_date"),
    )

class AustriaSession(Base):
    __tablename__ = "austria_sessions"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False)  # date the interval started on
    start_time = Column(BigInteger, nullable=False)
    end_time = Column(BigInteger, nullable=False)
    duration = Column(Integer, nullable=False)  # seconds
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="austria_sessions")

class Note(Base):
    __tablename__ = "notes"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    reminder_date = Column(String(10), nullable=False)
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="notes")
