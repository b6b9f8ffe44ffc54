from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.types import TypeDecorator

from .db import Base

PUBLISHED = "published"
RECEIVED = "received"
CHANNELS = (PUBLISHED, RECEIVED)

STATUS_SCHEDULED = "Scheduled"
STATUS_PROCESSING = "Processing"
STATUS_SUCCEEDED = "Succeeded"
STATUS_FAILED = "Failed"
STATUSES = (STATUS_SCHEDULED, STATUS_PROCESSING, STATUS_SUCCEEDED, STATUS_FAILED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCTimestamp(TypeDecorator[datetime]):
    """Timestamp column that only ever holds UTC.

    SQLite drops the offset on write, so loaded values get UTC attached again.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: object) -> datetime | None:
        if value is not None and value.tzinfo is None:
            raise ValueError(f"Naive datetime {value.isoformat()} has no UTC offset")
        return None if value is None else value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect: object) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)


class Message(Base):
    """A published or received message and its processing state."""

    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel: Mapped[str] = mapped_column(String(16), index=True)
    name: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(32), index=True)
    added: Mapped[datetime] = mapped_column(UTCTimestamp(), default=utcnow)

    @validates("channel")
    def _check_channel(self, key: str, value: str) -> str:
        if value not in CHANNELS:
            raise ValueError(f"Unknown channel {value!r}; expected one of {CHANNELS}")
        return value

    @validates("status")
    def _check_status(self, key: str, value: str) -> str:
        if value not in STATUSES:
            raise ValueError(f"Unknown status {value!r}; expected one of {STATUSES}")
        return value


class SetEntry(Base):
    """Member of a named set, e.g. message ids scheduled for retry."""

    __tablename__ = "set_entries"
    __table_args__ = (UniqueConstraint("key", "value", name="uq_set_entries_key_value"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), index=True)
    value: Mapped[str] = mapped_column(String(200))


class Server(Base):
    __tablename__ = "servers"

    id: Mapped[str] = mapped_column(String(200), primary_key=True)
    heartbeat: Mapped[datetime] = mapped_column(UTCTimestamp(), default=utcnow)
