"""SQLAlchemy-backed message store read by the status page."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session, sessionmaker

from .metrics.base import StatisticsSnapshot
from .models import (
    PUBLISHED,
    RECEIVED,
    STATUS_FAILED,
    STATUS_PROCESSING,
    STATUS_SUCCEEDED,
    Message,
    Server,
    SetEntry,
)

logger = logging.getLogger(__name__)


class SqlStorageConnection:
    """Scoped connection wrapping one session; closed when the block exits."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def __enter__(self) -> "SqlStorageConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def get_set_count(self, name: str) -> int:
        stmt = select(func.count()).select_from(SetEntry).where(SetEntry.key == name)
        return int(self._session.execute(stmt).scalar_one())


class SqlStorage:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        server_timeout_seconds: int = 300,
    ) -> None:
        self.session_factory = session_factory
        self.server_timeout = timedelta(seconds=max(server_timeout_seconds, 1))

    def get_connection(self) -> SqlStorageConnection:
        return SqlStorageConnection(self.session_factory())

    def get_statistics(self, now: Optional[datetime] = None) -> StatisticsSnapshot:
        """Count active servers and messages per channel and status."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.server_timeout
        with self.session_factory() as session:
            servers = session.execute(
                select(func.count()).select_from(Server).where(Server.heartbeat >= cutoff)
            ).scalar_one()
            rows = session.execute(
                select(Message.channel, Message.status, func.count())
                .group_by(Message.channel, Message.status)
            ).all()

        counts: Dict[Tuple[str, str], int] = {
            (channel, status): int(total) for channel, status, total in rows
        }
        snapshot = StatisticsSnapshot(
            servers=int(servers),
            published_processing=counts.get((PUBLISHED, STATUS_PROCESSING), 0),
            published_succeeded=counts.get((PUBLISHED, STATUS_SUCCEEDED), 0),
            published_failed=counts.get((PUBLISHED, STATUS_FAILED), 0),
            received_processing=counts.get((RECEIVED, STATUS_PROCESSING), 0),
            received_succeeded=counts.get((RECEIVED, STATUS_SUCCEEDED), 0),
            received_failed=counts.get((RECEIVED, STATUS_FAILED), 0),
        )
        logger.debug("Statistics snapshot: %s", snapshot)
        return snapshot
