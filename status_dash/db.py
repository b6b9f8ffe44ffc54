from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import settings


class Base(DeclarativeBase):
    """Base declarative class for the message store tables."""


engine: Engine = create_engine(
    settings.database_url,
    echo=settings.sqlalchemy_echo,
)

SessionLocal: sessionmaker[Session] = sessionmaker(engine, expire_on_commit=False)


def init_db(bind: Engine = engine) -> None:
    from . import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind)
