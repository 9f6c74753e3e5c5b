# -*- coding: utf-8 -*-
# Database session
# Copyright (c) 2025 Jan Sarivuo

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from groupbuy.config import DATABASE_URL, DATABASE_ECHO


def _connect_args(url: str) -> dict:
    # SQLite-yhteys jaetaan FastAPI:n säikeiden kesken
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    DATABASE_URL,
    echo=DATABASE_ECHO,
    future=True,
    connect_args=_connect_args(DATABASE_URL),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Luo taulut, jos niitä ei vielä ole (kehitys ja testit)."""
    # Mallit pitää tuoda, jotta ne rekisteröityvät Base.metadataan
    from groupbuy import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
