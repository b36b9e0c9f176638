# (c) Copyright Datacraft, 2026
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool
from sqlalchemy.orm import sessionmaker, Session as SQLAlchemySession


def build_sessionmaker(db_url: str) -> sessionmaker:
    engine = create_engine(db_url, poolclass=NullPool)
    return sessionmaker(engine, expire_on_commit=False)


def get_db(request: Request) -> Generator[SQLAlchemySession, None, None]:
    """FastAPI dependency for database sessions."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
