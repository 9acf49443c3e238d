from __future__ import annotations

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.genflow.db.db_init import init_db

os.environ.setdefault("GENFLOW_KIE_API_KEY", "test-key")
os.environ.setdefault("GENFLOW_DATABASE_URL", "sqlite://")


@pytest.fixture
def session_factory():
    # one shared connection so worker threads see the same in-memory database
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()
