import os
from datetime import datetime, timedelta

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

os.environ['DB_URL'] = 'sqlite://'
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from notification_store.models.notification import Notification  # noqa: E402
from notification_store.services.notification_service import NotificationStore  # noqa: E402

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session):
    return NotificationStore(session)


@pytest.fixture
def stamp(session):
    """Pin ``created_at`` of a record to ``BASE_TIME + minutes``."""

    def _stamp(record: Notification, minutes: int) -> Notification:
        record.created_at = BASE_TIME + timedelta(minutes=minutes)
        session.add(record)
        session.commit()
        session.refresh(record)
        return record

    return _stamp
