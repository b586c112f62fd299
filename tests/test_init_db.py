from sqlalchemy import create_engine, inspect

from notification_store.core import config as config_module
from notification_store.db import init_db as init_module
from notification_store.db.session import get_session


def test_init_db_creates_notifications_table(monkeypatch):
    engine = create_engine("sqlite:///:memory:", connect_args={"check_same_thread": False})
    monkeypatch.setattr(init_module, "engine", engine)
    monkeypatch.setattr(config_module.settings, "ENV", "production")

    init_module.init_db(drop_all=True)

    inspector = inspect(engine)
    assert "notifications" in inspector.get_table_names()
    columns = {column["name"] for column in inspector.get_columns("notifications")}
    assert {"target_type", "notifiable_id", "group_owner_id", "parameters", "opened_at"} <= columns


def test_session_dependency():
    gen = get_session()
    session = next(gen)
    assert session is not None
    session.close()
