from sqlmodel import SQLModel
from notification_store.db.session import engine
from notification_store.core.config import settings
from notification_store.models import notification  # noqa: F401


def init_db(drop_all: bool = False) -> None:
    if drop_all:
        SQLModel.metadata.drop_all(engine)
    if settings.DB_URL.startswith('sqlite') or settings.ENV != 'production' or settings.AUTO_CREATE_TABLES:
        SQLModel.metadata.create_all(engine)
