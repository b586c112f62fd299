from fastapi import Depends, HTTPException, status
from sqlmodel import Session

from notification_store.core.config import settings
from notification_store.db.session import get_session
from notification_store.models.notification import Notification
from notification_store.services.notification_service import NotificationStore, StoreConfig


def get_store(session: Session = Depends(get_session)) -> NotificationStore:
    return NotificationStore(session, StoreConfig.from_settings(settings))


def get_notification_or_404(notification_id: int, store: NotificationStore) -> Notification:
    record = store.get(notification_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Notification not found')
    return record
