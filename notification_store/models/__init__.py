from notification_store.models.base import CreatedAtModel, IDModel
from notification_store.models.notification import Notification

__all__ = [
    'IDModel',
    'CreatedAtModel',
    'Notification',
]
