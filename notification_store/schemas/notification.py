from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from notification_store.models.notification import Notification
from notification_store.schemas.refs import Ref


class IndexFilter(str, Enum):
    AUTO = 'auto'
    UNOPENED = 'unopened'
    OPENED = 'opened'


class NotificationCreate(BaseModel):
    target: Ref
    notifiable: Ref
    key: str = Field(min_length=1)
    group: Optional[Ref] = None
    group_owner_id: Optional[int] = None
    notifier: Optional[Ref] = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class NotificationOut(BaseModel):
    id: int
    target: Ref
    notifiable: Ref
    key: str
    group: Optional[Ref] = None
    group_owner_id: Optional[int] = None
    notifier: Optional[Ref] = None
    parameters: dict[str, Any]
    opened_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: Notification) -> 'NotificationOut':
        return cls(
            id=record.id,
            target=record.target,
            notifiable=record.notifiable,
            key=record.key,
            group=record.group,
            group_owner_id=record.group_owner_id,
            notifier=record.notifier,
            parameters=record.parameters or {},
            opened_at=record.opened_at,
            created_at=record.created_at,
        )


class OpenResult(BaseModel):
    opened: bool
    notification: NotificationOut


class OpenAllResult(BaseModel):
    status: str = 'ok'
    opened: int
