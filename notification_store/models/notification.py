from datetime import datetime
from typing import Any, List, Optional

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from notification_store.models.base import CreatedAtModel, IDModel, timestamp_type
from notification_store.schemas.refs import GroupMember, GroupOwner, GroupRole, Ref

TABLE_NAME = 'notifications'


class Notification(IDModel, CreatedAtModel, SQLModel, table=True):
    """One notification event addressed to a target.

    ``group_owner_id`` is null for group owners (and ungrouped records) and
    points at the owning record for group members. Members never own members.
    """

    __tablename__ = TABLE_NAME
    __table_args__ = (
        sa.Index('ix_notifications_target', 'target_type', 'target_id'),
        sa.Index('ix_notifications_notifiable', 'notifiable_type', 'notifiable_id'),
        sa.Index('ix_notifications_group', 'group_type', 'group_id'),
    )

    target_type: str = Field(max_length=100)
    target_id: str = Field(max_length=100)
    notifiable_type: str = Field(max_length=100)
    notifiable_id: str = Field(max_length=100)
    key: str = Field(max_length=255, index=True)
    group_type: Optional[str] = Field(default=None, max_length=100)
    group_id: Optional[str] = Field(default=None, max_length=100)
    group_owner_id: Optional[int] = Field(
        default=None,
        foreign_key=f'{TABLE_NAME}.id',
        index=True,
    )
    notifier_type: Optional[str] = Field(default=None, max_length=100)
    notifier_id: Optional[str] = Field(default=None, max_length=100)
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=sa.Column(sa.JSON, nullable=False, default=dict),
    )
    opened_at: Optional[datetime] = Field(
        default=None,
        sa_type=timestamp_type(),
        index=True,
    )

    group_owner: Optional['Notification'] = Relationship(
        back_populates='group_members',
        sa_relationship_kwargs={'remote_side': 'Notification.id'},
    )
    group_members: List['Notification'] = Relationship(back_populates='group_owner')

    @property
    def target(self) -> Ref:
        return Ref(type=self.target_type, id=self.target_id)

    @property
    def notifiable(self) -> Ref:
        return Ref(type=self.notifiable_type, id=self.notifiable_id)

    @property
    def group(self) -> Optional[Ref]:
        if self.group_type is None or self.group_id is None:
            return None
        return Ref(type=self.group_type, id=self.group_id)

    @property
    def notifier(self) -> Optional[Ref]:
        if self.notifier_type is None or self.notifier_id is None:
            return None
        return Ref(type=self.notifier_type, id=self.notifier_id)

    @property
    def role(self) -> GroupRole:
        if self.group_owner_id is None:
            return GroupOwner()
        return GroupMember(owner_id=self.group_owner_id)

    @property
    def is_group_owner(self) -> bool:
        return isinstance(self.role, GroupOwner)

    @property
    def is_group_member(self) -> bool:
        return isinstance(self.role, GroupMember)

    @property
    def is_opened(self) -> bool:
        return self.opened_at is not None

    @property
    def is_unopened(self) -> bool:
        return self.opened_at is None
