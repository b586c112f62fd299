import math
from datetime import datetime, timezone
from collections.abc import Mapping
from typing import Any, Optional, Union

import sqlalchemy as sa
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from notification_store.core.config import DEFAULT_OPENED_INDEX_LIMIT, Settings
from notification_store.core.errors import ValidationError
from notification_store.models.notification import Notification
from notification_store.schemas.refs import Ref
from notification_store.services.notification_query import NotificationQuery


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoreConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    opened_index_limit: int = Field(default=DEFAULT_OPENED_INDEX_LIMIT, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'StoreConfig':
        return cls(opened_index_limit=settings.OPENED_INDEX_LIMIT)


def _required_ref(field: str, value: Any) -> Ref:
    if value is None:
        raise ValidationError(f'{field} is required', field=field)
    return _to_ref(field, value)


def _optional_ref(field: str, value: Any) -> Optional[Ref]:
    if value is None:
        return None
    return _to_ref(field, value)


def _to_ref(field: str, value: Any) -> Ref:
    try:
        return Ref.of(value)
    except (TypeError, PydanticValidationError) as exc:
        raise ValidationError(f'{field} is not a valid reference', field=field) from exc


def _check_json_value(value: Any, path: str) -> None:
    # Only values that read back unchanged from a JSON column are accepted.
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f'parameters value at {path} must be a finite number', field='parameters')
    if value is None or isinstance(value, (bool, int, float, str)):
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_json_value(item, f'{path}[{index}]')
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(f'parameters key {key!r} at {path} must be a string', field='parameters')
            _check_json_value(item, f'{path}.{key}')
        return
    raise ValidationError(
        f'parameters value at {path} has unsupported type {type(value).__name__}',
        field='parameters',
    )


def _checked_parameters(parameters: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if parameters is None:
        return {}
    if not isinstance(parameters, Mapping):
        raise ValidationError('parameters must be a mapping', field='parameters')
    checked = dict(parameters)
    _check_json_value(checked, 'parameters')
    return checked


class NotificationStore:
    """Creates, opens and queries notifications through one SQLModel session.

    The store commits its own writes. Storage errors roll the session back and
    are re-raised unchanged.
    """

    def __init__(self, session: Session, config: Optional[StoreConfig] = None) -> None:
        self.session = session
        self.config = config or StoreConfig()

    def notifications(self) -> NotificationQuery:
        return NotificationQuery(self.session, opened_index_limit=self.config.opened_index_limit)

    def for_target(self, target) -> NotificationQuery:
        return self.notifications().filtered_by_target(target)

    def get(self, notification_id: int) -> Optional[Notification]:
        return self.session.get(Notification, notification_id)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    # -- creation --------------------------------------------------------------

    def create(
        self,
        target,
        notifiable,
        key: Optional[str],
        group=None,
        group_owner: Union[Notification, int, None] = None,
        notifier=None,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> Notification:
        try:
            target_ref = _required_ref('target', target)
            notifiable_ref = _required_ref('notifiable', notifiable)
            if key is None or not str(key).strip():
                raise ValidationError('key is required', field='key')
            group_ref = _optional_ref('group', group)
            notifier_ref = _optional_ref('notifier', notifier)
            owner_id = self._group_owner_id(group_owner)
            payload = _checked_parameters(parameters)
        except ValidationError as exc:
            logger.warning('notification.create_rejected', field=exc.field, reason=str(exc))
            raise

        record = Notification(
            target_type=target_ref.type,
            target_id=target_ref.id,
            notifiable_type=notifiable_ref.type,
            notifiable_id=notifiable_ref.id,
            key=str(key).strip(),
            group_type=group_ref.type if group_ref else None,
            group_id=group_ref.id if group_ref else None,
            group_owner_id=owner_id,
            notifier_type=notifier_ref.type if notifier_ref else None,
            notifier_id=notifier_ref.id if notifier_ref else None,
            parameters=payload,
        )
        self.session.add(record)
        self._commit()
        self.session.refresh(record)
        logger.info(
            'notification.created',
            notification_id=record.id,
            key=record.key,
            target=str(target_ref),
            group_owner_id=owner_id,
        )
        return record

    def _group_owner_id(self, group_owner: Union[Notification, int, None]) -> Optional[int]:
        if group_owner is None:
            return None
        owner_id = group_owner.id if isinstance(group_owner, Notification) else group_owner
        if owner_id is None:
            raise ValidationError('group owner must be persisted first', field='group_owner')
        owner = self.get(owner_id)
        if owner is None:
            raise ValidationError(f'group owner {owner_id} does not exist', field='group_owner')
        if owner.is_group_member:
            raise ValidationError(
                f'notification {owner_id} is a group member and cannot own a group',
                field='group_owner',
            )
        return owner.id

    # -- opening ---------------------------------------------------------------

    def open(
        self,
        notification: Notification,
        timestamp: Optional[datetime] = None,
        with_members: bool = False,
    ) -> bool:
        """Mark ``notification`` as opened at ``timestamp`` (now when omitted).

        The update is conditional on ``opened_at`` still being null, so racing
        callers cannot overwrite each other. Returns ``True`` when this call
        opened the record and ``False`` when it was already opened. Group
        members are only opened when ``with_members`` is set.
        """
        if notification.id is None:
            raise ValidationError('notification must be persisted first', field='notification')
        opened_at = timestamp or _utc_now()
        table = Notification.__table__
        statement = (
            sa.update(table)
            .where(table.c.id == notification.id, table.c.opened_at.is_(None))
            .values(opened_at=opened_at)
        )
        try:
            result = self.session.connection().execute(statement)
        except SQLAlchemyError:
            self.session.rollback()
            raise
        opened = result.rowcount > 0
        self._commit()

        if opened:
            logger.info('notification.opened', notification_id=notification.id)
        else:
            logger.debug('notification.open_skipped', notification_id=notification.id)

        if with_members:
            self.open_all(self.group_members(notification), timestamp=opened_at)
        if notification in self.session:
            self.session.refresh(notification)
        return opened

    def open_all(self, query: NotificationQuery, timestamp: Optional[datetime] = None) -> int:
        """Open every unopened notification in ``query``; returns the rows changed."""
        opened_at = timestamp or _utc_now()
        table = Notification.__table__
        statement = (
            sa.update(table)
            .where(table.c.id.in_(query.id_subquery()), table.c.opened_at.is_(None))
            .values(opened_at=opened_at)
        )
        try:
            result = self.session.connection().execute(statement)
        except SQLAlchemyError:
            self.session.rollback()
            raise
        self._commit()
        logger.info('notification.open_all', opened=result.rowcount)
        return result.rowcount

    # -- groups ----------------------------------------------------------------

    def group_members(self, owner: Notification) -> NotificationQuery:
        return self.notifications().where(Notification.group_owner_id == owner.id)

    def group_member_count(self, owner: Notification) -> int:
        return self.group_members(owner).count()

    def latest_group_member(self, owner: Notification) -> Optional[Notification]:
        return self.group_members(owner).latest()

    def group_notifier_count(self, owner: Notification) -> int:
        """Distinct notifiers across the owner and its members."""
        notifiers = (
            sa.select(Notification.notifier_type, Notification.notifier_id)
            .where(
                sa.or_(Notification.id == owner.id, Notification.group_owner_id == owner.id),
                Notification.notifier_type.is_not(None),
                Notification.notifier_id.is_not(None),
            )
            .distinct()
            .subquery()
        )
        return self.session.exec(select(func.count()).select_from(notifiers)).one()

    # -- targets ---------------------------------------------------------------

    def unopened_notification_count(self, target) -> int:
        return self.for_target(target).unopened_index().count()

    def has_unopened_notifications(self, target) -> bool:
        return self.for_target(target).unopened_index().exists()

    def notification_index(self, target, limit: Optional[int] = None) -> list[Notification]:
        """Unopened index followed by the opened index for ``target``."""
        scope = self.for_target(target)
        return scope.unopened_index().all() + scope.opened_index(limit).all()
