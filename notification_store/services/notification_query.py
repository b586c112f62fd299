"""Composable, immutable views over the notifications table.

Every combinator returns a new :class:`NotificationQuery`; nothing touches the
database until the view is enumerated (``all``, iteration, ``first``,
``count``, ``ids``). Filters are ANDed together, so they commute. The ordering
and the row limit are single slots applied to the final statement.

``opened_index`` is the one sequence-sensitive view: the limit bounds the raw
pool of opened rows *before* it is narrowed to group owners, so the result may
hold fewer than ``limit`` rows when members were part of the pool.
"""
from enum import Enum
from typing import Any, Iterator, Optional

import sqlalchemy as sa
from sqlalchemy.orm import selectinload
from sqlmodel import Session, func, select

from notification_store.core.config import DEFAULT_OPENED_INDEX_LIMIT
from notification_store.models.notification import Notification
from notification_store.schemas.refs import Ref


class Order(str, Enum):
    LATEST = 'latest'
    EARLIEST = 'earliest'


class NotificationQuery:
    def __init__(
        self,
        session: Session,
        *,
        criteria: tuple = (),
        order: Optional[Order] = None,
        limit: Optional[int] = None,
        includes: tuple[str, ...] = (),
        opened_index_limit: int = DEFAULT_OPENED_INDEX_LIMIT,
    ) -> None:
        self.session = session
        self._criteria = criteria
        self._order = order
        self._limit = limit
        self._includes = includes
        self._opened_index_limit = opened_index_limit

    def _clone(self, **changes: Any) -> 'NotificationQuery':
        state = {
            'criteria': self._criteria,
            'order': self._order,
            'limit': self._limit,
            'includes': self._includes,
            'opened_index_limit': self._opened_index_limit,
        }
        state.update(changes)
        return NotificationQuery(self.session, **state)

    @property
    def includes(self) -> tuple[str, ...]:
        return self._includes

    @property
    def order(self) -> Optional[Order]:
        return self._order

    # -- filters -------------------------------------------------------------

    def where(self, *clauses) -> 'NotificationQuery':
        return self._clone(criteria=self._criteria + tuple(clauses))

    def group_owners_only(self) -> 'NotificationQuery':
        return self.where(Notification.group_owner_id.is_(None))

    def group_members_only(self) -> 'NotificationQuery':
        return self.where(Notification.group_owner_id.is_not(None))

    def unopened_only(self) -> 'NotificationQuery':
        return self.where(Notification.opened_at.is_(None))

    def opened_only(self) -> 'NotificationQuery':
        return self.where(Notification.opened_at.is_not(None))

    def filtered_by_target(self, target) -> 'NotificationQuery':
        ref = Ref.of(target)
        return self.where(Notification.target_type == ref.type, Notification.target_id == ref.id)

    def filtered_by_instance(self, notifiable) -> 'NotificationQuery':
        ref = Ref.of(notifiable)
        return self.where(
            Notification.notifiable_type == ref.type,
            Notification.notifiable_id == ref.id,
        )

    def filtered_by_type(self, notifiable_type: str) -> 'NotificationQuery':
        return self.where(Notification.notifiable_type == notifiable_type)

    def filtered_by_group(self, group) -> 'NotificationQuery':
        ref = Ref.of(group)
        return self.where(Notification.group_type == ref.type, Notification.group_id == ref.id)

    def filtered_by_key(self, key: str) -> 'NotificationQuery':
        return self.where(Notification.key == key)

    def filtered_by_notifier(self, notifier) -> 'NotificationQuery':
        ref = Ref.of(notifier)
        return self.where(
            Notification.notifier_type == ref.type,
            Notification.notifier_id == ref.id,
        )

    # -- ordering and bounds ---------------------------------------------------

    def latest_order(self) -> 'NotificationQuery':
        return self._clone(order=Order.LATEST)

    def earliest_order(self) -> 'NotificationQuery':
        return self._clone(order=Order.EARLIEST)

    def limit(self, limit: int) -> 'NotificationQuery':
        if limit < 0:
            raise ValueError('limit must not be negative')
        return self._clone(limit=limit)

    # -- eager loading ---------------------------------------------------------
    # Polymorphic references stay opaque; their directives are carried in
    # ``includes`` for a resolver and never change which rows come back.

    def _include(self, name: str) -> 'NotificationQuery':
        if name in self._includes:
            return self
        return self._clone(includes=self._includes + (name,))

    def with_target(self) -> 'NotificationQuery':
        return self._include('target')

    def with_notifiable(self) -> 'NotificationQuery':
        return self._include('notifiable')

    def with_group(self) -> 'NotificationQuery':
        return self._include('group')

    def with_notifier(self) -> 'NotificationQuery':
        return self._include('notifier')

    def with_group_owner(self) -> 'NotificationQuery':
        return self._include('group_owner')

    def with_group_members(self) -> 'NotificationQuery':
        return self._include('group_members')

    # -- indexes ---------------------------------------------------------------

    def unopened_index(self) -> 'NotificationQuery':
        return self.unopened_only().group_owners_only().latest_order()

    def opened_index(self, limit: Optional[int] = None) -> 'NotificationQuery':
        if limit is None:
            limit = self._opened_index_limit
        # Bound the opened pool first, regardless of role; narrow to owners after.
        pool = self.opened_only().latest_order().limit(limit)
        return (
            self._clone(order=None, limit=None)
            .where(Notification.id.in_(pool.id_subquery()))
            .group_owners_only()
            .latest_order()
        )

    def unopened_index_group_members_only(self) -> 'NotificationQuery':
        owners = self.unopened_index()
        return self._clone(order=None, limit=None).where(
            Notification.group_owner_id.in_(owners.id_subquery())
        )

    def opened_index_group_members_only(self, limit: Optional[int] = None) -> 'NotificationQuery':
        owners = self.opened_index(limit)
        return self._clone(order=None, limit=None).where(
            Notification.group_owner_id.in_(owners.id_subquery())
        )

    # -- statements ------------------------------------------------------------

    def _order_by(self) -> tuple:
        if self._order is Order.LATEST:
            return (Notification.created_at.desc(), Notification.id.desc())
        if self._order is Order.EARLIEST:
            return (Notification.created_at.asc(), Notification.id.asc())
        return ()

    def _apply(self, statement):
        if self._criteria:
            statement = statement.where(*self._criteria)
        order_by = self._order_by()
        if order_by:
            statement = statement.order_by(*order_by)
        if self._limit is not None:
            statement = statement.limit(self._limit)
        return statement

    def id_subquery(self):
        # Wrapped in a derived table so LIMIT inside IN works on MySQL too.
        pool = self._apply(sa.select(Notification.id)).subquery()
        return sa.select(pool.c.id)

    def statement(self):
        statement = self._apply(select(Notification))
        if 'group_owner' in self._includes:
            statement = statement.options(selectinload(Notification.group_owner))
        if 'group_members' in self._includes:
            statement = statement.options(selectinload(Notification.group_members))
        return statement

    # -- materialisation -------------------------------------------------------

    def all(self) -> list[Notification]:
        return list(self.session.exec(self.statement()).all())

    def __iter__(self) -> Iterator[Notification]:
        return iter(self.all())

    def first(self) -> Optional[Notification]:
        limit = 1 if self._limit is None else min(self._limit, 1)
        return self.session.exec(self._clone(limit=limit).statement()).first()

    def latest(self) -> Optional[Notification]:
        return self.latest_order().first()

    def earliest(self) -> Optional[Notification]:
        return self.earliest_order().first()

    def ids(self) -> list[int]:
        return list(self.session.exec(self._apply(select(Notification.id))).all())

    def count(self) -> int:
        pool = self._apply(sa.select(Notification.id)).subquery()
        return self.session.exec(select(func.count()).select_from(pool)).one()

    def exists(self) -> bool:
        return self.first() is not None
