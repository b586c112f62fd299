from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from notification_store.api.deps import get_store
from notification_store.schemas.notification import IndexFilter, NotificationOut, OpenAllResult
from notification_store.schemas.refs import Ref
from notification_store.services.notification_query import NotificationQuery
from notification_store.services.notification_service import NotificationStore

router = APIRouter(prefix='/targets/{target_type}/{target_id}/notifications', tags=['targets'])


def _scoped(
    store: NotificationStore,
    target: Ref,
    key: Optional[str],
    notifiable_type: Optional[str],
    group_type: Optional[str],
    group_id: Optional[str],
) -> NotificationQuery:
    query = store.for_target(target)
    if key:
        query = query.filtered_by_key(key)
    if notifiable_type:
        query = query.filtered_by_type(notifiable_type)
    if group_type or group_id:
        if not (group_type and group_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='group_type and group_id must be given together',
            )
        query = query.filtered_by_group(Ref(type=group_type, id=group_id))
    return query


@router.get('', response_model=list[NotificationOut])
def list_target_notifications_endpoint(
    target_type: str,
    target_id: str,
    index_filter: IndexFilter = Query(default=IndexFilter.AUTO, alias='filter'),
    limit: Optional[int] = Query(default=None, ge=1),
    key: Optional[str] = None,
    notifiable_type: Optional[str] = None,
    group_type: Optional[str] = None,
    group_id: Optional[str] = None,
    store: NotificationStore = Depends(get_store),
) -> list[NotificationOut]:
    target = Ref(type=target_type, id=target_id)
    query = _scoped(store, target, key, notifiable_type, group_type, group_id)
    if index_filter is IndexFilter.UNOPENED:
        records = query.unopened_index().all()
    elif index_filter is IndexFilter.OPENED:
        records = query.opened_index(limit).all()
    else:
        records = query.unopened_index().all() + query.opened_index(limit).all()
    return [NotificationOut.from_record(record) for record in records]


@router.post('/open-all', response_model=OpenAllResult)
def open_all_target_notifications_endpoint(
    target_type: str,
    target_id: str,
    key: Optional[str] = None,
    notifiable_type: Optional[str] = None,
    group_type: Optional[str] = None,
    group_id: Optional[str] = None,
    store: NotificationStore = Depends(get_store),
) -> OpenAllResult:
    target = Ref(type=target_type, id=target_id)
    query = _scoped(store, target, key, notifiable_type, group_type, group_id)
    return OpenAllResult(opened=store.open_all(query))
