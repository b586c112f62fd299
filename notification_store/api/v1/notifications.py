from fastapi import APIRouter, Depends, status

from notification_store.api.deps import get_notification_or_404, get_store
from notification_store.schemas.notification import NotificationCreate, NotificationOut, OpenResult
from notification_store.services.notification_service import NotificationStore

router = APIRouter(prefix='/notifications', tags=['notifications'])


@router.post('', response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
def create_notification_endpoint(
    payload: NotificationCreate,
    store: NotificationStore = Depends(get_store),
) -> NotificationOut:
    record = store.create(
        target=payload.target,
        notifiable=payload.notifiable,
        key=payload.key,
        group=payload.group,
        group_owner=payload.group_owner_id,
        notifier=payload.notifier,
        parameters=payload.parameters,
    )
    return NotificationOut.from_record(record)


@router.get('/{notification_id}', response_model=NotificationOut)
def get_notification_endpoint(
    notification_id: int,
    store: NotificationStore = Depends(get_store),
) -> NotificationOut:
    return NotificationOut.from_record(get_notification_or_404(notification_id, store))


@router.get('/{notification_id}/group-members', response_model=list[NotificationOut])
def list_group_members_endpoint(
    notification_id: int,
    store: NotificationStore = Depends(get_store),
) -> list[NotificationOut]:
    owner = get_notification_or_404(notification_id, store)
    members = store.group_members(owner).latest_order()
    return [NotificationOut.from_record(record) for record in members]


@router.post('/{notification_id}/open', response_model=OpenResult)
def open_notification_endpoint(
    notification_id: int,
    with_members: bool = False,
    store: NotificationStore = Depends(get_store),
) -> OpenResult:
    record = get_notification_or_404(notification_id, store)
    opened = store.open(record, with_members=with_members)
    return OpenResult(opened=opened, notification=NotificationOut.from_record(record))
