from fastapi import APIRouter
from notification_store.api.v1 import health, notifications, targets
from notification_store.core.config import settings

api_router = APIRouter(prefix=settings.API_V1_PREFIX)

api_router.include_router(health.router, tags=['health'])
api_router.include_router(notifications.router)
api_router.include_router(targets.router)
