from fastapi import APIRouter

from timeoff_admin.api.feeds import feeds_router
from timeoff_admin.api.settings import settings_router
from timeoff_admin.api.users import users_router

api_router = APIRouter()
api_router.include_router(settings_router)
api_router.include_router(users_router)
api_router.include_router(feeds_router)
