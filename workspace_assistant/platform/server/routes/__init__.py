from fastapi import APIRouter

from workspace_assistant.platform.server.routes.base import base_router

root = APIRouter()
root.include_router(base_router)
