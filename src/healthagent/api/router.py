"""Main API router aggregating all routes."""

from fastapi import APIRouter

from healthagent.api.routes import chat

api_router = APIRouter()
api_router.include_router(chat.router)

__all__ = ["api_router"]
