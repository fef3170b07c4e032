"""API router for version 1."""
from fastapi import APIRouter

from english_chat.api.v1.endpoints import auth, chats, users


api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(chats.router)
