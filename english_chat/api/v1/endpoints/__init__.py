"""API endpoint modules for v1."""

from english_chat.api.v1.endpoints import auth, chats, users

__all__ = ["auth", "chats", "users"]
