"""CRUD operations module."""

from cinecrib.db.crud.content import (
    get_content,
    is_on_watchlist,
    list_active_streaming_services,
    list_genres,
    list_moods,
)
from cinecrib.db.crud.preferences import (
    get_or_create_settings,
    get_preferences,
    update_preferences,
)
from cinecrib.db.crud.users import authenticate_user, create_user, get_user_by_email
from cinecrib.db.crud.watchlist import add_to_watchlist, get_watchlist, remove_from_watchlist

__all__ = [
    "add_to_watchlist",
    "authenticate_user",
    "create_user",
    "get_content",
    "get_or_create_settings",
    "get_preferences",
    "get_user_by_email",
    "get_watchlist",
    "is_on_watchlist",
    "list_active_streaming_services",
    "list_genres",
    "list_moods",
    "remove_from_watchlist",
    "update_preferences",
]
