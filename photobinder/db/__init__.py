from photobinder.db.database import get_session, init_db
from photobinder.db.operations import (
    clear_entries,
    get_entry,
    list_keys,
    remove_entry,
    set_entry,
)

__all__ = [
    "clear_entries",
    "get_entry",
    "get_session",
    "init_db",
    "list_keys",
    "remove_entry",
    "set_entry",
]
