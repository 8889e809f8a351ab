from duelvault.db.database import (
    async_session_factory,
    build_engine,
    get_session,
    init_db,
    session_scope,
)
from duelvault.db.operations import (
    count_collection_items,
    count_user_decks,
    create_user,
    find_collection_item,
    get_card,
    get_card_by_konami_id,
    get_card_printings,
    get_collection_item,
    get_deck,
    get_owned_quantities,
    get_printing,
    get_printing_by_card_and_set,
    get_printing_by_set_code,
    get_printings_by_set_prefix,
    get_user,
    get_user_by_email,
    get_user_by_username,
    get_user_collection_items,
    get_user_decks,
)

__all__ = [
    "async_session_factory",
    "build_engine",
    "count_collection_items",
    "count_user_decks",
    "create_user",
    "find_collection_item",
    "get_card",
    "get_card_by_konami_id",
    "get_card_printings",
    "get_collection_item",
    "get_deck",
    "get_owned_quantities",
    "get_printing",
    "get_printing_by_card_and_set",
    "get_printing_by_set_code",
    "get_printings_by_set_prefix",
    "get_session",
    "get_user",
    "get_user_by_email",
    "get_user_by_username",
    "get_user_collection_items",
    "get_user_decks",
    "init_db",
    "session_scope",
]
