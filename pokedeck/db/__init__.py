from pokedeck.db.database import get_session, init_db, session_scope
from pokedeck.db.operations import (
    card_to_model,
    collection_to_model,
    count_cards,
    create_deck,
    deck_to_model,
    get_card,
    get_collection_entries,
    get_collection_entry,
    get_deck,
    get_owned_embedded_cards,
    list_card_ids,
    list_cards,
    list_decks,
    search_cards,
    set_card_embedding,
    upsert_card,
)

__all__ = [
    "card_to_model",
    "collection_to_model",
    "count_cards",
    "create_deck",
    "deck_to_model",
    "get_card",
    "get_collection_entries",
    "get_collection_entry",
    "get_deck",
    "get_owned_embedded_cards",
    "get_session",
    "init_db",
    "list_card_ids",
    "list_cards",
    "list_decks",
    "search_cards",
    "session_scope",
    "set_card_embedding",
    "upsert_card",
]
