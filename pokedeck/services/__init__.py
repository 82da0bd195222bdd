from pokedeck.services.advisor import Advice, get_advice
from pokedeck.services.collection_service import (
    add_to_collection,
    compute_stats,
    get_collection,
    get_collection_stats,
    remove_from_collection,
    update_collection_quantity,
)
from pokedeck.services.deck_rules import check_add, check_set_quantity, validate_entries
from pokedeck.services.deck_service import (
    add_card,
    create_user_deck,
    delete_deck,
    get_user_deck,
    list_user_decks,
    remove_card,
    rename_deck,
    set_card_quantity,
    validate_deck,
)
from pokedeck.services.key_locks import KeyedLocks
from pokedeck.services.sample_cards import SAMPLE_CARDS, get_sample_cards
from pokedeck.services.similarity import (
    EmbedResult,
    ScoredCard,
    card_to_text,
    embed_all_cards,
    embed_card,
    index_card,
    search_similar,
)

__all__ = [
    "Advice",
    "EmbedResult",
    "KeyedLocks",
    "SAMPLE_CARDS",
    "ScoredCard",
    "add_card",
    "add_to_collection",
    "card_to_text",
    "check_add",
    "check_set_quantity",
    "compute_stats",
    "create_user_deck",
    "delete_deck",
    "embed_all_cards",
    "embed_card",
    "get_advice",
    "get_collection",
    "get_collection_stats",
    "get_sample_cards",
    "get_user_deck",
    "index_card",
    "list_user_decks",
    "remove_card",
    "remove_from_collection",
    "rename_deck",
    "search_similar",
    "set_card_quantity",
    "update_collection_quantity",
    "validate_deck",
    "validate_entries",
]
