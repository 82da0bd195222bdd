from pokedeck.api.advisor import router as advisor_router
from pokedeck.api.cards import router as cards_router
from pokedeck.api.collection import router as collection_router
from pokedeck.api.decks import router as decks_router
from pokedeck.api.health import router as health_router

__all__ = [
    "advisor_router",
    "cards_router",
    "collection_router",
    "decks_router",
    "health_router",
]
