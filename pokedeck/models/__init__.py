from pokedeck.models.card import (
    CARD_CATEGORIES,
    ENERGY,
    POKEMON,
    TRAINER,
    Ability,
    Attack,
    Card,
    TypeModifier,
    is_basic_energy,
)
from pokedeck.models.collection import Collection, CollectionEntry, CollectionStats
from pokedeck.models.deck import Deck, DeckEntry, DeckValidation
from pokedeck.models.failure import (
    EmbeddingError,
    FailureDetail,
    FailureKind,
    InvariantViolationError,
    KnownError,
    NotFoundError,
    ServiceUnavailableError,
    UpstreamError,
)

__all__ = [
    "Ability",
    "Attack",
    "CARD_CATEGORIES",
    "Card",
    "Collection",
    "CollectionEntry",
    "CollectionStats",
    "Deck",
    "DeckEntry",
    "DeckValidation",
    "ENERGY",
    "EmbeddingError",
    "FailureDetail",
    "FailureKind",
    "InvariantViolationError",
    "KnownError",
    "NotFoundError",
    "POKEMON",
    "ServiceUnavailableError",
    "TRAINER",
    "TypeModifier",
    "UpstreamError",
    "is_basic_energy",
]
