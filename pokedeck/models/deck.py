from dataclasses import dataclass, field
from datetime import datetime

from pokedeck.models.card import Card


@dataclass
class DeckEntry:
    """A card in a deck and how many copies it holds."""

    card: Card
    quantity: int


@dataclass
class Deck:
    """
    A user's named deck.

    Attributes:
        id: Generated deck id
        user_id: Owner of the deck
        name: Display name (never empty)
        entries: Cards in the deck, one entry per distinct card
        created_at: When the deck was created
    """

    id: str
    user_id: str
    name: str
    entries: list[DeckEntry] = field(default_factory=list)
    created_at: datetime | None = None

    def total_cards(self) -> int:
        """Total cards in the deck, counting copies."""
        return sum(entry.quantity for entry in self.entries)

    def quantity_of(self, card_id: str) -> int:
        """Copies of a card currently in the deck."""
        for entry in self.entries:
            if entry.card.id == card_id:
                return entry.quantity
        return 0


@dataclass
class DeckValidation:
    """Result of checking a deck against the construction rules."""

    valid: bool
    total_cards: int
    errors: list[str] = field(default_factory=list)
