from dataclasses import dataclass, field

from pokedeck.models.card import Card


@dataclass
class CollectionEntry:
    """Copies of one card owned by a user. Quantity is always positive."""

    card: Card
    quantity: int


@dataclass
class Collection:
    """
    A user's card collection.

    Cards are tracked by catalog id. A card the user does not own has no
    entry at all rather than an entry with quantity zero.
    """

    user_id: str
    entries: list[CollectionEntry] = field(default_factory=list)

    def total_cards(self) -> int:
        """Total number of cards in collection."""
        return sum(entry.quantity for entry in self.entries)

    def unique_cards(self) -> int:
        """Number of unique cards in collection."""
        return len(self.entries)


@dataclass
class CollectionStats:
    """
    Aggregate view of a collection.

    A card with several elemental types counts its full quantity toward
    each of them in by_type.
    """

    total_cards: int = 0
    unique_cards: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
