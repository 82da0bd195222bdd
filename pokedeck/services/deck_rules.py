"""
Deck construction rules.

Pure checks, no I/O. The deck service calls these with the deck's
current state before writing anything.

Rules:
- A deck never holds more than MAX_DECK_SIZE cards.
- A deck holds at most MAX_COPIES_PER_CARD copies of any card, except
  basic Energy, which is unlimited.
- A deck is legal to play only at exactly MAX_DECK_SIZE cards.
"""

from collections.abc import Iterable

from pokedeck.config import MAX_COPIES_PER_CARD, MAX_DECK_SIZE
from pokedeck.models.card import Card
from pokedeck.models.deck import DeckValidation
from pokedeck.models.failure import InvariantViolationError


def copy_limit(card: Card) -> int | None:
    """Maximum copies of a card allowed in a deck, or None for unlimited."""
    if card.is_basic_energy:
        return None
    return MAX_COPIES_PER_CARD


def require_positive(quantity: int) -> None:
    if quantity <= 0:
        raise InvariantViolationError(
            f"Quantity must be a positive number (got {quantity})",
        )


def check_add(card: Card, current_size: int, existing_quantity: int, quantity: int) -> None:
    """
    Check that `quantity` more copies of `card` may be added.

    Args:
        card: Card being added
        current_size: Total cards in the deck now
        existing_quantity: Copies of this card in the deck now
        quantity: Copies to add

    Raises:
        InvariantViolationError: If the addition breaks a rule
    """
    require_positive(quantity)

    new_size = current_size + quantity
    if new_size > MAX_DECK_SIZE:
        raise InvariantViolationError(
            f"Cannot add {quantity} cards. Deck would have {new_size} cards "
            f"(max {MAX_DECK_SIZE})",
        )

    limit = copy_limit(card)
    if limit is not None and existing_quantity + quantity > limit:
        raise InvariantViolationError(
            f"Cannot have more than {limit} copies of {card.name} (non-basic Energy). "
            f"Current: {existing_quantity}, Adding: {quantity}",
        )


def check_set_quantity(card: Card, current_size: int, old_quantity: int, quantity: int) -> None:
    """
    Check that a card's quantity may be replaced with `quantity`.

    A quantity of zero is a removal and always allowed.

    Raises:
        InvariantViolationError: If the new quantity breaks a rule
    """
    if quantity < 0:
        raise InvariantViolationError(f"Quantity cannot be negative (got {quantity})")
    if quantity == 0:
        return

    limit = copy_limit(card)
    if limit is not None and quantity > limit:
        raise InvariantViolationError(
            f"Cannot have more than {limit} copies of {card.name} (non-basic Energy)",
        )

    new_size = current_size - old_quantity + quantity
    if new_size > MAX_DECK_SIZE:
        raise InvariantViolationError(
            f"Cannot update. Deck would have {new_size} cards (max {MAX_DECK_SIZE})",
        )


def validate_entries(entries: Iterable[tuple[Card, int]]) -> DeckValidation:
    """
    Check a deck's contents against every rule.

    All violations are reported, each with its own message: the size
    rule once, and the copy limit once per offending card.
    """
    items = list(entries)
    total = sum(quantity for _, quantity in items)
    errors: list[str] = []

    if total != MAX_DECK_SIZE:
        errors.append(f"Deck has {total} cards (must be exactly {MAX_DECK_SIZE})")

    for card, quantity in items:
        limit = copy_limit(card)
        if limit is not None and quantity > limit:
            errors.append(
                f"{card.name} has {quantity} copies (max {limit} for non-basic Energy)"
            )

    return DeckValidation(valid=not errors, total_cards=total, errors=errors)
