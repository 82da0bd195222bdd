"""
Pokémon TCG API card parser.

Normalizes raw card objects from the catalog API into Card models.

Missing list fields (subtypes, types, retreatCost, rules) become empty
tuples. Missing scalars (hp, images, set) become None, never "".
Missing structured sections (abilities, attacks, weaknesses,
resistances) stay None so that "no abilities" and "empty abilities"
remain distinguishable.

API docs: https://docs.pokemontcg.io/api-reference/cards/card-object
"""

from typing import Any

from pokedeck.models.card import Ability, Attack, Card, TypeModifier


class CardPayloadError(ValueError):
    """Raised when a raw card lacks the fields needed to identify it."""

    pass


def _optional_str(value: Any) -> str | None:
    """Treat missing, null and blank values alike."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(item) for item in value)


def _section(raw: dict[str, Any], key: str, cls: Any) -> Any:
    value = raw.get(key)
    if value is None:
        return None
    return tuple(cls.from_dict(item) for item in value)


def parse_card(raw: dict[str, Any]) -> Card:
    """
    Parse one card object from the catalog API.

    Args:
        raw: Card object as returned in the `data` array of /cards

    Returns:
        Normalized Card

    Raises:
        CardPayloadError: If id, name or supertype is missing, or a field
            has the wrong shape
    """
    if not isinstance(raw, dict):
        raise CardPayloadError(f"Card payload is not an object: {raw!r}")

    card_id = _optional_str(raw.get("id"))
    name = _optional_str(raw.get("name"))
    category = _optional_str(raw.get("supertype"))

    if card_id is None or name is None or category is None:
        raise CardPayloadError(f"Card payload missing id, name or supertype: id={card_id!r}")

    try:
        return _build_card(raw, card_id, name, category)
    except (AttributeError, TypeError) as e:
        raise CardPayloadError(f"Card {card_id} has a malformed field: {e}") from e


def _build_card(raw: dict[str, Any], card_id: str, name: str, category: str) -> Card:
    images = raw.get("images") or {}
    card_set = raw.get("set") or {}

    return Card(
        id=card_id,
        name=name,
        category=category,
        subtypes=_str_tuple(raw.get("subtypes")),
        hp=_optional_str(raw.get("hp")),
        types=_str_tuple(raw.get("types")),
        abilities=_section(raw, "abilities", Ability),
        attacks=_section(raw, "attacks", Attack),
        weaknesses=_section(raw, "weaknesses", TypeModifier),
        resistances=_section(raw, "resistances", TypeModifier),
        retreat_cost=_str_tuple(raw.get("retreatCost")),
        rules=_str_tuple(raw.get("rules")),
        image_small=_optional_str(images.get("small")),
        image_large=_optional_str(images.get("large")),
        set_id=_optional_str(card_set.get("id")),
        set_name=_optional_str(card_set.get("name")),
    )
