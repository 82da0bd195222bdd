from dataclasses import dataclass
from typing import Any

# Card supertypes as reported by the catalog
POKEMON = "Pokémon"
TRAINER = "Trainer"
ENERGY = "Energy"

CARD_CATEGORIES = frozenset({POKEMON, TRAINER, ENERGY})


def is_basic_energy(category: str, subtypes: tuple[str, ...] | list[str]) -> bool:
    """
    Check whether a card is exempt from the per-card copy limit.

    Only Energy cards carrying the "Basic" subtype qualify.
    """
    return category == ENERGY and "Basic" in subtypes


@dataclass(frozen=True, slots=True)
class Ability:
    """A named card ability (e.g. "Rain Dance", kind "Pokémon Power")."""

    name: str
    text: str
    kind: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "text": self.text, "type": self.kind}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ability":
        return cls(
            name=data.get("name", ""),
            text=data.get("text", ""),
            kind=data.get("type", ""),
        )


@dataclass(frozen=True, slots=True)
class Attack:
    """
    A card attack.

    Attributes:
        name: Attack name
        cost: Energy cost tokens (e.g. ("Fire", "Colorless"))
        damage: Damage as printed; may carry a suffix such as "+" or "×"
        text: Rules text of the attack
    """

    name: str
    cost: tuple[str, ...] = ()
    damage: str = ""
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cost": list(self.cost),
            "damage": self.damage,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Attack":
        return cls(
            name=data.get("name", ""),
            cost=tuple(data.get("cost") or ()),
            damage=data.get("damage") or "",
            text=data.get("text") or "",
        )


@dataclass(frozen=True, slots=True)
class TypeModifier:
    """A weakness or resistance entry, e.g. Water ×2 or Fighting -30."""

    type: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TypeModifier":
        return cls(type=data.get("type", ""), value=data.get("value", ""))


@dataclass(frozen=True, slots=True)
class Card:
    """
    A catalog card, keyed by its stable external id.

    Structured sections (abilities, attacks, weaknesses, resistances) are
    None when the catalog omits them, which is distinct from an empty tuple.

    Attributes:
        id: External catalog id (e.g. "base1-4")
        name: Display name
        category: Supertype, one of CARD_CATEGORIES
        subtypes: Subtype tags (e.g. ("Stage 2",), ("Basic",))
        hp: Hit points as printed, None when the card has none
        types: Elemental types
        retreat_cost: Retreat cost tokens
        rules: Free-text rule lines
        image_small: Small image URI
        image_large: Large image URI
        set_id: Owning set id
        set_name: Owning set name
    """

    id: str
    name: str
    category: str
    subtypes: tuple[str, ...] = ()
    hp: str | None = None
    types: tuple[str, ...] = ()
    abilities: tuple[Ability, ...] | None = None
    attacks: tuple[Attack, ...] | None = None
    weaknesses: tuple[TypeModifier, ...] | None = None
    resistances: tuple[TypeModifier, ...] | None = None
    retreat_cost: tuple[str, ...] = ()
    rules: tuple[str, ...] = ()
    image_small: str | None = None
    image_large: str | None = None
    set_id: str | None = None
    set_name: str | None = None

    @property
    def is_basic_energy(self) -> bool:
        return is_basic_energy(self.category, self.subtypes)
