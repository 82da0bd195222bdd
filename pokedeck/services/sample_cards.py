"""
Sample cards for local development.

A handful of real Base Set cards covering each shape the catalog stores:
Pokémon with and without abilities, an attack with no damage, a Trainer
with rules text and Basic Energy. They let the deck rules, collection and
similarity features be exercised without syncing from the catalog.
"""

from pokedeck.models.card import ENERGY, POKEMON, TRAINER, Ability, Attack, Card, TypeModifier

_IMAGE_BASE = "https://images.pokemontcg.io/base1"


def _base_set_card(number: int, **fields: object) -> Card:
    return Card(
        id=f"base1-{number}",
        image_small=f"{_IMAGE_BASE}/{number}.png",
        image_large=f"{_IMAGE_BASE}/{number}_hires.png",
        set_id="base1",
        set_name="Base",
        **fields,  # type: ignore[arg-type]
    )


def _basic_energy(number: int, energy_type: str) -> Card:
    return _base_set_card(
        number,
        name=f"{energy_type} Energy",
        category=ENERGY,
        subtypes=("Basic",),
        types=(energy_type,),
    )


SAMPLE_CARDS: tuple[Card, ...] = (
    _base_set_card(
        4,
        name="Charizard",
        category=POKEMON,
        subtypes=("Stage 2",),
        hp="120",
        types=("Fire",),
        attacks=(
            Attack(
                name="Fire Spin",
                cost=("Fire", "Fire", "Fire", "Fire"),
                damage="100",
                text="Discard 2 Energy cards attached to Charizard in order to use this attack.",
            ),
        ),
        weaknesses=(TypeModifier(type="Water", value="×2"),),
        resistances=(TypeModifier(type="Fighting", value="-30"),),
        retreat_cost=("Colorless", "Colorless", "Colorless"),
    ),
    _base_set_card(
        2,
        name="Blastoise",
        category=POKEMON,
        subtypes=("Stage 2",),
        hp="100",
        types=("Water",),
        abilities=(
            Ability(
                name="Rain Dance",
                text=(
                    "As often as you like during your turn, you may attach 1 Water "
                    "Energy card to 1 of your Water Pokémon."
                ),
                kind="Pokémon Power",
            ),
        ),
        attacks=(
            Attack(
                name="Hydro Pump",
                cost=("Water", "Water", "Water"),
                damage="40+",
                text=(
                    "Does 40 damage plus 10 more damage for each Water Energy attached "
                    "to Blastoise but not used to pay for this attack."
                ),
            ),
        ),
        weaknesses=(TypeModifier(type="Lightning", value="×2"),),
        retreat_cost=("Colorless", "Colorless", "Colorless"),
    ),
    _base_set_card(
        15,
        name="Venusaur",
        category=POKEMON,
        subtypes=("Stage 2",),
        hp="100",
        types=("Grass",),
        abilities=(
            Ability(
                name="Energy Trans",
                text=(
                    "As often as you like during your turn, you may take 1 Grass Energy "
                    "card attached to 1 of your Pokémon and attach it to a different one."
                ),
                kind="Pokémon Power",
            ),
        ),
        attacks=(Attack(name="Solarbeam", cost=("Grass",) * 4, damage="60"),),
        weaknesses=(TypeModifier(type="Fire", value="×2"),),
        retreat_cost=("Colorless", "Colorless"),
    ),
    _base_set_card(
        44,
        name="Bulbasaur",
        category=POKEMON,
        subtypes=("Basic",),
        hp="40",
        types=("Grass",),
        attacks=(
            Attack(
                name="Leech Seed",
                cost=("Grass", "Grass"),
                damage="20",
                text=(
                    "Unless all damage from this attack is prevented, you may remove "
                    "1 damage counter from Bulbasaur."
                ),
            ),
        ),
        weaknesses=(TypeModifier(type="Fire", value="×2"),),
        retreat_cost=("Colorless",),
    ),
    _base_set_card(
        46,
        name="Charmander",
        category=POKEMON,
        subtypes=("Basic",),
        hp="50",
        types=("Fire",),
        attacks=(
            Attack(name="Scratch", cost=("Colorless",), damage="10"),
            Attack(
                name="Ember",
                cost=("Fire", "Colorless"),
                damage="30",
                text="Discard 1 Fire Energy card attached to Charmander in order to use this attack.",
            ),
        ),
        weaknesses=(TypeModifier(type="Water", value="×2"),),
        retreat_cost=("Colorless",),
    ),
    _base_set_card(
        63,
        name="Squirtle",
        category=POKEMON,
        subtypes=("Basic",),
        hp="40",
        types=("Water",),
        attacks=(
            Attack(
                name="Bubble",
                cost=("Water",),
                damage="10",
                text="Flip a coin. If heads, the Defending Pokémon is now Paralyzed.",
            ),
            Attack(
                name="Withdraw",
                cost=("Water", "Colorless"),
                text=(
                    "Flip a coin. If heads, prevent all damage done to Squirtle during "
                    "your opponent's next turn."
                ),
            ),
        ),
        weaknesses=(TypeModifier(type="Lightning", value="×2"),),
        retreat_cost=("Colorless",),
    ),
    _base_set_card(
        93,
        name="Gust of Wind",
        category=TRAINER,
        subtypes=("Item",),
        rules=(
            "Choose 1 of your opponent's Benched Pokémon and switch it with the "
            "Defending Pokémon.",
        ),
    ),
    _basic_energy(97, "Fire"),
    _basic_energy(102, "Water"),
    _basic_energy(99, "Grass"),
)


def get_sample_cards() -> tuple[Card, ...]:
    """The bundled sample cards."""
    return SAMPLE_CARDS
