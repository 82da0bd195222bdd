from pokedeck.parsers.pokemon_tcg import CardPayloadError, parse_card

__all__ = [
    "CardPayloadError",
    "parse_card",
]
