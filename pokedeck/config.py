from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "PokeDeck"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/pokedeck"

    # External card catalog
    pokemon_tcg_api_url: str = "https://api.pokemontcg.io/v2"
    pokemon_tcg_api_key: str = ""
    sync_page_size: int = 250
    sync_page_timeout: float = 30.0
    sync_page_delay: float = 1.0

    # Recurring catalog sync (UTC time of day)
    scheduled_sync_enabled: bool = False
    scheduled_sync_hour: int = 0
    scheduled_sync_minute: int = 0
    scheduled_sync_format: str = "standard"
    scheduled_sync_pages: int = 5

    # Similarity index
    embedding_api_url: str = "https://api.openai.com/v1"
    embedding_api_key: str = ""
    embedding_model: str = "text-embedding-3-small"

    # Deck advice
    anthropic_api_key: str = ""
    advice_model: str = "claude-sonnet-4-20250514"
    advice_max_tokens: int = 500


settings = Settings()


# =============================================================================
# DECK CONSTRUCTION RULES
# =============================================================================

# A legal deck holds exactly this many cards, and never more at any point
MAX_DECK_SIZE = 60

# Copies allowed per card, except basic Energy
MAX_COPIES_PER_CARD = 4
