from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "DeckCoach"
    debug: bool = False

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    llm_timeout_seconds: float = 120.0

    scryfall_base_url: str = "https://api.scryfall.com"
    catalog_timeout_seconds: float = 10.0

    # Scryfall asks for at most 10 requests per second
    catalog_request_spacing_seconds: float = 0.1

    # None keeps every lookup for the life of the process; N enables LRU-N eviction
    catalog_cache_max_entries: int | None = None

    deck_path: Path = Path("deck.json")
    prompts_dir: Path = PACKAGE_DIR / "prompts"


settings = Settings()
