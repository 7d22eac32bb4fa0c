from pydantic_settings import BaseSettings, SettingsConfigDict

# Canonical release order of SWU sets; drives set grouping and identifier ordering
SET_ORDER: tuple[str, ...] = ("SOR", "SHD", "TWI", "JTL", "LOF", "IBH", "SEC")

# CORS proxies tried in order after a direct fetch
DEFAULT_CORS_PROXIES: tuple[str, ...] = (
    "https://api.allorigins.win/raw?url=",
    "https://api.allorigins.win/get?url=",
    "https://thingproxy.freeboard.io/fetch/",
    "https://cors.bridged.cc/",
)


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SWUVIEWER_")

    app_name: str = "SWU Deck Viewer"
    debug: bool = False

    # Base location of per-set card files: a URL or a local directory
    card_data_url: str = "data"

    card_api_url: str = "https://api.swu-db.com/cards"
    deck_api_url: str = "https://swudb.com/api/getDeckJson"
    deck_site_url: str = "https://swudb.com/deck"
    card_image_url: str = "https://cdn.swu-db.com/images/cards"

    cors_proxies: list[str] = list(DEFAULT_CORS_PROXIES)
    prefer_direct_fetch: bool = True

    fetch_retries: int = 3
    fetch_backoff_seconds: float = 0.5
    request_timeout: float = 10.0

    max_recent_decks: int = 8

    set_order: list[str] = list(SET_ORDER)


settings = Settings()
