from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# DECK CONSTRAINTS
# =============================================================================

# Copies of one cid allowed across main + extra + side (trash is exempt)
MAX_COPIES = 3

# Image variant used when a card arrives without a usable ciid
DEFAULT_CIID = 0


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DECKWRIGHT_")

    app_name: str = "deckwright"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./deckwright.db"

    # Regulation limits may lower this, never raise it
    max_copies: int = Field(default=MAX_COPIES, ge=0, le=MAX_COPIES)

    # "all_3": every card capped at max_copies
    # "regulation": forbidden/limited/semi-limited list lowers the cap
    card_limit_mode: Literal["all_3", "regulation"] = "all_3"

    max_command_history: int = Field(default=100, ge=1)


settings = Settings()
