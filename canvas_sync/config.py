"""Application configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PARTICIPANT_COLORS = [
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
    "#FFA07A",
    "#98D8C8",
    "#F7DC6F",
    "#BB8FCE",
    "#85C1E2",
    "#F8B739",
    "#52BE80",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env``.

    Priority: environment variables > .env > defaults
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    dev_mode: bool = True  # Set to False in production; enables live reload

    # Rooms
    default_room_id: str = "default"  # Used when join omits roomId
    participant_colors: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PARTICIPANT_COLORS), min_length=1
    )

    # Limits
    max_operations_per_minute: int = 600  # draw-start/erase-start per participant (0 = unlimited)

    # Logging
    log_json: bool = False  # JSON logs in dev when true; production always uses JSON
    log_file: str = "data/logs/app.log"  # Production only
    error_log_file: str = "data/logs/error.log"  # Production only


settings = Settings()
