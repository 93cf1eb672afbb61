from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from moneycoach import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, COACH_MODEL, COACH_TIMEOUT_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Money Coach"
    debug: bool = True
    version: str = __version__

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "moneycoach.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Coach (chat-completion endpoint)
    coach_api_url: AnyHttpUrl = "https://api.openai.com/v1/chat/completions"
    coach_model: str = "gpt-3.5-turbo"
    coach_temperature: float = 0.8
    coach_max_tokens: int = 150
    coach_timeout_seconds: Optional[float] = None  # None = wait indefinitely

    # Dashboard
    history_limit: int = 20
    coach_poll_interval_ms: int = 1500

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        if self.history_limit <= 0:
            raise ValueError(
                f"history_limit must be positive, got {self.history_limit}"
            )
        if self.coach_timeout_seconds is not None and self.coach_timeout_seconds <= 0:
            raise ValueError("coach_timeout_seconds must be positive when set")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
