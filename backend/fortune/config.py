"""Application configuration for the Fruitful Fortune core and shell."""
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Server and game settings, overridable through FORTUNE_* variables."""

    model_config = ConfigDict(env_prefix="FORTUNE_")

    # Server
    debug: bool = False
    redis_url: str = "redis://localhost:6379/0"

    # Board
    rows: int = 3
    columns: int = 5
    max_board_retries: int = 1000
    min_multiplier: float = 0
    min_win_count: int = 0

    # Economy
    starting_coins: int = 100
    sandbox_coins: int = 1_000_000
    allowed_bets: list[int] = [1, 2, 5, 10]

    # Spin lifecycle
    celebration_delay_ms: int = 3000
    max_recent_spins: int = 10

    # Persistence keys
    state_key: str = "fruitfulFortune_gameState"
    high_scores_key: str = "fruitfulFortune_highScores"
    high_scores_limit: int = 10


settings = Settings()
