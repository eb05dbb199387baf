"""Game state models.

GameState and its parts are frozen: the state machine replaces them on every
mutation, so any snapshot handed out stays valid after the game moves on.
"""
from enum import Enum

from pydantic import ConfigDict, Field

from fortune.logic.glyphs import GlyphInstance
from fortune.logic.patterns import PatternType
from fortune.logic.schema import CamelModel


class GameStateType(str, Enum):
    """Spin lifecycle states."""
    MENU = "menu"
    IDLE = "idle"
    SPINNING = "spinning"
    EVALUATING = "evaluating"
    CELEBRATING = "celebrating"
    GAMEOVER = "gameover"


# States in which a game is running (game over may be raised from these)
ACTIVE_STATES = frozenset({
    GameStateType.IDLE,
    GameStateType.SPINNING,
    GameStateType.EVALUATING,
    GameStateType.CELEBRATING,
})


class Win(CamelModel):
    """One pattern match and its payout."""

    model_config = ConfigDict(frozen=True)

    symbols: list[GlyphInstance] = Field(default_factory=list)
    combination_type: PatternType
    pattern_name: str = ""
    base_value: int = 0
    multiplier: float = 1
    total_value: float = 0


class SpinResult(CamelModel):
    """Outcome of one resolved spin."""

    model_config = ConfigDict(frozen=True)

    board_symbols: list[list[GlyphInstance]] = Field(default_factory=list)
    wins: list[Win] = Field(default_factory=list)
    total_payout: int = 0
    is_jackpot: bool = False


class PlayerStats(CamelModel):
    """Coin balance and lifetime counters."""

    model_config = ConfigDict(frozen=True)

    coins: int = 100
    total_spins: int = 0
    total_wins: int = 0
    largest_win: int = 0


class GameState(CamelModel):
    """Full game state as published to subscribers and persisted."""

    model_config = ConfigDict(frozen=True)

    current_state: GameStateType = GameStateType.IDLE
    player_stats: PlayerStats = Field(default_factory=PlayerStats)
    current_multiplier: float = 1
    current_spin_result: SpinResult | None = None
    can_spin: bool = True
    recent_spins: list[SpinResult] = Field(default_factory=list)


def default_game_state(coins: int) -> GameState:
    """Fresh IDLE state with the given starting balance."""
    return GameState(player_stats=PlayerStats(coins=coins))
