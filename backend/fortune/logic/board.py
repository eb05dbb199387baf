"""Board generation by rejection sampling."""
import logging
import math
from typing import Callable, TypeVar

from fortune.logic.economy import EconomyContext
from fortune.logic.glyphs import create_glyph_instance
from fortune.logic.patterns import Board
from fortune.logic.payout import detect_wins
from fortune.logic.rng import ProductionRNG, RNGBase
from fortune.logic.sampler import GlyphSampler


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 1000


def retry_until(
    attempt: Callable[[], T],
    accept: Callable[[T], bool],
    max_attempts: int,
    on_exhausted: Callable[[T | None], T],
) -> T:
    """
    Call attempt() until accept() passes or max_attempts runs out.

    On exhaustion the last candidate goes to on_exhausted, whose return value
    is the result. Always terminates after max_attempts calls.
    """
    candidate: T | None = None
    for _ in range(max_attempts):
        candidate = attempt()
        if accept(candidate):
            return candidate
    return on_exhausted(candidate)


class BoardGenerator:
    """
    Draws boards that satisfy win constraints.

    If no acceptable board turns up within max_retries draws, the last
    candidate is returned anyway. Termination wins over the constraints.
    """

    def __init__(
        self,
        economy: EconomyContext,
        rng: RNGBase | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        self.economy = economy
        self.rng = rng or ProductionRNG()
        self.max_retries = max_retries

    def draw_board(self, rows: int, columns: int) -> Board:
        """One unconstrained board, each cell drawn independently."""
        sampler = GlyphSampler(self.economy.glyphs, self.rng)
        return [
            [create_glyph_instance(sampler.draw(), row, col) for col in range(columns)]
            for row in range(rows)
        ]

    def generate(
        self,
        rows: int = 3,
        columns: int = 5,
        min_multiplier: float = 0,
        min_win_count: int = 0,
    ) -> Board:
        """Row-major board meeting the thresholds, or the last try if none did."""

        def accept(board: Board) -> bool:
            wins = detect_wins(board, self.economy.patterns)
            lowest = min((win.multiplier for win in wins), default=math.inf)
            return lowest >= min_multiplier and len(wins) >= min_win_count

        def give_up(board: Board | None) -> Board:
            logger.warning(
                "Board constraints not met after %d attempts "
                "(min_multiplier=%s, min_win_count=%d); using last candidate",
                self.max_retries,
                min_multiplier,
                min_win_count,
            )
            if board is None:
                return self.draw_board(rows, columns)
            return board

        return retry_until(
            lambda: self.draw_board(rows, columns),
            accept,
            self.max_retries,
            give_up,
        )


def get_board_column(board: Board, column: int) -> list:
    """Cells of one column, top to bottom."""
    return [row[column] for row in board]
