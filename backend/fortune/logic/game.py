"""Game coordinator: wires generation, reel stops, resolution and the state machine."""
import logging
from typing import Sequence

from fortune.config import Settings, settings as default_settings
from fortune.events import EventBus, EventType
from fortune.logic.board import BoardGenerator
from fortune.logic.economy import EconomyContext
from fortune.logic.glyphs import GlyphType, format_board
from fortune.logic.machine import Scheduler, SnapshotSink, SpinStateMachine
from fortune.logic.models import GameState, GameStateType, SpinResult
from fortune.logic.patterns import Board
from fortune.logic.payout import resolve_spin
from fortune.logic.reels import ReelCollector
from fortune.logic.rng import RNGBase


logger = logging.getLogger(__name__)


class FortuneGame:
    """
    One player's game.

    The reel/render layer calls request_spin() to get the target board, spins
    its reels, then calls reel_stopped() once per reel. The last report
    resolves the spin and hands the result to the state machine.
    """

    def __init__(
        self,
        machine: SpinStateMachine,
        generator: BoardGenerator,
        rows: int = 3,
        columns: int = 5,
        min_multiplier: float = 0,
        min_win_count: int = 0,
    ):
        self.machine = machine
        self.generator = generator
        self.rows = rows
        self.columns = columns
        self.min_multiplier = min_multiplier
        self.min_win_count = min_win_count
        self.reels = ReelCollector(rows, columns)

    @classmethod
    def create(
        cls,
        config: Settings = default_settings,
        bus: EventBus | None = None,
        store: SnapshotSink | None = None,
        scheduler: Scheduler | None = None,
        rng: RNGBase | None = None,
        initial_state: GameState | None = None,
    ) -> "FortuneGame":
        """Build a game from settings. Raises EconomyConfigError on a bad catalog."""
        economy = EconomyContext.default()
        machine = SpinStateMachine(
            bus=bus,
            economy=economy,
            store=store,
            scheduler=scheduler,
            initial_state=initial_state,
            starting_coins=config.starting_coins,
            sandbox_coins=config.sandbox_coins,
            celebration_delay_ms=config.celebration_delay_ms,
            max_recent_spins=config.max_recent_spins,
            strict_modifiers=config.debug,
        )
        generator = BoardGenerator(economy, rng=rng, max_retries=config.max_board_retries)
        return cls(
            machine,
            generator,
            rows=config.rows,
            columns=config.columns,
            min_multiplier=config.min_multiplier,
            min_win_count=config.min_win_count,
        )

    @property
    def bus(self) -> EventBus:
        return self.machine.bus

    @property
    def economy(self) -> EconomyContext:
        return self.machine.economy

    def request_spin(self, bet: int) -> Board | None:
        """
        Start a spin and draw its target board.

        Returns None when the machine refuses the bet.
        """
        if not self.machine.start_spin(bet):
            return None
        board = self.generator.generate(
            self.rows, self.columns, self.min_multiplier, self.min_win_count
        )
        logger.debug("Target board:\n%s", format_board(board))
        self.reels.begin(board)
        return board

    def reel_stopped(
        self, reel_index: int, glyph_types: Sequence[GlyphType]
    ) -> SpinResult | None:
        """
        Record one reel's final column. Returns the SpinResult on the last reel.

        Raises ReelMismatch if the glyphs differ from the target column; the
        spin is only ever resolved from the board drawn by request_spin().
        """
        if self.machine.current_state != GameStateType.SPINNING:
            logger.warning("Reel %d stopped outside a spin; ignored", reel_index)
            return None

        board = self.reels.report(reel_index, glyph_types, self.economy.glyphs)
        self.bus.publish(
            EventType.REEL_STOPPED,
            reel_index=reel_index,
            symbols=[g.value for g in glyph_types],
        )
        if board is None:
            return None

        self.bus.publish(
            EventType.ALL_REELS_STOPPED,
            board_symbols=[[cell.to_json_dict() for cell in row] for row in board],
        )
        result = resolve_spin(
            board, self.economy.patterns, self.machine.current_multiplier
        )
        for win in result.wins:
            self.bus.publish(EventType.WIN_DETECTED, win=win.to_json_dict())
        self.machine.end_spin(result)
        return result

    def check_game_over(self) -> bool:
        """Raise GAMEOVER if the player is broke between spins."""
        if self.machine.is_out_of_coins:
            return self.machine.game_over()
        return False

    def new_game(self) -> None:
        self.reels.cancel()
        self.machine.new_game()

    def sandbox(self) -> None:
        self.reels.cancel()
        self.machine.sandbox()
