"""Reel stop collection and game coordinator tests."""
import pytest

from conftest import (
    ALL_CHERRY_ROWS,
    NO_WIN_ROWS,
    C,
    P,
    ManualScheduler,
    RecordingListener,
    RecordingStore,
    make_board,
    to_reels,
)

from fortune.config import Settings
from fortune.events import EventBus
from fortune.logic.game import FortuneGame
from fortune.logic.glyphs import GlyphCatalog
from fortune.logic.models import GameStateType
from fortune.logic.payout import detect_wins
from fortune.logic.reels import ReelCollector, ReelMismatch
from fortune.logic.rng import SeededRNG


def started_collector(rows) -> ReelCollector:
    collector = ReelCollector(3, 5)
    collector.begin(make_board(rows))
    return collector


class TestReelCollector:
    def test_completes_after_last_reel_in_any_order(self):
        collector = started_collector(NO_WIN_ROWS)
        catalog = GlyphCatalog.default()
        reels = to_reels(NO_WIN_ROWS)

        for index in (4, 0, 3, 1):
            assert collector.report(index, reels[index], catalog) is None
        board = collector.report(2, reels[2], catalog)

        assert [[cell.type for cell in row] for row in board] == NO_WIN_ROWS
        assert board[1][3].row == 1 and board[1][3].column == 3
        assert collector.active is False

    def test_completed_board_has_fresh_flags(self):
        collector = ReelCollector(3, 5)
        target = make_board(ALL_CHERRY_ROWS)
        target[0][0].is_winning = True
        collector.begin(target)
        catalog = GlyphCatalog.default()

        board = None
        for index, column in enumerate(to_reels(ALL_CHERRY_ROWS)):
            board = collector.report(index, column, catalog)

        assert not any(cell.is_winning for row in board for cell in row)

    def test_duplicate_report_counts_once(self):
        collector = started_collector(ALL_CHERRY_ROWS)
        catalog = GlyphCatalog.default()

        collector.report(0, [C, C, C], catalog)
        collector.report(0, [C, C, C], catalog)

        assert collector.stopped_count == 1

    def test_report_differing_from_target_refused(self):
        collector = started_collector(NO_WIN_ROWS)

        with pytest.raises(ReelMismatch):
            collector.report(0, [P, P, P], GlyphCatalog.default())

        assert collector.stopped_count == 0
        assert collector.active is True

    def test_out_of_range_ignored(self):
        collector = started_collector(ALL_CHERRY_ROWS)

        assert collector.report(5, [C, C, C], GlyphCatalog.default()) is None
        assert collector.report(-1, [C, C, C], GlyphCatalog.default()) is None
        assert collector.stopped_count == 0

    def test_wrong_column_height_raises(self):
        collector = started_collector(ALL_CHERRY_ROWS)

        with pytest.raises(ValueError):
            collector.report(0, [C, C], GlyphCatalog.default())

    def test_report_without_spin_ignored(self):
        collector = ReelCollector(3, 5)

        assert collector.report(0, [C, C, C], GlyphCatalog.default()) is None
        assert collector.stopped_count == 0


@pytest.fixture
def game(bus: EventBus, recording_store: RecordingStore, scheduler: ManualScheduler) -> FortuneGame:
    return FortuneGame.create(
        Settings(),
        bus=bus,
        store=recording_store,
        scheduler=scheduler,
        rng=SeededRNG(77),
    )


def fix_next_board(game: FortuneGame, rows, monkeypatch) -> None:
    """Make the generator draw a known board."""
    monkeypatch.setattr(
        game.generator,
        "generate",
        lambda *args, **kwargs: make_board(rows, game.economy.glyphs),
    )


def stop_all(game: FortuneGame, rows):
    result = None
    for index, column in enumerate(to_reels(rows)):
        result = game.reel_stopped(index, column)
    return result


def board_types(board):
    return [[cell.type for cell in row] for row in board]


class TestFortuneGame:
    def test_request_spin_returns_target_board(self, game: FortuneGame):
        board = game.request_spin(1)

        assert len(board) == 3 and len(board[0]) == 5
        assert game.machine.current_state == GameStateType.SPINNING
        assert game.reels.active

    def test_request_spin_refused_returns_none(self, game: FortuneGame):
        assert game.request_spin(1000) is None
        assert game.reels.active is False

    def test_generated_board_resolves(self, game: FortuneGame):
        target = board_types(game.request_spin(1))

        result = stop_all(game, target)

        assert board_types(result.board_symbols) == target
        assert game.machine.coins == 99 + result.total_payout

    def test_full_winning_spin(self, game: FortuneGame, listener: RecordingListener, monkeypatch):
        fix_next_board(game, ALL_CHERRY_ROWS, monkeypatch)
        game.request_spin(1)

        result = stop_all(game, ALL_CHERRY_ROWS)

        assert result.is_jackpot
        assert game.machine.coins == 99 + result.total_payout
        assert game.machine.current_state == GameStateType.CELEBRATING
        assert len(listener.get_events("reel_stopped")) == 5
        assert len(listener.get_events("all_reels_stopped")) == 1
        assert len(listener.get_events("win_detected")) == len(result.wins)

    def test_forged_reels_refused(self, game: FortuneGame, listener: RecordingListener, monkeypatch):
        fix_next_board(game, NO_WIN_ROWS, monkeypatch)
        game.request_spin(1)

        with pytest.raises(ReelMismatch):
            game.reel_stopped(0, [P, P, P])

        assert listener.get_events("reel_stopped") == []
        assert game.machine.current_state == GameStateType.SPINNING
        assert game.machine.coins == 99

    def test_losing_spin_back_to_idle(self, game: FortuneGame, monkeypatch):
        fix_next_board(game, NO_WIN_ROWS, monkeypatch)
        game.request_spin(1)

        result = stop_all(game, NO_WIN_ROWS)

        assert result.wins == []
        assert game.machine.current_state == GameStateType.IDLE

    def test_partial_reels_do_not_resolve(self, game: FortuneGame, monkeypatch):
        fix_next_board(game, ALL_CHERRY_ROWS, monkeypatch)
        game.request_spin(1)
        reels = to_reels(ALL_CHERRY_ROWS)

        for index in range(4):
            assert game.reel_stopped(index, reels[index]) is None

        assert game.machine.current_state == GameStateType.SPINNING

    def test_reel_stop_outside_spin_ignored(self, game: FortuneGame, listener: RecordingListener):
        assert game.reel_stopped(0, [C, C, C]) is None
        assert listener.get_events("reel_stopped") == []

    def test_session_multiplier_applies(self, game: FortuneGame, monkeypatch):
        fix_next_board(game, ALL_CHERRY_ROWS, monkeypatch)
        game.machine.update_multiplier(2)
        game.request_spin(1)

        result = stop_all(game, ALL_CHERRY_ROWS)

        assert result.total_payout == 483 * 2

    def test_min_win_count_guarantees_a_paid_spin(self, game: FortuneGame):
        game.min_win_count = 1

        for _ in range(5):
            target = board_types(game.request_spin(1))
            result = stop_all(game, target)
            assert result.wins
            assert result.total_payout > 0
            game.machine.reset_to_idle()

    def test_check_game_over_when_broke(self, game: FortuneGame, monkeypatch):
        fix_next_board(game, NO_WIN_ROWS, monkeypatch)
        game.machine.reset_state(coins=1)
        game.request_spin(1)
        stop_all(game, NO_WIN_ROWS)

        assert game.check_game_over()
        assert game.machine.current_state == GameStateType.GAMEOVER

    def test_check_game_over_with_coins(self, game: FortuneGame):
        assert game.check_game_over() is False

    def test_new_game_abandons_reels(self, game: FortuneGame, monkeypatch):
        fix_next_board(game, ALL_CHERRY_ROWS, monkeypatch)
        game.request_spin(1)
        game.reel_stopped(0, [C, C, C])

        game.new_game()

        assert game.reels.active is False
        assert game.machine.current_state == GameStateType.IDLE
        assert game.machine.coins == 100

    def test_sandbox(self, game: FortuneGame):
        game.sandbox()

        assert game.machine.coins == Settings().sandbox_coins


def test_generated_boards_respect_thresholds(scheduler: ManualScheduler):
    game = FortuneGame.create(Settings(min_win_count=2), scheduler=scheduler, rng=SeededRNG(21))

    board = game.request_spin(1)

    assert len(detect_wins(board, game.economy.patterns)) >= 2
