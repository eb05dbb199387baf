"""Board generation tests."""
from fortune.logic.board import BoardGenerator, get_board_column, retry_until
from fortune.logic.economy import EconomyContext
from fortune.logic.glyphs import GlyphType
from fortune.logic.payout import detect_wins
from fortune.logic.rng import SeededRNG


class TestRetryUntil:
    def test_returns_first_accepted(self):
        values = iter(range(10))

        result = retry_until(lambda: next(values), lambda v: v >= 3, 10, lambda v: -1)

        assert result == 3

    def test_exhaustion_hands_last_candidate_to_fallback(self):
        calls = []

        def attempt() -> int:
            calls.append(1)
            return len(calls)

        result = retry_until(attempt, lambda v: False, 5, lambda last: last * 100)

        assert len(calls) == 5
        assert result == 500

    def test_zero_attempts_falls_back_with_none(self):
        result = retry_until(lambda: 1, lambda v: True, 0, lambda last: last)

        assert result is None


class TestBoardGenerator:
    def test_board_shape_and_coordinates(self, economy: EconomyContext):
        generator = BoardGenerator(economy, rng=SeededRNG(1))

        board = generator.generate(3, 5)

        assert len(board) == 3
        assert all(len(row) == 5 for row in board)
        for r, row in enumerate(board):
            for c, cell in enumerate(row):
                assert (cell.row, cell.column) == (r, c)

    def test_same_seed_same_board(self, economy: EconomyContext):
        first = BoardGenerator(economy, rng=SeededRNG(42)).generate()
        second = BoardGenerator(economy, rng=SeededRNG(42)).generate()

        assert [[c.type for c in row] for row in first] == [
            [c.type for c in row] for row in second
        ]

    def test_min_win_count_is_met(self, economy: EconomyContext):
        generator = BoardGenerator(economy, rng=SeededRNG(3))

        for _ in range(20):
            board = generator.generate(3, 5, min_win_count=1)
            assert len(detect_wins(board, economy.patterns)) >= 1

    def test_min_multiplier_excludes_low_multiplier_wins(self, economy: EconomyContext):
        # Every larger shape contains a multiplier-1 line, so only losing boards qualify
        generator = BoardGenerator(economy, rng=SeededRNG(8))

        for _ in range(10):
            board = generator.generate(3, 5, min_multiplier=2)
            assert detect_wins(board, economy.patterns) == []

    def test_min_multiplier_is_met_after_boosts(self, economy: EconomyContext):
        for group in ("across", "down", "diagonal"):
            economy.patterns.inc_group_multiplier(group, 1)
        generator = BoardGenerator(economy, rng=SeededRNG(8))

        for _ in range(5):
            board = generator.generate(3, 5, min_multiplier=2, min_win_count=1)
            wins = detect_wins(board, economy.patterns)
            assert wins
            assert min(win.multiplier for win in wins) >= 2

    def test_impossible_constraints_still_return_a_board(self, economy: EconomyContext, caplog):
        generator = BoardGenerator(economy, rng=SeededRNG(4), max_retries=25)

        board = generator.generate(3, 5, min_win_count=1000)

        assert len(board) == 3
        assert "not met after 25 attempts" in caplog.text

    def test_zero_retries_still_return_a_board(self, economy: EconomyContext):
        generator = BoardGenerator(economy, rng=SeededRNG(4), max_retries=0)

        board = generator.generate(3, 5, min_win_count=1)

        assert len(board) == 3 and len(board[0]) == 5

    def test_generated_instances_do_not_alias_catalog(self, economy: EconomyContext):
        board = BoardGenerator(economy, rng=SeededRNG(9)).draw_board(3, 5)
        cell = board[0][0]

        economy.glyphs.inc_payout(cell.type, 100)

        assert cell.glyph.payout_value == economy.glyphs.get(cell.type).payout_value - 100

    def test_get_board_column(self, economy: EconomyContext):
        board = BoardGenerator(economy, rng=SeededRNG(2)).draw_board(3, 5)

        column = get_board_column(board, 2)

        assert [cell.row for cell in column] == [0, 1, 2]
        assert all(cell.column == 2 for cell in column)
        assert all(isinstance(cell.type, GlyphType) for cell in column)
