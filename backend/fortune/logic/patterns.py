"""Winning pattern catalog and sliding-window win detection."""
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from fortune.logic.glyphs import GlyphInstance, GlyphType
from fortune.logic.schema import CamelModel


T = TypeVar("T")

Mask = list[list[int]]
Board = list[list[GlyphInstance]]


class PatternType(str, Enum):
    """Winning combination identities. Both 3-diagonals share one type."""
    THREE_ACROSS = "three_across"
    THREE_DOWN = "three_down"
    THREE_DIAGONAL = "three_diagonal"
    FOUR_ACROSS = "four_across"
    FIVE_ACROSS = "five_across"
    FIVE_MIRRORED_DIAGONAL = "five_mirrored_diagonal"
    NINE_SQUARE = "nine_square"
    FIFTEEN_ALL_MATCH = "fifteen_all_match"


JACKPOT_GROUP = "jackpot"


class WinningPattern(CamelModel):
    """A geometric mask; every masked cell must hold the same glyph type."""

    type: PatternType
    group: str
    name: str
    description: str = ""
    multiplier: float
    mask: Mask

    @property
    def height(self) -> int:
        return len(self.mask)

    @property
    def width(self) -> int:
        return len(self.mask[0]) if self.mask else 0


def _pattern(type_, group, name, description, multiplier, mask) -> WinningPattern:
    return WinningPattern(
        type=type_,
        group=group,
        name=name,
        description=description,
        multiplier=multiplier,
        mask=mask,
    )


def default_patterns() -> list[WinningPattern]:
    """Fresh copies of the built-in pattern set, in detection order."""
    return [
        _pattern(PatternType.THREE_ACROSS, "across", "3 Across",
                 "Three matching symbols in one row", 1, [[1, 1, 1]]),
        _pattern(PatternType.FOUR_ACROSS, "across", "4 Across",
                 "Four matching symbols in one row", 2, [[1, 1, 1, 1]]),
        _pattern(PatternType.FIVE_ACROSS, "across", "5 Across",
                 "Five matching symbols in one row", 3, [[1, 1, 1, 1, 1]]),
        _pattern(PatternType.THREE_DOWN, "down", "3 Down",
                 "Three matching symbols in a column", 1, [[1], [1], [1]]),
        _pattern(PatternType.THREE_DIAGONAL, "diagonal", "3 Forward Diagonal",
                 "Three matching symbols in a forward diagonal", 1,
                 [[1, 0, 0], [0, 1, 0], [0, 0, 1]]),
        _pattern(PatternType.THREE_DIAGONAL, "diagonal", "3 Backward Diagonal",
                 "Three matching symbols in a backward diagonal", 1,
                 [[0, 0, 1], [0, 1, 0], [1, 0, 0]]),
        _pattern(PatternType.FIVE_MIRRORED_DIAGONAL, "diagonal", "Star Diagonal",
                 "Four corners and the center of a 3x3 square", 3,
                 [[1, 0, 1], [0, 1, 0], [1, 0, 1]]),
        _pattern(PatternType.NINE_SQUARE, "square", "Square",
                 "Nine matching symbols forming a 3x3 square", 5,
                 [[1, 1, 1], [1, 1, 1], [1, 1, 1]]),
        _pattern(PatternType.FIFTEEN_ALL_MATCH, JACKPOT_GROUP, "Jackpot",
                 "All 15 symbols on the board match", 10,
                 [[1, 1, 1, 1, 1], [1, 1, 1, 1, 1], [1, 1, 1, 1, 1]]),
    ]


@dataclass
class PatternMatch:
    """One concrete match of a pattern on a board."""

    pattern: WinningPattern
    glyphs: list[GlyphInstance]


def slice_windows(grid: list[list[T]], height: int, width: int) -> list[list[list[T]]]:
    """
    All height x width sub-grids, origin row-major.

    Returns an empty list when the window does not fit in either dimension.
    """
    rows = len(grid)
    cols = len(grid[0]) if rows else 0
    if height <= 0 or width <= 0 or height > rows or width > cols:
        return []
    return [
        [row[j:j + width] for row in grid[i:i + height]]
        for i in range(rows - height + 1)
        for j in range(cols - width + 1)
    ]


def match_window(window: Board, mask: Mask) -> list[GlyphInstance] | None:
    """Masked cells of a window in row-major order if they share one type."""
    reference: GlyphType | None = None
    matched: list[GlyphInstance] = []
    for row, mask_row in zip(window, mask):
        for cell, flag in zip(row, mask_row):
            if not flag:
                continue
            if reference is None:
                reference = cell.glyph.type
            elif cell.glyph.type != reference:
                return None
            matched.append(cell)
    return matched or None


def check_pattern(board: Board, mask: Mask) -> list[list[GlyphInstance]]:
    """Every window of the board matching the mask."""
    height = len(mask)
    width = len(mask[0]) if mask else 0
    matches = []
    for window in slice_windows(board, height, width):
        matched = match_window(window, mask)
        if matched is not None:
            matches.append(matched)
    return matches


class PatternCatalog:
    """The pattern list owned by one economy; multipliers mutate in place."""

    def __init__(self, patterns: list[WinningPattern]):
        self._patterns = patterns

    @classmethod
    def default(cls) -> "PatternCatalog":
        return cls(default_patterns())

    def __iter__(self):
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def groups(self) -> set[str]:
        return {p.group for p in self._patterns}

    def inc_group_multiplier(self, group: str, value: float) -> int:
        """Shift every pattern in a group, clamped at 0. Returns the number changed."""
        changed = 0
        for pattern in self._patterns:
            if pattern.group == group:
                pattern.multiplier = max(pattern.multiplier + value, 0)
                changed += 1
        return changed

    def inc_type_multiplier(self, pattern_type: PatternType, value: float) -> int:
        """Shift every pattern of a type, clamped at 0. Returns the number changed."""
        changed = 0
        for pattern in self._patterns:
            if pattern.type == pattern_type:
                pattern.multiplier = max(pattern.multiplier + value, 0)
                changed += 1
        return changed

    def detect(self, board: Board) -> list[PatternMatch]:
        """
        All matches of all patterns on a row-major board.

        Marks matched instances as winning and raises their
        winning_multiplier to the largest matching pattern multiplier.
        """
        results: list[PatternMatch] = []
        for pattern in self._patterns:
            for glyphs in check_pattern(board, pattern.mask):
                for glyph in glyphs:
                    glyph.is_winning = True
                    if pattern.multiplier > glyph.winning_multiplier:
                        glyph.winning_multiplier = pattern.multiplier
                results.append(PatternMatch(pattern=pattern, glyphs=glyphs))
        return results


def transpose(board: list[list[T]]) -> list[list[T]]:
    """Swap a column-major reel layout to row-major (and back)."""
    if not board:
        return []
    return [list(row) for row in zip(*board)]
