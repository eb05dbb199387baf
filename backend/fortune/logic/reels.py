"""Collects per-reel stop reports into a complete board."""
import logging
from typing import Sequence

from fortune.logic.glyphs import GlyphCatalog, GlyphInstance, GlyphType
from fortune.logic.patterns import Board, transpose


logger = logging.getLogger(__name__)


class ReelMismatch(ValueError):
    """A reel reported glyphs that differ from the spin's target column."""


class ReelCollector:
    """
    Gathers the final glyph column of each reel for one spin.

    Reels may report in any order. Each index counts once; repeats and
    out-of-range indices are ignored. Every report must equal the target
    column drawn for the spin. The board is complete when every column has
    reported.
    """

    def __init__(self, rows: int, columns: int):
        self.rows = rows
        self.columns = columns
        self._active = False
        self._target: list[list[GlyphType]] = []
        self._stopped: dict[int, list[GlyphInstance]] = {}

    @property
    def active(self) -> bool:
        return self._active

    @property
    def stopped_count(self) -> int:
        return len(self._stopped)

    def begin(self, target: Board) -> None:
        """Start collecting for a spin whose row-major target board is known."""
        self._target = [[cell.type for cell in column] for column in transpose(target)]
        self._active = True
        self._stopped = {}

    def cancel(self) -> None:
        self._active = False
        self._target = []
        self._stopped = {}

    def report(
        self,
        reel_index: int,
        glyph_types: Sequence[GlyphType],
        catalog: GlyphCatalog,
    ) -> Board | None:
        """
        Record one stopped reel.

        Returns the row-major board once the last reel reports, else None.
        Raises ValueError when the column height does not match the board and
        ReelMismatch when the glyphs differ from the target column.
        """
        if not self._active:
            logger.warning("Reel %d stopped with no spin in flight; ignored", reel_index)
            return None
        if not 0 <= reel_index < self.columns:
            logger.warning("Reel index %d out of range; ignored", reel_index)
            return None
        if reel_index in self._stopped:
            logger.warning("Reel %d reported twice; ignored", reel_index)
            return None
        if len(glyph_types) != self.rows:
            raise ValueError(
                f"Reel {reel_index} reported {len(glyph_types)} glyphs, expected {self.rows}"
            )
        expected = self._target[reel_index]
        if list(glyph_types) != expected:
            logger.warning(
                "Reel %d reported %s, target was %s",
                reel_index,
                [g.value for g in glyph_types],
                [g.value for g in expected],
            )
            raise ReelMismatch(f"Reel {reel_index} does not match the spin's board")

        self._stopped[reel_index] = [
            catalog.create_instance(glyph_type, row, reel_index)
            for row, glyph_type in enumerate(expected)
        ]
        if len(self._stopped) < self.columns:
            return None

        column_major = [self._stopped[i] for i in range(self.columns)]
        self.cancel()
        return transpose(column_major)
