"""Glyph definitions and the mutable glyph catalog."""
import logging
from enum import Enum

from fortune.logic.schema import CamelModel


logger = logging.getLogger(__name__)


class GlyphType(str, Enum):
    """Symbol identities on the reels."""
    PINEAPPLE = "pineapple"
    GRAPE = "grape"
    STRAWBERRY = "strawberry"
    WATERMELON = "watermelon"
    ORANGE = "orange"
    LEMON = "lemon"
    CHERRY = "cherry"


class Glyph(CamelModel):
    """A symbol definition. Payout and weight are tuned at runtime by modifiers."""

    type: GlyphType
    name: str
    emoji: str = ""
    payout_value: float
    rarity_weight: float


class GlyphInstance(CamelModel):
    """One placed occurrence of a glyph on a board for a single spin."""

    glyph: Glyph
    row: int
    column: int
    is_winning: bool = False
    winning_multiplier: float = 1

    @property
    def type(self) -> GlyphType:
        return self.glyph.type


# (type, name, emoji, payout, weight) - pineapple is rarest, cherry most common
DEFAULT_GLYPHS: list[tuple[GlyphType, str, str, float, float]] = [
    (GlyphType.PINEAPPLE, "Pineapple", "\U0001F34D", 21, 1),
    (GlyphType.GRAPE, "Grape", "\U0001F347", 13, 2),
    (GlyphType.STRAWBERRY, "Strawberry", "\U0001F353", 8, 5),
    (GlyphType.WATERMELON, "Watermelon", "\U0001F349", 5, 7),
    (GlyphType.ORANGE, "Orange", "\U0001F34A", 3, 7),
    (GlyphType.LEMON, "Lemon", "\U0001F34B", 2, 8),
    (GlyphType.CHERRY, "Cherry", "\U0001F352", 1, 8),
]


class GlyphCatalog:
    """
    Ordered table of glyph definitions.

    Iteration order is the definition order; the weighted sampler walks it
    in that order, so it is part of the deterministic-draw contract.
    """

    def __init__(self, glyphs: list[Glyph]):
        self._glyphs: dict[GlyphType, Glyph] = {g.type: g for g in glyphs}

    @classmethod
    def default(cls) -> "GlyphCatalog":
        """Build a fresh catalog from the default glyph table."""
        return cls([
            Glyph(
                type=glyph_type,
                name=name,
                emoji=emoji,
                payout_value=payout,
                rarity_weight=weight,
            )
            for glyph_type, name, emoji, payout, weight in DEFAULT_GLYPHS
        ])

    def __iter__(self):
        return iter(self._glyphs.values())

    def __len__(self) -> int:
        return len(self._glyphs)

    def __contains__(self, glyph_type: GlyphType) -> bool:
        return glyph_type in self._glyphs

    def get(self, glyph_type: GlyphType) -> Glyph | None:
        return self._glyphs.get(glyph_type)

    def total_weight(self) -> float:
        return sum(g.rarity_weight for g in self._glyphs.values())

    def weight_percentage(self, glyph_type: GlyphType) -> float:
        """Share of the total rarity weight held by one glyph, in percent."""
        glyph = self._glyphs.get(glyph_type)
        total = self.total_weight()
        if glyph is None or total <= 0:
            return 0.0
        return glyph.rarity_weight / total * 100

    def inc_weight(self, glyph_type: GlyphType, value: float) -> bool:
        """
        Add value to a glyph's rarity weight.

        Weights clamp at 0. A change that would leave the catalog with no
        positive weight is refused. Returns False when nothing changed.
        """
        glyph = self._glyphs.get(glyph_type)
        if glyph is None:
            return False
        new_weight = max(glyph.rarity_weight + value, 0)
        if self.total_weight() - glyph.rarity_weight + new_weight <= 0:
            logger.warning(
                "Refusing weight change %s on %s: total weight would be zero",
                value,
                glyph_type.value,
            )
            return False
        glyph.rarity_weight = new_weight
        return True

    def inc_payout(self, glyph_type: GlyphType, value: float) -> bool:
        """Add value to a glyph's payout, clamped at 0. Returns False for unknown glyphs."""
        glyph = self._glyphs.get(glyph_type)
        if glyph is None:
            return False
        glyph.payout_value = max(glyph.payout_value + value, 0)
        return True

    def create_instance(
        self, glyph_type: GlyphType, row: int, column: int
    ) -> GlyphInstance:
        """Place a catalog glyph at a board cell."""
        glyph = self._glyphs.get(glyph_type)
        if glyph is None:
            raise KeyError(f"Unknown glyph type: {glyph_type}")
        return GlyphInstance(glyph=glyph.model_copy(), row=row, column=column)


def create_glyph_instance(glyph: Glyph, row: int, column: int) -> GlyphInstance:
    """Create a fresh, non-winning instance of a glyph.

    The glyph is copied so later catalog changes do not rewrite past boards.
    """
    return GlyphInstance(glyph=glyph.model_copy(), row=row, column=column)


def format_board(board: list[list[GlyphInstance]]) -> str:
    """Render a row-major board as emoji rows for debug logging."""
    return "\n".join(
        " | ".join(cell.glyph.emoji or cell.glyph.type.value for cell in row)
        for row in board
    )
