"""Weighted random selection over the glyph catalog."""
from typing import Callable, Iterable, TypeVar

from fortune.logic.glyphs import Glyph, GlyphCatalog
from fortune.logic.rng import RNGBase


T = TypeVar("T")


class EconomyConfigError(ValueError):
    """Catalog cannot be sampled: empty, or no positive rarity weight."""


def weighted_choice(
    items: Iterable[T], weight_of: Callable[[T], float], rng: RNGBase
) -> T:
    """
    Pick one item with probability proportional to its weight.

    Draws u in [0, total) and returns the first positive-weight item whose
    running weight sum reaches u.
    """
    candidates = [(item, weight_of(item)) for item in items]
    if not candidates:
        raise EconomyConfigError("Cannot sample from an empty catalog")

    total = sum(weight for _, weight in candidates if weight > 0)
    if total <= 0:
        raise EconomyConfigError(
            f"Total weight must be positive, got {total}"
        )

    draw = rng.uniform(total)
    running = 0.0
    last = None
    for item, weight in candidates:
        if weight <= 0:
            continue
        running += weight
        last = item
        if running >= draw:
            return item
    # float rounding can leave draw a hair above the final sum
    return last


class GlyphSampler:
    """Draws glyphs from a catalog according to rarity weight."""

    def __init__(self, catalog: GlyphCatalog, rng: RNGBase):
        self.catalog = catalog
        self.rng = rng

    def draw(self) -> Glyph:
        return weighted_choice(self.catalog, lambda g: g.rarity_weight, self.rng)
