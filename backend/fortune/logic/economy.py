"""Economy context: the glyph and pattern catalogs one game plays against."""
import hashlib
import json
from dataclasses import dataclass, field

from fortune.logic.glyphs import GlyphCatalog
from fortune.logic.patterns import PatternCatalog
from fortune.logic.sampler import EconomyConfigError


@dataclass
class EconomyContext:
    """Owns both catalogs. Passed explicitly to the generator and state machine."""

    glyphs: GlyphCatalog = field(default_factory=GlyphCatalog.default)
    patterns: PatternCatalog = field(default_factory=PatternCatalog.default)

    @classmethod
    def default(cls) -> "EconomyContext":
        economy = cls()
        economy.validate()
        return economy

    def validate(self) -> None:
        """Raise EconomyConfigError if glyphs cannot be sampled."""
        if len(self.glyphs) == 0:
            raise EconomyConfigError("Glyph catalog is empty")
        total = self.glyphs.total_weight()
        if total <= 0:
            raise EconomyConfigError(
                f"Total rarity weight must be positive, got {total}"
            )

    def reset(self) -> None:
        """Drop all modifier changes and restore the default catalogs."""
        self.glyphs = GlyphCatalog.default()
        self.patterns = PatternCatalog.default()

    def fingerprint(self) -> str:
        """
        16-char hash of current weights, payouts and multipliers.

        Changes whenever a modifier lands, which makes economy drift visible
        in logs and in the catalog endpoint.
        """
        snapshot = {
            "glyphs": [
                [g.type.value, g.payout_value, g.rarity_weight] for g in self.glyphs
            ],
            "patterns": [[p.name, p.multiplier] for p in self.patterns],
        }
        canonical = json.dumps(snapshot, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()[:16]
