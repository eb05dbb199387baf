"""Charms: runtime modifiers of glyph and pattern economics.

Each modifier kind is a small pydantic model tagged by ``kind``. All of them
are applied through apply_modifier(); changes are permanent until the
economy is reset.
"""
import logging
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from fortune.logic.economy import EconomyContext
from fortune.logic.glyphs import GlyphType
from fortune.logic.patterns import PatternType


logger = logging.getLogger(__name__)


class UnknownModifierTarget(LookupError):
    """A modifier names a glyph, pattern type or group the economy lacks."""


class GlyphWeightModifier(BaseModel):
    kind: Literal["weight"] = "weight"
    glyph_type: GlyphType
    value: float


class GlyphPayoutModifier(BaseModel):
    kind: Literal["payout"] = "payout"
    glyph_type: GlyphType
    value: float


class PatternTypeMultiplierModifier(BaseModel):
    kind: Literal["pattern_type"] = "pattern_type"
    pattern_type: PatternType
    value: float


class PatternGroupMultiplierModifier(BaseModel):
    kind: Literal["pattern_group"] = "pattern_group"
    group: str
    value: float


class GlobalMultiplierModifier(BaseModel):
    """Session multiplier delta. Applied by the state machine, not the economy."""

    kind: Literal["global"] = "global"
    value: float


Modifier = Annotated[
    Union[
        GlyphWeightModifier,
        GlyphPayoutModifier,
        PatternTypeMultiplierModifier,
        PatternGroupMultiplierModifier,
        GlobalMultiplierModifier,
    ],
    Field(discriminator="kind"),
]


def describe_modifier(modifier: Modifier) -> str:
    """Human readable summary for shop and tooltip text."""
    if isinstance(modifier, GlyphWeightModifier):
        return f"Increase {modifier.glyph_type.value} appearance weight by {modifier.value:g}."
    if isinstance(modifier, GlyphPayoutModifier):
        return f"Increase {modifier.glyph_type.value} payout by {modifier.value:g}."
    if isinstance(modifier, PatternTypeMultiplierModifier):
        return (
            f"Increase winning pattern {modifier.pattern_type.value} "
            f"multiplier by {modifier.value:g}."
        )
    if isinstance(modifier, PatternGroupMultiplierModifier):
        return (
            f"Increase all {modifier.group} winning patterns "
            f"multiplier by {modifier.value:g}."
        )
    if isinstance(modifier, GlobalMultiplierModifier):
        return f"Increase global multiplier by {modifier.value:g}."
    raise TypeError(f"Unsupported modifier: {modifier!r}")


def apply_modifier(
    economy: EconomyContext, modifier: Modifier, strict: bool = False
) -> bool:
    """
    Mutate the targeted catalog entry in place.

    Returns True if the economy changed. A target missing from the economy is
    a logged no-op, or raises UnknownModifierTarget when strict is set.
    Global multiplier modifiers do not touch the economy and return False.
    """
    if isinstance(modifier, GlobalMultiplierModifier):
        return False

    if isinstance(modifier, (GlyphWeightModifier, GlyphPayoutModifier)):
        if modifier.glyph_type not in economy.glyphs:
            return _unknown_target(f"glyph {modifier.glyph_type.value}", strict)
        logger.debug(
            "Applying %s modifier %s to %s",
            modifier.kind,
            modifier.value,
            modifier.glyph_type.value,
        )
        if isinstance(modifier, GlyphWeightModifier):
            return economy.glyphs.inc_weight(modifier.glyph_type, modifier.value)
        return economy.glyphs.inc_payout(modifier.glyph_type, modifier.value)

    if isinstance(modifier, PatternTypeMultiplierModifier):
        logger.debug(
            "Applying pattern type %s multiplier %s",
            modifier.pattern_type.value,
            modifier.value,
        )
        changed = economy.patterns.inc_type_multiplier(
            modifier.pattern_type, modifier.value
        )
        if not changed:
            return _unknown_target(f"pattern type {modifier.pattern_type.value}", strict)
        return True

    if isinstance(modifier, PatternGroupMultiplierModifier):
        logger.debug(
            "Applying pattern group %s multiplier %s", modifier.group, modifier.value
        )
        changed = economy.patterns.inc_group_multiplier(modifier.group, modifier.value)
        if not changed:
            return _unknown_target(f"pattern group {modifier.group}", strict)
        return True

    raise TypeError(f"Unsupported modifier: {modifier!r}")


def _unknown_target(target: str, strict: bool) -> bool:
    if strict:
        raise UnknownModifierTarget(f"Modifier target not found: {target}")
    logger.warning("Ignoring modifier for unknown %s", target)
    return False
