"""Payout calculation for detected pattern matches."""
import math

from fortune.logic.models import SpinResult, Win
from fortune.logic.patterns import JACKPOT_GROUP, Board, PatternCatalog, PatternMatch


def build_win(match: PatternMatch) -> Win:
    """
    Price one match.

    total_value is the sum of each matched cell's payout times the pattern
    multiplier. base_value is the floored mean cell payout, kept for display.
    """
    payouts = [glyph.glyph.payout_value for glyph in match.glyphs]
    multiplier = match.pattern.multiplier
    return Win(
        symbols=match.glyphs,
        combination_type=match.pattern.type,
        pattern_name=match.pattern.name,
        base_value=math.floor(sum(payouts) / len(payouts)),
        multiplier=multiplier,
        total_value=sum(p * multiplier for p in payouts),
    )


def detect_wins(board: Board, patterns: PatternCatalog) -> list[Win]:
    """Detect and price every match on a row-major board."""
    return [build_win(match) for match in patterns.detect(board)]


def calculate_payout(wins: list[Win], current_multiplier: float) -> int:
    """Whole coins paid for a spin: summed win values times the session multiplier."""
    return math.floor(sum(win.total_value for win in wins) * current_multiplier)


def is_jackpot(matches: list[PatternMatch]) -> bool:
    return any(m.pattern.group == JACKPOT_GROUP for m in matches)


def resolve_spin(
    board: Board, patterns: PatternCatalog, current_multiplier: float
) -> SpinResult:
    """Detect wins on a row-major board and build its SpinResult."""
    matches = patterns.detect(board)
    wins = [build_win(match) for match in matches]
    return SpinResult(
        board_symbols=board,
        wins=wins,
        total_payout=calculate_payout(wins, current_multiplier),
        is_jackpot=is_jackpot(matches),
    )
