#!/usr/bin/env python3
"""
Headless spin simulation for tuning the glyph and pattern economy.

Draws boards with the board generator, resolves them and reports hit rate,
return per coin bet, jackpot count and per-pattern / per-glyph frequencies.

Usage:
    python -m scripts.simulate --spins 100000 --seed 42
    python -m scripts.simulate --spins 20000 --seed 7 --min-win-count 1 --out out/sim.json
"""
import argparse
import json
import sys
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fortune.config import settings
from fortune.logic.board import BoardGenerator
from fortune.logic.economy import EconomyContext
from fortune.logic.payout import resolve_spin
from fortune.logic.rng import SeededRNG


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    spins: int = 0
    total_wagered: int = 0
    total_won: int = 0
    winning_spins: int = 0
    jackpots: int = 0
    largest_win: int = 0
    pattern_hits: dict[str, int] = field(default_factory=dict)
    glyph_counts: dict[str, int] = field(default_factory=dict)

    @property
    def hit_rate(self) -> float:
        return self.winning_spins / self.spins if self.spins else 0.0

    @property
    def return_per_coin(self) -> float:
        return self.total_won / self.total_wagered if self.total_wagered else 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["hit_rate"] = round(self.hit_rate, 6)
        data["return_per_coin"] = round(self.return_per_coin, 6)
        return data


def run_simulation(
    spins: int,
    seed: int,
    bet: int = 1,
    rows: int = settings.rows,
    columns: int = settings.columns,
    min_multiplier: float = 0,
    min_win_count: int = 0,
    max_retries: int = settings.max_board_retries,
) -> SimulationStats:
    """Run spins against a default economy with a seeded RNG."""
    economy = EconomyContext.default()
    generator = BoardGenerator(economy, rng=SeededRNG(seed), max_retries=max_retries)
    stats = SimulationStats()
    pattern_hits: Counter[str] = Counter()
    glyph_counts: Counter[str] = Counter()

    for _ in range(spins):
        board = generator.generate(rows, columns, min_multiplier, min_win_count)
        # Fresh instances: the generator's acceptance check already marked cells
        board = [
            [cell.model_copy(update={"is_winning": False, "winning_multiplier": 1}) for cell in row]
            for row in board
        ]
        result = resolve_spin(board, economy.patterns, 1)

        stats.spins += 1
        stats.total_wagered += bet
        payout = result.total_payout * bet
        stats.total_won += payout
        stats.largest_win = max(stats.largest_win, payout)
        if result.wins:
            stats.winning_spins += 1
        if result.is_jackpot:
            stats.jackpots += 1
        pattern_hits.update(win.pattern_name for win in result.wins)
        glyph_counts.update(cell.glyph.type.value for row in board for cell in row)

    stats.pattern_hits = dict(pattern_hits.most_common())
    stats.glyph_counts = dict(glyph_counts.most_common())
    return stats


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Simulate spins against the default economy")
    parser.add_argument("--spins", type=int, default=10000, help="Number of spins")
    parser.add_argument("--seed", type=int, default=42, help="RNG seed")
    parser.add_argument("--bet", type=int, default=1, help="Coins bet per spin")
    parser.add_argument(
        "--min-multiplier", type=float, default=0, help="Board generator min multiplier"
    )
    parser.add_argument(
        "--min-win-count", type=int, default=0, help="Board generator min win count"
    )
    parser.add_argument("--out", type=str, default=None, help="Write JSON report here")
    args = parser.parse_args()

    if args.spins <= 0:
        print("ERROR: --spins must be positive", file=sys.stderr)
        return 1

    stats = run_simulation(
        spins=args.spins,
        seed=args.seed,
        bet=args.bet,
        min_multiplier=args.min_multiplier,
        min_win_count=args.min_win_count,
    )
    report = {"seed": args.seed, **stats.to_dict()}
    text = json.dumps(report, indent=2)

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text)
        print(f"Report written to {out_path}")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
