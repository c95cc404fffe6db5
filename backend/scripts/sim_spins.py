#!/usr/bin/env python3
"""
Headless spin simulation.

Plays many rounds through the session controller and reports RTP, hit
frequency and per-line hit counts as a one-row CSV.

Usage:
    python -m scripts.sim_spins --rounds 100000 --seed SIM_2025 --out out/sim_20.csv
    python -m scripts.sim_spins --rounds 2000 --seed SIM_2025 --lines 100 --animate --out out/sim_100.csv
"""
import argparse
import csv
import hashlib
import sys
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from slot_core.config import Settings, settings
from slot_core.config_hash import get_config_hash
from slot_core.logic.rng import SeededRNG
from slot_core.logic.session import SessionController
from slot_core.presentation import PresentationSink


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    total_wagered: float = 0.0
    total_won: float = 0.0
    rounds: int = 0
    wins: int = 0
    max_win_x_observed: float = 0.0
    win_x_values: list[float] = field(default_factory=list)
    line_hits: Counter = field(default_factory=Counter)
    symbol_hits: Counter = field(default_factory=Counter)

    @property
    def rtp(self) -> float:
        return (self.total_won / self.total_wagered * 100) if self.total_wagered > 0 else 0.0

    @property
    def hit_freq(self) -> float:
        return (self.wins / self.rounds * 100) if self.rounds > 0 else 0.0


class NullSink:
    """Discards presentation events; simulations do not render."""

    def emit(self, event_name: str, data: dict) -> None:
        pass


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def run_simulation(
    rounds: int,
    seed_str: str,
    lines: int | None = None,
    bet_per_line: float | None = None,
    animate: bool = False,
    config: Settings | None = None,
    sink: PresentationSink | None = None,
    verbose: bool = False,
) -> SimulationStats:
    """
    Run headless simulation.

    Args:
        rounds: Number of rounds to simulate
        seed_str: Seed string for reproducibility
        lines: Active tier (defaults to config default_lines)
        bet_per_line: Bet per line (defaults to config bet_per_line)
        animate: Drive the full tick loop instead of slam-stopping the reels
        config: Settings override
        sink: Presentation sink (events are discarded by default)
        verbose: Print progress

    Returns:
        SimulationStats with aggregated results
    """
    config = config or settings
    seed_int = seed_to_int(seed_str)
    session = SessionController(
        config=config,
        rng=SeededRNG(seed=seed_int),
        sink=sink or NullSink(),
        filler_rng=SeededRNG(seed=seed_int + 1),
    )
    if lines is not None:
        session.select_lines(lines)
    if bet_per_line is not None:
        session.set_bet_per_line(bet_per_line)

    stats = SimulationStats()
    progress_interval = max(1, rounds // 100)

    for round_count in range(rounds):
        if verbose and round_count % progress_interval == 0:
            pct = (round_count / rounds) * 100
            print(f"\rProgress: {pct:.1f}%", end="", flush=True)

        # Simulations never run dry
        session.balance = max(session.balance, session.total_bet())

        outcome = session.spin() if animate else session.spin_instant()

        stats.total_wagered += outcome.total_bet
        stats.total_won += outcome.total_win
        stats.rounds += 1
        if outcome.total_win > 0:
            stats.wins += 1

        win_x = outcome.total_win / outcome.total_bet if outcome.total_bet > 0 else 0.0
        stats.win_x_values.append(win_x)
        stats.max_win_x_observed = max(stats.max_win_x_observed, win_x)

        for win_line in outcome.win_lines:
            stats.line_hits[win_line.line_index] += 1
            stats.symbol_hits[(win_line.symbol, win_line.count)] += 1

    if verbose:
        print("\rProgress: 100.0%")

    return stats


def calculate_percentile(values: list[float], percentile: float) -> float:
    """Calculate percentile from sorted list."""
    if not values:
        return 0.0
    sorted_vals = sorted(values)
    idx = int(len(sorted_vals) * percentile / 100)
    idx = min(idx, len(sorted_vals) - 1)
    return sorted_vals[idx]


def generate_csv(
    rounds: int,
    seed_str: str,
    lines: int,
    stats: SimulationStats,
    output_path: str,
    config: Settings | None = None,
) -> dict[str, str]:
    """Write the summary row and return it."""
    row = {
        "timestamp": get_timestamp_iso(),
        "config_hash": get_config_hash(config),
        "rounds": str(rounds),
        "seed": seed_str,
        "lines": str(lines),
        "rtp": f"{stats.rtp:.4f}",
        "hit_freq": f"{stats.hit_freq:.4f}",
        "total_wagered": f"{stats.total_wagered:.2f}",
        "total_won": f"{stats.total_won:.2f}",
        "p95_win_x": f"{calculate_percentile(stats.win_x_values, 95):.2f}",
        "p99_win_x": f"{calculate_percentile(stats.win_x_values, 99):.2f}",
        "max_win_x": f"{stats.max_win_x_observed:.2f}",
        "lines_hit": str(len(stats.line_hits)),
    }

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=row.keys())
        writer.writeheader()
        writer.writerow(row)

    return row


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Headless spin simulation")
    parser.add_argument("--rounds", type=int, required=True, help="Number of rounds to simulate")
    parser.add_argument("--seed", type=str, required=True, help="Seed string for reproducibility")
    parser.add_argument("--out", type=str, required=True, help="Output CSV path")
    parser.add_argument(
        "--lines",
        type=int,
        default=settings.default_lines,
        help=f"Active lines, one of {settings.line_options}",
    )
    parser.add_argument("--bet", type=float, default=settings.bet_per_line, help="Bet per line")
    parser.add_argument(
        "--animate",
        action="store_true",
        help="Run every round through the reel tick loop (slow)",
    )
    parser.add_argument("--verbose", action="store_true", help="Show progress")

    args = parser.parse_args()

    print(f"Running simulation: rounds={args.rounds}, seed={args.seed}, lines={args.lines}")
    print(f"Config hash: {get_config_hash()}")

    stats = run_simulation(
        rounds=args.rounds,
        seed_str=args.seed,
        lines=args.lines,
        bet_per_line=args.bet,
        animate=args.animate,
        verbose=args.verbose,
    )
    generate_csv(args.rounds, args.seed, args.lines, stats, args.out)
    print(f"CSV written to: {args.out}")

    print("\nSummary:")
    print(f"  Rounds: {stats.rounds}")
    print(f"  Total wagered: {stats.total_wagered:.2f}")
    print(f"  Total won: {stats.total_won:.2f}")
    print(f"  RTP: {stats.rtp:.4f}%")
    print(f"  Hit frequency: {stats.hit_freq:.4f}%")
    print(f"  Max win_x observed: {stats.max_win_x_observed:.2f}x")
    for (symbol, count), hits in sorted(stats.symbol_hits.items()):
        print(f"  {symbol} x{count}: {hits}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
