#!/usr/bin/env python3
"""
Print the payline catalog for a grid shape, grouped by pattern family.

Usage:
    python -m scripts.list_paylines
    python -m scripts.list_paylines --reels 5 --rows 3 --seed 7 --tier 20
"""
import argparse
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from slot_core.config import settings
from slot_core.errors import GameError
from slot_core.logic.paylines import PaylineGenerator
from slot_core.logic.rng import SeededRNG


def render_payline(payline: tuple[int, ...], rows: int) -> list[str]:
    """ASCII picture of one payline: one text row per grid row."""
    return [
        " ".join("#" if row == r else "." for row in payline)
        for r in range(rows)
    ]


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="List generated paylines")
    parser.add_argument("--reels", type=int, default=settings.reels)
    parser.add_argument("--rows", type=int, default=settings.rows)
    parser.add_argument("--seed", type=int, default=0, help="Seed for the random family")
    parser.add_argument(
        "--tier",
        type=int,
        default=None,
        help="Only list the first N lines",
    )
    parser.add_argument("--draw", action="store_true", help="Draw each payline")

    args = parser.parse_args()

    generator = PaylineGenerator(
        args.reels,
        args.rows,
        rng=SeededRNG(args.seed),
        random_count=settings.random_pattern_count,
        target_size=max(settings.line_options),
    )
    catalog = generator.generate_all()

    try:
        lines = catalog.tier(args.tier) if args.tier else catalog.lines
    except GameError as e:
        print(f"{e.code.value}: {e.message}")
        return 1

    print(f"Catalog {args.reels}x{args.rows}: {len(catalog)} lines")
    for family, count in catalog.count_by_family().items():
        print(f"  {family.value}: {count}")
    for size in settings.line_options:
        status = "ok" if size <= len(catalog) else "too large"
        print(f"  tier {size}: {status}")
    print()

    for number, payline in enumerate(lines, start=1):
        print(f"{number:3d} {catalog.family_of(payline).value:<10} {list(payline)}")
        if args.draw:
            for text in render_payline(payline, args.rows):
                print(f"      {text}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
