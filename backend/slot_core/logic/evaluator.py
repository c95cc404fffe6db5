"""Payline win evaluation."""
from collections.abc import Mapping, Sequence

from slot_core.logic.models import EvaluationResult, Payline, Symbol, WinLine


def line_win(
    symbols: Sequence[Symbol],
    payouts: Mapping[Symbol, Mapping[int, float]],
    bet_per_line: float,
) -> tuple[float, int]:
    """
    Check a single line of symbols for a win.

    Counts the run of symbols equal to the first one, stopping at the first
    mismatch. Returns (win_amount, matching_count), or (0.0, 0) when the
    symbol/count pair has no positive payout.
    """
    if not symbols:
        return 0.0, 0

    first = symbols[0]
    count = 1
    for symbol in symbols[1:]:
        if symbol != first:
            break
        count += 1

    multiplier = payouts.get(first, {}).get(count, 0)
    if multiplier > 0:
        return multiplier * bet_per_line, count
    return 0.0, 0


def evaluate(
    grid: Sequence[Sequence[Symbol]],
    paylines: Sequence[Payline],
    payouts: Mapping[Symbol, Mapping[int, float]],
    bet_per_line: float,
) -> EvaluationResult:
    """
    Score a finalized grid (grid[reel][row]) against every active payline.

    Winning lines keep catalog order; line_index is 1-based for display.
    """
    total_win = 0.0
    win_lines: list[WinLine] = []

    for line_index, payline in enumerate(paylines, start=1):
        symbols = tuple(grid[reel][row] for reel, row in enumerate(payline))
        amount, count = line_win(symbols, payouts, bet_per_line)
        if amount > 0:
            total_win += amount
            win_lines.append(WinLine(
                line_index=line_index,
                payline=tuple(payline),
                symbol=symbols[0],
                symbols=symbols,
                count=count,
                amount=amount,
            ))

    return EvaluationResult(total_win=total_win, win_lines=tuple(win_lines))


def winning_positions(win_lines: Sequence[WinLine]) -> set[tuple[int, int]]:
    """(reel, row) cells covered by the matched part of each winning line."""
    cells: set[tuple[int, int]] = set()
    for win_line in win_lines:
        for reel in range(win_line.count):
            cells.add((reel, win_line.payline[reel]))
    return cells
