"""Input validators for weight tables, bets, tiers and target grids."""
from collections.abc import Sequence

from slot_core.config import Settings
from slot_core.errors import ErrorCode, GameError, InvalidConfigError, InvalidTierSizeError


def validate_weights(items: Sequence, weights: Sequence[float]) -> float:
    """
    Validate a weight table and return its total.

    Raises INVALID_CONFIG on length mismatch, negative weights or total <= 0.
    """
    if len(items) != len(weights):
        raise InvalidConfigError(
            f"Weight table length mismatch: {len(items)} items, {len(weights)} weights"
        )
    if not items:
        raise InvalidConfigError("Weight table is empty")
    if any(w < 0 for w in weights):
        raise InvalidConfigError(f"Negative weight in {list(weights)}")
    total = sum(weights)
    if total <= 0:
        raise InvalidConfigError(f"Total weight must be positive, got {total}")
    return total


def validate_bet_per_line(bet_per_line: float, config: Settings) -> None:
    """Raises INVALID_BET if bet_per_line is outside the configured range."""
    if not config.min_bet_per_line <= bet_per_line <= config.max_bet_per_line:
        raise GameError(
            ErrorCode.INVALID_BET,
            f"Bet per line {bet_per_line} not allowed. "
            f"Range: {config.min_bet_per_line}..{config.max_bet_per_line}",
        )


def validate_line_count(lines: int, config: Settings, catalog_size: int) -> None:
    """Raises INVALID_TIER_SIZE for unknown tiers or tiers larger than the catalog."""
    if lines not in config.line_options:
        raise InvalidTierSizeError(
            f"Line count {lines} not selectable. Options: {config.line_options}"
        )
    if lines > catalog_size:
        raise InvalidTierSizeError(
            f"Line count {lines} exceeds catalog size {catalog_size}"
        )


def validate_target_grid(grid: Sequence[Sequence[str]], config: Settings) -> None:
    """Raises INVALID_CONFIG unless grid is reels x rows of known symbols."""
    if len(grid) != config.reels:
        raise InvalidConfigError(f"Grid has {len(grid)} reels, expected {config.reels}")
    known = set(config.symbols)
    for reel_idx, column in enumerate(grid):
        if len(column) != config.rows:
            raise InvalidConfigError(
                f"Reel {reel_idx} has {len(column)} rows, expected {config.rows}"
            )
        unknown = [s for s in column if s not in known]
        if unknown:
            raise InvalidConfigError(f"Reel {reel_idx} has unknown symbols {unknown}")
