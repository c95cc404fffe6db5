"""Config hash shared by spin_completed events and simulation CSV output.

The hash covers the game-math fields only (grid, symbols, weights, payouts,
line tiers). Timing and cosmetic settings do not change outcomes and are
left out.
"""
import hashlib
import json

from slot_core.config import Settings, settings as default_settings


def get_config_hash(config: Settings | None = None) -> str:
    """
    Generate hash of the game-math configuration.

    Returns 16-char hex hash of config snapshot.
    """
    config = config or default_settings
    config_snapshot = {
        "reels": config.reels,
        "rows": config.rows,
        "symbols": list(config.symbols),
        "symbol_weights": list(config.symbol_weights),
        "payouts": {
            symbol: {str(count): mult for count, mult in sorted(table.items())}
            for symbol, table in config.payouts.items()
        },
        "line_options": list(config.line_options),
        "random_pattern_count": config.random_pattern_count,
    }
    canonical = json.dumps(config_snapshot, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
