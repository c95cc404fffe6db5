"""Game configuration: grid shape, symbols, payouts, bets and reel timing."""
from pydantic import ConfigDict, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings with defaults of the 5x4 emoji-reel game."""

    model_config = ConfigDict(env_prefix="SLOT_")

    # Grid
    reels: int = 5
    rows: int = 4

    # Symbols and their weights (higher = appears more often)
    symbols: list[str] = ["cherry", "lemon", "orange", "grape", "diamond", "star", "seven"]
    symbol_weights: list[float] = [25, 25, 20, 15, 8, 5, 2]

    # Payout table: symbol -> {consecutive count: multiplier of bet per line}
    payouts: dict[str, dict[int, float]] = {
        "cherry": {3: 5, 4: 15, 5: 50},
        "lemon": {3: 5, 4: 15, 5: 50},
        "orange": {3: 10, 4: 25, 5: 75},
        "grape": {3: 15, 4: 40, 5: 100},
        "diamond": {3: 30, 4: 75, 5: 200},
        "star": {3: 50, 4: 125, 5: 300},
        "seven": {3: 100, 4: 250, 5: 500},
    }

    # Betting
    line_options: list[int] = [20, 40, 100]
    default_lines: int = 20
    bet_per_line: float = 1.0
    min_bet_per_line: float = 0.10
    max_bet_per_line: float = 10.0
    bet_step_per_line: float = 0.10
    starting_balance: float = 1000.0

    # Reel timing (seconds). Reel i starts slowing at spin_duration + i * slowdown_stagger
    spin_duration: float = 1.25
    slowdown_stagger: float = 0.2
    slowdown_duration: float = 1.0
    load_fraction: float = 0.4
    load_fraction_step: float = 0.02

    # Reel motion (cells per second)
    spin_speed: float = 9.0
    spin_speed_step: float = 2.2
    stop_speed_epsilon: float = 0.1
    strip_buffer: int = 8

    # Payline catalog
    random_pattern_count: int = 40

    # Post-stop bounce (cosmetic, in pixels per 60 Hz step)
    bounce_amplitude: float = 15.0
    bounce_speed: float = 3.0
    bounce_damping: float = 0.65

    # Fixed seed for reproducible sessions (None = production RNG)
    rng_seed: int | None = None

    @model_validator(mode="after")
    def check_consistency(self) -> "Settings":
        if self.reels < 1 or self.rows < 1:
            raise ValueError("reels and rows must be positive")
        if len(self.symbols) != len(self.symbol_weights):
            raise ValueError(
                f"symbols ({len(self.symbols)}) and symbol_weights "
                f"({len(self.symbol_weights)}) differ in length"
            )
        if self.default_lines not in self.line_options:
            raise ValueError(
                f"default_lines {self.default_lines} not in line_options {self.line_options}"
            )
        if self.min_bet_per_line > self.max_bet_per_line:
            raise ValueError("min_bet_per_line exceeds max_bet_per_line")
        return self

    def nominal_speed(self, reel_index: int) -> float:
        """Spin speed of a reel; later reels spin faster so columns never move in lockstep."""
        return self.spin_speed + reel_index * self.spin_speed_step

    def slowdown_start(self, reel_index: int) -> float:
        """Elapsed time at which a reel begins decelerating (cascading left to right)."""
        return self.spin_duration + reel_index * self.slowdown_stagger

    def load_threshold(self, reel_index: int) -> float:
        """Elapsed time at which a reel pre-loads its target values."""
        fraction = self.load_fraction - reel_index * self.load_fraction_step
        return self.slowdown_start(reel_index) * fraction

    @property
    def strip_length(self) -> int:
        return self.rows + self.strip_buffer


settings = Settings()
