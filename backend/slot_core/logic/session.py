"""Session controller: one player's spins from bet to payout."""
import logging
from collections.abc import Sequence

from slot_core.config import Settings, settings as default_settings
from slot_core.config_hash import get_config_hash
from slot_core.errors import ErrorCode, GameError, InsufficientFundsError
from slot_core.logic.evaluator import evaluate, winning_positions
from slot_core.logic.models import Grid, Payline, SpinOutcome, Symbol, TickFrame
from slot_core.logic.paylines import PaylineGenerator
from slot_core.logic.reel import ReelSpinStateMachine
from slot_core.logic.rng import ProductionRNG, RNGBase, SeededRNG
from slot_core.logic.sampler import WeightedSampler
from slot_core.logic.tween import BounceTween
from slot_core.presentation import (
    PresentationService,
    PresentationSink,
    ReelStoppedEvent,
    SpinCompletedEvent,
    SpinStartedEvent,
)
from slot_core.validators import (
    validate_bet_per_line,
    validate_line_count,
    validate_target_grid,
)


logger = logging.getLogger(__name__)

DEFAULT_TICK = 1 / 60
DEFAULT_MAX_TICKS = 10_000


class SessionController:
    """
    Orchestrates spins for a single session.

    Implements:
    - Bet handling (lines, bet per line, balance)
    - Target grid sampling, column by column
    - Driving every reel's state machine from one advance(dt) per frame
    - Evaluation once all reels are stopped
    - Presentation events (spin_started, reel_stopped, spin_completed)

    The outcome RNG feeds the target grid and the payline catalog. Reel
    filler symbols come from a separate RNG so animation timing never shifts
    the outcome sequence.
    """

    def __init__(
        self,
        config: Settings | None = None,
        rng: RNGBase | None = None,
        sink: PresentationSink | None = None,
        filler_rng: RNGBase | None = None,
    ):
        self.config = config or default_settings
        if rng is None:
            rng = SeededRNG(self.config.rng_seed) if self.config.rng_seed is not None else ProductionRNG()
        self.rng = rng

        cfg = self.config
        self.sampler = WeightedSampler(cfg.symbols, cfg.symbol_weights, rng=rng)
        self.filler_sampler = WeightedSampler(
            cfg.symbols, cfg.symbol_weights, rng=filler_rng or ProductionRNG()
        )
        self.generator = PaylineGenerator(
            cfg.reels,
            cfg.rows,
            rng=rng,
            random_count=cfg.random_pattern_count,
            target_size=max(cfg.line_options),
        )
        self.catalog = self.generator.generate_all()
        # Every selectable tier must exist up front
        self.catalog.tiers(cfg.line_options)

        self.presentation = PresentationService(sink)
        self.config_hash = get_config_hash(cfg)

        self.reels = [
            ReelSpinStateMachine(i, self.filler_sampler, cfg) for i in range(cfg.reels)
        ]
        self.bounces = [BounceTween(cfg) for _ in range(cfg.reels)]

        validate_line_count(cfg.default_lines, cfg, len(self.catalog))
        validate_bet_per_line(cfg.bet_per_line, cfg)
        self.balance = cfg.starting_balance
        self.lines = cfg.default_lines
        self.bet_per_line = cfg.bet_per_line
        self.last_win = 0.0
        self.spinning = False
        self.round_id = 0
        self.results: Grid = []
        self.last_outcome: SpinOutcome | None = None
        self.elapsed = 0.0
        self._stopped_reported: set[int] = set()

    # === Bet handling ===

    def total_bet(self) -> float:
        return round(self.lines * self.bet_per_line, 2)

    def active_paylines(self) -> tuple[Payline, ...]:
        return self.catalog.tier(self.lines)

    def change_lines(self, direction: int) -> int:
        """Step through line_options, wrapping at both ends. Ignored while spinning."""
        if self.spinning:
            return self.lines
        options = self.config.line_options
        current = options.index(self.lines) if self.lines in options else 0
        self.lines = options[(current + direction) % len(options)]
        return self.lines

    def select_lines(self, lines: int) -> None:
        """Pick a tier directly. Raises INVALID_TIER_SIZE for unknown tiers."""
        validate_line_count(lines, self.config, len(self.catalog))
        if not self.spinning:
            self.lines = lines

    def change_bet_per_line(self, direction: int) -> float:
        """Step bet per line up (+1) or down (-1) by bet_step_per_line.

        Steps leaving the configured range are ignored, as are changes mid-spin.
        """
        if self.spinning:
            return self.bet_per_line
        new_bet = round(self.bet_per_line + direction * self.config.bet_step_per_line, 2)
        if self.config.min_bet_per_line <= new_bet <= self.config.max_bet_per_line:
            self.bet_per_line = new_bet
        return self.bet_per_line

    def set_bet_per_line(self, bet_per_line: float) -> None:
        """Raises INVALID_BET outside the configured range."""
        validate_bet_per_line(bet_per_line, self.config)
        if not self.spinning:
            self.bet_per_line = bet_per_line

    # === Spin lifecycle ===

    def sample_grid(self) -> Grid:
        """Target grid, grid[reel][row], drawn reel by reel."""
        return [self.sampler.pick_many(self.config.rows) for _ in range(self.config.reels)]

    def start_spin(self, target_grid: Sequence[Sequence[Symbol]] | None = None) -> bool:
        """
        Take the bet and set every reel spinning toward a new target grid.

        While a spin is running this acts as the stop button instead and
        returns False.
        """
        if self.spinning:
            self.request_stop()
            return False

        total_bet = self.total_bet()
        if self.balance < total_bet:
            raise InsufficientFundsError(
                f"Balance {self.balance:.2f} does not cover total bet {total_bet:.2f}"
            )

        if target_grid is None:
            grid = self.sample_grid()
        else:
            validate_target_grid(target_grid, self.config)
            grid = [list(column) for column in target_grid]

        self.balance = round(self.balance - total_bet, 2)
        self.last_win = 0.0
        self.results = grid
        self.round_id += 1
        self.spinning = True
        self.elapsed = 0.0
        self._stopped_reported = set()

        for reel, column in zip(self.reels, grid):
            reel.start_spin(column)

        logger.info(
            "Round %d: spin started, %d lines x %.2f = %.2f, balance %.2f",
            self.round_id, self.lines, self.bet_per_line, total_bet, self.balance,
        )
        self.presentation.emit_spin_started(SpinStartedEvent(
            round_id=self.round_id,
            lines=self.lines,
            bet_per_line=self.bet_per_line,
            total_bet=total_bet,
            balance=self.balance,
        ))
        return True

    def request_stop(self) -> None:
        """Ask every still-spinning reel to begin slowing down."""
        for reel in self.reels:
            reel.request_stop()

    def skip_animation(self) -> None:
        """Slam stop: snap every reel to its target immediately."""
        for reel in self.reels:
            reel.finalize()

    def advance(self, dt: float) -> TickFrame:
        """
        Advance all reels by dt, in ascending reel order.

        Once every reel is stopped the grid is evaluated and the returned
        frame carries the outcome.
        """
        if self.spinning:
            self.elapsed += dt

        for reel in self.reels:
            reel.advance(dt)
            if self.spinning and reel.is_stopped and reel.index not in self._stopped_reported:
                self._stopped_reported.add(reel.index)
                self.bounces[reel.index].start()
                self.presentation.emit_reel_stopped(ReelStoppedEvent(
                    round_id=self.round_id,
                    reel_index=reel.index,
                    symbols=reel.visible_symbols(),
                    elapsed=self.elapsed,
                ))

        for bounce in self.bounces:
            bounce.advance(dt)

        outcome = None
        if self.spinning and all(reel.is_stopped for reel in self.reels):
            outcome = self._finish_spin()

        return TickFrame(
            reels=tuple(
                reel.frame(bounce.offset) for reel, bounce in zip(self.reels, self.bounces)
            ),
            spinning=self.spinning,
            outcome=outcome,
        )

    def _finish_spin(self) -> SpinOutcome:
        self.spinning = False
        grid = [reel.visible_symbols() for reel in self.reels]
        result = evaluate(grid, self.active_paylines(), self.config.payouts, self.bet_per_line)

        self.last_win = result.total_win
        self.balance = round(self.balance + result.total_win, 2)
        outcome = SpinOutcome(
            grid=tuple(tuple(column) for column in grid),
            lines=self.lines,
            bet_per_line=self.bet_per_line,
            total_bet=self.total_bet(),
            total_win=result.total_win,
            win_lines=result.win_lines,
        )
        self.last_outcome = outcome

        logger.info(
            "Round %d: %d winning lines, win %.2f, balance %.2f",
            self.round_id, len(result.win_lines), result.total_win, self.balance,
        )
        self.presentation.emit_spin_completed(SpinCompletedEvent(
            round_id=self.round_id,
            config_hash=self.config_hash,
            grid=[list(column) for column in grid],
            total_win=result.total_win,
            balance=self.balance,
            win_lines=[line.model_dump(mode="json") for line in result.win_lines],
            highlight=sorted(winning_positions(result.win_lines)),
        ))
        return outcome

    def run_until_stopped(
        self, dt: float = DEFAULT_TICK, max_ticks: int = DEFAULT_MAX_TICKS
    ) -> SpinOutcome | None:
        """
        Drive advance(dt) until the current spin completes.

        Returns the last outcome when no spin is running.
        """
        if not self.spinning:
            return self.last_outcome
        for _ in range(max_ticks):
            frame = self.advance(dt)
            if frame.outcome is not None:
                return frame.outcome
        raise GameError(
            ErrorCode.ROUND_IN_PROGRESS,
            f"Round {self.round_id} still spinning after {max_ticks} ticks",
        )

    def spin(
        self,
        target_grid: Sequence[Sequence[Symbol]] | None = None,
        dt: float = DEFAULT_TICK,
    ) -> SpinOutcome:
        """Full animated spin: start, tick until stopped, evaluate."""
        if self.spinning:
            raise GameError(ErrorCode.ROUND_IN_PROGRESS, f"Round {self.round_id} in progress")
        self.start_spin(target_grid)
        return self.run_until_stopped(dt)

    def spin_instant(self, target_grid: Sequence[Sequence[Symbol]] | None = None) -> SpinOutcome:
        """Spin with the animation skipped (turbo / headless simulation)."""
        if self.spinning:
            raise GameError(ErrorCode.ROUND_IN_PROGRESS, f"Round {self.round_id} in progress")
        self.start_spin(target_grid)
        self.skip_animation()
        return self.advance(0.0).outcome
