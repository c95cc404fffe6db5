"""Engine data models: paylines, win lines, reel state and spin outcome."""
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

Symbol = str
Payline = tuple[int, ...]
Grid = list[list[Symbol]]  # grid[reel][row]


class ReelPhase(str, Enum):
    """Lifecycle of one reel column."""
    IDLE = "IDLE"
    SPINNING = "SPINNING"
    SLOWING = "SLOWING"
    STOPPED = "STOPPED"


class WinLine(BaseModel):
    """One winning payline of an evaluated grid."""

    model_config = ConfigDict(frozen=True)

    line_index: int  # 1-based, for display
    payline: Payline
    symbol: Symbol
    symbols: tuple[Symbol, ...]
    count: int
    amount: float


class EvaluationResult(BaseModel):
    """Total win and winning lines in tier order."""

    model_config = ConfigDict(frozen=True)

    total_win: float = 0.0
    win_lines: tuple[WinLine, ...] = ()


class StripSlot(BaseModel):
    """
    One buffered position of a reel strip.

    offset is measured in cells from the top of the visible window.
    loaded marks a slot that already carries its target value.
    """
    offset: float
    value: Symbol
    loaded: bool = False


class ReelState(BaseModel):
    """Mutable state of one reel, owned by its state machine."""
    index: int
    phase: ReelPhase = ReelPhase.IDLE
    slots: list[StripSlot] = Field(default_factory=list)
    target_column: list[Symbol] = Field(default_factory=list)
    nominal_speed: float = 0.0
    current_speed: float = 0.0
    targets_loaded: bool = False
    elapsed: float = 0.0
    slowdown_elapsed: float = 0.0
    # cells scrolled since start_spin, and the whole-cell shift the strip stops at
    shift: float = 0.0
    stop_shift: int | None = None
    decelerating: bool = False


class ReelFrame(BaseModel):
    """Per-tick view of a reel for presentation: (offset, value) per slot."""

    model_config = ConfigDict(frozen=True)

    index: int
    phase: ReelPhase
    positions: tuple[tuple[float, Symbol], ...]
    bounce_offset: float = 0.0


class SpinOutcome(BaseModel):
    """Finalized grid and its evaluation."""

    model_config = ConfigDict(frozen=True)

    grid: tuple[tuple[Symbol, ...], ...]
    lines: int
    bet_per_line: float
    total_bet: float
    total_win: float
    win_lines: tuple[WinLine, ...] = ()


class TickFrame(BaseModel):
    """Everything presentation needs after one advance() call."""

    model_config = ConfigDict(frozen=True)

    reels: tuple[ReelFrame, ...]
    spinning: bool
    outcome: SpinOutcome | None = None
