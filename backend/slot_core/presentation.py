"""Presentation events handed to rendering, highlight, audio and balance collaborators."""
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class PresentationSink(Protocol):
    """Protocol for presentation sinks."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit a presentation event."""
        ...


class LoggingPresentationSink:
    """Default sink that logs presentation events."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Log presentation event."""
        logger.info("PRESENTATION %s: %s", event_name, data)


@dataclass
class SpinStartedEvent:
    """spin_started: bet taken, reels set in motion."""

    round_id: int
    lines: int
    bet_per_line: float
    total_bet: float
    balance: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "round_id": self.round_id,
            "lines": self.lines,
            "bet_per_line": self.bet_per_line,
            "total_bet": self.total_bet,
            "balance": self.balance,
        }


@dataclass
class ReelStoppedEvent:
    """reel_stopped: one column reached its final position (audio cue, bounce)."""

    round_id: int
    reel_index: int
    symbols: list[str]
    elapsed: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "round_id": self.round_id,
            "reel_index": self.reel_index,
            "symbols": self.symbols,
            "elapsed": self.elapsed,
        }


@dataclass
class SpinCompletedEvent:
    """spin_completed: finalized grid, winning lines and updated balance."""

    round_id: int
    config_hash: str
    grid: list[list[str]]
    total_win: float
    balance: float
    win_lines: list[dict[str, Any]] = field(default_factory=list)
    highlight: list[tuple[int, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "round_id": self.round_id,
            "config_hash": self.config_hash,
            "grid": self.grid,
            "total_win": self.total_win,
            "balance": self.balance,
            "win_lines": self.win_lines,
            "highlight": self.highlight,
        }


class PresentationService:
    """Forwards engine events to a presentation sink."""

    def __init__(self, sink: PresentationSink | None = None):
        self._sink = sink or LoggingPresentationSink()
        self._sink_errors = 0  # Counter for sink failures

    def set_sink(self, sink: PresentationSink) -> None:
        """Set the presentation sink (useful for testing)."""
        self._sink = sink

    @property
    def sink_errors(self) -> int:
        return self._sink_errors

    def _safe_emit(self, event_name: str, data: dict[str, Any]) -> None:
        """
        Emit event with exception safety.

        Sink failures MUST NOT break the tick loop.
        """
        try:
            self._sink.emit(event_name, data)
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Presentation sink error (count=%d): %s - %s",
                self._sink_errors,
                event_name,
                str(e),
            )

    def emit_spin_started(self, event: SpinStartedEvent) -> None:
        self._safe_emit("spin_started", event.to_dict())

    def emit_reel_stopped(self, event: ReelStoppedEvent) -> None:
        self._safe_emit("reel_stopped", event.to_dict())

    def emit_spin_completed(self, event: SpinCompletedEvent) -> None:
        self._safe_emit("spin_completed", event.to_dict())
