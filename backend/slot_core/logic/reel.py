"""
Per-reel spin state machine.

A reel is a strip of rows + strip_buffer slots scrolling downward through a
window of `rows` cells. Offsets are in cells: offset 0 is the top visible
row, offset -1 is the cell just above the window. A slot reaching the bottom
of the strip (offset >= strip_length - 1) wraps back to the top, which is
where it picks up a new value.

Every slot k sits at k + shift (modulo the strip length), where shift is the
distance scrolled since start_spin. Target pre-load fixes the whole-cell
shift the strip will stop at and writes each slot the target value of the
row it lands on. Slots inside the window at that moment stay pending and
only take their value once they are out of view, so a value never changes
while it is on screen. The slowdown is placed so the strip comes to rest on
that shift, which makes the final snap a sub-pixel correction.
"""
import logging
import math
from collections.abc import Sequence

from slot_core.config import Settings, settings as default_settings
from slot_core.errors import InvalidConfigError
from slot_core.logic.models import ReelFrame, ReelPhase, ReelState, StripSlot, Symbol
from slot_core.logic.sampler import WeightedSampler


logger = logging.getLogger(__name__)

MOVING = (ReelPhase.SPINNING, ReelPhase.SLOWING)


def is_visible(offset: float, rows: int) -> bool:
    """A slot is visible while any part of its cell overlaps the window."""
    return -1.0 < offset < rows


def ease_out_quart(progress: float) -> float:
    return 1 - (1 - progress) ** 4


class ReelSpinStateMachine:
    """
    Temporal evolution of one reel column from spin start to a clean stop.

    Phases: IDLE -> SPINNING -> SLOWING -> STOPPED (-> SPINNING on the next
    start_spin). All timing comes from the dt handed to advance().

    Motion is a cruise at nominal speed followed by a quartic deceleration
    covering slowdown_distance cells. The cruise ends exactly where that
    deceleration brings the strip to rest on stop_shift.
    """

    def __init__(
        self,
        index: int,
        sampler: WeightedSampler,
        config: Settings | None = None,
        initial_column: Sequence[Symbol] | None = None,
    ):
        self.config = config or default_settings
        self.sampler = sampler
        self.rows = self.config.rows
        self.strip_length = self.config.strip_length
        self.slowdown_start = self.config.slowdown_start(index)
        self.load_threshold = self.config.load_threshold(index)

        nominal = self.config.nominal_speed(index)
        # distance covered by speed = nominal * (1 - t)^4 over the slowdown
        self.slowdown_distance = nominal * self.config.slowdown_duration / 5
        self.state = ReelState(
            index=index,
            nominal_speed=nominal,
            current_speed=0.0,
            slots=[
                StripSlot(offset=float(k), value=sampler.pick())
                for k in range(self.strip_length)
            ],
        )
        if initial_column is not None:
            self._check_column(initial_column)
            for row, value in enumerate(initial_column):
                self.state.slots[row].value = value

    @property
    def index(self) -> int:
        return self.state.index

    @property
    def phase(self) -> ReelPhase:
        return self.state.phase

    @property
    def is_stopped(self) -> bool:
        return self.state.phase == ReelPhase.STOPPED

    def _check_column(self, column: Sequence[Symbol]) -> None:
        if len(column) != self.rows:
            raise InvalidConfigError(
                f"Reel {self.index}: target column has {len(column)} symbols, expected {self.rows}"
            )

    def start_spin(self, target_column: Sequence[Symbol]) -> bool:
        """
        Begin spinning toward target_column.

        Ignored while already SPINNING or SLOWING; returns whether it took effect.
        """
        state = self.state
        if state.phase in MOVING:
            logger.debug("Reel %d: start_spin ignored in %s", self.index, state.phase.value)
            return False
        self._check_column(target_column)

        state.target_column = list(target_column)
        state.targets_loaded = False
        for slot in state.slots:
            slot.loaded = False
        state.current_speed = state.nominal_speed
        state.elapsed = 0.0
        state.slowdown_elapsed = 0.0
        state.shift = 0.0
        state.stop_shift = None
        state.decelerating = False
        state.phase = ReelPhase.SPINNING
        return True

    def request_stop(self) -> bool:
        """
        Start slowing down now. Only a SPINNING reel reacts.

        The stop point is planned again from the current position so the
        reel stops as soon as the values on screen allow.
        """
        if self.state.phase != ReelPhase.SPINNING:
            return False
        self._enter_slowing(replan=True)
        return True

    def advance(self, dt: float) -> None:
        """Move the reel forward by dt seconds of accumulated time."""
        state = self.state
        if state.phase not in MOVING:
            return

        state.elapsed += dt
        if state.decelerating:
            self._decelerate(dt)
            return

        leftover = self._cruise(dt)
        if not state.targets_loaded and state.elapsed >= self.load_threshold:
            self.preload_targets()

        if leftover is not None:
            self._begin_deceleration()
            self._decelerate(leftover)
        elif (
            state.phase == ReelPhase.SPINNING
            and not state.targets_loaded
            and state.elapsed > self.slowdown_start
        ):
            # only reached when the load threshold lies past the slowdown start
            self._enter_slowing()

    def _decel_at(self) -> float | None:
        if self.state.stop_shift is None:
            return None
        return self.state.stop_shift - self.slowdown_distance

    def _cruise(self, dt: float) -> float | None:
        """
        Scroll at nominal speed.

        Returns None while the deceleration point is ahead, otherwise the
        part of dt left over after reaching it.
        """
        state = self.state
        distance = state.nominal_speed * dt
        decel_at = self._decel_at()
        if decel_at is None or state.shift + distance < decel_at:
            self._scroll(distance)
            return None
        travelled = max(decel_at - state.shift, 0.0)
        self._scroll(travelled)
        return dt - travelled / state.nominal_speed

    def _begin_deceleration(self) -> None:
        state = self.state
        if state.phase == ReelPhase.SPINNING:
            self._enter_slowing()
        state.decelerating = True
        state.slowdown_elapsed = 0.0

    def _decelerate(self, dt: float) -> None:
        state = self.state
        state.slowdown_elapsed += dt
        progress = min(state.slowdown_elapsed / self.config.slowdown_duration, 1.0)
        remaining = self.slowdown_distance * (1 - progress) ** 5
        self._scroll(max(state.stop_shift - remaining - state.shift, 0.0))
        state.current_speed = state.nominal_speed * (1 - ease_out_quart(progress))
        if state.current_speed < self.config.stop_speed_epsilon or progress >= 1.0:
            self.finalize()

    def _scroll(self, distance: float) -> None:
        state = self.state
        wrap_at = self.strip_length - 1
        for k, slot in enumerate(state.slots):
            slot.offset += distance
            wrapped = False
            while slot.offset >= wrap_at:
                slot.offset -= self.strip_length
                wrapped = True

            if state.targets_loaded:
                # a pending slot takes its value once it is out of view
                if not slot.loaded and (wrapped or not is_visible(slot.offset, self.rows)):
                    slot.value = self._target_for(k)
                    slot.loaded = True
            elif wrapped and state.elapsed < self.load_threshold:
                slot.value = self.sampler.pick()
        state.shift += distance

    def _target_at(self, slot_index: int, stop_shift: int) -> Symbol:
        """Target value of the cell slot_index rests on when the strip stops at stop_shift."""
        landing = (slot_index + stop_shift + 1) % self.strip_length - 1
        return self.state.target_column[landing % self.rows]

    def _target_for(self, slot_index: int) -> Symbol:
        return self._target_at(slot_index, self.state.stop_shift)

    def _stop_fits(self, stop_shift: int) -> bool:
        """Every slot staying on screen until stop_shift already shows its target."""
        state = self.state
        travel = stop_shift - state.shift
        for k, slot in enumerate(state.slots):
            stays = is_visible(slot.offset, self.rows) and slot.offset + travel < self.rows
            if stays and slot.value != self._target_at(k, stop_shift):
                return False
        return True

    def _plan_stop(self, earliest: float) -> int:
        # terminates: past rows + 1 cells of travel every visible slot has left
        stop_shift = math.ceil(earliest - 1e-9)
        while not self._stop_fits(stop_shift):
            stop_shift += 1
        return stop_shift

    def _assign_targets(self) -> None:
        for k, slot in enumerate(self.state.slots):
            target = self._target_for(k)
            if is_visible(slot.offset, self.rows):
                slot.loaded = slot.value == target
            else:
                slot.value = target
                slot.loaded = True

    def preload_targets(self, earliest: float | None = None) -> None:
        """
        Rewrite the strip to the target sequence in one step.

        Plans the stop no earlier than `earliest` cells of shift (by default
        where the automatic slowdown would end). Off-screen slots are written
        now; slots inside the window stay pending until they leave it.
        """
        state = self.state
        if state.targets_loaded:
            return
        if earliest is None:
            cruise = max(self.slowdown_start - state.elapsed, 0.0) * state.nominal_speed
            earliest = state.shift + cruise + self.slowdown_distance
        state.stop_shift = self._plan_stop(earliest)
        state.targets_loaded = True
        self._assign_targets()
        logger.debug(
            "Reel %d: targets loaded at %.3fs, stop at shift %d (%d slots pending)",
            self.index, state.elapsed, state.stop_shift,
            sum(not s.loaded for s in state.slots),
        )

    def _enter_slowing(self, replan: bool = False) -> None:
        state = self.state
        earliest = state.shift + self.slowdown_distance
        if not state.targets_loaded:
            self.preload_targets(earliest)
        elif replan:
            state.stop_shift = self._plan_stop(earliest)
            self._assign_targets()
        state.phase = ReelPhase.SLOWING
        logger.debug("Reel %d: slowing at %.3fs", self.index, state.elapsed)

    def finalize(self) -> None:
        """
        Snap the strip to the grid with the target column showing.

        Slots are renumbered by the cell they rest on, so slot r is row r.
        No-op unless the reel is SPINNING or SLOWING, so calling it twice is safe.
        """
        state = self.state
        if state.phase not in MOVING:
            return
        base = math.floor(state.shift + 0.5)
        cells: list[StripSlot] = [None] * self.strip_length
        for k, slot in enumerate(state.slots):
            cells[(k + base) % self.strip_length] = slot
        for cell, slot in enumerate(cells):
            slot.offset = float(cell)
            slot.value = state.target_column[cell % self.rows]
            slot.loaded = True
        state.slots = cells
        state.shift = 0.0
        state.stop_shift = None
        state.decelerating = False
        state.targets_loaded = True
        state.current_speed = 0.0
        state.phase = ReelPhase.STOPPED
        logger.debug("Reel %d: stopped at %.3fs", self.index, state.elapsed)

    def visible_symbols(self) -> list[Symbol]:
        """Values of the first `rows` slots, i.e. the column shown at rest."""
        return [slot.value for slot in self.state.slots[: self.rows]]

    def frame(self, bounce_offset: float = 0.0) -> ReelFrame:
        return ReelFrame(
            index=self.index,
            phase=self.state.phase,
            positions=tuple((slot.offset, slot.value) for slot in self.state.slots),
            bounce_offset=bounce_offset,
        )
