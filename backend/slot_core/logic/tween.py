"""Cosmetic post-stop bounce, driven by the same tick loop as the reels."""
from slot_core.config import Settings, settings as default_settings

STEP_SECONDS = 1 / 60
MAX_REVERSALS = 3


class BounceTween:
    """
    Damped back-and-forth offset applied to a reel container after it stops.

    The offset moves by speed * direction per 60 Hz step; past the amplitude
    it reverses and loses speed. After three reversals it rests at 0.
    """

    def __init__(self, config: Settings | None = None):
        config = config or default_settings
        self.amplitude = config.bounce_amplitude
        self.initial_speed = config.bounce_speed
        self.damping = config.bounce_damping
        self.offset = 0.0
        self.active = False
        self._speed = 0.0
        self._direction = 1
        self._reversals = 0
        self._accumulator = 0.0

    def start(self) -> None:
        self.offset = 0.0
        self.active = True
        self._speed = self.initial_speed
        self._direction = 1
        self._reversals = 0
        self._accumulator = 0.0

    def advance(self, dt: float) -> float:
        """Advance by dt seconds; returns the current offset."""
        if not self.active:
            return self.offset
        self._accumulator += dt
        while self.active and self._accumulator >= STEP_SECONDS:
            self._accumulator -= STEP_SECONDS
            self._step()
        return self.offset

    def _step(self) -> None:
        self.offset += self._speed * self._direction
        if abs(self.offset) > self.amplitude:
            self._direction *= -1
            self._speed *= self.damping
            self._reversals += 1
        if self._reversals >= MAX_REVERSALS:
            self.offset = 0.0
            self.active = False
