"""Pytest fixtures for engine tests."""
from typing import Any

import pytest

from slot_core.config import Settings
from slot_core.logic.rng import SeededRNG
from slot_core.logic.sampler import WeightedSampler
from slot_core.logic.session import SessionController


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (long simulations)"
    )


class RecordingPresentationSink:
    """Presentation sink that keeps every emitted event in order."""

    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        self.events.append((event_name, data))

    def get_events(self, event_name: str) -> list[dict[str, Any]]:
        return [data for name, data in self.events if name == event_name]

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


class FailingSink:
    """Presentation sink that always raises."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        raise RuntimeError(f"Sink failure for {event_name}")


@pytest.fixture
def game_settings() -> Settings:
    """Default 5x4 game settings."""
    return Settings()


@pytest.fixture
def filler_sampler(game_settings: Settings) -> WeightedSampler:
    """Sampler for reel filler symbols."""
    return WeightedSampler(game_settings.symbols, game_settings.symbol_weights, rng=SeededRNG(seed=1))


@pytest.fixture
def recording_sink() -> RecordingPresentationSink:
    return RecordingPresentationSink()


@pytest.fixture
def session(game_settings: Settings, recording_sink: RecordingPresentationSink) -> SessionController:
    """Seeded session with a recording sink."""
    return SessionController(
        config=game_settings,
        rng=SeededRNG(seed=2025),
        sink=recording_sink,
        filler_rng=SeededRNG(seed=1),
    )
