"""Session controller tests, including the end-to-end spin scenario."""
import pytest

from slot_core.config import Settings
from slot_core.errors import ErrorCode, GameError, InsufficientFundsError, InvalidTierSizeError
from slot_core.logic.evaluator import evaluate
from slot_core.logic.models import ReelPhase
from slot_core.logic.rng import SeededRNG
from slot_core.logic.session import SessionController

from conftest import FailingSink, RecordingPresentationSink


TICK = 1 / 60

SEVENS_ON_TOP = [
    ["seven", "cherry", "lemon", "orange"],
    ["seven", "grape", "diamond", "star"],
    ["seven", "orange", "cherry", "lemon"],
    ["seven", "star", "grape", "diamond"],
    ["seven", "lemon", "orange", "cherry"],
]


def make_session(seed: int = 2025, sink=None, **overrides) -> SessionController:
    return SessionController(
        config=Settings(**overrides),
        rng=SeededRNG(seed=seed),
        sink=sink or RecordingPresentationSink(),
        filler_rng=SeededRNG(seed=1),
    )


class TestEndToEnd:
    """5x4 grid, 20 lines, start then tick until every reel is stopped."""

    def test_grid_matches_targets(self, session):
        assert session.lines == 20
        session.start_spin()
        targets = [list(column) for column in session.results]

        outcome = session.run_until_stopped(TICK)

        assert outcome is not None
        assert all(reel.phase == ReelPhase.STOPPED for reel in session.reels)
        assert [list(column) for column in outcome.grid] == targets
        for reel, column in zip(session.reels, targets):
            assert reel.visible_symbols() == column

    def test_outcome_matches_direct_evaluation(self, session, game_settings):
        session.start_spin()
        outcome = session.run_until_stopped(TICK)
        expected = evaluate(
            session.results, session.catalog.tier(20), game_settings.payouts, 1.0
        )
        assert outcome.total_win == expected.total_win
        assert outcome.win_lines == expected.win_lines
        assert session.balance == pytest.approx(1000 - 20 + expected.total_win)
        assert session.last_win == expected.total_win

    def test_same_target_grid_same_win(self):
        wins = []
        for seed in (1, 2, 3):
            session = make_session(seed=seed)
            outcome = session.spin(SEVENS_ON_TOP, dt=TICK)
            wins.append(outcome.total_win)
        assert wins[0] == wins[1] == wins[2]

    def test_same_seed_same_grids_and_wins(self):
        first = make_session(seed=77)
        second = make_session(seed=77)
        for _ in range(3):
            a = first.spin(dt=TICK)
            b = second.spin(dt=1 / 30)  # frame rate must not matter
            assert a.grid == b.grid
            assert a.total_win == b.total_win

    def test_top_row_sevens_pays_line_one(self):
        session = make_session()
        outcome = session.spin(SEVENS_ON_TOP, dt=TICK)
        top = outcome.win_lines[0]
        assert top.line_index == 1
        assert top.symbol == "seven"
        assert top.count == 5
        assert top.amount == 500
        assert outcome.total_win == sum(line.amount for line in outcome.win_lines)

    def test_early_stop_still_lands_on_targets(self, session):
        session.start_spin()
        session.advance(TICK)
        session.request_stop()
        outcome = session.run_until_stopped(TICK)
        assert [list(c) for c in outcome.grid] == session.results


class TestSpinCommands:
    """Start/stop commands and their redundant forms."""

    def test_start_while_spinning_acts_as_stop(self, session):
        assert session.start_spin() is True
        session.advance(TICK)
        results = session.results
        assert session.start_spin() is False
        assert session.results is results
        assert all(reel.phase == ReelPhase.SLOWING for reel in session.reels)

    def test_request_stop_on_idle_session_is_harmless(self, session):
        session.request_stop()
        assert all(reel.phase == ReelPhase.IDLE for reel in session.reels)

    def test_insufficient_funds(self):
        session = make_session(starting_balance=10.0)
        with pytest.raises(InsufficientFundsError) as exc_info:
            session.start_spin()
        assert exc_info.value.code == ErrorCode.INSUFFICIENT_FUNDS
        assert exc_info.value.recoverable is True
        assert session.balance == 10.0
        assert session.spinning is False

    def test_bet_is_debited_at_start(self, session):
        session.start_spin()
        assert session.balance == 980.0

    def test_run_until_stopped_tick_budget(self, session):
        session.start_spin()
        with pytest.raises(GameError) as exc_info:
            session.run_until_stopped(TICK, max_ticks=1)
        assert exc_info.value.code == ErrorCode.ROUND_IN_PROGRESS

    def test_spin_rejected_mid_round(self, session):
        session.start_spin()
        with pytest.raises(GameError):
            session.spin()

    def test_spin_instant_matches_animated(self):
        instant = make_session(seed=5).spin_instant()
        animated = make_session(seed=5).spin(dt=TICK)
        assert instant.grid == animated.grid
        assert instant.total_win == animated.total_win

    def test_invalid_target_grid(self, session):
        with pytest.raises(GameError) as exc_info:
            session.start_spin([["seven"] * 4] * 3)
        assert exc_info.value.code == ErrorCode.INVALID_CONFIG
        assert session.balance == 1000.0


class TestBetControls:
    """Lines and bet-per-line controls."""

    def test_change_lines_cycles(self, session):
        assert session.change_lines(1) == 40
        assert session.change_lines(1) == 100
        assert session.change_lines(1) == 20
        assert session.change_lines(-1) == 100

    def test_total_bet(self, session):
        session.change_lines(1)
        session.change_bet_per_line(5)
        assert session.bet_per_line == 1.5
        assert session.total_bet() == 60.0

    def test_controls_locked_while_spinning(self, session):
        session.start_spin()
        assert session.change_lines(1) == 20
        assert session.change_bet_per_line(1) == 1.0

    def test_bet_per_line_steps(self, session, game_settings):
        """Up/down move by bet_step_per_line."""
        assert game_settings.bet_step_per_line == 0.10
        assert session.change_bet_per_line(1) == 1.1
        assert session.change_bet_per_line(-1) == 1.0
        assert session.change_bet_per_line(-3) == pytest.approx(0.7)

    def test_bet_per_line_range(self, session):
        session.set_bet_per_line(10.0)
        assert session.change_bet_per_line(1) == 10.0
        session.set_bet_per_line(0.1)
        assert session.change_bet_per_line(-1) == pytest.approx(0.1)

    def test_custom_bet_step(self):
        session = make_session(bet_step_per_line=0.5)
        assert session.change_bet_per_line(1) == 1.5
        assert session.change_bet_per_line(-2) == pytest.approx(0.5)

    def test_set_bet_per_line_rejects_out_of_range(self, session):
        with pytest.raises(GameError) as exc_info:
            session.set_bet_per_line(50)
        assert exc_info.value.code == ErrorCode.INVALID_BET

    def test_select_unknown_tier(self, session):
        with pytest.raises(InvalidTierSizeError):
            session.select_lines(30)

    def test_select_lines(self, session):
        session.select_lines(100)
        assert len(session.active_paylines()) == 100

    def test_catalog_too_small_for_tier(self):
        """A 3x2 grid has at most 8 distinct paylines."""
        with pytest.raises(InvalidTierSizeError):
            make_session(reels=3, rows=2, line_options=[5, 20], default_lines=5)


class TestPresentationEvents:
    """Events forwarded to presentation collaborators."""

    def test_event_sequence(self, session, recording_sink):
        session.spin(dt=TICK)
        names = recording_sink.names()
        assert names[0] == "spin_started"
        assert names[-1] == "spin_completed"
        stopped = recording_sink.get_events("reel_stopped")
        assert [e["reel_index"] for e in stopped] == [0, 1, 2, 3, 4]
        times = [e["elapsed"] for e in stopped]
        assert times == sorted(times)

    def test_spin_completed_payload(self, recording_sink):
        session = make_session(sink=recording_sink)
        session.spin(SEVENS_ON_TOP, dt=TICK)
        completed = recording_sink.get_events("spin_completed")[0]
        assert len(completed["config_hash"]) == 16
        assert completed["grid"] == SEVENS_ON_TOP
        assert completed["balance"] == session.balance
        assert completed["win_lines"][0]["symbol"] == "seven"
        assert [0, 0] in [list(cell) for cell in completed["highlight"]]

    def test_sink_failure_does_not_break_spin(self):
        session = make_session(sink=FailingSink())
        outcome = session.spin(dt=TICK)
        assert outcome is not None
        assert session.presentation.sink_errors == 7  # started + 5 reels + completed

    def test_bounce_after_stop(self, session):
        session.start_spin()
        bounced = False
        while True:
            frame = session.advance(TICK)
            if any(r.bounce_offset != 0 for r in frame.reels):
                bounced = True
            if frame.outcome is not None:
                break
        assert bounced
        for _ in range(200):
            frame = session.advance(TICK)
        assert all(r.bounce_offset == 0 for r in frame.reels)
