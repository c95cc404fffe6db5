"""Post-stop bounce tests."""
from slot_core.logic.tween import MAX_REVERSALS, STEP_SECONDS, BounceTween


class TestBounceTween:
    def test_inactive_until_started(self, game_settings):
        bounce = BounceTween(game_settings)
        assert bounce.advance(1.0) == 0.0
        assert bounce.active is False

    def test_first_step_moves_by_speed(self, game_settings):
        bounce = BounceTween(game_settings)
        bounce.start()
        assert bounce.advance(STEP_SECONDS) == game_settings.bounce_speed

    def test_stays_within_overshoot(self, game_settings):
        bounce = BounceTween(game_settings)
        bounce.start()
        limit = game_settings.bounce_amplitude + game_settings.bounce_speed
        for _ in range(600):
            assert abs(bounce.advance(STEP_SECONDS)) <= limit

    def test_settles_at_zero(self, game_settings):
        bounce = BounceTween(game_settings)
        bounce.start()
        bounce.advance(5.0)
        assert bounce.active is False
        assert bounce.offset == 0.0
        assert bounce._reversals == MAX_REVERSALS

    def test_restart(self, game_settings):
        bounce = BounceTween(game_settings)
        bounce.start()
        bounce.advance(5.0)
        bounce.start()
        assert bounce.active is True
        assert bounce.offset == 0.0
