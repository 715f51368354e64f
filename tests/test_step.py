"""Tests for the per-tick simulation step."""

from conftest import StubRandom

from runforge.engine.constants import (
    COLLECTIBLE_WINDOW,
    CULL_Y,
    INITIAL_SPEED,
    OBSTACLE_WINDOW,
    PARTICLE_BURST,
    PLAYER_Y,
    SPAWN_Y,
    SPEED_INCREMENT,
)
from runforge.engine.entities import Collectible, Obstacle, PlayerState, RunState
from runforge.engine.rules import spawn_interval
from runforge.engine.step import step

# Archetype indexes in the desert theme
JUMP, SLIDE, DODGE = 0, 1, 2

# Entities placed here overlap the player after one tick of movement
ENTERING_Y = PLAYER_Y - OBSTACLE_WINDOW + 1 - (INITIAL_SPEED + SPEED_INCREMENT)


def quiet_state(**kwargs) -> RunState:
    """A run state that will not spawn anything for a long time."""
    return RunState(last_spawn_frame=10 ** 9, **kwargs)


def safe_rng() -> StubRandom:
    """Spawns collectibles in lanes 0 and 1 only."""
    return StubRandom(value=0.9, order=(0, 1, 2))


class TestProgression:
    def test_speed_and_interval_over_a_long_run(self, desert_theme):
        state = RunState(player=PlayerState(lane=2))
        rng = safe_rng()

        speeds = [state.speed]
        intervals = [spawn_interval(state.speed)]
        for _ in range(3000):
            step(state, desert_theme, rng)
            speeds.append(state.speed)
            intervals.append(spawn_interval(state.speed))

        assert not state.over
        assert all(b > a for a, b in zip(speeds, speeds[1:]))
        assert all(a >= b for a, b in zip(intervals, intervals[1:]))
        assert min(intervals) >= 25

    def test_multiplier_boundaries(self, desert_theme):
        state = RunState(player=PlayerState(lane=2))
        rng = safe_rng()
        seen = {}
        for _ in range(2000):
            step(state, desert_theme, rng)
            if state.frame in (999, 1000, 1999, 2000):
                seen[state.frame] = state.multiplier

        assert seen == {999: 1, 1000: 2, 1999: 2, 2000: 3}

    def test_passive_score_is_partial_sum(self, desert_theme):
        state = RunState(player=PlayerState(lane=2))
        rng = safe_rng()
        for _ in range(2000):
            step(state, desert_theme, rng)

        # Passive points use the multiplier in effect before that frame's bump
        expected = sum(1 + (k - 1) // 1000 for k in range(10, 2001, 10))
        assert expected == 300
        assert state.score == expected
        assert state.coins == 0

    def test_boost_label_on_multiplier_bump(self, desert_theme):
        state = quiet_state(frame=999)
        step(state, desert_theme, StubRandom())

        assert state.multiplier == 2
        assert any(p.text == "X2 BOOST!" for p in state.particles)

    def test_spawn_fills_one_or_two_lanes(self, desert_theme):
        single = RunState()
        for _ in range(60):
            step(single, desert_theme, StubRandom(value=0.5, order=(0, 1, 2)))
        assert [o.lane for o in single.obstacles] == [0]

        double = RunState()
        for _ in range(60):
            step(double, desert_theme, StubRandom(value=0.9, order=(2, 0, 1)))
        assert sorted(c.lane for c in double.collectibles) == [0, 2]

    def test_spawned_entities_start_at_spawn_line(self, desert_theme):
        state = RunState(player=PlayerState(lane=2))
        rng = StubRandom(value=0.5, order=(0, 1, 2))
        while not state.obstacles:
            step(state, desert_theme, rng)

        obstacle = state.obstacles[0]
        assert obstacle.y == SPAWN_Y + state.speed
        assert state.last_spawn_frame == state.frame

    def test_finished_run_is_frozen(self, desert_theme):
        state = quiet_state(over=True, frame=42)
        report = step(state, desert_theme, StubRandom())
        assert state.frame == 42
        assert not report.game_over


class TestObstacles:
    def test_jump_at_peak_clears_obstacle(self, desert_theme):
        state = quiet_state(player=PlayerState(jump_phase=0.46))
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=JUMP))

        report = step(state, desert_theme, StubRandom())

        assert abs(state.obstacles[0].y - PLAYER_Y) < OBSTACLE_WINDOW
        assert not report.game_over
        assert not state.over

    def test_well_timed_jump_survives_whole_pass(self, desert_theme):
        state = quiet_state(player=PlayerState(jump_phase=0.12))
        obstacle = Obstacle(lane=1, y=ENTERING_Y, archetype=JUMP)
        state.obstacles.append(obstacle)

        for _ in range(20):
            step(state, desert_theme, StubRandom())

        assert not state.over
        assert obstacle.resolved

    def test_jump_just_started_hits(self, desert_theme):
        state = quiet_state(player=PlayerState(jump_phase=0.0))
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=JUMP))

        report = step(state, desert_theme, StubRandom())

        assert report.game_over
        assert state.over

    def test_jump_landing_hits(self, desert_theme):
        state = quiet_state(player=PlayerState(jump_phase=0.92))
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=JUMP))

        assert step(state, desert_theme, StubRandom()).game_over

    def test_slide_clears_overhead(self, desert_theme):
        state = quiet_state(player=PlayerState(slide_phase=0.0))
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=SLIDE))

        assert not step(state, desert_theme, StubRandom()).game_over

    def test_standing_under_overhead_hits(self, desert_theme):
        state = quiet_state()
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=SLIDE))

        assert step(state, desert_theme, StubRandom()).game_over

    def test_dodge_obstacle_hits_even_mid_jump(self, desert_theme):
        state = quiet_state(player=PlayerState(jump_phase=0.46))
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=DODGE))

        assert step(state, desert_theme, StubRandom()).game_over

    def test_other_lanes_never_hit(self, desert_theme):
        state = quiet_state(player=PlayerState(lane=0))
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=DODGE))
        state.obstacles.append(Obstacle(lane=2, y=ENTERING_Y, archetype=DODGE))

        assert not step(state, desert_theme, StubRandom()).game_over

    def test_just_outside_window_is_safe(self, desert_theme):
        state = quiet_state()
        edge_y = PLAYER_Y - OBSTACLE_WINDOW - 1 - (INITIAL_SPEED + SPEED_INCREMENT)
        state.obstacles.append(Obstacle(lane=1, y=edge_y, archetype=DODGE))

        assert not step(state, desert_theme, StubRandom()).game_over

    def test_single_game_over_with_two_overlapping_hits(self, desert_theme):
        state = quiet_state()
        first = Obstacle(lane=1, y=ENTERING_Y + 10, archetype=DODGE)
        second = Obstacle(lane=1, y=ENTERING_Y + 20, archetype=DODGE)
        state.obstacles.extend([first, second])

        report = step(state, desert_theme, StubRandom())

        assert report.game_over
        assert report.hit is first
        assert first.resolved
        assert not second.resolved

        frame = state.frame
        again = step(state, desert_theme, StubRandom())
        assert not again.game_over
        assert state.frame == frame

    def test_hit_stops_further_resolution(self, desert_theme):
        state = quiet_state()
        state.obstacles.append(Obstacle(lane=1, y=ENTERING_Y, archetype=DODGE))
        state.collectibles.append(Collectible(lane=1, y=ENTERING_Y, archetype=0))

        step(state, desert_theme, StubRandom())

        assert state.over
        assert state.coins == 0
        assert not state.collectibles[0].collected


class TestCollectibles:
    def test_pickup_counts_once(self, desert_theme):
        state = quiet_state()
        collectible = Collectible(lane=1, y=PLAYER_Y - COLLECTIBLE_WINDOW + 10, archetype=0)
        state.collectibles.append(collectible)

        report = step(state, desert_theme, StubRandom())
        assert report.collected == 1
        assert collectible.collected
        assert state.score == 10
        assert state.coins == 1

        report = step(state, desert_theme, StubRandom())
        assert report.collected == 0
        assert state.score == 10
        assert state.coins == 1

    def test_pickup_uses_multiplier(self, desert_theme):
        state = quiet_state(multiplier=3)
        state.collectibles.append(Collectible(lane=1, y=PLAYER_Y, archetype=1))

        step(state, desert_theme, StubRandom())

        assert state.score == 150
        labels = [p.text for p in state.particles if p.text]
        assert labels == ["+150"]
        dots = [p for p in state.particles if p.text is None]
        assert len(dots) == PARTICLE_BURST

    def test_pickup_ignores_other_lanes(self, desert_theme):
        state = quiet_state(player=PlayerState(lane=2))
        state.collectibles.append(Collectible(lane=1, y=PLAYER_Y, archetype=0))

        step(state, desert_theme, StubRandom())

        assert state.coins == 0


class TestCulling:
    def test_entities_removed_below_screen(self, desert_theme):
        state = quiet_state(player=PlayerState(lane=0))
        state.obstacles.append(Obstacle(lane=1, y=CULL_Y - 1, archetype=JUMP))
        state.collectibles.append(Collectible(lane=1, y=CULL_Y - 1, archetype=0))
        state.obstacles.append(Obstacle(lane=2, y=300, archetype=JUMP))

        step(state, desert_theme, StubRandom())

        assert len(state.obstacles) == 1
        assert state.obstacles[0].lane == 2
        assert state.collectibles == []

    def test_passed_obstacles_are_resolved(self, desert_theme):
        state = quiet_state(player=PlayerState(lane=0))
        obstacle = Obstacle(lane=1, y=PLAYER_Y + OBSTACLE_WINDOW, archetype=JUMP)
        state.obstacles.append(obstacle)

        step(state, desert_theme, StubRandom())

        assert obstacle.resolved

    def test_particles_fade_out(self, desert_theme):
        state = quiet_state(multiplier=1)
        state.collectibles.append(Collectible(lane=1, y=PLAYER_Y, archetype=0))
        step(state, desert_theme, StubRandom())
        assert state.particles

        for _ in range(60):
            step(state, desert_theme, StubRandom())
        assert state.particles == []
