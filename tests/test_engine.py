"""
Tests for the simulation engine.

Time is driven by the ``fake_time`` fixture and frames by the engine's
scheduler, so every tick in these tests is deterministic.
"""

import dataclasses
import random

import pytest

from config.settings import EngineSettings
from snakegame.core.clock import FrameScheduler, TickClock
from snakegame.core.engine import SimulationEngine
from snakegame.core.event_bus import EventBus, EventType
from snakegame.core.state import Direction, GameStatus, Position


def make_engine(bus, fake_time, **overrides):
    settings = EngineSettings(seed=7, **overrides)
    return SimulationEngine(
        event_bus=bus,
        settings=settings,
        scheduler=FrameScheduler(),
        clock=TickClock(fake_time),
    )


def lifecycle(recorder):
    """Lifecycle events only, in order."""
    kinds = {
        EventType.INITIALIZED, EventType.STARTED, EventType.PAUSED,
        EventType.RESUMED, EventType.STOPPED,
    }
    return [t for t in recorder.types if t in kinds]


class TestLifecycle:
    """State machine transitions."""

    def test_init_resets_to_menu(self, engine, recorder):
        engine.init()

        state = engine.get_state()
        assert state.status == GameStatus.MENU
        assert state.score == 0
        assert state.level == 1
        assert state.tick_interval_ms == 100
        assert state.actor == (Position(10, 10),)
        assert state.direction == Direction.RIGHT
        assert state.target not in state.actor
        assert recorder.types == [EventType.FOOD_GENERATED, EventType.INITIALIZED]
        assert recorder.of(EventType.INITIALIZED)[0] == state

    def test_start_begins_loop(self, engine, recorder):
        engine.init()
        engine.start()

        assert engine.get_state().status == GameStatus.PLAYING
        assert engine.scheduler.pending_count == 1
        assert engine.is_running
        assert recorder.count(EventType.STARTED) == 1

    def test_start_twice_is_noop(self, engine, recorder):
        engine.init()
        engine.start()
        engine.start()

        assert recorder.count(EventType.STARTED) == 1
        assert engine.scheduler.pending_count == 1

    def test_start_after_game_over_requires_restart(self, engine, recorder):
        engine.init()
        engine.start()
        engine.stop()

        engine.start()

        assert engine.get_state().status == GameStatus.GAME_OVER
        assert recorder.count(EventType.STARTED) == 1

    def test_pause_cancels_scheduled_frame(self, engine, recorder):
        engine.init()
        engine.start()

        engine.pause()

        assert engine.get_state().status == GameStatus.PAUSED
        assert engine.scheduler.pending_count == 0
        assert engine.is_paused
        assert recorder.count(EventType.PAUSED) == 1

    def test_pause_when_not_playing_is_noop(self, engine, recorder):
        engine.init()
        engine.pause()
        engine.start()
        engine.pause()
        engine.pause()

        assert recorder.count(EventType.PAUSED) == 1

    def test_no_state_change_while_paused(self, engine, fake_time):
        engine.init()
        engine.start()
        engine.pause()
        before = engine.get_state()

        fake_time.advance(5000)
        assert engine.scheduler.run_frame() == 0

        assert engine.get_state() == before

    def test_resume_uses_fresh_time_baseline(self, engine, fake_time, recorder):
        engine.init()
        engine.start()
        fake_time.advance(60)
        engine.pause()
        fake_time.advance(10_000)

        engine.resume()
        engine.scheduler.run_frame()

        # The paused time must not produce an immediate tick
        assert recorder.count(EventType.UPDATED) == 0
        assert engine.get_state().head == Position(10, 10)

        fake_time.advance(100)
        engine.scheduler.run_frame()
        assert recorder.count(EventType.UPDATED) == 1
        assert engine.get_state().head == Position(11, 10)

    def test_resume_when_not_paused_is_noop(self, engine, recorder):
        engine.init()
        engine.resume()
        engine.start()
        engine.resume()

        assert recorder.count(EventType.RESUMED) == 0
        assert engine.scheduler.pending_count == 1

    def test_stop_ends_game(self, engine, recorder):
        engine.init()
        engine.start()

        engine.stop()

        assert engine.get_state().status == GameStatus.GAME_OVER
        assert engine.scheduler.pending_count == 0
        assert not engine.is_running
        assert recorder.count(EventType.STOPPED) == 1

    def test_stop_from_paused(self, engine, recorder):
        engine.init()
        engine.start()
        engine.pause()

        engine.stop()

        assert engine.get_state().status == GameStatus.GAME_OVER
        assert recorder.count(EventType.STOPPED) == 1

    def test_stop_is_idempotent(self, engine, recorder):
        engine.init()
        engine.stop()  # Nothing running yet
        engine.start()
        engine.stop()
        engine.stop()

        assert recorder.count(EventType.STOPPED) == 1

    def test_init_while_running_halts_loop(self, engine):
        engine.init()
        engine.start()

        engine.init()

        assert engine.get_state().status == GameStatus.MENU
        assert engine.scheduler.pending_count == 0

    def test_restart_after_game_over(self, engine, recorder, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(19, 10)], target=(0, 0))
        engine.update(100)
        assert engine.get_state().status == GameStatus.GAME_OVER

        recorder.clear()
        engine.restart()

        state = engine.get_state()
        assert state.status == GameStatus.PLAYING
        assert state.score == 0
        assert state.level == 1
        assert state.actor == (Position(10, 10),)
        assert lifecycle(recorder) == [EventType.INITIALIZED, EventType.STARTED]
        assert recorder.count(EventType.STOPPED) == 0

    def test_restart_while_playing_stops_first(self, engine, recorder):
        engine.init()
        engine.start()
        recorder.clear()

        engine.restart()

        assert lifecycle(recorder) == [
            EventType.STOPPED, EventType.INITIALIZED, EventType.STARTED
        ]
        assert engine.scheduler.pending_count == 1

    def test_commands_over_bus(self, engine, bus):
        engine.init()

        bus.emit(EventType.START)
        assert engine.get_state().status == GameStatus.PLAYING
        bus.emit(EventType.PAUSE)
        assert engine.get_state().status == GameStatus.PAUSED
        bus.emit(EventType.RESUME)
        assert engine.get_state().status == GameStatus.PLAYING
        bus.emit(EventType.STOP)
        assert engine.get_state().status == GameStatus.GAME_OVER
        bus.emit(EventType.RESTART)
        assert engine.get_state().status == GameStatus.PLAYING

    def test_detach_unsubscribes(self, engine, bus):
        engine.init()
        engine.detach()

        bus.emit(EventType.START)

        assert engine.get_state().status == GameStatus.MENU


class TestFrameLoop:
    """Ticks are paced by elapsed time, not by frames."""

    def test_tick_only_after_interval(self, engine, fake_time, recorder):
        engine.init()
        engine.start()

        fake_time.advance(99)
        engine.scheduler.run_frame()
        assert recorder.count(EventType.UPDATED) == 0
        assert recorder.count(EventType.RENDER) == 1

        fake_time.advance(1)
        engine.scheduler.run_frame()
        updates = recorder.of(EventType.UPDATED)
        assert len(updates) == 1
        assert updates[0].elapsed == 100
        assert updates[0].state.head == Position(11, 10)

    def test_many_frames_one_tick(self, engine, fake_time, recorder):
        engine.init()
        engine.start()

        for _ in range(6):
            fake_time.advance(16)
            engine.scheduler.run_frame()

        assert recorder.count(EventType.RENDER) == 6
        assert recorder.count(EventType.UPDATED) == 0

        fake_time.advance(16)
        engine.scheduler.run_frame()
        assert recorder.count(EventType.UPDATED) == 1

    def test_loop_rearms_each_frame(self, engine, fake_time):
        engine.init()
        engine.start()

        for _ in range(3):
            fake_time.advance(100)
            assert engine.scheduler.run_frame() == 1
            assert engine.scheduler.pending_count == 1

    def test_render_snapshot_every_frame(self, engine, fake_time, recorder):
        engine.init()
        engine.start()
        engine.scheduler.run_frame()

        rendered = recorder.of(EventType.RENDER)
        assert rendered[-1] == engine.get_state()

    def test_pause_from_render_handler_stops_loop(self, engine, bus, fake_time):
        engine.init()
        engine.start()
        bus.subscribe(EventType.RENDER, lambda e: engine.pause())

        engine.scheduler.run_frame()

        assert engine.get_state().status == GameStatus.PAUSED
        assert engine.scheduler.pending_count == 0

    def test_restart_from_stopped_handler_keeps_single_loop(self, engine, bus, arrange):
        engine.init()
        engine.start()
        bus.subscribe(EventType.STOPPED, lambda e: engine.restart())
        arrange(engine, [(19, 10)], target=(0, 0))

        engine.update(100)

        assert engine.get_state().status == GameStatus.PLAYING
        assert engine.scheduler.pending_count == 1


class TestMovement:
    """Movement and growth."""

    def test_eating_grows_and_scores(self, engine, recorder, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(10, 10)], target=(11, 10))

        engine.update(100)

        state = engine.get_state()
        assert state.head == Position(11, 10)
        assert state.actor == (Position(11, 10), Position(10, 10))
        assert state.score == 10
        assert state.target != Position(11, 10)
        assert state.target not in state.actor

        eaten = recorder.of(EventType.FOOD_EATEN)
        assert len(eaten) == 1
        assert eaten[0].score == 10
        assert eaten[0].target_position == state.target

    def test_moving_translates_body(self, engine, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(5, 5), (4, 5), (3, 5)], target=(0, 0))

        engine.update(100)

        assert engine.get_state().actor == (Position(6, 5), Position(5, 5), Position(4, 5))

    def test_length_changes_only_when_eating(self, bus, fake_time, recorder):
        engine = make_engine(bus, fake_time, grid_size=8, start_position=[4, 4])
        engine.init()
        engine.start()
        chooser = random.Random(3)

        for _ in range(400):
            before = engine.get_state()
            if before.status != GameStatus.PLAYING:
                break
            engine.change_direction(chooser.choice(list(Direction)))
            engine.update(100)
            after = engine.get_state()
            if after.status != GameStatus.PLAYING:
                break

            if after.head == before.target:
                assert after.length == before.length + 1
                assert after.score == before.score + 10
            else:
                assert after.length == before.length
                assert after.score == before.score
            assert after.target not in after.actor
            assert len(set(after.actor)) == after.length

    def test_target_relocates_to_only_free_cell(self, bus, fake_time, arrange):
        engine = make_engine(bus, fake_time, grid_size=3, start_position=[1, 1])
        engine.init()
        engine.start()
        arrange(
            engine,
            [(1, 0), (0, 0), (0, 1), (0, 2), (1, 2), (2, 2), (2, 1)],
            target=(2, 0),
        )

        engine.update(100)

        state = engine.get_state()
        assert state.status == GameStatus.PLAYING
        assert state.length == 8
        assert state.target == Position(1, 1)

    def test_full_board_ends_game(self, bus, fake_time, recorder, arrange):
        engine = make_engine(bus, fake_time, grid_size=2, start_position=[0, 0])
        engine.init()
        engine.start()
        arrange(engine, [(0, 0), (0, 1), (1, 1)], target=(1, 0))
        recorder.clear()

        engine.update(100)

        state = engine.get_state()
        assert state.status == GameStatus.GAME_OVER
        assert state.score == 10
        assert state.length == 4
        assert state.target is None
        assert recorder.types == [EventType.FOOD_EATEN, EventType.STOPPED]
        assert recorder.of(EventType.FOOD_EATEN)[0].score == 10
        assert recorder.of(EventType.FOOD_EATEN)[0].target_position is None
        assert recorder.count(EventType.FOOD_GENERATED) == 0

    def test_update_ignored_unless_playing(self, engine):
        engine.init()
        engine.update(100)
        assert engine.get_state().head == Position(10, 10)


class TestCollisions:
    """Wall and self collisions end the game."""

    def test_wall_collision_on_right_edge(self, engine, fake_time, recorder, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(19, 10)], target=(0, 0))

        engine.update(100)

        state = engine.get_state()
        assert state.status == GameStatus.GAME_OVER
        collisions = recorder.of(EventType.COLLISION)
        assert len(collisions) == 1
        assert collisions[0].kind == "wall"
        assert collisions[0].position == Position(20, 10)
        assert recorder.count(EventType.STOPPED) == 1
        assert recorder.count(EventType.UPDATED) == 0

        # No further ticks
        fake_time.advance(1000)
        engine.scheduler.run_frame()
        engine.update(100)
        assert engine.get_state() == state

    def test_wall_collision_on_top_edge(self, engine, recorder, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(5, 0)], target=(0, 5), direction=Direction.UP)

        engine.update(100)

        assert engine.get_state().status == GameStatus.GAME_OVER
        assert recorder.of(EventType.COLLISION)[0].position == Position(5, -1)

    def test_collision_during_frame_stops_loop(self, engine, fake_time, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(19, 10)], target=(0, 0))

        fake_time.advance(100)
        engine.scheduler.run_frame()

        assert engine.get_state().status == GameStatus.GAME_OVER
        assert engine.scheduler.pending_count == 0

    def test_self_collision(self, engine, recorder, arrange):
        engine.init()
        engine.start()
        arrange(
            engine,
            [(5, 5), (6, 5), (6, 6), (5, 6), (4, 6)],
            target=(0, 0),
            direction=Direction.LEFT,
        )

        engine.change_direction(Direction.DOWN)
        engine.update(100)

        assert engine.get_state().status == GameStatus.GAME_OVER
        collision = recorder.of(EventType.COLLISION)[0]
        assert collision.kind == "self"
        assert collision.position == Position(5, 6)

    def test_moving_into_vacated_tail_is_safe(self, engine, arrange):
        engine.init()
        engine.start()
        arrange(
            engine,
            [(5, 5), (6, 5), (6, 6), (5, 6)],
            target=(0, 0),
            direction=Direction.LEFT,
        )

        engine.change_direction(Direction.DOWN)
        engine.update(100)

        state = engine.get_state()
        assert state.status == GameStatus.PLAYING
        assert state.actor == (Position(5, 6), Position(5, 5), Position(6, 5), Position(6, 6))


class TestDirection:
    """Buffered direction changes and the reversal guard."""

    def test_reversal_rejected(self, engine, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(5, 5)], target=(0, 0))

        assert engine.change_direction(Direction.LEFT) is False
        engine.update(100)

        state = engine.get_state()
        assert state.head == Position(6, 5)
        assert state.direction == Direction.RIGHT

    def test_reversal_over_bus_rejected_silently(self, engine, bus, recorder, arrange):
        engine.init()
        arrange(engine, [(5, 5)], target=(0, 0))
        recorder.clear()

        bus.emit(EventType.DIRECTION_CHANGE, Direction.LEFT)

        assert engine.get_state().pending_direction == Direction.RIGHT
        assert recorder.types == [EventType.DIRECTION_CHANGE]

    def test_same_direction_accepted(self, engine):
        engine.init()
        assert engine.change_direction(Direction.RIGHT) is True
        assert engine.get_state().pending_direction == Direction.RIGHT

    def test_turn_committed_on_next_tick(self, engine, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(5, 5)], target=(0, 0))

        engine.change_direction(Direction.UP)
        assert engine.get_state().direction == Direction.RIGHT

        engine.update(100)

        state = engine.get_state()
        assert state.direction == Direction.UP
        assert state.head == Position(5, 4)

    def test_reversal_checked_against_committed_direction(self, engine):
        engine.init()

        assert engine.change_direction(Direction.UP) is True
        assert engine.change_direction(Direction.LEFT) is False
        assert engine.get_state().pending_direction == Direction.UP
        assert engine.change_direction(Direction.DOWN) is True
        assert engine.get_state().pending_direction == Direction.DOWN

    def test_non_direction_payload_ignored(self, engine, bus):
        engine.init()
        bus.emit(EventType.DIRECTION_CHANGE, (0, 1))
        assert engine.get_state().pending_direction == Direction.RIGHT


class TestDifficulty:
    """Level and speed scaling with score."""

    def test_level_up_at_hundred(self, engine, recorder, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(5, 5)], target=(6, 5), score=90)
        recorder.clear()

        engine.update(100)

        state = engine.get_state()
        assert state.score == 100
        assert state.level == 2
        assert state.tick_interval_ms == 95

        level_ups = recorder.of(EventType.LEVEL_UP)
        assert len(level_ups) == 1
        assert level_ups[0].level == 2
        assert level_ups[0].tick_interval_ms == 95
        assert recorder.of(EventType.MILESTONE) == [100]
        assert recorder.types[:4] == [
            EventType.FOOD_GENERATED,
            EventType.LEVEL_UP,
            EventType.MILESTONE,
            EventType.FOOD_EATEN,
        ]

    def test_no_level_up_between_thresholds(self, engine, recorder, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(5, 5)], target=(6, 5), score=80)

        engine.update(100)

        assert engine.get_state().level == 1
        assert recorder.count(EventType.LEVEL_UP) == 0
        assert recorder.count(EventType.MILESTONE) == 0

    def test_interval_never_below_floor(self, engine, arrange):
        engine.init()
        engine.start()
        arrange(engine, [(5, 5)], target=(6, 5), score=190)
        engine._state.tick_interval_ms = 52

        engine.update(100)

        assert engine.get_state().tick_interval_ms == 50

    def test_progression_over_many_meals(self, engine, arrange):
        engine.init()
        engine.start()
        previous_interval = engine.get_state().tick_interval_ms
        previous_level = 1

        for _ in range(150):
            arrange(engine, [(5, 5)], target=(6, 5))
            engine.update(100)
            state = engine.get_state()

            assert state.score % 10 == 0
            assert state.level == 1 + state.score // 100
            assert state.level >= previous_level
            assert state.tick_interval_ms <= previous_interval
            assert state.tick_interval_ms >= 50
            previous_interval = state.tick_interval_ms
            previous_level = state.level

        assert engine.get_state().score == 1500
        assert engine.get_state().tick_interval_ms == 50

    def test_reward_not_dividing_threshold_still_levels_up(self, bus, fake_time, arrange):
        engine = make_engine(bus, fake_time, food_reward=30)
        engine.init()
        engine.start()
        levels = []

        for _ in range(4):
            arrange(engine, [(5, 5)], target=(6, 5))
            engine.update(100)
            levels.append(engine.get_state().level)

        # Scores 30, 60, 90, 120: the 100 threshold is crossed at 120
        assert levels == [1, 1, 1, 2]


class TestAccessors:
    """Snapshots, configuration and seeding."""

    def test_snapshot_is_immutable(self, engine):
        engine.init()
        snapshot = engine.get_state()

        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.score = 50
        assert isinstance(snapshot.actor, tuple)

    def test_snapshot_unaffected_by_later_ticks(self, engine):
        engine.init()
        engine.start()
        snapshot = engine.get_state()

        engine.update(100)

        assert snapshot.head == Position(10, 10)
        assert engine.get_state().head == Position(11, 10)

    def test_get_config(self, engine):
        config = engine.get_config()
        assert config.grid_size == 20
        assert config.cell_size == 24
        assert config.base_tick_interval_ms == 100
        assert config.min_tick_interval_ms == 50

    def test_same_seed_same_targets(self, fake_time):
        a = make_engine(EventBus(), fake_time)
        b = make_engine(EventBus(), fake_time)

        a.init()
        b.init()

        assert a.get_state().target == b.get_state().target
        assert a.get_seed() == 7
