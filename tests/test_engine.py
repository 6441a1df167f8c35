#
# Copyright (c) 2025, 7th software Ltd.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import dataclasses
import pygame
import pytest

from crystabrick.engine import Engine
from crystabrick.entities import Ball, Brick, Effect, PowerUp
from crystabrick.storage import HighScore

from conftest import AREA, FixedRandom, make_engine

RED = pygame.Color(255, 0, 0)


def brick_under_test(effect=None) -> list[Brick]:
    # One brick to hit, plus one out of the way so that the level isn't completed
    return [
        Brick(0, 65, 60, 1, RED, effect=effect),
        Brick(1, 300, 300, 1, RED),
    ]


def hold_balls(engine: Engine) -> None:
    for ball in engine.balls:
        ball.velocity.update(0, 0)


def test_new_engine_waits_for_start():
    engine = Engine()
    assert engine.show_instructions
    assert not engine.running
    engine.tick(1 / 60)
    assert engine.clock == 0


def test_start_game_lays_out_the_first_level(engine):
    assert engine.running
    assert not engine.show_instructions
    assert not engine.game_over
    assert len(engine.bricks) == 54
    assert len(engine.balls) == 1
    assert (engine.balls[0].rect.x, engine.balls[0].rect.y) == (191, 638)
    assert tuple(engine.balls[0].velocity) == (0, Engine.initial_ball_speed)
    assert (engine.paddle.rect.x, engine.paddle.rect.y) == (150, 656)
    assert (engine.score, engine.level, engine.multiplier, engine.combo) == (0, 1, 1, 0)


def test_serve_bounces_off_paddle(engine):
    engine.tick(1 / 60)
    ball = engine.balls[0]
    assert ball.rect.bottom == engine.paddle.rect.top
    assert tuple(ball.velocity) == pytest.approx((0, -6))


def test_ball_breaks_brick(engine):
    engine.bricks = brick_under_test()
    engine.balls = [Ball(70, 85, 0, -6)]
    engine.tick(1 / 60)

    assert not engine.bricks[0].visible
    assert engine.bricks[1].visible
    assert engine.score == 10
    assert engine.bricks_broken == 1
    assert engine.combo == 1
    assert engine.level == 1
    assert tuple(engine.balls[0].velocity) == (0, 6)
    assert engine.balls[0].rect.top == 80
    assert any(particle.text == "+10" for particle in engine.effects.particles)


def test_tough_brick_needs_two_hits(engine):
    engine.bricks = brick_under_test()
    engine.bricks[0].health = 2
    engine.balls = [Ball(70, 85, 0, -6)]
    engine.tick(1 / 60)

    assert engine.bricks[0].visible
    assert engine.bricks[0].health == 1
    assert engine.score == 0
    assert engine.combo == 1


def test_only_one_brick_per_ball_per_tick(engine):
    engine.bricks = [Brick(0, 65, 60, 1, RED), Brick(1, 65, 80, 1, RED), Brick(2, 300, 300, 1, RED)]
    engine.balls = [Ball(70, 85, 0, -6)]
    engine.tick(1 / 60)
    assert [brick.visible for brick in engine.bricks] == [False, True, True]


def test_points_scale_with_level_and_multiplier(engine):
    engine.level = 3
    engine.multiplier = 2
    engine.bricks = brick_under_test()
    engine.balls = [Ball(70, 85, 0, -6)]
    engine.tick(1 / 60)
    assert engine.score == 60


def test_combo_resets_after_a_slow_hit():
    engine = Engine()
    assert [engine.register_hit(now) for now in (0.0, 0.2, 0.9)] == [1, 2, 1]


def test_combo_grows_within_window():
    engine = Engine()
    assert engine.register_hit(0.0) == 1
    assert engine.register_hit(0.2) == 2
    assert engine.register_hit(0.69) == 3
    assert engine.register_hit(1.2) == 1
    assert engine.best_combo == 3


def test_losing_the_last_ball_ends_the_game(engine):
    engine.balls = [Ball(100, 701, 0, 6)]
    engine.tick(1 / 60)
    assert engine.game_over
    assert not engine.running
    assert len(engine.balls) == 1

    # Nothing moves once the game is over
    clock = engine.clock
    engine.tick(1 / 60)
    assert engine.clock == clock
    assert engine.balls[0].rect.y == pytest.approx(707)


def test_extra_balls_can_be_lost(engine):
    engine.balls = [Ball(100, 701, 0, 6), Ball(200, 300, 0, 6)]
    engine.tick(1 / 60)
    assert not engine.game_over
    assert len(engine.balls) == 1
    assert engine.balls[0].rect.x == 200


def test_last_of_several_balls_ends_the_game(engine):
    engine.balls = [Ball(100, 701, 0, 6), Ball(200, 701, 0, 6)]
    engine.tick(1 / 60)
    assert engine.game_over
    assert len(engine.balls) == 1
    assert engine.balls[0].rect.x == 200


def test_clearing_the_bricks_moves_to_next_level(engine):
    engine.score = 100
    for brick in engine.bricks:
        if not brick.indestructible:
            brick.visible = False
    engine.tick(1 / 60)

    assert engine.level == 2
    assert engine.multiplier == 2
    assert engine.score == 100
    assert len(engine.bricks) == 54
    assert all(brick.visible for brick in engine.bricks)
    assert len(engine.balls) == 1
    assert tuple(engine.balls[0].velocity) == pytest.approx((0, 6 * 1.12))
    assert len(engine.effects.particles) >= 50


def test_ball_speed_is_capped():
    engine = Engine()
    engine.level = 30
    assert engine.ball_speed() == Engine.max_ball_speed


def test_multiplier_is_capped(engine):
    for _ in range(10):
        engine.level_complete()
    assert engine.multiplier == Engine.max_multiplier

    for _ in range(3):
        engine.increase_multiplier()
    assert engine.multiplier == Engine.max_multiplier


def test_wide_paddle_expires(engine):
    hold_balls(engine)
    engine.widen_paddle()
    assert engine.paddle_wide
    assert engine.paddle.rect.width == 150

    engine.tick(1.0)
    engine.widen_paddle()
    assert engine.wide_expires == 10

    engine.tick(8.5)
    assert engine.paddle_wide

    engine.tick(1.0)
    assert not engine.paddle_wide
    assert engine.paddle.rect.width == 100


def test_laser_follows_paddle_and_expires(engine):
    hold_balls(engine)
    engine.activate_lasers()
    engine.tick(1.0)
    engine.activate_lasers()
    assert engine.laser_expires == 8
    assert engine.laser == pygame.FRect(199, 0, 2, 656)

    engine.move_paddle(100)
    engine.tick(1 / 60)
    assert engine.laser.x == 99

    engine.tick(7.0)
    assert not engine.laser_active
    assert engine.laser is None


def test_laser_deals_no_damage(engine):
    hold_balls(engine)
    engine.activate_lasers()
    engine.tick(1.0)
    assert all(brick.visible for brick in engine.bricks)
    assert engine.score == 0


def test_reset_restores_paddle_and_power_ups(engine):
    engine.widen_paddle()
    engine.activate_lasers()
    engine.increase_multiplier()
    engine.start_game()
    assert not engine.paddle_wide
    assert not engine.laser_active
    assert engine.paddle.rect.width == 100
    assert engine.multiplier == 1


def test_slow_ball(engine):
    engine.balls.append(Ball(100, 300, 3, -4))
    engine.slow_down_balls()
    assert tuple(engine.balls[0].velocity) == pytest.approx((0, 4.2))
    assert tuple(engine.balls[1].velocity) == pytest.approx((2.1, -2.8))


def test_extra_ball(engine):
    engine.add_extra_ball()
    assert len(engine.balls) == 2
    first, extra = engine.balls
    assert extra.rect == first.rect
    assert extra.rect is not first.rect
    assert extra.velocity.y == -6
    assert abs(extra.velocity.x) <= 4.5


def test_bomb_destroys_nearby_bricks(engine):
    engine.bricks = [
        Brick(0, 100, 100, 3, RED),
        Brick(1, 300, 600, 1, RED),
        Brick(2, 120, 130, 1, RED, indestructible=True),
    ]
    engine.balls = [Ball(110, 150)]
    assert engine.explode_nearby_bricks() == 1
    assert [brick.visible for brick in engine.bricks] == [False, True, True]
    assert engine.bricks[0].health == 0
    assert engine.bricks_broken == 0
    assert engine.score == 15


def test_effect_brick_drops_power_up(store):
    engine = make_engine(store, FixedRandom(0.95))
    engine.bricks = brick_under_test(effect=Effect.BOMB)
    engine.balls = [Ball(70, 85, 0, -6)]
    engine.tick(1 / 60)

    assert len(engine.power_ups) == 1
    power_up = engine.power_ups[0]
    assert power_up.effect == Effect.BOMB
    assert power_up.position.x == 83
    assert power_up.position.y == 70 + 3


@pytest.mark.parametrize("draw", [0.5, 0.7])
def test_effect_brick_keeps_power_up_on_low_draw(store, draw):
    engine = make_engine(store, FixedRandom(draw))
    engine.bricks = brick_under_test(effect=Effect.BOMB)
    engine.balls = [Ball(70, 85, 0, -6)]
    engine.tick(1 / 60)
    assert engine.power_ups == []


def test_paddle_catches_power_up(engine):
    hold_balls(engine)
    engine.power_ups = [PowerUp(Effect.SCORE_MULTIPLIER, 200, 650)]
    engine.tick(1 / 60)
    assert engine.multiplier == 2
    assert engine.power_ups == []
    assert engine.last_power_up == Effect.SCORE_MULTIPLIER


def test_missed_power_up_is_dropped(engine):
    hold_balls(engine)
    engine.power_ups = [PowerUp(Effect.SCORE_MULTIPLIER, 20, 699)]
    engine.tick(1 / 60)
    assert engine.multiplier == 1
    assert engine.power_ups == []


def test_power_up_falls_each_tick(engine):
    hold_balls(engine)
    engine.power_ups = [PowerUp(Effect.BOMB, 20, 100)]
    engine.tick(1 / 60)
    engine.tick(1 / 60)
    assert engine.power_ups[0].position.y == 106


def test_high_score_is_saved_and_reloaded(store, rng):
    engine = make_engine(store, rng)
    engine.add_points(50)
    assert engine.high_score == 50
    assert HighScore(store).load() == 50

    engine.start_game()
    engine.add_points(20)
    assert engine.high_score == 50
    assert HighScore(store).load() == 50

    assert make_engine(store, rng).high_score == 50


def test_ball_rides_paddle_before_serve(engine):
    hold_balls(engine)
    engine.move_paddle(300)
    assert engine.paddle.rect.centerx == 300
    assert engine.balls[0].rect.centerx == 300


def test_ball_in_play_ignores_paddle(engine):
    engine.move_paddle(300)
    assert engine.balls[0].rect.centerx == 200


def test_update_game_area_rehomes(engine):
    engine.update_game_area((0, 0, 300, 500))
    assert engine.area == pygame.FRect(0, 0, 300, 500)
    assert (engine.paddle.rect.x, engine.paddle.rect.y) == (100, 456)
    assert len(engine.balls) == 1
    assert engine.balls[0].rect.centerx == 150


def test_snapshot_is_detached(engine):
    engine.bricks[5].visible = False
    snapshot = engine.snapshot()

    assert len(snapshot.bricks) == 53
    assert 5 not in [brick.id for brick in snapshot.bricks]
    assert snapshot.paddle == (150, 656, 100, 14)
    assert snapshot.area == AREA
    assert snapshot.running
    assert snapshot.laser is None

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.score = 100

    engine.tick(1 / 60)
    assert snapshot.balls[0] == (191, 638, 18, 18)


def test_new_game_clears_particles(engine):
    engine.effects.level_complete((200, 350))
    engine.start_game()
    assert engine.effects.particles == []


def narrow_engine(store, rng, width: float) -> Engine:
    engine = make_engine(store, rng)
    engine.update_game_area((0, 0, width, 700))
    engine.start_game()
    return engine


def assert_inside(engine: Engine) -> None:
    for ball in engine.balls:
        assert ball.rect.left >= engine.area.left
        assert ball.rect.right <= engine.area.right
        assert ball.rect.top >= engine.area.top


def test_brick_by_left_wall_keeps_ball_in_play(store, rng):
    engine = narrow_engine(store, rng, 360)
    assert engine.bricks[0].rect.x == 6

    engine.balls = [Ball(1, 61, -1, 0)]
    engine.tick(1 / 60)
    assert_inside(engine)
    assert engine.balls[0].rect.left == 0
    assert engine.balls[0].velocity.x == -1


def test_brick_by_right_wall_keeps_ball_in_play(store, rng):
    engine = narrow_engine(store, rng, 360)
    assert engine.bricks[8].rect.right == 354

    engine.balls = [Ball(340, 61, 1, 0)]
    engine.tick(1 / 60)
    assert_inside(engine)
    assert engine.balls[0].rect.right == 360
    assert engine.balls[0].velocity.x == -1


@pytest.mark.parametrize("width", [200, 300, 360, 400])
def test_balls_stay_in_play_along_the_top_row(store, rng, width):
    engine = narrow_engine(store, rng, width)
    engine.balls = [Ball(x, 61, vx, -2) for x in range(0, width - 18, 13) for vx in (-4, 4)]
    for _ in range(30):
        engine.tick(1 / 60)
        assert_inside(engine)
