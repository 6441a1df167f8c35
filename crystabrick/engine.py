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

from __future__ import annotations
import math
import random
import pygame
from typing import Any

from crystabrick import geometry
from crystabrick.entities import Ball, Brick, Effect, Laser, Paddle, PowerUp
from crystabrick.levels import BrickField
from crystabrick.particles import ParticleSystem
from crystabrick.snapshot import BrickView, ParticleView, PowerUpView, Snapshot
from crystabrick.storage import HighScore


def _rect_tuple(rect: pygame.FRect) -> tuple[float, float, float, float]:
    return (rect.x, rect.y, rect.width, rect.height)


class Engine():
    # Ball speed (units per 1/60 s frame) on level 1, the cap, and the growth per level
    initial_ball_speed: float = 6
    max_ball_speed: float = 18
    speed_increase_factor: float = 1.12

    # Brick hits less than this many seconds apart extend the combo
    combo_window: float = 0.5

    # A destroyed effect brick drops its power-up when a uniform draw beats this
    drop_threshold: float = 0.7

    # Seconds the timed power-ups last
    wide_duration: float = 10
    laser_duration: float = 8

    # Bricks with centres closer than this to any ball are caught in a bomb blast
    bomb_radius: float = 100

    # Points per brick (scaled by level and multiplier)
    brick_points: int = 10
    bomb_points: int = 15

    max_multiplier: int = 5

    # Ratio applied to every ball by the slow-ball power-up
    slow_ratio: float = 0.7

    def __init__(self, high_score: HighScore | None = None, rng: random.Random | None = None) -> None:
        """
        Create the engine, with an empty play area and no game in progress.

        Args:
            high_score: Persistent high score. If None, the high score lives only as long as the engine.
            rng: Random generator for brick effects, power-up drops and particles. Defaults to a fresh
                 `random.Random()`.

        Notes:
            Call `update_game_area()` with the viewport bounds and then `start_game()` before ticking.
        """

        self.rng = rng if rng is not None else random.Random()
        self.store = high_score

        # Game objects
        self.area = pygame.FRect(0, 0, 0, 0)
        self.paddle = Paddle()
        self.balls: list[Ball] = []
        self.bricks: list[Brick] = []
        self.power_ups: list[PowerUp] = []
        self.effects = ParticleSystem(self.rng)
        self.laser: pygame.FRect | None = None

        # Scoring
        self.score = 0
        self.high_score = high_score.load() if high_score is not None else 0
        self.level = 1
        self.multiplier = 1
        self.combo = 0
        self.bricks_broken = 0
        self.last_hit_time = -math.inf
        self.best_combo = 0
        self.last_power_up: Effect | None = None

        # Game flow
        self.show_instructions = True
        self.game_over = False
        self.running = False

        # Simulation clock (seconds), advanced by every tick
        self.clock = 0.0

        # Timed power-ups
        self.paddle_wide = False
        self.wide_expires = 0.0
        self.laser_active = False
        self.laser_expires = 0.0

    def ball_speed(self) -> float:
        """
        Get the ball speed for the current level.

        Returns:
            float: `initial_ball_speed` compounded by `speed_increase_factor` per level, capped at `max_ball_speed`.
        """

        speed = Engine.initial_ball_speed * Engine.speed_increase_factor ** (self.level - 1)
        return min(speed, Engine.max_ball_speed)

    def start_game(self) -> None:
        """
        Reset everything for a new game and let the tick driver run.
        """

        self.show_instructions = False
        self.game_over = False
        self.reset_game()
        self.running = True

    def reset_game(self) -> None:
        """
        Return scores, level and power-ups to their starting state and build the first level.
        """

        self.score = 0
        self.bricks_broken = 0
        self.level = 1
        self.multiplier = 1
        self.combo = 0
        self.best_combo = 0
        self.last_hit_time = -math.inf
        self.last_power_up = None
        self.power_ups = []
        self.effects.clear()
        self.laser = None
        self.paddle_wide = False
        self.laser_active = False
        self.paddle.resize(Paddle.base_width, self.area)
        self.bricks = BrickField.generate(self.level, self.area, self.rng)
        self.reset_ball()

    def reset_ball(self) -> None:
        """
        Replace all balls with a single ball resting on the paddle, heading downwards.
        """

        x = self.area.centerx - Ball.size / 2
        y = self.area.bottom - Paddle.height - Ball.size - Paddle.margin
        self.balls = [Ball(x, y, 0, Engine.initial_ball_speed)]

    def update_game_area(self, bounds: Any) -> None:
        """
        Set the play area, for example when the viewport is first laid out or resized.

        Args:
            bounds: Anything `pygame.FRect` accepts, such as `(x, y, width, height)`.

        Behaviour:
            - Moves the paddle back to its home position for the new bounds.
            - Resets to a single ball on the paddle.
            - The brick field is left as it is until the next level is generated.
        """

        self.area = pygame.FRect(bounds)
        self.paddle.resize(self.paddle.rect.width, self.area)
        self.paddle.home(self.area)
        self.reset_ball()

    def move_paddle(self, x: float, y: float = 0) -> None:
        """
        Follow the pointer with the paddle.

        Args:
            x: Pointer x position in play area coordinates.
            y: Pointer y position (the paddle only moves horizontally).

        Behaviour:
            - Centres the paddle on `x`, clamped inside the play area.
            - Before the first serve (every ball stationary) the first ball rides along on the paddle.
        """

        self.paddle.move(x, self.area)

        if self.balls and not any(ball.served() for ball in self.balls):
            self.balls[0].rect.centerx = self.paddle.rect.centerx

    def register_hit(self, now: float) -> int:
        """
        Update the combo counter for a brick hit.

        Args:
            now: Simulation time of the hit (seconds).

        Returns:
            int: The new combo counter. It grows while hits come less than `combo_window` seconds apart,
                 otherwise it starts again from 1.
        """

        if now - self.last_hit_time < Engine.combo_window:
            self.combo += 1
        else:
            self.combo = 1
        self.last_hit_time = now
        self.best_combo = max(self.best_combo, self.combo)

        return self.combo

    def add_points(self, points: int) -> None:
        """
        Add to the score, saving a new high score straight away.

        Args:
            points: Points to award.
        """

        self.score += points
        if self.score > self.high_score:
            self.high_score = self.score
            if self.store is not None:
                self.store.save(self.high_score)

    def tick(self, dt: float) -> None:
        """
        Advance the simulation.

        Args:
            dt: Elapsed time in seconds since the last tick. Not clamped; a long pause becomes a long step.

        Behaviour:
            - Does nothing unless a game is running.
            - Advances the simulation clock and expires timed power-ups.
            - For each ball: moves it, bounces it off the walls, the paddle and at most one brick, and drops it if
              it has fallen out of the bottom. Losing the last ball ends the game and the rest of the tick is
              skipped.
            - Drops and collects power-ups, ages particles, projects the laser, and moves on to the next
              level once only hidden or indestructible bricks remain.
        """

        if not self.running or self.game_over:
            return

        self.clock += dt
        self._expire_power_ups()

        white = ParticleSystem.colours['white']
        blue = ParticleSystem.colours['blue']
        speed = self.ball_speed()

        survivors = []
        dropped = 0
        for index, ball in enumerate(self.balls):
            ball.move(dt)

            # Check if a collision with the walls happens
            for contact in ball.check_wall_collision(self.area):
                self.effects.impact(contact, white)

            # Did the ball hit the paddle?
            if ball.check_paddle_collision(self.paddle, speed):
                self.effects.impact((ball.rect.centerx, ball.rect.bottom), blue)

            # Only the first brick the ball overlaps counts this tick
            for brick in self.bricks:
                if brick.visible and geometry.intersects(ball.bbox(), brick.bbox()):
                    self._handle_brick_collision(ball, brick)
                    ball.confine(self.area)
                    break

            # Has the ball fallen out of the bottom of the play area?
            if ball.rect.top > self.area.bottom:
                if len(self.balls) - dropped > 1:
                    dropped += 1
                    continue

                # That was the last ball
                self.balls = survivors + self.balls[index:]
                self.game_over = True
                self.running = False
                return

            survivors.append(ball)

        self.balls = survivors

        self._update_power_ups()
        self.effects.update(dt)

        if self.laser_active:
            self.laser = Laser.beam(self.paddle, self.area)
        else:
            self.laser = None

        if all(brick.cleared() for brick in self.bricks):
            self.level_complete()

    def _handle_brick_collision(self, ball: Ball, brick: Brick) -> None:
        """
        Damage a brick the ball has run into, score it if it broke, and bounce the ball off it.

        Args:
            ball: The ball that hit the brick.
            brick: The brick that was hit.
        """

        destroyed = brick.hit()
        self.register_hit(self.clock)

        if destroyed:
            points = Engine.brick_points * self.level * self.multiplier
            self.bricks_broken += 1
            self.effects.score_popup(brick.rect.topleft, points, self.combo)
            self.add_points(points)

            # Effect bricks sometimes drop their power-up
            if brick.effect is not None and self.rng.random() > Engine.drop_threshold:
                self.power_ups.append(PowerUp(brick.effect, brick.rect.centerx, brick.rect.centery))

            self.effects.brick_break(brick.rect, brick.colour)

        ball.check_brick_collision(brick)
        self.effects.impact(ball.rect.center, brick.colour)

    def _update_power_ups(self) -> None:
        """
        Let power-ups fall, apply the ones the paddle catches and drop the ones that fall out of play.
        """

        for power_up in self.power_ups:
            if not power_up.active:
                continue

            power_up.fall()

            if geometry.intersects(power_up.bbox(), self.paddle.bbox()):
                self.activate_power_up(power_up.effect)
                power_up.active = False
                self.effects.explosion(power_up.position, ParticleSystem.colours['yellow'])

            if power_up.position.y > self.area.bottom:
                power_up.active = False

        self.power_ups = [power_up for power_up in self.power_ups if power_up.active]

    def _expire_power_ups(self) -> None:
        """Switch off timed power-ups whose time is up."""

        if self.paddle_wide and self.clock > self.wide_expires:
            self.paddle_wide = False
            self.paddle.resize(Paddle.base_width, self.area)

        if self.laser_active and self.clock > self.laser_expires:
            self.laser_active = False

    def level_complete(self) -> None:
        """
        Move on to the next level.

        Behaviour:
            - Increments the level and the multiplier (capped at `max_multiplier`).
            - Builds the new level's brick field and resets to a single ball on the paddle.
            - Sets every ball to the new level's speed without changing its direction.
            - Celebrates with a ring of particles.
        """

        self.level += 1
        self.multiplier = min(self.multiplier + 1, Engine.max_multiplier)
        self.bricks = BrickField.generate(self.level, self.area, self.rng)
        self.reset_ball()

        speed = self.ball_speed()
        for ball in self.balls:
            ball.rescale(speed)

        self.effects.level_complete(self.area.center)

    def activate_power_up(self, effect: Effect) -> None:
        """
        Apply a caught power-up.

        Args:
            effect: The power-up's effect tag.
        """

        self.last_power_up = effect

        if effect == Effect.EXTRA_BALL:
            self.add_extra_ball()
        elif effect == Effect.WIDEN_PADDLE:
            self.widen_paddle()
        elif effect == Effect.LASER_PADDLE:
            self.activate_lasers()
        elif effect == Effect.SLOW_BALL:
            self.slow_down_balls()
        elif effect == Effect.SCORE_MULTIPLIER:
            self.increase_multiplier()
        elif effect == Effect.BOMB:
            self.explode_nearby_bricks()

    def add_extra_ball(self) -> None:
        """
        Launch a copy of the first ball upwards at a random angle.
        """

        if not self.balls:
            return

        ball = self.balls[0].clone()
        angle = self.rng.uniform(-0.5, 0.5)
        speed = self.ball_speed()
        ball.velocity.update(angle * speed * 1.5, -speed)
        self.balls.append(ball)

        self.effects.explosion(ball.rect.center, ParticleSystem.colours['green'])

    def widen_paddle(self) -> None:
        """
        Widen the paddle for `wide_duration` seconds. Catching another one while wide changes nothing.
        """

        if self.paddle_wide:
            return

        self.paddle_wide = True
        self.wide_expires = self.clock + Engine.wide_duration
        self.paddle.resize(Paddle.base_width * Paddle.wide_ratio, self.area)

    def activate_lasers(self) -> None:
        """
        Turn the paddle laser on for `laser_duration` seconds. Catching another one while active changes nothing.
        """

        if self.laser_active:
            return

        self.laser_active = True
        self.laser_expires = self.clock + Engine.laser_duration

    def slow_down_balls(self) -> None:
        """
        Slow every ball in play, for the rest of the game.
        """

        for ball in self.balls:
            ball.velocity *= Engine.slow_ratio

        self.effects.explosion(self.area.center, ParticleSystem.colours['blue'])

    def increase_multiplier(self) -> None:
        """
        Raise the score multiplier by one (up to `max_multiplier`), for the rest of the game.
        """

        self.multiplier = min(self.multiplier + 1, Engine.max_multiplier)

        self.effects.explosion(self.area.center, ParticleSystem.colours['yellow'])

    def explode_nearby_bricks(self) -> int:
        """
        Destroy every destructible brick near any ball.

        Behaviour:
            - A visible, destructible brick whose centre is within `bomb_radius` of a ball's centre is destroyed.
            - Each destroyed brick is worth `bomb_points * level * multiplier`. Blasted bricks are not added to
              `bricks_broken`, which only counts bricks a ball knocked out.

        Returns:
            int: The number of bricks destroyed.
        """

        exploded = 0
        for brick in self.bricks:
            if not brick.visible or brick.indestructible:
                continue

            for ball in self.balls:
                if geometry.centre_distance(brick.bbox(), ball.bbox()) < Engine.bomb_radius:
                    brick.kill()
                    exploded += 1
                    self.effects.brick_break(brick.rect, brick.colour)
                    break

        if exploded > 0:
            self.add_points(exploded * Engine.bomb_points * self.level * self.multiplier)
            self.effects.explosion(self.area.center, ParticleSystem.colours['red'])

        return exploded

    def snapshot(self) -> Snapshot:
        """
        Capture the state the renderer needs, detached from the engine's live objects.

        Returns:
            Snapshot: Immutable view of this tick.
        """

        bricks = tuple(
            BrickView(
                id=brick.id,
                rect=_rect_tuple(brick.rect),
                colour=tuple(brick.colour),
                health=brick.health,
                indestructible=brick.indestructible,
                effect=brick.effect
            )
            for brick in self.bricks if brick.visible
        )

        power_ups = tuple(
            PowerUpView(position=(power_up.position.x, power_up.position.y), effect=power_up.effect)
            for power_up in self.power_ups if power_up.active
        )

        particles = tuple(
            ParticleView(
                position=(particle.position.x, particle.position.y),
                colour=tuple(particle.colour),
                scale=particle.scale,
                opacity=particle.opacity,
                text=particle.text
            )
            for particle in self.effects.particles
        )

        return Snapshot(
            balls=tuple(_rect_tuple(ball.rect) for ball in self.balls),
            paddle=_rect_tuple(self.paddle.rect),
            bricks=bricks,
            power_ups=power_ups,
            laser=_rect_tuple(self.laser) if self.laser is not None else None,
            particles=particles,
            area=_rect_tuple(self.area),
            score=self.score,
            high_score=self.high_score,
            level=self.level,
            multiplier=self.multiplier,
            combo=self.combo,
            bricks_broken=self.bricks_broken,
            paddle_wide=self.paddle_wide,
            laser_active=self.laser_active,
            show_instructions=self.show_instructions,
            game_over=self.game_over,
            running=self.running
        )
