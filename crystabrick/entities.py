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
import enum
import uuid
import pygame
from typing import Any

from crystabrick import geometry


class Effect(enum.Enum):
    """Special-effect tags carried by bricks and the power-ups they drop."""

    EXTRA_BALL = "extra-ball"
    WIDEN_PADDLE = "widen-paddle"
    LASER_PADDLE = "laser-paddle"
    SLOW_BALL = "slow-ball"
    SCORE_MULTIPLIER = "score-multiplier"
    BOMB = "bomb"


class Ball():
    # Width and height of every ball
    size: float = 18

    def __init__(self, x: float, y: float, vx: float = 0, vy: float = 0) -> None:
        """
        Create a ball.

        Args:
            x: Left edge of the ball.
            y: Top edge of the ball.
            vx: Horizontal velocity in units per 1/60 s frame.
            vy: Vertical velocity in units per 1/60 s frame.
        """

        self.rect = pygame.FRect(x, y, Ball.size, Ball.size)
        self.velocity = pygame.Vector2(vx, vy)

    def bbox(self) -> pygame.FRect:
        """
        Get the ball's bounding box.

        Returns:
            pygame.FRect: The live rectangle (not a copy).
        """

        return self.rect

    def clone(self) -> Ball:
        """Create an independent copy of this ball."""

        return Ball(self.rect.x, self.rect.y, self.velocity.x, self.velocity.y)

    def served(self) -> bool:
        """Report whether the ball has been given any velocity yet."""

        return self.velocity.x != 0 or self.velocity.y != 0

    def move(self, dt: float) -> None:
        """
        Integrate position over an elapsed time.

        Args:
            dt: Elapsed time in seconds. The velocity is per 1/60 s frame, so the step is `velocity * dt * 60`.
        """

        self.rect.x += self.velocity.x * dt * 60
        self.rect.y += self.velocity.y * dt * 60

    def check_wall_collision(self, area: pygame.FRect) -> list[tuple[float, float]]:
        """
        Bounce off the left, right and top walls of the play area.

        Args:
            area: Play area bounds.

        Behaviour:
            - Clamps the ball inside the wall it touched and reflects the matching velocity component.
            - The bottom edge is not a wall; balls fall through it.

        Returns:
            list[tuple[float, float]]: Contact points, one per wall touched (empty if none).
        """

        contacts = []

        if self.rect.left <= area.left:
            # Ball hit left wall
            self.rect.x = area.left
            self.velocity.x = -self.velocity.x
            contacts.append((self.rect.left, self.rect.centery))

        if self.rect.right >= area.right:
            # Ball hit right wall
            self.rect.x = area.right - self.rect.width
            self.velocity.x = -self.velocity.x
            contacts.append((self.rect.right, self.rect.centery))

        if self.rect.top <= area.top:
            # Ball hit top wall
            self.rect.y = area.top
            self.velocity.y = -self.velocity.y
            contacts.append((self.rect.centerx, self.rect.top))

        return contacts

    def check_paddle_collision(self, paddle: Paddle, speed: float) -> bool:
        """
        Resolve a collision with the paddle.

        Args:
            paddle: The player's paddle.
            speed: Current level ball speed.

        Behaviour:
            - Early-exits if the rectangles don't overlap.
            - Sits the ball on top of the paddle.
            - Maps the contact point across the paddle to [-1, 1] and sends the ball up at that angle, so
              the outer ends of the paddle give the steepest sideways bounce.

        Returns:
            bool: True if a collision occurred and was handled, else False.
        """

        paddle_rect = paddle.bbox()
        if not geometry.intersects(self.rect, paddle_rect):
            return False

        self.rect.y = paddle_rect.top - self.rect.height

        hit_position = (self.rect.centerx - paddle_rect.left) / paddle_rect.width
        angle = (hit_position - 0.5) * 2
        self.velocity.update(angle * speed * 1.5, -speed)

        return True

    def check_brick_collision(self, brick: Brick) -> str:
        """
        Bounce off a brick that the ball is overlapping.

        Args:
            brick: The brick that was hit.

        Behaviour:
            - Finds the side with the smallest penetration (left, right, top, bottom wins ties).
            - Places the ball flush against that side and reflects the matching velocity component.

        Returns:
            str: The brick side that was hit.
        """

        side = geometry.collision_side(self.rect, brick.rect)
        geometry.place_flush(self.rect, brick.rect, side)
        if side in (geometry.LEFT, geometry.RIGHT):
            self.velocity.x = -self.velocity.x
        else:
            self.velocity.y = -self.velocity.y

        return side

    def confine(self, area: pygame.FRect) -> None:
        """
        Pull the ball back inside the left, right and top walls without changing its velocity.

        A brick next to a wall can push the ball flush against its outer side, past the wall.

        Args:
            area: Play area bounds.
        """

        self.rect.x = geometry.clamp(self.rect.x, area.left, area.right - self.rect.width)
        self.rect.y = max(self.rect.y, area.top)

    def rescale(self, speed: float) -> None:
        """
        Set the ball's speed while keeping its direction.

        Args:
            speed: New speed. A stationary ball is sent straight down at this speed.
        """

        if self.velocity.length() > 0:
            self.velocity.scale_to_length(speed)
        else:
            self.velocity.update(0, speed)


class Paddle():
    # Normal width, height and distance of the paddle from the bottom of the play area
    base_width: float = 100
    height: float = 14
    margin: float = 30

    # Width ratio while the widen-paddle effect is active
    wide_ratio: float = 1.5

    def __init__(self) -> None:
        self.rect = pygame.FRect(0, 0, Paddle.base_width, Paddle.height)

    def bbox(self) -> pygame.FRect:
        """The live paddle rectangle."""

        return self.rect

    def home(self, area: pygame.FRect) -> None:
        """
        Centre the paddle near the bottom of the play area.

        Args:
            area: Play area bounds.
        """

        self.rect.x = area.centerx - self.rect.width / 2
        self.rect.y = area.bottom - Paddle.height - Paddle.margin

    def move(self, x: float, area: pygame.FRect) -> None:
        """
        Centre the paddle on a pointer position, keeping it inside the play area.

        Args:
            x: Pointer x position in play area coordinates.
            area: Play area bounds.
        """

        left = x - self.rect.width / 2
        self.rect.x = geometry.clamp(left, area.left, area.right - self.rect.width)

    def resize(self, width: float, area: pygame.FRect) -> None:
        """
        Change the paddle width, keeping the left edge unless that would leave the play area.

        Args:
            width: New width.
            area: Play area bounds.
        """

        self.rect.width = width
        self.rect.x = geometry.clamp(self.rect.x, area.left, area.right - width)


class Brick():
    # Size of every brick
    width: float = 36
    height: float = 20

    def __init__(
        self,
        id: int,
        x: float,
        y: float,
        health: int,
        colour: pygame.Color,
        effect: Effect | None = None,
        indestructible: bool = False,
    ) -> None:
        """
        Create a brick.

        Args:
            id: Identifier for this brick (its index in the level's grid).
            x: Left edge.
            y: Top edge.
            health: Number of hits this brick can take.
            colour: Cosmetic colour.
            effect: Optional special-effect tag; destroying the brick may drop a matching power-up.
            indestructible: If True, the brick can be hit but never destroyed.
        """

        self.id = id
        self.rect = pygame.FRect(x, y, Brick.width, Brick.height)
        self.health = health
        self.colour = colour
        self.effect = effect
        self.indestructible = indestructible
        self.visible = True

    def bbox(self) -> pygame.FRect:
        """The brick rectangle."""

        return self.rect

    def hit(self) -> bool:
        """
        Knock a point of health off the brick.

        Behaviour:
            - Health never drops below zero.
            - A destructible brick with no health left is hidden.

        Returns:
            bool: True if this hit destroyed the brick.
        """

        self.health = max(0, self.health - 1)
        if self.health <= 0 and not self.indestructible:
            self.visible = False
            return True

        return False

    def kill(self) -> None:
        """Destroy the brick outright, whatever its health."""

        self.health = 0
        self.visible = False

    def cleared(self) -> bool:
        """Report whether this brick no longer stands in the way of completing the level."""

        return not self.visible or self.indestructible


class PowerUp():
    # Width and height of the pickup box
    size: float = 24

    # Units fallen per tick
    fall_speed: float = 3

    def __init__(self, effect: Effect, x: float, y: float) -> None:
        """
        Create a falling power-up.

        Args:
            effect: The effect applied when the paddle catches it.
            x: Centre x.
            y: Centre y.
        """

        self.id = uuid.uuid4()
        self.effect = effect
        self.position = pygame.Vector2(x, y)
        self.active = True

    def bbox(self) -> pygame.FRect:
        """The pickup box, centred on the power-up's position."""

        half = PowerUp.size / 2
        return pygame.FRect(self.position.x - half, self.position.y - half, PowerUp.size, PowerUp.size)

    def fall(self) -> None:
        self.position.y += PowerUp.fall_speed


class Particle():
    # Remaining lifetime (seconds) below which the particle fades out
    fade_time: float = 0.3

    # Particles are created in bulk, so skip the per-instance dict
    __slots__ = ("position", "colour", "scale", "opacity", "velocity", "lifetime", "text")

    def __init__(
        self,
        position: Any,
        colour: pygame.Color,
        scale: float,
        velocity: Any,
        lifetime: float,
        text: str | None = None,
        opacity: float = 1.0,
    ) -> None:
        """
        Create a cosmetic particle.

        Args:
            position: Starting (x, y) position.
            colour: Particle colour.
            scale: Size scale (a plain particle is `scale * 8` across; text is `scale * 12` high).
            velocity: (x, y) velocity in units per second.
            lifetime: Seconds until the particle disappears.
            text: Optional label, used for score popups.
            opacity: Starting opacity 0.0..1.0.
        """

        self.position = pygame.Vector2(position)
        self.colour = colour
        self.scale = scale
        self.opacity = opacity
        self.velocity = pygame.Vector2(velocity)
        self.lifetime = lifetime
        self.text = text

    def update(self, dt: float) -> bool:
        """
        Move and age the particle.

        Args:
            dt: Elapsed time in seconds.

        Returns:
            bool: True while the particle is still alive.
        """

        self.position += self.velocity * dt
        self.lifetime -= dt
        if self.lifetime < Particle.fade_time:
            self.opacity = self.lifetime / Particle.fade_time

        return self.lifetime > 0


class Laser():
    # Width of the laser beam
    width: float = 2

    @classmethod
    def beam(cls, paddle: Paddle, area: pygame.FRect) -> pygame.FRect:
        """
        Project the laser beam from the centre of the paddle to the top of the play area.

        Args:
            paddle: The player's paddle.
            area: Play area bounds.

        Returns:
            pygame.FRect: The beam rectangle.
        """

        top = area.top
        bat = paddle.bbox()
        return pygame.FRect(bat.centerx - cls.width / 2, top, cls.width, bat.top - top)

