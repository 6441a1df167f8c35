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
import pygame


# Sides of an obstacle, in the order used to break ties between equal penetrations
LEFT = "left"
RIGHT = "right"
TOP = "top"
BOTTOM = "bottom"
SIDES = (LEFT, RIGHT, TOP, BOTTOM)


def clamp(value: float, low: float, high: float) -> float:
    """
    Limit a value to the closed range [low, high].

    Args:
        value: The value to limit.
        low: Lower bound.
        high: Upper bound. If `high < low`, `low` wins.

    Returns:
        float: The clamped value.
    """

    return max(low, min(value, high))


def intersects(a: pygame.FRect, b: pygame.FRect) -> bool:
    """
    Report whether two axis-aligned rectangles overlap with a non-zero area.

    Rectangles that only share an edge do not intersect.

    Args:
        a: First rectangle.
        b: Second rectangle.

    Returns:
        bool: True if the rectangles overlap.
    """

    return a.colliderect(b)


def penetrations(moving: pygame.FRect, obstacle: pygame.FRect) -> dict[str, float]:
    """
    Measure how far `moving` has pushed into each side of `obstacle`.

    Args:
        moving: The rectangle that moved into the obstacle (for example a ball).
        obstacle: The rectangle being hit (for example a brick).

    Returns:
        dict[str, float]: Penetration depth keyed by obstacle side. The smallest value is the shortest way out.
    """

    return {
        LEFT: moving.right - obstacle.left,
        RIGHT: obstacle.right - moving.left,
        TOP: moving.bottom - obstacle.top,
        BOTTOM: obstacle.bottom - moving.top,
    }


def collision_side(moving: pygame.FRect, obstacle: pygame.FRect) -> str:
    """
    Pick the obstacle side with the minimum translation needed to separate the rectangles.

    Ties are broken in the order left, right, top, bottom.

    Args:
        moving: The rectangle that moved into the obstacle.
        obstacle: The rectangle being hit.

    Returns:
        str: One of `LEFT`, `RIGHT`, `TOP` or `BOTTOM`.
    """

    depths = penetrations(moving, obstacle)
    smallest = min(depths.values())
    for side in SIDES:
        if depths[side] == smallest:
            return side

    # Only reachable with NaN coordinates
    return BOTTOM


def place_flush(moving: pygame.FRect, obstacle: pygame.FRect, side: str) -> None:
    """
    Move a rectangle so that it sits flush against one side of an obstacle.

    Args:
        moving: Rectangle to reposition (modified in place).
        obstacle: Rectangle to sit against.
        side: Obstacle side, as returned by `collision_side()`.
    """

    if side == LEFT:
        moving.x = obstacle.left - moving.width
    elif side == RIGHT:
        moving.x = obstacle.right
    elif side == TOP:
        moving.y = obstacle.top - moving.height
    else:
        moving.y = obstacle.bottom


def centre_distance(a: pygame.FRect, b: pygame.FRect) -> float:
    """Distance between the centres of two rectangles."""

    return math.hypot(a.centerx - b.centerx, a.centery - b.centery)
