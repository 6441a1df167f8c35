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
import random
import pygame

from crystabrick.entities import Brick, Effect


class BrickField():
    # Grid dimensions
    rows: int = 6
    columns: int = 9

    # Gap between neighbouring bricks, and the gap between the top of the play area and the first row
    spacing: float = 3
    top_offset: float = 60

    # Every brick's health is capped here after the per-level difficulty bump
    max_health: int = 5

    # The five layouts, selected by `level % 5`
    #
    # 0 - Standard: health rises every two rows, random effects scattered along the bottom row
    # 1 - Checkerboard: alternating 2/1 health, indestructible accents along the top row
    # 2 - Pyramid: health falls away from the top centre, which carries a score multiplier
    # 3 - Horizontal stripes: tough even rows, an extra ball in the middle of the second row
    # 4 - Vertical stripes: tough even columns, a bomb in the bottom right corner
    #
    pattern_names = ["standard", "checkerboard", "pyramid", "horizontal stripes", "vertical stripes"]

    @classmethod
    def pattern_for(cls, level: int) -> int:
        """
        Get the layout index used for a level.

        Args:
            level: Level number starting at 1.

        Returns:
            int: Index into `pattern_names`.
        """

        return level % len(cls.pattern_names)

    @classmethod
    def brick_colour(cls, row: int, col: int) -> pygame.Color:
        """
        Compute the neon colour of a grid position.

        The hue drifts from blue towards purple down the rows and the brightness rises across the columns.

        Args:
            row: Row index, 0 at the top.
            col: Column index, 0 on the left.

        Returns:
            pygame.Color: Opaque RGB colour.
        """

        hue = (0.6 + row / cls.rows * 0.3) % 1.0
        brightness = 0.7 + col / cls.columns * 0.3

        colour = pygame.Color(0, 0, 0)
        colour.hsva = (hue * 360, 90, brightness * 100, 100)
        return colour

    @classmethod
    def brick_layout(cls, pattern: int, row: int, col: int, rng: random.Random) -> tuple[int, Effect | None, bool]:
        """
        Decide a brick's pattern-specific properties, before the per-level difficulty bump.

        Args:
            pattern: Layout index from `pattern_for()`.
            row: Row index.
            col: Column index.
            rng: Random generator (only the standard layout uses it).

        Returns:
            tuple[int, Effect | None, bool]: (health, effect, indestructible).
        """

        health = 1
        effect = None
        indestructible = False
        centre_col = cls.columns // 2

        if pattern == 0:
            # Standard
            health = 1 + (row // 2)
            if row == cls.rows - 1 and col % 3 == 0:
                effect = rng.choice(list(Effect))

        elif pattern == 1:
            # Checkerboard
            if (row + col) % 2 == 0:
                health = 2
            if row == 0 and col % 4 == 0:
                indestructible = True

        elif pattern == 2:
            # Pyramid
            centre_dist = abs(col - centre_col) + abs(row)
            health = max(1, 3 - centre_dist // 2)
            if centre_dist == 0:
                effect = Effect.SCORE_MULTIPLIER

        elif pattern == 3:
            # Horizontal stripes
            if row % 2 == 0:
                health = 2
            if row == 1 and col == centre_col:
                effect = Effect.EXTRA_BALL

        elif pattern == 4:
            # Vertical stripes
            if col % 2 == 0:
                health = 2
            if row == cls.rows - 1 and col == cls.columns - 1:
                effect = Effect.BOMB

        return health, effect, indestructible

    @classmethod
    def generate(cls, level: int, area: pygame.FRect, rng: random.Random) -> list[Brick]:
        """
        Build the brick grid for a level.

        Args:
            level: Level number starting at 1.
            area: Play area bounds. The grid is centred horizontally (left-aligned when the area is narrower than the grid) and
                  hangs `top_offset` below the top.
            rng: Random generator for the standard layout's scattered effects.

        Returns:
            list[Brick]: Bricks in row-major order; each brick's id is its index.
        """

        pattern = cls.pattern_for(level)

        grid_width = cls.columns * Brick.width + (cls.columns - 1) * cls.spacing
        # Centre the grid horizontally, but keep the first column inside narrow play areas
        start_x = max(area.left, area.left + (area.width - grid_width) / 2)

        bricks = []
        id = 0
        for row in range(cls.rows):
            y = area.top + cls.top_offset + row * (Brick.height + cls.spacing)
            for col in range(cls.columns):
                x = start_x + col * (Brick.width + cls.spacing)

                health, effect, indestructible = cls.brick_layout(pattern, row, col, rng)

                # Later levels make every brick a little tougher
                health = min(health + level // 3, cls.max_health)

                brick = Brick(
                    id,
                    x,
                    y,
                    health=health,
                    colour=cls.brick_colour(row, col),
                    effect=effect,
                    indestructible=indestructible
                )
                bricks.append(brick)
                id += 1

        return bricks
