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
import pygame

from crystabrick.engine import Engine


class PointerControl():
    def __init__(self, engine: Engine, origin: tuple[float, float] = (0, 0), window_size: tuple[int, int] = (0, 0)) -> None:
        """
        Drive the paddle from a single pointer (mouse or finger).

        Args:
            engine: The engine whose paddle follows the pointer.
            origin: Window position of the play area's top-left corner.
            window_size: Window size in pixels, used to convert normalised touch positions.
        """

        self.engine = engine
        self.origin = origin
        self.window_size = window_size
        self.x = 0.0
        self.y = 0.0

    def relayout(self, origin: tuple[float, float], window_size: tuple[int, int]) -> None:
        """
        Update the window geometry after a resize.

        Args:
            origin: New window position of the play area's top-left corner.
            window_size: New window size in pixels.
        """

        self.origin = origin
        self.window_size = window_size

    def to_play_area(self, x: float, y: float) -> tuple[float, float]:
        """
        Convert a window position into play area coordinates.

        Args:
            x: Window x position in pixels.
            y: Window y position in pixels.

        Returns:
            tuple[float, float]: The position relative to the play area.
        """

        return x - self.origin[0], y - self.origin[1]

    def point(self, x: float, y: float) -> None:
        """
        Move the paddle to follow a window position.

        Args:
            x: Window x position in pixels.
            y: Window y position in pixels.
        """

        self.x, self.y = self.to_play_area(x, y)
        self.engine.move_paddle(self.x, self.y)

    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Feed a pygame event to the paddle, if it's a pointer event.

        Args:
            event: Any pygame event.

        Returns:
            bool: True if the event moved the paddle.
        """

        if event.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
            self.point(*event.pos)
            return True

        if event.type in (pygame.FINGERMOTION, pygame.FINGERDOWN):
            # Finger positions are normalised to 0.0..1.0 across the window
            width, height = self.window_size
            self.point(event.x * width, event.y * height)
            return True

        return False
