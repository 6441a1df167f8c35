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

from crystabrick.entities import Particle


class ParticleSystem():
    # Handy named colours for the bursts (the particle colours are cosmetic only)
    colours = {
        'white': pygame.Color(255, 255, 255),
        'blue': pygame.Color(0, 122, 255),
        'green': pygame.Color(52, 199, 89),
        'yellow': pygame.Color(255, 204, 0),
        'orange': pygame.Color(255, 149, 0),
        'red': pygame.Color(255, 59, 48),
    }

    def __init__(self, rng: random.Random) -> None:
        """
        Create an empty particle system.

        Args:
            rng: Random generator used for particle spread, shared with the engine.
        """

        self.rng = rng
        self.particles: list[Particle] = []

    def clear(self) -> None:
        self.particles = []

    def impact(self, position: Any, colour: pygame.Color) -> None:
        """
        Emit a small spark burst where a ball touched something.

        Args:
            position: (x, y) contact point.
            colour: Spark colour.
        """

        uniform = self.rng.uniform
        for _ in range(5):
            self.particles.append(Particle(
                position=position,
                colour=colour,
                scale=uniform(0.5, 1.5),
                velocity=(uniform(-30, 30), uniform(-30, 30)),
                lifetime=uniform(0.3, 0.8)
            ))

    def brick_break(self, rect: pygame.FRect, colour: pygame.Color) -> None:
        """
        Emit debris scattered over a destroyed brick, thrown mostly upwards.

        Args:
            rect: The brick's rectangle.
            colour: The brick's colour.
        """

        uniform = self.rng.uniform
        w2, h2 = rect.width / 2, rect.height / 2
        for _ in range(15):
            self.particles.append(Particle(
                position=(rect.centerx + uniform(-w2, w2), rect.centery + uniform(-h2, h2)),
                colour=colour,
                scale=uniform(1.0, 2.5),
                velocity=(uniform(-50, 50), uniform(-80, 0)),
                lifetime=uniform(0.5, 1.2)
            ))

    def explosion(self, position: Any, colour: pygame.Color) -> None:
        """
        Emit a large burst, used for power-up pickups and their effects.

        Args:
            position: (x, y) centre of the burst.
            colour: Particle colour.
        """

        uniform = self.rng.uniform
        for _ in range(25):
            self.particles.append(Particle(
                position=position,
                colour=colour,
                scale=uniform(0.8, 2.2),
                velocity=(uniform(-100, 100), uniform(-100, 100)),
                lifetime=uniform(0.8, 1.5)
            ))

    def score_popup(self, position: Any, points: int, combo: int) -> Particle:
        """
        Emit a floating score label.

        Args:
            position: (x, y) where the label starts.
            points: Points awarded.
            combo: Current combo counter. Longer combos get a bigger, hotter label with an `xN` suffix.

        Returns:
            Particle: The popup that was added.
        """

        if combo < 3:
            colour = ParticleSystem.colours['white']
        elif combo < 5:
            colour = ParticleSystem.colours['yellow']
        elif combo < 8:
            colour = ParticleSystem.colours['orange']
        else:
            colour = ParticleSystem.colours['red']

        text = f"+{points}"
        if combo > 1:
            text += f" x{combo}"

        popup = Particle(
            position=position,
            colour=colour,
            scale=1.0 + min(combo, 10) * 0.1,
            velocity=(0, -20),
            lifetime=1.5,
            text=text
        )
        self.particles.append(popup)

        return popup

    def level_complete(self, position: Any) -> None:
        """
        Emit a rainbow ring of particles flying outwards.

        Args:
            position: (x, y) centre of the ring, normally the middle of the play area.
        """

        uniform = self.rng.uniform
        for _ in range(50):
            angle = uniform(0, math.pi * 2)
            speed = uniform(50, 150)
            colour = pygame.Color(0, 0, 0)
            colour.hsva = (uniform(0, 360), 100, 100, 100)
            self.particles.append(Particle(
                position=position,
                colour=colour,
                scale=uniform(1.0, 3.0),
                velocity=(math.cos(angle) * speed, math.sin(angle) * speed),
                lifetime=uniform(1.0, 2.0)
            ))

    def update(self, dt: float) -> None:
        """
        Move, age and fade every particle, dropping those that have expired.

        Args:
            dt: Elapsed time in seconds.
        """

        self.particles = [particle for particle in self.particles if particle.update(dt)]
