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

"""
Read-only views of the engine state, captured once per tick for the renderer.

Rectangles are `(x, y, width, height)` tuples and colours are `(r, g, b, a)` tuples, so nothing in a
snapshot aliases the engine's live objects.
"""

from __future__ import annotations
from dataclasses import dataclass

from crystabrick.entities import Effect

RectTuple = tuple[float, float, float, float]
ColourTuple = tuple[int, int, int, int]


@dataclass(frozen=True)
class BrickView:
    id: int
    rect: RectTuple
    colour: ColourTuple
    health: int
    indestructible: bool
    effect: Effect | None


@dataclass(frozen=True)
class PowerUpView:
    position: tuple[float, float]
    effect: Effect


@dataclass(frozen=True)
class ParticleView:
    position: tuple[float, float]
    colour: ColourTuple
    scale: float
    opacity: float
    text: str | None


@dataclass(frozen=True)
class Snapshot:
    balls: tuple[RectTuple, ...]
    paddle: RectTuple
    bricks: tuple[BrickView, ...]
    power_ups: tuple[PowerUpView, ...]
    laser: RectTuple | None
    particles: tuple[ParticleView, ...]
    area: RectTuple
    score: int
    high_score: int
    level: int
    multiplier: int
    combo: int
    bricks_broken: int
    paddle_wide: bool
    laser_active: bool
    show_instructions: bool
    game_over: bool
    running: bool
