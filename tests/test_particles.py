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

import random
import pygame
import pytest

from crystabrick.particles import ParticleSystem


@pytest.fixture
def system():
    return ParticleSystem(random.Random(7))


def test_burst_sizes(system):
    white = ParticleSystem.colours['white']
    system.impact((10, 10), white)
    assert len(system.particles) == 5
    system.brick_break(pygame.FRect(0, 0, 36, 20), white)
    assert len(system.particles) == 20
    system.explosion((10, 10), white)
    assert len(system.particles) == 45
    system.level_complete((200, 350))
    assert len(system.particles) == 95


def test_brick_break_debris_starts_on_the_brick(system):
    rect = pygame.FRect(100, 50, 36, 20)
    system.brick_break(rect, ParticleSystem.colours['red'])
    for particle in system.particles:
        assert rect.left <= particle.position.x <= rect.right
        assert rect.top <= particle.position.y <= rect.bottom
        assert particle.velocity.y <= 0


def test_expired_particles_are_removed(system):
    system.impact((0, 0), ParticleSystem.colours['white'])
    system.explosion((0, 0), ParticleSystem.colours['white'])
    system.update(0.1)
    assert len(system.particles) == 30
    system.update(2.0)
    assert system.particles == []


def test_clear(system):
    system.level_complete((0, 0))
    system.clear()
    assert system.particles == []


@pytest.mark.parametrize("combo, text, colour, scale", [
    (1, "+10", 'white', 1.1),
    (2, "+10 x2", 'white', 1.2),
    (4, "+10 x4", 'yellow', 1.4),
    (7, "+10 x7", 'orange', 1.7),
    (8, "+10 x8", 'red', 1.8),
    (15, "+10 x15", 'red', 2.0),
])
def test_score_popup(system, combo, text, colour, scale):
    popup = system.score_popup((50, 60), 10, combo)
    assert popup.text == text
    assert popup.colour == ParticleSystem.colours[colour]
    assert popup.scale == pytest.approx(scale)
    assert tuple(popup.velocity) == (0, -20)
    assert popup.lifetime == 1.5
    assert popup in system.particles
