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

from crystabrick.engine import Engine
from crystabrick.storage import DefaultsStore, HighScore


# Play area used throughout the tests. With it the paddle sits at (150, 656), the serving ball at (191, 638)
# and the brick grid starts at x = 26.
AREA = (0, 0, 400, 700)


class FixedRandom(random.Random):
    """A random generator whose `random()` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def store(tmp_path):
    return DefaultsStore(str(tmp_path))


@pytest.fixture
def rng():
    return random.Random(1234)


def make_engine(store, rng) -> Engine:
    engine = Engine(high_score=HighScore(store), rng=rng)
    engine.update_game_area(pygame.FRect(AREA))
    engine.start_game()
    return engine


@pytest.fixture
def engine(store, rng):
    return make_engine(store, rng)
