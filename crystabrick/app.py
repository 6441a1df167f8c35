#!/usr/bin/env python3
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
import argparse
import random
import traceback
import pygame
from typing import Optional, Sequence

from crystabrick.controls import PointerControl
from crystabrick.engine import Engine
from crystabrick.graphics import Graphics
from crystabrick.records import GameSession, GameSessions
from crystabrick.storage import DefaultsStore, HighScore, default_data_dir


class Game():
    def __init__(self, args: argparse.Namespace) -> None:
        """
        Wire the engine up to its storage, the window and the pointer.

        Args:
            args: Parsed command line arguments.
        """

        self.fps = args.fps
        self.paused = False
        self.started_at = 0.0

        self.store = DefaultsStore(args.data_dir)
        high_score = HighScore(self.store)
        if args.reset_high_score:
            print("Resetting high score")
            high_score.clear()
        self.sessions = GameSessions(self.store)

        self.engine = Engine(high_score=high_score, rng=random.Random(args.seed))
        self.gfx = Graphics(args.width, args.height, fullscreen=args.fullscreen, seed=args.seed)
        self.controls = PointerControl(self.engine)
        self.relayout(self.gfx.window_width, self.gfx.window_height)

        self.clock = pygame.time.Clock()

    def relayout(self, width: int, height: int) -> None:
        """
        Fit everything to a new window size.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
        """

        self.gfx.resize(width, height)
        self.controls.relayout(self.gfx.play_rect.topleft, (self.gfx.window_width, self.gfx.window_height))
        self.engine.update_game_area(self.gfx.play_area())

    def start(self) -> None:
        self.paused = False
        self.engine.start_game()
        self.started_at = self.engine.clock

    def log_session(self) -> None:
        """
        Record the game that has just ended in the session history.
        """

        engine = self.engine
        power_up = engine.last_power_up.value if engine.last_power_up is not None else "none"
        session = GameSession(
            level_selected=f"Level {engine.level}",
            power_up_used=power_up,
            total_bricks_broken=engine.bricks_broken,
            combo_streaks=engine.best_combo,
            lives_left=0,
            time_taken=int(engine.clock - self.started_at),
            theme_used="Neon",
            status="Completed"
        )
        self.sessions.add(session)
        print(f"Game over: score {engine.score}, level {engine.level}, {engine.bricks_broken} bricks")


def game_loop(game: Game) -> int:
    """
    Run the game until the player quits.

    Args:
        game: The wired-up game.

    Returns:
        int: Exit status for `main()`.
    """

    engine = game.engine

    while True:
        # Handle pending events
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return 0

            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    return 0
                elif event.key == pygame.K_SPACE and engine.running:
                    game.paused = not game.paused
                elif not engine.running:
                    game.start()

            elif event.type == pygame.MOUSEBUTTONUP and not engine.running:
                game.start()

            elif event.type == pygame.VIDEORESIZE:
                game.relayout(event.w, event.h)

            if not game.paused:
                game.controls.handle_event(event)

        # Step the simulation by however long the last frame took
        dt = game.clock.tick(game.fps) / 1000.0
        if not game.paused:
            was_over = engine.game_over
            engine.tick(dt)
            if engine.game_over and not was_over:
                game.log_session()

        game.gfx.draw(engine.snapshot(), paused=game.paused)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Crystabrick. A neon brick-breaker with combos and power-ups."
    )
    parser.add_argument("--width", "-W", type=int, default=420,
                        help="Window width in pixels. Default: 420")
    parser.add_argument("--height", "-H", type=int, default=760,
                        help="Window height in pixels. Default: 760")
    parser.add_argument("--fps", type=int, default=60,
                        help="Frames (and simulation ticks) per second. Default: 60")
    parser.add_argument("--data-dir", "-d", default=default_data_dir(),
                        help="Directory for the high score and saved records. Default: $CRYSTABRICK_DATA or ~/.crystabrick")
    parser.add_argument("--fullscreen", "-f", action="store_true",
                        help="Run fullscreen on the primary monitor.")
    parser.add_argument("--seed", type=int,
                        help="Seed for the random generator, for repeatable games.")
    parser.add_argument("--reset-high-score", action="store_true",
                        help="Forget the saved high score before starting.")
    args = parser.parse_args(argv)

    # Initialise pygame
    pygame.init()

    # Run the game
    try:
        rc = game_loop(Game(args))
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130
    except Exception:
        # Print the full traceback like the default handler
        traceback.print_exc()
        return 1
    finally:
        pygame.quit()

    return rc


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
