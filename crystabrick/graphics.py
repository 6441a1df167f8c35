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
import cv2
import numpy as np
import pygame

from crystabrick.entities import Effect
from crystabrick.snapshot import BrickView, ParticleView, PowerUpView, Snapshot


class Graphics():
    # Create a dict of handy colours
    colours = {
        'sky_top': (13, 13, 38),
        'sky_bottom': (26, 13, 51),
        'frame': (128, 64, 224),
        'white': (255, 255, 255),
        'black': (0, 0, 0),
        'ball': (230, 230, 255),
        'ball_glow': (64, 128, 255),
        'paddle_left': (26, 153, 255),
        'paddle_right': (128, 26, 255),
        'laser': (255, 32, 32),
        'score': (64, 200, 255),
        'level': (200, 96, 255),
        'multiplier': (255, 204, 0),
        'best': (255, 105, 180),
        'combo': (255, 150, 32),
        'title': (96, 160, 255),
        'die': (255, 96, 128),
        'new_best': (255, 224, 96),
        'presskey': (64, 224, 224),
        'panel': (0, 0, 0, 128),
    }

    # Power-up colours and glyphs
    power_up_styles = {
        Effect.EXTRA_BALL: ((52, 199, 89), (255, 255, 255), "+"),
        Effect.WIDEN_PADDLE: ((0, 122, 255), (255, 255, 255), "<>"),
        Effect.LASER_PADDLE: ((255, 59, 48), (255, 255, 255), "!"),
        Effect.SLOW_BALL: ((175, 82, 222), (255, 255, 255), "S"),
        Effect.SCORE_MULTIPLIER: ((255, 204, 0), (0, 0, 0), "x"),
        Effect.BOMB: ((255, 149, 0), (255, 255, 255), "*"),
    }

    # Inset of the play area inside the window (horizontal, vertical)
    padding = (10, 20)

    # Number of stars in the background
    num_stars = 100

    def __init__(self, width: int, height: int, fullscreen: bool = False, seed: int | None = None) -> None:
        """
        Open the game window and prepare the off-screen surfaces.

        Args:
            width: Window width in pixels (ignored in fullscreen).
            height: Window height in pixels (ignored in fullscreen).
            fullscreen: Whether to take over the whole desktop.
            seed: Seed for the star field, for a repeatable background.
        """

        self.seed = seed
        self._fonts = {}

        if fullscreen:
            width, height = pygame.display.get_desktop_sizes()[0]
            flags = pygame.NOFRAME | pygame.FULLSCREEN
        else:
            flags = pygame.RESIZABLE

        print(f"Resolution {width}x{height}")
        self.display = pygame.display.set_mode((width, height), flags)
        pygame.display.set_caption("Crystabrick")

        self.window_width, self.window_height = 0, 0
        self.play_rect = pygame.Rect(0, 0, 0, 0)
        self.screen = None
        self.background = None
        self.play_sfc = None
        self.glow_sfc = None
        self.fx_sfc = None
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        """
        Rebuild the window-sized surfaces for a new window size.

        Args:
            width: New window width in pixels.
            height: New window height in pixels.
        """

        self.window_width, self.window_height = max(1, width), max(1, height)
        pad_x, pad_y = Graphics.padding
        self.play_rect = pygame.Rect(
            pad_x,
            pad_y,
            max(1, self.window_width - 2 * pad_x),
            max(1, self.window_height - 2 * pad_y)
        )

        # Create a surface to do all of our rendering into
        self.screen = pygame.Surface((self.window_width, self.window_height))
        self.background = self._create_background(self.window_width, self.window_height)

        # The play area is drawn separately, along with an unlit copy of the glowing objects
        self.play_sfc = pygame.Surface(self.play_rect.size)
        self.glow_sfc = pygame.Surface(self.play_rect.size)
        self.fx_sfc = pygame.Surface(self.play_rect.size, pygame.SRCALPHA)

    def play_area(self) -> tuple[float, float, float, float]:
        """
        Get the play area bounds in its own coordinates (top-left at the origin).

        Returns:
            tuple[float, float, float, float]: (x, y, width, height).
        """

        return (0, 0, self.play_rect.width, self.play_rect.height)

    def _create_background(self, width: int, height: int) -> pygame.Surface:
        """
        Paint a diagonal night-sky gradient sprinkled with stars.

        Args:
            width: Surface width in pixels.
            height: Surface height in pixels.

        Returns:
            pygame.Surface: The background image.
        """

        top = np.array(Graphics.colours['sky_top'], dtype=np.float32)
        bottom = np.array(Graphics.colours['sky_bottom'], dtype=np.float32)

        # Blend factor runs from 0 at the top-left to 1 at the bottom-right (arrays are indexed [x, y])
        xs = np.linspace(0.0, 1.0, width, dtype=np.float32)[:, None]
        ys = np.linspace(0.0, 1.0, height, dtype=np.float32)[None, :]
        blend = ((xs + ys) / 2)[..., None]
        pixels = top + (bottom - top) * blend

        # Scatter some dim stars (half brightness, like a faint overlay)
        rng = np.random.default_rng(self.seed)
        sx = rng.integers(0, width, Graphics.num_stars)
        sy = rng.integers(0, height, Graphics.num_stars)
        brightness = rng.uniform(0.5, 1.0, Graphics.num_stars) * 128
        pixels[sx, sy] = np.maximum(pixels[sx, sy], brightness[:, None])

        return pygame.surfarray.make_surface(pixels.astype(np.uint8))

    def _bloom(self, surface: pygame.Surface, sigma: float = 4.0) -> pygame.Surface:
        """
        Blur a surface into a soft glow.

        Args:
            surface: Unlit drawing of the glowing objects on black.
            sigma: Gaussian blur radius at half resolution.

        Returns:
            pygame.Surface: Blurred surface, the same size as the input, for additive blending.

        Note: the blur runs at half resolution, which is plenty for a glow and a quarter of the work.
        """

        width, height = surface.get_size()
        small_size = (max(1, width // 2), max(1, height // 2))
        small = pygame.transform.smoothscale(surface, small_size)

        pixels = np.ascontiguousarray(pygame.surfarray.array3d(small))
        blurred = cv2.GaussianBlur(pixels, (0, 0), sigmaX=sigma, sigmaY=sigma)

        glow = pygame.surfarray.make_surface(blurred)
        return pygame.transform.smoothscale(glow, (width, height))

    def _font(self, size: int, bold: bool = False) -> pygame.font.Font:
        key = (size, bold)
        font = self._fonts.get(key)
        if font is None:
            font = pygame.font.Font(None, size)
            font.set_bold(bold)
            self._fonts[key] = font
        return font

    def text_at(
        self,
        surface: pygame.Surface,
        text: str,
        colour: tuple[int, int, int],
        x: float,
        y: float,
        font_size: int = 32,
        alpha: int = 255,
        bold: bool = False,
    ) -> pygame.Rect:
        """
        Render text and blit it centred at (x, y).

        Args:
            surface: Target surface to draw on.
            text: Text to render.
            colour: RGB colour triplet.
            x: X coordinate of the text centre in pixels.
            y: Y coordinate of the text centre in pixels.
            font_size: Font size in pixels.
            alpha: Opacity 0..255 for the rendered text.
            bold: Whether to render in bold.

        Returns:
            pygame.Rect: Bounding rectangle of the rendered text on the target surface.
        """

        font = self._font(max(1, int(font_size)), bold)

        # Render to a surface with an alpha channel and set the opacity
        text_surface = font.render(text, True, colour[:3])
        text_surface = text_surface.convert_alpha()
        text_surface.set_alpha(max(0, min(255, int(alpha))))

        # Get the position and draw the text
        text_rect = text_surface.get_rect(center=(int(x), int(y)))
        surface.blit(text_surface, text_rect)

        return text_rect

    def darken_screen(self, screen: pygame.Surface, rect: pygame.Rect, alpha: int) -> None:
        """
        Darken part of a surface by blitting a translucent black panel over it.

        Args:
            screen: Target surface to darken.
            rect: Area to darken.
            alpha: Opacity 0..255.
        """

        panel = pygame.Surface(rect.size, pygame.SRCALPHA)
        panel.fill((0, 0, 0, max(0, min(255, int(alpha)))))
        screen.blit(panel, rect.topleft)

    def draw_brick(self, surface: pygame.Surface, glow: pygame.Surface, brick: BrickView) -> None:
        rect = pygame.FRect(brick.rect)
        colour = pygame.Color(brick.colour)

        # Indestructible bricks are drawn dimmer, with a dashed outline
        fill = colour.lerp((0, 0, 0), 0.7 if brick.indestructible else 0.2)
        pygame.draw.rect(surface, fill, rect, border_radius=4)
        pygame.draw.rect(surface, colour.lerp((255, 255, 255), 0.4), rect, width=1, border_radius=4)
        pygame.draw.rect(glow, colour, rect, border_radius=4)

        if brick.indestructible:
            for x in range(int(rect.left) + 2, int(rect.right) - 2, 6):
                pygame.draw.line(surface, Graphics.colours['white'], (x, rect.top + 2), (x + 3, rect.top + 2))
                pygame.draw.line(surface, Graphics.colours['white'], (x, rect.bottom - 3), (x + 3, rect.bottom - 3))

        elif brick.health > 1:
            self.text_at(surface, str(brick.health), Graphics.colours['white'], rect.centerx, rect.centery + 2,
                         font_size=18, bold=True)

        if brick.effect is not None:
            glyph = Graphics.power_up_styles[brick.effect][2]
            y = rect.centery - 5 if brick.health > 1 else rect.centery
            self.text_at(surface, glyph, Graphics.colours['white'], rect.centerx, y, font_size=16, bold=True)

    def draw_power_up(self, surface: pygame.Surface, glow: pygame.Surface, power_up: PowerUpView) -> None:
        primary, secondary, glyph = Graphics.power_up_styles[power_up.effect]
        centre = (int(power_up.position[0]), int(power_up.position[1]))
        pygame.draw.circle(surface, primary, centre, 12)
        pygame.draw.circle(surface, Graphics.colours['white'], centre, 12, width=1)
        pygame.draw.circle(glow, primary, centre, 12)
        self.text_at(surface, glyph, secondary, centre[0], centre[1] + 1, font_size=20, bold=True)

    def draw_particle(self, surface: pygame.Surface, particle: ParticleView) -> None:
        alpha = int(255 * max(0.0, min(1.0, particle.opacity)))
        if particle.text is not None:
            self.text_at(surface, particle.text, particle.colour, particle.position[0], particle.position[1],
                         font_size=int(particle.scale * 12 * 1.5), alpha=alpha, bold=True)
        else:
            colour = (*particle.colour[:3], alpha)
            radius = max(1, int(particle.scale * 4))
            pygame.draw.circle(surface, colour, (int(particle.position[0]), int(particle.position[1])), radius)

    def draw_hud(self, surface: pygame.Surface, snapshot: Snapshot) -> None:
        """
        Draw the score bar along the top of the window and the combo banner.

        Args:
            surface: Target surface (the whole window).
            snapshot: State to show.
        """

        width = self.window_width
        y = self.play_rect.top + 24
        self.text_at(surface, f"SCORE {snapshot.score}", Graphics.colours['score'], width * 0.2, y, font_size=26, bold=True)
        self.text_at(surface, f"LEVEL {snapshot.level}", Graphics.colours['level'], width * 0.5, y, font_size=26, bold=True)
        if snapshot.multiplier > 1:
            self.text_at(surface, f"x{snapshot.multiplier}", Graphics.colours['multiplier'], width * 0.66, y,
                         font_size=26, bold=True)
        self.text_at(surface, f"BEST {snapshot.high_score}", Graphics.colours['best'], width * 0.84, y, font_size=26, bold=True)

        if snapshot.combo > 1 and snapshot.running:
            self.text_at(surface, f"COMBO x{snapshot.combo}", Graphics.colours['combo'], width * 0.5,
                         self.window_height * 0.4, font_size=40, bold=True)

    def draw_overlay(self, surface: pygame.Surface, lines: list[tuple[str, tuple[int, int, int], int]]) -> None:
        """
        Draw a dark panel with centred lines of text.

        Args:
            surface: Target surface (the whole window).
            lines: (text, colour, font size) for each line, top to bottom.
        """

        line_height = 44
        height = line_height * len(lines) + 40
        width = int(self.play_rect.width * 0.85)
        panel = pygame.Rect(0, 0, width, height)
        panel.center = self.play_rect.center
        self.darken_screen(surface, panel, 160)
        pygame.draw.rect(surface, Graphics.colours['frame'], panel, width=2, border_radius=20)

        y = panel.top + 20 + line_height // 2
        for text, colour, size in lines:
            self.text_at(surface, text, colour, panel.centerx, y, font_size=size, bold=True)
            y += line_height

    def draw(self, snapshot: Snapshot, paused: bool = False) -> None:
        """
        Render a complete frame and show it.

        Args:
            snapshot: Engine state after the latest tick.
            paused: Whether to show the pause banner.
        """

        self.screen.blit(self.background, (0, 0))

        # Draw the play area: everything that glows also goes (unlit) into the glow surface
        play = self.play_sfc
        glow = self.glow_sfc
        play.blit(self.background, (0, 0), self.play_rect)
        glow.fill(Graphics.colours['black'])

        for brick in snapshot.bricks:
            self.draw_brick(play, glow, brick)

        if snapshot.laser is not None:
            laser = pygame.FRect(snapshot.laser)
            pygame.draw.rect(play, Graphics.colours['laser'], laser)
            pygame.draw.rect(glow, Graphics.colours['laser'], laser.inflate(4, 0))

        for power_up in snapshot.power_ups:
            self.draw_power_up(play, glow, power_up)

        for ball in snapshot.balls:
            rect = pygame.FRect(ball)
            centre = (int(rect.centerx), int(rect.centery))
            radius = int(rect.width / 2)
            pygame.draw.circle(play, Graphics.colours['ball'], centre, radius)
            pygame.draw.circle(play, Graphics.colours['ball_glow'], centre, radius, width=2)
            pygame.draw.circle(glow, Graphics.colours['ball_glow'], centre, radius + 2)

        # Paddle, as a two-tone capsule
        paddle = pygame.FRect(snapshot.paddle)
        radius = int(paddle.height / 2)
        left_half = pygame.FRect(paddle.left, paddle.top, paddle.width / 2 + radius, paddle.height)
        pygame.draw.rect(play, Graphics.colours['paddle_right'], paddle, border_radius=radius)
        pygame.draw.rect(play, Graphics.colours['paddle_left'], left_half, border_radius=radius)
        pygame.draw.rect(glow, Graphics.colours['paddle_left'], paddle, border_radius=radius)
        if snapshot.laser_active:
            beam = pygame.FRect(paddle.left, paddle.top - 6, paddle.width, 3)
            pygame.draw.rect(play, Graphics.colours['laser'], beam, border_radius=1)
            pygame.draw.rect(glow, Graphics.colours['laser'], beam, border_radius=1)

        # Add the bloom over the play area
        play.blit(self._bloom(glow), (0, 0), special_flags=pygame.BLEND_RGB_ADD)

        # Particles go on top, with their own transparency
        self.fx_sfc.fill((0, 0, 0, 0))
        for particle in snapshot.particles:
            self.draw_particle(self.fx_sfc, particle)
        play.blit(self.fx_sfc, (0, 0))

        self.screen.blit(play, self.play_rect.topleft)
        pygame.draw.rect(self.screen, Graphics.colours['frame'], self.play_rect.inflate(4, 4), width=3, border_radius=20)

        self.draw_hud(self.screen, snapshot)

        # Overlays for the different game states
        colours = Graphics.colours
        if snapshot.game_over:
            lines = [("GAME OVER", colours['die'], 56), (f"SCORE  {snapshot.score}", colours['white'], 34)]
            if snapshot.score == snapshot.high_score and snapshot.score > 0:
                lines.append(("NEW HIGH SCORE!", colours['new_best'], 30))
            lines.extend([
                (f"HIGH SCORE  {snapshot.high_score}", colours['best'], 28),
                (f"BRICKS BROKEN  {snapshot.bricks_broken}", colours['white'], 28),
                (f"LEVEL REACHED  {snapshot.level}", colours['white'], 28),
                ("Click to play again", colours['presskey'], 26),
            ])
            self.draw_overlay(self.screen, lines)

        elif snapshot.show_instructions:
            self.draw_overlay(self.screen, [
                ("NEON", colours['white'], 40),
                ("BREAKOUT", colours['title'], 64),
                ("Move the pointer to steer the paddle", colours['white'], 24),
                ("Break bricks fast to build combos", colours['white'], 24),
                ("Catch falling power-ups", colours['white'], 24),
                ("Click to start", colours['presskey'], 30),
            ])

        elif paused:
            self.draw_overlay(self.screen, [("PAUSED", colours['white'], 56)])

        self.display.blit(self.screen, (0, 0))
        pygame.display.flip()
