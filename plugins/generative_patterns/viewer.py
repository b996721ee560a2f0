"""
Interactive Pygame Viewer for Generative Patterns

Shows any renderer family in a resizable window. Resizing the window
resizes the simulator's surface (renderers rebuild their grids before
the next frame).

Controls:
  SPACE       Pause / Resume
  TAB         Next pattern within the current family
  LEFT/RIGHT  Previous / next renderer family
  1-9         Presets of the current family
  R           Restart clock and transient state
  S           Save screenshot
  H           Toggle HUD overlay
  F           Toggle fullscreen
  Q / ESC     Quit
"""

import os
import time

import numpy as np
import pygame

from .presets import get_presets_for_family
from .simulator import RENDERER_ORDER, PatternSimulator


HUD_BG = (0, 0, 0, 140)
HUD_FG = (210, 215, 225)


class PatternViewer:
    """Pygame window around a PatternSimulator.

    Args:
        width, height: initial window size
        start_preset: preset key to open with
        render_scale: surface resolution relative to the window (0.25..1)
    """

    def __init__(self, width=960, height=640, start_preset="donut", render_scale=1.0,
                 image=None):
        self.width = width
        self.height = height
        self.render_scale = min(max(float(render_scale), 0.25), 1.0)
        self.sim = PatternSimulator(start_preset, *self._sim_size(width, height))
        if image is not None:
            self.sim.set_image(image)

        self.running = True
        self.show_hud = True
        self.fullscreen = False
        self.hud_font = None
        self.fps_history = []

    def _sim_size(self, width, height):
        return (max(1, int(width * self.render_scale)), max(1, int(height * self.render_scale)))

    def _resize(self, width, height):
        self.width, self.height = max(1, width), max(1, height)
        self.sim.resize(*self._sim_size(self.width, self.height))
        if self.sim.paused:
            self.sim.render_frame(force=True)

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return
        line = f"{self.sim.status_line()}  |  {self.sim.width}x{self.sim.height}  |  FPS: {fps:.0f}"
        if self.sim.paused:
            line = "[PAUSED]  " + line

        padding = 6
        bg_surface = pygame.Surface((self.width, 24), pygame.SRCALPHA)
        bg_surface.fill(HUD_BG)
        screen.blit(bg_surface, (0, 0))
        screen.blit(self.hud_font.render(line, True, HUD_FG), (padding + 4, padding))

    def _save_screenshot(self):
        screenshots_dir = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(screenshots_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        name = self.sim.preset_key or self.sim.family
        path = os.path.join(screenshots_dir, f"gp_{name}_{timestamp}.png")
        latest_path = os.path.join(screenshots_dir, "latest.png")

        save_surface = pygame.surfarray.make_surface(self.sim.surface.swapaxes(0, 1))
        pygame.image.save(save_surface, path)
        pygame.image.save(save_surface, latest_path)
        print(f"[GP] Screenshot saved: {path}")

    def _switch_family(self, step):
        idx = (RENDERER_ORDER.index(self.sim.family) + step) % len(RENDERER_ORDER)
        family = RENDERER_ORDER[idx]
        presets = get_presets_for_family(family)
        if presets:
            self.sim.apply_preset(presets[0])
        else:
            self.sim.set_family(family)

    def run(self):
        """Main viewer loop."""
        pygame.init()
        screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        pygame.display.set_caption("Generative Patterns")
        clock = pygame.time.Clock()
        self.hud_font = pygame.font.SysFont("menlo", 13)

        while self.running:
            frame_start = time.time()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == pygame.VIDEORESIZE and not self.fullscreen:
                    screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                    self._resize(event.w, event.h)
                elif event.type == pygame.KEYDOWN:
                    screen = self._handle_keydown(event, screen)

            frame = self.sim.render_frame()
            surf = pygame.surfarray.make_surface(frame.swapaxes(0, 1))
            if surf.get_size() != (self.width, self.height):
                surf = pygame.transform.smoothscale(surf, (self.width, self.height))
            screen.blit(surf, (0, 0))

            frame_time = time.time() - frame_start
            self.fps_history.append(frame_time)
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            avg_fps = 1.0 / max(np.mean(self.fps_history), 0.001)
            self._draw_hud(screen, avg_fps)

            pygame.display.flip()
            clock.tick(60)

        pygame.quit()

    def _handle_keydown(self, event, screen):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_SPACE:
            self.sim.toggle_pause()

        elif key == pygame.K_TAB:
            print(f"[GP] Pattern: {self.sim.next_pattern()}")

        elif key in (pygame.K_LEFT, pygame.K_RIGHT):
            self._switch_family(1 if key == pygame.K_RIGHT else -1)
            print(f"[GP] Family: {self.sim.family}")

        elif key == pygame.K_r:
            self.sim.restart()

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_s:
            self._save_screenshot()

        elif key == pygame.K_f:
            self.fullscreen = not self.fullscreen
            if self.fullscreen:
                screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
                info = pygame.display.Info()
                self._resize(info.current_w, info.current_h)
            else:
                screen = pygame.display.set_mode((960, 640), pygame.RESIZABLE)
                self._resize(960, 640)

        # Preset selection (1-9) within the current family
        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            presets = get_presets_for_family(self.sim.family)
            if idx < len(presets):
                self.sim.apply_preset(presets[idx])
                print(f"[GP] Preset: {presets[idx]}")

        return screen
