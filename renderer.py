# ===============================
# File: renderer.py
# ===============================
from __future__ import annotations
import pygame
import numpy as np
from typing import Optional, Tuple

from env_maze import Maze

HUD_H = 70
MAX_BOARD_PX = 720


class Renderer:
    def __init__(self, rows: int, cols: int, cell_px: int = 90, fps: int = 30):
        pygame.init()
        self.max_cell_px = cell_px
        self.fps = fps
        pygame.display.set_caption("Maze – backward return learner")
        self.clock = pygame.time.Clock()
        self.font  = pygame.font.SysFont("consolas", 14)
        self.hud_font = pygame.font.SysFont("consolas", 18, bold=True)
        self.set_grid(rows, cols)

    def set_grid(self, rows: int, cols: int):
        """(Re)create the window for a rows x cols maze."""
        self.rows, self.cols = rows, cols
        self.cell_px = max(4, min(self.max_cell_px, MAX_BOARD_PX // max(rows, cols)))
        w = max(cols * self.cell_px, 360)
        h = rows * self.cell_px + HUD_H  # status bar
        self.screen = pygame.display.set_mode((w, h))

    def cell_at(self, pos: Tuple[int, int]) -> Optional[Tuple[int, int]]:
        """Mouse position -> (row, column), None outside the board."""
        px, py = pos
        row, col = py // self.cell_px, px // self.cell_px
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return row, col
        return None

    def draw(self, maze: Maze, values: Optional[np.ndarray], hud_text: str,
             show_values: bool = True):
        self.screen.fill((245,245,245))
        cp = self.cell_px
        walls = maze.walls()
        goal = (maze.height - 1, maze.width - 1)

        # cells
        for r in range(maze.height):
            for c in range(maze.width):
                x, y = c*cp, r*cp
                color = (255,255,255)
                if walls[r, c]:
                    color = (60,60,60)
                if (r,c) == goal:
                    color = (170,190,255)
                pygame.draw.rect(self.screen, color, (x, y, cp, cp))
                pygame.draw.rect(self.screen, (180,180,180), (x, y, cp, cp), width=1)

                if show_values and values is not None and not walls[r, c] and cp >= 36:
                    v = values[r, c]
                    if not np.isnan(v):
                        surf = self.font.render(f"{v:.2f}", True, (0,0,0))
                        self.screen.blit(surf, (x + (cp - surf.get_width())//2,
                                                y + (cp - surf.get_height())//2))

        # robot
        pos = maze.get_state()
        ax, ay = pos.y*cp + cp//2, pos.x*cp + cp//2
        pygame.draw.circle(self.screen, (0,170,0), (ax, ay), max(2, cp//4))

        # HUD
        bar_y = maze.height * cp
        pygame.draw.rect(self.screen, (250,250,250), (0, bar_y, self.screen.get_width(), HUD_H))
        y = bar_y + 8
        for line in hud_text.split("\n"):
            surf = self.hud_font.render(line, True, (20,20,20))
            self.screen.blit(surf, (10, y))
            y += surf.get_height() + 2

        pygame.display.flip()
        self.clock.tick(self.fps)

    def pump_events(self):
        return pygame.event.get()
