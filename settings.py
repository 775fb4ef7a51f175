# ===============================
# File: settings.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import os

from dotenv import load_dotenv

MAX_MAZE_SIDE = 127  # UI limit; the layout codec itself allows up to 255


@dataclass
class Settings:
    """Runtime values read from the environment (.env supported).

    MAZE_LAYOUT    encoded wall layout (base64), empty = built-in 6x6 maze
    MAZE_ALPHA     learning rate
    MAZE_EPSILON   initial exploration rate
    MAZE_EPISODES  training episodes per run
    MAZE_SEED      random seed, empty = unseeded
    """
    layout: Optional[str] = None
    alpha: float = 0.15
    epsilon: float = 0.2
    episodes: int = 5000
    seed: Optional[int] = None


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    load_dotenv(dotenv_path)
    seed = os.getenv("MAZE_SEED", "")
    return Settings(
        layout=os.getenv("MAZE_LAYOUT") or None,
        alpha=float(os.getenv("MAZE_ALPHA", "0.15")),
        epsilon=float(os.getenv("MAZE_EPSILON", "0.2")),
        episodes=int(os.getenv("MAZE_EPISODES", "5000")),
        seed=int(seed) if seed else None,
    )


def clamp(num: int, lo: int = 1, hi: int = MAX_MAZE_SIDE) -> int:
    return max(lo, min(hi, num))
