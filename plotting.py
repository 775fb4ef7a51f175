# ===============================
# File: plotting.py
# ===============================
from __future__ import annotations
from typing import Optional

import numpy as np
import matplotlib.pyplot as plt


def moving_average(values: np.ndarray, window: int) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    if window <= 1 or len(values) < window:
        return values
    kernel = np.ones(window) / window
    return np.convolve(values, kernel, mode="valid")


def plot_move_history(move_history, path: Optional[str] = None, window: int = 50):
    """Step count per episode, with a moving average on top."""
    moves = np.asarray(move_history)
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(np.arange(len(moves)), moves, lw=0.8, alpha=0.5, label="steps")
    smooth = moving_average(moves, window)
    if len(smooth) != len(moves):
        ax.plot(np.arange(window - 1, len(moves)), smooth, lw=2, label=f"avg ({window})")
    ax.set_title("Move History")
    ax.set_xlabel("Episodes")
    ax.set_ylabel("StepCount")
    ax.legend()
    fig.tight_layout()
    if path:
        fig.savefig(path, dpi=120)
    return fig


def plot_values(values: np.ndarray, walls: Optional[np.ndarray] = None,
                path: Optional[str] = None):
    """Heatmap of the value table; walls are left blank."""
    grid = np.array(values, dtype=np.float64)
    if walls is not None:
        grid[walls] = np.nan
    h, w = grid.shape
    fig, ax = plt.subplots(figsize=(max(3, w * 0.8), max(3, h * 0.8)))
    im = ax.imshow(grid, cmap="coolwarm")
    if h * w <= 400:
        for r in range(h):
            for c in range(w):
                if not np.isnan(grid[r, c]):
                    ax.text(c, r, f"{grid[r, c]:.1f}", ha="center", va="center", fontsize=8)
    fig.colorbar(im, ax=ax, label="G value")
    ax.set_title("Learned values")
    fig.tight_layout()
    if path:
        fig.savefig(path, dpi=120)
    return fig
