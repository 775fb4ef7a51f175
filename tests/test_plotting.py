import numpy as np

from env_maze import Maze, default_maze
from plotting import moving_average, plot_move_history, plot_values


def test_moving_average():
    assert np.allclose(moving_average([1, 2, 3, 4], 2), [1.5, 2.5, 3.5])
    assert np.allclose(moving_average([5, 7], 10), [5, 7])


def test_plot_move_history_saves(tmp_path):
    out = tmp_path / "moves.png"
    fig = plot_move_history(np.arange(200, 0, -1), str(out), window=20)
    assert out.exists() and out.stat().st_size > 0
    assert fig.axes[0].get_title() == "Move History"


def test_plot_values_masks_walls(tmp_path):
    maze = Maze(default_maze())
    values = np.linspace(-5, 0, 36).reshape(6, 6)
    out = tmp_path / "values.png"
    fig = plot_values(values, maze.walls(), str(out))
    assert out.exists()
    image = fig.axes[0].images[0].get_array()
    assert np.ma.is_masked(image[5, 0]) or np.isnan(image[5, 0])
