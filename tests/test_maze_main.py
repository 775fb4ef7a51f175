import base64

import numpy as np
import pytest

from env_maze import Maze, default_maze
from maze_agent import AgentConfig
from maze_main import build_maze, main, parse_args, run_headless
from settings import Settings
from trainer import TrainConfig


def test_build_maze_default_and_encoded():
    assert np.array_equal(build_maze(None).walls(), Maze(default_maze()).walls())
    layout = base64.b64encode(bytes([3, 2, 0b01000000])).decode()
    maze = build_maze(layout)
    assert (maze.width, maze.height) == (3, 2)
    assert maze.walls()[0, 1]


def test_build_maze_falls_back_on_bad_layout(capsys):
    maze = build_maze("AgI=")  # 2x2 header without a bitmap
    assert (maze.width, maze.height) == (6, 6)
    assert "[ERROR]" in capsys.readouterr().out


def test_parse_args_uses_settings_as_defaults():
    args = parse_args([], Settings(layout="AgIA", alpha=0.4, epsilon=0.1, episodes=7, seed=3))
    assert (args.maze, args.alpha, args.epsilon, args.episodes, args.seed) == ("AgIA", 0.4, 0.1, 7, 3)
    args = parse_args(["--alpha", "0.9", "--headless"], Settings())
    assert args.alpha == 0.9 and args.headless


@pytest.mark.parametrize("argv", [["--alpha", "1.5"], ["--alpha", "0"], ["--epsilon", "-0.2"],
                                  ["--episodes", "0"], ["--episodes", "-3"]])
def test_parse_args_rejects_bad_rates(argv):
    with pytest.raises(SystemExit):
        parse_args(argv, Settings())


def test_run_headless_writes_plots(tmp_path, capsys):
    moves_png, values_png = tmp_path / "moves.png", tmp_path / "values.png"
    agent = run_headless(Maze.empty(3, 3), AgentConfig(),
                         TrainConfig(episodes=20, seed=0, verbose=False),
                         str(moves_png), str(values_png))
    assert moves_png.exists() and values_png.exists()
    assert sorted(agent.G) == list(range(9))
    assert "layout=AwMAAA==" in capsys.readouterr().out


def test_main_headless(monkeypatch, capsys):
    for name in ["MAZE_LAYOUT", "MAZE_ALPHA", "MAZE_EPSILON", "MAZE_EPISODES", "MAZE_SEED"]:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    main(["--headless", "--episodes", "10", "--seed", "1", "--maze", "AgIA"])
    out = capsys.readouterr().out
    assert "maze 2x2" in out
    assert "[INFO] done" in out


def test_run_headless_with_walled_in_start(tmp_path, capsys):
    maze = Maze.empty(3, 3)
    maze.toggle_tile(0, 1)
    maze.toggle_tile(1, 0)
    moves_png = tmp_path / "moves.png"
    run_headless(maze, AgentConfig(), TrainConfig(episodes=5, seed=0), str(moves_png))
    out = capsys.readouterr().out
    assert "[ERROR]" in out
    assert "[INFO] done" not in out
    assert not moves_png.exists()
