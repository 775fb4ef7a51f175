import base64

import numpy as np
import pytest

from env_maze import (Maze, MazeDecodeError, TileType, default_maze, empty_maze,
                      encode_tiles, load_tiles)


def b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def random_layout(rng, width, height):
    walls = rng.random((height, width)) < 0.3
    return np.where(walls, TileType.WALL, TileType.EMPTY).astype(np.int8)


def test_empty_two_by_two_encoding():
    maze = Maze.empty(2, 2)
    assert base64.b64decode(maze.encode_tiles()) == bytes([2, 2, 0])


def test_bits_are_row_major_msb_first():
    tiles = empty_maze(3, 3)
    tiles[0, 1] = TileType.WALL
    tiles[2, 2] = TileType.WALL
    assert base64.b64decode(encode_tiles(tiles)) == bytes([3, 3, 0b01000000, 0b10000000])


def test_robot_tile_is_not_a_wall():
    maze = Maze.empty(4, 2)
    assert base64.b64decode(maze.encode_tiles()) == bytes([4, 2, 0])


@pytest.mark.parametrize("width,height", [(1, 1), (8, 1), (1, 9), (3, 5), (16, 16), (127, 127)])
def test_round_trip(width, height):
    rng = np.random.default_rng(width * 1000 + height)
    layout = random_layout(rng, width, height)
    decoded = load_tiles(encode_tiles(layout))
    assert decoded.shape == (height, width)
    assert np.array_equal(decoded, layout)


def test_default_maze_round_trip_through_maze():
    maze = Maze(default_maze())
    restored = Maze.from_encoded(maze.encode_tiles())
    assert np.array_equal(restored.walls(), maze.walls())
    assert restored.allowed_moves == maze.allowed_moves


def test_decoded_goal_wall_is_cleared_by_maze():
    # 2x2 with only the goal bit set
    maze = Maze.from_encoded(b64(bytes([2, 2, 0b00010000])))
    assert load_tiles(b64(bytes([2, 2, 0b00010000])))[1, 1] == TileType.WALL
    assert maze.tiles[1, 1] == TileType.EMPTY


@pytest.mark.parametrize("encoded", [
    "@@not base64@@",
    "é",
    b64(b""),
    b64(bytes([2])),
    b64(bytes([0, 3])),
    b64(bytes([3, 0, 0])),
    b64(bytes([4, 4, 0])),        # needs 2 bitmap bytes
    b64(bytes([2, 2])),           # bitmap missing
    b64(bytes([2, 2, 0, 0])),     # trailing byte
])
def test_malformed_layouts_are_rejected(encoded):
    with pytest.raises(MazeDecodeError):
        load_tiles(encoded)


def test_decode_error_is_a_value_error():
    with pytest.raises(ValueError):
        Maze.from_encoded(b64(bytes([5, 5, 0])))
