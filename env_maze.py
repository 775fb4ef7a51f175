# ===============================
# File: env_maze.py
# ===============================
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List
import base64

import numpy as np

from action_space import ACTIONS, ALL_ACTIONS, Action


class TileType(IntEnum):
    EMPTY = 0
    WALL = 1
    ROBOT = 2


class MazeDecodeError(ValueError):
    """인코딩된 벽 배치를 격자로 되돌릴 수 없을 때 (base64 오류, 길이 불일치 등)."""


@dataclass(frozen=True)
class State:
    """미로의 한 칸 (불변 값).
    - x: 행, y: 열
    - index: x * width + y (해당 미로의 width 기준, width가 바뀌면 무효)
    """
    x: int
    y: int
    index: int


def empty_maze(width: int, height: int) -> np.ndarray:
    """모든 칸이 EMPTY인 (height, width) 격자."""
    return np.full((height, width), TileType.EMPTY, dtype=np.int8)


def default_maze() -> np.ndarray:
    """저장된 미로가 없을 때 쓰는 기본 6x6 배치."""
    tiles = empty_maze(6, 6)
    tiles[5, :5] = TileType.WALL
    tiles[:4, 5] = TileType.WALL
    tiles[2, 2:] = TileType.WALL
    tiles[3, 2] = TileType.WALL
    return tiles


# -------------- Wall layout codec --------------
# 바이트 구성: [width][height][bitmap]
#   - width, height: 각 1바이트 (최대 255)
#   - bitmap: 칸당 1비트 (1 = 벽), 행 우선(row-major), 최상위 비트(MSB)부터,
#     마지막 바이트는 0으로 패딩
# 이 바이트열을 표준 base64 문자열로 감싸서 저장/전달한다.

def encode_tiles(tiles: np.ndarray) -> str:
    """격자 -> base64 문자열. ROBOT 칸은 벽이 아니므로 0 비트."""
    height, width = tiles.shape
    walls = (tiles == TileType.WALL).astype(np.uint8).ravel()
    payload = bytes([width, height]) + np.packbits(walls).tobytes()
    return base64.b64encode(payload).decode("ascii")


def load_tiles(encoded: str) -> np.ndarray:
    """base64 문자열 -> 격자 (EMPTY/WALL만).
    비트맵을 믿기 전에 헤더의 크기와 바이트 길이가 맞는지 먼저 검사한다.
    """
    try:
        raw = base64.b64decode(encoded, validate=True)
    except ValueError as e:  # binascii.Error and non-ascii input
        raise MazeDecodeError(f"maze layout is not valid base64: {e}") from e

    # 1) 헤더 (width, height)
    if len(raw) < 2:
        raise MazeDecodeError("maze layout is missing its width/height header")
    width, height = raw[0], raw[1]
    if width == 0 or height == 0:
        raise MazeDecodeError(f"maze layout has an empty size {width}x{height}")

    # 2) 비트맵 길이 검사: 정확히 ceil(칸 수 / 8) 바이트여야 함
    n_cells = width * height
    bitmap = raw[2:]
    expected = (n_cells + 7) // 8
    if len(bitmap) != expected:
        raise MazeDecodeError(
            f"maze layout {width}x{height} needs {expected} bitmap bytes, got {len(bitmap)}")

    # 3) 비트 풀기 -> 패딩 비트 버리기 -> (height, width)
    bits = np.unpackbits(np.frombuffer(bitmap, dtype=np.uint8))[:n_cells]
    tiles = np.where(bits.reshape(height, width) == 1, TileType.WALL, TileType.EMPTY)
    return tiles.astype(np.int8)


class Maze:
    """로봇 하나가 (0, 0)에서 (height-1, width-1)까지 걸어가는 격자 미로.

    - tiles: TileType 값의 (height, width) 배열, ROBOT 칸은 항상 정확히 하나
    - allowed_moves: 칸 인덱스 -> 허용된 이동 목록, 벽 편집/크기 변경 때마다 다시 계산
    - 보상: 매 스텝 -1, 로봇이 목표 칸에 서 있으면 0

    * update_maze()는 이동의 합법성을 검사하지 않는다. 호출 측이 get_allowed_moves()에서 고른다.
    """

    def __init__(self, tiles):
        self.tiles = np.array(tiles, dtype=np.int8)
        self.height, self.width = self.tiles.shape
        self.steps = 0
        self.allowed_moves: Dict[int, List[Action]] = {}

        # 1) 저장된 배치에 남은 ROBOT 표시 제거
        self.tiles[self.tiles == TileType.ROBOT] = TileType.EMPTY
        # 2) 목표 칸은 벽일 수 없음
        if self.tiles[self.height - 1, self.width - 1] == TileType.WALL:
            self.tiles[self.height - 1, self.width - 1] = TileType.EMPTY
        # 3) 로봇은 시작 칸 (0, 0)에서 출발 (시작 칸의 벽도 덮어씀)
        self.tiles[0, 0] = TileType.ROBOT
        self.robot_position = self.new_state(0, 0)

        # 4) 허용 이동 테이블 구축
        self._init_allowed_moves()

    @classmethod
    def empty(cls, width: int, height: int) -> "Maze":
        return cls(empty_maze(width, height))

    @classmethod
    def from_encoded(cls, encoded: str) -> "Maze":
        return cls(load_tiles(encoded))

    # -------------- States --------------
    def to_index(self, x: int, y: int) -> int:
        return x * self.width + y

    def new_state(self, x: int, y: int) -> State:
        return State(x, y, self.to_index(x, y))

    def from_index(self, index: int) -> State:
        x, y = divmod(index, self.width)
        return State(x, y, index)

    def apply_action(self, state: State, action: Action) -> State:
        """state에서 action을 했을 때의 이웃 칸. 순수 함수, 경계 검사 없음."""
        dx, dy = ACTIONS[action]
        return self.new_state(state.x + dx, state.y + dy)

    def get_state(self) -> State:
        return self.robot_position

    # -------------- Legal moves --------------
    def is_allowed_move(self, state: State, action: Action) -> bool:
        """도착 칸이 격자 안이고 벽이 아니면 허용."""
        target = self.apply_action(state, action)
        if target.x < 0 or target.y < 0 or target.x >= self.height or target.y >= self.width:
            return False
        return self.tiles[target.x, target.y] != TileType.WALL

    def _init_allowed_moves(self):
        # 전체 재계산: 편집할 때만 호출, 매 스텝 호출하지 않음
        self.allowed_moves.clear()
        for x in range(self.height):
            for y in range(self.width):
                state = self.new_state(x, y)
                self.allowed_moves[state.index] = [
                    a for a in ALL_ACTIONS if self.is_allowed_move(state, a)
                ]

    def get_allowed_moves(self, state: State) -> List[Action]:
        return self.allowed_moves[state.index]

    # -------------- Episode --------------
    def update_maze(self, action: Action):
        """로봇을 한 칸 옮기고 스텝 수 +1 (합법성 검사 없음)."""
        pos = self.robot_position
        self.tiles[pos.x, pos.y] = TileType.EMPTY
        self.robot_position = self.apply_action(pos, action)
        self.steps += 1
        self.tiles[self.robot_position.x, self.robot_position.y] = TileType.ROBOT

    def is_game_over(self) -> bool:
        return (self.robot_position.x == self.height - 1
                and self.robot_position.y == self.width - 1)

    def get_reward(self) -> int:
        return 0 if self.is_game_over() else -1

    def reset(self) -> State:
        """로봇을 시작 칸으로, 스텝 수는 0으로. 벽 배치는 그대로."""
        self.steps = 0
        pos = self.robot_position
        self.tiles[pos.x, pos.y] = TileType.EMPTY
        self.tiles[0, 0] = TileType.ROBOT
        self.robot_position = self.new_state(0, 0)
        return self.robot_position

    def set_robot_position(self, x: int, y: int):
        # 타임아웃 시 목표 칸으로 순간이동할 때 사용 (스텝 수는 그대로)
        pos = self.robot_position
        self.tiles[pos.x, pos.y] = TileType.EMPTY
        self.robot_position = self.new_state(x, y)
        self.tiles[x, y] = TileType.ROBOT

    # -------------- Editing --------------
    def _is_fixed_cell(self, row: int, column: int) -> bool:
        # 시작/목표/로봇 칸은 벽으로 바꿀 수 없음
        return ((row == 0 and column == 0)
                or (row == self.height - 1 and column == self.width - 1)
                or (row == self.robot_position.x and column == self.robot_position.y))

    def toggle_tile(self, row: int, column: int):
        if self._is_fixed_cell(row, column):
            return
        if self.tiles[row, column] == TileType.WALL:
            self.tiles[row, column] = TileType.EMPTY
        else:
            self.tiles[row, column] = TileType.WALL
        self._init_allowed_moves()

    def resize(self, width: int, height: int):
        """빈 칸으로 늘리거나 잘라냄. width가 바뀌면 기존 칸 인덱스(에이전트 G 등)는 모두 무효."""
        self.reset()

        # 겹치는 영역만 복사
        resized = empty_maze(width, height)
        rows, cols = min(height, self.height), min(width, self.width)
        resized[:rows, :cols] = self.tiles[:rows, :cols]
        self.tiles = resized
        self.height, self.width = height, width

        if self.tiles[height - 1, width - 1] == TileType.WALL:
            self.tiles[height - 1, width - 1] = TileType.EMPTY
        self.tiles[0, 0] = TileType.ROBOT
        self.robot_position = self.new_state(0, 0)

        self._init_allowed_moves()

    def walls(self) -> np.ndarray:
        return self.tiles == TileType.WALL

    def encode_tiles(self) -> str:
        return encode_tiles(self.tiles)

    # -------------- Checks --------------
    def is_solvable(self) -> bool:
        """시작 칸에서 허용 이동만으로 목표 칸에 도달 가능한지 (BFS)."""
        start = self.new_state(0, 0)
        goal_index = self.to_index(self.height - 1, self.width - 1)
        queue = deque([start])
        visited = {start.index}
        while queue:
            current = queue.popleft()
            if current.index == goal_index:
                return True
            for action in self.get_allowed_moves(current):
                nxt = self.apply_action(current, action)
                if nxt.index not in visited:
                    visited.add(nxt.index)
                    queue.append(nxt)
        return False
