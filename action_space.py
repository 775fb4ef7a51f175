# ===============================
# File: action_space.py
# ===============================
from __future__ import annotations
from enum import IntEnum
from typing import Dict, List, Tuple


class Action(IntEnum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


# Action의 인덱스를 "의미"로 고정하여 외부(에이전트/렌더러)와 일치시킵니다.
# 0: ↑, 1: ↓, 2: ←, 3: →  (상, 하, 좌, 우), 값은 (dx, dy) = (행 변화, 열 변화)
ACTIONS: Dict[Action, Tuple[int, int]] = {
    Action.UP:    (-1, 0),
    Action.DOWN:  (1, 0),
    Action.LEFT:  (0, -1),
    Action.RIGHT: (0, 1),
}
ALL_ACTIONS: List[Action] = [Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT]
ACTION_NAMES = {Action.UP: "↑", Action.DOWN: "↓", Action.LEFT: "←", Action.RIGHT: "→"}
