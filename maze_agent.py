# ===============================
# File: maze_agent.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from action_space import Action
from env_maze import State


@dataclass
class AgentConfig:
    # 가치 테이블 G 학습 하이퍼파라미터
    alpha: float = 0.15                   # 학습률 α: G를 되돌려받은 리턴 쪽으로 얼마나 끌어당길지
    random_factor: float = 0.2            # 탐색 확률 시작값 ε (초반엔 어느 정도 탐색)
    random_factor_decay: float = 1e-4     # learn() 한 번마다 ε에서 빼는 양
    random_factor_min: Optional[float] = None  # None이면 하한 없음 (ε가 음수까지 내려갈 수 있음)
    init_low: float = -1.0                # G 초기값 범위 [init_low, init_high)
    init_high: float = -0.1
    seed: Optional[int] = None            # 재현성


class Agent:
    """미로의 칸(cell)마다 가치 G 하나를 들고 있는 테이블형 에이전트.

    - 상태(state): 칸 인덱스 x * width + y
    - 행동 선택: 한 칸 앞을 내다봄. 이동 후 도착할 이웃 칸의 G가 가장 큰 행동을 고른다.
    - 학습(learn): 에피소드가 끝나면 기록된 (칸, 보상) 이력을 뒤에서부터 훑으며
      각 칸의 G를 "그 뒤에 받은 보상의 합"(할인 없는 return-to-go) 쪽으로 갱신.

    * Q(s,a) 대신 V(s)만 두므로 행동 가치는 "도착 칸의 G"로 대신한다.
    """

    def __init__(self, states: Iterable[int], cfg: AgentConfig = None,
                 rng: Optional[np.random.Generator] = None):
        self.cfg = cfg if cfg is not None else AgentConfig()
        # 유효성 검사: α ∈ (0, 1], ε ∈ [0, 1]
        if not 0.0 < self.cfg.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.cfg.alpha}")
        if not 0.0 <= self.cfg.random_factor <= 1.0:
            raise ValueError(f"random_factor must be in [0, 1], got {self.cfg.random_factor}")

        # 난수원은 외부에서 주입 가능 (테스트/재현용), 없으면 seed로 생성
        self.rng = rng if rng is not None else np.random.default_rng(self.cfg.seed)
        self.alpha = self.cfg.alpha
        self.random_factor = self.cfg.random_factor
        self.G: Dict[int, float] = {}
        # 첫 에피소드만 시작 칸 (0, 보상 0) 기록으로 시작한다. learn() 후엔 빈 리스트.
        self.state_history: List[Tuple[int, float]] = [(0, 0)]
        self._init_reward(list(states))

    def _init_reward(self, states: List[int]):
        """칸마다 작은 음수 난수로 G 초기화.
        - 아직 안 가본 칸이 가 본 칸(점점 크게 음수가 됨)보다 높게 보이므로 초반 탐색을 유도.
        """
        values = self.rng.uniform(self.cfg.init_low, self.cfg.init_high, size=len(states))
        self.G = {s: float(v) for s, v in zip(states, values)}

    def choose_action(self, state: State, allowed_moves: List[Action],
                      apply_action: Callable[[State, Action], State]) -> Action:
        """ε-greedy 행동 선택
        - 확률 ε: 허용된 이동 중 무작위 (탐색, exploration)
        - 확률 1-ε: greedy() (이용, exploitation)
        apply_action은 보통 maze.apply_action (상태 -> 이웃 상태, 순수 함수).
        """
        if not allowed_moves:
            raise ValueError(f"no legal moves from cell ({state.x}, {state.y})")
        if self.rng.random() < self.random_factor:
            # 탐색: 허용된 이동 중 균등 추출
            return allowed_moves[int(self.rng.integers(len(allowed_moves)))]
        return self.greedy(state, allowed_moves, apply_action)

    def greedy(self, state: State, allowed_moves: List[Action],
               apply_action: Callable[[State, Action], State]) -> Action:
        """탐색 없이 이웃 칸 G가 최대인 이동 (데모/평가용)."""
        best = allowed_moves[0]
        best_value = self.G[apply_action(state, best).index]
        for action in allowed_moves[1:]:
            value = self.G[apply_action(state, action).index]
            # 주의: 엄격한 '>' 비교라 동률이면 먼저 나온 이동이 이긴다.
            if value > best_value:
                best, best_value = action, value
        return best

    def update_state_history(self, state: State, reward: float):
        """매 스텝: 이동 '후' 도착한 칸과 그 이동의 보상을 기록."""
        self.state_history.append((state.index, reward))

    def learn(self):
        """에피소드 끝에서 한 번 호출. 뒤에서부터 거꾸로 갱신:
          target = 0 에서 시작
          G[s] ← G[s] + α (target − G[s])
          target += r   (앞쪽 칸일수록 남은 비용이 더 크게 음수)
        갱신 후 이력을 비우고 ε를 조금 줄인다.
        """
        target = 0.0
        for state, reward in reversed(self.state_history):
            self.G[state] += self.alpha * (target - self.G[state])
            target += reward

        self.state_history = []

        # ε 감쇠: 기본은 하한 없음, random_factor_min이 있으면 그 값에서 멈춤
        self.random_factor -= self.cfg.random_factor_decay
        if self.cfg.random_factor_min is not None:
            self.random_factor = max(self.cfg.random_factor_min, self.random_factor)

    def value_grid(self, width: int, height: int) -> np.ndarray:
        """G를 (height, width) 배열로 펼침 (렌더링/플롯용). 값이 없는 칸은 NaN."""
        grid = np.full((height, width), np.nan)
        for index, value in self.G.items():
            x, y = divmod(index, width)
            if 0 <= x < height:
                grid[x, y] = value
        return grid
