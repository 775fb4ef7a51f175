# ===============================
# File: trainer.py
# ===============================
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import time

import numpy as np

from env_maze import Maze, State
from maze_agent import Agent, AgentConfig


@dataclass
class TrainConfig:
    episodes: int = 5000                # 학습 에피소드 수
    max_steps_per_episode: int = 1000   # 이 스텝 수를 넘기면 로봇을 목표 칸으로 강제 이동(타임아웃)
    seed: Optional[int] = None          # 재현성
    log_interval: int = 500             # 진행 상황 출력 간격 (0이면 출력 안 함)
    verbose: bool = True


def new_agent(maze: Maze, agent_cfg: AgentConfig, seed: Optional[int] = None) -> Agent:
    """현재 크기의 미로 전체 칸 인덱스를 덮는 새 에이전트.
    - 칸 인덱스에 width가 들어가므로 resize 후엔 반드시 새로 만들어야 한다.
    """
    states = range(maze.width * maze.height)
    return Agent(states, agent_cfg, rng=np.random.default_rng(seed))


def start_is_blocked(maze: Maze) -> bool:
    """시작 칸에서 갈 수 있는 곳이 하나도 없는지 (벽에 갇힘 → 학습 불가 설정)."""
    start = maze.new_state(0, 0)
    return maze.width * maze.height > 1 and not maze.get_allowed_moves(start)


def run_episode(maze: Maze, agent: Agent, max_steps: int = 1000) -> int:
    """시작 칸에서 에피소드 하나를 진행하고 learn()까지 마친 뒤 스텝 수를 반환.

    매 스텝 처리 순서:
      1) 현재 상태와 허용된 이동 목록을 미로에서 얻는다.
      2) 에이전트가 행동을 고르고 미로에 적용한다.
      3) 도착 상태와 보상을 이력에 기록한다.
      4) 스텝 제한을 넘기면 로봇을 목표로 옮겨 에피소드를 강제로 끝낸다.
    """
    while not maze.is_game_over():
        # 1) 현재 상태 / 허용 이동
        state = maze.get_state()
        allowed_moves = maze.get_allowed_moves(state)
        # 2) 행동 선택 및 적용
        action = agent.choose_action(state, allowed_moves, maze.apply_action)
        maze.update_maze(action)
        # 3) (도착 상태, 보상) 기록
        agent.update_state_history(maze.get_state(), maze.get_reward())

        # 4) 타임아웃: 길이 없거나 정책이 아직 미숙할 때 종료 보장
        if maze.steps > max_steps:
            maze.set_robot_position(maze.height - 1, maze.width - 1)

    agent.learn()
    steps = maze.steps
    maze.reset()
    return steps


def train(maze: Maze, agent_cfg: AgentConfig, cfg: TrainConfig,
          on_episode: Optional[Callable[[int, int], None]] = None) -> Tuple[Agent, np.ndarray]:
    """새 에이전트로 학습. (에이전트, 에피소드별 이동 횟수 배열)을 반환.
    - 시작 칸이 벽에 갇혀 있으면 학습하지 않고 빈 이력을 돌려준다.
    """
    maze.reset()
    agent = new_agent(maze, agent_cfg, cfg.seed)
    move_history: List[int] = []

    if start_is_blocked(maze):
        print("[ERROR] start cell is walled in; remove a wall next to it before training")
        return agent, np.asarray(move_history, dtype=np.int64)
    if not maze.is_solvable() and cfg.verbose:
        print("[WARN] goal is unreachable; every episode will hit the step cap")

    t0 = time.perf_counter()
    for ep in range(cfg.episodes):
        steps = run_episode(maze, agent, cfg.max_steps_per_episode)
        move_history.append(steps)
        if on_episode is not None:
            on_episode(ep, steps)

        # 진행 상황: 최근 log_interval 에피소드 평균 스텝
        if cfg.verbose and cfg.log_interval > 0 and (ep + 1) % cfg.log_interval == 0:
            recent = move_history[-cfg.log_interval:]
            print(f"[INFO] Episode {ep + 1}/{cfg.episodes} | "
                  f"avg steps={np.mean(recent):.1f} | last={steps} | "
                  f"ε={agent.random_factor:.4f} | {time.perf_counter() - t0:.1f}s")

    return agent, np.asarray(move_history, dtype=np.int64)


def greedy_rollout(maze: Maze, agent: Agent, max_steps: int = 1000) -> List[State]:
    """탐색 없는 순수 탐욕 정책으로 지나간 칸들 (데모용). 끝나면 미로는 리셋 상태."""
    maze.reset()
    path = [maze.get_state()]
    while not maze.is_game_over() and maze.steps < max_steps:
        state = maze.get_state()
        moves = maze.get_allowed_moves(state)
        if not moves:
            break
        maze.update_maze(agent.greedy(state, moves, maze.apply_action))
        path.append(maze.get_state())
    maze.reset()
    return path
