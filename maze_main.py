# ===============================
# File: maze_main.py
# ===============================
from __future__ import annotations
import argparse
import time
from typing import List, Optional

import matplotlib.pyplot as plt
import pygame

from action_space import ACTION_NAMES
from env_maze import Maze, MazeDecodeError, default_maze
from maze_agent import Agent, AgentConfig
from settings import Settings, clamp, load_settings
from plotting import plot_move_history, plot_values
from renderer import Renderer
from trainer import TrainConfig, new_agent, run_episode, start_is_blocked, train

# ---------- App Config ----------
CELL_PX = 90
FPS = 45
TRAIN_EPISODES_PER_FRAME = 25
DEMO_DELAY = 0.05

# ---------- Modes ----------
MODE_EDIT  = "EDIT"
MODE_TRAIN = "AI_TRAIN"
MODE_DEMO  = "AI_DEMO"


def build_maze(layout: Optional[str]) -> Maze:
    if not layout:
        return Maze(default_maze())
    try:
        return Maze.from_encoded(layout)
    except MazeDecodeError as e:
        print(f"[ERROR] could not load maze layout: {e}")
        print("[INFO] falling back to the default maze")
        return Maze(default_maze())


def parse_args(argv: Optional[List[str]] = None, settings: Optional[Settings] = None):
    s = settings if settings is not None else Settings()
    ap = argparse.ArgumentParser(description="Grid maze learner (backward return averaging)")
    ap.add_argument("--maze", type=str, default=s.layout, help="encoded wall layout (base64)")
    ap.add_argument("--alpha", type=float, default=s.alpha)
    ap.add_argument("--epsilon", type=float, default=s.epsilon, help="initial exploration rate")
    ap.add_argument("--episodes", type=int, default=s.episodes)
    ap.add_argument("--max-steps", type=int, default=1000, help="per-episode step cap")
    ap.add_argument("--seed", type=int, default=s.seed)
    ap.add_argument("--headless", action="store_true", help="train without a window")
    ap.add_argument("--plot", type=str, default=None, help="save the move history plot here")
    ap.add_argument("--values-plot", type=str, default=None, help="save a value heatmap here")
    args = ap.parse_args(argv)
    if not 0.0 < args.alpha <= 1.0:
        ap.error("alpha must be between 0 and 1")
    if not 0.0 <= args.epsilon <= 1.0:
        ap.error("epsilon must be between 0 and 1")
    if args.episodes < 1:
        ap.error("episodes must be at least 1")
    return args


def run_headless(maze: Maze, agent_cfg: AgentConfig, train_cfg: TrainConfig,
                 plot_path: Optional[str] = None, values_path: Optional[str] = None) -> Agent:
    print(f"[INFO] maze {maze.width}x{maze.height} layout={maze.encode_tiles()}")
    agent, moves = train(maze, agent_cfg, train_cfg)
    if len(moves) == 0:
        return agent
    print(f"[INFO] done: first episode {moves[0]} steps, last {moves[-1]} steps, "
          f"best {moves.min()}")
    if plot_path:
        plot_move_history(moves, plot_path)
        print(f"[INFO] move history saved: {plot_path}")
    if values_path:
        plot_values(agent.value_grid(maze.width, maze.height), maze.walls(), values_path)
        print(f"[INFO] value heatmap saved: {values_path}")
    return agent


def run_app(maze: Maze, agent_cfg: AgentConfig, train_cfg: TrainConfig):
    renderer = Renderer(maze.height, maze.width, cell_px=CELL_PX, fps=FPS)
    mode = MODE_EDIT
    agent: Optional[Agent] = None
    move_history: List[int] = []
    show_values = True
    last_action = ""

    running = True
    while running:
        for event in renderer.pump_events():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and mode == MODE_EDIT:
                cell = renderer.cell_at(event.pos)
                if cell is not None:
                    maze.toggle_tile(*cell)
                    print(f"[INFO] maze={maze.encode_tiles()}")
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F1:
                    mode = MODE_EDIT
                    maze.reset()
                elif event.key == pygame.K_F2:
                    # every run starts from a fresh table sized to the current maze
                    if start_is_blocked(maze):
                        print("[ERROR] start cell is walled in; remove a wall next to it before training")
                        mode = MODE_EDIT
                        continue
                    if not maze.is_solvable():
                        print("[WARN] goal is unreachable; episodes will hit the step cap")
                    maze.reset()
                    agent = new_agent(maze, agent_cfg, train_cfg.seed)
                    move_history = []
                    mode = MODE_TRAIN
                elif event.key == pygame.K_F3 and agent is not None:
                    maze.reset()
                    mode = MODE_DEMO
                elif event.key == pygame.K_v:
                    show_values = not show_values
                elif event.key == pygame.K_p and move_history:
                    plot_move_history(move_history)
                    plt.show()
                elif mode == MODE_EDIT and event.key in (pygame.K_LEFT, pygame.K_RIGHT,
                                                          pygame.K_UP, pygame.K_DOWN):
                    dw = {pygame.K_LEFT: -1, pygame.K_RIGHT: 1}.get(event.key, 0)
                    dh = {pygame.K_UP: -1, pygame.K_DOWN: 1}.get(event.key, 0)
                    width, height = clamp(maze.width + dw), clamp(maze.height + dh)
                    if (width, height) != (maze.width, maze.height):
                        maze.resize(width, height)
                        agent = None  # indices are stale after a resize
                        move_history = []
                        renderer.set_grid(maze.height, maze.width)
                        print(f"[INFO] maze={maze.encode_tiles()}")

        if mode == MODE_TRAIN and agent is not None:
            for _ in range(TRAIN_EPISODES_PER_FRAME):
                move_history.append(run_episode(maze, agent, train_cfg.max_steps_per_episode))
                if len(move_history) >= train_cfg.episodes:
                    print(f"[INFO] training finished: last episode {move_history[-1]} steps")
                    mode = MODE_DEMO
                    break

        if mode == MODE_DEMO and agent is not None:
            if maze.is_game_over() or maze.steps >= train_cfg.max_steps_per_episode:
                time.sleep(0.35)
                maze.reset()
            else:
                state = maze.get_state()
                action = agent.greedy(state, maze.get_allowed_moves(state), maze.apply_action)
                maze.update_maze(action)
                last_action = ACTION_NAMES[action]
                time.sleep(DEMO_DELAY)

        values = agent.value_grid(maze.width, maze.height) if agent is not None else None
        eps = agent.random_factor if agent is not None else agent_cfg.random_factor
        last = move_history[-1] if move_history else 0
        hud = (
            f"Mode:{mode} | Ep:{len(move_history)}/{train_cfg.episodes}  ε:{eps:.4f}  {last_action}\n"
            f"Size:{maze.width}x{maze.height}  Steps:{maze.steps}  LastEp:{last}"
        )
        renderer.draw(maze, values, hud, show_values=show_values)

    pygame.quit()


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv, load_settings())
    maze = build_maze(args.maze)
    agent_cfg = AgentConfig(alpha=args.alpha, random_factor=args.epsilon, seed=args.seed)
    train_cfg = TrainConfig(episodes=args.episodes, max_steps_per_episode=args.max_steps,
                            seed=args.seed)

    try:
        if args.headless:
            run_headless(maze, agent_cfg, train_cfg, args.plot, args.values_plot)
        else:
            run_app(maze, agent_cfg, train_cfg)
    except KeyboardInterrupt:
        print("\n[INFO] interrupted by user")


if __name__ == "__main__":
    main()
