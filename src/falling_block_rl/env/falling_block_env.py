from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from falling_block_rl.game import Action, FallingBlockGame, GameConfig, TetrominoType
from falling_block_rl.game.pieces import color_for


BACKGROUND = (30, 30, 36)


def grid_to_rgb(state: np.ndarray, cell: int = 12) -> np.ndarray:
    """Paint an observation grid (negative values = falling piece) as RGB."""
    h, w = state.shape
    img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
    for y in range(h):
        for x in range(w):
            v = int(state[y, x])
            color = BACKGROUND if v == 0 else color_for(TetrominoType(abs(v)))
            img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
    return img


class FallingBlockEnv(gym.Env):
    """Falling-block game as a Gymnasium environment.

    Each step forwards one `Action` and advances a virtual clock by
    `seconds_per_step`, so gravity fires every
    `fall_interval / seconds_per_step` steps through the game's own timer.
    """

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 seconds_per_step: float = 0.25,
                 max_episode_steps: int = 5000,
                 reward_weights: Optional[Dict[str, float]] = None,
                 step_penalty: float = 0.0,
                 terminal_penalty: float = -10.0) -> None:
        super().__init__()
        self._time = 0.0
        self.seconds_per_step = float(seconds_per_step)
        self.game = FallingBlockGame(config, clock=self._clock)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)

        # Reward shaping parameters
        self.step_penalty = float(step_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            "score": 0.01,      # reward per engine point (100 per line)
            "lock": 0.1,        # reward per piece locked
            "holes": 0.1,       # penalize holes created
            "height": 0.05,     # penalize stack height increase
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        h, w = self.game.grid.height, self.game.grid.width
        n_kinds = len(TetrominoType)
        # Observation: locked kinds as positive values, falling piece as negative
        self.observation_space = spaces.Box(low=-n_kinds, high=n_kinds, shape=(h, w), dtype=np.int8)
        self.action_space = spaces.Discrete(len(Action))

        self._last_obs: Optional[np.ndarray] = None
        self._steps = 0

    def _clock(self) -> float:
        return self._time

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "lines_cleared_total": self.game.lines_cleared_total,
            "pieces_locked": self.game.pieces_locked,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        self._time = 0.0
        self.game.reset(seed)
        self._steps = 0
        obs = self.game.get_state()
        self._last_obs = obs
        return obs, self._get_info()

    def step(self, action: int):
        holes_before = self.game.grid.count_holes()
        height_before = self.game.grid.get_max_height()
        score_before = self.game.score
        locked_before = self.game.pieces_locked

        self._time += self.seconds_per_step
        self.game.update([Action(int(action))], now=self._time)
        self._steps += 1

        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(self.game.score - score_before),
            "lock": self.reward_weights["lock"] * float(self.game.pieces_locked - locked_before),
            "holes": -self.reward_weights["holes"] * float(
                max(0, self.game.grid.count_holes() - holes_before)),
            "height": -self.reward_weights["height"] * float(
                max(0, self.game.grid.get_max_height() - height_before)),
            "step": self.step_penalty,
        }
        terminated = bool(self.game.game_over)
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))

        obs = self.game.get_state()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = float(self.game.score - score_before)
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            state = self._last_obs if self._last_obs is not None else self.game.get_state()
            return grid_to_rgb(state)
        # human rendering delegated to external UI; noop
        return None

    def close(self) -> None:
        pass
