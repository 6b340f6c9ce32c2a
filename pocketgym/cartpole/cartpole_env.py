"""
Analytic Cart-Pole Environment

A cart slides along a normalised track [-1, 1] and carries a pole hinged
at its centre. The action accelerates the cart and, through the hinge,
torques the pole.

Per-step update (explicit, velocities integrated first):
    x_dot     += a * acceleration * dt,          clamped to +-max_velocity
    x         += x_dot * dt
    theta_ddot = g * sin(theta) + a * cos(theta) * torque_multiplier
    theta_dot += theta_ddot * dt,                clamped to +-max_angular_velocity
    theta     += theta_dot * dt

Failure / reward, checked after the update in this order:
    |x| > 1               -> terminated, out_of_bounds_reward
    |theta| > fail_angle  -> terminated, pole_fall_reward
    otherwise             -> centered_reward - |x|

Observation: clamp([x, x_dot / max_velocity, theta / 180,
                    theta_dot / max_angular_velocity], -1, 1)

The angle term is divided by the constant 180 rather than by fail_angle
or pi, so it only spans about +-0.009 over the valid range.
"""

import logging
import math
from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

import numpy as np
import torch

from ..base_env import BaseEnv, ResetResult, StepResult
from ..errors import InvalidSettingsError
from ..utils import validate_action

logger = logging.getLogger(__name__)

POLE_ANGLE_SCALE = 180.0


@dataclass(frozen=True)
class CartPoleSettings:
    """Physical constants, episode thresholds and reward weights."""

    ENV_NAME: ClassVar[str] = "CartPole"

    acceleration: float = 0.5               # Cart acceleration at full action
    max_velocity: float = 1.5               # Cart speed limit
    max_angular_velocity: float = math.pi * 3
    gravity_acceleration: float = 9.8
    torque_multiplier: float = 4.0          # Torque the cart applies to the pole

    time_step: float = 1.0 / 60.0
    max_initial_angle: float = math.pi / 8
    max_initial_offset: float = 0.8         # Should be no more than 1
    fail_angle: float = math.pi / 2

    centered_reward: float = 1.0            # Falls off linearly with |x|
    out_of_bounds_reward: float = -1.0
    pole_fall_reward: float = -5.0

    def __post_init__(self):
        if self.time_step <= 0:
            raise InvalidSettingsError(f"time_step must be positive, got {self.time_step}")
        if self.max_velocity <= 0 or self.max_angular_velocity <= 0:
            raise InvalidSettingsError("max_velocity and max_angular_velocity must be positive")
        if self.fail_angle <= 0:
            raise InvalidSettingsError(f"fail_angle must be positive, got {self.fail_angle}")
        if not 0 <= self.max_initial_offset <= 1:
            raise InvalidSettingsError(
                f"max_initial_offset must be within [0, 1], got {self.max_initial_offset}"
            )


class CartPoleEnv(BaseEnv):
    """
    Cart-pole balancing on a bounded track.

    State: [x, theta, x_dot, theta_dot] (torch float64)
        - x: cart position, normalised to the track [-1, 1]
        - theta: pole angle from upright (rad)
        - x_dot: cart velocity
        - theta_dot: pole angular velocity (rad/s)

    Action (1D): cart acceleration in [-1, 1]

    Categorical actions: 0 -> [0], 1 -> [1], 2 -> [-1]
    """

    CATEGORICAL_ACTIONS = ((0.0,), (1.0,), (-1.0,))

    def __init__(
        self,
        settings: Optional[CartPoleSettings] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize cart-pole environment.

        Args:
            settings: Settings record (defaults if None)
            rng: Random generator for reset (fresh generator if None)
        """
        super().__init__(rng)
        self.settings = settings if settings is not None else CartPoleSettings()

        self.state = torch.zeros(4, dtype=torch.float64)

        self.obs_dim = 4
        self.act_dim = 1

    @property
    def cart_position(self) -> float:
        return self.state[0].item()

    @property
    def pole_angle(self) -> float:
        return self.state[1].item()

    @property
    def cart_velocity(self) -> float:
        return self.state[2].item()

    @property
    def pole_angular_velocity(self) -> float:
        return self.state[3].item()

    def name(self) -> str:
        return "CartPole"

    def render_size(self) -> Tuple[float, float]:
        return 1200.0, 800.0

    def reset(self) -> ResetResult:
        """
        Reset with a random cart offset and pole angle, both at rest.

        Returns:
            Initial observation and info
        """
        s = self.settings
        x = self.rng.uniform(-s.max_initial_offset, s.max_initial_offset)
        theta = self.rng.uniform(-s.max_initial_angle, s.max_initial_angle)
        self.state = torch.tensor([x, theta, 0.0, 0.0], dtype=torch.float64)

        logger.debug("CartPole reset: x=%.3f theta=%.3f", x, theta)
        return ResetResult(self._get_obs(), self._get_info())

    def step(self, action) -> StepResult:
        """
        Take a step in the environment.

        Args:
            action: [cart acceleration] in [-1, 1]

        Returns:
            obs: Observation after step
            reward: Centring reward, or a failure penalty
            terminated: True if the cart left the track or the pole fell
            info: Raw state and the applied action
        """
        force = float(validate_action(action, self.act_dim)[0])
        s = self.settings
        dt = s.time_step

        x, theta, x_dot, theta_dot = self.state

        # Cart
        x_dot = torch.clamp(x_dot + force * s.acceleration * dt, -s.max_velocity, s.max_velocity)
        x = x + x_dot * dt

        # Pole
        gravity_term = s.gravity_acceleration * torch.sin(theta)
        torque_term = force * torch.cos(theta) * s.torque_multiplier
        theta_dot = torch.clamp(
            theta_dot + (gravity_term + torque_term) * dt,
            -s.max_angular_velocity,
            s.max_angular_velocity,
        )
        theta = theta + theta_dot * dt

        self.state = torch.stack([x, theta, x_dot, theta_dot])

        x_val = x.item()
        theta_val = theta.item()
        terminated = False
        reward = s.centered_reward - abs(x_val)
        if abs(x_val) > 1.0:
            terminated = True
            reward = s.out_of_bounds_reward
            logger.debug("CartPole out of bounds at x=%.3f, reward %.3f", x_val, reward)
        elif abs(theta_val) > s.fail_angle:
            terminated = True
            reward = s.pole_fall_reward
            logger.debug("CartPole pole fell at theta=%.3f, reward %.3f", theta_val, reward)

        info = self._get_info()
        info["force"] = float(force)
        return StepResult(self._get_obs(), float(reward), terminated, info)

    def _get_obs(self) -> np.ndarray:
        s = self.settings
        scale = torch.tensor(
            [1.0, 1.0 / s.max_velocity, 1.0 / POLE_ANGLE_SCALE, 1.0 / s.max_angular_velocity],
            dtype=torch.float64,
        )
        # State order is [x, theta, x_dot, theta_dot]; observation order is
        # [x, x_dot, theta, theta_dot]
        ordered = self.state[[0, 2, 1, 3]]
        return torch.clamp(ordered * scale, -1.0, 1.0).numpy().copy()

    def _get_info(self) -> dict:
        return {
            "x": self.cart_position,
            "theta": self.pole_angle,
            "x_dot": self.cart_velocity,
            "theta_dot": self.pole_angular_velocity,
        }
