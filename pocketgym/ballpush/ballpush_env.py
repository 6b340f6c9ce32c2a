"""
Ball-Push Environment

An agent particle must push a ball particle into a target circle at the
centre of a circular arena. Both are Verlet point masses.

Step order:
    1. Control force on the agent (action normalised to at most unit
       length) minus linear drag; drag only on the ball.
    2. Clamp the agent radially inside the boundary.
    3. Resolve agent/ball overlap, half the penetration each. The first
       overlap of an episode earns the touch bonus.
    4. Clamp the ball radially inside the boundary.
    5. The first time the ball is inside the target circle earns the
       centre bonus.
    6. Integrate both particles, then clamp both inside the boundary again.
       The ball is therefore already contained when the next step's
       collision pass runs, rather than being clamped only after the
       collision as steps 3 and 4 alone would do.

Reward (continuous terms use post-integration velocities):
    touch bonus + centre bonus (each at most once per episode)
    + move_to_center_reward * v_ball.toward_centre * dt / R
    + move_to_ball_reward * v_agent.toward_ball * dt / (2R)   (until touched)

Dividing by R and dt means carrying the ball the whole way from the
boundary to the centre is worth exactly move_to_center_reward.

The episode never terminates on its own; the driver sets the horizon.
"""

import logging
import math
from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

import numpy as np

from ..base_env import BaseEnv, ResetResult, StepResult
from ..errors import InvalidSettingsError
from ..utils import X_AXIS, length, rotated, unit_vector, validate_action, vec2
from ..verlet import VerletParticle

logger = logging.getLogger(__name__)

# Reset places particles within this fraction of the boundary radius
SPAWN_FRACTION = 0.75


@dataclass(frozen=True)
class BallPushSettings:
    """Arena geometry, particle dynamics and reward weights."""

    ENV_NAME: ClassVar[str] = "BallPush"

    ball_radius: float = 2.0
    agent_radius: float = 1.0
    agent_acceleration: float = 20.0
    agent_drag: float = 1.5
    ball_drag: float = 0.75
    boundary_radius: float = 50.0
    move_to_ball_reward: float = 0.5
    touch_ball_reward: float = 1.0
    move_to_center_reward: float = 1.0
    place_in_center_reward: float = 2.0
    target_radius: float = 3.0
    scale: float = 10.0                 # Pixels per world unit when rendering
    time_step: float = 1.0 / 60.0
    agent_mass: float = 1.0
    ball_mass: float = 1.0

    def __post_init__(self):
        if self.time_step <= 0:
            raise InvalidSettingsError(f"time_step must be positive, got {self.time_step}")
        for field_name in (
            "ball_radius", "agent_radius", "boundary_radius", "agent_acceleration", "agent_drag",
        ):
            if getattr(self, field_name) <= 0:
                raise InvalidSettingsError(f"{field_name} must be positive")
        if self.boundary_radius <= max(self.ball_radius, self.agent_radius):
            raise InvalidSettingsError("boundary_radius must exceed both particle radii")

    @property
    def agent_max_speed(self) -> float:
        """Terminal speed of the agent under full control and drag."""
        return self.agent_acceleration / self.agent_drag


class BallPushEnv(BaseEnv):
    """
    Push a ball into the centre of a circular arena.

    Observation (8D):
        - agent position / R (2)
        - (ball - agent) / 2R (2)
        - agent velocity / agent_max_speed (2)
        - ball velocity / agent_max_speed (2)

    Action (2D): agent control direction, each component in [-1, 1]

    Categorical actions: 0 -> +x, 1 -> -x, 2 -> +y, 3 -> -y, 4 -> idle
    """

    CATEGORICAL_ACTIONS = ((1.0, 0.0), (-1.0, 0.0), (0.0, 1.0), (0.0, -1.0), (0.0, 0.0))

    def __init__(
        self,
        settings: Optional[BallPushSettings] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        super().__init__(rng)
        self.settings = settings if settings is not None else BallPushSettings()
        s = self.settings

        self.agent = VerletParticle(np.zeros(2), s.agent_mass, s.time_step)
        self.ball = VerletParticle(np.zeros(2), s.ball_mass, s.time_step)
        self.has_touched_ball = False
        self.has_centered_ball = False

        self.obs_dim = 8
        self.act_dim = 2

        self.reset()

    def name(self) -> str:
        return "BallPush"

    def render_size(self) -> Tuple[float, float]:
        size = self.settings.boundary_radius * 2 * self.settings.scale
        return size, size

    def ball_in_center(self) -> bool:
        s = self.settings
        return length(self.ball.position) < s.target_radius - s.ball_radius

    def _random_spawn(self) -> np.ndarray:
        radius = self.rng.uniform() * self.settings.boundary_radius * SPAWN_FRACTION
        angle = self.rng.uniform() * 2 * math.pi
        return rotated(vec2(0.0, radius), angle)

    def reset(self) -> ResetResult:
        for particle in (self.agent, self.ball):
            particle.slide_to_position(self._random_spawn())
            particle.set_velocity(np.zeros(2))

        self.has_touched_ball = False
        self.has_centered_ball = False

        logger.debug(
            "BallPush reset: agent=%s ball=%s",
            self.agent.position.round(2).tolist(),
            self.ball.position.round(2).tolist(),
        )
        return ResetResult(self._get_obs(), self._get_info())

    def _contain(self, particle: VerletParticle, radius: float):
        """Slide a particle radially back inside the boundary."""
        limit = self.settings.boundary_radius - radius
        position = particle.position
        if length(position) + radius > self.settings.boundary_radius:
            particle.slide_to_position(unit_vector(position) * limit)

    def step(self, action) -> StepResult:
        """
        Take a step in the environment.

        Args:
            action: [x, y] control in [-1, 1]

        Returns:
            obs: Observation after step
            reward: Bonuses plus velocity shaping
            terminated: Always False
            info: Episode flags and ball distance from centre
        """
        control = validate_action(action, self.act_dim)
        s = self.settings

        just_touched = False
        just_centered = False

        # Diagonal movement must not be faster than axis-aligned movement
        if length(control) > 1.0:
            control = unit_vector(control)

        self.agent.apply_force(control * s.agent_acceleration - self.agent.velocity * s.agent_drag)
        self.ball.apply_force(-self.ball.velocity * s.ball_drag)

        self._contain(self.agent, s.agent_radius)

        offset = self.agent.position - self.ball.position
        overlap = (s.agent_radius + s.ball_radius) - length(offset)
        if overlap > 0:
            if not self.has_touched_ball:
                just_touched = True
                self.has_touched_ball = True
            # Coincident centres still separate along +x
            correction = unit_vector(offset, fallback=X_AXIS) * (overlap / 2)
            self.agent.slide_to_position(self.agent.position + correction)
            self.ball.slide_to_position(self.ball.position - correction)

        self._contain(self.ball, s.ball_radius)

        if self.ball_in_center() and not self.has_centered_ball:
            just_centered = True
            self.has_centered_ball = True

        self.agent.step_particle()
        self.ball.step_particle()

        # Integration can carry a particle past the wall; keep the reported
        # positions inside. The slide shows up as velocity on the next step.
        self._contain(self.agent, s.agent_radius)
        self._contain(self.ball, s.ball_radius)

        reward = 0.0
        if just_touched:
            reward += s.touch_ball_reward
        if just_centered:
            reward += s.place_in_center_reward

        ball_position = self.ball.position
        to_center = -unit_vector(ball_position)
        ball_speed_to_center = float(np.dot(self.ball.velocity, to_center))
        reward += s.move_to_center_reward * ball_speed_to_center * s.time_step / s.boundary_radius

        if not self.has_touched_ball:
            to_ball = unit_vector(ball_position - self.agent.position)
            agent_speed_to_ball = float(np.dot(self.agent.velocity, to_ball))
            reward += (
                s.move_to_ball_reward * agent_speed_to_ball * s.time_step / (2 * s.boundary_radius)
            )

        if just_touched:
            logger.debug("BallPush: agent touched the ball")
        if just_centered:
            logger.debug("BallPush: ball reached the target")

        return StepResult(self._get_obs(), float(reward), False, self._get_info())

    def _get_obs(self) -> np.ndarray:
        s = self.settings
        agent_position = self.agent.position
        max_speed = s.agent_max_speed
        return np.concatenate([
            agent_position / s.boundary_radius,
            (self.ball.position - agent_position) / (2 * s.boundary_radius),
            self.agent.velocity / max_speed,
            self.ball.velocity / max_speed,
        ])

    def _get_info(self) -> dict:
        return {
            "has_touched_ball": self.has_touched_ball,
            "has_centered_ball": self.has_centered_ball,
            "ball_distance": length(self.ball.position),
        }
