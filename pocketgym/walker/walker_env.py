"""
Walker Environment

A planar biped on a rocky floor, simulated by an external rigid-body engine
behind `PhysicsWorld`. The walker only builds bodies and joints, sets joint
motor speeds and reads joint state back.

Body plan:
    torso (body_length x body_height)
    left/right thigh hinged under the torso ends (hips)
    left/right shin hinged under each thigh (knees)
Every joint is limited to +-joint_max_angle and driven by a motor with
torque limit joint_max_torque.

Action (4D): target speed of [left hip, right hip, left knee, right knee],
each in [-1, 1] and scaled by joint_max_velocity.

Observation (10D):
    - 4 joint angles / joint_max_angle
    - 4 joint speeds / joint_max_velocity
    - sin, cos of the torso angle

Reward: torso x-velocity * time_step (forward progress).
Termination: torso below fall_height, only when stop_on_fall is set.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, ClassVar, List, Optional, Sequence, Tuple

import numpy as np

from ..base_env import BaseEnv, ResetResult, StepResult
from ..errors import InvalidSettingsError
from ..utils import validate_action, vec2
from .physics import PhysicsWorld
from .pymunk_world import PymunkWorld

logger = logging.getLogger(__name__)

MIN_ROCK_SIZE = 0.01


@dataclass(frozen=True)
class WalkerSettings:
    """Body plan, joint limits and episode settings."""

    ENV_NAME: ClassVar[str] = "Walker Environment"

    limb_length: float = 1.0
    limb_width: float = 0.15
    body_length: float = 2.0
    body_height: float = 0.25

    joint_max_angle: float = math.pi / 1.5
    joint_max_velocity: float = 5.0
    joint_max_torque: float = 15.0

    stop_on_fall: bool = False
    fall_height: float = 1.2

    time_step: float = 1.0 / 60.0
    velocity_iterations: int = 6
    position_iterations: int = 2
    gravity: float = -9.81

    num_rocks: int = 90
    body_density: float = 1.0
    body_friction: float = 0.3
    spawn_height: float = 4.0

    def __post_init__(self):
        if self.time_step <= 0:
            raise InvalidSettingsError(f"time_step must be positive, got {self.time_step}")
        for field_name in (
            "limb_length", "limb_width", "body_length", "body_height",
            "joint_max_angle", "joint_max_velocity", "joint_max_torque",
        ):
            if getattr(self, field_name) <= 0:
                raise InvalidSettingsError(f"{field_name} must be positive")
        if self.num_rocks < 0:
            raise InvalidSettingsError(f"num_rocks must be non-negative, got {self.num_rocks}")


class Box:
    """
    Rectangular body plus the size and colour a renderer needs.

    Attributes:
        body: Engine handle
        width, height: Full extents
        color: matplotlib colour name
    """

    def __init__(
        self,
        world: PhysicsWorld,
        width: float,
        height: float,
        dynamic: bool,
        density: float,
        friction: float,
        color: str = "black",
    ):
        self.world = world
        self.width = width
        self.height = height
        self.dynamic = dynamic
        self.color = color
        self.body = world.create_box(width, height, dynamic, density, friction)

    @property
    def position(self) -> np.ndarray:
        return self.world.position(self.body)

    @property
    def angle(self) -> float:
        return self.world.angle(self.body)

    def set_transform(self, position: Sequence[float], angle: float):
        self.world.set_transform(self.body, position, angle)

    def corners(self) -> np.ndarray:
        """World-space corners, counter-clockwise from bottom-left."""
        hw, hh = self.width / 2, self.height / 2
        local = np.array([[-hw, -hh], [hw, -hh], [hw, hh], [-hw, hh]])
        c, s = math.cos(self.angle), math.sin(self.angle)
        rotation = np.array([[c, -s], [s, c]])
        return local @ rotation.T + self.position


class Player:
    """Torso with two two-segment legs on motorised revolute joints."""

    def __init__(self, world: PhysicsWorld, settings: WalkerSettings):
        self.world = world
        s = settings
        self.limb_length = s.limb_length
        self.body_length = s.body_length
        self.body_height = s.body_height
        self.max_joint_angle = s.joint_max_angle
        self.max_joint_velocity = s.joint_max_velocity
        self.max_joint_torque = s.joint_max_torque

        def limb(color):
            return Box(world, s.limb_width, s.limb_length, True, s.body_density, s.body_friction, color)

        self.head = Box(
            world, s.body_length, s.body_height, True, s.body_density, s.body_friction, "orange"
        )
        self.l_thigh = limb("red")
        self.l_shin = limb("red")
        self.r_thigh = limb("blue")
        self.r_shin = limb("blue")

        hip_y = -s.body_height / 2
        limb_top = (0.0, s.limb_length / 2)
        limb_bottom = (0.0, -s.limb_length / 2)

        self.l_hip = self._joint(self.head, self.l_thigh, (-s.body_length / 2, hip_y), limb_top)
        self.r_hip = self._joint(self.head, self.r_thigh, (s.body_length / 2, hip_y), limb_top)
        self.l_knee = self._joint(self.l_thigh, self.l_shin, limb_bottom, limb_top)
        self.r_knee = self._joint(self.r_thigh, self.r_shin, limb_bottom, limb_top)

        self.teleport((0.0, 0.0))

    def _joint(self, box_a: Box, box_b: Box, anchor_a, anchor_b):
        return self.world.create_revolute_joint(
            box_a.body,
            box_b.body,
            anchor_a,
            anchor_b,
            lower_angle=-self.max_joint_angle,
            upper_angle=self.max_joint_angle,
            max_motor_torque=self.max_joint_torque,
            motor_speed=0.0,
        )

    @property
    def boxes(self) -> List[Box]:
        return [self.head, self.l_thigh, self.l_shin, self.r_thigh, self.r_shin]

    @property
    def joints(self) -> list:
        return [self.l_hip, self.r_hip, self.l_knee, self.r_knee]

    def teleport(self, position: Sequence[float]):
        """Stand the player upright with the torso at `position`, at rest."""
        pos = vec2(position[0], position[1])
        half_x = self.body_length / 2
        thigh_y = -(self.body_height / 2 + self.limb_length / 2)
        shin_y = -(self.body_height / 2 + self.limb_length * 3 / 2)

        self.head.set_transform(pos, 0.0)
        self.l_thigh.set_transform(pos + vec2(-half_x, thigh_y), 0.0)
        self.r_thigh.set_transform(pos + vec2(half_x, thigh_y), 0.0)
        self.l_shin.set_transform(pos + vec2(-half_x, shin_y), 0.0)
        self.r_shin.set_transform(pos + vec2(half_x, shin_y), 0.0)

        for box in self.boxes:
            self.world.set_velocity(box.body, (0.0, 0.0), 0.0)
        self.world.wake(self.head.body)

    def set_motor_speeds(self, l_hip: float, r_hip: float, l_knee: float, r_knee: float):
        """Set joint target speeds from values in [-1, 1]."""
        for joint, value in zip(self.joints, (l_hip, r_hip, l_knee, r_knee)):
            self.world.set_motor_speed(joint, self.max_joint_velocity * value)

    def motor_angles(self) -> np.ndarray:
        return np.array([self.world.joint_angle(j) for j in self.joints])

    def motor_velocities(self) -> np.ndarray:
        return np.array([self.world.joint_speed(j) for j in self.joints])


class WalkerEnv(BaseEnv):
    """
    Biped walking over a rocky floor.

    Categorical actions are not supported.
    """

    def __init__(
        self,
        settings: Optional[WalkerSettings] = None,
        rng: Optional[np.random.Generator] = None,
        world_factory: Optional[Callable[[Tuple[float, float]], PhysicsWorld]] = None,
    ):
        """
        Build the world, the floor, the rocks and the player.

        Args:
            settings: Settings record (defaults if None)
            rng: Random generator for rock placement (fresh generator if None)
            world_factory: Called with the gravity vector; returns the
                PhysicsWorld to simulate in (PymunkWorld if None)
        """
        super().__init__(rng)
        self.settings = settings if settings is not None else WalkerSettings()
        s = self.settings

        factory = world_factory if world_factory is not None else PymunkWorld
        self.world = factory((0.0, s.gravity))

        self.player = Player(self.world, s)
        self.floor = Box(self.world, 100, 1, False, 1, 1, "black")
        self.floor.set_transform((45.0, 0.0), 0.0)
        self.rocks = self._make_rocks()

        self.obs_dim = 10
        self.act_dim = 4

        logger.debug("Walker world built with %d rocks", len(self.rocks))

    def _make_rocks(self) -> List[Box]:
        rocks = []
        for _ in range(self.settings.num_rocks):
            xr = self.rng.uniform()
            x = xr * 90 + 10
            # Rocks grow with distance from the start line
            size = max((self.rng.uniform() * 0.8 + 0.2) * xr, MIN_ROCK_SIZE)
            rock = Box(self.world, size, size, False, 1, 0.3, "black")
            rock.set_transform((x, 0.5), self.rng.uniform() * 6)
            rocks.append(rock)
        return rocks

    def name(self) -> str:
        return "Walker Environment"

    def render_size(self) -> Tuple[float, float]:
        return 800.0, 800.0

    def reset(self) -> ResetResult:
        self.player.set_motor_speeds(0.0, 0.0, 0.0, 0.0)
        self.player.teleport((0.0, self.settings.spawn_height))
        logger.debug("Walker reset: torso at height %.3f", self.settings.spawn_height)
        return ResetResult(self._get_obs(), self._get_info())

    def step(self, action) -> StepResult:
        """
        Take a step in the environment.

        Args:
            action: [left hip, right hip, left knee, right knee] in [-1, 1]

        Returns:
            obs: Observation after step
            reward: Torso forward velocity times the time step
            terminated: Torso fell below fall_height (if stop_on_fall)
            info: Torso x and height
        """
        action = validate_action(action, self.act_dim)
        s = self.settings

        self.player.set_motor_speeds(*action)
        self.world.step(s.time_step, s.velocity_iterations, s.position_iterations)

        head_velocity = self.world.linear_velocity(self.player.head.body)
        head_position = self.player.head.position

        reward = float(head_velocity[0]) * s.time_step
        terminated = bool(s.stop_on_fall and head_position[1] < s.fall_height)
        if terminated:
            logger.debug("Walker fell: torso height %.3f, reward %.4f", head_position[1], reward)

        return StepResult(self._get_obs(), reward, terminated, self._get_info())

    def _get_obs(self) -> np.ndarray:
        body_angle = self.player.head.angle
        return np.concatenate([
            self.player.motor_angles() / self.player.max_joint_angle,
            self.player.motor_velocities() / self.player.max_joint_velocity,
            [math.sin(body_angle), math.cos(body_angle)],
        ])

    def _get_info(self) -> dict:
        position = self.player.head.position
        return {"x": float(position[0]), "height": float(position[1])}
