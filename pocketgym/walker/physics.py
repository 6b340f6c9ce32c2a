"""
Rigid-body engine boundary for the walker.

The walker never talks to an engine directly; it configures bodies and
revolute joints and reads joint state back through `PhysicsWorld`. Body
and joint handles are opaque to the caller.

Angle conventions follow the revolute joints of common 2-D engines:
    joint angle = angle(body_b) - angle(body_a)
    joint speed = angular_velocity(body_b) - angular_velocity(body_a)
and a motor drives the joint speed toward its target.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

import numpy as np


class PhysicsWorld(ABC):
    """Operations the walker needs from a 2-D rigid-body engine."""

    @abstractmethod
    def create_box(
        self, width: float, height: float, dynamic: bool, density: float, friction: float
    ) -> Any:
        """Create a rectangular body centred on the origin and return its handle."""

    @abstractmethod
    def create_revolute_joint(
        self,
        body_a: Any,
        body_b: Any,
        anchor_a: Sequence[float],
        anchor_b: Sequence[float],
        lower_angle: float,
        upper_angle: float,
        max_motor_torque: float,
        motor_speed: float = 0.0,
    ) -> Any:
        """
        Pin two bodies together at local anchors.

        The joint angle is limited to [lower_angle, upper_angle] and a motor
        with torque limit `max_motor_torque` drives it at `motor_speed`.
        Connected bodies do not collide with each other.
        """

    @abstractmethod
    def set_transform(self, body: Any, position: Sequence[float], angle: float):
        ...

    @abstractmethod
    def set_velocity(self, body: Any, linear: Sequence[float], angular: float):
        ...

    @abstractmethod
    def wake(self, body: Any):
        ...

    @abstractmethod
    def position(self, body: Any) -> np.ndarray:
        ...

    @abstractmethod
    def angle(self, body: Any) -> float:
        ...

    @abstractmethod
    def linear_velocity(self, body: Any) -> np.ndarray:
        ...

    @abstractmethod
    def set_motor_speed(self, joint: Any, speed: float):
        ...

    @abstractmethod
    def joint_angle(self, joint: Any) -> float:
        ...

    @abstractmethod
    def joint_speed(self, joint: Any) -> float:
        ...

    @abstractmethod
    def step(self, dt: float, velocity_iterations: int, position_iterations: int):
        """Advance every body by `dt` with fixed solver iteration counts."""
