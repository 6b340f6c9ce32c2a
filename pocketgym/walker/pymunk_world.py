"""
pymunk implementation of the walker's physics boundary.

A revolute joint is three pymunk constraints on the same body pair:
PivotJoint (the pin), RotaryLimitJoint (angle limits) and SimpleMotor.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pymunk

from .physics import PhysicsWorld

logger = logging.getLogger(__name__)


@dataclass
class RevoluteJoint:
    body_a: pymunk.Body
    body_b: pymunk.Body
    pivot: pymunk.PivotJoint
    limit: pymunk.RotaryLimitJoint
    motor: pymunk.SimpleMotor


class PymunkWorld(PhysicsWorld):
    """
    PhysicsWorld backed by a pymunk Space.

    pymunk has one solver iteration count; it is set from the velocity
    iteration count on every step.
    """

    def __init__(self, gravity: Sequence[float] = (0.0, -9.81)):
        self.space = pymunk.Space()
        self.space.gravity = (float(gravity[0]), float(gravity[1]))
        logger.debug("Created pymunk space with gravity %s", self.space.gravity)

    def create_box(self, width, height, dynamic, density, friction):
        if dynamic:
            body = pymunk.Body()
        else:
            body = pymunk.Body(body_type=pymunk.Body.STATIC)

        shape = pymunk.Poly.create_box(body, (width, height))
        if dynamic:
            # Mass and moment follow from the shape density
            shape.density = density
        shape.friction = friction

        self.space.add(body, shape)
        return body

    def create_revolute_joint(
        self,
        body_a,
        body_b,
        anchor_a,
        anchor_b,
        lower_angle,
        upper_angle,
        max_motor_torque,
        motor_speed=0.0,
    ):
        pivot = pymunk.PivotJoint(body_a, body_b, tuple(anchor_a), tuple(anchor_b))
        limit = pymunk.RotaryLimitJoint(body_a, body_b, lower_angle, upper_angle)
        motor = pymunk.SimpleMotor(body_a, body_b, 0.0)
        motor.max_force = max_motor_torque

        for constraint in (pivot, limit, motor):
            constraint.collide_bodies = False
        self.space.add(pivot, limit, motor)

        joint = RevoluteJoint(body_a, body_b, pivot, limit, motor)
        self.set_motor_speed(joint, motor_speed)
        return joint

    def set_transform(self, body, position, angle):
        body.position = (float(position[0]), float(position[1]))
        body.angle = float(angle)
        # Static shapes are not re-indexed automatically
        self.space.reindex_shapes_for_body(body)

    def set_velocity(self, body, linear, angular):
        body.velocity = (float(linear[0]), float(linear[1]))
        body.angular_velocity = float(angular)

    def wake(self, body):
        body.activate()

    def position(self, body) -> np.ndarray:
        return np.array([body.position.x, body.position.y], dtype=np.float64)

    def angle(self, body) -> float:
        return float(body.angle)

    def linear_velocity(self, body) -> np.ndarray:
        return np.array([body.velocity.x, body.velocity.y], dtype=np.float64)

    def set_motor_speed(self, joint: RevoluteJoint, speed: float):
        # SimpleMotor drives (w_b - w_a) toward -rate
        joint.motor.rate = -float(speed)

    def joint_angle(self, joint: RevoluteJoint) -> float:
        return float(joint.body_b.angle - joint.body_a.angle)

    def joint_speed(self, joint: RevoluteJoint) -> float:
        return float(joint.body_b.angular_velocity - joint.body_a.angular_velocity)

    def step(self, dt, velocity_iterations, position_iterations):
        self.space.iterations = int(velocity_iterations)
        self.space.step(dt)
