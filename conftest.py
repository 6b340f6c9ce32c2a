# conftest.py
"""
Shared fixtures: seeded generators, default environments and a recording
in-memory PhysicsWorld for walker tests that should not depend on pymunk.
"""
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from pocketgym.walker.physics import PhysicsWorld


class FakeBody:
    def __init__(self, width, height, dynamic, density, friction):
        self.size = (width, height)
        self.dynamic = dynamic
        self.density = density
        self.friction = friction
        self.position = np.zeros(2)
        self.angle = 0.0
        self.velocity = np.zeros(2)
        self.angular_velocity = 0.0
        self.awake = False


class FakeJoint:
    def __init__(self, body_a, body_b, anchor_a, anchor_b, lower, upper, max_torque, speed):
        self.body_a = body_a
        self.body_b = body_b
        self.anchors = (tuple(anchor_a), tuple(anchor_b))
        self.limits = (lower, upper)
        self.max_torque = max_torque
        self.motor_speed = speed
        self.angle = 0.0
        self.speed = 0.0


class FakeWorld(PhysicsWorld):
    """PhysicsWorld that stores state and records every step call."""

    def __init__(self, gravity=(0.0, -9.81)):
        self.gravity = tuple(gravity)
        self.bodies = []
        self.joints = []
        self.steps = []

    def create_box(self, width, height, dynamic, density, friction):
        body = FakeBody(width, height, dynamic, density, friction)
        self.bodies.append(body)
        return body

    def create_revolute_joint(self, body_a, body_b, anchor_a, anchor_b, lower_angle,
                              upper_angle, max_motor_torque, motor_speed=0.0):
        joint = FakeJoint(body_a, body_b, anchor_a, anchor_b, lower_angle, upper_angle,
                          max_motor_torque, motor_speed)
        self.joints.append(joint)
        return joint

    def set_transform(self, body, position, angle):
        body.position = np.array(position, dtype=float)
        body.angle = float(angle)

    def set_velocity(self, body, linear, angular):
        body.velocity = np.array(linear, dtype=float)
        body.angular_velocity = float(angular)

    def wake(self, body):
        body.awake = True

    def position(self, body):
        return body.position.copy()

    def angle(self, body):
        return body.angle

    def linear_velocity(self, body):
        return body.velocity.copy()

    def set_motor_speed(self, joint, speed):
        joint.motor_speed = speed

    def joint_angle(self, joint):
        return joint.angle

    def joint_speed(self, joint):
        return joint.speed

    def step(self, dt, velocity_iterations, position_iterations):
        self.steps.append((dt, velocity_iterations, position_iterations))


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def fake_world_factory():
    """Factory that remembers the world it built as `factory.world`."""
    def factory(gravity):
        factory.world = FakeWorld(gravity)
        return factory.world
    return factory


@pytest.fixture
def cartpole(rng):
    from pocketgym import CartPoleEnv
    return CartPoleEnv(rng=rng)


@pytest.fixture
def ballpush(rng):
    from pocketgym import BallPushEnv
    return BallPushEnv(rng=rng)
