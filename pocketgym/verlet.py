"""
Position-Verlet point mass.

Velocity is never integrated as independent state; it is encoded by the
pair (current position, previous position):

    a      = (F + J / dt) / m
    x_next = 2 * x - x_prev + a * dt^2
    v      = (x_next - x_prev) / (2 * dt)

Forces and impulses accumulate between steps and are cleared by each step.
Because velocity lives in the position pair, moving a particle with
`slide_to_position` also changes its velocity on the next step. That is
what makes boundary and collision corrections cheap: a position fix does
not need a matching velocity patch. Callers that want the velocity kept
must follow the slide with `set_velocity`.
"""

from typing import Sequence

import numpy as np

from .errors import InvalidSettingsError


class VerletParticle:
    """
    Point mass integrated with position Verlet.

    The time step must equal the step interval of the owning environment.

    Attributes:
        position: Current position (copy)
        velocity: Velocity computed by the most recent step or `set_velocity`
        acceleration: Acceleration applied by the most recent step
    """

    def __init__(self, position: Sequence[float], mass: float, time_step: float):
        if mass <= 0:
            raise InvalidSettingsError(f"Particle mass must be positive, got {mass}")
        if time_step <= 0:
            raise InvalidSettingsError(f"Particle time step must be positive, got {time_step}")

        self._position = np.array(position, dtype=np.float64)
        self._previous_position = self._position.copy()
        self._mass = float(mass)
        self._dt = float(time_step)

        self._force = np.zeros_like(self._position)
        self._impulse = np.zeros_like(self._position)
        self._velocity = np.zeros_like(self._position)
        self._acceleration = np.zeros_like(self._position)

    @property
    def position(self) -> np.ndarray:
        return self._position.copy()

    @property
    def velocity(self) -> np.ndarray:
        return self._velocity.copy()

    @property
    def acceleration(self) -> np.ndarray:
        return self._acceleration.copy()

    @property
    def mass(self) -> float:
        return self._mass

    @property
    def time_step(self) -> float:
        return self._dt

    def apply_force(self, force: Sequence[float]):
        """Add a continuous force for the next step."""
        self._force += np.asarray(force, dtype=np.float64)

    def apply_impulse(self, impulse: Sequence[float]):
        """Add an instantaneous impulse for the next step."""
        self._impulse += np.asarray(impulse, dtype=np.float64)

    def slide_to_position(self, position: Sequence[float]):
        """
        Move the particle without touching its previous position.

        This changes the velocity the next step will see.
        """
        self._position = np.array(position, dtype=np.float64)

    def set_velocity(self, velocity: Sequence[float]):
        """Set the velocity by rewriting the previous position."""
        velocity = np.asarray(velocity, dtype=np.float64)
        self._previous_position = self._position - velocity * self._dt
        self._velocity = velocity.copy()

    def step_particle(self):
        """Integrate one time step and clear accumulated forces."""
        dt = self._dt
        total_force = self._force + self._impulse / dt
        acceleration = total_force / self._mass

        next_position = 2.0 * self._position - self._previous_position + acceleration * dt * dt

        # Central difference over [previous, next]
        self._velocity = (next_position - self._previous_position) * (0.5 / dt)
        self._acceleration = acceleration

        self._previous_position = self._position
        self._position = next_position
        self._force = np.zeros_like(self._position)
        self._impulse = np.zeros_like(self._position)

    def __repr__(self):
        return (
            f"VerletParticle(position={self._position.tolist()}, "
            f"velocity={self._velocity.tolist()}, mass={self._mass})"
        )
