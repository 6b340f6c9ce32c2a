"""
Frame rendering with matplotlib.

The renderer only reads public environment state (cart/pole state,
particle positions and episode flags, walker body transforms); no
environment imports this module. Coordinates are the logical canvas given
by `env.render_size()`, origin bottom-left.
"""

import math
from typing import Optional

import matplotlib.patches as patches
import matplotlib.pyplot as plt
import numpy as np

from .ballpush import BallPushEnv
from .base_env import BaseEnv
from .cartpole import CartPoleEnv
from .walker import WalkerEnv

CART_SIZE = (50.0, 35.0)
POLE_LENGTH = 200.0
WALKER_PIXELS_PER_METER = 25.0


def _draw_cartpole(env: CartPoleEnv, ax, width: float, height: float):
    axis_y = height / 3
    ax.set_facecolor("white")
    ax.plot([0, width], [axis_y, axis_y], color="black", linewidth=2)

    cart_x = width / 2 + env.cart_position * width / 2
    cw, ch = CART_SIZE
    ax.add_patch(patches.Rectangle((cart_x - cw / 2, axis_y - ch / 2), cw, ch, color="black"))

    # Positive angle leans the pole counter-clockwise
    theta = env.pole_angle
    top = (cart_x - POLE_LENGTH * math.sin(theta), axis_y + POLE_LENGTH * math.cos(theta))
    ax.plot([cart_x, top[0]], [axis_y, top[1]], color=(0.976, 0.682, 0.357), linewidth=10, zorder=3)
    ax.add_patch(patches.Circle((cart_x, axis_y), 4, color=(0.243, 0.396, 0.663), zorder=4))


def _draw_ballpush(env: BallPushEnv, ax, width: float, height: float):
    s = env.settings
    center = np.array([width / 2, height / 2])
    ax.set_facecolor("black")

    ax.add_patch(patches.Circle(center, s.boundary_radius * s.scale, color=(0.1, 0.1, 0.1)))
    ax.add_patch(patches.Circle(
        center, s.boundary_radius * s.scale, fill=False, edgecolor=(0.4, 0.4, 0.4), linewidth=3
    ))

    target_color = (0.0, 0.9, 0.0) if env.ball_in_center() else (0.0, 0.2, 0.8)
    ax.add_patch(patches.Circle(
        center, s.target_radius * s.scale, fill=False, edgecolor=target_color, linewidth=3
    ))

    ax.add_patch(patches.Circle(
        env.ball.position * s.scale + center, s.ball_radius * s.scale, color=(0.0, 0.2, 0.8)
    ))
    ax.add_patch(patches.Circle(
        env.agent.position * s.scale + center, s.agent_radius * s.scale, color=(0.8, 0.2, 0.0)
    ))


def _draw_walker(env: WalkerEnv, ax, width: float, height: float):
    ppm = WALKER_PIXELS_PER_METER
    ax.set_facecolor((0.15, 0.15, 0.15))

    # Camera follows the torso
    camera_offset = np.array([width / 2, height / 4]) / ppm - env.player.head.position

    start = (np.array([[0.0, 0.0], [0.0, 100.0]]) + camera_offset) * ppm
    ax.plot(start[:, 0], start[:, 1], color="white", linewidth=1)

    for box in env.rocks + [env.floor] + env.player.boxes:
        corners = (box.corners() + camera_offset) * ppm
        ax.add_patch(patches.Polygon(corners, closed=True, color=box.color))


def render_frame(env: BaseEnv, ax=None):
    """
    Draw the current state of an environment.

    Args:
        env: CartPoleEnv, BallPushEnv or WalkerEnv
        ax: Axis to draw on (a new figure sized to the canvas if None)

    Returns:
        The matplotlib Figure
    """
    width, height = env.render_size()
    if ax is None:
        fig, ax = plt.subplots(figsize=(width / 100, height / 100), dpi=100)
    else:
        fig = ax.figure
        ax.clear()

    if isinstance(env, CartPoleEnv):
        _draw_cartpole(env, ax, width, height)
    elif isinstance(env, BallPushEnv):
        _draw_ballpush(env, ax, width, height)
    elif isinstance(env, WalkerEnv):
        _draw_walker(env, ax, width, height)
    else:
        raise TypeError(f"No renderer for {type(env).__name__}")

    ax.set_xlim(0, width)
    ax.set_ylim(0, height)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_title(f"Gym: {env.name()}")
    return fig
