"""Tests for the ball-push environment"""
import numpy as np
import pytest

from pocketgym import BallPushEnv, BallPushSettings
from pocketgym.errors import InvalidActionError, InvalidCategoricalActionError, InvalidSettingsError


def _place(env, agent, ball, agent_velocity=(0.0, 0.0), ball_velocity=(0.0, 0.0)):
    env.agent.slide_to_position(agent)
    env.agent.set_velocity(agent_velocity)
    env.ball.slide_to_position(ball)
    env.ball.set_velocity(ball_velocity)


def _separated_env(max_seed=200):
    """First seeded environment whose reset leaves the particles apart."""
    for seed in range(max_seed):
        env = BallPushEnv(rng=np.random.default_rng(seed))
        s = env.settings
        gap = np.linalg.norm(env.agent.position - env.ball.position)
        if gap > s.agent_radius + s.ball_radius + 1.0:
            return env
    raise AssertionError("no separated reset found")


def test_metadata(ballpush):
    s = ballpush.settings
    assert ballpush.name() == "BallPush"
    assert ballpush.action_length() == 2
    assert ballpush.observation_length() == 8
    assert ballpush.render_size() == (1000.0, 1000.0)
    assert ballpush.num_categorical_actions() == 5
    assert s.agent_max_speed == pytest.approx(20.0 / 1.5)


def test_constructor_resets(rng):
    env = BallPushEnv(rng=rng)
    limit = env.settings.boundary_radius * 0.75
    assert np.linalg.norm(env.agent.position) <= limit
    assert np.linalg.norm(env.ball.position) <= limit


def test_reset_spawns_at_rest_and_clears_flags(ballpush):
    limit = ballpush.settings.boundary_radius * 0.75
    ballpush.has_touched_ball = True
    ballpush.has_centered_ball = True
    for _ in range(50):
        obs, info = ballpush.reset()
        assert np.linalg.norm(ballpush.agent.position) <= limit
        assert np.linalg.norm(ballpush.ball.position) <= limit
        np.testing.assert_array_equal(ballpush.agent.velocity, [0.0, 0.0])
        np.testing.assert_array_equal(ballpush.ball.velocity, [0.0, 0.0])
        assert info == {
            "has_touched_ball": False,
            "has_centered_ball": False,
            "ball_distance": pytest.approx(np.linalg.norm(ballpush.ball.position)),
        }
        assert obs.shape == (8,)


def test_diagonal_action_is_normalised(ballpush):
    _place(ballpush, agent=(-20.0, 0.0), ball=(20.0, 0.0))
    ballpush.step([1.0, 1.0])
    assert np.linalg.norm(ballpush.agent.acceleration) == pytest.approx(20.0)


def test_small_action_is_not_scaled_up(ballpush):
    _place(ballpush, agent=(-20.0, 0.0), ball=(20.0, 0.0))
    ballpush.step([0.5, 0.0])
    np.testing.assert_allclose(ballpush.agent.acceleration, [10.0, 0.0])


def test_drag_opposes_motion(ballpush):
    s = ballpush.settings
    _place(ballpush, agent=(-20.0, 0.0), ball=(20.0, 0.0),
           agent_velocity=(4.0, 0.0), ball_velocity=(0.0, -2.0))
    ballpush.step([0.0, 0.0])
    np.testing.assert_allclose(ballpush.agent.acceleration, [-4.0 * s.agent_drag, 0.0])
    np.testing.assert_allclose(ballpush.ball.acceleration, [0.0, 2.0 * s.ball_drag])


def test_touch_bonus_is_paid_once():
    env = BallPushEnv(BallPushSettings(touch_ball_reward=100.0), rng=np.random.default_rng(0))
    _place(env, agent=(18.5, 0.0), ball=(20.0, 0.0))
    _, reward, _, info = env.step([0.0, 0.0])
    assert info["has_touched_ball"]
    assert reward > 50.0

    _place(env, agent=(18.5, 0.0), ball=(20.0, 0.0))
    _, reward, _, info = env.step([0.0, 0.0])
    assert info["has_touched_ball"]
    assert reward < 50.0


def test_collision_splits_penetration(ballpush):
    _place(ballpush, agent=(18.5, 0.0), ball=(20.0, 0.0))
    ballpush.step([0.0, 0.0])
    # Each particle slid back 0.75, which the next step reads as velocity
    assert ballpush.agent.velocity[0] < 0
    assert ballpush.ball.velocity[0] > 0
    np.testing.assert_allclose(ballpush.agent.velocity, -ballpush.ball.velocity)


def test_coincident_particles_separate(ballpush):
    _place(ballpush, agent=(10.0, 5.0), ball=(10.0, 5.0))
    ballpush.step([0.0, 0.0])
    assert ballpush.agent.position[0] > ballpush.ball.position[0]
    assert np.all(np.isfinite(ballpush.agent.position))


def test_center_bonus_is_paid_once():
    env = BallPushEnv(BallPushSettings(place_in_center_reward=100.0), rng=np.random.default_rng(0))
    _place(env, agent=(-30.0, 0.0), ball=(0.0, 0.0))
    assert env.ball_in_center()

    _, reward, terminated, info = env.step([0.0, 0.0])
    assert info["has_centered_ball"]
    assert reward == pytest.approx(100.0)
    assert not terminated

    _, reward, _, _ = env.step([0.0, 0.0])
    assert reward == pytest.approx(0.0)


def test_flags_clear_on_reset():
    env = BallPushEnv(BallPushSettings(place_in_center_reward=100.0), rng=np.random.default_rng(0))
    _place(env, agent=(-30.0, 0.0), ball=(0.0, 0.0))
    env.step([0.0, 0.0])
    env.reset()
    assert not env.has_centered_ball
    _place(env, agent=(-30.0, 0.0), ball=(0.0, 0.0))
    _, reward, _, _ = env.step([0.0, 0.0])
    assert reward == pytest.approx(100.0)


def test_ball_moving_to_center_is_rewarded(ballpush):
    s = ballpush.settings
    _place(ballpush, agent=(-30.0, 0.0), ball=(20.0, 0.0), ball_velocity=(-6.0, 0.0))
    ballpush.has_touched_ball = True
    _, reward, _, _ = ballpush.step([0.0, 0.0])
    speed = -ballpush.ball.velocity[0]
    assert reward == pytest.approx(s.move_to_center_reward * speed * s.time_step / s.boundary_radius)
    assert reward > 0


def test_agent_approaching_ball_is_rewarded_until_touch(ballpush):
    s = ballpush.settings
    _place(ballpush, agent=(-30.0, 0.0), ball=(30.0, 0.0), agent_velocity=(8.0, 0.0))
    _, reward, _, _ = ballpush.step([0.0, 0.0])
    speed = ballpush.agent.velocity[0]
    expected = s.move_to_ball_reward * speed * s.time_step / (2 * s.boundary_radius)
    assert reward == pytest.approx(expected)

    ballpush.has_touched_ball = True
    _, reward, _, _ = ballpush.step([0.0, 0.0])
    assert reward == pytest.approx(0.0)


def test_particles_stay_inside_boundary(ballpush):
    s = ballpush.settings
    rng = np.random.default_rng(3)
    ballpush.reset()
    for i in range(3000):
        # Long straight runs drive the agent into the wall
        if i % 200 == 0:
            direction = rng.uniform(-1, 1, size=2)
        ballpush.step(direction)
        assert np.linalg.norm(ballpush.agent.position) <= s.boundary_radius - s.agent_radius + 1e-9
        assert np.linalg.norm(ballpush.ball.position) <= s.boundary_radius - s.ball_radius + 1e-9


def test_idle_agent_comes_to_rest():
    env = _separated_env()
    rewards = []
    for _ in range(600):
        obs, reward, terminated, _ = env.step([0.0, 0.0])
        rewards.append(reward)
        assert not terminated
        assert np.all(np.abs(obs) <= 1.0)
    assert abs(rewards[-1]) < 1e-9


def test_moving_particles_decelerate_under_drag(ballpush):
    _place(ballpush, agent=(-20.0, 0.0), ball=(20.0, 0.0),
           agent_velocity=(0.0, 5.0), ball_velocity=(-3.0, 0.0))
    rewards = [ballpush.step([0.0, 0.0]).reward for _ in range(900)]
    assert abs(rewards[-1]) < 1e-4
    assert abs(rewards[-1]) < abs(rewards[0])
    assert np.linalg.norm(ballpush.ball.velocity) < 0.01


def test_categorical_actions(ballpush):
    expected = [[1, 0], [-1, 0], [0, 1], [0, -1], [0, 0]]
    for i, action in enumerate(expected):
        np.testing.assert_array_equal(ballpush.convert_categorical_action(i), action)
    with pytest.raises(InvalidCategoricalActionError):
        ballpush.convert_categorical_action(5)


@pytest.mark.parametrize(
    "action",
    [[1.0], [0.0, 1.5], [-1.1, 0.0], [0.0, 0.0, 0.0], [[1.0, 0.0]], np.zeros((2, 1)), 0.5],
)
def test_invalid_actions_raise(ballpush, action):
    with pytest.raises(InvalidActionError):
        ballpush.step(action)


def test_invalid_settings():
    with pytest.raises(InvalidSettingsError):
        BallPushSettings(boundary_radius=1.5)
    with pytest.raises(InvalidSettingsError):
        BallPushSettings(agent_drag=0.0)
