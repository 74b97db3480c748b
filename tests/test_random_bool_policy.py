# tests/test_random_bool_policy.py
import pytest

from agent.random_bool_policy import RandomActionPolicy, RandomBoolPolicy
from env_recon.io import bundled_world_path, load_world
from experiments.recon_random_rollout import rollout_episode


def test_default_policy_uses_first_declared_action(make_world):
    world = make_world()
    policy = RandomBoolPolicy(world, seed=0)
    assert policy.action_name == "up"
    for _ in range(10):
        choice = policy.act()
        assert choice["action"].name == "up"
        assert choice["assignment"].true_actions() == [choice["action"]]


def test_named_action_covers_its_groundings(make_world):
    world = make_world()
    policy = RandomBoolPolicy(world, action_name="useToolOn", seed=4)
    assert len(policy.groundings) == 3
    seen = {policy.act()["action"] for _ in range(60)}
    assert seen == set(policy.groundings)


def test_same_seed_gives_same_choices(make_world):
    world = make_world()
    a = RandomActionPolicy(world, seed=9)
    b = RandomActionPolicy(world, seed=9)
    assert [a.act()["action"] for _ in range(20)] == [b.act()["action"] for _ in range(20)]


def test_action_policy_can_choose_noop(make_world):
    world = make_world()
    policy = RandomActionPolicy(world, allow_noop=True, seed=1)
    choices = [policy.act() for _ in range(300)]
    assert any(c["action"] is None and len(c["assignment"].true_actions()) == 0 for c in choices)
    assert all(len(c["assignment"].true_actions()) <= 1 for c in choices)

    strict = RandomActionPolicy(world, allow_noop=False, seed=1)
    assert all(strict.act()["action"] is not None for _ in range(100))


def test_rollout_episode_on_bundled_world():
    world = load_world(bundled_world_path("recon_3x3_single"), seed=3)
    policy = RandomActionPolicy(world, seed=3)
    out = rollout_episode(world, policy, max_steps=5, enable_trace=True)
    assert out["steps"] == 5
    assert len(out["rewards"]) == 5
    assert len(out["trace"]) == 5
    assert out["total_reward"] == sum(out["rewards"])
    assert out["discounted_return"] == pytest.approx(out["total_reward"])
    assert 0 <= out["damaged_tool_steps"] <= 5
    assert world.step_index == 5
