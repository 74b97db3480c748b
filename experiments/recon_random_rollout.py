"""Random-policy rollouts on a bundled recon instance."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from agent.random_bool_policy import RandomActionPolicy
from env_recon.actions import action_name
from env_recon.io import bundled_world_path, load_world
from env_recon.world import ReconWorld
from experiments.metrics import count_true, discounted_return, plot_cumulative_reward, summarize_recon_runs


def rollout_episode(world: ReconWorld, policy: RandomActionPolicy, max_steps: int | None = None,
                    enable_trace: bool = False) -> Dict[str, Any]:
    """Run one episode from the initial state for ``max_steps`` (default: horizon)."""
    state = world.reset()
    steps = world.horizon if max_steps is None else int(max_steps)
    rewards = []
    damaged_tool_steps = 0
    trace = []
    for t in range(steps):
        choice = policy.act()
        state, reward = world.step(choice["assignment"])
        rewards.append(reward)
        damaged_tool_steps += int(count_true(state, "damaged") > 0)
        if enable_trace:
            trace.append({"t": t, "action": action_name(choice["assignment"]), "reward": reward})

    return {
        "rewards": rewards,
        "steps": steps,
        "total_reward": float(sum(rewards)),
        "discounted_return": discounted_return(rewards, world.discount),
        "pictures_taken": count_true(state, "pictureTaken"),
        "life_detected": count_true(state, "lifeDetected"),
        "damaged_tool_steps": damaged_tool_steps,
        "trace": trace,
    }


def run_recon_random_rollout(
    episodes: int = 20,
    world_path: str | Path = bundled_world_path("recon_4x4_hazards"),
    seed: int = 7,
):
    world = load_world(world_path, seed=seed)
    policy = RandomActionPolicy(world, allow_noop=True, seed=seed)

    runs = []
    for ep in range(episodes):
        out = rollout_episode(world, policy)
        runs.append(out)
        print(
            f"[recon random ep={ep + 1:02d}] "
            f"return={out['total_reward']:.2f} "
            f"disc_return={out['discounted_return']:.3f} "
            f"pictures={out['pictures_taken']} "
            f"life={out['life_detected']} "
            f"damaged_steps={out['damaged_tool_steps']}"
        )

    summary = summarize_recon_runs(runs)
    print("\nRecon random-policy summary")
    for key, value in summary.items():
        print(f"- {key}: {value:.4f}")

    Path("experiments/results").mkdir(parents=True, exist_ok=True)
    saved = plot_cumulative_reward(
        runs,
        out_path="experiments/results/recon_random_cumulative_reward.png",
        title="Recon: Random Policy Cumulative Reward",
    )
    if saved:
        print("- saved plot: experiments/results/recon_random_cumulative_reward.png")
    return runs, summary


if __name__ == "__main__":
    run_recon_random_rollout()
