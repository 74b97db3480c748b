"""Metrics and lightweight plotting for recon rollouts."""

from __future__ import annotations

from statistics import mean
from typing import Dict, List, Sequence

import numpy as np

# Constant for missing matplotlib message
_MATPLOTLIB_MISSING_MSG = "matplotlib not installed; skipping plot generation."


def discounted_return(rewards: Sequence[float], discount: float) -> float:
    """Sum of rewards weighted by discount**t."""
    weights = np.power(float(discount), np.arange(len(rewards), dtype=float))
    return float(np.sum(np.asarray(rewards, dtype=float) * weights))


def count_true(state: Dict, name: str) -> int:
    """Number of true ground instances of a state-fluent in a snapshot."""
    return sum(1 for ground_var, value in state.items() if ground_var.name == name and bool(value))


def summarize_recon_runs(run_outputs: List[Dict]) -> Dict[str, float]:
    """Compute aggregate metrics over a collection of episode results."""
    if not run_outputs:
        return {
            "avg_total_reward": 0.0,
            "avg_discounted_return": 0.0,
            "avg_pictures_taken": 0.0,
            "avg_life_detected": 0.0,
            "damaged_step_rate": 0.0,
        }

    total_steps = sum(int(r["steps"]) for r in run_outputs)
    damaged_steps = sum(int(r["damaged_tool_steps"]) for r in run_outputs)
    return {
        "avg_total_reward": mean(float(r["total_reward"]) for r in run_outputs),
        "avg_discounted_return": mean(float(r["discounted_return"]) for r in run_outputs),
        "avg_pictures_taken": mean(float(r["pictures_taken"]) for r in run_outputs),
        "avg_life_detected": mean(float(r["life_detected"]) for r in run_outputs),
        "damaged_step_rate": damaged_steps / max(total_steps, 1),
    }


def plot_cumulative_reward(run_outputs: List[Dict], out_path: str, title: str) -> bool:
    """Plot per-episode cumulative reward curves and save to file."""
    try:
        import matplotlib.pyplot as plt  # pylint: disable=import-outside-toplevel
    except ModuleNotFoundError:
        print(_MATPLOTLIB_MISSING_MSG)
        return False

    plt.figure(figsize=(8, 4.5))
    for run in run_outputs:
        cumulative = np.cumsum(np.asarray(run["rewards"], dtype=float))
        plt.plot(np.arange(1, len(cumulative) + 1), cumulative, alpha=0.4)
    if run_outputs:
        lengths = {len(r["rewards"]) for r in run_outputs}
        if len(lengths) == 1:
            stacked = np.vstack([np.cumsum(np.asarray(r["rewards"], dtype=float)) for r in run_outputs])
            plt.plot(np.arange(1, stacked.shape[1] + 1), stacked.mean(axis=0), color="black", label="mean")
            plt.legend()
    plt.xlabel("Step")
    plt.ylabel("Cumulative reward")
    plt.title(title)
    plt.tight_layout()
    plt.savefig(out_path)
    plt.close()
    return True
