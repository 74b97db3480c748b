"""Reward engine."""

from __future__ import annotations

from env_recon.evaluator import EvaluationContext, evaluate
from env_recon.formulas import Formula


class RewardEngine:
    """Reward of (state, action): evaluated on the pre-transition snapshot."""

    def __init__(self, reward: Formula):
        self._reward = reward

    def evaluate(self, ctx: EvaluationContext) -> float:
        return float(evaluate(self._reward, ctx))
