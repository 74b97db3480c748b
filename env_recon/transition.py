"""Transition engine: next values for every ground state-fluent."""

from __future__ import annotations

from typing import Iterator, List, Mapping, Tuple

from env_recon.evaluator import EvaluationContext, evaluate
from env_recon.fluents import STATE_FLUENT, FluentStore, GroundVariable, Value, VariableSpec
from env_recon.model import TransitionFunction


class TransitionEngine:
    """Evaluates each state-fluent's transition against the pre-step snapshot.

    Ground instances are visited in a fixed order (state-fluent declaration
    order, then grounding order), so a seeded generator reproduces the same
    Bernoulli draws for the same trajectory.
    """

    def __init__(self, transitions: Mapping[str, TransitionFunction], store: FluentStore):
        self._store = store
        self._ordered: List[Tuple[VariableSpec, TransitionFunction]] = [
            (spec, transitions[spec.name]) for spec in store.declarations(STATE_FLUENT)
        ]

    def iter_next_values(self, ctx: EvaluationContext) -> Iterator[Tuple[GroundVariable, Value]]:
        registry = self._store.registry
        for spec, cpf in self._ordered:
            for args in registry.all_groundings(spec.param_types):
                bindings = dict(zip(cpf.params, args))
                yield GroundVariable(spec.name, args), spec.coerce(evaluate(cpf.formula, ctx, bindings))

    def stage_next_state(self, ctx: EvaluationContext) -> int:
        """Stage every ground state-fluent; return how many were staged."""
        count = 0
        for ground_var, value in self.iter_next_values(ctx):
            self._store.stage(ground_var, value)
            count += 1
        return count
