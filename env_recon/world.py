"""Recon world: the step driver around the transition and reward engines."""

from __future__ import annotations

from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from env_recon.actions import ActionAssignment
from env_recon.errors import ActionConstraintError, ReconDomainError
from env_recon.evaluator import EvaluationContext
from env_recon.fluents import ACTION_FLUENT, FluentStore, GroundVariable, Value
from env_recon.model import DomainDefinition, validate_domain
from env_recon.objects import ObjectRegistry
from env_recon.recon import build_recon_domain
from env_recon.reward import RewardEngine
from env_recon.transition import TransitionEngine

State = Mapping[GroundVariable, Value]


class ReconWorld:
    """Relational MDP world over a typed object instance.

    Each ``step`` computes the reward of (state, action) on the pre-step
    snapshot, stages the next value of every ground state-fluent from that
    same snapshot and then commits all of them at once. The world has no
    terminal state; ``horizon`` is only carried for the driver's benefit.
    """

    def __init__(
        self,
        objects: Mapping[str, Sequence[str]],
        non_fluents: Optional[Mapping[GroundVariable, Value]] = None,
        init_state: Optional[Mapping[GroundVariable, Value]] = None,
        domain: Optional[DomainDefinition] = None,
        horizon: int = 40,
        discount: float = 1.0,
        max_nondef_actions: Optional[int] = None,
        seed: int = 0,
        rng: Optional[np.random.Generator] = None,
    ):
        if horizon < 0:
            raise ValueError("horizon must be non-negative")
        if discount < 0.0:
            raise ValueError("discount must be non-negative")
        if max_nondef_actions is not None and max_nondef_actions < 1:
            raise ValueError("max_nondef_actions must be positive")

        self._domain = domain if domain is not None else build_recon_domain()
        self._registry = ObjectRegistry(objects)
        self._store = FluentStore(self._registry, self._domain.variables, non_fluents, init_state)
        transitions = validate_domain(self._domain, self._store)
        self._transition = TransitionEngine(transitions, self._store)
        self._reward = RewardEngine(self._domain.reward)

        self._horizon = int(horizon)
        self._discount = float(discount)
        self._max_nondef_actions = max_nondef_actions
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._step_index = 0

    @property
    def registry(self) -> ObjectRegistry:
        return self._registry

    @property
    def store(self) -> FluentStore:
        return self._store

    @property
    def horizon(self) -> int:
        return self._horizon

    @property
    def discount(self) -> float:
        return self._discount

    @property
    def step_index(self) -> int:
        return self._step_index

    @property
    def state(self) -> State:
        return self._store.snapshot()

    def value(self, name: str, *args: str) -> Value:
        """Current value of a ground non-fluent or state-fluent."""
        return self._store.get(GroundVariable(name, tuple(args)))

    @property
    def action_names(self) -> List[str]:
        return [spec.name for spec in self._store.declarations(ACTION_FLUENT)]

    def ground_actions(self, name: str) -> Iterator[GroundVariable]:
        if self._store.declaration(name).kind != ACTION_FLUENT:
            raise ReconDomainError(f"<{name}> is not an action-fluent.")
        return self._store.ground_instances(name)

    def reset(self) -> State:
        """Restore the initial state and return it."""
        self._step_index = 0
        return self._store.reset()

    def _check_actions(self, actions: Optional[Mapping]) -> ActionAssignment:
        assignment = actions if isinstance(actions, ActionAssignment) else ActionAssignment(actions)
        for ground_var in assignment:
            spec = self._store.check_ground(ground_var)
            if spec.kind != ACTION_FLUENT:
                raise ReconDomainError(f"<{ground_var.name}> is a {spec.kind}, not an action-fluent.")
        if self._max_nondef_actions is not None:
            n_true = len(assignment.true_actions())
            if n_true > self._max_nondef_actions:
                raise ActionConstraintError(
                    f"{n_true} concurrent actions exceed max_nondef_actions={self._max_nondef_actions}"
                )
        return assignment

    def step(self, actions: Optional[Mapping] = None) -> Tuple[State, float]:
        """Apply one action assignment and return (next_state, reward)."""
        assignment = self._check_actions(actions)
        ctx = EvaluationContext(
            store=self._store,
            snapshot=self._store.snapshot(),
            actions=assignment,
            rng=self._rng,
        )
        reward = self._reward.evaluate(ctx)
        try:
            self._transition.stage_next_state(ctx)
        except Exception:
            self._store.discard()
            raise
        next_state = self._store.commit()
        self._step_index += 1
        return next_state, reward
