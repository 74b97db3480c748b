"""Interpreter for formula trees over a fixed state snapshot.

Every call receives the snapshot, the action assignment and the random
generator through an explicit context; nothing here reads global state.
"""

from __future__ import annotations

import itertools
import operator
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple

import numpy as np

from env_recon.actions import ActionAssignment
from env_recon.errors import IncompleteTransitionError, InvalidProbabilityError, ReconDomainError
from env_recon.fluents import ACTION_FLUENT, FluentStore, GroundVariable, Value
from env_recon.formulas import (
    And,
    Arith,
    Bernoulli,
    Case,
    Const,
    Equals,
    Exists,
    FluentRef,
    Formula,
    KronDelta,
    Not,
    Obj,
    Or,
    Sum,
    Term,
    Var,
)

Bindings = Mapping[str, str]
NO_BINDINGS: Bindings = MappingProxyType({})

_ARITH: Dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


@dataclass(frozen=True)
class EvaluationContext:
    """Everything one step's evaluations may read."""

    store: FluentStore
    snapshot: Mapping[GroundVariable, Value]
    actions: ActionAssignment
    rng: Optional[np.random.Generator] = None


def resolve_term(term: Term, bindings: Bindings) -> str:
    if isinstance(term, Obj):
        return term.name
    try:
        return bindings[term.name]
    except KeyError:
        raise ReconDomainError(f"Variable <{term.name}> is not bound in this scope.") from None


def _eval_const(formula: Const, ctx: EvaluationContext, bindings: Bindings) -> Value:
    return formula.value


def _eval_fluent(formula: FluentRef, ctx: EvaluationContext, bindings: Bindings) -> Value:
    ground_var = GroundVariable(formula.name, tuple(resolve_term(a, bindings) for a in formula.args))
    if ctx.store.declaration(formula.name).kind == ACTION_FLUENT:
        return ctx.actions.value(ground_var)
    return ctx.store.get(ground_var, ctx.snapshot)


def _eval_not(formula: Not, ctx: EvaluationContext, bindings: Bindings) -> Value:
    return not evaluate(formula.operand, ctx, bindings)


def _eval_and(formula: And, ctx: EvaluationContext, bindings: Bindings) -> Value:
    return all(evaluate(op, ctx, bindings) for op in formula.operands)


def _eval_or(formula: Or, ctx: EvaluationContext, bindings: Bindings) -> Value:
    return any(evaluate(op, ctx, bindings) for op in formula.operands)


def _eval_side(side, ctx: EvaluationContext, bindings: Bindings):
    if isinstance(side, (Var, Obj)):
        return resolve_term(side, bindings)
    return evaluate(side, ctx, bindings)


def _eval_equals(formula: Equals, ctx: EvaluationContext, bindings: Bindings) -> Value:
    return _eval_side(formula.left, ctx, bindings) == _eval_side(formula.right, ctx, bindings)


def _eval_arith(formula: Arith, ctx: EvaluationContext, bindings: Bindings) -> Value:
    try:
        op = _ARITH[formula.op]
    except KeyError:
        raise ReconDomainError(f"Unknown arithmetic operator {formula.op!r}") from None
    left = float(evaluate(formula.left, ctx, bindings))
    right = float(evaluate(formula.right, ctx, bindings))
    return op(left, right)


def iter_bindings(params: Tuple[Tuple[str, str], ...], ctx: EvaluationContext, bindings: Bindings):
    """Extend ``bindings`` with every object combination for ``params``, in order."""
    names = [name for name, _ in params]
    domains = [ctx.store.registry.resolve_domain(type_name) for _, type_name in params]
    for combo in itertools.product(*domains):
        scope = dict(bindings)
        scope.update(zip(names, combo))
        yield scope


def _eval_exists(formula: Exists, ctx: EvaluationContext, bindings: Bindings) -> Value:
    # any() stops at the first satisfying binding
    return any(evaluate(formula.body, ctx, scope) for scope in iter_bindings(formula.params, ctx, bindings))


def _eval_sum(formula: Sum, ctx: EvaluationContext, bindings: Bindings) -> Value:
    return float(sum(float(evaluate(formula.body, ctx, scope)) for scope in iter_bindings(formula.params, ctx, bindings)))


def _eval_case(formula: Case, ctx: EvaluationContext, bindings: Bindings) -> Value:
    for condition, outcome in formula.branches:
        if evaluate(condition, ctx, bindings):
            return evaluate(outcome, ctx, bindings)
    if formula.default is None:
        raise IncompleteTransitionError("No case branch matched and the case has no default.")
    return evaluate(formula.default, ctx, bindings)


def check_probability(prob: float) -> float:
    if not 0.0 <= prob <= 1.0:
        raise InvalidProbabilityError(f"Bernoulli parameter must be in [0, 1], got {prob}")
    return prob


def _eval_bernoulli(formula: Bernoulli, ctx: EvaluationContext, bindings: Bindings) -> Value:
    prob = check_probability(float(evaluate(formula.prob, ctx, bindings)))
    if ctx.rng is None:
        raise ReconDomainError("Sampling a Bernoulli outcome requires a random generator.")
    return bool(ctx.rng.random() < prob)


def _eval_kron_delta(formula: KronDelta, ctx: EvaluationContext, bindings: Bindings) -> Value:
    return evaluate(formula.value, ctx, bindings)


_EVALUATORS: Dict[type, Callable[..., Value]] = {
    Const: _eval_const,
    FluentRef: _eval_fluent,
    Not: _eval_not,
    And: _eval_and,
    Or: _eval_or,
    Equals: _eval_equals,
    Arith: _eval_arith,
    Exists: _eval_exists,
    Sum: _eval_sum,
    Case: _eval_case,
    Bernoulli: _eval_bernoulli,
    KronDelta: _eval_kron_delta,
}


def evaluate(formula: Formula, ctx: EvaluationContext, bindings: Bindings = NO_BINDINGS) -> Value:
    """Evaluate ``formula`` against ``ctx`` with ``bindings`` for free variables.

    Apart from drawing from ``ctx.rng`` for Bernoulli outcomes, evaluation has
    no side effects: the snapshot and the actions are only read.
    """
    try:
        handler = _EVALUATORS[type(formula)]
    except KeyError:
        raise TypeError(f"Not a formula node: {formula!r}") from None
    return handler(formula, ctx, bindings)
