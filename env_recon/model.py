"""Domain definitions and load-time validation.

A domain is a set of variable declarations, one transition formula per
state-fluent and a reward formula. ``validate_domain`` checks all of them
against a concrete instance before the first step, so malformed domains fail
at load time rather than mid-simulation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

from env_recon.actions import ActionAssignment
from env_recon.errors import (
    ArityMismatchError,
    IncompleteTransitionError,
    InvalidProbabilityError,
    ReconDomainError,
)
from env_recon.evaluator import EvaluationContext, check_probability, evaluate, iter_bindings
from env_recon.fluents import NON_FLUENT, STATE_FLUENT, FluentStore, VariableSpec
from env_recon.formulas import (
    ARITH_OPS,
    Arith,
    Bernoulli,
    Case,
    Const,
    Equals,
    Exists,
    FluentRef,
    Formula,
    Obj,
    Sum,
    Var,
    children,
    free_variables,
)


@dataclass(frozen=True)
class TransitionFunction:
    """Next-value formula of one state-fluent, with its parameter variables."""

    name: str
    params: Tuple[str, ...]
    formula: Formula


@dataclass(frozen=True)
class DomainDefinition:
    name: str
    types: Tuple[str, ...]
    variables: Tuple[VariableSpec, ...]
    transitions: Tuple[TransitionFunction, ...]
    reward: Formula


def _check_term(term, expected_type: str, scope: Mapping[str, str], store: FluentStore, where: str) -> None:
    if isinstance(term, Var):
        if term.name not in scope:
            raise ReconDomainError(f"Variable <{term.name}> is not bound in {where}.")
        if scope[term.name] != expected_type:
            raise ArityMismatchError(
                f"Variable <{term.name}> has type <{scope[term.name]}>, expected <{expected_type}> in {where}."
            )
    elif isinstance(term, Obj):
        if not store.registry.has_object(expected_type, term.name):
            raise ArityMismatchError(f"Object <{term.name}> is not a <{expected_type}> in {where}.")
    else:
        raise ReconDomainError(f"Expected a term, got {term!r} in {where}.")


def _is_static(formula: Formula, store: FluentStore) -> bool:
    """True when the value depends only on constants, non-fluents and bindings."""
    if isinstance(formula, FluentRef):
        return store.declaration(formula.name).kind == NON_FLUENT
    if isinstance(formula, Bernoulli):
        return False
    return all(_is_static(child, store) for child in children(formula))


def _check_static_probability(prob: Formula, scope: Mapping[str, str], store: FluentStore, where: str) -> None:
    ctx = EvaluationContext(store=store, snapshot=store.snapshot(), actions=ActionAssignment())
    names = sorted(free_variables(prob))
    params = tuple((name, scope[name]) for name in names)
    for bindings in iter_bindings(params, ctx, {}):
        value = float(evaluate(prob, ctx, bindings))
        try:
            check_probability(value)
        except InvalidProbabilityError as exc:
            raise InvalidProbabilityError(f"{exc} in {where} with bindings {bindings}") from None


def check_formula(formula: Formula, store: FluentStore, scope: Mapping[str, str], where: str) -> None:
    """Recursively validate names, arities, types, scoping and probabilities."""
    if isinstance(formula, (Var, Obj)):
        raise ReconDomainError(f"Term {formula!r} used as a formula in {where}.")
    if isinstance(formula, Const):
        if not isinstance(formula.value, (bool, int, float)):
            raise ReconDomainError(f"Constant {formula.value!r} is not boolean or real in {where}.")
        return
    if isinstance(formula, FluentRef):
        spec = store.declaration(formula.name)
        if len(formula.args) != spec.arity:
            raise ArityMismatchError(
                f"<{formula.name}> requires {spec.arity} argument(s), got {len(formula.args)} in {where}."
            )
        for arg, ptype in zip(formula.args, spec.param_types):
            _check_term(arg, ptype, scope, store, where)
        return
    if isinstance(formula, Equals):
        sides = (formula.left, formula.right)
        for side in sides:
            if isinstance(side, Var) and side.name not in scope:
                raise ReconDomainError(f"Variable <{side.name}> is not bound in {where}.")
        if all(isinstance(side, Var) for side in sides) and scope[sides[0].name] != scope[sides[1].name]:
            raise ArityMismatchError(f"Cannot compare <{sides[0].name}> and <{sides[1].name}> in {where}.")
        for side, other in (sides, sides[::-1]):
            if isinstance(side, Obj) and isinstance(other, Var):
                _check_term(side, scope[other.name], scope, store, where)
    if isinstance(formula, Arith) and formula.op not in ARITH_OPS:
        raise ReconDomainError(f"Unknown arithmetic operator {formula.op!r} in {where}.")
    if isinstance(formula, (Exists, Sum)):
        inner = dict(scope)
        for var_name, type_name in formula.params:
            if not var_name.startswith("?"):
                raise ReconDomainError(f"Quantified variable {var_name!r} must start with '?' in {where}.")
            store.registry.resolve_domain(type_name)
            inner[var_name] = type_name
        check_formula(formula.body, store, inner, where)
        return
    if isinstance(formula, Case) and formula.default is None:
        raise IncompleteTransitionError(f"Case expression without a default branch in {where}.")
    for child in children(formula):
        check_formula(child, store, scope, where)
    if isinstance(formula, Bernoulli) and _is_static(formula.prob, store):
        _check_static_probability(formula.prob, scope, store, where)


def validate_domain(domain: DomainDefinition, store: FluentStore) -> Dict[str, TransitionFunction]:
    """Validate a domain against an instance's store; return transitions by name."""
    for type_name in domain.types:
        store.registry.resolve_domain(type_name)

    transitions: Dict[str, TransitionFunction] = {}
    for cpf in domain.transitions:
        spec = store.declaration(cpf.name)
        where = f"transition <{cpf.name}>"
        if spec.kind != STATE_FLUENT:
            raise ReconDomainError(f"Transition defined for {spec.kind} <{cpf.name}>.")
        if cpf.name in transitions:
            raise ReconDomainError(f"Transition for <{cpf.name}> is defined more than once.")
        if len(cpf.params) != spec.arity:
            raise ArityMismatchError(
                f"Left-hand side of {where} requires {spec.arity} parameter(s), got {list(cpf.params)}."
            )
        for param in cpf.params:
            if not param.startswith("?"):
                raise ReconDomainError(f"Parameter {param!r} of {where} must be a free variable.")
        check_formula(cpf.formula, store, dict(zip(cpf.params, spec.param_types)), where)
        transitions[cpf.name] = cpf

    for spec in store.declarations(STATE_FLUENT):
        if spec.name not in transitions:
            raise IncompleteTransitionError(f"State-fluent <{spec.name}> has no transition formula.")

    check_formula(domain.reward, store, {}, "reward")
    return transitions
