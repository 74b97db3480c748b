"""Tagged expression trees for transition and reward formulas.

Formulas arrive already parsed; these frozen nodes are the whole language the
evaluator understands. Terms (``Var``/``Obj``) only appear as fluent
arguments or as operands of ``Equals``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union


@dataclass(frozen=True)
class Var:
    """Quantified or parameter variable, written ``?name``."""

    name: str


@dataclass(frozen=True)
class Obj:
    """Object literal."""

    name: str


Term = Union[Var, Obj]


@dataclass(frozen=True)
class Const:
    value: Union[bool, float]


@dataclass(frozen=True)
class FluentRef:
    name: str
    args: Tuple[Term, ...] = ()


@dataclass(frozen=True)
class Not:
    operand: "Formula"


@dataclass(frozen=True)
class And:
    operands: Tuple["Formula", ...]


@dataclass(frozen=True)
class Or:
    operands: Tuple["Formula", ...]


@dataclass(frozen=True)
class Equals:
    left: Union[Term, "Formula"]
    right: Union[Term, "Formula"]


@dataclass(frozen=True)
class Arith:
    op: str
    left: "Formula"
    right: "Formula"


@dataclass(frozen=True)
class Exists:
    params: Tuple[Tuple[str, str], ...]
    body: "Formula"


@dataclass(frozen=True)
class Sum:
    params: Tuple[Tuple[str, str], ...]
    body: "Formula"


@dataclass(frozen=True)
class Case:
    """Ordered ``if / else if`` branches; the first true condition wins."""

    branches: Tuple[Tuple["Formula", "Formula"], ...]
    default: Optional["Formula"] = None


@dataclass(frozen=True)
class Bernoulli:
    prob: "Formula"


@dataclass(frozen=True)
class KronDelta:
    value: "Formula"


Formula = Union[Const, FluentRef, Not, And, Or, Equals, Arith, Exists, Sum, Case, Bernoulli, KronDelta]

ARITH_OPS = ("+", "-", "*", "/")
TRUE = Const(True)
FALSE = Const(False)


def term(name: str) -> Term:
    """``?x`` becomes a variable, anything else an object literal."""
    return Var(name) if name.startswith("?") else Obj(name)


def fluent(name: str, *args: str) -> FluentRef:
    return FluentRef(name, tuple(term(a) for a in args))


def neg(operand: Formula) -> Not:
    return Not(operand)


def conj(*operands: Formula) -> And:
    return And(tuple(operands))


def disj(*operands: Formula) -> Or:
    return Or(tuple(operands))


def eq(left: Union[str, Formula], right: Union[str, Formula]) -> Equals:
    if isinstance(left, str):
        left = term(left)
    if isinstance(right, str):
        right = term(right)
    return Equals(left, right)


def _params(params: Sequence[Union[str, Tuple[str, str]]]) -> Tuple[Tuple[str, str], ...]:
    out = []
    for param in params:
        if isinstance(param, str):
            var_name, _, type_name = param.partition(":")
            param = (var_name.strip(), type_name.strip())
        out.append((str(param[0]), str(param[1])))
    return tuple(out)


def exists(params: Sequence[Union[str, Tuple[str, str]]], body: Formula) -> Exists:
    """``exists(["?x : x_pos", "?y : y_pos"], body)``."""
    return Exists(_params(params), body)


def sum_over(params: Sequence[Union[str, Tuple[str, str]]], body: Formula) -> Sum:
    return Sum(_params(params), body)


def arith(op: str, left: Union[Formula, float], right: Union[Formula, float]) -> Arith:
    if not isinstance(left, _NODE_TYPES):
        left = Const(float(left))
    if not isinstance(right, _NODE_TYPES):
        right = Const(float(right))
    return Arith(op, left, right)


def case(*branches: Tuple[Formula, Formula], default: Optional[Formula] = None) -> Case:
    return Case(tuple(branches), default)


def if_then_else(condition: Formula, then: Formula, otherwise: Formula) -> Case:
    return Case(((condition, then),), otherwise)


def bernoulli(prob: Union[Formula, float]) -> Bernoulli:
    if isinstance(prob, (int, float)):
        prob = Const(float(prob))
    return Bernoulli(prob)


def kron_delta(value: Union[Formula, bool, float]) -> KronDelta:
    if isinstance(value, (bool, int, float)):
        value = Const(value)
    return KronDelta(value)


_NODE_TYPES = (Const, FluentRef, Not, And, Or, Equals, Arith, Exists, Sum, Case, Bernoulli, KronDelta)


def children(formula: Formula) -> Tuple[Formula, ...]:
    """Direct sub-formulas of a node, excluding terms."""
    if isinstance(formula, (Const, FluentRef)):
        return ()
    if isinstance(formula, Not):
        return (formula.operand,)
    if isinstance(formula, (And, Or)):
        return formula.operands
    if isinstance(formula, Equals):
        return tuple(side for side in (formula.left, formula.right) if not isinstance(side, (Var, Obj)))
    if isinstance(formula, Arith):
        return (formula.left, formula.right)
    if isinstance(formula, (Exists, Sum)):
        return (formula.body,)
    if isinstance(formula, Case):
        nodes = [node for branch in formula.branches for node in branch]
        if formula.default is not None:
            nodes.append(formula.default)
        return tuple(nodes)
    if isinstance(formula, Bernoulli):
        return (formula.prob,)
    if isinstance(formula, KronDelta):
        return (formula.value,)
    raise TypeError(f"Not a formula node: {formula!r}")


def free_variables(formula: Formula) -> frozenset:
    """Names of ``?`` variables used but not quantified inside ``formula``."""
    if isinstance(formula, FluentRef):
        return frozenset(a.name for a in formula.args if isinstance(a, Var))
    if isinstance(formula, Equals):
        names = set()
        for side in (formula.left, formula.right):
            if isinstance(side, Var):
                names.add(side.name)
            elif not isinstance(side, Obj):
                names |= free_variables(side)
        return frozenset(names)
    if isinstance(formula, (Exists, Sum)):
        bound = {name for name, _ in formula.params}
        return free_variables(formula.body) - bound
    names = set()
    for child in children(formula):
        names |= free_variables(child)
    return frozenset(names)
