"""Variable declarations and the fluent store.

The store owns every ground non-fluent and state-fluent value. State-fluents
live in a read-only snapshot that is swapped wholesale on ``commit``; the
next state is built in a separate staging dict so that every transition of a
step reads the same pre-step values.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Union

from env_recon.errors import ArityMismatchError, ReconDomainError, UndeclaredVariableError
from env_recon.objects import ObjectRegistry

Value = Union[bool, float]

NON_FLUENT = "non-fluent"
STATE_FLUENT = "state-fluent"
ACTION_FLUENT = "action-fluent"
VARIABLE_KINDS = (NON_FLUENT, STATE_FLUENT, ACTION_FLUENT)

BOOL = "bool"
REAL = "real"


class GroundVariable(NamedTuple):
    """A variable symbol with concrete objects for all of its parameters."""

    name: str
    args: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}({', '.join(self.args)})"


def ground(name: str, *args: str) -> GroundVariable:
    return GroundVariable(name, tuple(args))


@dataclass(frozen=True)
class VariableSpec:
    """Declared signature of a domain variable."""

    name: str
    kind: str
    range: str = BOOL
    param_types: Tuple[str, ...] = ()
    default: Value = False

    def __post_init__(self) -> None:
        if self.kind not in VARIABLE_KINDS:
            raise ValueError(f"Unknown variable kind for <{self.name}>: {self.kind}")
        if self.range not in (BOOL, REAL):
            raise ValueError(f"Unknown range for <{self.name}>: {self.range}")
        if self.kind != NON_FLUENT and self.range != BOOL:
            raise ValueError(f"{self.kind} <{self.name}> must be boolean")
        object.__setattr__(self, "param_types", tuple(self.param_types))
        object.__setattr__(self, "default", self.coerce(self.default))

    @property
    def arity(self) -> int:
        return len(self.param_types)

    def coerce(self, value: Value) -> Value:
        if self.range == BOOL:
            return bool(value)
        return float(value)


def _as_ground(key: Union[GroundVariable, Tuple[str, Sequence[str]]]) -> GroundVariable:
    name, args = key
    return GroundVariable(str(name), tuple(str(a) for a in args))


class FluentStore:
    """Current values of non-fluents and state-fluents, keyed by ground variable."""

    def __init__(
        self,
        registry: ObjectRegistry,
        variables: Sequence[VariableSpec],
        non_fluents: Optional[Mapping[GroundVariable, Value]] = None,
        init_state: Optional[Mapping[GroundVariable, Value]] = None,
    ):
        self._registry = registry
        self._variables: Dict[str, VariableSpec] = {}
        for spec in variables:
            if spec.name in self._variables:
                raise ValueError(f"Variable <{spec.name}> is declared more than once.")
            for ptype in spec.param_types:
                registry.resolve_domain(ptype)
            self._variables[spec.name] = spec

        self._non_fluents: Dict[GroundVariable, Value] = {}
        for key, value in (non_fluents or {}).items():
            ground_var = _as_ground(key)
            spec = self._expect_kind(ground_var, NON_FLUENT)
            self.check_ground(ground_var)
            self._non_fluents[ground_var] = spec.coerce(value)

        initial: Dict[GroundVariable, Value] = {}
        for spec in self.declarations(STATE_FLUENT):
            for args in registry.all_groundings(spec.param_types):
                initial[GroundVariable(spec.name, args)] = spec.default
        for key, value in (init_state or {}).items():
            ground_var = _as_ground(key)
            spec = self._expect_kind(ground_var, STATE_FLUENT)
            self.check_ground(ground_var)
            initial[ground_var] = spec.coerce(value)

        self._initial: Mapping[GroundVariable, Value] = MappingProxyType(initial)
        self._current: Mapping[GroundVariable, Value] = MappingProxyType(dict(initial))
        self._staging: Dict[GroundVariable, Value] = {}

    @property
    def registry(self) -> ObjectRegistry:
        return self._registry

    @property
    def variables(self) -> Tuple[VariableSpec, ...]:
        return tuple(self._variables.values())

    def declaration(self, name: str) -> VariableSpec:
        try:
            return self._variables[name]
        except KeyError:
            raise UndeclaredVariableError(f"Variable <{name}> is not declared.") from None

    def declarations(self, kind: str) -> List[VariableSpec]:
        return [spec for spec in self._variables.values() if spec.kind == kind]

    def _expect_kind(self, ground_var: GroundVariable, kind: str) -> VariableSpec:
        spec = self.declaration(ground_var.name)
        if spec.kind != kind:
            raise ReconDomainError(f"<{ground_var.name}> is a {spec.kind}, expected a {kind}.")
        return spec

    def check_ground(self, ground_var: GroundVariable) -> VariableSpec:
        """Validate arity and argument types of a ground variable."""
        spec = self.declaration(ground_var.name)
        if len(ground_var.args) != spec.arity:
            raise ArityMismatchError(
                f"<{ground_var.name}> requires {spec.arity} argument(s) "
                f"of types {list(spec.param_types)}, got {list(ground_var.args)}."
            )
        for position, (obj, ptype) in enumerate(zip(ground_var.args, spec.param_types), start=1):
            if not self._registry.has_object(ptype, obj):
                raise ArityMismatchError(
                    f"Argument {position} of <{ground_var.name}> must be a <{ptype}>, got <{obj}>."
                )
        return spec

    def ground_instances(self, name: str) -> Iterator[GroundVariable]:
        spec = self.declaration(name)
        for args in self._registry.all_groundings(spec.param_types):
            yield GroundVariable(spec.name, args)

    def get(self, ground_var: GroundVariable, snapshot: Optional[Mapping[GroundVariable, Value]] = None) -> Value:
        """Value of a non-fluent or state-fluent, falling back to its default."""
        spec = self.declaration(ground_var.name)
        if spec.kind == NON_FLUENT:
            if ground_var in self._non_fluents:
                return self._non_fluents[ground_var]
        elif spec.kind == STATE_FLUENT:
            state = self._current if snapshot is None else snapshot
            if ground_var in state:
                return state[ground_var]
        else:
            raise ReconDomainError(
                f"Action-fluent <{ground_var.name}> is read from the action assignment, not the store."
            )
        self.check_ground(ground_var)
        return spec.default

    def snapshot(self) -> Mapping[GroundVariable, Value]:
        """Read-only view of the committed state-fluents."""
        return self._current

    def stage(self, ground_var: GroundVariable, value: Value) -> None:
        spec = self._expect_kind(ground_var, STATE_FLUENT)
        self.check_ground(ground_var)
        self._staging[ground_var] = spec.coerce(value)

    @property
    def staged(self) -> Mapping[GroundVariable, Value]:
        return MappingProxyType(self._staging)

    def commit(self) -> Mapping[GroundVariable, Value]:
        """Swap the staged values in; unstaged ground fluents keep their value."""
        next_state = dict(self._current)
        next_state.update(self._staging)
        self._current = MappingProxyType(next_state)
        self._staging = {}
        return self._current

    def discard(self) -> None:
        self._staging = {}

    def reset(self) -> Mapping[GroundVariable, Value]:
        self._current = MappingProxyType(dict(self._initial))
        self._staging = {}
        return self._current
