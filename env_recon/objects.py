"""Typed object domains for recon instances."""

from __future__ import annotations

import itertools
from typing import Dict, Iterator, Mapping, Sequence, Tuple

from env_recon.errors import UnknownTypeError


class ObjectRegistry:
    """Finite, ordered object domains keyed by type name.

    Object ids only need to be unique inside their own type; ``x1`` may be
    both an ``x_pos`` and an ``obj`` without the two ever being interchangeable.
    """

    def __init__(self, types: Mapping[str, Sequence[str]]):
        self._domains: Dict[str, Tuple[str, ...]] = {}
        for type_name, objects in types.items():
            ids = tuple(str(obj) for obj in objects)
            if len(set(ids)) != len(ids):
                raise ValueError(f"Duplicate object ids in type <{type_name}>: {list(ids)}")
            self._domains[str(type_name)] = ids

    @property
    def type_names(self) -> Tuple[str, ...]:
        return tuple(self._domains)

    def resolve_domain(self, type_name: str) -> Tuple[str, ...]:
        """Return the ordered object ids of a type."""
        try:
            return self._domains[type_name]
        except KeyError:
            raise UnknownTypeError(
                f"Type <{type_name}> is not valid, must be one of {sorted(self.type_names)}."
            ) from None

    def has_object(self, type_name: str, obj: str) -> bool:
        return obj in self.resolve_domain(type_name)

    def all_groundings(self, param_types: Sequence[str]) -> Iterator[Tuple[str, ...]]:
        """Lazily enumerate argument tuples for a signature.

        The first position varies slowest; objects keep declaration order.
        A parameter-free signature yields exactly one empty tuple.
        """
        domains = [self.resolve_domain(ptype) for ptype in param_types]
        return itertools.product(*domains)
