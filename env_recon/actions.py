"""Action assignments for recon worlds."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Tuple, Union

from env_recon.fluents import GroundVariable

MOVE_ACTIONS = ("up", "down", "left", "right")
USE_TOOL = "useToolOn"
REPAIR = "repair"

ActionKey = Union[GroundVariable, Tuple[str, Tuple[str, ...]]]


class ActionAssignment(Mapping):
    """Read-only ground action values. Unlisted ground actions are false."""

    def __init__(self, values: Optional[Mapping] = None):
        self._values: Dict[GroundVariable, bool] = {}
        for key, value in (values or {}).items():
            name, args = key
            self._values[GroundVariable(str(name), tuple(str(a) for a in args))] = bool(value)

    def __getitem__(self, key: ActionKey) -> bool:
        return self._values[key]

    def __iter__(self) -> Iterator[GroundVariable]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ActionAssignment({', '.join(str(g) for g in self.true_actions()) or 'noop'})"

    def value(self, ground_var: GroundVariable) -> bool:
        return self._values.get(ground_var, False)

    def true_actions(self) -> List[GroundVariable]:
        return [g for g, v in self._values.items() if v]


NO_OP = ActionAssignment()


def actions(*grounds: GroundVariable) -> ActionAssignment:
    """Assignment with the given ground actions set to true."""
    return ActionAssignment({g: True for g in grounds})


def move_action(direction: str, agent: str) -> GroundVariable:
    if direction not in MOVE_ACTIONS:
        raise ValueError(f"direction must be one of {MOVE_ACTIONS}, got {direction!r}")
    return GroundVariable(direction, (agent,))


def use_tool_action(agent: str, tool: str, obj: str) -> GroundVariable:
    return GroundVariable(USE_TOOL, (agent, tool, obj))


def repair_action(agent: str, tool: str) -> GroundVariable:
    return GroundVariable(REPAIR, (agent, tool))


def action_name(assignment: Mapping) -> str:
    """Human-readable summary of the true actions in an assignment."""
    true_actions = [str(GroundVariable(k[0], tuple(k[1]))) for k, v in assignment.items() if v]
    if not true_actions:
        return "noop"
    return " + ".join(true_actions)
