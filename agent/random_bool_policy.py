"""Random single-action policy for boolean action-fluent domains.

Each call sets exactly one ground instance of one action-fluent to true. By
default the action-fluent is the first one the domain declares, so on recon
this only ever moves the agent up; pass ``action_name`` to pick another.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np

from env_recon.actions import ActionAssignment
from env_recon.fluents import GroundVariable
from env_recon.world import ReconWorld


class RandomBoolPolicy:
    """Uniformly picks one grounding of a boolean action-fluent per step."""

    def __init__(self, world: ReconWorld, action_name: Optional[str] = None, seed: int = 0):
        names = world.action_names
        if not names:
            raise ValueError("world declares no action-fluents")
        self.action_name = names[0] if action_name is None else str(action_name)
        self.groundings: List[GroundVariable] = list(world.ground_actions(self.action_name))
        if not self.groundings:
            raise ValueError(f"action-fluent <{self.action_name}> has no ground instances")
        self.rng = np.random.default_rng(seed)

    def act(self) -> Dict[str, Any]:
        """Select one ground action and return it with its assignment."""
        idx = int(self.rng.integers(len(self.groundings)))
        chosen = self.groundings[idx]
        return {"action": chosen, "assignment": ActionAssignment({chosen: True})}


class RandomActionPolicy:
    """Picks one ground action uniformly across every declared action-fluent."""

    def __init__(self, world: ReconWorld, allow_noop: bool = True, seed: int = 0):
        self.groundings: List[GroundVariable] = [
            ground_var for name in world.action_names for ground_var in world.ground_actions(name)
        ]
        self.allow_noop = bool(allow_noop)
        self.rng = np.random.default_rng(seed)

    def act(self) -> Dict[str, Any]:
        n_choices = len(self.groundings) + (1 if self.allow_noop else 0)
        idx = int(self.rng.integers(n_choices))
        if idx >= len(self.groundings):
            return {"action": None, "assignment": ActionAssignment()}
        chosen = self.groundings[idx]
        return {"action": chosen, "assignment": ActionAssignment({chosen: True})}
