"""Recon relational MDP environment package."""

from env_recon.actions import ActionAssignment, actions, move_action, repair_action, use_tool_action
from env_recon.fluents import GroundVariable, ground
from env_recon.io import build_world_from_definition, load_instance_definition, load_world
from env_recon.recon import build_recon_domain
from env_recon.world import ReconWorld

__all__ = [
    "ActionAssignment",
    "GroundVariable",
    "ReconWorld",
    "actions",
    "build_recon_domain",
    "build_world_from_definition",
    "ground",
    "load_instance_definition",
    "load_world",
    "move_action",
    "repair_action",
    "use_tool_action",
]
