"""Instance-definition loader utilities for recon worlds."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

from env_recon.fluents import GroundVariable, Value
from env_recon.model import DomainDefinition
from env_recon.recon import build_recon_domain, grid_non_fluents
from env_recon.world import ReconWorld

DOMAINS: Dict[str, Callable[[], DomainDefinition]] = {
    "recon": build_recon_domain,
}

WORLDS_DIR = Path(__file__).resolve().parent / "worlds"


def _check_entries(section: str, entries: Any) -> None:
    if not isinstance(entries, list):
        raise ValueError(f"{section} must be a list of {{name, args, value}} entries.")
    for entry in entries:
        if not isinstance(entry, dict) or "name" not in entry:
            raise ValueError(f"{section} entry missing fields: ['name']")
        if not isinstance(entry.get("args", []), list):
            raise ValueError(f"{section} entry args must be a list: {entry}")
        if "value" in entry and not isinstance(entry["value"], (bool, int, float)):
            raise ValueError(f"{section} entry value must be a boolean or number: {entry}")


def load_instance_definition(path: str | Path) -> Dict[str, Any]:
    """Load an instance definition from JSON and perform schema checks."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    required_top_level = {"name", "domain", "objects", "non_fluents"}
    missing = required_top_level.difference(data.keys())
    if missing:
        raise ValueError(f"Missing required instance fields: {sorted(missing)}")

    if data["domain"] not in DOMAINS:
        raise ValueError(f"Unknown domain {data['domain']!r}, expected one of {sorted(DOMAINS)}")

    objects = data["objects"]
    if not isinstance(objects, dict):
        raise ValueError("objects must map type names to object id lists.")
    for type_name, ids in objects.items():
        if not isinstance(ids, list):
            raise ValueError(f"objects[{type_name!r}] must be a list.")

    _check_entries("non_fluents", data["non_fluents"])
    _check_entries("init_state", data.get("init_state", []))

    grid = data.get("grid_adjacency")
    if grid is not None and grid not in ("auto", False):
        raise ValueError("grid_adjacency must be 'auto' or false.")
    return data


def _ground_values(entries: List[Dict[str, Any]]) -> Dict[GroundVariable, Value]:
    values: Dict[GroundVariable, Value] = {}
    for entry in entries:
        ground_var = GroundVariable(str(entry["name"]), tuple(str(a) for a in entry.get("args", [])))
        values[ground_var] = entry.get("value", True)
    return values


def build_world_from_definition(instance_def: Dict[str, Any], seed: int = 0) -> ReconWorld:
    """Instantiate a recon world from a validated JSON definition."""
    domain = DOMAINS[instance_def["domain"]]()
    objects = {str(k): [str(o) for o in v] for k, v in instance_def["objects"].items()}
    missing_types = set(domain.types).difference(objects)
    if missing_types:
        raise ValueError(f"Instance is missing objects for types: {sorted(missing_types)}")

    non_fluents: Dict[GroundVariable, Value] = {}
    if instance_def.get("grid_adjacency") == "auto":
        non_fluents.update(grid_non_fluents(objects["x_pos"], objects["y_pos"]))
    non_fluents.update(_ground_values(instance_def["non_fluents"]))

    max_actions = instance_def.get("max_nondef_actions")
    return ReconWorld(
        objects=objects,
        non_fluents=non_fluents,
        init_state=_ground_values(instance_def.get("init_state", [])),
        domain=domain,
        horizon=int(instance_def.get("horizon", 40)),
        discount=float(instance_def.get("discount", 1.0)),
        max_nondef_actions=None if max_actions is None else int(max_actions),
        seed=seed,
    )


def load_world(path: str | Path, seed: int = 0) -> ReconWorld:
    """Convenience wrapper for loading and instantiating a world from JSON."""
    definition = load_instance_definition(path)
    return build_world_from_definition(definition, seed=seed)


def bundled_world_path(name: str) -> Path:
    return WORLDS_DIR / f"{name}.json"
