# tests/conftest.py
import os
import sys

import pytest

# Put the repo root (directory that contains env_recon/) on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from env_recon.fluents import ground  # noqa: E402
from env_recon.recon import grid_non_fluents  # noqa: E402
from env_recon.world import ReconWorld  # noqa: E402

X_IDS = ["x0", "x1", "x2"]
Y_IDS = ["y0", "y1", "y2"]
OBJECTS = {
    "x_pos": X_IDS,
    "y_pos": Y_IDS,
    "obj": ["o1"],
    "agent": ["a1"],
    "tool": ["camera", "water_probe", "life_probe"],
}


class FixedRng:
    """Stands in for a numpy Generator; every uniform draw returns ``value``."""

    def __init__(self, value: float):
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


def base_non_fluents():
    # 3x3 grid, base in the bottom-left corner, one object in the centre
    facts = grid_non_fluents(X_IDS, Y_IDS)
    facts.update(
        {
            ground("BASE", "x0", "y0"): True,
            ground("OBJECT_AT", "o1", "x1", "y1"): True,
            ground("HAS_WATER", "o1"): True,
            ground("HAS_LIFE", "o1"): True,
            ground("CAMERA_TOOL", "camera"): True,
            ground("WATER_TOOL", "water_probe"): True,
            ground("LIFE_TOOL", "life_probe"): True,
        }
    )
    return facts


@pytest.fixture
def fixed_rng():
    return FixedRng


@pytest.fixture
def make_world():
    """Factory for a small recon world; the agent starts on the object's cell."""

    def _make(non_fluents=None, init_state=None, agent_at=("x1", "y1"), **kwargs):
        facts = base_non_fluents()
        facts.update(non_fluents or {})
        state = {}
        if agent_at is not None:
            state[ground("agentAt", "a1", *agent_at)] = True
        state.update(init_state or {})
        return ReconWorld(objects=OBJECTS, non_fluents=facts, init_state=state, **kwargs)

    return _make
