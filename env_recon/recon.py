"""The recon domain: grid exploration with damageable sensor tools.

An agent moves on an x/y grid, applies water and life probes to objects and
photographs them with a camera. Tools may get damaged near hazards (fully
inside a hazard cell, half as likely next to one) and are repaired at base.
Reward is earned for the first good photograph of an object with detected
life; photographing an object without detected life is penalised every time.
"""

from __future__ import annotations

from typing import Dict, Sequence

from env_recon.fluents import (
    ACTION_FLUENT,
    NON_FLUENT,
    REAL,
    STATE_FLUENT,
    GroundVariable,
    VariableSpec,
)
from env_recon.formulas import (
    FALSE,
    TRUE,
    Formula,
    arith,
    bernoulli,
    case,
    conj,
    disj,
    eq,
    exists,
    fluent,
    kron_delta,
    neg,
    sum_over,
)
from env_recon.model import DomainDefinition, TransitionFunction

DOMAIN_NAME = "recon"
TYPES = ("x_pos", "y_pos", "obj", "agent", "tool")

DEFAULT_DETECT_PROB = 0.8
DEFAULT_DETECT_PROB_DAMAGED = 0.4


def _nf(name: str, *params: str, value_range: str = "bool", default=False) -> VariableSpec:
    return VariableSpec(name, NON_FLUENT, value_range, params, default)


def _sf(name: str, *params: str) -> VariableSpec:
    return VariableSpec(name, STATE_FLUENT, "bool", params, False)


def _af(name: str, *params: str) -> VariableSpec:
    return VariableSpec(name, ACTION_FLUENT, "bool", params, False)


VARIABLES = (
    # grid layout; ADJACENT-UP(?y, ?y2) means ?y2 is one step up from ?y
    _nf("ADJACENT-UP", "y_pos", "y_pos"),
    _nf("ADJACENT-DOWN", "y_pos", "y_pos"),
    _nf("ADJACENT-LEFT", "x_pos", "x_pos"),
    _nf("ADJACENT-RIGHT", "x_pos", "x_pos"),
    _nf("OBJECT_AT", "obj", "x_pos", "y_pos"),
    _nf("HAZARD", "x_pos", "y_pos"),
    _nf("BASE", "x_pos", "y_pos"),
    _nf("DAMAGE_PROB", "tool", value_range=REAL, default=0.0),
    _nf("CAMERA_TOOL", "tool"),
    _nf("WATER_TOOL", "tool"),
    _nf("LIFE_TOOL", "tool"),
    _nf("HAS_WATER", "obj"),
    _nf("HAS_LIFE", "obj"),
    _nf("DETECT_PROB", value_range=REAL, default=DEFAULT_DETECT_PROB),
    _nf("DETECT_PROB_DAMAGED", value_range=REAL, default=DEFAULT_DETECT_PROB_DAMAGED),
    _nf("GOOD_PIC_WEIGHT", value_range=REAL, default=1.0),
    _nf("BAD_PIC_WEIGHT", value_range=REAL, default=1.0),
    _sf("agentAt", "agent", "x_pos", "y_pos"),
    _sf("damaged", "tool"),
    _sf("waterChecked", "obj"),
    _sf("waterDetected", "obj"),
    _sf("lifeChecked", "obj"),
    _sf("lifeChecked2", "obj"),
    _sf("lifeDetected", "obj"),
    _sf("pictureTaken", "obj"),
    _af("up", "agent"),
    _af("down", "agent"),
    _af("left", "agent"),
    _af("right", "agent"),
    _af("useToolOn", "agent", "tool", "obj"),
    _af("repair", "agent", "tool"),
)


def _axis_step(agent: str, dec: str, inc: str, dec_adj: str, inc_adj: str, axis_type: str, src: str, dst: str) -> Formula:
    """Where ``src`` goes on one axis. Opposite moves cancel; walls block."""
    only_dec = conj(fluent(dec, agent), neg(fluent(inc, agent)))
    only_inc = conj(fluent(inc, agent), neg(fluent(dec, agent)))
    can_dec = exists([("?z", axis_type)], fluent(dec_adj, src, "?z"))
    can_inc = exists([("?z", axis_type)], fluent(inc_adj, src, "?z"))
    return disj(
        conj(only_dec, fluent(dec_adj, src, dst)),
        conj(only_inc, fluent(inc_adj, src, dst)),
        conj(
            eq(src, dst),
            neg(conj(only_dec, can_dec)),
            neg(conj(only_inc, can_inc)),
        ),
    )


def _agent_at_next() -> Formula:
    return kron_delta(
        exists(
            ["?x2 : x_pos", "?y2 : y_pos"],
            conj(
                fluent("agentAt", "?a", "?x2", "?y2"),
                _axis_step("?a", "left", "right", "ADJACENT-LEFT", "ADJACENT-RIGHT", "x_pos", "?x2", "?x"),
                _axis_step("?a", "down", "up", "ADJACENT-DOWN", "ADJACENT-UP", "y_pos", "?y2", "?y"),
            ),
        )
    )


def _adjacent_cells(x: str, y: str, x2: str, y2: str) -> Formula:
    return disj(
        conj(eq(x, x2), disj(fluent("ADJACENT-UP", y, y2), fluent("ADJACENT-DOWN", y, y2))),
        conj(eq(y, y2), disj(fluent("ADJACENT-LEFT", x, x2), fluent("ADJACENT-RIGHT", x, x2))),
    )


def _damaged_next() -> Formula:
    at_base_repairing = exists(
        ["?a : agent", "?x : x_pos", "?y : y_pos"],
        conj(fluent("repair", "?a", "?t"), fluent("agentAt", "?a", "?x", "?y"), fluent("BASE", "?x", "?y")),
    )
    in_hazard = exists(
        ["?a : agent", "?x : x_pos", "?y : y_pos"],
        conj(fluent("agentAt", "?a", "?x", "?y"), fluent("HAZARD", "?x", "?y"), neg(fluent("BASE", "?x", "?y"))),
    )
    near_hazard = exists(
        ["?a : agent", "?x : x_pos", "?y : y_pos", "?x2 : x_pos", "?y2 : y_pos"],
        conj(
            fluent("agentAt", "?a", "?x", "?y"),
            fluent("HAZARD", "?x2", "?y2"),
            _adjacent_cells("?x", "?y", "?x2", "?y2"),
        ),
    )
    # one draw per step: full, half or no damage, never combined
    return case(
        (at_base_repairing, kron_delta(FALSE)),
        (fluent("damaged", "?t"), kron_delta(TRUE)),
        (in_hazard, bernoulli(fluent("DAMAGE_PROB", "?t"))),
        (near_hazard, bernoulli(arith("/", fluent("DAMAGE_PROB", "?t"), 2.0))),
        default=kron_delta(FALSE),
    )


def tool_applied(role: str, obj: str, damaged=None) -> Formula:
    """Some agent uses a ``role`` tool on ``obj`` while standing on its cell.

    ``damaged`` restricts the tool to damaged (True) or undamaged (False) ones.
    """
    body = [
        fluent("useToolOn", "?ua", "?ut", obj),
        fluent(role, "?ut"),
        fluent("agentAt", "?ua", "?ux", "?uy"),
        fluent("OBJECT_AT", obj, "?ux", "?uy"),
    ]
    if damaged is True:
        body.append(fluent("damaged", "?ut"))
    elif damaged is False:
        body.append(neg(fluent("damaged", "?ut")))
    return exists(["?ua : agent", "?ut : tool", "?ux : x_pos", "?uy : y_pos"], conj(*body))


def _latched_check(role: str, checked: str) -> Formula:
    return case((tool_applied(role, "?o"), kron_delta(TRUE)), default=kron_delta(fluent(checked, "?o")))


def _water_detected_next() -> Formula:
    return case(
        (fluent("waterDetected", "?o"), kron_delta(TRUE)),
        # an earlier failed check contaminates the sample for good
        (fluent("waterChecked", "?o"), kron_delta(FALSE)),
        (
            conj(fluent("HAS_WATER", "?o"), tool_applied("WATER_TOOL", "?o", damaged=False)),
            bernoulli(fluent("DETECT_PROB")),
        ),
        (
            conj(fluent("HAS_WATER", "?o"), tool_applied("WATER_TOOL", "?o", damaged=True)),
            bernoulli(fluent("DETECT_PROB_DAMAGED")),
        ),
        default=kron_delta(FALSE),
    )


def _life_checked2_next() -> Formula:
    return case(
        (conj(fluent("lifeChecked", "?o"), tool_applied("LIFE_TOOL", "?o")), kron_delta(TRUE)),
        default=kron_delta(fluent("lifeChecked2", "?o")),
    )


def _life_detected_next() -> Formula:
    evidence = conj(fluent("waterDetected", "?o"), fluent("HAS_LIFE", "?o"))
    return case(
        (fluent("lifeDetected", "?o"), kron_delta(TRUE)),
        # two failed life checks exhaust the sample
        (fluent("lifeChecked2", "?o"), kron_delta(FALSE)),
        (conj(evidence, tool_applied("LIFE_TOOL", "?o", damaged=False)), bernoulli(fluent("DETECT_PROB"))),
        (conj(evidence, tool_applied("LIFE_TOOL", "?o", damaged=True)), bernoulli(fluent("DETECT_PROB_DAMAGED"))),
        default=kron_delta(FALSE),
    )


def _picture_taken_next() -> Formula:
    return case(
        (tool_applied("CAMERA_TOOL", "?o", damaged=False), kron_delta(TRUE)),
        default=kron_delta(fluent("pictureTaken", "?o")),
    )


def _reward() -> Formula:
    photo = tool_applied("CAMERA_TOOL", "?o", damaged=False)
    good = conj(photo, fluent("lifeDetected", "?o"), neg(fluent("pictureTaken", "?o")))
    # no pictureTaken guard here: repeated bad pictures keep costing
    bad = conj(photo, neg(fluent("lifeDetected", "?o")))
    return sum_over(
        ["?o : obj"],
        arith(
            "-",
            arith("*", fluent("GOOD_PIC_WEIGHT"), good),
            arith("*", fluent("BAD_PIC_WEIGHT"), bad),
        ),
    )


def build_recon_domain() -> DomainDefinition:
    transitions = (
        TransitionFunction("agentAt", ("?a", "?x", "?y"), _agent_at_next()),
        TransitionFunction("damaged", ("?t",), _damaged_next()),
        TransitionFunction("waterChecked", ("?o",), _latched_check("WATER_TOOL", "waterChecked")),
        TransitionFunction("waterDetected", ("?o",), _water_detected_next()),
        TransitionFunction("lifeChecked", ("?o",), _latched_check("LIFE_TOOL", "lifeChecked")),
        TransitionFunction("lifeChecked2", ("?o",), _life_checked2_next()),
        TransitionFunction("lifeDetected", ("?o",), _life_detected_next()),
        TransitionFunction("pictureTaken", ("?o",), _picture_taken_next()),
    )
    return DomainDefinition(
        name=DOMAIN_NAME,
        types=TYPES,
        variables=VARIABLES,
        transitions=transitions,
        reward=_reward(),
    )


def grid_non_fluents(x_ids: Sequence[str], y_ids: Sequence[str]) -> Dict[GroundVariable, bool]:
    """ADJACENT-* facts for a rectangular grid; ``y_ids`` run bottom to top."""
    facts: Dict[GroundVariable, bool] = {}
    for lo, hi in zip(x_ids, x_ids[1:]):
        facts[GroundVariable("ADJACENT-RIGHT", (lo, hi))] = True
        facts[GroundVariable("ADJACENT-LEFT", (hi, lo))] = True
    for lo, hi in zip(y_ids, y_ids[1:]):
        facts[GroundVariable("ADJACENT-UP", (lo, hi))] = True
        facts[GroundVariable("ADJACENT-DOWN", (hi, lo))] = True
    return facts