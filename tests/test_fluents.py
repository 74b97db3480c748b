# tests/test_fluents.py
import pytest

from env_recon.errors import ArityMismatchError, ReconDomainError, UndeclaredVariableError, UnknownTypeError
from env_recon.fluents import (
    ACTION_FLUENT,
    NON_FLUENT,
    REAL,
    STATE_FLUENT,
    FluentStore,
    GroundVariable,
    VariableSpec,
    ground,
)
from env_recon.objects import ObjectRegistry


def _store():
    registry = ObjectRegistry({"obj": ["o1", "o2"], "tool": ["t1"]})
    variables = [
        VariableSpec("HAS_LIFE", NON_FLUENT, "bool", ("obj",)),
        VariableSpec("DAMAGE_PROB", NON_FLUENT, REAL, ("tool",), 0.25),
        VariableSpec("seen", STATE_FLUENT, "bool", ("obj",)),
        VariableSpec("damaged", STATE_FLUENT, "bool", ("tool",)),
        VariableSpec("poke", ACTION_FLUENT, "bool", ("obj",)),
    ]
    return FluentStore(
        registry,
        variables,
        non_fluents={ground("HAS_LIFE", "o2"): True},
        init_state={ground("seen", "o1"): True},
    )


def test_get_returns_explicit_value_or_declared_default():
    store = _store()
    assert store.get(ground("HAS_LIFE", "o2")) is True
    assert store.get(ground("HAS_LIFE", "o1")) is False
    assert store.get(ground("DAMAGE_PROB", "t1")) == pytest.approx(0.25)
    assert store.get(ground("seen", "o1")) is True
    assert store.get(ground("seen", "o2")) is False


def test_initial_snapshot_covers_every_ground_state_fluent():
    store = _store()
    assert set(store.snapshot()) == {
        ground("seen", "o1"),
        ground("seen", "o2"),
        ground("damaged", "t1"),
    }


def test_undeclared_variable_raises():
    store = _store()
    with pytest.raises(UndeclaredVariableError):
        store.get(ground("HAS_WATER", "o1"))


def test_wrong_arity_or_type_raises():
    store = _store()
    with pytest.raises(ArityMismatchError):
        store.get(ground("HAS_LIFE"))
    with pytest.raises(ArityMismatchError):
        store.get(ground("HAS_LIFE", "o1", "o2"))
    with pytest.raises(ArityMismatchError):
        store.get(ground("HAS_LIFE", "t1"))


def test_action_fluents_are_not_read_from_the_store():
    store = _store()
    with pytest.raises(ReconDomainError):
        store.get(ground("poke", "o1"))


def test_stage_does_not_touch_current_snapshot_until_commit():
    store = _store()
    before = store.snapshot()
    store.stage(ground("seen", "o2"), True)
    assert store.get(ground("seen", "o2")) is False
    assert dict(store.staged) == {ground("seen", "o2"): True}

    after = store.commit()
    assert after[ground("seen", "o2")] is True
    assert before[ground("seen", "o2")] is False
    assert dict(store.staged) == {}


def test_unstaged_fluents_keep_their_value_across_commit():
    store = _store()
    store.stage(ground("damaged", "t1"), True)
    store.commit()
    assert store.get(ground("seen", "o1")) is True
    assert store.get(ground("damaged", "t1")) is True


def test_snapshot_is_read_only():
    store = _store()
    with pytest.raises(TypeError):
        store.snapshot()[ground("seen", "o1")] = False


def test_stage_rejects_non_state_variables():
    store = _store()
    with pytest.raises(ReconDomainError):
        store.stage(ground("HAS_LIFE", "o1"), True)


def test_get_reads_an_explicit_snapshot():
    store = _store()
    old = store.snapshot()
    store.stage(ground("seen", "o1"), False)
    store.commit()
    assert store.get(ground("seen", "o1")) is False
    assert store.get(ground("seen", "o1"), old) is True


def test_reset_and_discard():
    store = _store()
    store.stage(ground("seen", "o2"), True)
    store.discard()
    assert store.commit()[ground("seen", "o2")] is False

    store.stage(ground("seen", "o1"), False)
    store.commit()
    assert store.reset()[ground("seen", "o1")] is True


def test_declarations_are_validated():
    registry = ObjectRegistry({"obj": ["o1"]})
    with pytest.raises(ValueError):
        FluentStore(
            registry,
            [VariableSpec("a", STATE_FLUENT, "bool", ("obj",)), VariableSpec("a", STATE_FLUENT, "bool", ("obj",))],
        )
    with pytest.raises(UnknownTypeError):
        FluentStore(registry, [VariableSpec("a", STATE_FLUENT, "bool", ("planet",))])
    with pytest.raises(ValueError):
        VariableSpec("b", STATE_FLUENT, REAL, ("obj",))


def test_instance_values_must_match_variable_kind():
    registry = ObjectRegistry({"obj": ["o1"]})
    variables = [VariableSpec("seen", STATE_FLUENT, "bool", ("obj",))]
    with pytest.raises(ReconDomainError):
        FluentStore(registry, variables, non_fluents={ground("seen", "o1"): True})


def test_plain_tuple_keys_are_normalised():
    registry = ObjectRegistry({"obj": ["o1"]})
    variables = [VariableSpec("FLAG", NON_FLUENT, "bool", ("obj",))]
    store = FluentStore(registry, variables, non_fluents={("FLAG", ("o1",)): 1})
    assert store.get(GroundVariable("FLAG", ("o1",))) is True
