import pytest
from immutables import Map

from actionize import (
    UNSET, CombinedReducer, MissingStructureProvider, NestedReducer, NotAFunction,
    combine, combine_immutable, combine_plain, create_reducer,
    handle, immutable_merge, nest, nest_immutable, nest_plain, plain_merge, plain_pick,
)


@pytest.fixture
def plain_reducers(registry):
    r1 = create_reducer("c1", {"c1": True}, {
        "foo": lambda state, action: {**state, "foo": True},
    }, registry=registry)
    r2 = create_reducer("c2", {"c2": True}, {
        "bar": lambda state, action: {**state, "bar": True},
    }, registry=registry)
    return r1, r2


@pytest.fixture
def immutable_reducers(registry):
    r1 = create_reducer("ci1", Map({"c1": True}), {
        "foo": lambda state, action: state.set("foo", True),
    }, registry=registry)
    r2 = create_reducer("ci2", Map({"c2": True}), {
        "bar": lambda state, action: state.set("bar", True),
    }, registry=registry)
    return r1, r2


def to_plain(value):
    if isinstance(value, Map):
        return {k: to_plain(v) for k, v in value.items()}
    return value


def check_combined_plain(combined, r1, r2):
    state = combined()
    assert state == {"r1": {"c1": True}, "r2": {"c2": True}}
    state = combined(state, {"type": r1.foo.type})
    assert state == {"r1": {"c1": True, "foo": True}, "r2": {"c2": True}}
    state = combined(state, {"type": r2.bar.type})
    assert state == {"r1": {"c1": True, "foo": True}, "r2": {"c2": True, "bar": True}}
    assert combined(state, {"type": "|no-handler"}) is state


def test_combine_works(plain_reducers):
    r1, r2 = plain_reducers
    combined = combine(
        {"r1": r1, "r2": r2},
        lambda state, key: state and state[key],
        lambda state, values: values,
    )
    assert isinstance(combined, CombinedReducer)
    check_combined_plain(combined, r1, r2)


def test_combine_plain_works(plain_reducers):
    r1, r2 = plain_reducers
    check_combined_plain(combine_plain({"r1": r1, "r2": r2}), r1, r2)


def test_combine_only_updates_matching_slot(plain_reducers):
    r1, r2 = plain_reducers
    combined = combine_plain({"r1": r1, "r2": r2})
    state = combined()
    next_state = combined(state, {"type": r1.foo.type})
    assert next_state is not state
    assert next_state["r1"] is not state["r1"]
    assert next_state["r2"] is state["r2"]


def test_combine_does_not_join_without_changes(registry):
    r1 = create_reducer("nochange1", None, {"a1": lambda state, action: "r1a1"}, registry=registry)
    r2 = create_reducer("nochange2", None, {"a2": lambda state, action: "r2a2"}, registry=registry)
    joins = []

    def join(state, values):
        joins.append(values)
        return "not-called"

    combined = combine({"r1": r1, "r2": r2}, lambda state, key: state and state[key], join)
    state = {"r1": None, "r2": None}
    assert combined(state, {"type": "|bar:x"}) is state
    assert joins == []


def test_combine_collects_all_values(registry):
    r1 = create_reducer("all1", None, {"a1": lambda state, action: "r1a1"}, registry=registry)
    r2 = create_reducer("all2", None, {"a2": lambda state, action: "r2a2"}, registry=registry)
    combined = combine({"r1": r1, "r2": r2}, plain_pick, lambda state, values: values)
    assert combined(None, {"type": r1.a1.type}) == {"r1": "r1a1", "r2": None}
    assert combined(None, {"type": r2.a2.type}) == {"r1": None, "r2": "r2a2"}


def test_combine_iterates_in_insertion_order(registry):
    seen = []

    def tracking(name):
        def reducer(state=None, action=None):
            seen.append(name)
            return state
        return reducer

    combined = combine({"b": tracking("b"), "a": tracking("a"), "c": tracking("c")}, plain_pick, plain_merge)
    combined({}, {"type": "|any:x"})
    assert seen == ["b", "a", "c"]


def test_combine_exposes_children(plain_reducers):
    r1, r2 = plain_reducers
    combined = combine_plain({"a": r1, "b": r2})
    assert combined.a is r1
    assert combined.b is r2
    assert combined.a.foo is r1.foo
    assert list(combined.members) == ["a", "b"]


def test_combine_rejects_non_callables(plain_reducers):
    r1, _ = plain_reducers
    with pytest.raises(NotAFunction):
        combine_plain({"r1": r1, "r2": "not-a-reducer"})


def test_combine_immutable_works(immutable_reducers):
    r1, r2 = immutable_reducers
    combined = combine_immutable({"r1": r1, "r2": r2}, Map)
    state = combined()
    assert isinstance(state, Map)
    assert to_plain(state) == {"r1": {"c1": True}, "r2": {"c2": True}}
    state = combined(state, {"type": r1.foo.type})
    assert to_plain(state) == {"r1": {"c1": True, "foo": True}, "r2": {"c2": True}}
    state = combined(state, {"type": r2.bar.type})
    assert to_plain(state) == {"r1": {"c1": True, "foo": True}, "r2": {"c2": True, "bar": True}}
    assert combined(state, {"type": "|no-handler"}) is state


def test_combine_immutable_custom_structure(immutable_reducers):
    r1, r2 = immutable_reducers
    calls = []

    def structure(values):
        calls.append(values)
        return Map(values)

    combined = combine_immutable({"r1": r1, "r2": r2}, structure)
    combined(Map({"r1": Map(), "r2": Map()}), {"type": r1.foo.type})
    assert len(calls) == 1


def test_combine_immutable_requires_structure(immutable_reducers):
    r1, r2 = immutable_reducers
    with pytest.raises(MissingStructureProvider, match="requires an immutable structure"):
        combine_immutable({"r1": r1, "r2": r2}, None)


@pytest.fixture
def nest_reducers(registry):
    r1 = create_reducer("n1", {"n1": True}, {
        "foo": lambda state, action: {**state, "foo": True},
    }, registry=registry)
    r2 = create_reducer("n2", {"n2": True}, {
        "bar": lambda state, action: {**state, "bar": True},
    }, registry=registry)
    return r1, r2


def check_nest_plain(nested, r1, r2):
    state = nested()
    assert state == {"n1": True, "r2": {"n2": True}}
    state = nested(state, {"type": r1.foo.type})
    assert state == {"n1": True, "foo": True, "r2": {"n2": True}}
    state = nested(state, {"type": r2.bar.type})
    assert state == {"n1": True, "foo": True, "r2": {"n2": True, "bar": True}}
    assert nested(state, {"type": "|no-handler"}) is state


def test_nest_works(nest_reducers):
    r1, r2 = nest_reducers
    nested = nest(
        r1,
        {"r2": r2},
        lambda state, key: state.get(key, UNSET),
        lambda state, values: {**state, **values},
    )
    assert isinstance(nested, NestedReducer)
    check_nest_plain(nested, r1, r2)


def test_nest_plain_works(nest_reducers):
    r1, r2 = nest_reducers
    check_nest_plain(nest_plain(r1, {"r2": r2}), r1, r2)


def test_nest_scenario(registry):
    parent = create_reducer("parent", {"p": 1}, {}, registry=registry)
    child = create_reducer("child", {"c": 2}, {}, registry=registry)
    assert nest_plain(parent, {"c": child})() == {"p": 1, "c": {"c": 2}}


def test_nest_parent_runs_first(registry):
    r1 = create_reducer("first1", None, {"a1": lambda state, action: {"r1v": "r1a1"}}, registry=registry)
    r2 = create_reducer("first2", None, {"a2": lambda state, action: {"r2v": "r2a2"}}, registry=registry)
    nested = nest_plain(r1, {"r2": r2})
    assert nested(None, {"type": r1.a1.type}) == {"r1v": "r1a1", "r2": None}
    assert nested(None, {"type": r2.a2.type}) == {"r2": {"r2v": "r2a2"}}
    assert nested({"r1v": "r1a1"}, {"type": r2.a2.type}) == {"r1v": "r1a1", "r2": {"r2v": "r2a2"}}


def test_nest_exposes_parent_actions_only(registry):
    r1 = create_reducer("copy1", None, {"a1": lambda state, action: "x"}, registry=registry)
    r2 = create_reducer("copy2", None, {"a2": lambda state, action: "y"}, registry=registry)
    r1.no_copy1 = 123
    r1.no_copy2 = lambda: None
    nested = nest_plain(r1, {"r2": r2})
    assert nested.a1 is r1.a1
    assert nested.r2 is r2
    assert nested.r2.a2 is r2.a2
    assert not hasattr(nested, "no_copy1")
    assert not hasattr(nested, "no_copy2")
    assert set(nested.members) == {"r2", "a1"}


def test_nest_immutable_works(immutable_reducers, registry):
    r1 = create_reducer("ni1", Map({"n1": True}), {
        "foo": lambda state, action: state.set("foo", True),
    }, registry=registry)
    _, r2 = immutable_reducers
    nested = nest_immutable(r1, {"r2": r2})
    state = nested()
    assert to_plain(state) == {"n1": True, "r2": {"c2": True}}
    state = nested(state, {"type": r1.foo.type})
    assert to_plain(state) == {"n1": True, "foo": True, "r2": {"c2": True}}
    state = nested(state, {"type": r2.bar.type})
    assert to_plain(state) == {"n1": True, "foo": True, "r2": {"c2": True, "bar": True}}
    assert nested(state, {"type": "|no-handler"}) is state


def test_immutable_merge_prefers_merge_method():
    class Structure:
        def __init__(self, values):
            self.values = values

        def get(self, key, default=None):
            return self.values.get(key, default)

        def merge(self, values):
            return Structure({**self.values, **values})

    merged = immutable_merge(Structure({"a": 1}), {"b": 2})
    assert merged.values == {"a": 1, "b": 2}
    assert immutable_merge(Map({"a": 1}), {"b": 2}) == Map({"a": 1, "b": 2})


def test_immutable_merge_requires_structure():
    with pytest.raises(MissingStructureProvider):
        immutable_merge({"a": 1}, {"b": 2})


def test_nest_rejects_non_callable_parent(nest_reducers):
    _, r2 = nest_reducers
    with pytest.raises(NotAFunction):
        nest_plain({"not": "a reducer"}, {"r2": r2})


def test_multi_level_composition(registry):
    leaf = create_reducer("leaf", 0, {"inc": lambda state, action: state + 1}, registry=registry)
    other = create_reducer("other", 0, {"inc": lambda state, action: state + 1}, registry=registry)
    inner = combine_plain({"leaf": leaf})
    outer = combine_plain({"inner": inner, "other": other})

    state = outer()
    assert state == {"inner": {"leaf": 0}, "other": 0}
    next_state = outer(state, {"type": outer.inner.leaf.inc.type})
    assert next_state == {"inner": {"leaf": 1}, "other": 0}
    assert outer(next_state, {"type": "|none:x"}) is next_state


def test_combine_keys_take_precedence_over_reducer_attributes(registry):
    keys = ["reducers", "pick", "join", "members", "id", "action_types"]
    children = {
        key: create_reducer("key_" + key, 0, {"inc": lambda state, action: state + 1}, registry=registry)
        for key in keys
    }
    combined = combine_plain(children)
    for key in keys:
        assert getattr(combined, key) is children[key]
    state = combined()
    assert state == {key: 0 for key in keys}
    assert combined(state, {"type": children["pick"].inc.type})["pick"] == 1
    assert handle(combined) == "".join(child.inc.type for child in children.values())


def test_nest_keys_take_precedence_over_reducer_attributes(registry):
    parent = create_reducer("shadow_parent", {}, {}, registry=registry)
    first = create_reducer("shadow_first", 1, {}, registry=registry)
    second = create_reducer("shadow_second", 2, {}, registry=registry)
    nested = nest_plain(parent, {"parent": first, "nested": second})
    assert nested.parent is first
    assert nested.nested is second
    assert nested() == {"parent": 1, "nested": 2}


def test_none_child_state_survives_unrelated_messages(registry):
    r = create_reducer("nonechild", 0, {"clear": lambda state, action: None}, registry=registry)
    combined = combine_plain({"r": r})
    state = combined(combined(), {"type": r.clear.type})
    assert state == {"r": None}
    assert combined(state, {"type": "|unrelated:x"}) is state


def test_none_child_state_survives_in_immutable_structures(registry):
    r = create_reducer("nonechild_i", 0, {"clear": lambda state, action: None}, registry=registry)
    combined = combine_immutable({"r": r}, Map)
    state = combined(combined(), {"type": r.clear.type})
    assert state == Map({"r": None})
    assert combined(state, {"type": "|unrelated:x"}) is state


def test_missing_child_state_uses_initial_state(registry):
    r = create_reducer("missing_child", 0, {}, registry=registry)
    combined = combine_plain({"r": r})
    assert combined({}, {"type": "|unrelated:x"}) == {"r": 0}
    assert plain_pick({}, "r") is UNSET
    assert plain_pick({"r": None}, "r") is None


def test_plain_function_children_receive_none_for_missing_state():
    seen = []

    def child(state, action):
        seen.append(state)
        return state

    combined = combine_plain({"c": child})
    assert combined() is None
    assert seen == [None]
