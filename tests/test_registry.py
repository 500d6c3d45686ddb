import pytest

from actionize import (
    Actionize, ActionTypeRegistry, AlreadyDefined, DuplicateActionType, InvalidKey,
    InvalidNamespace, NotAFunction, NotDefined, create_reducer, global_error_handler,
)


@pytest.fixture
def actionize(registry):
    return Actionize({"registry": registry})


def set_bar(state, action):
    return {**state, "bar": action["bar"]}


def test_set_requires_function(actionize):
    with pytest.raises(NotAFunction, match="Creator given must be a function."):
        actionize.set("foo", "not a function")


def test_set_rejects_defined_name(actionize):
    actionize.set("foo", lambda build: build.reducer())
    with pytest.raises(AlreadyDefined, match="Name given already defined."):
        actionize.set("foo", lambda build: build.reducer())


def test_set_validates_name(actionize):
    with pytest.raises(InvalidNamespace, match="Actionize name cannot contain"):
        actionize.set("foo:bar", lambda build: build.reducer())
    with pytest.raises(InvalidNamespace, match="Actionize name must be a string."):
        actionize.set(1, lambda build: build.reducer())


def test_get_unknown_name(actionize):
    with pytest.raises(NotDefined, match=r"Name given to actionize.get\(name\) is not defined."):
        actionize.get("missing")


def test_get_requires_creator_to_return_function(actionize):
    actionize.set("foo", lambda build: {"not": "a reducer"})
    with pytest.raises(NotAFunction, match='Creator given for "foo" must return a function.'):
        actionize.get("foo")


def test_creator_is_lazy_and_memoized(actionize):
    calls = []

    def creator(build):
        calls.append(build.name)
        return build.reducer({}, {"setBar": set_bar})

    actionize.set("foo", creator)
    assert actionize.has("foo")
    assert not actionize.has("bar")
    assert calls == []
    first = actionize.get("foo")
    assert actionize.get("foo") is first
    assert calls == ["foo"]
    assert first.setBar.type == "|foo:setBar"


def test_define_returns_reducer(actionize):
    foo = actionize.define("foo", lambda build: build.reducer({"bar": None}, {"setBar": set_bar}))
    assert foo(action={"type": foo.setBar.type, "bar": 1}) == {"bar": 1}


def test_nested_defined_reducers(actionize):
    bar = actionize.define("bar", lambda build: build.reducer({"v": 0}, {
        "setV": lambda state, action: {"v": action["v"]},
    }))
    foo = actionize.define("foo", lambda build: build.nest_plain(
        build.reducer({}, {"reset": lambda state, action: {}}),
        {"bar": actionize.get("bar")},
    ))
    assert foo.bar is bar
    assert foo.reset.type == "|foo:reset"
    assert foo(None, {"type": bar.setV.type, "v": 5}) == {"bar": {"v": 5}}


def test_duplicate_types_in_one_tree(actionize):
    # 兩個獨立的註冊表會配發相同的 action type
    def creator(build):
        return build.combine_plain({
            "a": create_reducer("dup", {}, {"setBar": set_bar}, registry=ActionTypeRegistry()),
            "b": create_reducer("dup", {}, {"setBar": set_bar}, registry=ActionTypeRegistry()),
        })

    actionize.set("foo", creator)
    with pytest.raises(DuplicateActionType, match=r'Action "\|dup:setBar" is defined twice.'):
        actionize.get("foo")


def test_duplicate_types_across_names():
    actionize = Actionize()
    actionize.define("one", lambda build: create_reducer("dup", {}, {"x": set_bar}, registry=ActionTypeRegistry()))
    actionize.set("two", lambda build: create_reducer("dup", {}, {"x": set_bar}, registry=ActionTypeRegistry()))
    with pytest.raises(DuplicateActionType):
        actionize.get("two")
    # 失敗的 get 不會快取結果
    with pytest.raises(DuplicateActionType):
        actionize.get("two")


def test_plain_function_creators_skip_validation(actionize):
    identity = actionize.define("fn", lambda build: lambda state=None, action=None: state)
    assert identity("s", {"type": "|x:y"}) == "s"


def test_static_validators():
    Actionize.validate_name("todos")
    Actionize.validate_action_key("add")
    with pytest.raises(InvalidNamespace):
        Actionize.validate_name("a|b")
    with pytest.raises(InvalidKey):
        Actionize.validate_action_key("a.b")


def test_dispatcher(actionize):
    foo = actionize.define("foo", lambda build: build.reducer({}, {"setBar": set_bar}))
    sent = []
    bound = actionize.dispatcher({"foo": foo}, sent.append)
    bound.foo.setBar({"bar": 2})
    assert sent == [{"bar": 2, "type": foo.setBar.type}]


def test_errors_are_reported_once(actionize, monkeypatch):
    reported = []
    monkeypatch.setattr(global_error_handler, "handlers", [reported.append])
    actionize.set("foo", lambda build: build.reducer())
    with pytest.raises(AlreadyDefined) as exc_info:
        actionize.define("foo", lambda build: build.reducer())
    assert reported == [exc_info.value]
