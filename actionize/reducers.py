"""
基於 Actionize 的 Reducer 建構模組。

此模組將 action 鍵到處理函數的映射轉換為單一的 reducer：
每個直接宣告的鍵會配發一個 action type 並暴露為 reducer 的成員，
以分隔字元開頭的組合鍵則讓處理函數同時處理其他 reducer 的 action。
"""
import itertools
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from .action_types import (
    ActionTypeRegistry, default_registry, is_composite_key,
    join_action_types, split_action_types, validate_namespace,
)
from .types import AnyMessage, ContextProvider, Handler

# 每個 reducer 在建構時取得的穩定識別碼
_reducer_ids = itertools.count(1)


class _Unset:
    """沒有狀態的標記。與 None 不同，None 是合法的狀態值。"""
    __slots__ = ()

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNSET"


# 狀態缺席：reducer 以初始狀態代替，pick 在鍵不存在時返回
UNSET = _Unset()


def action_type_of(action: AnyMessage) -> Optional[str]:
    """
    取得訊息的 action type。

    Args:
        action: Mapping 形式（"type" 鍵）或帶有 type 屬性的訊息

    Returns:
        action type，沒有時返回 None
    """
    if action is None:
        return None
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


class BoundAction:
    """
    直接宣告的 action 處理器。

    屬性:
        type: 配發的 action type
        key: action 鍵
        handler: 原始處理函數 (state, action) -> state
        reducer: 擁有此 action 的 reducer
    """
    __slots__ = ("type", "key", "handler", "reducer", "context")

    def __init__(self, action_type: str, key: str, handler: Handler, reducer: "Reducer",
                 context: Optional[ContextProvider] = None):
        super().__setattr__("type", action_type)
        super().__setattr__("key", key)
        super().__setattr__("handler", handler)
        super().__setattr__("reducer", reducer)
        super().__setattr__("context", context)

    def __setattr__(self, name, value):
        raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")

    def __call__(self, state: Any = None, action: AnyMessage = None) -> Any:
        if self.context is not None:
            # context 作為接收者（self）傳入
            receiver = self.context(self.handler, self.reducer)
            return self.handler(receiver, state, action)
        return self.handler(state, action)

    def __repr__(self):
        return f"BoundAction(type='{self.type}')"


class DirectHandler(NamedTuple):
    """直接宣告的 action 鍵。"""
    key: str
    handler: Handler


class CompositeHandlerKey(NamedTuple):
    """處理外部 action type 的組合鍵。"""
    key: str
    types: Tuple[str, ...]
    handler: Handler


class Ignored(NamedTuple):
    """不是處理函數的值，或空的組合鍵。"""
    key: Any
    value: Any


ActionEntry = Union[DirectHandler, CompositeHandlerKey, Ignored]


def classify_action_entry(key: Any, value: Any) -> ActionEntry:
    """
    在建構時將 action 映射中的一個項目分類一次。

    Args:
        key: action 映射的鍵
        value: 對應的值

    Returns:
        DirectHandler、CompositeHandlerKey 或 Ignored
    """
    if not callable(value) or key == "":
        return Ignored(key, value)
    if is_composite_key(key):
        return CompositeHandlerKey(key, tuple(split_action_types(key)), value)
    return DirectHandler(key, value)


class BaseReducer:
    """
    所有 reducer（建構的與組合的）的共同基底。

    成員（members）是以名稱暴露的 BoundAction 或子 reducer，
    可以用屬性 (``reducer.add``) 或 ``reducer.members["add"]`` 取得。
    成員優先於 reducer 自身的公開屬性：鍵為 ``namespace`` 的 action
    以 ``reducer.namespace`` 取得的是該 action，而非命名空間。
    reducer 自身的狀態一律存放在底線開頭的屬性中。
    """

    def __init__(self):
        self._id = next(_reducer_ids)
        self._members: Dict[str, Any] = {}

    def __getattribute__(self, name: str) -> Any:
        if not name.startswith("_"):
            members = object.__getattribute__(self, "__dict__").get("_members")
            if members is not None and name in members:
                return members[name]
        return object.__getattribute__(self, name)

    @property
    def id(self) -> int:
        """建構時配發的穩定識別碼。"""
        return self._id

    @property
    def members(self) -> Mapping[str, Any]:
        """唯讀的成員映射。"""
        return MappingProxyType(self._members)

    def __call__(self, state: Any = UNSET, action: AnyMessage = None) -> Any:
        raise NotImplementedError

    def bound_actions(self) -> Dict[str, BoundAction]:
        """只返回直接暴露的 BoundAction 成員。"""
        return self._bound_actions()

    def action_types(self) -> List[str]:
        """此 reducer 會處理的所有 action type。"""
        return self._action_types()

    def _bound_actions(self) -> Dict[str, BoundAction]:
        return {key: value for key, value in self._members.items() if isinstance(value, BoundAction)}

    def _action_types(self) -> List[str]:
        raise NotImplementedError


class Reducer(BaseReducer):
    """
    由命名空間、初始狀態與 action 映射建構的 reducer。

    Attributes:
        namespace: 命名空間
        initial_state: 初始狀態，沒有傳入狀態時使用
    """

    def __init__(self, namespace: str, initial_state: Any = None, actions: Optional[Mapping[Any, Any]] = None,
                 context: Optional[ContextProvider] = None, registry: Optional[ActionTypeRegistry] = None):
        super().__init__()
        validate_namespace(namespace)
        self._namespace = namespace
        self._initial_state = initial_state
        registry = registry or default_registry
        handlers: Dict[str, List[Handler]] = {}

        for key, value in (actions or {}).items():
            entry = classify_action_entry(key, value)
            if isinstance(entry, DirectHandler):
                action_type = registry.allocate(namespace, entry.key)
                bound = BoundAction(action_type, entry.key, entry.handler, self, context)
                self._members[entry.key] = bound
                handlers.setdefault(action_type, []).append(bound)
            elif isinstance(entry, CompositeHandlerKey):
                for action_type in entry.types:
                    handlers.setdefault(action_type, []).append(entry.handler)

        self._handlers = {action_type: tuple(items) for action_type, items in handlers.items()}

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def initial_state(self) -> Any:
        return self._initial_state

    @property
    def handlers(self) -> Mapping[str, Tuple[Handler, ...]]:
        """唯讀的 dispatch table：action type 到處理函數序列。"""
        return MappingProxyType(self._handlers)

    def _action_types(self) -> List[str]:
        return list(self._handlers)

    def __call__(self, state: Any = UNSET, action: AnyMessage = None) -> Any:
        """
        根據 action 處理狀態變更。

        Args:
            state: 當前狀態，省略或為 UNSET 時使用初始狀態；None 是一般的狀態值
            action: 要處理的訊息

        Returns:
            新的狀態；沒有對應處理函數時返回原狀態（同一個引用）
        """
        if state is UNSET:
            state = self._initial_state

        action_type = action_type_of(action)
        if not action_type:
            return state

        for handler in self._handlers.get(action_type, ()):
            state = handler(state, action)
        return state

    def __repr__(self):
        return f"Reducer(namespace='{self._namespace}', actions={list(self._members)})"


def create_reducer(namespace: str, initial_state: Any = None, actions: Optional[Mapping[Any, Any]] = None, *,
                   context: Optional[ContextProvider] = None,
                   registry: Optional[ActionTypeRegistry] = None) -> Reducer:
    """
    創建一個 reducer。

    Args:
        namespace: reducer 的命名空間
        initial_state: 初始狀態
        actions: action 鍵到處理函數的映射
        context: 可選的 context 提供者，接收 (handler, reducer) 並返回處理函數的接收者
        registry: 可選的 action type 註冊表，預設為行程範圍的註冊表

    Returns:
        新的 Reducer

    範例:
        >>> todos = create_reducer("todos", [], {
        ...     "add": lambda state, action: [*state, action["text"]],
        ... })
        >>> todos([], {"type": todos.add.type, "text": "x"})
        ['x']
    """
    return Reducer(namespace, initial_state, actions, context=context, registry=registry)


def _resolve_handle_item(item: Any) -> Iterable[str]:
    if isinstance(item, str):
        return [item]
    if isinstance(item, BoundAction):
        return [item.type]
    if isinstance(item, BaseReducer):
        return item._action_types()
    if callable(item):
        action_type = getattr(item, "type", None)
        if isinstance(action_type, str):
            return [action_type]
    return []


def handle(*items: Any) -> str:
    """
    從多種輸入產生處理外部 action 的組合鍵。

    Args:
        *items: action type 字串、BoundAction，或整個 reducer（處理其所有 action）

    Returns:
        串接後的組合鍵字串；無法解析的項目會被忽略

    範例:
        >>> reducer = create_reducer("stats", {}, {
        ...     handle(todos.add, todos.remove): count_changes,
        ... })
    """
    return join_action_types(
        action_type
        for item in items
        for action_type in _resolve_handle_item(item)
        if action_type
    )
