"""
Dispatcher 樹建構模組。

將 reducer / action 樹轉換為結構平行的 dispatcher 樹：
每個帶有 action type 的葉節點都變成一個以 payload 呼叫的函數，
呼叫時會把 ``{**payload, "type": <type>}`` 交給 dispatch。
"""
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from .immutable_utils import to_message
from .middleware import apply_middleware
from .reducers import BaseReducer, BoundAction
from .types import Dispatch


class ActionInvoker:
    """
    綁定到 dispatch 的 action 呼叫器。

    屬性:
        type: 送出訊息時寫入的 action type
        dispatch: 訊息出口
    """
    __slots__ = ("type", "dispatch")

    def __init__(self, action_type: str, dispatch: Dispatch):
        self.type = action_type
        self.dispatch = dispatch

    def __call__(self, payload: Any = None, **fields: Any) -> Any:
        return self.dispatch(to_message(self.type, payload, fields))

    def __repr__(self):
        return f"ActionInvoker(type='{self.type}')"


class Dispatcher(Mapping):
    """唯讀的 dispatcher 節點，可以用屬性或索引存取子節點。"""

    def __init__(self, items: Dict[str, Any]):
        self._items = items

    def __getitem__(self, key: str) -> Any:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getattr__(self, name: str) -> Any:
        items = self.__dict__.get("_items")
        if items is not None and name in items:
            return items[name]
        raise AttributeError(f"'{type(self).__name__}' object has no member '{name}'")

    def __repr__(self):
        return f"Dispatcher({self._items!r})"


def _leaf_type(value: Any) -> Optional[str]:
    if isinstance(value, BoundAction):
        return value.type
    if callable(value) and not isinstance(value, BaseReducer):
        action_type = getattr(value, "type", None)
        if isinstance(action_type, str):
            return action_type
    return None


def _children(node: Any) -> Iterator[Tuple[str, Any]]:
    if isinstance(node, BaseReducer):
        return iter(node._members.items())
    if isinstance(node, Mapping):
        return iter(node.items())
    return iter(())


def dispatcher(actions: Any, dispatch: Dispatch, *middlewares: Any) -> Union[Dispatcher, ActionInvoker]:
    """
    從 action 樹建立 dispatcher 樹。

    Args:
        actions: reducer、BoundAction，或巢狀的 dict
        dispatch: 訊息出口，例如 store.dispatch
        *middlewares: 可選的中介軟體，包裹在 dispatch 外層

    Returns:
        與輸入結構平行的 Dispatcher 樹

    範例:
        >>> bound = dispatcher({"todos": todos}, store.dispatch)
        >>> bound.todos.add({"text": "x"})
    """
    if middlewares:
        dispatch = apply_middleware(dispatch, *middlewares)

    # 以來源節點識別記憶，共享的節點對應到同一個輸出節點
    processed: Dict[int, Tuple[Any, Any]] = {}

    def dispatcher_level(node: Any) -> Dispatcher:
        result: Dict[str, Any] = {}
        for key, value in _children(node):
            memo = processed.get(id(value))
            if memo is not None:
                result[key] = memo[1]
                continue
            action_type = _leaf_type(value)
            if action_type is not None:
                output: Any = ActionInvoker(action_type, dispatch)
            elif isinstance(value, (BaseReducer, Mapping)):
                output = dispatcher_level(value)
                if not output:
                    continue
            else:
                continue
            processed[id(value)] = (value, output)
            result[key] = output
        return Dispatcher(result)

    leaf_type = _leaf_type(actions)
    if leaf_type is not None:
        return ActionInvoker(leaf_type, dispatch)
    return dispatcher_level(actions)
