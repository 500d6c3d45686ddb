"""
Reducer 組合模組。

提供 combine 與 nest 兩種組合方式：
combine 讓每個子 reducer 擁有組合狀態中的一個欄位；
nest 先執行父 reducer，再將子 reducer 的狀態合併進父狀態。

只有在至少一個子 reducer 產生了新的狀態（以引用判斷）時才會呼叫 join，
否則直接返回原狀態，讓上層可以用 ``is`` 判斷是否有變更。
子狀態不存在時 pick 返回 UNSET，子 reducer 會以初始狀態代替；
None 則是一般的狀態值。
"""
from typing import Any, Dict, List, Mapping

from immutables import Map

from .errors import MissingStructureProvider, NotAFunction
from .reducers import UNSET, BaseReducer
from .types import AnyMessage, ImmutableStructure, Join, Pick, StructureFactory


def _reduce(reducer: Any, state: Any, action: AnyMessage) -> Any:
    # UNSET 只在 reducer 之間傳遞，一般函數收到的是 None
    if state is UNSET and not isinstance(reducer, BaseReducer):
        state = None
    return reducer(state, action)


class CombinedReducer(BaseReducer):
    """
    將多個 reducer 組合成一個。

    Attributes:
        reducers: 組合鍵到子 reducer 的映射（保持插入順序）
        pick: 從組合狀態取出子狀態的函數
        join: 將子狀態合併回組合狀態的函數
    """

    def __init__(self, reducers: Mapping[str, Any], pick: Pick, join: Join):
        super().__init__()
        for key, reducer in reducers.items():
            if not callable(reducer):
                raise NotAFunction(f'Reducer given for "{key}" must be a function.', value=reducer, key=key)
        self._reducers = dict(reducers)
        self._pick = pick
        self._join = join
        self._members.update(self._reducers)

    @property
    def reducers(self) -> Dict[str, Any]:
        return dict(self._reducers)

    @property
    def pick(self) -> Pick:
        return self._pick

    @property
    def join(self) -> Join:
        return self._join

    def __call__(self, state: Any = UNSET, action: AnyMessage = None) -> Any:
        updated = False
        values: Dict[str, Any] = {}
        for key, reducer in self._reducers.items():
            sub_state = self._pick(state, key)
            if sub_state is UNSET and not isinstance(reducer, BaseReducer):
                sub_state = None
            new_state = reducer(sub_state, action)
            if new_state is not sub_state:
                updated = True
            values[key] = new_state
        if state is UNSET:
            state = None
        if updated:
            return self._join(state, values)
        return state

    def _action_types(self) -> List[str]:
        return _unique_action_types(self._reducers.values())

    def __repr__(self):
        return f"CombinedReducer(keys={list(self._reducers)})"


class NestedReducer(BaseReducer):
    """
    將子 reducer 巢狀放在父 reducer 之下。

    父 reducer 總是先執行，其結果作為子 reducer pick/join 的基礎狀態。
    成員包含巢狀組合的成員，以及父 reducer 直接暴露的 action。
    """

    def __init__(self, parent: Any, reducers: Mapping[str, Any], pick: Pick, join: Join):
        super().__init__()
        if not callable(parent):
            raise NotAFunction("Parent reducer must be a function.", value=parent)
        self._parent = parent
        self._nested = CombinedReducer(reducers, pick, join)
        self._members.update(self._nested._members)
        if isinstance(parent, BaseReducer):
            # 只複製父 reducer 的 action，不複製其他屬性
            self._members.update(parent._bound_actions())

    @property
    def parent(self) -> Any:
        return self._parent

    @property
    def nested(self) -> CombinedReducer:
        return self._nested

    def __call__(self, state: Any = UNSET, action: AnyMessage = None) -> Any:
        parent_state = _reduce(self._parent, state, action)
        return self._nested(parent_state, action)

    def _action_types(self) -> List[str]:
        return _unique_action_types([self._parent, self._nested])

    def __repr__(self):
        return f"NestedReducer(parent={self._parent!r}, keys={list(self._nested._reducers)})"


def _unique_action_types(reducers) -> List[str]:
    seen: Dict[str, None] = {}
    for reducer in reducers:
        if isinstance(reducer, BaseReducer):
            for action_type in reducer._action_types():
                seen.setdefault(action_type, None)
    return list(seen)


# ———— pick / join 策略 ————

def plain_pick(state: Any, key: str) -> Any:
    """從 dict 狀態取出子狀態，狀態不是映射或鍵不存在時返回 UNSET。"""
    if isinstance(state, Mapping):
        return state.get(key, UNSET)
    return UNSET


def plain_values(state: Any, values: Dict[str, Any]) -> Dict[str, Any]:
    """combine 的 plain join：直接使用子狀態映射。"""
    return values


def plain_merge(state: Any, values: Dict[str, Any]) -> Dict[str, Any]:
    """nest 的 plain join：淺層合併到父狀態的副本。"""
    merged = dict(state or {})
    merged.update(values)
    return merged


def immutable_pick(state: Any, key: str) -> Any:
    """從 immutable 結構取出子狀態，沒有結構或鍵不存在時返回 UNSET。"""
    if state is None or state is UNSET:
        return UNSET
    return state.get(key, UNSET)


def immutable_merge(state: Any, values: Dict[str, Any]) -> Any:
    """
    nest 的 immutable join：將子狀態合併進父狀態，返回新的結構。

    Args:
        state: 父狀態，需提供 merge(values)，或為 immutables.Map
        values: 子狀態映射

    Returns:
        合併後的新結構，父狀態為 None 時返回 None
    """
    if state is None:
        return None
    if isinstance(state, ImmutableStructure):
        return state.merge(values)
    if isinstance(state, Map):
        return state.update(values)
    raise MissingStructureProvider(
        "nest_immutable(parent, reducers) requires a state exposing get() and merge().",
        component="nest_immutable",
        state_type=type(state).__name__,
    )


# ———— 組合函數 ————

def combine(reducers: Mapping[str, Any], pick: Pick, join: Join) -> CombinedReducer:
    """
    將多個 reducer 組合成一個。

    Args:
        reducers: 組合鍵到 reducer 的映射
        pick: (state, key) -> 子狀態
        join: (state, values) -> 新的組合狀態

    Returns:
        組合後的 reducer
    """
    return CombinedReducer(reducers, pick, join)


def combine_plain(reducers: Mapping[str, Any]) -> CombinedReducer:
    """組合 reducer，狀態為以組合鍵為鍵的 dict。"""
    return combine(reducers, plain_pick, plain_values)


def combine_immutable(reducers: Mapping[str, Any], structure: StructureFactory) -> CombinedReducer:
    """
    組合 reducer，狀態為 immutable 結構。

    Args:
        reducers: 組合鍵到 reducer 的映射
        structure: 接收 key -> value 映射並建立結構的函數，例如 immutables.Map

    Returns:
        組合後的 reducer

    Raises:
        MissingStructureProvider: 沒有提供可用的 structure
    """
    if not callable(structure):
        raise MissingStructureProvider(
            "combine_immutable(reducers, structure) requires an immutable structure.",
            component="combine_immutable",
        )
    return combine(reducers, immutable_pick, lambda state, values: structure(values))


def nest(parent: Any, reducers: Mapping[str, Any], pick: Pick, join: Join) -> NestedReducer:
    """
    將 reducer 巢狀放在父 reducer 之下。

    Args:
        parent: 父 reducer
        reducers: 要巢狀的 reducer 映射
        pick: 從父狀態取出子狀態
        join: 將子狀態合併進父狀態

    Returns:
        巢狀後的 reducer
    """
    return NestedReducer(parent, reducers, pick, join)


def nest_plain(parent: Any, reducers: Mapping[str, Any]) -> NestedReducer:
    """巢狀 reducer，子狀態以鍵淺層合併進父 dict 狀態。"""
    return nest(parent, reducers, plain_pick, plain_merge)


def nest_immutable(parent: Any, reducers: Mapping[str, Any]) -> NestedReducer:
    """巢狀 reducer，父狀態為提供 get 與 merge 的 immutable 結構。"""
    return nest(parent, reducers, immutable_pick, immutable_merge)
