"""
Actionize 共用的類型定義。

此模組集中定義類型別名與 Protocol，供其他模組引用。
"""
from typing import Any, Callable, Dict, Mapping, Optional, Union
from typing_extensions import Protocol, runtime_checkable


@runtime_checkable
class Message(Protocol):
    """帶有 type 屬性的訊息對象。Mapping 形式的訊息則以 "type" 鍵表示。"""

    type: Optional[str]


@runtime_checkable
class ImmutableStructure(Protocol):
    """巢狀 immutable 策略所需的結構能力：get 與 merge。"""

    def get(self, key: Any, default: Any = None) -> Any: ...

    def merge(self, values: Mapping[str, Any]) -> Any: ...


AnyMessage = Union[Mapping[str, Any], Message, None]

# (state, action) -> new_state
Handler = Callable[[Any, Any], Any]

# 從組合狀態中取出子狀態
Pick = Callable[[Any, str], Any]

# 將所有子狀態合併回組合狀態
Join = Callable[[Any, Dict[str, Any]], Any]

# 接收 key -> value 映射並建立 immutable 結構，例如 immutables.Map
StructureFactory = Callable[[Mapping[str, Any]], Any]

# (handler, reducer) -> 執行 handler 時綁定的 context
ContextProvider = Callable[[Handler, Any], Any]

# 訊息出口，例如 store.dispatch
Dispatch = Callable[[Dict[str, Any]], Any]
