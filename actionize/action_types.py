"""
Action type 配發模組。

此模組負責為 (namespace, key) 配發全域唯一的 action type 字串，
並提供組合鍵（多個 action type 串接而成的字串）的拆分與串接。

Action type 格式為 ``|namespace:key``，同一組 (namespace, key) 第二次以後
配發時會加上 ``#<次數>`` 後綴，例如 ``|todos:add#2``。
"""
import re
from typing import Dict, FrozenSet, Iterable, List, Set

from .errors import InvalidKey, InvalidNamespace

SEPARATOR = "|"
DELIMITER = ":"
TICK_MARKER = "#"
SUB_DELIMITER = "."

_NAMESPACE_RESERVED = re.compile(r"[#:|]")
_KEY_RESERVED = re.compile(r"[#:.|]")


def validate_namespace(namespace: str, label: str = "namespace") -> None:
    """
    檢查命名空間是否合法。

    Args:
        namespace: 要檢查的命名空間
        label: 錯誤訊息中使用的名稱

    Raises:
        InvalidNamespace: 不是字串，或包含 "|"、":"、"#"
    """
    if not isinstance(namespace, str):
        raise InvalidNamespace(f"{label} must be a string.", value=namespace)
    if _NAMESPACE_RESERVED.search(namespace):
        raise InvalidNamespace(f'{label} cannot contain characters ("|", ":", "#").', value=namespace)


def validate_action_key(key: str) -> None:
    """
    檢查 action 鍵是否合法。

    Args:
        key: 要檢查的 action 鍵

    Raises:
        InvalidKey: 不是字串、為空，或包含 "|"、":"、"."、"#"
    """
    if not isinstance(key, str):
        raise InvalidKey("key must be a string.", value=key)
    if not key or _KEY_RESERVED.search(key):
        raise InvalidKey('key cannot contain characters ("|", ":", ".", "#").', value=key)


class ActionTypeRegistry:
    """
    配發 action type 的註冊表。

    每個前綴 (namespace:key) 有自己的計數器，重複配發時以後綴區分，
    而不是拒絕，因為測試或重新載入模組時會合法地重建同一個 reducer。

    Attributes:
        _ticks: 前綴到已配發次數的映射
        _issued: 已配發的 action type（包含後綴）
    """

    def __init__(self):
        self._ticks: Dict[str, int] = {}
        self._issued: Set[str] = set()

    def allocate(self, namespace: str, key: str) -> str:
        """
        配發一個唯一的 action type。

        Args:
            namespace: 命名空間（不能包含 "|"、":"、"#"）
            key: action 鍵（不能包含 "|"、":"、"."、"#"）

        Returns:
            唯一的 action type 字串
        """
        validate_namespace(namespace)
        validate_action_key(key)

        prefix = namespace + DELIMITER + key
        tick = self._ticks.get(prefix, 0) + 1
        self._ticks[prefix] = tick
        action_type = SEPARATOR + prefix + ("" if tick == 1 else TICK_MARKER + str(tick))
        self._issued.add(action_type)
        return action_type

    def tick(self, prefix: str) -> int:
        """返回指定前綴目前的配發次數。"""
        return self._ticks.get(prefix, 0)

    def is_issued(self, action_type: str) -> bool:
        """檢查 action type 是否由此註冊表配發。"""
        return action_type in self._issued

    @property
    def issued(self) -> FrozenSet[str]:
        """所有已配發的 action type 快照。"""
        return frozenset(self._issued)

    def reset(self) -> None:
        """
        清空計數器與已配發記錄。

        只應在隔離的測試註冊表上使用；重設全域註冊表會破壞唯一性。
        """
        self._ticks.clear()
        self._issued.clear()


# 行程範圍的預設註冊表，程式庫本身從不重設
default_registry = ActionTypeRegistry()


def create_action_type(namespace: str, key: str) -> str:
    """從預設註冊表配發一個全域唯一的 action type。"""
    return default_registry.allocate(namespace, key)


def split_action_types(composite_key: str) -> List[str]:
    """
    將組合鍵拆分為 action type 列表。

    Args:
        composite_key: 例如 ``|foo:a|bar:b``

    Returns:
        例如 ``["|foo:a", "|bar:b"]``，空片段會被丟棄
    """
    return [SEPARATOR + part for part in composite_key.split(SEPARATOR) if part]


def join_action_types(action_types: Iterable[str]) -> str:
    """將多個 action type 串接成組合鍵，與 split_action_types 互為逆運算。"""
    return "".join(action_types)


def is_composite_key(key: object) -> bool:
    """以分隔字元開頭的字串鍵即為組合鍵。"""
    return isinstance(key, str) and key.startswith(SEPARATOR)
