"""
重複 action type 驗證模組。

遍歷組合後的 reducer 樹，確保每個 action type 只由一個 BoundAction 擁有。
已驗證過的 reducer 以識別碼記錄，重複驗證同一棵樹不會誤報。
"""
from typing import Dict, Set

from .errors import DuplicateActionType
from .reducers import BaseReducer, BoundAction


class ActionTypeValidator:
    """
    記錄已保留的 action type 與已驗證的 reducer。

    Attributes:
        _owners: action type 到擁有它的 BoundAction
        _reserved: 已驗證過的 reducer 識別碼
    """

    def __init__(self):
        self._owners: Dict[str, BoundAction] = {}
        self._reserved: Set[int] = set()

    def reserve(self, reducer: BaseReducer) -> None:
        """
        保留 reducer 樹中所有的 action type。

        整次遍歷是原子的：發現重複時不會記錄任何 action type。

        Args:
            reducer: 要驗證的 reducer

        Raises:
            DuplicateActionType: 兩個不同的 action 使用同一個 action type
        """
        pending: Dict[str, BoundAction] = {}
        visited: Set[int] = set()
        self._walk(reducer, pending, visited)
        self._owners.update(pending)
        self._reserved.update(visited)

    def _walk(self, reducer: BaseReducer, pending: Dict[str, BoundAction], visited: Set[int]) -> None:
        if reducer._id in self._reserved or reducer._id in visited:
            return
        visited.add(reducer._id)

        for member in reducer._members.values():
            if isinstance(member, BoundAction):
                owner = pending.get(member.type) or self._owners.get(member.type)
                if owner is not None and owner is not member:
                    raise DuplicateActionType(member.type, key=member.key)
                pending[member.type] = member
            elif isinstance(member, BaseReducer):
                self._walk(member, pending, visited)

    def is_reserved(self, action_type: str) -> bool:
        """檢查 action type 是否已被保留。"""
        return action_type in self._owners

    def clear(self) -> None:
        """清空所有記錄。"""
        self._owners.clear()
        self._reserved.clear()


# 行程範圍的預設驗證器
default_validator = ActionTypeValidator()


def reserve_action_types(reducer: BaseReducer) -> BaseReducer:
    """
    以預設驗證器保留 reducer 樹的 action type。

    Args:
        reducer: 要驗證的 reducer

    Returns:
        同一個 reducer，方便串接
    """
    default_validator.reserve(reducer)
    return reducer
