"""
ActionizeBuild：交給 creator 的建構工具。

每個以名稱註冊的 creator 都會收到一個 ActionizeBuild，
其建立的 reducer 都使用該名稱作為命名空間，並共用同一組選項。
"""
from typing import Any, Mapping, Optional, Union

from .composition import (
    CombinedReducer, NestedReducer, combine, combine_immutable, combine_plain,
    nest, nest_immutable, nest_plain,
)
from .errors import MissingStructureProvider
from .options import ActionizeOptions
from .reducers import Reducer, create_reducer, handle
from .types import Join, Pick, StructureFactory


class ActionizeBuild:
    """
    綁定名稱與選項的 reducer 建構工具。

    Attributes:
        name: 作為命名空間的名稱
        options: ActionizeOptions
    """

    def __init__(self, name: str, options: Union[ActionizeOptions, Mapping[str, Any], None] = None):
        self.name = name
        self.options = ActionizeOptions.coerce(options)

    def reducer(self, initial_state: Any = None, actions: Optional[Mapping[Any, Any]] = None) -> Reducer:
        """
        建立使用此名稱為命名空間的 reducer。

        Args:
            initial_state: 初始狀態
            actions: action 鍵到處理函數的映射

        Returns:
            新的 Reducer
        """
        return create_reducer(
            self.name,
            initial_state,
            actions,
            context=self.options.context,
            registry=self.options.action_registry,
        )

    def handle(self, *items: Any) -> str:
        """產生處理外部 action 的組合鍵，見 actionize.reducers.handle。"""
        return handle(*items)

    def combine(self, reducers: Mapping[str, Any], pick: Pick, join: Join) -> CombinedReducer:
        return combine(reducers, pick, join)

    def combine_plain(self, reducers: Mapping[str, Any]) -> CombinedReducer:
        return combine_plain(reducers)

    def combine_immutable(self, reducers: Mapping[str, Any],
                          structure: Optional[StructureFactory] = None) -> CombinedReducer:
        """
        組合 reducer，狀態為 immutable 結構。

        Args:
            reducers: 組合鍵到 reducer 的映射
            structure: 結構工廠，未提供時使用 options.structure

        Raises:
            MissingStructureProvider: 兩者都沒有提供
        """
        structure = structure or self.options.structure
        if structure is None:
            raise MissingStructureProvider(
                "combine_immutable(reducers, structure) requires an immutable structure.",
                component="ActionizeBuild.combine_immutable",
                name=self.name,
            )
        return combine_immutable(reducers, structure)

    def nest(self, parent: Any, reducers: Mapping[str, Any], pick: Pick, join: Join) -> NestedReducer:
        return nest(parent, reducers, pick, join)

    def nest_plain(self, parent: Any, reducers: Mapping[str, Any]) -> NestedReducer:
        return nest_plain(parent, reducers)

    def nest_immutable(self, parent: Any, reducers: Mapping[str, Any]) -> NestedReducer:
        return nest_immutable(parent, reducers)
