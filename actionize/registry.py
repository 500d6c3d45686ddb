"""
Actionize 名稱註冊表。

以名稱註冊 reducer 的 creator，第一次 get 時才建立 reducer 並快取，
同時驗證整棵 reducer 樹沒有重複的 action type。
"""
from typing import Any, Callable, Dict, Mapping, Union

from .action_types import validate_action_key, validate_namespace
from .build import ActionizeBuild
from .dispatcher import ActionInvoker, Dispatcher, dispatcher
from .errors import AlreadyDefined, NotAFunction, NotDefined, handle_error
from .options import ActionizeOptions
from .reducers import BaseReducer
from .types import Dispatch
from .validation import ActionTypeValidator

Creator = Callable[[ActionizeBuild], Any]


class Actionize:
    """
    管理以名稱定義的 reducer。

    Attributes:
        _creators: 名稱到 creator 的映射
        _reducers: 名稱到已建立 reducer 的快取
        _validator: 此註冊表範圍內的重複 action type 驗證器
        _options: 傳給每個 ActionizeBuild 的選項
    """

    def __init__(self, options: Union[ActionizeOptions, Mapping[str, Any], None] = None):
        self._creators: Dict[str, Creator] = {}
        self._reducers: Dict[str, Any] = {}
        self._validator = ActionTypeValidator()
        self._options = ActionizeOptions.coerce(options)

    @handle_error
    def define(self, name: str, creator: Creator) -> Any:
        """
        定義 reducer 並立即返回。

        Args:
            name: reducer 的名稱
            creator: 接收 ActionizeBuild 並返回 reducer 的函數

        Returns:
            建立好的 reducer
        """
        self.set(name, creator)
        return self.get(name)

    @handle_error
    def set(self, name: str, creator: Creator) -> None:
        """
        為名稱註冊 creator，reducer 會在第一次 get 時建立。

        Args:
            name: reducer 的名稱（不能包含 "|"、":"、"#"）
            creator: 接收 ActionizeBuild 並返回 reducer 的函數
        """
        self.validate_name(name)
        if not callable(creator):
            raise NotAFunction("Creator given must be a function.", value=creator, name=name)
        if name in self._creators:
            raise AlreadyDefined("Name given already defined.", name=name)
        self._creators[name] = creator

    @handle_error
    def get(self, name: str) -> Any:
        """
        取得以名稱定義的 reducer。

        Args:
            name: reducer 的名稱

        Returns:
            reducer，同一名稱總是返回同一個對象
        """
        if name in self._reducers:
            return self._reducers[name]
        creator = self._creators.get(name)
        if creator is None:
            raise NotDefined("Name given to actionize.get(name) is not defined.", name=name)
        reducer = creator(ActionizeBuild(name, self._options))
        if not callable(reducer):
            raise NotAFunction(f'Creator given for "{name}" must return a function.', value=reducer, name=name)
        if isinstance(reducer, BaseReducer):
            self._validator.reserve(reducer)
        self._reducers[name] = reducer
        return reducer

    def has(self, name: str) -> bool:
        """檢查名稱是否已註冊 creator。"""
        return name in self._creators

    def dispatcher(self, actions: Any, dispatch: Dispatch, *middlewares: Any) -> Union[Dispatcher, ActionInvoker]:
        """
        從 action 樹建立 dispatcher 樹，見 actionize.dispatcher.dispatcher。

        Args:
            actions: reducer 或巢狀的 dict
            dispatch: 訊息出口，例如 store.dispatch
            *middlewares: 可選的中介軟體

        Returns:
            Dispatcher 樹
        """
        return dispatcher(actions, dispatch, *middlewares)

    @staticmethod
    def validate_name(name: str) -> None:
        """名稱規則與命名空間相同。"""
        validate_namespace(name, label="Actionize name")

    @staticmethod
    def validate_action_key(key: str) -> None:
        validate_action_key(key)
