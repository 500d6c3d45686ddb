"""
基於 Actionize 的中介軟體定義模組。

中介軟體包裹 dispatcher 樹所使用的訊息出口（dispatch 函數），
在訊息送出前、送出後或出現錯誤時執行自定義邏輯，例如日誌記錄。
"""
import datetime
import inspect
from typing import Any, Callable, Dict, List, Tuple

from .types import Dispatch


# ———— Base Middleware ————
class BaseMiddleware:
    """
    基礎中介類，定義所有中介可能實現的鉤子。
    """

    def on_next(self, action: Dict[str, Any]) -> None:
        """
        在訊息送往 dispatch 之前調用。

        Args:
            action: 正在 dispatch 的訊息
        """
        pass

    def on_complete(self, result: Any, action: Dict[str, Any]) -> None:
        """
        在 dispatch 完成之後調用。

        Args:
            result: dispatch 的返回值
            action: 剛剛 dispatch 的訊息
        """
        pass

    def on_error(self, error: Exception, action: Dict[str, Any]) -> None:
        """
        如果 dispatch 過程中拋出異常，則調用此鉤子。

        Args:
            error: 拋出的異常
            action: 導致異常的訊息
        """
        pass


# ———— LoggerMiddleware ————
class LoggerMiddleware(BaseMiddleware):
    """
    日誌中介，打印每個送出的訊息與 dispatch 結果。

    使用場景:
    - 偵錯時需要觀察 dispatcher 樹送出了哪些訊息。
    """

    def __init__(self, timestamps: bool = False):
        self.timestamps = timestamps

    def _prefix(self) -> str:
        return f"[{datetime.datetime.now()}] " if self.timestamps else ""

    def on_next(self, action: Dict[str, Any]) -> None:
        print(f"{self._prefix()}▶️ dispatching {action.get('type')}")

    def on_complete(self, result: Any, action: Dict[str, Any]) -> None:
        print(f"{self._prefix()}✅ dispatched {action.get('type')}: {result}")

    def on_error(self, error: Exception, action: Dict[str, Any]) -> None:
        print(f"{self._prefix()}❌ error in {action.get('type')}: {error}")


# ———— HistoryMiddleware ————
class HistoryMiddleware(BaseMiddleware):
    """
    記錄每次 dispatch 的訊息與結果。

    使用場景:
    - 測試或回溯 dispatcher 樹送出的訊息序列。
    """

    def __init__(self) -> None:
        self.history: List[Tuple[Dict[str, Any], Any]] = []

    def on_complete(self, result: Any, action: Dict[str, Any]) -> None:
        self.history.append((action, result))

    def get_history(self) -> List[Tuple[Dict[str, Any], Any]]:
        """
        返回整個歷史列表。

        Returns:
            歷史列表，每項為 (action, result)
        """
        return list(self.history)


def _wrap_obj_middleware(mw: BaseMiddleware, next_dispatch: Dispatch) -> Dispatch:
    def dispatch(action: Dict[str, Any]) -> Any:
        mw.on_next(action)
        try:
            result = next_dispatch(action)
        except Exception as err:
            mw.on_error(err, action)
            raise
        mw.on_complete(result, action)
        return result
    return dispatch


def apply_middleware(dispatch: Dispatch, *middlewares: Any) -> Dispatch:
    """
    將中介軟體按順序包裹在 dispatch 外層，第一個中介軟體在最外層。

    Args:
        dispatch: 原始的訊息出口
        *middlewares: 中介軟體類、實例，或接收 next_dispatch 並返回 dispatch 的函數

    Returns:
        包裹後的 dispatch 函數
    """
    wrapped = dispatch
    for mw in reversed(middlewares):
        inst = mw() if inspect.isclass(mw) else mw
        if hasattr(inst, "on_next"):
            wrapped = _wrap_obj_middleware(inst, wrapped)
        else:
            wrapped = inst(wrapped)
    return wrapped
