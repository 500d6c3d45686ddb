"""
Actionize 錯誤處理模組。

此模組定義所有 Actionize 異常類型，以及集中式的錯誤處理器。
所有錯誤都在建構或驗證階段同步拋出，不會在 dispatch 時發生。
"""
import datetime
import functools
import traceback
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

T = TypeVar("T")


class ActionizeError(Exception):
    """所有 Actionize 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉換為字典，方便記錄或報告。

        Returns:
            包含錯誤類型、訊息與細節的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return self.message


class ValidationError(ActionizeError):
    """命名驗證錯誤。"""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **kwargs: Any):
        details = {"field": field, "value": value}
        details.update(kwargs)
        super().__init__(message, details)


class InvalidNamespace(ValidationError):
    """命名空間不是字串，或包含保留字元。"""

    def __init__(self, message: str, value: Any = None, **kwargs: Any):
        super().__init__(message, field="namespace", value=value, **kwargs)


class InvalidKey(ValidationError):
    """Action 鍵為空、不是字串，或包含保留字元。"""

    def __init__(self, message: str, value: Any = None, **kwargs: Any):
        super().__init__(message, field="key", value=value, **kwargs)


class NotAFunction(ActionizeError):
    """需要可調用對象的位置收到了其他值。"""

    def __init__(self, message: str, value: Any = None, **kwargs: Any):
        details = {"value": repr(value)}
        details.update(kwargs)
        super().__init__(message, details)


class DuplicateActionType(ActionizeError):
    """同一個 action type 在 reducer 樹中被註冊了兩次。"""

    def __init__(self, action_type: str, **kwargs: Any):
        details = {"action_type": action_type}
        details.update(kwargs)
        super().__init__(f'Action "{action_type}" is defined twice.', details)
        self.action_type = action_type


class ConfigurationError(ActionizeError):
    """配置相關的錯誤。"""

    def __init__(self, message: str, component: str, config_key: Optional[str] = None, **kwargs: Any):
        details = {"component": component, "config_key": config_key}
        details.update(kwargs)
        super().__init__(message, details)


class MissingStructureProvider(ConfigurationError):
    """要求 immutable 組合策略，卻沒有可用的結構提供者。"""

    def __init__(self, message: str, component: str, **kwargs: Any):
        super().__init__(message, component, config_key="structure", **kwargs)


class RegistryError(ActionizeError):
    """與 Actionize 名稱註冊表相關的錯誤。"""

    def __init__(self, message: str, name: Any = None, **kwargs: Any):
        details = {"name": name}
        details.update(kwargs)
        super().__init__(message, details)


class AlreadyDefined(RegistryError):
    """名稱已經註冊過 creator。"""


class NotDefined(RegistryError):
    """名稱沒有註冊任何 creator。"""


class ErrorHandler:
    """集中式錯誤處理器，用於捕獲、日誌記錄和錯誤報告。"""

    def __init__(self, log_to_console: bool = True, log_to_file: bool = False, log_file: Optional[str] = None):
        """
        初始化錯誤處理器。

        Args:
            log_to_console: 是否將錯誤打印到終端
            log_to_file: 是否將錯誤寫入檔案
            log_file: 日誌檔案路徑，log_to_file 為 True 時必須提供
        """
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.handlers: List[Callable[[ActionizeError], None]] = []

    def register_handler(self, handler: Callable[[ActionizeError], None]) -> None:
        """
        註冊一個額外的錯誤回調。

        Args:
            handler: 接收 ActionizeError 的回調函數
        """
        self.handlers.append(handler)

    def handle(self, error: Union[ActionizeError, Exception]) -> None:
        """
        記錄並轉發錯誤，不會吞掉或改變錯誤本身。

        Args:
            error: 要處理的錯誤
        """
        if not isinstance(error, ActionizeError):
            error = ActionizeError(str(error), {"original_type": error.__class__.__name__})

        if self.log_to_console:
            print(f"❌ [{error.__class__.__name__}] {error.message}")

        if self.log_to_file and self.log_file:
            timestamp = datetime.datetime.now().isoformat()
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(f"[{timestamp}] {error.__class__.__name__}: {error.message} {error.details}\n")

        for handler in self.handlers:
            handler(error)


# 單例錯誤處理器
global_error_handler = ErrorHandler()


def handle_error(func: Callable[..., T]) -> Callable[..., T]:
    """
    裝飾器：將 ActionizeError 交給全域錯誤處理器記錄後原樣拋出。

    Args:
        func: 要包裝的函數

    Returns:
        包裝後的函數
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except ActionizeError as err:
            # 巢狀呼叫時只記錄一次
            if not getattr(err, "_reported", False):
                err._reported = True
                global_error_handler.handle(err)
            raise
    return wrapper
