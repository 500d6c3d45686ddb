"""
Actionize 的配置模型。
"""
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

from .action_types import ActionTypeRegistry, default_registry


class ActionizeOptions(BaseModel):
    """
    Actionize 與 ActionizeBuild 共用的選項。

    屬性:
        context: 可選的 context 提供者，接收 (handler, reducer)，返回處理函數的接收者
        structure: 可選的 immutable 結構工廠，例如 immutables.Map，供 combine_immutable 使用
        registry: 可選的 action type 註冊表，預設為行程範圍的註冊表
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    context: Optional[Callable[..., Any]] = None
    structure: Optional[Callable[..., Any]] = None
    registry: Optional[ActionTypeRegistry] = None

    @property
    def action_registry(self) -> ActionTypeRegistry:
        """實際使用的 action type 註冊表。"""
        return self.registry or default_registry

    @classmethod
    def coerce(cls, options: Union["ActionizeOptions", Mapping[str, Any], None]) -> "ActionizeOptions":
        """
        將 None、dict 或模型轉換為 ActionizeOptions。

        Args:
            options: 使用者提供的選項

        Returns:
            ActionizeOptions 實例
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))
