# actionize/immutable_utils.py
from typing import Any, Dict, Mapping, Optional

from immutables import Map
from pydantic import BaseModel


def to_dict(obj: Any) -> Any:
    """將 Map、Pydantic 模型及其巢狀結構轉換為普通字典"""
    if isinstance(obj, BaseModel):
        return {k: to_dict(v) for k, v in obj.model_dump().items()}
    elif isinstance(obj, Map):
        return {k: to_dict(v) for k, v in obj.items()}
    elif isinstance(obj, tuple):
        return [to_dict(i) for i in obj]
    elif isinstance(obj, frozenset):
        return {to_dict(i) for i in obj}
    return obj


def to_message(action_type: str, payload: Any = None, fields: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    以 payload 的欄位建立訊息 dict，並寫入 action type。

    payload 可以是 dict、immutables.Map 或 Pydantic 模型；
    type 欄位總是覆蓋 payload 中同名的值。
    """
    message: Dict[str, Any] = {}
    if payload is not None:
        if isinstance(payload, (BaseModel, Map)):
            payload = to_dict(payload)
        if not isinstance(payload, Mapping):
            raise TypeError(f"payload must be a mapping or a model, got {type(payload).__name__}")
        message.update(payload)
    if fields:
        message.update(fields)
    message["type"] = action_type
    return message
