import pytest

from actionize import ActionTypeRegistry, ActionTypeValidator, global_error_handler


@pytest.fixture
def registry():
    """隔離的 action type 註冊表，不影響行程範圍的註冊表。"""
    return ActionTypeRegistry()


@pytest.fixture
def validator():
    return ActionTypeValidator()


@pytest.fixture(autouse=True)
def quiet_error_handler(monkeypatch):
    # 測試中預期的錯誤不需要打印
    monkeypatch.setattr(global_error_handler, "log_to_console", False)
