"""
Actionize：reducer 的建構與組合。

以命名空間、初始狀態與 action 映射建立 reducer，
並以 combine / nest 將多個 reducer 組合成一個。
"""
from .errors import (
    ActionizeError, ValidationError, InvalidNamespace, InvalidKey, NotAFunction,
    DuplicateActionType, ConfigurationError, MissingStructureProvider,
    RegistryError, AlreadyDefined, NotDefined,
    ErrorHandler, global_error_handler, handle_error,
)
from .action_types import (
    SEPARATOR, DELIMITER, TICK_MARKER, SUB_DELIMITER,
    ActionTypeRegistry, default_registry, create_action_type,
    validate_namespace, validate_action_key,
    split_action_types, join_action_types,
)
from .reducers import (
    UNSET, BaseReducer, Reducer, BoundAction, DirectHandler, CompositeHandlerKey, Ignored,
    classify_action_entry, create_reducer, handle, action_type_of,
)
from .composition import (
    CombinedReducer, NestedReducer,
    combine, combine_plain, combine_immutable,
    nest, nest_plain, nest_immutable,
    plain_pick, plain_values, plain_merge, immutable_pick, immutable_merge,
)
from .validation import ActionTypeValidator, default_validator, reserve_action_types
from .dispatcher import ActionInvoker, Dispatcher, dispatcher
from .middleware import BaseMiddleware, LoggerMiddleware, HistoryMiddleware, apply_middleware
from .options import ActionizeOptions
from .build import ActionizeBuild
from .registry import Actionize

# Python 風格的別名
reducer = create_reducer

__all__ = [
    # Errors
    "ActionizeError", "ValidationError", "InvalidNamespace", "InvalidKey", "NotAFunction",
    "DuplicateActionType", "ConfigurationError", "MissingStructureProvider",
    "RegistryError", "AlreadyDefined", "NotDefined",
    "ErrorHandler", "global_error_handler", "handle_error",

    # Action types
    "SEPARATOR", "DELIMITER", "TICK_MARKER", "SUB_DELIMITER",
    "ActionTypeRegistry", "default_registry", "create_action_type",
    "validate_namespace", "validate_action_key",
    "split_action_types", "join_action_types",

    # Reducers
    "UNSET", "BaseReducer", "Reducer", "BoundAction", "DirectHandler", "CompositeHandlerKey", "Ignored",
    "classify_action_entry", "create_reducer", "reducer", "handle", "action_type_of",

    # Composition
    "CombinedReducer", "NestedReducer",
    "combine", "combine_plain", "combine_immutable",
    "nest", "nest_plain", "nest_immutable",
    "plain_pick", "plain_values", "plain_merge", "immutable_pick", "immutable_merge",

    # Validation
    "ActionTypeValidator", "default_validator", "reserve_action_types",

    # Dispatcher
    "ActionInvoker", "Dispatcher", "dispatcher",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware", "HistoryMiddleware", "apply_middleware",

    # Registry
    "ActionizeOptions", "ActionizeBuild", "Actionize",
]
