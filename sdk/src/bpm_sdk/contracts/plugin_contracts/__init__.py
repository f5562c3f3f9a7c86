from .capabilities import (
    Configurator,
    IdentityCreator,
    LifecycleHandler,
    NodeStatus,
    ParameterValidator,
    Tester,
    Upgrader,
)
from .parameters import PARAMETER_TYPE_BOOL, PARAMETER_TYPE_STRING, Parameter, ParameterType
from .plugin import (
    PROTOCOL_VERSION,
    SUPPORTS_IDENTITY,
    SUPPORTS_TEST,
    SUPPORTS_UPGRADE,
    Capability,
    MetaInfo,
    Plugin,
)

__all__ = [
    "Plugin",
    "MetaInfo",
    "Capability",
    "Parameter",
    "ParameterType",
    "ParameterValidator",
    "IdentityCreator",
    "Configurator",
    "LifecycleHandler",
    "Upgrader",
    "Tester",
    "NodeStatus",
    "PARAMETER_TYPE_BOOL",
    "PARAMETER_TYPE_STRING",
    "PROTOCOL_VERSION",
    "SUPPORTS_IDENTITY",
    "SUPPORTS_TEST",
    "SUPPORTS_UPGRADE",
]
