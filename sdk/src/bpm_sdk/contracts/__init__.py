from .node_contracts import Collection, Container, Mount, Node, Port, TemplateData
from .plugin_contracts import (
    Configurator,
    IdentityCreator,
    LifecycleHandler,
    MetaInfo,
    NodeStatus,
    Parameter,
    ParameterValidator,
    Plugin,
    Tester,
    Upgrader,
)
from .runtime import (
    ContainerConfig,
    ContainerState,
    PhaseTimeoutError,
    ResourceNotFoundError,
    RuntimeClient,
    RuntimeClientError,
)

__all__ = [
    "Node",
    "Collection",
    "Container",
    "Mount",
    "Port",
    "TemplateData",
    "Plugin",
    "MetaInfo",
    "Parameter",
    "ParameterValidator",
    "IdentityCreator",
    "Configurator",
    "LifecycleHandler",
    "Upgrader",
    "Tester",
    "NodeStatus",
    "RuntimeClient",
    "RuntimeClientError",
    "ResourceNotFoundError",
    "PhaseTimeoutError",
    "ContainerConfig",
    "ContainerState",
]
