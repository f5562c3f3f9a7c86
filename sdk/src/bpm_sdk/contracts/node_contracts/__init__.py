from .container import Container, Mount, MountType, Port
from .node import (
    CONFIGS_DIRECTORY,
    LOGS_DIRECTORY,
    MONITORING_DIRECTORY,
    NAME_PREFIX,
    SECRETS_DIRECTORY,
    Collection,
    Node,
)
from .template_data import TemplateData

__all__ = [
    "Node",
    "Collection",
    "Container",
    "Mount",
    "MountType",
    "Port",
    "TemplateData",
    "NAME_PREFIX",
    "CONFIGS_DIRECTORY",
    "SECRETS_DIRECTORY",
    "LOGS_DIRECTORY",
    "MONITORING_DIRECTORY",
]
