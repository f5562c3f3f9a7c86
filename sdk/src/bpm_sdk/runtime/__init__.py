from .deadline import Deadline
from .manager import (
    DEFAULT_DOCKER_NETWORK,
    DOCKER_NETWORK_PARAMETER,
    LOG_DRIVER,
    LOG_MAX_FILE,
    LOG_MAX_SIZE,
    RESTART_POLICY,
    BasicManager,
    TransientContainerError,
)

__all__ = [
    "BasicManager",
    "Deadline",
    "TransientContainerError",
    "RESTART_POLICY",
    "LOG_DRIVER",
    "LOG_MAX_SIZE",
    "LOG_MAX_FILE",
    "DOCKER_NETWORK_PARAMETER",
    "DEFAULT_DOCKER_NETWORK",
]
