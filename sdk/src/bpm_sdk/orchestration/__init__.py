from .configurator import FileConfigurator
from .docker_plugin import DOCKER_PARAMETERS, new_docker_plugin
from .identity import FileIdentityCreator
from .lifecycle import DockerLifecycleHandler, docker_client_factory
from .upgrader import DockerUpgrader
from .validator import ParameterValidationError, SimpleParameterValidator

__all__ = [
    "new_docker_plugin",
    "DOCKER_PARAMETERS",
    "FileConfigurator",
    "FileIdentityCreator",
    "DockerLifecycleHandler",
    "DockerUpgrader",
    "SimpleParameterValidator",
    "ParameterValidationError",
    "docker_client_factory",
]
