from devenvd.client.devenv_client import DevEnvClient
from devenvd.core.backup import ArchiveBackupCoordinator
from devenvd.core.backup import BackupCoordinator
from devenvd.core.config import Config
from devenvd.core.dependency_resolver import DependencyResolver
from devenvd.core.events import EventBus
from devenvd.core.events import EventKind
from devenvd.core.lifecycle import LifecycleOrchestrator
from devenvd.core.operations import OperationStatus
from devenvd.core.operations import OperationType
from devenvd.core.runtime_interface import RuntimeInterface
from devenvd.core.runtime_interface import RuntimeShellInterface
from devenvd.env_description.env_types import BackupPolicy
from devenvd.env_description.env_types import BuildSpec
from devenvd.env_description.env_types import EnvironmentConfig
from devenvd.env_description.env_types import HealthCheckSpec
from devenvd.env_description.env_types import MonitoringPolicy
from devenvd.env_description.env_types import NetworkSpec
from devenvd.env_description.env_types import PersistencePolicy
from devenvd.env_description.env_types import PortMapping
from devenvd.env_description.env_types import ResourceLimits
from devenvd.env_description.env_types import ServiceSpec
from devenvd.env_description.env_types import VolumeSpec
from devenvd.server.devenvd_server import make_app
from devenvd.server.devenvd_server import run_server
from devenvd.version import get_version

__version__ = get_version()
__all__ = (
    'LifecycleOrchestrator', 'DependencyResolver', 'RuntimeInterface', 'RuntimeShellInterface',
    'EventBus', 'EventKind', 'OperationType', 'OperationStatus', 'Config',
    'BackupCoordinator', 'ArchiveBackupCoordinator',
    'EnvironmentConfig', 'ServiceSpec', 'NetworkSpec', 'VolumeSpec', 'PortMapping', 'BuildSpec',
    'HealthCheckSpec', 'ResourceLimits', 'MonitoringPolicy', 'PersistencePolicy', 'BackupPolicy',
    'DevEnvClient', 'make_app', 'run_server',
)
