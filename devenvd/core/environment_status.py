from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from enum import Enum

from rich.text import Text

from devenvd.core.operations import utc_now
from devenvd.core.runtime_data_types import ContainerHealth
from devenvd.core.runtime_data_types import ContainerState
from devenvd.output.styles import Style


class EnvironmentState(str, Enum):
    INITIALIZING = 'initializing'
    STARTING = 'starting'
    RUNNING = 'running'
    STOPPING = 'stopping'
    STOPPED = 'stopped'
    ERROR = 'error'
    MAINTENANCE = 'maintenance'


class IssueSeverity(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'


@dataclass
class ResourceUsage:
    cpu: float = 0.0
    memory: int = 0
    memory_limit: int = 0
    network_rx: int = 0
    network_tx: int = 0
    block_read: int = 0
    block_write: int = 0
    pids: int = 0

    @property
    def network(self) -> int:
        return self.network_rx + self.network_tx

    @property
    def storage(self) -> int:
        return self.block_read + self.block_write

    def as_json(self) -> dict:
        return {
            'cpu': self.cpu,
            'memory': self.memory,
            'memory_limit': self.memory_limit,
            'network_rx': self.network_rx,
            'network_tx': self.network_tx,
            'block_read': self.block_read,
            'block_write': self.block_write,
            'pids': self.pids,
        }


@dataclass
class ServiceStatus:
    name: str
    state: ContainerState = ContainerState.CREATED
    health: ContainerHealth = ContainerHealth.NONE
    resources: ResourceUsage = field(default_factory=ResourceUsage)
    restarts: int = 0
    exit_code: int | None = None
    error: str | None = None

    def as_json(self) -> dict:
        return {
            'name': self.name,
            'state': self.state.value,
            'health': self.health.value,
            'resources': self.resources.as_json(),
            'restarts': self.restarts,
            'exit_code': self.exit_code,
            'error': self.error,
        }

    def as_rich_text(self, style: Style = Style()) -> Text:
        service_string = Text('     ')
        service_string.append(Text(f'{self.name:{30}}', style=style.regular))
        service_string.append(Text(
            f'{self.state.value:{20}}',
            style=style.good if self.state == ContainerState.RUNNING else style.bad
        ))
        match self.health:
            case ContainerHealth.HEALTHY | ContainerHealth.NONE:
                health_style = style.good
            case ContainerHealth.STARTING:
                health_style = style.suspicious
            case _:
                health_style = style.bad
        service_string.append(Text(f'{self.health.value:{20}}', style=health_style))
        if self.error:
            service_string.append(Text(self.error, style=style.bad))
        service_string.append(Text('\n', style=style.regular))
        return service_string


@dataclass
class HealthIssue:
    service: str
    severity: IssueSeverity
    message: str
    timestamp: datetime = field(default_factory=utc_now)
    resolved: bool = False

    def as_json(self) -> dict:
        return {
            'service': self.service,
            'severity': self.severity.value,
            'message': self.message,
            'timestamp': self.timestamp.isoformat(),
            'resolved': self.resolved,
        }


def overall_health(services: dict[str, ContainerHealth]) -> ContainerHealth:
    values = set(services.values())
    for health in (ContainerHealth.UNHEALTHY, ContainerHealth.STARTING, ContainerHealth.HEALTHY):
        if health in values:
            return health
    return ContainerHealth.NONE


@dataclass
class EnvironmentHealth:
    overall: ContainerHealth = ContainerHealth.NONE
    services: dict[str, ContainerHealth] = field(default_factory=dict)
    issues: list[HealthIssue] = field(default_factory=list)
    last_check: datetime | None = None

    def as_json(self) -> dict:
        return {
            'overall': self.overall.value,
            'services': {name: health.value for name, health in self.services.items()},
            'issues': [issue.as_json() for issue in self.issues],
            'last_check': self.last_check.isoformat() if self.last_check else None,
        }


@dataclass
class EnvironmentMetrics:
    total_cpu: float = 0.0
    total_memory: int = 0
    total_memory_limit: int = 0
    total_network: int = 0
    total_storage: int = 0
    total_pids: int = 0
    service_count: int = 0
    running_services: int = 0
    failed_services: int = 0
    services: dict[str, ResourceUsage] = field(default_factory=dict)
    collected_at: datetime | None = None

    def as_json(self) -> dict:
        return {
            'total_cpu': self.total_cpu,
            'total_memory': self.total_memory,
            'total_memory_limit': self.total_memory_limit,
            'total_network': self.total_network,
            'total_storage': self.total_storage,
            'total_pids': self.total_pids,
            'service_count': self.service_count,
            'running_services': self.running_services,
            'failed_services': self.failed_services,
            'services': {name: usage.as_json() for name, usage in self.services.items()},
            'collected_at': self.collected_at.isoformat() if self.collected_at else None,
        }


@dataclass
class EnvironmentStatus:
    state: EnvironmentState = EnvironmentState.INITIALIZING
    services: dict[str, ServiceStatus] = field(default_factory=dict)
    health: EnvironmentHealth = field(default_factory=EnvironmentHealth)
    metrics: EnvironmentMetrics = field(default_factory=EnvironmentMetrics)
    uptime: float = 0.0
    last_update: datetime = field(default_factory=utc_now)

    def as_json(self) -> dict:
        return {
            'state': self.state.value,
            'services': {name: status.as_json() for name, status in self.services.items()},
            'health': self.health.as_json(),
            'metrics': self.metrics.as_json(),
            'uptime': self.uptime,
            'last_update': self.last_update.isoformat(),
        }

    def as_rich_text(self, style: Style = Style()) -> Text:
        text = Text(f'Environment {self.state.value}, health {self.health.overall.value}\n', style=style.info)
        for service_status in self.services.values():
            text.append(service_status.as_rich_text(style))
        return text
