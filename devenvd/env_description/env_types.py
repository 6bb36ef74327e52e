from enum import Enum
from typing import Mapping
from typing import NamedTuple


class Runtime(str, Enum):
    DOCKER = 'docker'
    PODMAN = 'podman'


class Orchestration(str, Enum):
    STANDALONE = 'standalone'
    DOCKER_SWARM = 'docker-swarm'


class RestartPolicy(str, Enum):
    NO = 'no'
    ALWAYS = 'always'
    ON_FAILURE = 'on-failure'
    UNLESS_STOPPED = 'unless-stopped'


class VolumeType(str, Enum):
    VOLUME = 'volume'
    BIND = 'bind'
    TMPFS = 'tmpfs'


class PortMapping(NamedTuple):
    host: int
    container: int
    protocol: str = 'tcp'
    bind_address: str | None = None

    def as_flag(self) -> str:
        address = f'{self.bind_address}:' if self.bind_address else ''
        return f'{address}{self.host}:{self.container}/{self.protocol}'


class HealthCheckSpec(NamedTuple):
    test: tuple[str, ...]
    interval: str = '30s'
    timeout: str = '3s'
    retries: int = 3
    start_period: str | None = None
    disable: bool = False

    def as_flags(self) -> list[str]:
        kind = tuple(self.test[:1])
        if self.disable or kind == ('NONE',):
            return ['--no-healthcheck']
        command = self.test[1:] if kind in (('CMD',), ('CMD-SHELL',)) else self.test
        flags = [
            '--health-cmd', ' '.join(command),
            '--health-interval', self.interval,
            '--health-timeout', self.timeout,
            '--health-retries', str(self.retries),
        ]
        if self.start_period:
            flags += ['--health-start-period', self.start_period]
        return flags


class ResourceLimits(NamedTuple):
    memory: str | None = None
    cpus: str | None = None


class BuildSpec(NamedTuple):
    context: str = '.'
    dockerfile: str = 'Dockerfile'


class ServiceSpec(NamedTuple):
    name: str
    image: str
    build: BuildSpec | None = None
    ports: tuple[PortMapping, ...] = ()
    environment: Mapping[str, str] = {}
    volumes: tuple[str, ...] = ()
    networks: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    health_check: HealthCheckSpec | None = None
    resources: ResourceLimits = ResourceLimits()
    restart: RestartPolicy = RestartPolicy.UNLESS_STOPPED
    command: tuple[str, ...] = ()
    labels: Mapping[str, str] = {}

    @property
    def has_health_check(self) -> bool:
        return self.health_check is not None and not self.health_check.disable and bool(self.health_check.test)

    def as_dict(self) -> dict:
        return {
            'name': self.name,
            'image': self.image,
            'build': self.build._asdict() if self.build else None,
            'ports': [port._asdict() for port in self.ports],
            'environment': dict(self.environment),
            'volumes': list(self.volumes),
            'networks': list(self.networks),
            'dependencies': list(self.dependencies),
            'health_check': (
                self.health_check._asdict() | {'test': list(self.health_check.test)}
                if self.health_check else None
            ),
            'resources': self.resources._asdict(),
            'restart': self.restart.value,
            'command': list(self.command),
            'labels': dict(self.labels),
        }


class NetworkSpec(NamedTuple):
    name: str
    driver: str = 'bridge'
    subnet: str | None = None
    gateway: str | None = None


class VolumeSpec(NamedTuple):
    name: str
    type: VolumeType = VolumeType.VOLUME
    driver: str | None = None
    read_only: bool = False


class MonitoringPolicy(NamedTuple):
    enable_health_checks: bool = True
    enable_metrics: bool = True
    health_check_interval: float = 30


class PersistencePolicy(NamedTuple):
    enable_persistence: bool = False


class BackupPolicy(NamedTuple):
    enabled: bool = False
    destination: str | None = None


class EnvironmentConfig(NamedTuple):
    project_name: str
    services: tuple[ServiceSpec, ...]
    networks: tuple[NetworkSpec, ...] = ()
    volumes: tuple[VolumeSpec, ...] = ()
    runtime: Runtime = Runtime.DOCKER
    orchestration: Orchestration = Orchestration.STANDALONE
    monitoring: MonitoringPolicy = MonitoringPolicy()
    persistence: PersistencePolicy = PersistencePolicy()
    backup: BackupPolicy = BackupPolicy()

    def get_service(self, name: str) -> ServiceSpec | None:
        for service in self.services:
            if service.name == name:
                return service
        return None

    def container_name(self, service: str) -> str:
        return f'{self.project_name}_{service}'

    def named_volumes(self) -> list[VolumeSpec]:
        return [volume for volume in self.volumes if volume.type == VolumeType.VOLUME]

    def as_json(self) -> dict:
        return {
            'project_name': self.project_name,
            'runtime': self.runtime.value,
            'orchestration': self.orchestration.value,
            'services': [service.as_dict() for service in self.services],
            'networks': [network._asdict() for network in self.networks],
            'volumes': [volume._asdict() | {'type': volume.type.value} for volume in self.volumes],
            'monitoring': self.monitoring._asdict(),
            'persistence': self.persistence._asdict(),
            'backup': self.backup._asdict(),
        }
