import asyncio
from copy import deepcopy

from rich.text import Text

from devenvd.core.environment_status import EnvironmentHealth
from devenvd.core.environment_status import HealthIssue
from devenvd.core.environment_status import IssueSeverity
from devenvd.core.environment_status import overall_health
from devenvd.core.events import EventBus
from devenvd.core.events import EventKind
from devenvd.core.operations import utc_now
from devenvd.core.periodic import PeriodicTask
from devenvd.core.runtime_data_types import ContainerHealth
from devenvd.core.runtime_interface import RuntimeInterface
from devenvd.env_description.env_types import EnvironmentConfig
from devenvd.env_description.env_types import ServiceSpec
from devenvd.helpers.jobs_result import JobResult
from devenvd.output.console import CONSOLE
from devenvd.output.logger import Logger
from devenvd.output.styles import Style


class HealthReconciler:
    def __init__(self, environment_config: EnvironmentConfig, runtime: RuntimeInterface, events: EventBus):
        self.environment_config = environment_config
        self.runtime = runtime
        self.events = events
        self._snapshot = EnvironmentHealth()
        self._lock = asyncio.Lock()
        self._task = PeriodicTask(
            name=f'{environment_config.project_name}-health',
            interval=environment_config.monitoring.health_check_interval,
            tick=self.check,
            on_error=self._on_tick_error,
        )

    @property
    def running(self) -> bool:
        return self._task.running

    def snapshot(self) -> EnvironmentHealth:
        return deepcopy(self._snapshot)

    def start(self) -> None:
        self._task.start()

    async def stop(self) -> None:
        await self._task.stop()

    def _on_tick_error(self, error: Exception) -> None:
        self.events.emit(EventKind.HEALTH_ERROR, error=str(error))

    async def _service_health(self, service: ServiceSpec, issues: list[HealthIssue]) -> ContainerHealth:
        container = self.environment_config.container_name(service.name)

        if service.has_health_check:
            health = await self.runtime.inspect_health(container)
            if health == JobResult.BAD:
                issues.append(HealthIssue(service.name, IssueSeverity.CRITICAL, f'Health check failed: {health}'))
                self.events.emit(EventKind.HEALTH_ERROR, service=service.name, error=str(health))
                return ContainerHealth.UNHEALTHY
            if health == ContainerHealth.UNHEALTHY:
                issues.append(HealthIssue(service.name, IssueSeverity.HIGH, 'Service is unhealthy'))
            return health

        inspection = await self.runtime.inspect_state(container)
        if inspection == JobResult.BAD:
            issues.append(HealthIssue(service.name, IssueSeverity.CRITICAL, f'Health check failed: {inspection}'))
            self.events.emit(EventKind.HEALTH_ERROR, service=service.name, error=str(inspection))
            return ContainerHealth.UNHEALTHY
        if inspection.state.is_down:
            issues.append(HealthIssue(
                service.name,
                IssueSeverity.HIGH,
                f'Service is {inspection.state.value} with code {inspection.exit_code}',
            ))
            return ContainerHealth.UNHEALTHY
        return ContainerHealth.NONE

    async def check(self) -> EnvironmentHealth:
        async with self._lock:
            issues: list[HealthIssue] = []
            services = {}
            for service in self.environment_config.services:
                try:
                    services[service.name] = await self._service_health(service, issues)
                except Exception as error:
                    issues.append(HealthIssue(service.name, IssueSeverity.CRITICAL, f'Health check failed: {error!r}'))
                    self.events.emit(EventKind.HEALTH_ERROR, service=service.name, error=repr(error))
                    services[service.name] = ContainerHealth.UNHEALTHY

            self._snapshot = EnvironmentHealth(
                overall=overall_health(services),
                services=services,
                issues=issues,
                last_check=utc_now(),
            )

        if issues:
            logger = Logger(CONSOLE, indent='  ')
            logger.log(Text(f'Health {self._snapshot.overall.value}:', style=Style.suspicious))
            for issue in issues:
                logger.log(Text(f'{issue.service}: {issue.message}', style=Style.bad))
            logger.flush()

        self.events.emit(EventKind.HEALTH_UPDATED, health=self._snapshot.as_json())
        return self.snapshot()
