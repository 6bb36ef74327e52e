import asyncio
import time
from copy import deepcopy
from typing import AsyncIterator
from typing import Awaitable
from typing import Callable

from rich.text import Text

from devenvd.core.backup import ArchiveBackupCoordinator
from devenvd.core.backup import BackupCoordinator
from devenvd.core.config import Config
from devenvd.core.dependency_resolver import DependencyResolver
from devenvd.core.environment_status import EnvironmentState
from devenvd.core.environment_status import EnvironmentStatus
from devenvd.core.environment_status import ServiceStatus
from devenvd.core.events import EventBus
from devenvd.core.events import EventKind
from devenvd.core.health_reconciler import HealthReconciler
from devenvd.core.metrics_collector import MetricsCollector
from devenvd.core.operations import Operation
from devenvd.core.operations import OperationId
from devenvd.core.operations import OperationTracker
from devenvd.core.operations import OperationType
from devenvd.core.operations import utc_now
from devenvd.core.runtime_data_types import ContainerHealth
from devenvd.core.runtime_data_types import ContainerState
from devenvd.core.runtime_data_types import ExecResult
from devenvd.core.runtime_interface import RuntimeInterface
from devenvd.core.runtime_interface import RuntimeShellInterface
from devenvd.env_description.env_types import EnvironmentConfig
from devenvd.env_description.env_types import ServiceSpec
from devenvd.env_description.env_validation import validate_environment_config
from devenvd.errors.base import DevEnvError
from devenvd.errors.config import BackupDisabledError
from devenvd.errors.config import EnvironmentConfigError
from devenvd.errors.lifecycle import HealthTimeoutError
from devenvd.errors.lifecycle import RuntimeCommandError
from devenvd.errors.lifecycle import UnknownServiceError
from devenvd.helpers.jobs_result import JobResult
from devenvd.helpers.jobs_result import OperationError
from devenvd.output.console import CONSOLE
from devenvd.output.logger import Logger
from devenvd.output.styles import Style

ALREADY_EXISTS = 'already exists'
ALREADY_IN_USE = 'already in use'
NOT_FOUND = ('no such', 'not found')


def is_not_found(error: OperationError) -> bool:
    return any(marker in error for marker in NOT_FOUND)


class LifecycleOrchestrator:
    """
    Drives one environment through its lifecycle operations.

    Environment description is validated on construction, before any runtime call.
    Every public operation is tracked by an Operation record; its failure is recorded
    on the record and re-raised to the caller.
    Only orchestrator writes EnvironmentStatus.state; health and metrics sections
    are snapshots of reconcilers which run while environment is running.
    Service sections are refreshed from runtime under _status_lock, so one refresh
    never interleaves with another or with building a status copy.
    State transitions are synchronous and happen between awaits.
    """

    def __init__(self,
                 environment_config: EnvironmentConfig,
                 runtime: RuntimeInterface | None = None,
                 config=Config,
                 events: EventBus | None = None,
                 backup_coordinator: BackupCoordinator | None = None):
        validate_environment_config(environment_config)
        self.environment_config = environment_config
        self.resolver = DependencyResolver(environment_config)
        self.config = config()

        if runtime is None:
            runtime = RuntimeShellInterface(environment_config.runtime.value, config=config)
        self.runtime = runtime
        self.events = events if events is not None else EventBus()
        self.operations = OperationTracker(config=config, on_update=self._on_operation_update)
        self.health = HealthReconciler(environment_config, self.runtime, self.events)
        self.metrics = MetricsCollector(environment_config, self.runtime, self.events, config=config)
        if backup_coordinator is None:
            backup_coordinator = ArchiveBackupCoordinator(self.runtime, config=config)
        self.backup_coordinator = backup_coordinator

        self._status = EnvironmentStatus(services={
            service.name: ServiceStatus(service.name) for service in environment_config.services
        })
        self._status_lock = asyncio.Lock()
        self._initialized = False
        self._running_since: float | None = None
        self._tasks: set[asyncio.Task] = set()
        self._runners: dict[OperationType, Callable[..., Awaitable[None]]] = {
            OperationType.CREATE: self._create,
            OperationType.START: self._start,
            OperationType.STOP: self._stop,
            OperationType.RESTART: self._restart,
            OperationType.DESTROY: self._destroy,
            OperationType.SCALE: self._scale,
            OperationType.BACKUP: self._backup,
        }

    def _on_operation_update(self, operation: Operation) -> None:
        self.events.emit(EventKind.OPERATION_UPDATED, operation=operation.as_json())

    @property
    def state(self) -> EnvironmentState:
        return self._status.state

    def _set_state(self, state: EnvironmentState) -> None:
        self._status.state = state
        self._status.last_update = utc_now()

    def _log(self, operation_id: OperationId, line: str, style: str = Style.info) -> None:
        self.operations.log(operation_id, line)
        CONSOLE.print(Text(line, style=style))

    def _advance(self, operation_id: OperationId, progress: int, line: str) -> None:
        self.operations.advance(operation_id, progress, line)
        CONSOLE.print(Text(f'[{progress:>3}%] {line}', style=Style.mark_neutral))

    def _fail(self, operation_id: OperationId, error: Exception, event: EventKind = EventKind.ENVIRONMENT_ERROR,
              state: EnvironmentState | None = EnvironmentState.ERROR) -> None:
        message = error.message if isinstance(error, DevEnvError) else repr(error)
        if isinstance(error, RuntimeCommandError):
            self.operations.set_metadata(operation_id, 'stage', error.stage)
        self.operations.fail(operation_id, message)
        if state is not None:
            self._set_state(state)
        CONSOLE.print(Text(f' ✗ {message}', style=Style.bad))
        self.events.emit(event, operation_id=operation_id, error=message)

    def _service(self, name: str) -> ServiceSpec:
        service = self.environment_config.get_service(name)
        if service is None:
            raise UnknownServiceError(name)
        return service

    def _container(self, name: str) -> str:
        return self.environment_config.container_name(name)

    def _image(self, service: ServiceSpec) -> str:
        return service.image or f'{self.environment_config.project_name}_{service.name}'

    async def _enter_running(self) -> None:
        self._set_state(EnvironmentState.RUNNING)
        self._running_since = time.monotonic()
        if self.environment_config.monitoring.enable_health_checks:
            self.health.start()
        if self.environment_config.monitoring.enable_metrics:
            self.metrics.start()

    async def _stop_reconcilers(self) -> None:
        await self.health.stop()
        await self.metrics.stop()
        self._running_since = None

    async def initialize(self) -> None:
        if self._initialized:
            return
        self.events.emit(EventKind.ENVIRONMENT_INITIALIZING, project=self.environment_config.project_name)

        version = await self.runtime.runtime_version()
        if version == JobResult.BAD:
            self._set_state(EnvironmentState.ERROR)
            error = RuntimeCommandError('initializing', 'Container runtime is not available', str(version))
            self.events.emit(EventKind.ENVIRONMENT_ERROR, error=error.message)
            raise error

        self._initialized = True
        self._set_state(EnvironmentState.STOPPED)
        CONSOLE.print(Text(
            f'Environment {self.environment_config.project_name} on '
            f'{self.environment_config.runtime.value} {version}',
            style=Style.info
        ))
        self.events.emit(EventKind.ENVIRONMENT_INITIALIZED, runtime_version=version)

    # create

    async def _pull_images(self, operation_id: OperationId) -> None:
        self._log(operation_id, 'Pulling container images...')
        for name in self.resolver.start_order():
            service = self._service(name)
            if service.build is not None:
                self._log(operation_id, f'Building {self._image(service)}...')
                result = await self.runtime.build_image(self._image(service), service.build)
            else:
                self._log(operation_id, f'Pulling {service.image}...')
                result = await self.runtime.pull_image(service.image)
            if result == JobResult.BAD:
                raise RuntimeCommandError(
                    'pulling-images', f"Can't get image {self._image(service)} for {name}", str(result)
                )
        self._advance(operation_id, 20, 'Images ready')

    async def _create_networks(self, operation_id: OperationId) -> None:
        self._log(operation_id, 'Creating networks...')
        for network in self.environment_config.networks:
            result = await self.runtime.create_network(network)
            if result == JobResult.BAD:
                if ALREADY_EXISTS not in result:
                    raise RuntimeCommandError(
                        'creating-networks', f"Can't create network {network.name}", str(result)
                    )
                self._log(operation_id, f'Network already exists: {network.name}', Style.context)
                continue
            self._log(operation_id, f'Created network: {network.name}', Style.context)
        self._advance(operation_id, 40, 'Networks ready')

    async def _create_volumes(self, operation_id: OperationId) -> None:
        self._log(operation_id, 'Creating volumes...')
        for volume in self.environment_config.named_volumes():
            result = await self.runtime.create_volume(volume)
            if result == JobResult.BAD:
                if ALREADY_EXISTS not in result:
                    raise RuntimeCommandError(
                        'creating-volumes', f"Can't create volume {volume.name}", str(result)
                    )
                self._log(operation_id, f'Volume already exists: {volume.name}', Style.context)
                continue
            self._log(operation_id, f'Created volume: {volume.name}', Style.context)
        self._advance(operation_id, 60, 'Volumes ready')

    def _log_start_levels(self) -> None:
        logger = Logger(CONSOLE)
        logger.log(Text('Services start order:', style=Style.info))
        for level, services in enumerate(self.resolver.levels()):
            logger.log(Text(f'  {level}: ', style=Style.context) + Text(', '.join(services), style=Style.regular))
        logger.flush()

    async def _run_services(self, operation_id: OperationId) -> None:
        self._log(operation_id, 'Starting services...')
        self._log_start_levels()
        for name in self.resolver.start_order():
            service = self._service(name)
            container = self._container(name)
            result = await self.runtime.run_service(
                name=container,
                image=self._image(service),
                ports=service.ports,
                environment=service.environment,
                volumes=service.volumes,
                networks=service.networks,
                resources=service.resources,
                restart=service.restart,
                command=service.command,
                labels=dict(service.labels) | {'devenvd.project': self.environment_config.project_name},
                health_check=service.health_check,
            )
            if result == JobResult.BAD:
                if ALREADY_IN_USE not in result:
                    raise RuntimeCommandError('starting-services', f"Can't run service {name}", str(result))
                self._log(operation_id, f'Container {container} exists, starting it', Style.context)
                started = await self.runtime.start_service(container)
                if started == JobResult.BAD:
                    raise RuntimeCommandError('starting-services', f"Can't start service {name}", str(started))
            self._status.services[name].state = ContainerState.STARTING
            self._log(operation_id, f'Started service: {name}', Style.context)
        self._advance(operation_id, 80, 'Services started')

    async def _not_ready_services(self) -> list[str]:
        async with self._status_lock:
            return await self._refresh_services()

    async def _refresh_services(self) -> list[str]:
        not_ready = []
        for name in self.resolver.start_order():
            inspection = await self.runtime.inspect_state(self._container(name))
            service_status = self._status.services[name]
            if inspection == JobResult.BAD:
                service_status.error = str(inspection)
                not_ready.append(name)
                continue
            service_status.state = inspection.state
            service_status.health = inspection.health
            service_status.restarts = inspection.restart_count
            service_status.exit_code = inspection.exit_code
            service_status.error = inspection.error
            if (inspection.state != ContainerState.RUNNING
                    or inspection.health in (ContainerHealth.UNHEALTHY, ContainerHealth.STARTING)):
                not_ready.append(name)
        return not_ready

    async def check_all_services_healthy(self) -> bool:
        return not await self._not_ready_services()

    async def _await_health(self, operation_id: OperationId) -> None:
        self._log(operation_id, 'Waiting for services to be healthy...')
        timeout = self.config.health_convergence_timeout
        interval = self.config.health_convergence_interval
        started = time.monotonic()
        reported: list[str] | None = None

        while True:
            not_ready = await self._not_ready_services()
            if not not_ready:
                CONSOLE.print(self._status.as_rich_text())
                self._log(operation_id, ' ✔ All services are healthy', Style.good)
                return

            elapsed = time.monotonic() - started
            if elapsed >= timeout:
                CONSOLE.print(self._status.as_rich_text())
                raise HealthTimeoutError(timeout, not_ready)

            if not_ready != reported:
                self._log(operation_id, f' ✗ Still not ready services: {", ".join(not_ready)}', Style.suspicious)
                reported = not_ready
            await asyncio.sleep(min(interval, timeout - elapsed))

    async def _create(self, operation_id: OperationId) -> None:
        try:
            await self.initialize()
            self.operations.run(operation_id)
            self._set_state(EnvironmentState.STARTING)
            self.events.emit(EventKind.ENVIRONMENT_CREATING, operation_id=operation_id)

            await self._pull_images(operation_id)
            await self._create_networks(operation_id)
            await self._create_volumes(operation_id)
            await self._run_services(operation_id)
            await self._await_health(operation_id)
        except Exception as error:
            self._fail(operation_id, error)
            raise

        self.operations.complete(operation_id, 'Environment created')
        await self._enter_running()
        self.events.emit(EventKind.ENVIRONMENT_CREATED, operation_id=operation_id)

    async def _start(self, operation_id: OperationId) -> None:
        try:
            await self.initialize()
            self.operations.run(operation_id)
            self._set_state(EnvironmentState.STARTING)
            self.events.emit(EventKind.ENVIRONMENT_STARTING, operation_id=operation_id)

            for name in self.resolver.start_order():
                result = await self.runtime.start_service(self._container(name))
                if result == JobResult.BAD:
                    raise RuntimeCommandError('starting-services', f"Can't start service {name}", str(result))
                self._status.services[name].state = ContainerState.STARTING
                self._log(operation_id, f'Started service: {name}', Style.context)
            self._advance(operation_id, 50, 'Services started')
            await self._await_health(operation_id)
        except Exception as error:
            self._fail(operation_id, error)
            raise

        self.operations.complete(operation_id, 'Environment started')
        await self._enter_running()
        self.events.emit(EventKind.ENVIRONMENT_STARTED, operation_id=operation_id)

    # stop / destroy

    async def _teardown_step(self,
                             operation_id: OperationId,
                             stage: str,
                             target: str,
                             call: Callable[[], Awaitable[JobResult | OperationError]],
                             failures: list[dict]) -> None:
        result = await call()
        if result == JobResult.BAD:
            if is_not_found(result):
                self._log(operation_id, f'{stage}: {target} already gone', Style.context)
                return
            failures.append({'stage': stage, 'target': target, 'error': str(result)})
            self._log(operation_id, f'Failed to {stage} {target}: {result}', Style.bad)
            return
        self._log(operation_id, f'{stage}: {target} done', Style.context)

    async def _stop_services(self, operation_id: OperationId, failures: list[dict]) -> None:
        self._log(operation_id, 'Stopping services...')
        for name in self.resolver.stop_order():
            container = self._container(name)
            await self._teardown_step(
                operation_id, 'stop', name, lambda: self.runtime.stop_service(container), failures
            )
            self._status.services[name].state = ContainerState.EXITED

    async def _stop(self, operation_id: OperationId) -> None:
        failures: list[dict] = []
        try:
            self.operations.run(operation_id)
            self._set_state(EnvironmentState.STOPPING)
            self.events.emit(EventKind.ENVIRONMENT_STOPPING, operation_id=operation_id)
            await self._stop_reconcilers()
            await self._stop_services(operation_id, failures)
            self.operations.set_metadata(operation_id, 'failures', failures)
        except Exception as error:
            self._fail(operation_id, error)
            raise

        self.operations.complete(operation_id, f'Environment stopped, {len(failures)} failures')
        self._set_state(EnvironmentState.STOPPED)
        self.events.emit(EventKind.ENVIRONMENT_STOPPED, operation_id=operation_id, failures=failures)

    async def _destroy(self, operation_id: OperationId) -> None:
        failures: list[dict] = []
        try:
            self.operations.run(operation_id)
            self._set_state(EnvironmentState.STOPPING)
            self.events.emit(EventKind.ENVIRONMENT_DESTROYING, operation_id=operation_id)
            await self._stop_reconcilers()

            await self._stop_services(operation_id, failures)
            self._advance(operation_id, 25, 'Services stopped')

            self._log(operation_id, 'Removing containers...')
            for name in self.resolver.stop_order():
                container = self._container(name)
                await self._teardown_step(
                    operation_id, 'remove', container, lambda: self.runtime.remove_service(container), failures
                )
            self._advance(operation_id, 50, 'Containers removed')

            self._log(operation_id, 'Removing networks...')
            for network in self.environment_config.networks:
                await self._teardown_step(
                    operation_id, 'remove network', network.name,
                    lambda: self.runtime.remove_network(network.name), failures
                )
            self._advance(operation_id, 75, 'Networks removed')

            if self.environment_config.persistence.enable_persistence:
                self._log(operation_id, 'Persistence enabled, volumes preserved', Style.context)
            else:
                self._log(operation_id, 'Removing volumes...')
                for volume in self.environment_config.named_volumes():
                    await self._teardown_step(
                        operation_id, 'remove volume', volume.name,
                        lambda: self.runtime.remove_volume(volume.name), failures
                    )
            self.operations.set_metadata(operation_id, 'failures', failures)
        except Exception as error:
            self._fail(operation_id, error)
            raise

        self.operations.complete(operation_id, f'Environment destroyed, {len(failures)} failures')
        for service_status in self._status.services.values():
            service_status.state = ContainerState.REMOVING
        self._set_state(EnvironmentState.STOPPED)
        self.events.emit(EventKind.ENVIRONMENT_DESTROYED, operation_id=operation_id, failures=failures)

    # restart / scale / backup

    async def _restart(self, operation_id: OperationId) -> None:
        try:
            self.operations.run(operation_id)

            stop_operation = self.operations.begin(OperationType.STOP, {'parent': operation_id})
            self.operations.set_metadata(operation_id, 'stop_operation', stop_operation.id)
            await self._stop(stop_operation.id)
            self._advance(operation_id, 50, f'Stopped by {stop_operation.id}')

            create_operation = self.operations.begin(OperationType.CREATE, {'parent': operation_id})
            self.operations.set_metadata(operation_id, 'create_operation', create_operation.id)
            await self._create(create_operation.id)
        except Exception as error:
            self._fail(operation_id, error)
            raise

        self.operations.complete(operation_id, f'Created by {create_operation.id}')

    async def _scale(self, operation_id: OperationId, service: str, replicas: int) -> None:
        try:
            self.operations.run(operation_id)
            self.events.emit(EventKind.SERVICE_SCALING, operation_id=operation_id, service=service, replicas=replicas)
            result = await self.runtime.scale_service(self._container(service), replicas)
            if result == JobResult.BAD:
                raise RuntimeCommandError('scaling', f"Can't scale {service} to {replicas}", str(result))
        except Exception as error:
            self._fail(operation_id, error, event=EventKind.SERVICE_ERROR, state=None)
            raise

        self.operations.complete(operation_id, f'Scaled {service} to {replicas}')
        self.events.emit(EventKind.SERVICE_SCALED, operation_id=operation_id, service=service, replicas=replicas)

    async def _backup(self, operation_id: OperationId) -> None:
        try:
            self.operations.run(operation_id)
            self.events.emit(EventKind.BACKUP_STARTING, operation_id=operation_id)
            volumes = [volume for volume in self.environment_config.named_volumes() if not volume.read_only]
            self._log(operation_id, f'Backing up volumes: {", ".join(volume.name for volume in volumes) or "-"}')
            path = await self.backup_coordinator.backup(
                self.environment_config, deepcopy(self._status), volumes
            )
            self.operations.set_metadata(operation_id, 'path', str(path))
        except Exception as error:
            self._fail(operation_id, error, event=EventKind.BACKUP_ERROR, state=None)
            raise

        self.operations.complete(operation_id, f'Backup written to {path}')
        self.events.emit(EventKind.BACKUP_COMPLETED, operation_id=operation_id, path=str(path))

    def _cancel_unfinished(self, operation_id: OperationId) -> None:
        children = [
            operation.id for operation in self.operations.list()
            if operation.metadata.get('parent') == operation_id
        ]
        for unfinished_id in [*children, operation_id]:
            operation = self.operations.get(unfinished_id)
            if operation is None or operation.status.is_terminal:
                continue
            self.operations.log(unfinished_id, 'Cancelled')
            self.operations.cancel(unfinished_id)
            CONSOLE.print(Text(f'Operation {unfinished_id} cancelled', style=Style.suspicious))

    async def _run(self, type: OperationType, operation_id: OperationId, **params) -> None:
        try:
            await self._runners[type](operation_id, **params)
        except asyncio.CancelledError:
            self._cancel_unfinished(operation_id)
            raise

    def _check_operation_params(self, type: OperationType, params: dict) -> None:
        if type not in self._runners:
            raise DevEnvError(f'Operation {type.value} is not supported')
        if type == OperationType.BACKUP and not self.environment_config.backup.enabled:
            raise BackupDisabledError(self.environment_config.project_name)
        if type == OperationType.SCALE:
            self._service(params['service'])
            if params['replicas'] < 0:
                raise EnvironmentConfigError(f'Replicas must not be negative: {params["replicas"]}')

    async def _perform(self, type: OperationType, **params) -> Operation:
        self._check_operation_params(type, params)
        operation = self.operations.begin(type, params)
        await self._run(type, operation.id, **params)
        return self.operations.get(operation.id)

    async def create(self) -> Operation:
        return await self._perform(OperationType.CREATE)

    async def start(self) -> Operation:
        return await self._perform(OperationType.START)

    async def stop(self) -> Operation:
        return await self._perform(OperationType.STOP)

    async def restart(self) -> Operation:
        return await self._perform(OperationType.RESTART)

    async def destroy(self) -> Operation:
        return await self._perform(OperationType.DESTROY)

    async def scale(self, service: str, replicas: int) -> Operation:
        return await self._perform(OperationType.SCALE, service=service, replicas=replicas)

    async def backup(self) -> Operation:
        return await self._perform(OperationType.BACKUP)

    def submit(self, type: OperationType, **params) -> Operation:
        """Begins operation and runs it in background, result is available via get_operation."""
        self._check_operation_params(type, params)
        operation = self.operations.begin(type, params)
        task = asyncio.create_task(self._run(type, operation.id, **params), name=operation.id)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return operation

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            CONSOLE.print(Text(f'Operation {task.get_name()} failed: {error}', style=Style.bad))

    async def wait_submitted(self) -> None:
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait_submitted()
        await self._stop_reconcilers()

    # passthrough

    async def exec_in_service(self, service: str, command: list[str], user: str | None = None) -> ExecResult:
        self._service(service)
        result = await self.runtime.exec_in_service(self._container(service), command, user=user)
        if result == JobResult.BAD:
            raise RuntimeCommandError('exec', f"Can't execute {' '.join(command)} in {service}", str(result))
        return result

    async def service_logs(self, service: str, tail: int | None = None, since: str | None = None) -> str:
        self._service(service)
        result = await self.runtime.service_logs(self._container(service), tail=tail, since=since)
        if result == JobResult.BAD:
            raise RuntimeCommandError('logs', f"Can't get {service} logs", str(result))
        return result

    def stream_service_logs(self, service: str) -> AsyncIterator[str]:
        self._service(service)
        return self.runtime.stream_logs(self._container(service))

    # status

    async def get_status(self) -> EnvironmentStatus:
        async with self._status_lock:
            if self._initialized and self.state not in (EnvironmentState.STOPPED, EnvironmentState.INITIALIZING):
                await self._refresh_services()

            metrics = self.metrics.snapshot()
            for name, service_status in self._status.services.items():
                if name in metrics.services:
                    service_status.resources = metrics.services[name]

            self._status.health = self.health.snapshot()
            self._status.metrics = metrics
            self._status.uptime = (
                time.monotonic() - self._running_since if self._running_since is not None else 0.0
            )
            self._status.last_update = utc_now()
            return deepcopy(self._status)

    def get_operation(self, operation_id: OperationId) -> Operation | None:
        return self.operations.get(operation_id)

    def list_operations(self) -> list[Operation]:
        return self.operations.list()
