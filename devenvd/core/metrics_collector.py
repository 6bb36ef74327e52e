import asyncio
from copy import deepcopy

from devenvd.core.config import Config
from devenvd.core.environment_status import EnvironmentMetrics
from devenvd.core.environment_status import ResourceUsage
from devenvd.core.events import EventBus
from devenvd.core.events import EventKind
from devenvd.core.operations import utc_now
from devenvd.core.periodic import PeriodicTask
from devenvd.core.runtime_data_types import RawContainerStats
from devenvd.core.runtime_interface import RuntimeInterface
from devenvd.core.units import parse_count
from devenvd.core.units import parse_percent
from devenvd.core.units import parse_size_pair
from devenvd.env_description.env_types import EnvironmentConfig
from devenvd.helpers.jobs_result import JobResult
from devenvd.helpers.jobs_result import OperationError


def parse_stats(stats: RawContainerStats) -> ResourceUsage:
    memory, memory_limit = parse_size_pair(stats.memory, 'memory')
    network_rx, network_tx = parse_size_pair(stats.network, 'network')
    block_read, block_write = parse_size_pair(stats.block, 'block io')
    return ResourceUsage(
        cpu=parse_percent(stats.cpu, 'cpu'),
        memory=memory,
        memory_limit=memory_limit,
        network_rx=network_rx,
        network_tx=network_tx,
        block_read=block_read,
        block_write=block_write,
        pids=parse_count(stats.pids, 'pids'),
    )


class MetricsCollector:
    def __init__(self, environment_config: EnvironmentConfig, runtime: RuntimeInterface, events: EventBus,
                 config=Config):
        self.config = config()
        self.environment_config = environment_config
        self.runtime = runtime
        self.events = events
        self._snapshot = EnvironmentMetrics(service_count=len(environment_config.services))
        self._lock = asyncio.Lock()
        self._task = PeriodicTask(
            name=f'{environment_config.project_name}-metrics',
            interval=self.config.metrics_interval,
            tick=self.collect,
            on_error=self._on_tick_error,
        )

    @property
    def running(self) -> bool:
        return self._task.running

    def snapshot(self) -> EnvironmentMetrics:
        return deepcopy(self._snapshot)

    def start(self) -> None:
        self._task.start()

    async def stop(self) -> None:
        await self._task.stop()

    def _on_tick_error(self, error: Exception) -> None:
        self.events.emit(EventKind.METRICS_ERROR, error=str(error))

    async def _service_usage(self, name: str) -> ResourceUsage | OperationError:
        stats = await self.runtime.fetch_stats(self.environment_config.container_name(name))
        if stats == JobResult.BAD:
            return stats
        return parse_stats(stats)

    async def collect(self) -> EnvironmentMetrics:
        """One failing service is counted in failed_services, the rest of the pass goes on."""
        async with self._lock:
            metrics = EnvironmentMetrics(service_count=len(self.environment_config.services))
            for service in self.environment_config.services:
                try:
                    usage = await self._service_usage(service.name)
                except Exception as error:
                    usage = OperationError(str(error))
                if usage == JobResult.BAD:
                    metrics.failed_services += 1
                    self.events.emit(EventKind.METRICS_ERROR, service=service.name, error=str(usage))
                    continue

                metrics.services[service.name] = usage
                metrics.running_services += 1
                metrics.total_cpu += usage.cpu
                metrics.total_memory += usage.memory
                metrics.total_memory_limit += usage.memory_limit
                metrics.total_network += usage.network
                metrics.total_storage += usage.storage
                metrics.total_pids += usage.pids

            metrics.collected_at = utc_now()
            self._snapshot = metrics

        self.events.emit(EventKind.METRICS_UPDATED, metrics=self._snapshot.as_json())
        return self.snapshot()
