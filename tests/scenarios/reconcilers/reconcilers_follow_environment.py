import asyncio

import vedro

from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from devenvd import MonitoringPolicy
from helpers.fake_runtime import FakeRuntime


class Scenario(vedro.Scenario):
    async def given_environment_with_monitoring(self):
        self.runtime = FakeRuntime()
        self.orchestrator = orchestrator(
            db_web_config(monitoring=MonitoringPolicy(health_check_interval=0.05)),
            runtime=self.runtime,
        )
        vedro.defer(self.orchestrator.close)

    async def given_reconcilers_are_idle_before_running(self):
        assert not self.orchestrator.health.running
        assert not self.orchestrator.metrics.running

    async def when_environment_runs_for_a_while(self):
        await self.orchestrator.create()
        await asyncio.sleep(0.2)
        self.status = await self.orchestrator.get_status()

    async def then_status_should_include_reconciled_health(self):
        assert self.status.health.last_check is not None
        assert self.status.health.overall.value == 'none'

    async def and_status_should_include_collected_metrics(self):
        assert self.status.metrics.collected_at is not None
        assert self.status.metrics.running_services == 2
        assert self.status.services['db'].resources.pids == 3

    async def and_reconcilers_should_stop_with_environment(self):
        await self.orchestrator.stop()
        assert not self.orchestrator.health.running
        assert not self.orchestrator.metrics.running
