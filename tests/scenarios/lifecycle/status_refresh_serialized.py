import asyncio

import vedro

from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from helpers.fake_runtime import FakeRuntime


class SlowInspectRuntime(FakeRuntime):
    def __init__(self):
        super().__init__()
        self.in_flight = 0
        self.max_in_flight = 0

    async def inspect_state(self, name):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            return await super().inspect_state(name)
        finally:
            self.in_flight -= 1


class Scenario(vedro.Scenario):
    async def given_created_environment(self):
        self.runtime = SlowInspectRuntime()
        self.orchestrator = orchestrator(db_web_config(), runtime=self.runtime)
        await self.orchestrator.create()
        self.runtime.max_in_flight = 0

    async def when_status_and_readiness_are_requested_together(self):
        self.status, self.healthy, _ = await asyncio.gather(
            self.orchestrator.get_status(),
            self.orchestrator.check_all_services_healthy(),
            self.orchestrator.get_status(),
        )

    async def then_refreshes_should_not_interleave(self):
        assert self.runtime.max_in_flight == 1

    async def and_every_refresh_should_query_all_services(self):
        assert self.runtime.called('inspect_state')[-6:] == ['shop_db', 'shop_web'] * 3

    async def and_results_should_be_consistent(self):
        assert self.healthy is True
        assert self.status.state.value == 'running'
