import vedro

from contexts.environment_config import db_web_config
from contexts.orchestrator import orchestrator
from helpers.fake_runtime import FakeRuntime


class Scenario(vedro.Scenario):
    subject = 'destroy environment with persistence={persistence}'

    @vedro.params(False, ['shop-data'], 'Removing volumes...')
    @vedro.params(True, [], 'Persistence enabled, volumes preserved')
    def __init__(self, persistence, removed_volumes, log_line):
        self.persistence = persistence
        self.removed_volumes = removed_volumes
        self.log_line = log_line

    async def given_created_environment(self):
        self.runtime = FakeRuntime()
        self.orchestrator = orchestrator(db_web_config(persistence=self.persistence), runtime=self.runtime)
        await self.orchestrator.create()

    async def when_user_destroys_environment(self):
        self.operation = await self.orchestrator.destroy()

    async def then_operation_should_be_completed(self):
        assert self.operation.status.value == 'completed'

    async def and_volumes_should_follow_persistence_policy(self):
        assert self.runtime.called('remove_volume') == self.removed_volumes
        assert self.log_line in self.operation.logs

    async def and_networks_should_be_removed(self):
        assert self.runtime.called('remove_network') == ['shop-net']

    async def and_environment_should_be_stopped(self):
        assert self.orchestrator.state.value == 'stopped'
